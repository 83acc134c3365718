"""CLI entrypoints for rulesync commands."""

from __future__ import annotations

import argparse
import sys
from importlib import metadata
from pathlib import Path
from typing import List, Optional

from . import __version__
from .agents import default_registry
from .config import CONFIG_FILENAME, ConfigError, RulesyncConfig, default_config, load_config, write_example_config
from .errors import ConfigurationError, RulesyncError, SourceNotFoundError
from .loader import load_rule_files
from .logging import configure_logging, get_logger
from .orchestrator import BuildOrchestrator
from .stores import FINGERPRINT_FILENAME, compare, compute_fingerprint


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_config_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-c",
        "--config",
        default=CONFIG_FILENAME,
        help=f"Path to the rulesync config file (defaults to {CONFIG_FILENAME}).",
    )


def _add_source_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-s",
        "--source",
        help="Source directory for rules (overrides config).",
    )


def _add_agents_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-a",
        "--agents",
        help="Comma-separated list of agents (overrides config).",
    )


def _add_log_file_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Also write detailed logs to this file.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rulesync",
        description="Build AI coding-agent rule files from a canonical rules directory.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser(
        "build",
        help="Build agent rule files from the rules source directory.",
    )
    _add_verbose_option(build_parser, suppress_default=True)
    _add_config_option(build_parser)
    _add_source_option(build_parser)
    _add_agents_option(build_parser)
    _add_log_file_option(build_parser)
    build_parser.add_argument(
        "--dry-run",
        "--dry",
        dest="dry_run",
        action="store_true",
        help="Show what would be built without writing anything.",
    )
    build_parser.add_argument(
        "--parallel",
        action="store_true",
        default=None,
        help="Build agents concurrently.",
    )

    check_parser = subparsers.add_parser(
        "check",
        help="Report whether the rules changed since the last build.",
    )
    _add_verbose_option(check_parser, suppress_default=True)
    _add_config_option(check_parser)
    _add_source_option(check_parser)
    check_parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Print nothing; exit 1 when a build is needed.",
    )

    hash_parser = subparsers.add_parser(
        "hash",
        help="Print the current rules fingerprint.",
    )
    _add_verbose_option(hash_parser, suppress_default=True)
    _add_config_option(hash_parser)
    _add_source_option(hash_parser)
    hash_parser.add_argument(
        "--short",
        action="store_true",
        help="Print only the first 16 characters.",
    )

    clean_parser = subparsers.add_parser(
        "clean",
        help="Remove generated agent rule files.",
    )
    _add_verbose_option(clean_parser, suppress_default=True)
    _add_config_option(clean_parser)
    _add_source_option(clean_parser)
    _add_agents_option(clean_parser)
    _add_log_file_option(clean_parser)
    clean_parser.add_argument(
        "--all",
        action="store_true",
        help=f"Also remove the stored {FINGERPRINT_FILENAME}.",
    )

    init_parser = subparsers.add_parser(
        "init",
        help=f"Create a {CONFIG_FILENAME} in the given directory.",
    )
    _add_verbose_option(init_parser, suppress_default=True)
    init_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Project root (defaults to current directory).",
    )

    agents_parser = subparsers.add_parser("agents", help="List the supported agents.")
    _add_verbose_option(agents_parser, suppress_default=True)

    version_parser = subparsers.add_parser("version", help="Display version information.")
    _add_verbose_option(version_parser, suppress_default=True)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for rulesync commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=getattr(args, "log_file", None))

    if args.command == "build":
        _run_build(parser, args)
    elif args.command == "check":
        _run_check(parser, args)
    elif args.command == "hash":
        _run_hash(parser, args)
    elif args.command == "clean":
        _run_clean(parser, args)
    elif args.command == "init":
        try:
            target = write_example_config(Path(args.path))
        except FileExistsError as exc:
            parser.exit(1, f"{exc}\n")
        except OSError as exc:
            parser.exit(1, f"Failed to write {CONFIG_FILENAME}: {exc}\n")
        print(f"Created {_relativize(target)}")
        print("Next steps:")
        print(f"  1. Edit {CONFIG_FILENAME} to choose agents and the source directory")
        print("  2. Write your rules in the source directory (default .rules)")
        print("  3. Run `rulesync build`")
    elif args.command == "agents":
        for spec in sorted(default_registry().list(), key=lambda item: item.id):
            outputs = ", ".join(spec.output_paths)
            line = f"{spec.id:<10} {spec.display_name:<26} {outputs}"
            if spec.description:
                line = f"{line}  ({spec.description})"
            print(line)
    elif args.command == "version":
        print(f"rulesync version {_installed_version()}")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_build(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    config = _load_config(Path(args.config))
    agents = _split_agents(args.agents) or config.agents
    parallel = config.parallel if args.parallel is None else bool(args.parallel)
    orchestrator = BuildOrchestrator(
        _source_dir(args, config),
        root=config.root,
        agents=agents,
        dry_run=bool(args.dry_run),
        verbose=bool(args.verbose),
        outputs=config.outputs,
        parallel=parallel,
    )
    try:
        summary = orchestrator.build()
    except RulesyncError as exc:
        parser.exit(1, f"Failed to build rules: {exc}\n")
    except Exception as exc:  # pragma: no cover - defensive guard
        parser.exit(1, f"rulesync build failed: {exc}\nRun with --verbose for more details.\n")

    if summary.dry_run:
        print("Dry run complete; no files were written.")
    elif summary.failed or summary.unknown:
        print(
            f"Rules build completed with {len(summary.failed)} failed and "
            f"{len(summary.unknown)} unknown agent(s)."
        )
    else:
        print("Rules build completed successfully!")


def _run_check(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    config = _load_config(Path(args.config))
    source_dir = _source_dir(args, config)
    try:
        status = compare(source_dir)
    except ConfigurationError as exc:
        parser.exit(1, f"{exc}\n")

    if args.quiet:
        if status.needs_build:
            sys.exit(1)
        return

    if status.stored is None:
        print(f"No stored build hash found at {source_dir / FINGERPRINT_FILENAME}")
        print(f"Current hash: {status.computed}")
        print("Build is needed.")
    elif status.needs_build:
        print(f"Current hash: {status.computed}")
        print(f"Stored hash:  {status.stored}")
        print("Build is needed (hash mismatch).")
    else:
        print(f"Up-to-date. Current hash matches stored hash: {status.computed}")


def _run_hash(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    config = _load_config(Path(args.config))
    source_dir = _source_dir(args, config)
    try:
        fingerprint = compute_fingerprint(load_rule_files(source_dir))
    except SourceNotFoundError as exc:
        parser.exit(1, f"{exc}\n")
    print(fingerprint[:16] if args.short else fingerprint)


def _run_clean(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    config = _load_config(Path(args.config))
    orchestrator = BuildOrchestrator(
        _source_dir(args, config),
        root=config.root,
        agents=_split_agents(args.agents) or config.agents,
        verbose=bool(args.verbose),
        outputs=config.outputs,
    )
    cleaned = orchestrator.clean(remove_fingerprint=bool(args.all))
    if cleaned:
        print(f"Cleaned outputs for {len(cleaned)} agent(s): {', '.join(cleaned)}")
    else:
        print("Nothing to clean")


def _load_config(config_path: Path) -> RulesyncConfig:
    logger = get_logger("cli")
    try:
        config = load_config(config_path)
    except ConfigError as exc:
        logger.warning("%s; using defaults", exc)
        return default_config(config_path.expanduser().resolve().parent)
    if config.exists:
        logger.debug("Using config from %s", config.config_file)
    return config


def _source_dir(args: argparse.Namespace, config: RulesyncConfig) -> Path:
    if getattr(args, "source", None):
        return Path(args.source).expanduser().resolve()
    return config.source_dir


def _split_agents(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def _installed_version() -> str:
    try:
        return metadata.version("rulesync")
    except metadata.PackageNotFoundError:
        return __version__


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd().resolve()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])

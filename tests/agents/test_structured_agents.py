"""Tests for adapters that merge rules into structured config files."""

from __future__ import annotations

import json
import logging

import pytest
import yaml

from rulesync.agents import BuildContext
from rulesync.agents.structured import (
    aider,
    cody,
    continue_agent,
    pieces,
    render_pieces_config,
    tabby,
    tabnine,
    toml_multiline_string,
    workspace,
)
from tests._fixtures.rules_builder import RulesBuilder


def _context(builder: RulesBuilder, **kwargs: object) -> BuildContext:
    names = [rule.name for rule in builder.load()]
    return BuildContext(files=names, source_dir=builder.source_dir, root=builder.root, **kwargs)


def test_cody_creates_scaffolded_document(rules_builder: RulesBuilder) -> None:
    rules_builder.write_rules({"01-a.md": "A", "02-b.md": "B"})

    cody.build(_context(rules_builder))

    document = json.loads(rules_builder.read(".cody.json"))
    assert document == {"version": "1.0", "codebase": {"context": {"rules": "A\n\nB"}}}
    assert rules_builder.read(".cody.json").endswith("}\n")


def test_cody_preserves_user_fields_and_key_order(rules_builder: RulesBuilder) -> None:
    rules_builder.write_rules({"01-a.md": "A"})
    rules_builder.write(
        {".cody.json": json.dumps({"z": 1, "codebase": {"context": {"rules": "old", "other": 2}}, "a": 3})}
    )

    cody.build(_context(rules_builder))

    document = json.loads(rules_builder.read(".cody.json"))
    assert list(document) == ["z", "codebase", "a", "version"]
    assert document["codebase"]["context"] == {"rules": "A", "other": 2}


def test_tabnine_overwrites_unparseable_file(
    rules_builder: RulesBuilder, caplog: pytest.LogCaptureFixture
) -> None:
    rules_builder.write_rules({"01-a.md": "A"})
    rules_builder.write({".tabnine": "{broken"})

    with caplog.at_level(logging.WARNING, logger="rulesync"):
        tabnine.build(_context(rules_builder))

    document = json.loads(rules_builder.read(".tabnine"))
    assert document["projectContext"] == "A"
    assert document["disableTeamLearning"] is False
    assert "starting from an empty document" in caplog.text


def test_aider_lists_source_paths(rules_builder: RulesBuilder) -> None:
    rules_builder.write_rules({"01-a.md": "A", "02-b.md": "B", "00-meta.yaml": "x: 1\n"})
    rules_builder.write({".aider.conf.yml": "model: gpt-4o\nread:\n  - stale.md\n"})

    aider.build(_context(rules_builder))

    document = yaml.safe_load(rules_builder.read(".aider.conf.yml"))
    assert document == {"model": "gpt-4o", "read": [".rules/01-a.md", ".rules/02-b.md"]}


def test_continue_config_gets_scaffold_and_rules(rules_builder: RulesBuilder) -> None:
    rules_builder.write_rules({"01-a.md": "# A\nline\n", "02-b.md": "B"})

    continue_agent.build(_context(rules_builder))

    text = rules_builder.read(".continue/config.yaml")
    document = yaml.safe_load(text)
    assert document["rules"] == ["# A\nline\n\n\nB"]
    assert document["models"] == []
    assert document["tabAutocompleteModel"]["title"] == "Tab Autocomplete"
    assert continue_agent.id == "continue"


def test_tabby_and_workspace_nest_rules(rules_builder: RulesBuilder) -> None:
    rules_builder.write_rules({"01-a.md": "A"})
    rules_builder.write({"tabby.yaml": "server:\n  endpoint: https://tabby.internal\n"})
    context = _context(rules_builder)

    tabby.build(context)
    workspace.build(context)

    tabby_doc = yaml.safe_load(rules_builder.read("tabby.yaml"))
    assert tabby_doc["server"]["endpoint"] == "https://tabby.internal"
    assert tabby_doc["assist"]["rules"] == "A"
    assert tabby_doc["version"] == "1.0"
    workspace_doc = yaml.safe_load(rules_builder.read(".workspace/rules.yaml"))
    assert workspace_doc["apiVersion"] == "workspace/v1"
    assert workspace_doc["context"]["rules"] == "A"


def test_clean_strips_rules_field_but_keeps_user_config(rules_builder: RulesBuilder) -> None:
    rules_builder.write_rules({"01-a.md": "A"})
    rules_builder.write({".aider.conf.yml": "model: gpt-4o\n"})
    context = _context(rules_builder)
    aider.build(context)

    aider.clean(context)

    assert yaml.safe_load(rules_builder.read(".aider.conf.yml")) == {"model": "gpt-4o"}


def test_clean_removes_file_left_with_only_scaffold(rules_builder: RulesBuilder) -> None:
    rules_builder.write_rules({"01-a.md": "A"})
    context = _context(rules_builder)
    cody.build(context)

    cody.clean(context)

    assert not rules_builder.exists(".cody.json")


def test_clean_leaves_unparseable_file(rules_builder: RulesBuilder) -> None:
    rules_builder.write({"tabby.yaml": "server: [oops\n"})

    tabby.clean(_context(rules_builder))

    assert rules_builder.read("tabby.yaml") == "server: [oops\n"


def test_build_after_clean_is_idempotent(rules_builder: RulesBuilder) -> None:
    rules_builder.write_rules({"01-a.md": "A", "02-b.md": "B"})
    rules_builder.write({"tabby.yaml": "custom: true\n"})
    context = _context(rules_builder)

    tabby.clean(context)
    tabby.build(context)
    first = rules_builder.read("tabby.yaml")
    tabby.clean(context)
    tabby.build(context)

    assert rules_builder.read("tabby.yaml") == first


def test_pieces_renders_toml(rules_builder: RulesBuilder) -> None:
    rules_builder.write_rules({"01-a.md": "A", "02-b.md": 'Say "hi"\\n'})

    pieces.build(_context(rules_builder))

    text = rules_builder.read("pieces.toml")
    assert text.startswith('[project]\nversion = "1.0"\n')
    assert '  """\nA""",\n' in text
    assert '  """\nSay \\"hi\\"\\\\n""",\n' in text
    assert text.endswith('[context]\nprofiles = ["default"]\n')


def test_toml_multiline_string_escapes_control_characters() -> None:
    assert toml_multiline_string('a\tb\r\x01"""') == '"""\na\tb\\r\\u0001\\"\\"\\""""'
    assert render_pieces_config([]).count("rules = [\n]") == 1


def test_structured_agents_write_nothing_in_dry_run(rules_builder: RulesBuilder) -> None:
    rules_builder.write_rules({"01-a.md": "A"})
    rules_builder.write({".cody.json": '{"keep": true}'})
    context = _context(rules_builder, dry_run=True)

    for spec in (aider, cody, continue_agent, pieces, tabby, tabnine, workspace):
        spec.build(context)

    assert rules_builder.snapshot() == {".rules/01-a.md": "A", ".cody.json": '{"keep": true}'}

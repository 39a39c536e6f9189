import json
from importlib import reload

from typer.testing import CliRunner

from relationship_spec_generator import cli
from relationship_spec_generator.schema_utils import env_vars

runner = CliRunner()


def _write_dmmf(path):
    models = [
        {
            "name": "Department",
            "fields": [
                {"name": "id", "kind": "scalar", "type": "Int", "isId": True},
                {"name": "employees", "kind": "object", "type": "Employee", "isList": True},
            ],
        },
        {
            "name": "Employee",
            "fields": [
                {"name": "id", "kind": "scalar", "type": "Int", "isId": True},
                {"name": "department", "kind": "object", "type": "Department"},
            ],
        },
    ]
    path.write_text(json.dumps({"datamodel": {"models": models}}), encoding="utf-8")


def test_spec_then_markdown(tmp_path):
    dmmf = tmp_path / "dmmf.json"
    _write_dmmf(dmmf)
    spec_path = tmp_path / "out" / "spec.json"
    markdown_path = tmp_path / "docs" / "relationships.md"

    result = runner.invoke(cli.app, ["spec", str(dmmf), str(spec_path)])
    assert result.exit_code == 0

    document = json.loads(spec_path.read_text(encoding="utf-8"))
    assert document["oneToMany"]["manyToOne"] == [
        {
            "many": {"name": "Employee", "field": "department"},
            "one": {"name": "Department", "field": "employees"},
        }
    ]

    result = runner.invoke(
        cli.app, ["markdown", str(spec_path), str(markdown_path), "--priority", "Employee"]
    )
    assert result.exit_code == 0
    content = markdown_path.read_text(encoding="utf-8")
    assert content.index("[Employee]") < content.index("[Department]")


def test_spec_missing_input_exits_with_error(tmp_path):
    result = runner.invoke(cli.app, ["spec", str(tmp_path / "missing.json"), str(tmp_path / "spec.json")])

    assert result.exit_code == 1
    assert not (tmp_path / "spec.json").exists()


def test_spec_malformed_input_exits_with_error(tmp_path):
    dmmf = tmp_path / "dmmf.json"
    dmmf.write_text(json.dumps({"datamodel": {"models": [{"name": "User"}]}}), encoding="utf-8")

    result = runner.invoke(cli.app, ["spec", str(dmmf), str(tmp_path / "spec.json")])

    assert result.exit_code == 1


def test_invalid_log_level_exits_with_error(tmp_path):
    dmmf = tmp_path / "dmmf.json"
    _write_dmmf(dmmf)

    result = runner.invoke(cli.app, ["--log-level", "LOUD", "spec", str(dmmf), str(tmp_path / "spec.json")])

    assert result.exit_code == 1
    assert not (tmp_path / "spec.json").exists()


def test_renderer_config_reads_environment(monkeypatch):
    monkeypatch.setenv("RELSPEC_PRIORITY_ENTITY", "Account")
    monkeypatch.setenv("RELSPEC_LOG_LEVEL", "debug")

    reload(env_vars)
    try:
        assert env_vars.build_renderer_config() == {"prioritized_entity": "Account"}
        assert env_vars.LOG_LEVEL == "DEBUG"
    finally:
        monkeypatch.delenv("RELSPEC_PRIORITY_ENTITY")
        monkeypatch.delenv("RELSPEC_LOG_LEVEL")
        reload(env_vars)

    assert env_vars.build_renderer_config() == {"prioritized_entity": "User"}

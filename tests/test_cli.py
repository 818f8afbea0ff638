import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from ccontent.cli.main import app
from ccontent.core.config import CONFIG_ENV_VAR

RUNNER = CliRunner()
MODULE_MD = "Welcome to the module.\n\n#### Loops\nFor loops.\n\nWhile loops.\n\nDo loops.\n\n#### Functions\nReusable blocks.\n"


def _write(tmp_path: Path, name: str, text: str) -> Path:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_sections_command_outputs_json(tmp_path: Path) -> None:
    source = _write(tmp_path, "module.md", MODULE_MD)

    result = RUNNER.invoke(app, ["sections", str(source), "--json"])

    assert result.exit_code == 0
    rows = json.loads(result.stdout)
    assert [row["title"] for row in rows] == ["Introduction", "Loops", "Functions"]


def test_sections_command_prints_table(tmp_path: Path) -> None:
    source = _write(tmp_path, "module.md", MODULE_MD)

    result = RUNNER.invoke(app, ["sections", str(source)])

    assert result.exit_code == 0
    assert "Loops" in result.stdout


def test_subsections_command_outputs_camel_case(tmp_path: Path) -> None:
    source = _write(tmp_path, "module.md", MODULE_MD)

    result = RUNNER.invoke(app, ["subsections", str(source), "--module-id", "m1", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert [row["id"] for row in payload] == ["introduction", "loops", "functions"]
    assert len(payload[1]["pages"]) == 2
    assert payload[1]["pages"][0]["pageTitle"] == "Loops - Part 1"


def test_subsections_command_for_subsection_markdown(tmp_path: Path) -> None:
    source = _write(tmp_path, "queues.md", "**Summary:**\nFIFO.\n\n#### Enqueue\nAdd.")

    result = RUNNER.invoke(app, ["subsections", str(source), "--kind", "subsection-markdown", "--title", "Queues", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload[0]["id"] == "queues"
    assert payload[0]["summary"] == "FIFO."


def test_subsections_command_rejects_ai_response_kind(tmp_path: Path) -> None:
    source = _write(tmp_path, "reply.txt", "{}")

    result = RUNNER.invoke(app, ["subsections", str(source), "--kind", "ai-response"])

    assert result.exit_code != 0


def test_subsections_command_writes_trace(tmp_path: Path) -> None:
    source = _write(tmp_path, "module.md", MODULE_MD)
    trace = tmp_path / "trace.jsonl"

    result = RUNNER.invoke(app, ["subsections", str(source), "--trace", str(trace), "--json"])

    assert result.exit_code == 0
    event = json.loads(trace.read_text(encoding="utf-8").splitlines()[0])
    assert event["stage"] == "transform"


def test_extract_json_command_success(tmp_path: Path) -> None:
    source = _write(tmp_path, "reply.txt", 'Sure:\n```json\n{"a": 1,}\n```')

    result = RUNNER.invoke(app, ["extract-json", str(source)])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["ok"] is True
    assert payload["value"] == {"a": 1}


def test_extract_json_command_failure_exits_nonzero(tmp_path: Path) -> None:
    source = _write(tmp_path, "reply.txt", "no json here at all")

    result = RUNNER.invoke(app, ["extract-json", str(source)])

    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["ok"] is False
    assert payload["errorKind"] == "no_json_found"


def test_missing_input_file_errors(tmp_path: Path) -> None:
    result = RUNNER.invoke(app, ["sections", str(tmp_path / "missing.md")])

    assert result.exit_code != 0
    assert "not found" in result.output.lower()


def test_config_from_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    source = _write(tmp_path, "module.md", "## One\nx\n## Two\ny")
    config = _write(tmp_path, "pipeline.yaml", 'heading_marker: "##"\n')
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config))

    result = RUNNER.invoke(app, ["sections", str(source), "--json"])

    assert result.exit_code == 0
    assert [row["title"] for row in json.loads(result.stdout)] == ["One", "Two"]


def test_invalid_config_errors(tmp_path: Path) -> None:
    source = _write(tmp_path, "module.md", MODULE_MD)
    config = _write(tmp_path, "pipeline.yaml", "paragraphs_per_page: 0\n")

    result = RUNNER.invoke(app, ["sections", str(source), "--config", str(config)])

    assert result.exit_code != 0


def test_version_command() -> None:
    result = RUNNER.invoke(app, ["version"])

    assert result.exit_code == 0
    assert result.stdout.strip()

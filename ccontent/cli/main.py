"""Developer CLI for inspecting how raw content is segmented, paginated and parsed."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ccontent import get_version
from ccontent.content.json_extract import extract_json
from ccontent.content.models import PayloadKind
from ccontent.content.normalizer import subsection_payloads
from ccontent.content.router import make_payload, transform_payload
from ccontent.content.segmenter import segment_headings
from ccontent.core.config import CONFIG_ENV_VAR, PipelineSettings, resolve_settings
from ccontent.core.provenance import TransformTrace

app = typer.Typer(help="Turn course markdown and AI responses into structured content.")
console = Console()

CONFIG_HELP = f"Pipeline settings YAML (defaults to {CONFIG_ENV_VAR} or built-in defaults)."


def _load_settings(config: Optional[Path]) -> PipelineSettings:
    try:
        return resolve_settings(config)
    except (OSError, ValueError) as exc:
        raise typer.BadParameter(str(exc)) from exc


def _read_text(path: Path) -> str:
    if not path.exists():
        raise typer.BadParameter(f"Input file not found: {path}")
    return path.read_text(encoding="utf-8")


def _trace(path: Optional[Path]) -> Optional[TransformTrace]:
    return TransformTrace(path.expanduser().resolve()) if path is not None else None


def _echo_json(payload: object) -> None:
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log pipeline debug messages.")) -> None:
    # stdout carries the JSON/table output; diagnostics stay quiet unless asked for.
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("ccontent").setLevel(logging.DEBUG if verbose else logging.ERROR)


@app.command()
def sections(
    source: Path = typer.Argument(..., help="Markdown file to segment."),
    config: Optional[Path] = typer.Option(None, "--config", show_default=False, help=CONFIG_HELP),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON instead of a table."),
) -> None:
    """List the heading-delimited sections of a markdown file."""

    settings = _load_settings(config)
    rows = [section.model_dump() for section in segment_headings(_read_text(source), settings)]
    if as_json:
        _echo_json(rows)
        return
    table = Table("#", "Title", "Body chars")
    for position, row in enumerate(rows, start=1):
        table.add_row(str(position), row["title"], str(len(row["body"])))
    console.print(table)


@app.command()
def subsections(
    source: Path = typer.Argument(..., help="Module or subsection markdown file."),
    kind: PayloadKind = typer.Option(PayloadKind.MODULE_MARKDOWN, "--kind", help="Payload kind of the file."),
    module_id: str = typer.Option("module", "--module-id", help="Module id used for positional fallback ids."),
    title: Optional[str] = typer.Option(None, "--title", help="Subsection title (subsection-markdown only)."),
    config: Optional[Path] = typer.Option(None, "--config", show_default=False, help=CONFIG_HELP),
    trace: Optional[Path] = typer.Option(None, "--trace", show_default=False, help="Append JSONL trace events here."),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON instead of a table."),
) -> None:
    """Normalize a markdown file into subsections with pages."""

    if kind is PayloadKind.AI_RESPONSE:
        raise typer.BadParameter("Use the extract-json command for ai-response payloads.")
    settings = _load_settings(config)
    outcome = transform_payload(
        make_payload(_read_text(source), kind),
        module_id=module_id,
        title=title or source.stem,
        settings=settings,
        trace=_trace(trace),
    )
    payloads = subsection_payloads(outcome.subsections)
    if as_json:
        _echo_json(payloads)
        return
    table = Table("ID", "Title", "Pages", "Key points", "Difficulty", "Time")
    for row in payloads:
        table.add_row(
            row["id"],
            row["title"],
            str(len(row["pages"])),
            str(len(row["keyPoints"])),
            row["difficulty"],
            row["estimatedTime"],
        )
    console.print(table)


@app.command("extract-json")
def extract_json_command(
    source: Path = typer.Argument(..., help="File holding a raw AI response."),
    config: Optional[Path] = typer.Option(None, "--config", show_default=False, help=CONFIG_HELP),
    trace: Optional[Path] = typer.Option(None, "--trace", show_default=False, help="Append JSONL trace events here."),
) -> None:
    """Recover a JSON object from an AI response; exits 1 when nothing parses."""

    settings = _load_settings(config)
    result = extract_json(_read_text(source), settings, _trace(trace))
    _echo_json(result.model_dump(by_alias=True, mode="json"))
    if not result.ok:
        raise typer.Exit(code=1)


@app.command()
def version() -> None:
    """Print the installed ccontent version."""

    typer.echo(get_version())


if __name__ == "__main__":  # pragma: no cover
    app()

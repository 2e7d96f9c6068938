"""
Quire CLI

Commands:
- validate: Validate a document of either dialect
- info: Summarize a document and its active sequence
- tree: Print the structure tree
- find-label: Resolve a page label to a canvas index
- pages: Show the spread and paging neighbours of a canvas
- thumbs: List thumbnail URLs
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from datetime import datetime, timezone

import httpx
import typer
import logging

from quire.document import (
    DocumentNotFoundError,
    is_url,
    load_document,
    validate_document,
)
from quire.navigation import (
    BaseProvider,
    ProviderContext,
    Settings,
    create_provider,
)

app = typer.Typer(add_completion=False, help="Quire document navigation tooling")


class JsonFormatter(logging.Formatter):
    """Simple JSON formatter for structured logs."""
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
        }
        # Include any custom attributes passed via `extra=`.
        reserved = {
            "name","msg","args","levelname","levelno","pathname","filename","module",
            "exc_info","exc_text","stack_info","lineno","funcName","created","msecs",
            "relativeCreated","thread","threadName","processName","process","taskName",
        }
        for k, v in record.__dict__.items():
            if k in reserved or k.startswith("_"):
                continue
            try:
                json.dumps(v)
                payload[k] = v
            except TypeError:
                payload[k] = repr(v)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logging(level: str) -> logging.Logger:
    logger = logging.getLogger("quire")
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    logger.handlers[:] = [handler]
    logger.propagate = False
    return logger


LOGGER = logging.getLogger("quire")


def parse_section_mappings(pairs: list[str]) -> dict[str, str]:
    """Turn ``key=value`` options into a mapping."""
    mappings: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected key=value, got {pair!r}")
        mappings[key.strip()] = value.strip()
    return mappings


def build_settings(
    settings_file: Path | None,
    paging: bool | None,
    section_mapping: list[str] | None,
    data_base_uri: str | None,
) -> Settings:
    settings = Settings.from_file(settings_file) if settings_file else Settings()
    update: dict[str, Any] = {}
    if paging is not None:
        update["paging_enabled"] = paging
    if section_mapping:
        update["section_mappings"] = {
            **settings.section_mappings,
            **parse_section_mappings(section_mapping),
        }
    if data_base_uri:
        update["data_base_uri"] = data_base_uri
    return settings.model_copy(update=update)


def open_provider(
    document_uri: str,
    *,
    sequence_index: int,
    settings: Settings,
) -> BaseProvider:
    """
    Load a document and build its provider, exiting on failure.

    Exit codes: 2 when the document or sequence is not found, 1 for
    transport and schema errors.
    """
    try:
        document = load_document(
            document_uri,
            sequence_index=sequence_index,
            data_base_uri=settings.data_base_uri,
        )
    except DocumentNotFoundError as e:
        typer.echo(f"❌ Not found: {e}", err=True)
        raise typer.Exit(code=2)
    except (httpx.HTTPError, OSError, ValueError) as e:
        typer.echo(f"❌ Could not load document: {e}", err=True)
        raise typer.Exit(code=1)

    LOGGER.info("document_loaded", extra={"uri": document_uri, "sequence_index": sequence_index})
    context = ProviderContext(
        data_uri=document_uri if is_url(document_uri) else None,
        sequence_index=sequence_index,
    )
    return create_provider(document, settings=settings, context=context)


SequenceIndexOption = typer.Option(0, "--sequence-index", "-s", help="Zero-based sequence index")
SettingsOption = typer.Option(None, "--settings", help="JSON settings file (options object)")
PagingOption = typer.Option(None, "--paging/--no-paging", help="Override pagingEnabled")
SectionMappingOption = typer.Option(
    None, "--section-mapping", help="Rename a legacy section type (key=value, repeatable)"
)
DataBaseUriOption = typer.Option(None, "--data-base-uri", help="Prefix joined onto the document URI")
LogLevelOption = typer.Option("WARNING", "--log-level", help="Logging verbosity (DEBUG, INFO, WARNING, ERROR)")


@app.command("validate")
def validate_cmd(
    document_uri: str = typer.Argument(..., help="Document JSON path or URL"),
    sequence_index: int = SequenceIndexOption,
    log_level: str = LogLevelOption,
) -> None:
    """Validate a document and report references the viewer would have to repair."""
    setup_logging(log_level)
    try:
        document = load_document(document_uri, sequence_index=sequence_index)
    except DocumentNotFoundError as e:
        typer.echo(f"❌ Not found: {e}", err=True)
        raise typer.Exit(code=2)
    except (httpx.HTTPError, OSError, ValueError) as e:
        typer.echo(f"❌ Could not load document: {e}", err=True)
        raise typer.Exit(code=1)

    issues = validate_document(document)
    if issues:
        typer.echo(f"❌ Validation failed: {len(issues)} issue(s)\n")
        for i, issue in enumerate(issues, start=1):
            typer.echo(f"  {i:>3}. {issue.path}: {issue.message}")
        raise typer.Exit(code=2)

    typer.echo("✅ Validation passed.")


@app.command("info")
def info_cmd(
    document_uri: str = typer.Argument(..., help="Document JSON path or URL"),
    sequence_index: int = SequenceIndexOption,
    settings_file: Path | None = SettingsOption,
    paging: bool | None = PagingOption,
    section_mapping: list[str] | None = SectionMappingOption,
    data_base_uri: str | None = DataBaseUriOption,
    log_level: str = LogLevelOption,
) -> None:
    """Summarize a document and its active sequence."""
    setup_logging(log_level)
    settings = build_settings(settings_file, paging, section_mapping, data_base_uri)
    provider = open_provider(document_uri, sequence_index=sequence_index, settings=settings)

    typer.echo(f"Title:       {provider.get_title() or '-'}")
    typer.echo(f"Dialect:     {provider.dialect}")
    typer.echo(f"Type:        {provider.get_manifest_type() or '-'} / {provider.get_sequence_type() or '-'}")
    typer.echo(f"Sequences:   {len(provider.sequences)}")
    typer.echo(f"Canvases:    {provider.get_total_canvases()}")
    typer.echo(f"Last label:  {provider.get_last_canvas_label()}")
    typer.echo(f"Direction:   {provider.get_viewing_direction()}")
    typer.echo(f"Paged:       {'yes' if provider.is_paged() else 'no'}")
    typer.echo(f"Structures:  {len(provider.graph.structures())}")

    attribution = provider.get_attribution()
    if isinstance(attribution, str):
        typer.echo(f"Attribution: {provider.sanitize(attribution)}")


@app.command("tree")
def tree_cmd(
    document_uri: str = typer.Argument(..., help="Document JSON path or URL"),
    sequence_index: int = SequenceIndexOption,
    settings_file: Path | None = SettingsOption,
    section_mapping: list[str] | None = SectionMappingOption,
    data_base_uri: str | None = DataBaseUriOption,
    log_level: str = LogLevelOption,
) -> None:
    """Print the structure tree with paths and first canvas index."""
    setup_logging(log_level)
    settings = build_settings(settings_file, None, section_mapping, data_base_uri)
    provider = open_provider(document_uri, sequence_index=sequence_index, settings=settings)

    for node in provider.get_tree().iter_nodes():
        structure = node.data
        path = getattr(structure, "path", None)
        line = f"{'  ' * node.depth}{node.label or '-'}"
        if node.type == "structure" and path is not None:
            line += f"  [{path or '/'}] -> {provider.get_structure_index(path)}"
        if node.selected:
            line += "  *"
        typer.echo(line)


@app.command("find-label")
def find_label_cmd(
    document_uri: str = typer.Argument(..., help="Document JSON path or URL"),
    label: str = typer.Argument(..., help="Page label, e.g. 7 or 100-101"),
    sequence_index: int = SequenceIndexOption,
    log_level: str = LogLevelOption,
) -> None:
    """Resolve a page label to a canvas index."""
    setup_logging(log_level)
    provider = open_provider(document_uri, sequence_index=sequence_index, settings=Settings())

    index = provider.get_canvas_index_by_label(label)
    if index == -1:
        typer.echo(f"No canvas labelled {label!r}", err=True)
        raise typer.Exit(code=1)

    canvas = provider.get_canvas_by_index(index)
    typer.echo(f"{index}\t{provider.get_canvas_label(canvas)}")


@app.command("pages")
def pages_cmd(
    document_uri: str = typer.Argument(..., help="Document JSON path or URL"),
    index: int = typer.Option(0, "--index", "-i", help="Canvas index"),
    sequence_index: int = SequenceIndexOption,
    settings_file: Path | None = SettingsOption,
    paging: bool | None = PagingOption,
    log_level: str = LogLevelOption,
) -> None:
    """Show the spread containing a canvas and where prev/next paging lands."""
    setup_logging(log_level)
    settings = build_settings(settings_file, paging, None, None)
    provider = open_provider(document_uri, sequence_index=sequence_index, settings=settings)

    if provider.get_canvas_by_index(index) is None:
        typer.echo(f"Canvas index {index} out of range (0-{provider.get_last_page_index()})", err=True)
        raise typer.Exit(code=2)

    provider.canvas_index = index
    spread = provider.get_paged_indices() if provider.is_paged() else [index]
    structure = provider.get_structure_by_canvas_index(index)

    typer.echo(f"Spread:    {spread}")
    typer.echo(f"Labels:    {[provider.get_canvas_label(provider.get_canvas_by_index(i)) for i in spread]}")
    typer.echo(f"Prev:      {provider.get_prev_page_index() if not provider.is_first_canvas() else -1}")
    typer.echo(f"Next:      {provider.get_next_page_index()}")
    typer.echo(f"Structure: {structure.path if structure is not None else '-'}")


@app.command("thumbs")
def thumbs_cmd(
    document_uri: str = typer.Argument(..., help="Document JSON path or URL"),
    width: int = typer.Option(100, "--width", help="Thumbnail width"),
    height: int = typer.Option(150, "--height", help="Fallback thumbnail height"),
    sequence_index: int = SequenceIndexOption,
    log_level: str = LogLevelOption,
) -> None:
    """Print one line per canvas: index, label, size and thumbnail URL."""
    setup_logging(log_level)
    provider = open_provider(document_uri, sequence_index=sequence_index, settings=Settings())

    for thumb in provider.get_thumbs(width, height):
        typer.echo(f"{thumb.index}\t{thumb.label}\t{thumb.width}x{thumb.height}\t{thumb.uri}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()

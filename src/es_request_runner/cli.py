"""CLI entry point for es-request-runner."""

import json
import logging
from pathlib import Path

import click
import yaml

from es_request_runner.config import ConfigError, Settings, find_workspace_file, load_settings
from es_request_runner.executor.client import RequestExecutor
from es_request_runner.executor.render import render_result, result_title, write_result_document
from es_request_runner.formatter import format_document
from es_request_runner.navigation import resolve_file_ref
from es_request_runner.scanner.base import Position, Region
from es_request_runner.scanner.document import Document
from es_request_runner.scanner.regions import DocumentScanner, update_selection


def _load(doc_path: Path) -> tuple[Document, list[Region]]:
    try:
        document = Document.from_path(doc_path)
    except (OSError, UnicodeDecodeError) as e:
        raise click.ClickException(f"Could not read {doc_path}: {e}") from e
    return document, DocumentScanner().scan(document)


def _cursor(line: int, column: int) -> Position:
    """Editor style 1-based line/column to a zero-based position."""
    return Position(line=max(line - 1, 0), character=max(column - 1, 0))


def _pick_region(regions: list[Region], line: int | None, index: int | None) -> Region:
    if index is not None:
        if not 1 <= index <= len(regions):
            raise click.ClickException(f"No region #{index} (document has {len(regions)})")
        return regions[index - 1]
    if line is None:
        raise click.UsageError("Pass --line or --index to choose a request.")
    region = update_selection(regions, _cursor(line, 1))
    if region is None:
        raise click.ClickException(f"No request at line {line}")
    return region


def _settings(doc_path: Path, **overrides) -> Settings:
    try:
        return load_settings(find_workspace_file(doc_path.resolve()), **overrides)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e


def _describe(region: Region, number: int) -> dict:
    return {
        "index": number,
        "line": region.line + 1,
        "end_line": region.range.end.line + 1,
        "method": region.method.text,
        "path": region.path.text,
        "has_body": region.has_body,
        "is_bulk": region.is_bulk,
        "file_ref": region.file_ref.text if region.file_ref else None,
        "selected": region.selected,
    }


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """es-request-runner: find and run Elasticsearch requests in text documents."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--line", type=int, default=None, help="Cursor line (1-based).")
@click.option("--column", type=int, default=1, show_default=True, help="Cursor column (1-based).")
@click.option("--format", "fmt", default="text", type=click.Choice(["text", "json", "yaml"]), help="Output format.")
def regions(doc_path: Path, line: int | None, column: int, fmt: str):
    """List the requests found in a document."""
    _, found = _load(doc_path)
    if line is not None:
        update_selection(found, _cursor(line, column))

    rows = [_describe(region, number) for number, region in enumerate(found, 1)]
    if fmt == "json":
        click.echo(json.dumps(rows, indent=2))
    elif fmt == "yaml":
        click.echo(yaml.safe_dump(rows, sort_keys=False), nl=False)
    else:
        for row in rows:
            marker = "*" if row["selected"] else " "
            flags = [flag for flag in ("has_body", "is_bulk") if row[flag]]
            extra = f" [{', '.join(flags)}]" if flags else ""
            ref = f" @{row['file_ref']}" if row["file_ref"] else ""
            click.echo(f"{marker} {row['index']:>3}  L{row['line']}-{row['end_line']}  {row['method']} {row['path']}{ref}{extra}")
        click.echo(f"Found {len(rows)} requests.")


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--line", type=int, default=None, help="Run the request at this line (1-based).")
@click.option("--index", type=int, default=None, help="Run the N-th request (1-based).")
@click.option("--host", envvar="ES_HOST", default=None, help="Elasticsearch host, e.g. localhost:9200.")
@click.option("--cert", "cert_file_path", envvar="ES_CERT_FILE", default=None, help="CA certificate file (PEM or raw base64).")
@click.option("--insecure", is_flag=True, help="Skip TLS certificate verification.")
@click.option("--ignore-hostname-mismatch", is_flag=True, help="Accept certificates issued for another hostname.")
@click.option("--indent", "indent_tab_size", type=int, default=None, help="Indent width for the result.")
@click.option("--as-document", "show_result_as_document", is_flag=True, help="Write the result to result.json instead of the terminal.")
def run(doc_path: Path, line: int | None, index: int | None, host: str | None, cert_file_path: str | None,
        insecure: bool, ignore_hostname_mismatch: bool, indent_tab_size: int | None,
        show_result_as_document: bool):
    """Execute one request from a document."""
    settings = _settings(
        doc_path,
        host=host,
        cert_file_path=cert_file_path,
        skip_ssl_certificate_verification=insecure or None,
        ignore_hostname_mismatch=ignore_hostname_mismatch or None,
        indent_tab_size=indent_tab_size,
        show_result_as_document=show_result_as_document or None,
    )
    _, found = _load(doc_path)
    region = _pick_region(found, line, index)

    click.echo(f"Executing {region.label} against {settings.host} ...", err=True)
    executor = RequestExecutor(settings)
    result = executor.execute(region, base_dir=doc_path.resolve().parent)
    for notice in executor.notices:
        click.echo(f"Warning: {notice}", err=True)

    text = render_result(result, settings.indent_tab_size)
    if settings.show_result_as_document:
        workspace = find_workspace_file(doc_path.resolve())
        path = write_result_document(text, workspace.parent if workspace else None)
        click.echo(f"{result_title(result)} saved to {path}")
    else:
        click.echo(result_title(result))
        click.echo(text)

    if not result.ok:
        raise SystemExit(1)


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--indent", type=int, default=None, help="Indent width (defaults to the workspace setting).")
@click.option("--check", is_flag=True, help="Only report whether formatting would change the file.")
def fmt(doc_path: Path, indent: int | None, check: bool):
    """Pretty-print the JSON bodies of every request in a document."""
    settings = _settings(doc_path, indent_tab_size=indent)
    document, _ = _load(doc_path)
    formatted, changed = format_document(document, settings.indent_tab_size)

    if check:
        click.echo(f"{changed} bodies would be reformatted.")
        if changed:
            raise SystemExit(1)
        return

    if changed:
        doc_path.write_text(formatted.text, encoding="utf-8", newline="")
    click.echo(f"Reformatted {changed} bodies in {doc_path}")


@main.command("open")
@click.argument("doc_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--line", type=int, required=True, help="Line of the request (1-based).")
@click.option("--print-only", is_flag=True, help="Print the resolved path instead of opening it.")
def open_ref(doc_path: Path, line: int, print_only: bool):
    """Open the body file referenced by a request (``@path`` after the URL)."""
    _, found = _load(doc_path)
    region = _pick_region(found, line, None)
    target = resolve_file_ref(region, doc_path.resolve().parent)
    if target is None:
        raise click.ClickException(f"{region.label} has no file reference")
    if not target.exists():
        raise click.ClickException(f"File {target} does not exist")

    click.echo(str(target))
    if not print_only:
        click.launch(str(target))

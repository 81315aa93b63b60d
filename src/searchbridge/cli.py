"""Command line interface for searchbridge."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from searchbridge.config import AppConfig
from searchbridge.diagnostics import UTILITIES, diagnose as run_diagnostics
from searchbridge.host import SearchSite, load_site
from searchbridge.index.client import SolrClient
from searchbridge.index.projector import DocumentProjector
from searchbridge.index.reindex import DEFAULT_JOB, ReindexCoordinator
from searchbridge.index.schema import SchemaGenerator
from searchbridge.index.search import Searcher
from searchbridge.index.state import SQLiteCursorStore
from searchbridge.models import QueryRequest


console = Console()
app = typer.Typer(help="searchbridge - keep a Solr index in step with your objects")

SITE_HELP = "Host binding as 'module:attribute' naming a SearchSite"
SERVER_HELP = "Solr core URL"


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def _load_site(target: str) -> SearchSite:
    try:
        return load_site(target)
    except (ImportError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--site") from exc


def _client(server: Optional[str]) -> SolrClient:
    config = AppConfig(solr_server=server or AppConfig().solr_server)
    return SolrClient(config.solr_server, timeout=config.timeout)


@app.command()
def schema(
    site: str = typer.Option(..., "--site", help=SITE_HELP),
    fmt: str = typer.Option("xml", "--format", help="Output format: xml or json"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to a file"),
) -> None:
    """Generate a schema declaration for the searchable classes."""
    bound = _load_site(site)
    declaration = SchemaGenerator(bound.fields, bound.store).generate()
    if fmt == "xml":
        rendered = declaration.to_xml()
    elif fmt == "json":
        rendered = json.dumps(declaration.to_dict(), indent=2)
    else:
        raise typer.BadParameter("Format must be 'xml' or 'json'", param_hint="--format")

    if output is None:
        typer.echo(rendered)
        return
    _ensure_parent(output)
    output.write_text(rendered, encoding="utf-8")
    console.print(f"Schema written to [bold]{output}[/bold]")


@app.command()
def search(
    query: str = typer.Argument("", help="Query text (empty matches everything)"),
    site: str = typer.Option(..., "--site", help=SITE_HELP),
    server: Optional[str] = typer.Option(None, "--server", help=SERVER_HELP),
    sort: Optional[str] = typer.Option(None, help="Field to sort on"),
    desc: bool = typer.Option(False, "--desc", help="Sort descending"),
    start: int = typer.Option(0, help="First result to return"),
    rows: Optional[int] = typer.Option(None, help="Number of results to return"),
    param: List[str] = typer.Option([], "--param", "-p", help="Extra raw parameter, e.g. facet.field=Tag"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Query the index and list matching objects."""
    _setup_logging(verbose)
    bound = _load_site(site)
    config = AppConfig()
    request = QueryRequest(
        text=query,
        sort=(sort, "desc" if desc else "asc") if sort else None,
        offset=start,
        limit=rows,
        extra_params=list(param),
    )
    with _client(server) as client:
        searcher = Searcher(client, bound.store, default_query=config.default_query, rows=config.rows)
        result = searcher.search(request)

    if not result.hits:
        console.print("[yellow]No matches found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Class")
    table.add_column("ID")
    table.add_column("Title")
    for ref, obj in zip(result.hits, result.objects):
        title = getattr(obj, "title", None) or getattr(obj, "Title", None) or ""
        table.add_row(ref.class_name, str(ref.object_id), str(title)[:120])
    console.print(table)
    console.print(f"Showing {len(result.hits)} of {result.total_hits} hits.")

    for facet_field, counts in result.facets.items():
        facet_table = Table(title=facet_field, show_header=True, header_style="bold cyan")
        facet_table.add_column("Value")
        facet_table.add_column("Count", justify="right")
        for value, count in counts.items():
            facet_table.add_row(str(value), str(count))
        console.print(facet_table)


@app.command()
def count(server: Optional[str] = typer.Option(None, "--server", help=SERVER_HELP)) -> None:
    """Print the number of documents in the index."""
    with _client(server) as client:
        console.print(f"Documents in index: {client.count()}")


@app.command()
def reindex(
    site: str = typer.Option(..., "--site", help=SITE_HELP),
    server: Optional[str] = typer.Option(None, "--server", help=SERVER_HELP),
    state: Optional[Path] = typer.Option(None, "--state", help="SQLite file holding job progress"),
    job: str = typer.Option(DEFAULT_JOB, help="Job name, for running several jobs side by side"),
    steps: Optional[int] = typer.Option(None, help="Stop after this many steps (default: run to completion)"),
    page_size: int = typer.Option(AppConfig().page_size, help="Objects per step"),
    restart: bool = typer.Option(False, "--restart", help="Discard saved progress and start over"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Rebuild the index, resuming an interrupted run if one is saved."""
    _setup_logging(verbose)
    bound = _load_site(site)
    config = AppConfig(state_path=state if state is not None else AppConfig().state_path)
    state_path = config.resolve_state_path(Path.cwd())
    _ensure_parent(state_path)

    cursors = SQLiteCursorStore(state_path)
    try:
        if restart:
            cursors.delete(job)
        with _client(server) as client:
            projector = DocumentProjector(bound.store, bound.fields, bound.extractors)
            coordinator = ReindexCoordinator(
                bound.store, bound.fields, projector, client, page_size=page_size
            )
            cursor = coordinator.run(cursors, job=job, max_steps=steps)
    finally:
        cursors.close()

    if cursor.is_done:
        console.print(f"[green]Reindex complete:[/green] {cursor.steps_done} objects indexed.")
    else:
        console.print(
            f"Indexed {cursor.steps_done}/{cursor.steps_total} objects; "
            f"next run resumes at {cursor.current_class} > {cursor.last_seen_id}."
        )


@app.command()
def wipe(
    server: Optional[str] = typer.Option(None, "--server", help=SERVER_HELP),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete every document from the index."""
    if not yes:
        typer.confirm("Delete every document from the index?", abort=True)
    with _client(server) as client:
        client.wipe(commit=True)
    console.print("Index wiped.")


@app.command()
def optimize(server: Optional[str] = typer.Option(None, "--server", help=SERVER_HELP)) -> None:
    """Ask the backend to optimize the index."""
    with _client(server) as client:
        client.optimize()
    console.print("Optimize requested.")


@app.command()
def diagnose(
    site: str = typer.Option(..., "--site", help=SITE_HELP),
    server: Optional[str] = typer.Option(None, "--server", help=SERVER_HELP),
) -> None:
    """Check prerequisites, external tools and field configuration."""
    bound = _load_site(site)
    with _client(server) as client:
        report = run_diagnostics(bound, client)

    console.print(f"Backend: [bold]{report.backend}[/bold] at {report.server_url}")
    for module, present in report.prerequisites.items():
        status = "[green]ok[/green]" if present else "[red]missing[/red]"
        console.print(f"Module {module}: {status}")
    for utility, path in report.utilities.items():
        if path:
            console.print(f"Utility {utility} is installed at {path} - {UTILITIES[utility]}.")
        else:
            console.print(f"[yellow]Utility {utility} is not installed.[/yellow]")
    console.print(f"Documents in index: {report.document_count}")

    for class_name, rows in report.classes.items():
        table = Table(title=class_name, show_header=True, header_style="bold magenta")
        for column in ("source", "name", "type", "stored", "indexed", "multiple", "content_filter"):
            table.add_column(column)
        for row in rows:
            table.add_row(*("" if row[key] is None else str(row[key]) for key in row))
        console.print(table)


@app.command()
def web(
    site: str = typer.Option(..., "--site", help=SITE_HELP),
    server: Optional[str] = typer.Option(None, "--server", help=SERVER_HELP),
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
) -> None:
    """Start the HTTP API."""
    import uvicorn

    from searchbridge.web.app import create_app

    bound = _load_site(site)
    config = AppConfig(solr_server=server or AppConfig().solr_server)
    console.print(f"Starting HTTP API on http://{host}:{port} (backend: {config.solr_server})")
    uvicorn.run(create_app(bound, config), host=host, port=port, reload=False, log_level="info")

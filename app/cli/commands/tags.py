"""
Tag commands: trigger an import on a running service and inspect rankings.

The snapshot lives in the service process, so these commands talk to its
HTTP API rather than importing in-process.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

import httpx
import typer
from rich.console import Console
from rich.table import Table

from app.core.config import settings

app = typer.Typer(help="Tag import and query commands")
console = Console()

DEFAULT_BASE_URL = f"http://localhost:{settings.app_port}{settings.api_v1_prefix}"
IMPORT_TIMEOUT_SECONDS = 120.0
QUERY_TIMEOUT_SECONDS = 10.0

BaseUrlOption = typer.Option(
    DEFAULT_BASE_URL,
    "--base-url",
    envvar="TAGSTATS_API_BASE_URL",
    help="Base URL of the running service API",
)


def _request(
    method: str,
    base_url: str,
    path: str,
    *,
    timeout: float,
    params: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Call the service and return the JSON body, exiting on any failure."""
    url = f"{base_url.rstrip('/')}{path}"
    try:
        with httpx.Client(timeout=timeout) as client:
            response = client.request(method, url, params=params)
    except httpx.RequestError as exc:
        console.print(f"[red]Could not reach service at {url}: {exc}[/red]")
        raise typer.Exit(code=2)

    if response.is_error:
        try:
            detail = response.json().get("message", response.text)
        except ValueError:
            detail = response.text
        console.print(f"[red]{method} {path} failed with {response.status_code}: {detail}[/red]")
        raise typer.Exit(code=1)

    return response.json()


@app.command("import")
def import_tags(base_url: str = BaseUrlOption):
    """Re-import every tag page from StackExchange into the running service."""
    with console.status("Importing tags from StackExchange..."):
        result = _request("POST", base_url, "/tags/import", timeout=IMPORT_TIMEOUT_SECONDS)

    summary = Table(title="Tag Import")
    summary.add_column("Field", style="cyan")
    summary.add_column("Value")
    summary.add_row("Tags", str(result["tag_count"]))
    summary.add_row("Pages fetched", str(result["pages_fetched"]))
    summary.add_row("Empty pages", ", ".join(str(p) for p in result.get("empty_pages", [])) or "-")
    summary.add_row("Imported at", str(result["imported_at"]))
    summary.add_row("Duration", f"{result['duration_ms']} ms")
    console.print(summary)

    if result.get("is_empty"):
        console.print("[yellow]Import returned no tags; the cached snapshot is now empty.[/yellow]")
    else:
        console.print("[green]✓ Import complete[/green]")


@app.command("list")
def list_tags(
    page_number: int = typer.Option(1, "--page", "-p", help="1-based page number"),
    page_size: int = typer.Option(10, "--size", "-s", help="Tags per page"),
    sort_by: str = typer.Option("Name", "--sort-by", help="Name or Percentage"),
    sort_order: str = typer.Option("Asc", "--order", help="Asc or Desc"),
    base_url: str = BaseUrlOption,
):
    """Show one page of ranked tags."""
    params = {
        "pageNumber": page_number,
        "pageSize": page_size,
        "sortBy": sort_by,
        "sortOrder": sort_order,
    }
    payload = _request("GET", base_url, "/tags", timeout=QUERY_TIMEOUT_SECONDS, params=params)
    tags = payload.get("tags", [])

    if not tags:
        console.print("[yellow]No tags on this page.[/yellow]")
        raise typer.Exit(code=0)

    table = Table(title=f"Tags (page {page_number}, sorted by {sort_by} {sort_order})")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Tag", style="cyan")
    table.add_column("Share %", justify="right")
    offset = (page_number - 1) * page_size
    for index, tag in enumerate(tags, start=offset + 1):
        table.add_row(str(index), tag["name"], f"{tag['percentage']:.5f}")
    console.print(table)

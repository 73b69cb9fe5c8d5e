"""
ddstore CLI — provision and feed the profiler's document store.

Commands
--------
- ``init`` — create the ``text`` and ``profile`` indices with their mappings.
- ``load-profiles`` — write column profiles from a JSON-lines file.
- ``load-text`` — write sampled column values from a JSON-lines file.
- ``status`` — document count per index.

Connection settings come from ``STORE_*`` environment variables (a ``.env``
file is loaded first) and can be overridden with ``--server`` / ``--port``.

Usage::

    ddstore init --recreate
    ddstore load-profiles profiles.jsonl --bulk
    ddstore load-text samples.jsonl
    ddstore --server es.internal status
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterator
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from ddstore.config import StoreConfig
from ddstore.models.profile_result import ProfileResult, TextRecord
from ddstore.store.elastic_store import ElasticStore

console = Console()
logger = logging.getLogger("ddstore")


def _read_jsonl(path: Path) -> Iterator[dict]:
    """Yield one JSON object per non-blank line of *path*."""
    with open(path) as f:
        for lineno, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError as e:
                raise click.ClickException(f"{path}:{lineno}: invalid JSON ({e.msg})") from e


def _open_store(cfg: StoreConfig, *, recreate: bool = False) -> tuple[ElasticStore, dict[str, bool]]:
    store = ElasticStore(cfg)
    ready = store.init_store(recreate=recreate)
    return store, ready


# ── Shared options ───────────────────────────────────────────────────

@click.group()
@click.version_option(package_name="ddstore")
@click.option("--server", default=None, help="Store host (overrides STORE_SERVER).")
@click.option("--port", default=None, type=int, help="Store HTTP port (overrides STORE_PORT).")
@click.option("-v", "--verbose", is_flag=True, help="Log at DEBUG level.")
@click.pass_context
def main(ctx: click.Context, server: str | None, port: int | None, verbose: bool) -> None:
    """ddstore — document-store adapter for column profiles."""
    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
        datefmt="%H:%M:%S",
    )
    ctx.obj = StoreConfig.from_env(store_server=server, store_port=port)


# ── init ─────────────────────────────────────────────────────────────

@main.command("init")
@click.option("--recreate", is_flag=True, help="Delete existing indices first.")
@click.pass_obj
def init(cfg: StoreConfig, recreate: bool) -> None:
    """Create the indices and apply their mappings."""
    store, ready = _open_store(cfg, recreate=recreate)
    store.tear_down_store()

    table = Table(title=f"Indices at {cfg.server_url}")
    table.add_column("Index")
    table.add_column("Ready")
    for name, ok in ready.items():
        table.add_row(name, "[green]yes[/]" if ok else "[red]no[/]")
    console.print(table)

    if not all(ready.values()):
        sys.exit(1)


# ── load-profiles ────────────────────────────────────────────────────

@main.command("load-profiles")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--bulk", "use_bulk", is_flag=True, help="Send all profiles in one bulk request.")
@click.pass_obj
def load_profiles(cfg: StoreConfig, path: Path, use_bulk: bool) -> None:
    """Write column profiles (one JSON object per line)."""
    results = [ProfileResult.from_dict(d) for d in _read_jsonl(path)]
    logger.info("Read %d profile(s) from %s", len(results), path)
    store, _ = _open_store(cfg)
    try:
        if use_bulk:
            written = store.store_documents(results)
        else:
            written = sum(1 for r in results if store.store_document(r))
    finally:
        store.tear_down_store()

    failed = len(results) - written
    console.print(f"[bold green]✓[/] {written} profile(s) written to '{cfg.profile_index}'")
    if failed:
        console.print(f"[bold red]✗[/] {failed} profile(s) failed")
        sys.exit(1)


# ── load-text ────────────────────────────────────────────────────────

@main.command("load-text")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def load_text(cfg: StoreConfig, path: Path) -> None:
    """Write sampled column values (one JSON object per line)."""
    records = [TextRecord.from_dict(d) for d in _read_jsonl(path)]
    logger.info("Read %d text record(s) from %s", len(records), path)
    store, _ = _open_store(cfg)
    try:
        outcomes = [
            store.index_data(r.id, r.source_name, r.column_name, r.values)
            for r in records
        ]
    finally:
        store.tear_down_store()

    failed = [o for o in outcomes if not o]
    console.print(
        f"[bold green]✓[/] {len(outcomes) - len(failed)} text document(s) "
        f"written to '{cfg.text_index}'"
    )
    if failed:
        console.print(f"[bold red]✗[/] {len(failed)} text document(s) failed")
        sys.exit(1)


# ── status ───────────────────────────────────────────────────────────

@main.command("status")
@click.pass_obj
def status(cfg: StoreConfig) -> None:
    """Show the document count of each index."""
    store, _ = _open_store(cfg)
    try:
        stats = store.index_stats()
    finally:
        store.tear_down_store()

    table = Table(title=f"Indices at {cfg.server_url}")
    table.add_column("Index")
    table.add_column("Documents", justify="right")
    for name, count in stats.items():
        table.add_row(name, "n/a" if count is None else str(count))
    console.print(table)


if __name__ == "__main__":
    main()

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Optional

import typer

from warehouse_entry.config import get_settings
from warehouse_entry.domain.models import QUERYABLE_FIELDS, QueryRequest
from warehouse_entry.infrastructure.errors import RecordStoreError
from warehouse_entry.infrastructure.memory_store import load_json_store
from warehouse_entry.utils.logging import configure_logging
from warehouse_entry.widget import WarehouseForm, WidgetConfig

app = typer.Typer(help="Warehouse entry block tools.")


def _read_json(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as exc:
        raise typer.BadParameter(f"Cannot read '{path}': {exc}") from exc


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"env={settings.app_env} | record_type={settings.record_type} "
        f"limit={settings.query_limit} sequence_queries={settings.sequence_queries} | "
        f"token_key={settings.token_storage_key} | "
        f"store={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name}"
        f" table={settings.blocks_table}"
    )


@app.command()
def reconcile(
    path: Path = typer.Argument(..., help="JSON file holding one block's data or a list of them."),
    now: Optional[str] = typer.Option(None, "--now", help="Label used for a missing createdAt."),
    user: Optional[str] = typer.Option(None, "--user", "-u", help="Label used for a missing createdBy."),
) -> None:
    """
    Print persisted block data in the canonical 10-field shape.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.json_logs)

    payload = _read_json(path)
    blocks = payload if isinstance(payload, list) else [payload]
    config = WidgetConfig(
        get_now_label=(lambda: now) if now else None,
        get_current_user_label=(lambda: user) if user else None,
    )
    records = [
        WarehouseForm(data=block, config=config, settings=settings).data.to_persisted()
        for block in blocks
    ]
    output = records if isinstance(payload, list) else records[0]
    typer.echo(json.dumps(output, indent=2, ensure_ascii=False))


@app.command()
def search(
    store: Path = typer.Argument(..., help="JSON export of documents with their blocks."),
    field: str = typer.Option("sku", "--field", "-f", help="Field to match the prefix against."),
    q: str = typer.Option("", "--q", "-q", help="Case-insensitive prefix."),
    limit: Optional[int] = typer.Option(None, "--limit", "-l", help="Maximum results (default from settings)."),
) -> None:
    """
    Run a chooser query against a JSON record store.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.json_logs)

    if field not in QUERYABLE_FIELDS:
        raise typer.BadParameter(
            f"Unknown field '{field}'. Available: {', '.join(QUERYABLE_FIELDS)}"
        )
    try:
        record_store = load_json_store(store)
    except RecordStoreError as exc:
        raise typer.BadParameter(str(exc)) from exc

    request = QueryRequest(
        record_type=settings.record_type,
        field=field,
        q=q.strip(),
        limit=limit or settings.query_limit,
    )
    response = asyncio.run(record_store(request))
    typer.echo(json.dumps(response.model_dump(by_alias=True), indent=2, ensure_ascii=False))


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()

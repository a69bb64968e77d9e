from __future__ import annotations

import asyncio
import json
import subprocess
import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger

from cds_client import PrimaryStore, SecondaryStore
from cds_client.models import ContentType
from content_dual_store.coordinator import (
    DESTINATIONS,
    ConsistencyPolicy,
    DualWriteCoordinator,
    PolicyResolver,
    RollbackFailureError,
)
from contentstore.config import get_settings

app = typer.Typer(help="Content dual-store CLI (writes, lookups, health, migrations)")

EXIT_FAILED = 1
EXIT_DIVERGED = 2


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def _read_item(source: str) -> dict:
    """ITEM is inline JSON, a path to a JSON file, or '-' for stdin."""
    try:
        if source == "-":
            raw = sys.stdin.read()
        elif source.lstrip().startswith("{"):
            raw = source
        else:
            raw = Path(source).read_text()
        data = json.loads(raw)
    except (OSError, ValueError) as e:
        raise typer.BadParameter(f"cannot read ITEM: {e}") from e
    if not isinstance(data, dict):
        raise typer.BadParameter("ITEM must be a JSON object")
    return data


def _stores():
    settings = get_settings()
    return PrimaryStore(settings.primary_config()), SecondaryStore(settings.secondary_config())


async def _save(item: dict, user_id: Optional[str], policy: Optional[ConsistencyPolicy]) -> dict:
    resolver = get_settings().policy_resolver()
    if policy is not None:
        resolver = PolicyResolver.fixed(policy)
    primary, secondary = _stores()
    async with primary, secondary:
        coordinator = DualWriteCoordinator(primary, secondary, policy_resolver=resolver)
        result = await coordinator.save_dual_storage(item, user_id)
    return result.as_dict()


async def _find(item_id: str, destination: Optional[str]) -> dict:
    primary, secondary = _stores()
    async with primary, secondary:
        row = await primary.find_by_id(item_id)
        if destination is None and row is not None:
            destination = DESTINATIONS[ContentType(row["type"])]
        mirrored = await secondary.find_by_id(destination, item_id) if destination else None
    return {"primary": row, "secondary": mirrored, "destination": destination}


async def _health() -> dict:
    settings = get_settings()
    primary, secondary = _stores()
    async with primary, secondary:
        coordinator = DualWriteCoordinator(
            primary, secondary, policy_resolver=settings.policy_resolver()
        )
        h = await coordinator.health()
    return {
        "coordinator": h.coordinator_id,
        "state": h.state,
        "policy": h.policy.value,
        "primary": h.primary.model_dump(),
        "secondary": h.secondary.model_dump(),
    }


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override LOG_LEVEL"),
):
    configure_logging(log_level or get_settings().LOG_LEVEL)


@app.command()
def save(
    item: str = typer.Argument(..., help="Item JSON, path to a JSON file, or '-' for stdin"),
    user_id: Optional[str] = typer.Option(None, "--user-id", help="Owning user id"),
    policy: Optional[ConsistencyPolicy] = typer.Option(
        None, "--policy", help="Override the configured consistency policy"
    ),
):
    """Save one content item into both stores and print the result."""
    data = _read_item(item)
    try:
        result = asyncio.run(_save(data, user_id, policy))
    except RollbackFailureError as e:
        logger.critical(f"Stores diverged: {e}")
        sys.exit(EXIT_DIVERGED)
    typer.echo(json.dumps(result, indent=2, default=str))
    if not result["success"]:
        sys.exit(EXIT_FAILED)


@app.command()
def find(
    item_id: str = typer.Argument(..., help="Content item id"),
    destination: Optional[str] = typer.Option(
        None, "--table", help="Secondary table (defaults to the routed table)"
    ),
):
    """Show an item as stored in the primary and secondary stores."""
    try:
        found = asyncio.run(_find(item_id, destination))
    except Exception as e:
        logger.error(f"Lookup failed: {e}")
        sys.exit(EXIT_FAILED)
    typer.echo(json.dumps(found, indent=2, default=str))
    if found["primary"] is None and found["secondary"] is None:
        sys.exit(EXIT_FAILED)


@app.command()
def health():
    """Check both stores; exits non-zero unless both are healthy."""
    report = asyncio.run(_health())
    typer.echo(json.dumps(report, indent=2))
    if report["state"] != "healthy":
        sys.exit(EXIT_FAILED)


@app.command()
def migrate(
    target: str = "head",
    store: str = typer.Option("both", "--store", help="primary, secondary, or both"),
):
    """Run Alembic migrations to the specified target (default: head).

    Each store upgrades along its own branch, so "head" means that branch's head.
    """
    stores = ["primary", "secondary"] if store == "both" else [store]
    for name in stores:
        revision = f"{name}@head" if target == "head" else target
        try:
            logger.info(f"Running {name} migrations to {revision}")
            args = ["alembic", "-c", get_settings().ALEMBIC_INI, "-x", f"store={name}"]
            result = subprocess.run(
                [*args, "upgrade", revision],
                capture_output=True,
                text=True,
                cwd=Path(__file__).parent.parent.parent,
            )
            if result.returncode == 0:
                logger.success(f"Successfully migrated {name} to {revision}")
                if result.stdout:
                    logger.info(f"Migration output: {result.stdout}")
            else:
                logger.error(f"{name} migration failed: {result.stderr}")
                sys.exit(EXIT_FAILED)
        except OSError as e:
            logger.error(f"Failed to run migrations: {e}")
            sys.exit(EXIT_FAILED)


if __name__ == "__main__":
    app()

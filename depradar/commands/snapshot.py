"""Snapshot commands for depradar.

Saved snapshots are plain manifest texts with a name and a timestamp,
kept newest first (at most 20). Positions shown by ``snapshot list``
start at 1.

Typical usage::

    $ depradar snapshot save before-upgrade package.json
    $ depradar snapshot list
    $ depradar snapshot show 1 > package.json
    $ depradar snapshot delete 2 --yes
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Dict, List

import click
from rich.markup import escape

from depradar.context import pass_context, DepRadarContext
from depradar.core import SnapshotStore
from depradar.utils import (
    confirm,
    get_logger,
    print_success,
    print_table,
    print_warning,
    safe_read_file,
)

logger = get_logger("commands.snapshot")


def _store(ctx: DepRadarContext) -> SnapshotStore:
    return SnapshotStore(ctx.config.snapshot_path)


@click.group()
def snapshot() -> None:
    """Save, list, show and delete manifest snapshots."""


@snapshot.command("save")
@click.argument("name")
@click.argument(
    "file",
    type=click.Path(dir_okay=False, path_type=Path),
    default="package.json",
)
@pass_context
def save(ctx: DepRadarContext, name: str, file: Path) -> int:
    """Save FILE as a snapshot called NAME."""
    saved = _store(ctx).save(name, safe_read_file(file))
    logger.info("Saved snapshot %r from %s", saved.name, file)
    print_success(f"Saved snapshot '{saved.name}'")
    return 0


@snapshot.command("list")
@pass_context
def list_snapshots(ctx: DepRadarContext) -> int:
    """List saved snapshots, newest first."""
    snapshots = _store(ctx).list()
    if not snapshots:
        print_warning("No saved snapshots yet.")
        return 0

    rows: List[Dict[str, str]] = [
        {
            "#": str(position),
            "Name": escape(item.name),
            "Saved": datetime.fromtimestamp(item.created_at).strftime(
                "%Y-%m-%d %H:%M:%S"
            ),
            "Size": f"{len(item.content)} chars",
        }
        for position, item in enumerate(snapshots, start=1)
    ]
    print_table(rows, title="Snapshots")
    return 0


@snapshot.command("show")
@click.argument("position", type=click.IntRange(min=1))
@pass_context
def show(ctx: DepRadarContext, position: int) -> int:
    """Print the manifest saved at POSITION."""
    click.echo(_store(ctx).get(position - 1).content)
    return 0


@snapshot.command("delete")
@click.argument("position", type=click.IntRange(min=1))
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
@pass_context
def delete(ctx: DepRadarContext, position: int, yes: bool) -> int:
    """Delete the snapshot at POSITION."""
    store = _store(ctx)
    target = store.get(position - 1)

    if not yes and not confirm(f"Delete snapshot '{target.name}'?"):
        print_warning("Nothing deleted")
        return 1

    store.delete(position - 1)
    print_success(f"Deleted snapshot '{target.name}'")
    return 0

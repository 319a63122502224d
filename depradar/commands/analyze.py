"""Analyze command implementation for depradar.

Reads a ``package.json`` (or a saved snapshot), scores every dependency's
upgrade risk and prints the results sorted from riskiest to safest.

Typical usage::

    # Full report
    $ depradar analyze package.json

    # Only high-risk packages, machine readable
    $ depradar analyze --risk high --format json > risky.json

    # Re-run a saved snapshot with more parallelism
    $ depradar analyze --snapshot before-upgrade --concurrency 8
"""

from __future__ import annotations

import json
import asyncio
import dataclasses
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click
from rich.markup import escape

from depradar.config import DepRadarConfig
from depradar.context import pass_context, DepRadarContext
from depradar.exceptions import ManifestError
from depradar.models import ALL_TIERS, DependencyResult, ResultSet, RiskTier
from depradar.core import SnapshotStore, analyze as analyze_manifest
from depradar.core import sample_manifest_text
from depradar.utils import (
    colorize_delta,
    colorize_risk,
    get_logger,
    get_raw_console,
    print_success,
    print_table,
    print_warning,
    safe_read_file,
)

logger = get_logger("commands.analyze")

RISK_CHOICES = [ALL_TIERS] + [tier.value for tier in RiskTier]


@click.command()
@click.argument(
    "file",
    type=click.Path(dir_okay=False, path_type=Path),
    default="package.json",
)
@click.option(
    "--snapshot",
    "snapshot_name",
    metavar="NAME",
    help="Analyze a saved snapshot instead of FILE.",
)
@click.option(
    "--risk",
    type=click.Choice(RISK_CHOICES, case_sensitive=False),
    default=ALL_TIERS,
    show_default=True,
    help="Only show packages of this risk tier.",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "simple", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@click.option(
    "--concurrency",
    type=click.IntRange(min=1),
    envvar="DEPRADAR_CONCURRENCY",
    help="Packages analyzed at the same time (1 = one after another).",
)
@click.option(
    "--github-token",
    envvar="GITHUB_TOKEN",
    help="GitHub token for the releases API (raises the rate limit).",
)
@pass_context
def analyze(
    ctx: DepRadarContext,
    file: Path,
    snapshot_name: Optional[str],
    risk: str,
    output_format: str,
    concurrency: Optional[int],
    github_token: Optional[str],
) -> int:
    """Score the upgrade risk of every dependency in FILE.

    Each dependency earns points for the size of the version jump (major
    +2, minor +1) and for risky words in its latest GitHub releases
    (breaking, deprecated, migration, security, removed). Four or more
    points is HIGH, two or three MEDIUM, otherwise LOW.

    Exits with 1 when any dependency is HIGH risk, 0 otherwise.
    """
    config = ctx.config
    if concurrency is not None:
        config = dataclasses.replace(config, concurrency=concurrency)

    text, source = _load_manifest(config, file, snapshot_name)
    show_progress = output_format == "table"

    results = _run_analysis(
        text,
        config=config,
        github_token=github_token,
        source=source,
        show_progress=show_progress,
    )

    shown = results.filter(risk)
    if output_format == "json":
        click.echo(json.dumps(results.to_json(risk), indent=2))
    elif not shown:
        print_warning(f"No packages with risk '{risk}'")
    elif output_format == "simple":
        _display_simple(shown)
    else:
        _display_table(shown)

    counts = results.summary_counts()
    if output_format != "json":
        _display_summary(counts, total=len(results))

    return 1 if counts[RiskTier.HIGH.value] else 0


@click.command()
def sample() -> None:
    """Print an example package.json to start from."""
    click.echo(sample_manifest_text())


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_manifest(
    config: DepRadarConfig,
    file: Path,
    snapshot_name: Optional[str],
) -> Tuple[str, str]:
    """Return manifest text and a description of where it came from."""
    if snapshot_name is None:
        return safe_read_file(file), str(file)

    found = SnapshotStore(config.snapshot_path).find(snapshot_name)
    if found is None:
        raise ManifestError(
            f"No snapshot named '{snapshot_name}'",
            source=str(config.snapshot_path),
        )
    return found.content, f"snapshot:{snapshot_name}"


def _run_analysis(
    text: str,
    *,
    config: DepRadarConfig,
    github_token: Optional[str],
    source: str,
    show_progress: bool,
) -> ResultSet:
    """Run the async pipeline, showing a spinner for interactive output."""
    if not show_progress:
        return asyncio.run(
            analyze_manifest(
                text, config=config, github_token=github_token, source=source
            )
        )

    console = get_raw_console()
    with console.status("Analyzing packages...") as status:

        def progress(done: int, total: int) -> None:
            status.update(f"Processed {done}/{total} packages")

        return asyncio.run(
            analyze_manifest(
                text,
                config=config,
                github_token=github_token,
                source=source,
                progress_callback=progress,
            )
        )


def _display_table(results: Tuple[DependencyResult, ...]) -> None:
    """Render results as a Rich table.

    Example::

        ┏━━━━━━━━┳━━━━━━━━━┳━━━━━━━━━┳━━━━━━━━┳━━━━━━━┳━━━━━━━━━━━━━━━━━━━━━┓
        ┃ Risk   ┃ Package ┃ Current ┃ Latest ┃ Delta ┃ Clues               ┃
        ┡━━━━━━━━╇━━━━━━━━━╇━━━━━━━━━╇━━━━━━━━╇━━━━━━━╇━━━━━━━━━━━━━━━━━━━━━┩
        │  HIGH  │ react   │ ^17.0.0 │ 18.3.1 │ major │ mentions "breaking" │
        └────────┴─────────┴─────────┴────────┴───────┴─────────────────────┘
    """
    data = [_create_table_row(result) for result in results]

    column_styles: Dict[str, Dict[str, Any]] = {
        "Risk": {"justify": "center", "no_wrap": True, "width": 8},
        "Package": {"style": "bold cyan", "no_wrap": True},
        "Current": {"justify": "center", "style": "dim"},
        "Latest": {"justify": "center"},
        "Delta": {"justify": "center"},
        "Clues": {"justify": "left", "no_wrap": False},
    }

    print_table(
        data,
        title="Dependency Risk",
        column_styles=column_styles,
        show_row_lines=True,
    )


def _create_table_row(result: DependencyResult) -> Dict[str, str]:
    """Build a Rich-markup table row for one result."""
    if result.error:
        latest = "[red]error[/red]"
        clues = f"[red]{_escape(result.clue_summary)}[/red]"
    else:
        latest = (
            f"[link={result.package_url}][bold green]{_escape(result.latest_version)}"
            "[/bold green][/link]"
            if result.latest_version
            else "[dim]unknown[/dim]"
        )
        clues = _escape(result.clue_summary) or "[dim]-[/dim]"

    return {
        "Risk": colorize_risk(result.risk.value),
        "Package": _escape(result.name),
        "Current": _escape(result.current_spec),
        "Latest": latest,
        "Delta": colorize_delta(result.delta.value),
        "Clues": clues,
    }


def _display_simple(results: Tuple[DependencyResult, ...]) -> None:
    """Render one plain line per result with indented clues.

    Example::

        [HIGH]   react                ^17.0.0    → 18.3.1     major
                 mentions "breaking"; mentions "removed"
    """
    console = get_raw_console()

    for result in results:
        latest = result.latest_version or "unknown"
        console.print(
            f"[{result.risk.value.upper()}]".ljust(9)
            + f"{result.name:20} {result.current_spec:10} → {latest:10} "
            + result.delta.value,
            markup=False,
            highlight=False,
        )
        if result.clue_summary:
            console.print(f"         {result.clue_summary}", markup=False)


def _display_summary(counts: Dict[str, int], *, total: int) -> None:
    parts: List[str] = [
        f"{tier.value.capitalize()}: {counts[tier.value]}" for tier in RiskTier
    ]
    message = f"Analyzed {total} packages. " + ", ".join(parts)
    get_raw_console().print()
    if counts[RiskTier.HIGH.value]:
        print_warning(message)
    else:
        print_success(message)


def _escape(text: str) -> str:
    """Escape Rich markup in untrusted text (package names, messages)."""
    return escape(text)

"""
Command-line interface for depradar.

This module provides the main CLI entry point and handles global options,
configuration loading, and command registration.
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click

from depradar.config import load_config
from depradar.__version__ import __version__
from depradar.context import DepRadarContext
from depradar.exceptions import ConfigError, DepRadarError
from depradar.utils.logger import get_logger, level_for_verbosity, setup_logging
from depradar.utils.console import print_error, print_warning, reconfigure_console
from depradar.commands.analyze import analyze, sample
from depradar.commands.snapshot import snapshot

logger = get_logger("cli")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file.",
    envvar="DEPRADAR_CONFIG",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (can be repeated: -v, -vv).",
)
@click.option(
    "--color/--no-color",
    default=True,
    help="Enable or disable colored output.",
    envvar="DEPRADAR_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="depradar",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """depradar — upgrade-risk radar for package.json dependencies.

    \b
    Available commands:
      depradar analyze             Score every dependency's upgrade risk
      depradar sample              Print an example manifest
      depradar snapshot            Save, list, show and delete manifests

    \b
    Examples:
      depradar analyze package.json
      depradar analyze --risk high --format json
      depradar snapshot save before-upgrade package.json

    Use ``depradar COMMAND --help`` for command-specific options.
    """
    # NO_COLOR must be settled before the console or log handler is built
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()

    level = level_for_verbosity(verbose)
    setup_logging(level=level, verbose=verbose >= 2)
    logger.debug("Logging initialized at %s level", logging.getLevelName(level))

    try:
        loaded_config = load_config(config)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    depradar_ctx = ctx.ensure_object(DepRadarContext)
    depradar_ctx.config_path = config or loaded_config.source_path
    depradar_ctx.color = color
    depradar_ctx.verbose = verbose
    depradar_ctx.config = loaded_config

    logger.debug("depradar v%s", __version__)
    logger.debug("Config path: %s", depradar_ctx.config_path)
    if loaded_config.source_path:
        logger.debug("Loaded configuration: %s", loaded_config.to_log_dict())


cli.add_command(analyze)
cli.add_command(sample)
cli.add_command(snapshot)


def main() -> int:
    """Main entry point for the depradar CLI.

    Returns:
        Exit code:
            0   Success
            1   High-risk dependencies found, or an application error
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C)
    """
    try:
        result = cli(standalone_mode=False)
        return result if isinstance(result, int) else 0

    except click.exceptions.Abort:
        print_warning("\nOperation cancelled by user")
        return 130

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 1

    except DepRadarError as exc:
        print_error(exc.message)
        logger.debug(
            "DepRadarError details: %s",
            exc.details or "<none>",
            exc_info=True,
        )
        return 1

    except KeyboardInterrupt:
        print_warning("\nOperation cancelled by user")
        return 130

    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return 1


if __name__ == "__main__":
    sys.exit(main())

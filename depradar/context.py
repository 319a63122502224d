"""
Shared context object for depradar CLI commands.

An instance is created once per invocation by the top-level group and
handed to subcommands through Click's context mechanism.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from depradar.config import DepRadarConfig


class DepRadarContext:
    """Global context object for depradar CLI commands.

    Attributes:
        config_path: Path to the depradar configuration file, if any.
        verbose: Verbosity level (0=WARNING, 1=INFO, 2+=DEBUG).
        color: Whether colored terminal output is enabled.
        config: Loaded configuration (defaults until the group callback runs).
    """

    __slots__ = ("config_path", "verbose", "color", "config")

    def __init__(self) -> None:
        self.config_path: Optional[Path] = None
        self.verbose: int = 0
        self.color: bool = True
        self.config: DepRadarConfig = DepRadarConfig()


#: Click decorator for injecting :class:`DepRadarContext` into commands.
pass_context = click.make_pass_decorator(DepRadarContext, ensure=True)

"""Click subcommands registered by :mod:`depradar.cli`."""

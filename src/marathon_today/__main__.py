"""Allow ``python -m marathon_today``."""

from marathon_today import cli

cli.app()

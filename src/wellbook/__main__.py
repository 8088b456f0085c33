"""Allow ``python -m wellbook``."""

from wellbook import cli

cli.app()

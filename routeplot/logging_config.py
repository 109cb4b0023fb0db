"""
routeplot — Logging setup
Console logging for the command line tool and the API server.
"""

import logging
from rich.logging import RichHandler


def configure(level: str = "INFO") -> None:
    """Send every routeplot.* logger to a rich console handler."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_time=False, show_path=False,
                              markup=False)],
    )

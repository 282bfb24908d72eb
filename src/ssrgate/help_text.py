"""Operator-facing help messages."""

import logging

MISSING_404_TEXT = (
    "No route matched the request and no catch-all route is defined.\n"
    "Add a not-found route as the last entry of your route table, e.g.\n"
    '    {"path": "*", "name": "not_found", "status": 404}\n'
    "so unknown paths render a page instead of an empty 404."
)


def show_help_text(text: str, log: logging.Logger) -> None:
    """Send a multi-line help message to the logger, one record per line."""
    for line in text.splitlines():
        log.warning(line)

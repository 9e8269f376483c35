"""CLI command: flowbridge validate -- run the preflight validator on a payload."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from flowbridge.model.diagnostic import ValidationIssue
from flowbridge.validation import run_preflight


def print_issues(issues: tuple[ValidationIssue, ...], counts: dict[str, int]) -> None:
    """Echo each issue, then the one-line severity summary."""
    for issue in issues:
        click.echo(str(issue))
        if issue.suggestion:
            click.echo(f"    hint: {issue.suggestion}")
    click.echo()
    click.echo(
        f"Summary: {counts['fatal']} fatal, {counts['error']} error(s), "
        f"{counts['warning']} warning(s), {counts['info']} info"
    )


@click.command()
@click.argument("payload_file", type=click.Path(exists=True))
def validate(payload_file: str) -> None:
    """Validate a clipboard payload JSON file.

    Prints every issue and a summary, and exits with code 1 if the
    payload cannot proceed.
    """
    path = Path(payload_file)
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except ValueError as exc:
        click.echo(f"Invalid JSON: {exc}", err=True)
        sys.exit(1)

    result = run_preflight(payload)
    if result.is_valid:
        click.echo(f"OK: {path.name} is valid (0 issues)")
        sys.exit(0)

    print_issues(result.issues, result.counts())
    click.echo()
    click.echo(result.summary)

    if not result.can_proceed:
        sys.exit(1)
    sys.exit(0)

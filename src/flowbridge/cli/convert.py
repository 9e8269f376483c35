"""CLI command: flowbridge convert -- compile CSS into a gated payload."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from flowbridge.config import DEFAULT_CONFIG
from flowbridge.cli.validate import print_issues
from flowbridge.pipeline import (
    ConversionCancelled,
    ConversionProgress,
    convert_css,
    convert_sections,
    split_sections,
)


def _echo_progress(progress: ConversionProgress) -> None:
    item = f" {progress.current_item}" if progress.current_item else ""
    click.echo(f"[{progress.phase}] {progress.percentage:3d}%{item}", err=True)


@click.command()
@click.argument("cssfile", type=click.Path(exists=True))
@click.option("-o", "--output", "output", type=click.Path(), default=None, help="Write the payload JSON here instead of stdout.")
@click.option("--sections/--no-sections", default=False, help="Split on /* @section name */ markers and convert section by section.")
@click.option("--no-force-visible", is_flag=True, help="Keep opacity:0 and visibility:hidden as written.")
@click.option("--prefix", default=None, help="Prefix for generated identifiers.")
def convert(cssfile: str, output: str | None, sections: bool, no_force_visible: bool, prefix: str | None) -> None:
    """Compile CSSFILE into a Webflow clipboard payload.

    The payload is run through the safety gate. When the gate blocks it,
    nothing is written and the command exits with code 1.
    """
    css = Path(cssfile).read_text(encoding="utf-8")
    overrides: dict[str, object] = {}
    if no_force_visible:
        overrides["force_visible"] = False
    if prefix:
        overrides["id_prefix"] = prefix
    config = DEFAULT_CONFIG.with_overrides(**overrides)

    if sections:
        try:
            result = convert_sections(split_sections(css), config, on_progress=_echo_progress)
        except ConversionCancelled as exc:
            click.echo(f"Cancelled: {exc}", err=True)
            sys.exit(1)
        gate = result.gate
        payload = result.payload
        warnings = [w for section in result.sections for w in section.warnings]
    else:
        converted = convert_css(css, config)
        gate = converted.gate
        payload = converted.payload
        warnings = list(converted.warnings)

    for warning in warnings:
        click.echo(str(warning), err=True)

    if not gate.can_proceed:
        click.echo("Payload blocked by the safety gate:", err=True)
        print_issues(gate.issues, gate.final.counts())
        click.echo(gate.summary, err=True)
        sys.exit(1)

    for change in gate.changes:
        click.echo(f"Sanitized: {change}", err=True)

    text = json.dumps(payload, indent=2)
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
        click.echo(f"Wrote {output}", err=True)
    else:
        click.echo(text)

"""CLI command: flowbridge inspect -- display the class index built from CSS."""

from __future__ import annotations

from pathlib import Path

import click

from flowbridge.css.resolver import build_class_index


def _style_less(decls: dict[str, str]) -> str:
    text = "; ".join(f"{k}: {v}" for k, v in decls.items())
    return text[:70] + "..." if len(text) > 70 else text


@click.command()
@click.argument("cssfile", type=click.Path(exists=True))
def inspect(cssfile: str) -> None:
    """Compile a CSS file and display its class index.

    Shows every class with its base, pseudo and breakpoint buckets,
    the breakpoint labels and the compiler warnings.
    """
    index = build_class_index(Path(cssfile).read_text(encoding="utf-8"))

    click.echo(f"Classes:  {len(index)}")
    click.echo(f"Warnings: {len(index.warnings)}")
    click.echo()

    click.echo("Breakpoints:")
    for tier, label in index.media_breakpoints.items():
        click.echo(f"  {tier:<9} {label}")
    click.echo()

    click.echo("Classes:")
    for entry in index.classes.values():
        flags = []
        if entry.is_combo:
            flags.append("combo")
        if entry.is_layout_container:
            flags.append("layout")
        if entry.parent_classes:
            flags.append("parents=" + ",".join(entry.parent_classes))
        click.echo("  ." + "  ".join([entry.class_name, *flags]))
        if entry.base:
            click.echo(f"      base: {_style_less(entry.base)}")
        for bucket, decls in list(entry.pseudo.items()) + list(entry.breakpoints.items()):
            if decls:
                click.echo(f"      {bucket}: {_style_less(decls)}")
    click.echo()

    if index.warnings:
        click.echo("Warnings:")
        for warning in index.warnings:
            click.echo(f"  {warning}")
    if index.non_standard_media_css:
        click.echo()
        click.echo("Non-standard CSS:")
        click.echo(index.non_standard_media_css)

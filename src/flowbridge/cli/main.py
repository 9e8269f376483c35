"""flowbridge CLI entry point: Click group with subcommands."""

import logging

import click

from flowbridge import __version__


@click.group()
@click.version_option(version=__version__, prog_name="flowbridge")
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr.")
def cli(verbose: bool) -> None:
    """flowbridge - compile CSS into Webflow clipboard payloads and gate them."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# Import and register subcommands
from flowbridge.cli.convert import convert  # noqa: E402
from flowbridge.cli.validate import validate  # noqa: E402
from flowbridge.cli.inspect import inspect  # noqa: E402

cli.add_command(convert)
cli.add_command(validate)
cli.add_command(inspect)

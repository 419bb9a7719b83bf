"""Main CLI entry point for pnps-utils.

Provides the command group with global options, the ``info`` command and
the ``config``, ``parse`` and ``calc`` subcommands.
"""

import logging
import sys
from pathlib import Path

import click
import structlog

from pnps_utils import __version__
from pnps_utils.cli.calc_cmd import calc
from pnps_utils.cli.config_cmd import config
from pnps_utils.cli.parse_cmd import parse
from pnps_utils.config.loader import load_settings


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

# Route structlog events through the stdlib handlers configured above
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.processors.format_exc_info,
        structlog.dev.ConsoleRenderer(colors=False),
    ],
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
)


@click.group()
@click.version_option(__version__, prog_name='pnps-utils')
@click.option(
    '--settings',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help='YAML settings file (thresholds for parse, result type for calc)'
)
@click.option(
    '--verbose',
    is_flag=True,
    help='Enable verbose logging (DEBUG level)'
)
@click.pass_context
def cli(ctx, settings, verbose):
    """pN/pS Utilities.

    Computes per-sample pN/pS for coding regions from a VCF file, per-base
    depth files and GFF annotations.

    Typical run: 'config' to pair VCF samples with depth files, 'parse' to
    count synonymous/nonsynonymous changes, 'calc' to write the pN/pS table.
    """
    ctx.ensure_object(dict)
    ctx.obj['settings_path'] = settings
    ctx.obj['verbose'] = verbose

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.debug("Verbose logging enabled")


@cli.command()
@click.pass_context
def info(ctx):
    """Display version and the effective settings."""
    settings_path = ctx.obj['settings_path']

    click.echo(f"pnps-utils v{__version__}")
    click.echo(f"Settings: {settings_path or '(defaults)'}")
    click.echo()

    try:
        settings = load_settings(settings_path)
    except Exception as e:
        click.echo(click.style(f"Error loading settings: {e}", fg='red'), err=True)
        sys.exit(1)

    click.echo(click.style("Parse:", bold=True))
    click.echo(f"  Minimum depth:    {settings.parse.min_depth}")
    click.echo(f"  Minimum coverage: {settings.parse.min_coverage}")
    click.echo(f"  Minimum QUAL:     {settings.parse.min_qual}")
    click.echo(f"  Feature type:     {settings.parse.feature_type}")
    click.echo(f"  Genetic code:     {settings.parse.genetic_code}")
    click.echo()
    click.echo(click.style("Calc:", bold=True))
    click.echo(f"  Result type:      {settings.calc.result_type.value}")


cli.add_command(config)
cli.add_command(parse)
cli.add_command(calc)


if __name__ == '__main__':
    cli()

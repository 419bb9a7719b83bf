"""Config command: write the sample config used by 'parse'.

The config pairs each VCF sample column (usually the BAM file given to
the variant caller) with a depth file and a display sample id used as
column name in the final output.
"""

import logging
import sys
from pathlib import Path

import click

from pnps_utils.errors import PnPsError
from pnps_utils.formats.sample_config import build_sample_config, write_sample_config
from pnps_utils.formats.vcf import VcfReader

logger = logging.getLogger(__name__)


@click.command('config')
@click.option(
    '-v', '--vcf-file',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help='VCF file to get the sample columns from'
)
@click.option(
    '-o', '--output-file',
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help='Output to file, instead of stdout'
)
@click.argument(
    'depth_files',
    nargs=-1,
    type=click.Path(path_type=Path),
)
def config(vcf_file, output_file, depth_files):
    """Generate the sample config file for command 'parse'.

    The file contains three tab separated columns: sample id, VCF column
    and depth file. Depth files are paired with the VCF columns in the
    order given; rearrange the file if they do not correspond.

    Examples:

        pnps-utils config -v calls.vcf -o samples.tsv a.depth b.depth
    """
    try:
        with VcfReader(vcf_file) as reader:
            vcf_samples = list(reader.sample_names)

        rows = build_sample_config(vcf_samples, list(depth_files))

        logger.info("Writing config")
        with click.open_file(str(output_file) if output_file else '-', 'w') as handle:
            write_sample_config(handle, rows)

    except PnPsError as e:
        click.echo(click.style(f"Config command failed: {e}", fg='red'), err=True)
        logger.exception("Config command failed")
        sys.exit(1)

"""Parse command: count synonymous/nonsynonymous changes per sample.

Orchestrates the parse phase:
- Reads annotations, sample config and reference sequences
- Computes expected synonymous/nonsynonymous counts per annotation
- Builds coverage filtered counter tables per sample
- Classifies the VCF records
- Saves the tables as JSON for 'calc'
"""

import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from pnps_utils.config.loader import load_settings_with_overrides
from pnps_utils.errors import PnPsError
from pnps_utils.pnps.pipeline import run_parse
from pnps_utils.pnps.store import save_sample_pnps

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = Path("pnps.json")


@click.command('parse')
@click.option(
    '-c', '--config-file',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help='Sample config file, can be created with the config command'
)
@click.option(
    '-g', '--gff-file',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help='GFF file with the annotations'
)
@click.option(
    '-f', '--fasta-file',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help='FASTA file with the reference sequences'
)
@click.option(
    '-m', '--min-depth',
    type=click.IntRange(1, 20),
    default=None,
    help='Minimum accepted depth, DP in the VCF (default: 4)'
)
@click.option(
    '-a', '--min-coverage',
    type=click.IntRange(1, 20),
    default=None,
    help='Minimum mean read coverage of an annotation (default: 4)'
)
@click.option(
    '-q', '--min-qual',
    type=float,
    default=None,
    help='Minimum QUAL in the VCF file (default: 30)'
)
@click.option(
    '--progress/--no-progress',
    default=False,
    help='Show progress bars'
)
@click.argument(
    'vcf_file',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.argument(
    'output_file',
    type=click.Path(dir_okay=False, path_type=Path),
    required=False,
)
@click.pass_context
def parse(ctx, config_file, gff_file, fasta_file, min_depth, min_coverage, min_qual,
          progress, vcf_file, output_file):
    """Parse a VCF file and save the data to calculate pN/pS.

    The VCF file is expected to be created with samtools and bcftools;
    only CDS annotations are used unless the settings file says otherwise.
    The output defaults to pnps.json, gzipped if the name ends in .gz.

    Examples:

        pnps-utils parse -c samples.tsv -g genes.gff -f genome.fna calls.vcf

        pnps-utils parse -c samples.tsv -g genes.gff -f genome.fna -q 20 calls.vcf pnps.json.gz
    """
    output_file = output_file or DEFAULT_OUTPUT

    try:
        settings = load_settings_with_overrides(
            ctx.obj.get('settings_path') if ctx.obj else None,
            {
                'parse.min_depth': min_depth,
                'parse.min_coverage': min_coverage,
                'parse.min_qual': min_qual,
            },
        )
    except (ValidationError, FileNotFoundError) as e:
        click.echo(click.style(f"Error loading settings: {e}", fg='red'), err=True)
        sys.exit(1)

    parse_settings = settings.parse
    click.echo(click.style("=== pN/pS Parse ===", bold=True))
    click.echo(
        f"Minimum Depth {parse_settings.min_depth}, Qual {parse_settings.min_qual}, "
        f"Coverage {parse_settings.min_coverage}"
    )

    try:
        result = run_parse(
            config_file,
            gff_file,
            fasta_file,
            vcf_file,
            settings=parse_settings,
            progress=progress,
        )
        save_sample_pnps(output_file, result.pnps_map)
    except (PnPsError, OSError) as e:
        click.echo(click.style(f"Parse command failed: {e}", fg='red'), err=True)
        logger.exception("Parse command failed")
        sys.exit(1)

    stats = result.stats
    click.echo()
    click.echo(f"Annotations: {result.annotation_count}, Sequences: {result.sequence_count}")
    click.echo(
        f"VCF records {stats.count}, Skipped INDEL: {stats.skipped_indel}, "
        f"Skipped for low QUAL: {stats.skipped_qual}, "
        f"Skipped for low DP (depth) {stats.skipped_depth_pct:.2f}%"
    )
    if stats.unknown_samples:
        click.echo(click.style(
            f"  Samples not in config: {', '.join(sorted(stats.unknown_samples))}",
            fg='yellow'
        ))
    click.echo(click.style(f"Saved pN/pS data to {output_file}", fg='green'))

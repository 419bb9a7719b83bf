"""Calc command: turn parsed counters into a pN/pS table.

Without map files the table has one row per annotation UID; with any of
the gene, taxon or lineage maps the rows are (gene_id, taxon, lineage)
groups.
"""

import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from pnps_utils.config.loader import load_settings_with_overrides
from pnps_utils.config.schema import ResultType
from pnps_utils.errors import PnPsError
from pnps_utils.formats.maps import read_gene_map, read_lineage_map, read_taxon_map
from pnps_utils.formats.taxonomy import Taxonomy
from pnps_utils.pnps.grouping import group_pnps
from pnps_utils.pnps.output import build_grouped_matrix, build_matrix, write_matrix
from pnps_utils.pnps.store import load_sample_pnps

logger = logging.getLogger(__name__)

RESULT_LABELS = {
    ResultType.PNPS: "pN/pS",
    ResultType.PN: "pN",
    ResultType.PS: "pS",
}


@click.command('calc')
@click.option(
    '-g', '--gene-map',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help='Gene map, mapping a UID to other gene IDs (comma separated)'
)
@click.option(
    '-t', '--taxonomy',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help='Taxonomy file (taxon id, parent id, name, rank)'
)
@click.option(
    '-m', '--taxon-map',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help='Taxon map, mapping a UID to a taxon ID; requires --taxonomy'
)
@click.option(
    '-l', '--lineage-map',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help='Alternative to --taxon-map, the map contains full lineage strings'
)
@click.option(
    '-r', '--taxon-rank',
    default=None,
    help='Taxon rank to map taxa from the map (not implemented)'
)
@click.option(
    '-s', '--output-ps',
    is_flag=True,
    help='Only save pS value, not pN/pS'
)
@click.option(
    '-n', '--output-pn',
    is_flag=True,
    help='Only save pN value, not pN/pS'
)
@click.argument(
    'input_file',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.argument(
    'output_file',
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.pass_context
def calc(ctx, gene_map, taxonomy, taxon_map, lineage_map, taxon_rank, output_ps, output_pn,
         input_file, output_file):
    """Use the result of 'parse' and map files to calculate pN/pS.

    Writes a CSV table with samples as columns. Rows without at least one
    usable (finite, non-zero) value are not written.

    Examples:

        # One row per annotation UID
        pnps-utils calc pnps.json pnps.csv

        # pN only, grouped by gene and taxon
        pnps-utils calc -n -g genes.tsv -t taxonomy.tsv -m taxa.tsv pnps.json pn.csv
    """
    if output_ps and output_pn:
        raise click.UsageError("--output-ps and --output-pn are mutually exclusive")
    if taxon_map and lineage_map:
        raise click.UsageError("--taxon-map and --lineage-map are mutually exclusive")
    if taxon_map and not taxonomy:
        raise click.UsageError("--taxon-map requires --taxonomy")
    if taxon_rank:
        logger.warning(f"Using a rank is not implemented, passed: {taxon_rank}")

    result_type = None
    if output_pn:
        result_type = ResultType.PN
    elif output_ps:
        result_type = ResultType.PS

    try:
        settings = load_settings_with_overrides(
            ctx.obj.get('settings_path') if ctx.obj else None,
            {'calc.result_type': result_type},
        )
    except (ValidationError, FileNotFoundError) as e:
        click.echo(click.style(f"Error loading settings: {e}", fg='red'), err=True)
        sys.exit(1)

    result_type = settings.calc.result_type
    grouped_mode = any(path is not None for path in (gene_map, taxon_map, lineage_map))

    try:
        genes = read_gene_map(gene_map) if gene_map else {}
        taxa = read_taxon_map(taxon_map) if taxon_map else {}
        lineages = read_lineage_map(lineage_map) if lineage_map else {}
        tax = Taxonomy.read_from_file(taxonomy) if taxonomy else Taxonomy()

        click.echo(click.style(f"=== {RESULT_LABELS[result_type]} Calculation ===", bold=True))
        click.echo(f"Reading pN/pS data from file: {input_file}")
        pnps_map = load_sample_pnps(input_file)

        click.echo(f"Calculating {RESULT_LABELS[result_type]}")
        if grouped_mode:
            grouped = group_pnps(pnps_map, genes, taxa, lineages)
            df = build_grouped_matrix(grouped, result_type, tax)
        else:
            df = build_matrix(pnps_map, result_type)

        write_matrix(df, output_file)
    except (PnPsError, OSError) as e:
        click.echo(click.style(f"Calc command failed: {e}", fg='red'), err=True)
        logger.exception("Calc command failed")
        sys.exit(1)

    click.echo(click.style(f"Wrote {df.height} rows to {output_file}", fg='green'))

"""Projection of counters onto a sample x entity matrix and CSV output.

Rows are the union of keys (UIDs or GroupKeys) seen in any sample,
columns are samples in input order. A cell is the selected ratio, or NaN
when the sample has no data for the row. Rows are only written when
``is_reportable`` accepts their values.
"""

import math
from decimal import Decimal
from pathlib import Path
from typing import Hashable, Mapping

import polars as pl
import structlog

from pnps_utils.config.schema import ResultType
from pnps_utils.formats.taxonomy import Taxonomy
from pnps_utils.pnps.grouping import SampleGroupPnPs
from pnps_utils.pnps.models import SamplePnPs, get_ratio, is_normal

logger = structlog.get_logger(__name__)


def is_reportable(values: list[float]) -> bool:
    """A row is written only if at least one value is an IEEE normal float.

    All-NaN rows are dropped, and so are rows whose values are all zero,
    subnormal or infinite.
    """
    return any(is_normal(value) for value in values)


def format_value(value: float) -> str:
    """Text of a cell value.

    NaN and infinities are written as ``NaN``, ``inf`` and ``-inf``;
    integral values have no fractional part; other values use the
    shortest round-trip decimal notation, never an exponent.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value.is_integer():
        return str(int(value))
    return format(Decimal(repr(value)), "f")


def _row_keys(tables: Mapping[str, Mapping[Hashable, object]]) -> list:
    # first appearance order over samples, then keys
    keys: dict = {}
    for table in tables.values():
        for key in table:
            keys.setdefault(key, None)
    return list(keys)


def _row_values(
    tables: Mapping[str, Mapping[Hashable, object]],
    key: Hashable,
    result_type: ResultType,
) -> list[float]:
    values = []
    for table in tables.values():
        item = table.get(key)
        values.append(math.nan if item is None else get_ratio(item, result_type))
    return values


def build_matrix(pnps_map: SamplePnPs, result_type: ResultType = ResultType.PNPS) -> pl.DataFrame:
    """Ungrouped matrix, one row per UID.

    Args:
        pnps_map: sample -> uid -> PnPsRecord
        result_type: Ratio to report

    Returns:
        String DataFrame with a ``uid`` column followed by one column per
        sample
    """
    samples = list(pnps_map)
    rows: list[list[str]] = []
    for uid in _row_keys(pnps_map):
        values = _row_values(pnps_map, uid, result_type)
        if is_reportable(values):
            rows.append([str(uid)] + [format_value(value) for value in values])

    return _to_frame(["uid"] + samples, rows)


def build_grouped_matrix(
    grouped: SampleGroupPnPs,
    result_type: ResultType = ResultType.PNPS,
    taxonomy: Taxonomy | None = None,
) -> pl.DataFrame:
    """Grouped matrix, one row per (gene_id, taxon, lineage).

    An empty stored lineage is resolved from the taxon id through the
    taxonomy; taxon id 0 resolves to an empty lineage.

    Raises:
        TaxonomyError: If a non zero taxon id is not in the taxonomy
    """
    if taxonomy is None:
        taxonomy = Taxonomy()
    samples = list(grouped)
    lineage_cache: dict[int, str] = {0: ""}

    rows: list[list[str]] = []
    for key in _row_keys(grouped):
        values = _row_values(grouped, key, result_type)
        if not is_reportable(values):
            continue
        lineage = key.lineage
        if not lineage:
            if key.taxon_id not in lineage_cache:
                lineage_cache[key.taxon_id] = taxonomy.get_lineage_string(key.taxon_id)
            lineage = lineage_cache[key.taxon_id]
        rows.append(
            [key.gene_id, str(key.taxon_id), lineage] + [format_value(value) for value in values]
        )

    return _to_frame(["gene_id", "taxon", "lineage"] + samples, rows)


def _to_frame(columns: list[str], rows: list[list[str]]) -> pl.DataFrame:
    schema = {column: pl.Utf8 for column in columns}
    if not rows:
        return pl.DataFrame(schema=schema)
    return pl.DataFrame(rows, schema=schema, orient="row")


def write_matrix(df: pl.DataFrame, output_file: Path | str) -> Path:
    """Write the matrix as comma separated text.

    The file is only created once the whole matrix is built.
    """
    output_file = Path(output_file)
    logger.info("writing_results", file=str(output_file), rows=df.height, columns=df.width)
    df.write_csv(output_file, include_header=True)
    return output_file

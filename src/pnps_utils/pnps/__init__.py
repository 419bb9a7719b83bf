"""pN/pS engine: expected counts, per-sample tables, classification and output."""

from pnps_utils.pnps.baseline import AnnotationIndex, build_baseline
from pnps_utils.pnps.classify import ClassificationStats, VariantClassifier
from pnps_utils.pnps.codons import GeneticCode
from pnps_utils.pnps.grouping import SampleGroupPnPs, group_pnps
from pnps_utils.pnps.models import (
    GroupKey,
    GroupPnPs,
    PnPsRecord,
    SamplePnPs,
    divide,
    get_ratio,
    is_normal,
)
from pnps_utils.pnps.output import (
    build_grouped_matrix,
    build_matrix,
    format_value,
    is_reportable,
    write_matrix,
)
from pnps_utils.pnps.pipeline import ParseResult, run_parse
from pnps_utils.pnps.samples import init_sample_tables, max_coverage_record, prepare_sample_pnps
from pnps_utils.pnps.store import load_sample_pnps, save_sample_pnps

__all__ = [
    "AnnotationIndex",
    "build_baseline",
    "ClassificationStats",
    "VariantClassifier",
    "GeneticCode",
    "SampleGroupPnPs",
    "group_pnps",
    "GroupKey",
    "GroupPnPs",
    "PnPsRecord",
    "SamplePnPs",
    "divide",
    "get_ratio",
    "is_normal",
    "build_grouped_matrix",
    "build_matrix",
    "format_value",
    "is_reportable",
    "write_matrix",
    "ParseResult",
    "run_parse",
    "init_sample_tables",
    "max_coverage_record",
    "prepare_sample_pnps",
    "load_sample_pnps",
    "save_sample_pnps",
]

"""The ``parse`` phase: from input files to a filled SamplePnPs table."""

from dataclasses import dataclass
from pathlib import Path

import structlog

from pnps_utils.config.schema import ParseSettings
from pnps_utils.formats.fasta import read_fasta
from pnps_utils.formats.gff import read_gff
from pnps_utils.formats.sample_config import read_sample_config
from pnps_utils.formats.vcf import VcfReader
from pnps_utils.pnps.baseline import build_baseline
from pnps_utils.pnps.classify import ClassificationStats, VariantClassifier
from pnps_utils.pnps.codons import GeneticCode
from pnps_utils.pnps.models import SamplePnPs
from pnps_utils.pnps.samples import init_sample_tables

logger = structlog.get_logger(__name__)


@dataclass
class ParseResult:
    """Outcome of ``run_parse``."""
    pnps_map: SamplePnPs
    stats: ClassificationStats
    annotation_count: int
    sequence_count: int


def run_parse(
    config_file: Path | str,
    gff_file: Path | str,
    fasta_file: Path | str,
    vcf_file: Path | str,
    settings: ParseSettings | None = None,
    progress: bool = False,
) -> ParseResult:
    """Build per-sample counters from annotation, sequence, depth and VCF files.

    Steps, strictly in order: read annotations, sample config and
    sequences; compute expected counts; build coverage filtered tables for
    each sample; classify the VCF records in one pass.

    Args:
        config_file: Sample config (display id, VCF column, depth file)
        gff_file: GFF3 annotations with a ``uid`` attribute
        fasta_file: Reference sequences
        vcf_file: Variant calls
        settings: Thresholds (default: ParseSettings())
        progress: Show progress indicators

    Returns:
        ParseResult with the filled table and classification counters

    Raises:
        InputFormatError: On unparseable input files
        MissingSequenceError: If an annotation has no reference sequence
    """
    if settings is None:
        settings = ParseSettings()

    logger.info(
        "parse_start",
        min_depth=settings.min_depth,
        min_qual=settings.min_qual,
        min_coverage=settings.min_coverage,
    )

    annotations = read_gff(gff_file, feature_type=settings.feature_type)
    sample_info = read_sample_config(config_file)
    logger.info("samples_in_config", count=len(sample_info))
    sequences = read_fasta(fasta_file)

    genetic_code = GeneticCode(settings.genetic_code)
    baseline = build_baseline(annotations, sequences, genetic_code, progress=progress)
    pnps_map = init_sample_tables(sample_info, baseline, annotations, settings.min_coverage)

    with VcfReader(vcf_file) as reader:
        logger.info("vcf_samples", count=len(reader.sample_names))
        classifier = VariantClassifier(
            pnps_map,
            annotations,
            sequences,
            sample_info,
            min_depth=settings.min_depth,
            min_qual=settings.min_qual,
            genetic_code=genetic_code,
        )
        stats = classifier.run(reader, progress=progress)

    return ParseResult(
        pnps_map=pnps_map,
        stats=stats,
        annotation_count=len(annotations),
        sequence_count=len(sequences),
    )

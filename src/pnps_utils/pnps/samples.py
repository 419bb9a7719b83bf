"""Per-sample counter tables filtered by coverage."""

from pathlib import Path
from typing import Callable
from uuid import UUID

import structlog

from pnps_utils.formats.depth import DepthMap, read_depth_file
from pnps_utils.formats.gff import Annotation
from pnps_utils.formats.sample_config import SampleInfo
from pnps_utils.pnps.models import PnPsRecord, SamplePnPs

logger = structlog.get_logger(__name__)


def prepare_sample_pnps(
    baseline: dict[UUID, PnPsRecord],
    depth_map: DepthMap,
    annotations: dict[UUID, Annotation],
    min_coverage: int,
) -> dict[UUID, PnPsRecord]:
    """Counter table of one sample.

    Each baseline record is copied with zero observed counts and the
    annotation's mean coverage; only records with
    ``coverage >= min_coverage`` are kept.

    Args:
        baseline: uid -> record with expected counts
        depth_map: Depth of the sample
        annotations: uid -> Annotation
        min_coverage: Minimum mean coverage

    Returns:
        uid -> fresh PnPsRecord for the annotations passing the filter
    """
    sample_pnps: dict[UUID, PnPsRecord] = {}
    for uid, base in baseline.items():
        annotation = annotations[uid]
        coverage = depth_map.coverage_at(annotation.seq_id, annotation.start, annotation.end)
        if coverage < min_coverage:
            continue
        sample_pnps[uid] = PnPsRecord(
            uid=uid,
            exp_syn=base.exp_syn,
            exp_nonsyn=base.exp_nonsyn,
            coverage=coverage,
        )
    return sample_pnps


def max_coverage_record(sample_pnps: dict[UUID, PnPsRecord]) -> PnPsRecord | None:
    """Record with the highest coverage, None for an empty table."""
    if not sample_pnps:
        return None
    return max(sample_pnps.values(), key=lambda record: record.coverage)


def init_sample_tables(
    sample_info: SampleInfo,
    baseline: dict[UUID, PnPsRecord],
    annotations: dict[UUID, Annotation],
    min_coverage: int,
    depth_reader: Callable[[Path], DepthMap] = read_depth_file,
) -> SamplePnPs:
    """Build the counter tables of all samples in the config.

    Samples may end up tracking different annotations. A sample left with
    no annotation is kept (with an empty table) and logged.

    Args:
        sample_info: VCF column -> SampleEntry
        baseline: uid -> record with expected counts
        annotations: uid -> Annotation
        min_coverage: Minimum mean coverage
        depth_reader: Callable loading a depth file

    Returns:
        SamplePnPs keyed by sample display id, in config order
    """
    pnps_map: SamplePnPs = {}

    for entry in sample_info.values():
        logger.info("sample_depth_read", sample=entry.sample_id, depth_file=str(entry.depth_file))
        depth_map = depth_reader(entry.depth_file)
        sample_pnps = prepare_sample_pnps(baseline, depth_map, annotations, min_coverage)

        best = max_coverage_record(sample_pnps)
        if best is None:
            logger.warning(
                "sample_no_annotations",
                sample=entry.sample_id,
                min_coverage=min_coverage,
            )
        else:
            logger.info(
                "sample_max_coverage",
                sample=entry.sample_id,
                annotations=len(sample_pnps),
                coverage=best.coverage,
                uid=str(best.uid),
            )
        pnps_map[entry.sample_id] = sample_pnps

    return pnps_map

"""Re-keying of per-annotation counters by gene, taxon and lineage."""

import structlog

from pnps_utils.formats.maps import GeneMap, LineageMap, TaxonMap
from pnps_utils.pnps.models import GroupKey, GroupPnPs, SamplePnPs

logger = structlog.get_logger(__name__)

# sample id -> GroupKey -> GroupPnPs
SampleGroupPnPs = dict[str, dict[GroupKey, GroupPnPs]]


def group_pnps(
    pnps_map: SamplePnPs,
    gene_map: GeneMap | None = None,
    taxon_map: TaxonMap | None = None,
    lineage_map: LineageMap | None = None,
) -> SampleGroupPnPs:
    """Group each sample's records by (gene id, taxon id, lineage).

    A UID absent from a map falls back to ``str(uid)`` as gene id, taxon
    id 0 and an empty lineage. A UID with several gene ids is added to
    one group per gene id; the groups share the record object.

    Args:
        pnps_map: sample -> uid -> PnPsRecord
        gene_map: uid -> external gene ids
        taxon_map: uid -> taxon id
        lineage_map: uid -> lineage string

    Returns:
        sample -> GroupKey -> GroupPnPs, samples in input order
    """
    gene_map = gene_map or {}
    taxon_map = taxon_map or {}
    lineage_map = lineage_map or {}

    grouped: SampleGroupPnPs = {}
    for sample_id, sample_pnps in pnps_map.items():
        sample_groups: dict[GroupKey, GroupPnPs] = {}
        for uid, record in sample_pnps.items():
            gene_ids = gene_map.get(uid) or [str(uid)]
            taxon_id = taxon_map.get(uid, 0)
            lineage = lineage_map.get(uid, "")
            for gene_id in gene_ids:
                key = GroupKey(gene_id, taxon_id, lineage)
                group = sample_groups.get(key)
                if group is None:
                    group = GroupPnPs(gene_id=gene_id, taxon_id=taxon_id, taxon_lineage=lineage)
                    sample_groups[key] = group
                group.pnps.append(record)
        grouped[sample_id] = sample_groups
        logger.debug("sample_grouped", sample=sample_id, records=len(sample_pnps), groups=len(sample_groups))

    return grouped

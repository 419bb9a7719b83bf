"""Classification of variant calls into synonymous/nonsynonymous counts.

A single forward pass over the variant records. Each record is filtered
(depth, then quality, then indel/multi-base reference); records passing
all filters are matched to every annotation containing their position,
and each sample's called allele increments ``syn`` or ``nonsyn`` of the
sample's record for that annotation, when it exists.
"""

from dataclasses import dataclass, field
from typing import Iterable
from uuid import UUID

import structlog
from tqdm import tqdm

from pnps_utils.errors import SynonymyError
from pnps_utils.formats.gff import Annotation
from pnps_utils.formats.sample_config import SampleInfo
from pnps_utils.formats.vcf import VariantRecord
from pnps_utils.pnps.baseline import AnnotationIndex
from pnps_utils.pnps.codons import GeneticCode
from pnps_utils.pnps.models import SamplePnPs

logger = structlog.get_logger(__name__)


@dataclass
class ClassificationStats:
    """Counters for one pass over the variant stream.

    Attributes:
        count: Records seen
        skipped_depth: Records below the minimum depth
        skipped_qual: Records below the minimum quality
        skipped_indel: Indels and multi-base reference alleles
        no_annotation: Records on a sequence without annotations
        syn: Synonymous increments
        nonsyn: Nonsynonymous increments
        failed: Calls that could not be classified
        missing_sequence: Annotation/record pairs skipped for lack of sequence
        unknown_samples: VCF sample names absent from the sample config
    """
    count: int = 0
    skipped_depth: int = 0
    skipped_qual: int = 0
    skipped_indel: int = 0
    no_annotation: int = 0
    syn: int = 0
    nonsyn: int = 0
    failed: int = 0
    missing_sequence: int = 0
    unknown_samples: set[str] = field(default_factory=set)

    @property
    def skipped_depth_pct(self) -> float:
        """Percentage of records skipped for low depth (0.0 with no records)."""
        if self.count == 0:
            return 0.0
        return self.skipped_depth / self.count * 100.0


class VariantClassifier:
    """Applies variant records to a SamplePnPs table.

    The table is mutated in place: only existing (sample, uid) records
    are incremented, calls for records filtered out by coverage are
    ignored.

    Args:
        pnps_map: Counter tables built by the sample initializer
        annotations: uid -> Annotation
        sequences: Reference sequence id -> sequence
        sample_info: VCF column -> SampleEntry
        min_depth: Minimum INFO/DP
        min_qual: Minimum QUAL
        genetic_code: Codon table (default: table 11)
    """

    def __init__(
        self,
        pnps_map: SamplePnPs,
        annotations: dict[UUID, Annotation],
        sequences: dict[str, str],
        sample_info: SampleInfo,
        min_depth: int = 4,
        min_qual: float = 30.0,
        genetic_code: GeneticCode | None = None,
    ):
        self.pnps_map = pnps_map
        self.index = AnnotationIndex.from_annotations(annotations)
        self.sequences = sequences
        self.sample_info = sample_info
        self.min_depth = min_depth
        self.min_qual = min_qual
        self.genetic_code = genetic_code or GeneticCode()
        self.stats = ClassificationStats()

    def passes_filters(self, record: VariantRecord) -> bool:
        """Apply the depth, quality and indel filters, updating skip counters."""
        if record.depth < self.min_depth:
            self.stats.skipped_depth += 1
            return False
        if record.qual < self.min_qual:
            self.stats.skipped_qual += 1
            return False
        if record.indel or len(record.ref) > 1:
            self.stats.skipped_indel += 1
            return False
        return True

    def _resolve_calls(self, record: VariantRecord) -> list[tuple[str, str]]:
        calls = []
        for vcf_sample, alt in record.sample_snps():
            entry = self.sample_info.get(vcf_sample)
            if entry is None:
                if vcf_sample not in self.stats.unknown_samples:
                    logger.error("unknown_sample", sample=vcf_sample, chrom=record.chrom, pos=record.pos)
                self.stats.unknown_samples.add(vcf_sample)
                continue
            calls.append((entry.sample_id, alt))
        return calls

    def process(self, record: VariantRecord) -> None:
        """Filter and classify a single record."""
        self.stats.count += 1
        if not self.passes_filters(record):
            return

        if record.chrom not in self.index:
            self.stats.no_annotation += 1
            return

        overlapping = self.index.containing(record.chrom, record.pos)
        if not overlapping:
            return

        calls = self._resolve_calls(record)
        for annotation in overlapping:
            seq = self.sequences.get(annotation.seq_id)
            if seq is None:
                self.stats.missing_sequence += 1
                logger.warning(
                    "annotation_sequence_missing",
                    seq_id=annotation.seq_id,
                    uid=str(annotation.uid),
                    pos=record.pos,
                )
                continue
            for sample_id, alt in calls:
                sample_pnps = self.pnps_map.get(sample_id)
                if sample_pnps is None:
                    continue
                pnps = sample_pnps.get(annotation.uid)
                if pnps is None:
                    continue
                try:
                    is_syn = self.genetic_code.is_synonymous(annotation, seq, record.pos, alt)
                except SynonymyError as e:
                    self.stats.failed += 1
                    logger.warning(
                        "classification_failed",
                        sample=sample_id,
                        uid=str(annotation.uid),
                        chrom=record.chrom,
                        pos=record.pos,
                        error=str(e),
                    )
                    continue
                if is_syn:
                    pnps.syn += 1
                    self.stats.syn += 1
                else:
                    pnps.nonsyn += 1
                    self.stats.nonsyn += 1

    def run(self, records: Iterable[VariantRecord], progress: bool = False) -> ClassificationStats:
        """Process a whole record stream and log the summary.

        Args:
            records: Variant records, consumed once
            progress: Show a spinner with the number of records read

        Returns:
            The classifier's ClassificationStats
        """
        for record in tqdm(records, desc="VCF Reading", unit=" records", disable=not progress):
            self.process(record)

        logger.info(
            "vcf_summary",
            records=self.stats.count,
            skipped_indel=self.stats.skipped_indel,
            skipped_qual=self.stats.skipped_qual,
            skipped_depth=self.stats.skipped_depth,
            skipped_depth_pct=f"{self.stats.skipped_depth_pct:.2f}%",
            syn=self.stats.syn,
            nonsyn=self.stats.nonsyn,
            failed=self.stats.failed,
        )
        return self.stats

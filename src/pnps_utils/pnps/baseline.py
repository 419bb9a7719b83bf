"""Annotation lookup by sequence and expected substitution counts."""

from collections import defaultdict
from uuid import UUID

import structlog
from tqdm import tqdm

from pnps_utils.errors import MissingSequenceError
from pnps_utils.formats.gff import Annotation
from pnps_utils.pnps.codons import GeneticCode
from pnps_utils.pnps.models import PnPsRecord

logger = structlog.get_logger(__name__)


class AnnotationIndex:
    """Annotations grouped by reference sequence id.

    A sequence id maps to all of its annotations, including overlapping
    and opposite strand ones, so a position can fall in several of them.
    """

    def __init__(self):
        self._by_seq: dict[str, list[Annotation]] = defaultdict(list)

    @classmethod
    def from_annotations(cls, annotations) -> "AnnotationIndex":
        """Build the index from an iterable (or uid keyed dict) of annotations."""
        if isinstance(annotations, dict):
            annotations = annotations.values()
        index = cls()
        for annotation in annotations:
            index.add(annotation)
        return index

    def add(self, annotation: Annotation) -> None:
        self._by_seq[annotation.seq_id].append(annotation)

    def on_sequence(self, seq_id: str) -> list[Annotation]:
        return self._by_seq.get(seq_id, [])

    def containing(self, seq_id: str, pos: int) -> list[Annotation]:
        """Annotations on ``seq_id`` containing the 1-based position ``pos``."""
        return [annotation for annotation in self.on_sequence(seq_id) if annotation.contains(pos)]

    def __contains__(self, seq_id: str) -> bool:
        return seq_id in self._by_seq

    def __len__(self) -> int:
        return sum(len(annotations) for annotations in self._by_seq.values())


def build_baseline(
    annotations: dict[UUID, Annotation],
    sequences: dict[str, str],
    genetic_code: GeneticCode | None = None,
    progress: bool = False,
) -> dict[UUID, PnPsRecord]:
    """Compute expected synonymous/nonsynonymous counts per annotation.

    Args:
        annotations: uid -> Annotation
        sequences: Reference sequence id -> sequence
        genetic_code: Codon table to use (default: table 11)
        progress: Show a progress bar

    Returns:
        uid -> PnPsRecord with ``exp_syn``/``exp_nonsyn`` set and zero
        observed counts

    Raises:
        MissingSequenceError: If an annotation's sequence is not in
            ``sequences``; no partial baseline is returned
    """
    if genetic_code is None:
        genetic_code = GeneticCode()

    logger.info("baseline_start", annotations=len(annotations), genetic_code=genetic_code.table_id)

    baseline: dict[UUID, PnPsRecord] = {}
    for uid, annotation in tqdm(annotations.items(), total=len(annotations), disable=not progress,
                                desc="Expected counts"):
        seq = sequences.get(annotation.seq_id)
        if seq is None:
            raise MissingSequenceError(annotation.seq_id, uid)
        exp_syn, exp_nonsyn = genetic_code.annotation_expected_counts(annotation, seq)
        baseline[uid] = PnPsRecord(uid=uid, exp_syn=exp_syn, exp_nonsyn=exp_nonsyn)

    logger.info("baseline_complete", records=len(baseline))
    return baseline

"""Codon degeneracy analysis.

``GeneticCode`` is the single capability the rest of the engine needs
from the genetic code: expected synonymous/nonsynonymous substitution
counts for a coding region, and the classification of one observed
substitution.
"""

from Bio.Data import CodonTable
from Bio.Seq import reverse_complement

from pnps_utils.errors import SynonymyError
from pnps_utils.formats.gff import Annotation

BASES = "ACGT"
STOP = "*"


class GeneticCode:
    """Translation and substitution counting for one NCBI codon table.

    Every single-base substitution of each sense and stop codon is
    precomputed on construction, so counting over a coding sequence is a
    dictionary lookup per codon.

    Args:
        table_id: NCBI genetic code id (default: 11, bacterial)
    """

    def __init__(self, table_id: int = 11):
        table = CodonTable.unambiguous_dna_by_id[table_id]
        self.table_id = table_id
        self.codon_to_aa: dict[str, str] = dict(table.forward_table)
        for codon in table.stop_codons:
            self.codon_to_aa[codon] = STOP
        self._changes = {codon: self._count_changes(codon) for codon in self.codon_to_aa}

    def translate(self, codon: str) -> str:
        """Amino acid (``*`` for stop) encoded by an unambiguous codon."""
        try:
            return self.codon_to_aa[codon]
        except KeyError:
            raise SynonymyError(f"Invalid codon {codon!r}") from None

    def _count_changes(self, codon: str) -> tuple[int, int]:
        syn = nonsyn = 0
        ref_aa = self.codon_to_aa[codon]
        for i, ref_base in enumerate(codon):
            for base in BASES:
                if base == ref_base:
                    continue
                alt = codon[:i] + base + codon[i + 1:]
                if self.codon_to_aa[alt] == ref_aa:
                    syn += 1
                else:
                    nonsyn += 1
        return syn, nonsyn

    def codon_changes(self, codon: str) -> tuple[int, int]:
        """Synonymous and nonsynonymous single-base substitutions of a codon.

        Ambiguous codons give ``(0, 0)``.
        """
        return self._changes.get(codon, (0, 0))

    def expected_counts(self, coding_seq: str) -> tuple[int, int]:
        """Sum of possible synonymous/nonsynonymous substitutions.

        Args:
            coding_seq: Coding strand sequence, in frame from its first base

        Returns:
            Tuple of (exp_syn, exp_nonsyn). Codons with non ACGT bases and
            a trailing incomplete codon are skipped.
        """
        exp_syn = exp_nonsyn = 0
        coding_seq = coding_seq.upper()
        for i in range(0, len(coding_seq) - 2, 3):
            syn, nonsyn = self.codon_changes(coding_seq[i:i + 3])
            exp_syn += syn
            exp_nonsyn += nonsyn
        return exp_syn, exp_nonsyn

    def annotation_expected_counts(self, annotation: Annotation, seq: str) -> tuple[int, int]:
        """Expected counts for an annotation on its reference sequence."""
        return self.expected_counts(coding_sequence(annotation, seq))

    def is_synonymous(self, annotation: Annotation, seq: str, pos: int, alt: str) -> bool:
        """Classify a substitution inside an annotation.

        Args:
            annotation: Annotation containing the position
            seq: Reference sequence the annotation lies on
            pos: 1-based position of the substitution
            alt: Alternate base, on the reference sequence strand

        Returns:
            True if the codon still encodes the same amino acid

        Raises:
            SynonymyError: If the position is outside the annotation, the
                alt is not a single ACGT base, the codon is incomplete or
                ambiguous, or the alt equals the reference base
        """
        alt = alt.upper()
        if len(alt) != 1 or alt not in BASES:
            raise SynonymyError(f"Cannot classify alternate allele {alt!r} at {annotation.seq_id}:{pos}")
        if not annotation.contains(pos):
            raise SynonymyError(f"Position {pos} is outside annotation {annotation.uid}")

        codon, index = codon_context(annotation, seq, pos)
        if annotation.strand == "-":
            alt = reverse_complement(alt)

        if codon[index] == alt:
            raise SynonymyError(
                f"Alternate allele {alt} equals the reference at {annotation.seq_id}:{pos}"
            )
        mutated = codon[:index] + alt + codon[index + 1:]
        return self.translate(codon) == self.translate(mutated)


def coding_sequence(annotation: Annotation, seq: str) -> str:
    """Annotation sequence on its coding strand."""
    coding_seq = seq[annotation.start:annotation.end].upper()
    if annotation.strand == "-":
        coding_seq = reverse_complement(coding_seq)
    return coding_seq


def codon_context(annotation: Annotation, seq: str, pos: int) -> tuple[str, int]:
    """Codon on the coding strand covering a 1-based position.

    Returns:
        Tuple of (codon, index of the position inside the codon)

    Raises:
        SynonymyError: If the codon runs past the sequence or the
            annotation, or contains non ACGT bases
    """
    pos0 = pos - 1
    if annotation.strand == "-":
        offset = annotation.end - 1 - pos0
        codon_end = annotation.end - (offset - offset % 3)
        codon_start = codon_end - 3
    else:
        offset = pos0 - annotation.start
        codon_start = annotation.start + (offset - offset % 3)
        codon_end = codon_start + 3

    if codon_start < annotation.start or codon_end > annotation.end or codon_end > len(seq):
        raise SynonymyError(
            f"Incomplete codon at {annotation.seq_id}:{pos} in annotation {annotation.uid}"
        )

    codon = seq[codon_start:codon_end].upper()
    if annotation.strand == "-":
        codon = reverse_complement(codon)
    if any(base not in BASES for base in codon):
        raise SynonymyError(f"Ambiguous codon {codon} at {annotation.seq_id}:{pos}")

    return codon, offset % 3

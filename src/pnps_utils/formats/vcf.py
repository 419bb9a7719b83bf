"""Streaming VCF reader built on pysam.

Only the fields used for pN/pS are kept: position, alleles, QUAL, the
``DP`` and ``INDEL`` INFO keys and the per-sample ``GT`` values.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

import pysam
import structlog

from pnps_utils.errors import InputFormatError

logger = structlog.get_logger(__name__)

Genotype = tuple[int | None, ...]


@dataclass
class VariantRecord:
    """One VCF data line.

    Attributes:
        chrom: Reference sequence id
        pos: 1-based position
        ref: Reference allele
        alts: Alternate alleles
        qual: QUAL column (0.0 when missing)
        depth: INFO/DP (0 when missing)
        indel: True when the INFO/INDEL flag is set
        genotypes: Sample column name -> GT allele indices (None for ``.``)
    """
    chrom: str
    pos: int
    ref: str
    alts: list[str] = field(default_factory=list)
    qual: float = 0.0
    depth: int = 0
    indel: bool = False
    genotypes: dict[str, Genotype] = field(default_factory=dict)

    def sample_snps(self) -> Iterator[tuple[str, str]]:
        """Yield ``(sample_name, alt_allele)`` for samples carrying a call.

        The called allele is the first non reference allele of the
        genotype; missing or reference-only genotypes yield nothing.
        """
        for sample_name, genotype in self.genotypes.items():
            for index in genotype:
                if index is None or index == 0:
                    continue
                if index <= len(self.alts):
                    yield sample_name, self.alts[index - 1]
                break


def _to_record(rec: pysam.VariantRecord, sample_names: list[str]) -> VariantRecord:
    depth = rec.info.get("DP")
    genotypes = {}
    for sample_name in sample_names:
        genotype = rec.samples[sample_name].get("GT")
        if genotype is not None:
            genotypes[sample_name] = tuple(genotype)

    return VariantRecord(
        chrom=rec.chrom,
        pos=rec.pos,
        ref=rec.ref,
        alts=list(rec.alts or ()),
        qual=0.0 if rec.qual is None else float(rec.qual),
        depth=0 if depth is None else int(depth),
        indel="INDEL" in rec.info,
        genotypes=genotypes,
    )


class VcfReader:
    """Iterate over the records of a VCF (or BCF) file.

    The header is read on construction, so ``sample_names`` is available
    before iteration starts. Iterating consumes the file once.

    Example:
        reader = VcfReader("calls.vcf.gz")
        for record in reader:
            ...
    """

    def __init__(self, file_name: Path | str):
        self.file_name = Path(file_name)
        try:
            self._vcf = pysam.VariantFile(str(self.file_name))
        except (ValueError, OSError) as e:
            raise InputFormatError(f"Cannot read VCF header: {e}", self.file_name) from None
        self.sample_names: list[str] = list(self._vcf.header.samples)
        self._record_number = 0
        logger.debug("vcf_opened", file=str(self.file_name), samples=len(self.sample_names))

    def __iter__(self) -> Iterator[VariantRecord]:
        try:
            while True:
                self._record_number += 1
                try:
                    rec = next(self._vcf)
                    record = _to_record(rec, self.sample_names)
                except StopIteration:
                    return
                except (ValueError, OSError) as e:
                    raise InputFormatError(
                        f"Cannot parse record {self._record_number}: {e}", self.file_name
                    ) from None
                yield record
        finally:
            self.close()

    def close(self) -> None:
        self._vcf.close()

    def __enter__(self) -> "VcfReader":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

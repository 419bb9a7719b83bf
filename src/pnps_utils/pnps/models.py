"""Counter records and group types for pN/pS computation."""

import math
import sys
from dataclasses import dataclass, field
from typing import NamedTuple
from uuid import UUID

from pydantic import BaseModel, Field

from pnps_utils.config.schema import ResultType


def divide(numerator: float, denominator: float) -> float:
    """IEEE-754 style division: ``x/0`` is ``inf`` (``-inf``), ``0/0`` is NaN."""
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)
    return numerator / denominator


def is_normal(value: float) -> bool:
    """True for finite, non-zero, non-subnormal floats."""
    return math.isfinite(value) and abs(value) >= sys.float_info.min


class PnPsRecord(BaseModel):
    """Synonymous/nonsynonymous counters of one annotation in one sample.

    ``exp_syn``/``exp_nonsyn`` come from the reference sequence and
    ``coverage`` from the depth file; only ``syn``/``nonsyn`` change
    while variants are classified.
    """

    uid: UUID
    exp_syn: int = Field(default=0, ge=0)
    exp_nonsyn: int = Field(default=0, ge=0)
    syn: int = Field(default=0, ge=0)
    nonsyn: int = Field(default=0, ge=0)
    coverage: int = Field(default=0, ge=0)

    def get_pn(self) -> float:
        return divide(self.nonsyn, self.exp_nonsyn)

    def get_ps(self) -> float:
        return divide(self.syn, self.exp_syn)

    def get_pnps(self) -> float:
        return divide(self.get_pn(), self.get_ps())

    def get_value(self, result_type: ResultType) -> float:
        return get_ratio(self, result_type)


# sample id -> uid -> record
SamplePnPs = dict[str, dict[UUID, PnPsRecord]]


class GroupKey(NamedTuple):
    """Row key of the grouped output."""
    gene_id: str
    taxon_id: int = 0
    lineage: str = ""


@dataclass
class GroupPnPs:
    """Records of one sample sharing a GroupKey.

    ``pnps`` holds references to records owned by the SamplePnPs table;
    the same record may belong to several groups when a UID maps to more
    than one gene id. Ratios pool the raw counts of all members before
    dividing.
    """
    gene_id: str
    taxon_id: int = 0
    taxon_lineage: str = ""
    pnps: list[PnPsRecord] = field(default_factory=list)

    @property
    def key(self) -> GroupKey:
        return GroupKey(self.gene_id, self.taxon_id, self.taxon_lineage)

    @property
    def syn(self) -> int:
        return sum(record.syn for record in self.pnps)

    @property
    def nonsyn(self) -> int:
        return sum(record.nonsyn for record in self.pnps)

    @property
    def exp_syn(self) -> int:
        return sum(record.exp_syn for record in self.pnps)

    @property
    def exp_nonsyn(self) -> int:
        return sum(record.exp_nonsyn for record in self.pnps)

    def get_pn(self) -> float:
        return divide(self.nonsyn, self.exp_nonsyn)

    def get_ps(self) -> float:
        return divide(self.syn, self.exp_syn)

    def get_pnps(self) -> float:
        return divide(self.get_pn(), self.get_ps())

    def get_value(self, result_type: ResultType) -> float:
        return get_ratio(self, result_type)


def get_ratio(item: PnPsRecord | GroupPnPs, result_type: ResultType) -> float:
    """Select pN, pS or pN/pS of a record or group."""
    if result_type == ResultType.PN:
        return item.get_pn()
    if result_type == ResultType.PS:
        return item.get_ps()
    return item.get_pnps()

"""Pydantic models for pnps-utils settings."""

from enum import Enum

from pydantic import BaseModel, Field


class ResultType(str, Enum):
    """Ratio reported in each cell of the output matrix."""

    PNPS = "pnps"
    PN = "pn"
    PS = "ps"


class ParseSettings(BaseModel):
    """Thresholds used while building the per-sample counter table."""

    min_depth: int = Field(
        default=4,
        ge=1,
        le=20,
        description="Minimum accepted total depth, corresponding to DP in the VCF",
    )
    min_coverage: int = Field(
        default=4,
        ge=1,
        le=20,
        description="Minimum mean read coverage of an annotation from the depth file",
    )
    min_qual: float = Field(
        default=30.0,
        ge=0.0,
        description="Minimum QUAL in the VCF file",
    )
    feature_type: str = Field(
        default="CDS",
        description="GFF feature type used as annotations",
    )
    genetic_code: int = Field(
        default=11,
        ge=1,
        description="NCBI genetic code table id",
    )


class CalcSettings(BaseModel):
    """Settings for the ratio computation step."""

    result_type: ResultType = Field(
        default=ResultType.PNPS,
        description="One of pnps, pn or ps",
    )


class PnPsSettings(BaseModel):
    """Top level settings, every section optional in the YAML file."""

    parse: ParseSettings = Field(default_factory=ParseSettings)
    calc: CalcSettings = Field(default_factory=CalcSettings)

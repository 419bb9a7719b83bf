"""GFF3 annotation reader built on BCBio.GFF."""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator
from uuid import UUID

import structlog
from BCBio import GFF
from Bio.SeqFeature import SeqFeature

from pnps_utils.errors import InputFormatError
from pnps_utils.formats.files import open_text

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Annotation:
    """A single annotated feature.

    Attributes:
        uid: Unique id of the annotation (``uid`` GFF attribute)
        seq_id: Reference sequence id
        start: 0-based start, inclusive
        end: 0-based end, exclusive
        strand: ``+`` or ``-``
        feature_type: GFF feature type (e.g. CDS)
    """
    uid: UUID
    seq_id: str
    start: int
    end: int
    strand: str = "+"
    feature_type: str = "CDS"

    def contains(self, pos: int) -> bool:
        """Test a 1-based position (as found in VCF files) for containment."""
        return self.start <= pos - 1 < self.end

    def __len__(self) -> int:
        return self.end - self.start


def parse_uid(token: str, file_name: Path | str, line_number: int | None = None) -> UUID:
    """Convert a textual UID to a UUID, failing with the file location."""
    try:
        return UUID(token.strip())
    except ValueError:
        raise InputFormatError(f"Cannot parse UID {token!r}", file_name, line_number) from None


def _walk_features(features: Iterable[SeqFeature]) -> Iterator[SeqFeature]:
    # CDS with a Parent attribute are nested under their gene or mRNA
    for feature in features:
        yield feature
        yield from _walk_features(getattr(feature, "sub_features", None) or [])


def _to_annotation(feature: SeqFeature, seq_id: str, file_name: Path | str) -> Annotation:
    values = feature.qualifiers.get("uid")
    if not values:
        feature_id = feature.qualifiers.get("ID", [feature.id])[0]
        raise InputFormatError(
            f"Missing uid attribute ({feature.type} {feature_id} on {seq_id})", file_name
        )
    uid = parse_uid(values[0], file_name)

    return Annotation(
        uid=uid,
        seq_id=seq_id,
        start=int(feature.location.start),
        end=int(feature.location.end),
        strand="-" if feature.location.strand == -1 else "+",
        feature_type=feature.type,
    )


def read_gff(file_name: Path | str, feature_type: str = "CDS") -> dict[UUID, Annotation]:
    """Read annotations of one feature type from a GFF3 file.

    Args:
        file_name: GFF3 file, optionally gzipped
        feature_type: Only features of this type are kept

    Returns:
        Dictionary mapping uid to Annotation

    Raises:
        InputFormatError: On malformed lines, text that is not UTF-8, or a
            missing/malformed ``uid`` attribute
    """
    annotations: dict[UUID, Annotation] = {}

    with open_text(file_name) as handle:
        try:
            for rec in GFF.parse(handle):
                for feature in _walk_features(rec.features):
                    if feature.type != feature_type:
                        continue
                    annotation = _to_annotation(feature, rec.id, file_name)
                    annotations[annotation.uid] = annotation
        except InputFormatError:
            raise
        except (ValueError, AssertionError, IndexError) as e:
            raise InputFormatError(f"Cannot parse GFF: {e}", file_name) from None

    logger.info("gff_read_complete", file=str(file_name), feature_type=feature_type, count=len(annotations))
    return annotations

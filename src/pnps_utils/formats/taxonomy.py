"""Minimal taxonomy used to turn taxon ids into lineage strings."""

from dataclasses import dataclass
from pathlib import Path

import structlog

from pnps_utils.errors import InputFormatError, TaxonomyError
from pnps_utils.formats.files import iter_lines

logger = structlog.get_logger(__name__)

LINEAGE_SEPARATOR = ";"


@dataclass(frozen=True)
class Taxon:
    taxon_id: int
    parent_id: int
    name: str
    rank: str = ""


class Taxonomy:
    """Taxon id -> Taxon lookup with lineage resolution.

    Taxon id 0 is reserved for "no taxon" and always resolves to an empty
    lineage, as does an empty taxonomy queried for 0.
    """

    def __init__(self, taxa: list[Taxon] | None = None):
        self.taxa: dict[int, Taxon] = {}
        for taxon in taxa or []:
            self.add_taxon(taxon)

    def add_taxon(self, taxon: Taxon) -> None:
        self.taxa[taxon.taxon_id] = taxon

    def __len__(self) -> int:
        return len(self.taxa)

    def __contains__(self, taxon_id: int) -> bool:
        return taxon_id in self.taxa

    def get_lineage(self, taxon_id: int) -> list[Taxon]:
        """Return taxa from the root down to ``taxon_id``.

        Raises:
            TaxonomyError: If the taxon or one of its ancestors is unknown,
                or the parent links form a cycle
        """
        lineage: list[Taxon] = []
        seen: set[int] = set()
        current = taxon_id
        while current != 0:
            if current in seen:
                raise TaxonomyError(f"Cycle in taxonomy at taxon {current}")
            seen.add(current)
            taxon = self.taxa.get(current)
            if taxon is None:
                raise TaxonomyError(f"Cannot build lineage string, unknown taxon {current}")
            lineage.append(taxon)
            # roots point to themselves or to 0
            if taxon.parent_id == current:
                break
            current = taxon.parent_id
        lineage.reverse()
        return lineage

    def get_lineage_string(self, taxon_id: int) -> str:
        """Names from the root down to ``taxon_id``, ``;`` separated."""
        return LINEAGE_SEPARATOR.join(taxon.name for taxon in self.get_lineage(taxon_id))

    @classmethod
    def read_from_file(cls, file_name: Path | str) -> "Taxonomy":
        """Load a taxonomy from a tab separated file.

        Columns: taxon id, parent id, name and an optional rank. Lines
        starting with ``#`` are ignored.

        Raises:
            InputFormatError: If a line has fewer than 3 columns or ids
                are not integers
        """
        taxonomy = cls()
        for line_number, line in iter_lines(file_name):
            if line.startswith("#") or not line.strip():
                continue
            fields = line.rstrip("\n").split("\t")
            if len(fields) < 3:
                raise InputFormatError(
                    f"Expected at least 3 columns, got {len(fields)}", file_name, line_number
                )
            try:
                taxon_id = int(fields[0])
                parent_id = int(fields[1])
            except ValueError:
                raise InputFormatError("Cannot parse taxon ids", file_name, line_number) from None
            rank = fields[3] if len(fields) > 3 else ""
            taxonomy.add_taxon(Taxon(taxon_id, parent_id, fields[2], rank))

        logger.info("taxonomy_read_complete", file=str(file_name), taxa=len(taxonomy))
        return taxonomy

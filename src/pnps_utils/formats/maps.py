"""Tab separated maps keyed by annotation UID.

- gene map: UID -> comma separated external gene ids
- taxon map: UID -> integer taxon id
- lineage map: UID -> literal lineage string

Lines starting with ``#`` and empty lines are ignored, as are lines
without a tab.
"""

from pathlib import Path
from typing import Callable, Iterator, TypeVar
from uuid import UUID

import structlog

from pnps_utils.errors import InputFormatError
from pnps_utils.formats.files import iter_lines
from pnps_utils.formats.gff import parse_uid

logger = structlog.get_logger(__name__)

T = TypeVar("T")

GeneMap = dict[UUID, list[str]]
TaxonMap = dict[UUID, int]
LineageMap = dict[UUID, str]


def _iter_map_lines(file_name: Path | str) -> Iterator[tuple[int, str, str]]:
    for line_number, line in iter_lines(file_name):
        line = line.rstrip("\n")
        if line.startswith("#") or not line:
            continue
        key, sep, value = line.strip().partition("\t")
        if not sep:
            continue
        yield line_number, key, value


def _read_map(
    file_name: Path | str,
    convert: Callable[[str, int], T],
) -> dict[UUID, T]:
    result: dict[UUID, T] = {}
    for line_number, key, value in _iter_map_lines(file_name):
        uid = parse_uid(key, file_name, line_number)
        result[uid] = convert(value, line_number)
    return result


def read_gene_map(file_name: Path | str) -> GeneMap:
    """Read a UID -> gene ids map, gene ids comma separated in column 2."""
    gene_map = _read_map(file_name, lambda value, _: value.split(","))
    logger.info("gene_map_read_complete", file=str(file_name), count=len(gene_map))
    return gene_map


def read_taxon_map(file_name: Path | str) -> TaxonMap:
    """Read a UID -> taxon id map.

    Raises:
        InputFormatError: If a taxon id is not a non-negative integer
    """
    def convert(value: str, line_number: int) -> int:
        try:
            taxon_id = int(value.strip())
        except ValueError:
            raise InputFormatError(f"Cannot convert taxon ID {value!r}", file_name, line_number) from None
        if taxon_id < 0:
            raise InputFormatError(f"Negative taxon ID {taxon_id}", file_name, line_number)
        return taxon_id

    taxon_map = _read_map(file_name, convert)
    logger.info("taxon_map_read_complete", file=str(file_name), count=len(taxon_map))
    return taxon_map


def read_lineage_map(file_name: Path | str) -> LineageMap:
    """Read a UID -> lineage string map."""
    lineage_map = _read_map(file_name, lambda value, _: value)
    logger.info("lineage_map_read_complete", file=str(file_name), count=len(lineage_map))
    return lineage_map

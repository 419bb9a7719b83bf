"""FASTA reader for reference sequences."""

from pathlib import Path

import structlog
from Bio import SeqIO

from pnps_utils.errors import InputFormatError
from pnps_utils.formats.files import decode_error, open_text

logger = structlog.get_logger(__name__)


def read_fasta(file_name: Path | str) -> dict[str, str]:
    """Load all records of a FASTA file.

    Args:
        file_name: FASTA file, optionally gzipped

    Returns:
        Dictionary mapping record id to the upper case sequence

    Raises:
        InputFormatError: If the file holds no FASTA records or is not
            UTF-8 text
    """
    sequences: dict[str, str] = {}
    with open_text(file_name) as handle:
        try:
            for record in SeqIO.parse(handle, "fasta"):
                sequences[record.id] = str(record.seq).upper()
        except UnicodeDecodeError:
            raise decode_error(file_name) from None

    if not sequences:
        raise InputFormatError("No FASTA records found", file_name)

    logger.info("fasta_read_complete", file=str(file_name), count=len(sequences))
    return sequences

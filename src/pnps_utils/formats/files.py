"""Opening of plain and gzip compressed text files."""

import gzip
from functools import partial
from mimetypes import guess_type
from pathlib import Path
from typing import IO, Iterator

from pnps_utils.errors import InputFormatError


def open_text(file_name: Path | str, mode: str = "r") -> IO[str]:
    """Open a text file, decompressing transparently if it is gzipped.

    Compression is detected from the file name (``.gz``), the same way for
    reading and writing.

    Args:
        file_name: Path to the file
        mode: ``"r"`` or ``"w"``

    Returns:
        Text file handle
    """
    encoding = guess_type(str(file_name))[1]
    _open = partial(gzip.open, mode=f"{mode}t") if encoding == "gzip" else partial(open, mode=mode)
    return _open(file_name)


def decode_error(file_name: Path | str, line_number: int | None = None) -> InputFormatError:
    """InputFormatError for a file that is not UTF-8 text."""
    if line_number is None:
        return InputFormatError("Cannot decode UTF-8 text", file_name)
    return InputFormatError(f"Cannot decode UTF-8 text after line {line_number}", file_name)


def iter_lines(file_name: Path | str) -> Iterator[tuple[int, str]]:
    """Yield ``(line_number, line)`` pairs, 1-based, newline kept.

    Raises:
        InputFormatError: If the file is not valid UTF-8
    """
    line_number = 0
    with open_text(file_name) as handle:
        try:
            for line_number, line in enumerate(handle, start=1):
                yield line_number, line
        except UnicodeDecodeError:
            raise decode_error(file_name, line_number) from None

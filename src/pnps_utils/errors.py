"""Exception types raised by pnps-utils.

Fatal conditions (bad input files, missing reference sequences, config
mismatches) propagate to the CLI. ``SynonymyError`` is recoverable and is
caught by the variant classifier.
"""

from pathlib import Path


class PnPsError(Exception):
    """Base class for all pnps-utils errors."""


class InputFormatError(PnPsError, ValueError):
    """A required input file could not be parsed.

    Attributes:
        file_name: Path of the offending file
        line_number: 1-based line number (None when not line oriented)
    """

    def __init__(self, message: str, file_name: Path | str, line_number: int | None = None):
        self.file_name = str(file_name)
        self.line_number = line_number
        location = self.file_name
        if line_number is not None:
            location = f"{location}:{line_number}"
        super().__init__(f"{location}: {message}")


class MissingSequenceError(PnPsError, KeyError):
    """An annotation references a sequence absent from the FASTA file."""

    def __init__(self, seq_id: str, uid=None):
        self.seq_id = seq_id
        self.uid = uid
        super().__init__(seq_id)

    def __str__(self) -> str:
        return f"Cannot find sequence {self.seq_id} (annotation {self.uid})"


class ConfigMismatchError(PnPsError, ValueError):
    """Sample columns and depth files cannot be paired one to one."""

    def __init__(self, n_samples: int, n_depth_files: int):
        self.n_samples = n_samples
        self.n_depth_files = n_depth_files
        super().__init__(
            f"Length of samples ({n_samples}) in VCF file and number of "
            f"Depth files ({n_depth_files}) is not the same"
        )


class SynonymyError(PnPsError, ValueError):
    """A substitution could not be classified as synonymous or not."""


class TaxonomyError(PnPsError, KeyError):
    """A taxon id cannot be resolved to a lineage."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "Unknown taxon"

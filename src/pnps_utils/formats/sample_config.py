"""Sample config file: pairs VCF sample columns with depth files.

The file has three tab separated columns: sample display id, VCF column
name and depth file path. The ``config`` command writes a first version of
it from the VCF header, which can then be rearranged by hand.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

import structlog

from pnps_utils.errors import ConfigMismatchError, InputFormatError
from pnps_utils.formats.files import iter_lines

logger = structlog.get_logger(__name__)

CONFIG_HEADER = (
    "#Rearrange to make files and columns correspond\n"
    "#SAMPLE_ID\tVCF_COLUMN\tDEPTH_FILE"
)


@dataclass(frozen=True)
class SampleEntry:
    """Display id and depth file of one VCF sample column."""
    sample_id: str
    depth_file: Path


SampleInfo = dict[str, SampleEntry]


def read_sample_config(file_name: Path | str) -> SampleInfo:
    """Read a sample config file.

    Args:
        file_name: Config file written by the ``config`` command

    Returns:
        Mapping of VCF column name to SampleEntry, in file order

    Raises:
        InputFormatError: If a line has fewer than 3 columns
    """
    sample_info: SampleInfo = {}

    for line_number, line in iter_lines(file_name):
        if line.startswith("#") or not line.strip():
            continue
        fields = line.strip().split("\t")
        if len(fields) < 3:
            raise InputFormatError(
                f"Cannot parse sample information, expect 3 columns, got {len(fields)}",
                file_name,
                line_number,
            )
        sample_info[fields[1]] = SampleEntry(sample_id=fields[0], depth_file=Path(fields[2]))

    logger.info("sample_config_read_complete", file=str(file_name), samples=len(sample_info))
    return sample_info


def build_sample_config(
    vcf_samples: list[str],
    depth_files: list[Path | str],
) -> list[tuple[str, str, str]]:
    """Pair VCF sample columns with depth files, in order.

    Display ids are the file stems of the VCF column names, which
    usually are the BAM file paths given to the variant caller.

    Args:
        vcf_samples: Sample column names from the VCF header
        depth_files: Depth files, same order as the VCF columns

    Returns:
        List of (sample_id, vcf_column, depth_file) rows

    Raises:
        ConfigMismatchError: If the two lists differ in length
    """
    sample_ids = [Path(column).stem for column in vcf_samples]

    if len(depth_files) != len(sample_ids):
        raise ConfigMismatchError(len(sample_ids), len(depth_files))

    return [
        (sample_id, column, str(depth_file))
        for sample_id, column, depth_file in zip(sample_ids, vcf_samples, depth_files)
    ]


def write_sample_config(handle: TextIO, rows: list[tuple[str, str, str]]) -> None:
    """Write config rows, preceded by the header, to an open handle."""
    handle.write(CONFIG_HEADER + "\n")
    for sample_id, column, depth_file in rows:
        handle.write(f"{sample_id}\t{column}\t{depth_file}\n")
    handle.flush()

"""Per-base depth files as produced by ``samtools depth``."""

from bisect import bisect_left, bisect_right
from itertools import accumulate
from pathlib import Path

import polars as pl
import structlog

from pnps_utils.errors import InputFormatError

logger = structlog.get_logger(__name__)


class DepthMap:
    """Per sequence depth, queried as mean coverage over intervals.

    Positions are stored sorted with a running sum of depths, so an
    interval query is two binary searches.
    """

    def __init__(self):
        self._positions: dict[str, list[int]] = {}
        self._cumulative: dict[str, list[int]] = {}

    def add_sequence(self, seq_id: str, positions: list[int], depths: list[int]) -> None:
        """Register depths for a sequence; ``positions`` are 1-based and sorted."""
        self.add_cumulative(seq_id, positions, list(accumulate(depths)))

    def add_cumulative(self, seq_id: str, positions: list[int], cumulative: list[int]) -> None:
        """Register running depth sums, aligned with the sorted ``positions``."""
        self._positions[seq_id] = positions
        self._cumulative[seq_id] = cumulative

    def __contains__(self, seq_id: str) -> bool:
        return seq_id in self._positions

    def __len__(self) -> int:
        return len(self._positions)

    def total_depth(self, seq_id: str, start: int, end: int) -> int:
        """Sum of depths over the 0-based half-open interval ``[start, end)``."""
        positions = self._positions.get(seq_id)
        if not positions or end <= start:
            return 0
        cumulative = self._cumulative[seq_id]
        lo = bisect_left(positions, start + 1)
        hi = bisect_right(positions, end)
        if hi <= lo:
            return 0
        return cumulative[hi - 1] - (cumulative[lo - 1] if lo > 0 else 0)

    def coverage_at(self, seq_id: str, start: int, end: int) -> int:
        """Mean depth over ``[start, end)``, floored.

        Positions missing from the depth file count as zero depth and a
        sequence missing from the file has zero coverage.
        """
        if end <= start:
            return 0
        return self.total_depth(seq_id, start, end) // (end - start)


def read_depth_file(file_name: Path | str) -> DepthMap:
    """Read a ``samtools depth`` file.

    The first three tab separated columns are used (sequence id, 1-based
    position, depth); further sample columns are ignored.

    Args:
        file_name: Depth file, optionally gzipped

    Returns:
        DepthMap for the file

    Raises:
        InputFormatError: If the file is not UTF-8 text, or positions or
            depths are missing or not integers
    """
    file_name = Path(file_name)
    depth_map = DepthMap()

    try:
        df = pl.read_csv(
            file_name,
            separator="\t",
            has_header=False,
            comment_prefix="#",
            quote_char=None,
            infer_schema=False,
        )
    except pl.exceptions.NoDataError:
        logger.warning("depth_file_empty", file=str(file_name))
        return depth_map
    except pl.exceptions.PolarsError as e:
        raise InputFormatError(f"Cannot read depth file: {e}", file_name) from None

    if df.width < 3:
        raise InputFormatError(f"Expected at least 3 columns, got {df.width}", file_name)

    try:
        df = df.select(
            pl.col(df.columns[0]).alias("seq_id"),
            pl.col(df.columns[1]).cast(pl.Int64).alias("pos"),
            pl.col(df.columns[2]).cast(pl.Int64).alias("depth"),
        )
    except pl.exceptions.PolarsError as e:
        raise InputFormatError(f"Cannot parse depth values: {e}", file_name) from None

    missing = df.null_count().row(0)
    if any(missing):
        raise InputFormatError(
            f"Missing values in depth file: {dict(zip(df.columns, missing))}", file_name
        )

    df = df.sort(["seq_id", "pos"]).with_columns(
        pl.col("depth").cum_sum().over("seq_id").alias("cumulative")
    )
    for (seq_id,), part in df.group_by("seq_id", maintain_order=True):
        depth_map.add_cumulative(seq_id, part["pos"].to_list(), part["cumulative"].to_list())

    logger.debug("depth_read_complete", file=str(file_name), sequences=len(depth_map), rows=df.height)
    return depth_map

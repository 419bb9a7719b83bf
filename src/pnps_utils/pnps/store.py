"""JSON document holding a SamplePnPs table between ``parse`` and ``calc``."""

from pathlib import Path
from uuid import UUID

import structlog
from pydantic import TypeAdapter, ValidationError

from pnps_utils.errors import InputFormatError
from pnps_utils.formats.files import decode_error, open_text
from pnps_utils.pnps.models import PnPsRecord, SamplePnPs

logger = structlog.get_logger(__name__)

_SAMPLE_PNPS_ADAPTER = TypeAdapter(dict[str, dict[UUID, PnPsRecord]])


def save_sample_pnps(output_file: Path | str, pnps_map: SamplePnPs) -> Path:
    """Serialize the table to JSON, gzipped when the name ends in ``.gz``.

    Args:
        output_file: Destination path
        pnps_map: sample -> uid -> PnPsRecord

    Returns:
        Path written
    """
    output_file = Path(output_file)
    payload = _SAMPLE_PNPS_ADAPTER.dump_json(pnps_map).decode()
    with open_text(output_file, "w") as handle:
        handle.write(payload)
    logger.info("pnps_saved", file=str(output_file), samples=len(pnps_map))
    return output_file


def load_sample_pnps(input_file: Path | str) -> SamplePnPs:
    """Read a table written by ``save_sample_pnps``.

    Sample and UID order of the document are preserved.

    Raises:
        InputFormatError: If the document is not valid JSON or does not
            have the expected structure
    """
    with open_text(input_file) as handle:
        try:
            payload = handle.read()
        except UnicodeDecodeError:
            raise decode_error(input_file) from None
    try:
        pnps_map = _SAMPLE_PNPS_ADAPTER.validate_json(payload)
    except ValidationError as e:
        raise InputFormatError(f"Problem parsing the input file: {e}", input_file) from None
    logger.info("pnps_loaded", file=str(input_file), samples=len(pnps_map))
    return pnps_map

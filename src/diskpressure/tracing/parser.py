"""
Parsing of raw trace rows into ``TraceRecord`` objects.

Trace exports are tables of text. Column headers are matched loosely: case,
spaces and punctuation are ignored and a few common spellings are accepted
(``IO Type``/``io_type``, ``Size``/``io_size_bytes``, ...). The process may come
as separate name and id columns or as a single ``name (pid)`` column.

A row whose required field cannot be parsed raises ``MalformedRecordError``;
``parse_trace_rows`` drops such rows and counts them.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from ..models.trace import IoType, TraceRecord
from ..validation import MalformedRecordError

logger = logging.getLogger(__name__)

RawRow = Mapping[str, Any]

# Sizes, pids and queue depths are unsigned 64-bit quantities.
UINT64_MAX = 2**64 - 1

# Normalized header -> canonical field name.
_COLUMN_ALIASES: Dict[str, str] = {
    "iotype": "io_type",
    "type": "io_type",
    "starttime": "start_time",
    "starttimeus": "start_time",
    "endtime": "end_time",
    "completetime": "end_time",
    "completetimeus": "end_time",
    "iotime": "io_time_micros",
    "iotimeus": "io_time_micros",
    "iotimemicros": "io_time_micros",
    "diskservicetime": "disk_service_time_micros",
    "diskservicetimeus": "disk_service_time_micros",
    "diskservicetimemicros": "disk_service_time_micros",
    "disksvctime": "disk_service_time_micros",
    "disksvctimeus": "disk_service_time_micros",
    "queuedepth": "queue_depth_at_init",
    "queuedepthatinit": "queue_depth_at_init",
    "qdi": "queue_depth_at_init",
    "size": "io_size_bytes",
    "iosize": "io_size_bytes",
    "iosizebytes": "io_size_bytes",
    "processname": "process_name",
    "processid": "process_id",
    "pid": "process_id",
    "process": "process",
    "processnamepid": "process",
    "disk": "disk",
    "filename": "filename",
    "file": "filename",
}

_PROCESS_PID_RE = re.compile(r"^(?P<name>.*?)\s*\(\s*(?P<pid>\d+)\s*\)$")


def _normalize_header(header: str) -> str:
    return re.sub(r"[^a-z0-9]", "", header.lower())


def canonicalize_row(row: RawRow) -> Dict[str, str]:
    """Map raw column names to canonical field names, dropping unknown columns."""
    canonical: Dict[str, str] = {}
    for key, value in row.items():
        name = _COLUMN_ALIASES.get(_normalize_header(str(key)))
        if name is None or name in canonical:
            continue
        canonical[name] = "" if value is None else str(value).strip()
    return canonical


def parse_unsigned(text: str, field_name: str) -> int:
    """
    Parse an unsigned integer written in decimal or ``0x`` hexadecimal.

    Raises:
        MalformedRecordError: On empty, non-numeric, negative or
            larger than 64-bit input.
    """
    value = text.strip().replace(",", "")
    try:
        if value.lower().startswith("0x"):
            number = int(value, 16)
        else:
            number = int(value, 10)
    except ValueError:
        raise MalformedRecordError(
            f"{field_name} is not an unsigned integer: {text!r}",
            field_name=field_name,
            raw_value=text,
        )
    if number < 0:
        raise MalformedRecordError(
            f"{field_name} must not be negative: {text!r}",
            field_name=field_name,
            raw_value=text,
        )
    if number > UINT64_MAX:
        raise MalformedRecordError(
            f"{field_name} does not fit in 64 bits: {text!r}",
            field_name=field_name,
            raw_value=text,
        )
    return number


def _parse_float(fields: Dict[str, str], field_name: str, required: bool) -> float:
    text = fields.get(field_name, "")
    if not text:
        if required:
            raise MalformedRecordError(
                f"{field_name} is missing", field_name=field_name, raw_value=text
            )
        return 0.0
    try:
        return float(text.replace(",", ""))
    except ValueError:
        raise MalformedRecordError(
            f"{field_name} is not a number: {text!r}",
            field_name=field_name,
            raw_value=text,
        )


def _parse_io_type(text: str) -> IoType:
    for io_type in IoType:
        if text.lower() == io_type.value.lower():
            return io_type
    raise MalformedRecordError(
        f"Unknown I/O type: {text!r}", field_name="io_type", raw_value=text
    )


def _parse_process(fields: Dict[str, str]) -> Tuple[str, int]:
    name = fields.get("process_name", "")
    pid_text = fields.get("process_id", "")

    if not (name and pid_text):
        combined = fields.get("process", "")
        match = _PROCESS_PID_RE.match(combined)
        if match is None:
            raise MalformedRecordError(
                f"Cannot determine process from {combined or name!r}",
                field_name="process",
                raw_value=combined or name,
            )
        name, pid_text = match.group("name"), match.group("pid")

    if not name:
        raise MalformedRecordError(
            "process name is empty", field_name="process_name", raw_value=name
        )
    return name, parse_unsigned(pid_text, "process_id")


def parse_trace_record(row: RawRow) -> TraceRecord:
    """
    Parse one raw trace row.

    Args:
        row: Mapping of column header to text value

    Returns:
        The parsed TraceRecord

    Raises:
        MalformedRecordError: If a required field is missing or unparsable
    """
    fields = canonicalize_row(row)

    disk = fields.get("disk", "")
    if not disk:
        raise MalformedRecordError("disk is missing", field_name="disk", raw_value=disk)

    process_name, process_id = _parse_process(fields)
    queue_depth = fields.get("queue_depth_at_init", "")

    return TraceRecord(
        io_type=_parse_io_type(fields.get("io_type", "")),
        start_time=_parse_float(fields, "start_time", required=False),
        end_time=_parse_float(fields, "end_time", required=False),
        io_time_micros=_parse_float(fields, "io_time_micros", required=True),
        disk_service_time_micros=_parse_float(
            fields, "disk_service_time_micros", required=False
        ),
        queue_depth_at_init=(
            parse_unsigned(queue_depth, "queue_depth_at_init") if queue_depth else 0
        ),
        io_size_bytes=parse_unsigned(fields.get("io_size_bytes", ""), "io_size_bytes"),
        process_name=process_name,
        process_id=process_id,
        disk=disk,
        filename=fields.get("filename", ""),
    )


@dataclass
class ParseResult:
    """Records parsed from one capture, with diagnostics on dropped rows."""

    records: List[TraceRecord] = field(default_factory=list)
    malformed: int = 0
    # Malformed-row counts keyed by the offending field.
    malformed_by_field: Dict[str, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.records) + self.malformed


def parse_trace_rows(rows: Iterable[RawRow], sample_errors: Optional[int] = 3) -> ParseResult:
    """
    Parse all rows of a capture, skipping and counting malformed ones.

    Args:
        rows: Raw rows from the capture adapter
        sample_errors: How many individual parse errors to log at WARNING;
            the rest are logged at DEBUG. None logs all of them.

    Returns:
        ParseResult with the valid records in input order
    """
    result = ParseResult()
    for index, row in enumerate(rows):
        try:
            result.records.append(parse_trace_record(row))
        except MalformedRecordError as e:
            result.malformed += 1
            result.malformed_by_field[e.field_name] = (
                result.malformed_by_field.get(e.field_name, 0) + 1
            )
            if sample_errors is None or result.malformed <= sample_errors:
                logger.warning(f"Dropping malformed trace row {index}: {e}")
            else:
                logger.debug(f"Dropping malformed trace row {index}: {e}")

    if result.malformed:
        logger.info(
            f"Parsed {len(result.records)} trace records, dropped {result.malformed} "
            f"malformed rows {result.malformed_by_field}"
        )
    return result

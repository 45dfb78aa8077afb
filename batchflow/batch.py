"""Batch records and reading CSV batches out of byte chunks by offset."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from .strutil import clean_alpha_numerics_list, clean_record, read_single_record

CSVRow = dict[str, str]
Transformer = Callable[[list[str]], Mapping[str, Any]]

VALUE_EXCLUDES = ".-_#&@"


@dataclass
class BatchResult:
    """Outcome of processing one record: a result or an error message."""

    result: Any = None
    error: str = ""


@dataclass
class BatchRecord:
    """One record of a batch with its byte range inside the batch."""

    start: int = 0
    end: int = 0
    data: CSVRow | None = None
    batch_result: BatchResult = field(default_factory=BatchResult)
    done: bool = False


@dataclass
class BatchProcess:
    """A batch of records read from a source starting at ``start_offset``."""

    records: list[BatchRecord] = field(default_factory=list)
    next_offset: int = 0
    start_offset: int = 0
    done: bool = False


class _CSVParseError(ValueError):
    pass


class _RecordReader:
    """Strict CSV record reader over bytes that tracks its input offset."""

    def __init__(self, data: bytes, delimiter: str) -> None:
        if len(delimiter) != 1 or delimiter in '\r\n"':
            raise ValueError(f"invalid field delimiter: {delimiter!r}")
        self._data = data
        self._delim = delimiter.encode("utf-8")
        self.offset = 0

    def _read_line(self) -> bytes | None:
        if self.offset >= len(self._data):
            return None
        end = self._data.find(b"\n", self.offset)
        end = len(self._data) if end < 0 else end + 1
        line = self._data[self.offset : end]
        self.offset = end
        if line.endswith(b"\r\n"):
            return line[:-2] + b"\n"
        if line.endswith(b"\r"):
            return line[:-1]
        return line

    def read(self) -> list[str] | None:
        """Return the next record, or ``None`` once the input is exhausted."""
        while True:
            line = self._read_line()
            if line is None:
                return None
            if line not in (b"", b"\n"):
                break

        delim = self._delim
        fields: list[bytes] = []
        while True:
            if not line.startswith(b'"'):
                idx = line.find(delim)
                if idx >= 0:
                    value = line[:idx]
                else:
                    value = line[:-1] if line.endswith(b"\n") else line
                if b'"' in value:
                    raise _CSVParseError('bare " in non-quoted field')
                fields.append(value)
                if idx < 0:
                    return self._decode(fields)
                line = line[idx + len(delim) :]
                continue

            line = line[1:]
            parts: list[bytes] = []
            while True:
                idx = line.find(b'"')
                if idx >= 0:
                    parts.append(line[:idx])
                    line = line[idx + 1 :]
                    if line.startswith(b'"'):
                        parts.append(b'"')
                        line = line[1:]
                    elif line.startswith(delim):
                        line = line[len(delim) :]
                        fields.append(b"".join(parts))
                        break
                    elif line in (b"", b"\n"):
                        fields.append(b"".join(parts))
                        return self._decode(fields)
                    else:
                        raise _CSVParseError('extraneous or missing " in quoted field')
                elif line:
                    parts.append(line)
                    following = self._read_line()
                    if following is None:
                        raise _CSVParseError('extraneous or missing " in quoted field')
                    line = following
                else:
                    raise _CSVParseError('extraneous or missing " in quoted field')

    @staticmethod
    def _decode(fields: list[bytes]) -> list[str]:
        return [value.decode("utf-8", errors="replace") for value in fields]


def _complete_lines(data: bytes) -> bytes:
    """Drop a trailing partial line; keep everything if there is no newline."""
    last = data.rfind(b"\n")
    return data[: last + 1] if last >= 0 else data


def _scan(
    buffer: bytes, delimiter: str
) -> Iterator[tuple[int, int, list[str] | None, str | None]]:
    """Yield ``(start, end, fields, error)`` for each record in ``buffer``.

    A record that fails strict parsing is retried after removing asterisks and
    field quotes; if that fails too, it is yielded with an error message.
    """
    reader = _RecordReader(buffer, delimiter)
    while True:
        start = reader.offset
        try:
            fields = reader.read()
        except _CSVParseError:
            end = reader.offset
            raw = buffer[start:end].decode("utf-8", errors="replace")
            try:
                fields = read_single_record(clean_record(raw))
            except ValueError as exc:
                yield start, end, None, f"read data row: {exc}"
                continue
            yield start, end, fields, None
            continue
        if fields is None:
            return
        yield start, reader.offset, fields, None


def _to_row(fields: list[str], transform: Transformer | None) -> CSVRow:
    if transform is None:
        raise ValueError("no transformer set for csv rows")
    values = clean_alpha_numerics_list(fields, VALUE_EXCLUDES)
    mapped = transform(values)
    return {key: value if isinstance(value, str) else "" for key, value in mapped.items()}


def read_csv_batch(
    data: bytes,
    offset: int,
    delimiter: str = ",",
    has_header: bool = False,
    transform: Transformer | None = None,
) -> tuple[list[BatchRecord], int]:
    """Parse the complete lines of ``data`` read at ``offset`` into records.

    Returns the records and the absolute offset just after the last record
    consumed. When ``has_header`` is set and ``offset`` is 0 the first record
    is skipped as the header. Record ``end`` values are relative to ``offset``.
    """
    if not data:
        return [], offset

    buffer = _complete_lines(data)
    records: list[BatchRecord] = []
    start_index = offset
    consumed = 0
    for start, end, fields, error in _scan(buffer, delimiter):
        consumed = end
        if fields is None:
            records.append(
                BatchRecord(start=start, end=end, batch_result=BatchResult(error=error or ""))
            )
            start_index = start
            continue
        if start_index <= 0 and start <= 0 and has_header:
            start_index = start
            continue
        records.append(BatchRecord(start=start_index, end=end, data=_to_row(fields, transform)))
        start_index = start

    return records, offset + consumed


def read_csv_stream(
    data: bytes,
    offset: int,
    delimiter: str = ",",
    has_header: bool = False,
    transform: Transformer | None = None,
) -> Iterator[BatchRecord]:
    """Yield the records of the complete lines of ``data`` read at ``offset``.

    Each record carries its own byte range relative to ``offset``.
    """
    if not data:
        return

    buffer = _complete_lines(data)
    start_index = offset
    for start, end, fields, error in _scan(buffer, delimiter):
        if fields is None:
            yield BatchRecord(start=start, end=end, batch_result=BatchResult(error=error or ""))
            start_index = start
            continue
        if start_index <= 0 and start <= 0 and has_header:
            start_index = start
            continue
        start_index = start
        yield BatchRecord(start=start, end=end, data=_to_row(fields, transform))
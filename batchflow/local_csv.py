"""CSV source that reads batches from a local file by byte offset."""

from __future__ import annotations

import csv
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import ClassVar

from .batch import BatchProcess, BatchRecord, Transformer, read_csv_batch, read_csv_stream
from .strutil import clean_headers, map_tokens

LOCAL_CSV_SOURCE = "local-csv-source"

ERR_LOCAL_CSV_PATH_REQUIRED = "local csv: path is required"
ERR_LOCAL_CSV_TRANSFORMER_NIL = (
    "local csv: transformer function is not set for local CSV source with headers"
)
ERR_LOCAL_CSV_FILE_OPEN = "local csv: open"
ERR_LOCAL_CSV_SIZE_INVALID = "local csv: size must be greater than 0"


class LocalCSVError(Exception):
    """Raised when a local CSV source cannot be built or read."""


def build_transformer(
    headers: Sequence[str], rules: Mapping[str, str] | None = None
) -> Transformer:
    """Build a function mapping row values to a dict keyed by the headers.

    ``rules`` renames headers to output keys; headers without a rule keep their
    name. Values past the last header are dropped, missing values become "".
    """
    keys = map_tokens(headers, rules or {})

    def transform(values: list[str]) -> dict[str, str]:
        return {key: values[i] if i < len(values) else "" for i, key in enumerate(keys)}

    return transform


@dataclass
class LocalCSVSource:
    """Reads batches of CSV rows from a local file."""

    path: str
    delimiter: str = ","
    has_header: bool = False
    transform: Transformer | None = None
    closed: bool = field(default=False, init=False, compare=False, repr=False)

    name: ClassVar[str] = LOCAL_CSV_SOURCE

    def _read_chunk(self, offset: int, size: int) -> bytes:
        if size <= 0:
            raise LocalCSVError(ERR_LOCAL_CSV_SIZE_INVALID)
        try:
            handle = open(self.path, "rb")
        except OSError as exc:
            raise LocalCSVError(f"{ERR_LOCAL_CSV_FILE_OPEN}: {exc}") from exc
        with handle:
            try:
                handle.seek(offset)
                return handle.read(size)
            except OSError as exc:
                raise LocalCSVError(
                    f"error reading file {self.path} at offset {offset}: {exc}"
                ) from exc

    def next(self, offset: int, size: int) -> BatchProcess:
        """Read up to ``size`` bytes at ``offset`` and parse their complete rows."""
        if size <= 0:
            raise LocalCSVError(ERR_LOCAL_CSV_SIZE_INVALID)
        if self.has_header and self.transform is None:
            raise LocalCSVError(ERR_LOCAL_CSV_TRANSFORMER_NIL)
        data = self._read_chunk(offset, size)
        records, next_offset = read_csv_batch(
            data, offset, self.delimiter, self.has_header, self.transform
        )
        return BatchProcess(
            records=records,
            next_offset=next_offset,
            start_offset=offset,
            done=len(data) < size,
        )

    def next_stream(self, offset: int, size: int) -> Iterator[BatchRecord]:
        """Read up to ``size`` bytes at ``offset`` and return an iterator of rows.

        When the end of the file was reached, a record marked ``done`` comes first.
        """
        data = self._read_chunk(offset, size)
        return self._stream(data, offset, len(data) < size)

    def _stream(self, data: bytes, offset: int, done: bool) -> Iterator[BatchRecord]:
        if done:
            yield BatchRecord(start=offset, end=offset, done=True)
        yield from read_csv_stream(
            data, offset, self.delimiter, self.has_header, self.transform
        )

    def close(self) -> None:
        """Mark the source closed; no file is held open between reads."""
        self.closed = True

    def __enter__(self) -> LocalCSVSource:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


@dataclass
class LocalCSVConfig:
    """Settings for a local CSV source."""

    path: str = ""
    delimiter: str = ","
    has_header: bool = False
    mapping_rules: Mapping[str, str] | None = None

    name: ClassVar[str] = LOCAL_CSV_SOURCE

    def build_source(self) -> LocalCSVSource:
        """Build the source, reading and cleaning the header row when there is one."""
        if not self.path:
            raise LocalCSVError(ERR_LOCAL_CSV_PATH_REQUIRED)
        delimiter = self.delimiter or ","
        source = LocalCSVSource(path=self.path, delimiter=delimiter, has_header=self.has_header)

        if self.has_header:
            try:
                handle = open(self.path, newline="", encoding="utf-8", errors="replace")
            except OSError as exc:
                raise LocalCSVError(f"{ERR_LOCAL_CSV_FILE_OPEN}: {exc}") from exc
            with handle:
                reader = csv.reader(handle, delimiter=delimiter, strict=True)
                try:
                    header = next((row for row in reader if row), [])
                except csv.Error as exc:
                    raise LocalCSVError(f"local csv: read header: {exc}") from exc
            source.transform = build_transformer(
                clean_headers(header), self.mapping_rules or {}
            )

        return source
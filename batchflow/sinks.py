"""Sinks that write batches of records: MongoDB and a no-op sink."""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, ClassVar, Protocol, runtime_checkable
from urllib.parse import quote_plus

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from .batch import BatchProcess, BatchResult

MONGO_SINK = "mongo-sink"
NOOP_SINK = "noop-sink"

ERR_MONGO_SINK_NIL_CLIENT = "mongo sink: nil client"
ERR_MONGO_SINK_EMPTY_COLL = "mongo sink: empty collection"
ERR_MONGO_SINK_EMPTY_DATA = "mongo sink: empty data, nothing to write"
ERR_MONGO_SINK_DB_PROTOCOL = "mongo sink: DB protocol is required"
ERR_MONGO_SINK_DB_HOST = "mongo sink: DB host is required"
ERR_MONGO_SINK_DB_NAME = "mongo sink: DB name is required"
ERR_MONGO_SINK_DB_USER = "mongo sink: DB user is required"
ERR_MONGO_SINK_DB_CREDENTIAL = "mongo sink: DB password is required"
ERR_MONGO_SINK_COLL_REQUIRED = "mongo sink: collection name is required"

_EMPTY = ""


class SinkError(Exception):
    """Raised when a sink cannot be built or cannot write."""


@runtime_checkable
class MongoDocWriter(Protocol):
    """The small capability a MongoDB sink needs from its client."""

    def add_collection_doc(self, collection_name: str, doc: dict[str, Any]) -> str:
        """Insert ``doc`` into the named collection and return its id."""
        ...

    def close(self) -> None:
        """Release the client's connections."""
        ...


def to_map_any(record: Any) -> dict[str, Any]:
    """Convert a record to a dict.

    Dicts pass through unchanged, other mappings are copied, dataclasses are
    converted field by field and anything else goes through a JSON round trip,
    which must yield a JSON object. Raises :class:`ValueError` otherwise.
    """
    if isinstance(record, dict):
        return record
    if isinstance(record, Mapping):
        return dict(record)
    if dataclasses.is_dataclass(record) and not isinstance(record, type):
        return dataclasses.asdict(record)

    try:
        encoded = json.dumps(record)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"marshal: {exc}") from exc
    decoded = json.loads(encoded)
    if decoded is None:
        return {}
    if not isinstance(decoded, dict):
        raise ValueError(
            f"unmarshal: cannot decode JSON {type(decoded).__name__} into a mapping"
        )
    return decoded


class _MongoStore:
    """Document writer backed by a MongoDB database."""

    def __init__(self, uri: str, db_name: str) -> None:
        self._client: MongoClient = MongoClient(uri)
        try:
            self._client.admin.command("ping")
        except PyMongoError:
            self._client.close()
            raise
        self._db = self._client[db_name]

    def add_collection_doc(self, collection_name: str, doc: dict[str, Any]) -> str:
        result = self._db[collection_name].insert_one(dict(doc))
        return str(result.inserted_id)

    def close(self) -> None:
        self._client.close()


@dataclass
class MongoSink:
    """Writes each record of a batch as a document into a MongoDB collection."""

    client: MongoDocWriter | None
    collection: str

    name: ClassVar[str] = MONGO_SINK

    def _check(self) -> None:
        if self.client is None:
            raise SinkError(ERR_MONGO_SINK_NIL_CLIENT)
        if not self.collection:
            raise SinkError(ERR_MONGO_SINK_EMPTY_COLL)

    def _insert(self, index: int, data: Any) -> BatchResult:
        assert self.client is not None
        try:
            doc = to_map_any(data)
        except ValueError as exc:
            return BatchResult(error=f"record {index} convert: {exc}")
        try:
            inserted = self.client.add_collection_doc(self.collection, doc)
        except Exception as exc:  # recorded on the record, not raised
            return BatchResult(error=f"record {index} insert: {exc}")
        return BatchResult(result=inserted)

    def write(self, batch: BatchProcess) -> BatchProcess:
        """Insert every record not already in error; record per-record outcomes."""
        self._check()
        if not batch.records:
            raise SinkError(ERR_MONGO_SINK_EMPTY_DATA)

        for index, record in enumerate(batch.records):
            if record.batch_result.error:
                continue
            outcome = self._insert(index, record.data)
            if outcome.error:
                record.batch_result.error = outcome.error
            else:
                record.batch_result.result = outcome.result
        return batch

    def write_stream(self, start: int, data: Sequence[Any]) -> Iterator[BatchResult]:
        """Validate, then return an iterator of the results of inserting ``data``."""
        self._check()
        if not data:
            raise SinkError(ERR_MONGO_SINK_EMPTY_DATA)
        return self._stream(list(data))

    def _stream(self, data: list[Any]) -> Iterator[BatchResult]:
        for index, item in enumerate(data):
            yield self._insert(index, item)

    def close(self) -> None:
        """Close the underlying client."""
        if self.client is None:
            raise SinkError(ERR_MONGO_SINK_NIL_CLIENT)
        self.client.close()

    def __enter__(self) -> MongoSink:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


@dataclass
class MongoSinkConfig:
    """Connection settings and target collection for a MongoDB sink."""

    protocol: str = _EMPTY
    host: str = _EMPTY
    db_name: str = _EMPTY
    user: str = _EMPTY
    pwd: str = _EMPTY
    params: str = _EMPTY
    collection: str = _EMPTY

    name: ClassVar[str] = MONGO_SINK

    def _validate(self) -> None:
        required = (
            (self.protocol, ERR_MONGO_SINK_DB_PROTOCOL),
            (self.host, ERR_MONGO_SINK_DB_HOST),
            (self.db_name, ERR_MONGO_SINK_DB_NAME),
            (self.user, ERR_MONGO_SINK_DB_USER),
            (self.pwd, ERR_MONGO_SINK_DB_CREDENTIAL),
            (self.collection, ERR_MONGO_SINK_COLL_REQUIRED),
        )
        for value, message in required:
            if not value:
                raise SinkError(message)

    def _uri(self) -> str:
        uri = (
            f"{self.protocol}://{quote_plus(self.user)}:{quote_plus(self.pwd)}"
            f"@{self.host}/{self.db_name}"
        )
        return f"{uri}?{self.params}" if self.params else uri

    def build_sink(self) -> MongoSink:
        """Validate the settings, connect and return a sink."""
        self._validate()
        try:
            store = _MongoStore(self._uri(), self.db_name)
        except PyMongoError as exc:
            raise SinkError(f"mongo sink: create store: {exc}") from exc
        return MongoSink(client=store, collection=self.collection)


@dataclass
class NoopSink:
    """Sink that writes nothing and echoes each record's data as its result."""

    closed: bool = field(default=False, init=False, compare=False, repr=False)

    name: ClassVar[str] = NOOP_SINK

    def write(self, batch: BatchProcess) -> BatchProcess:
        """Echo every record's data as its result and mark the batch done."""
        for record in batch.records:
            record.batch_result.result = record.data
        batch.done = True
        return batch

    def close(self) -> None:
        """Mark the sink closed; it holds no resources."""
        self.closed = True

    def __enter__(self) -> NoopSink:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


@dataclass
class NoopSinkConfig:
    """Settings for a no-op sink; there are none."""

    name: ClassVar[str] = NOOP_SINK

    def build_sink(self) -> NoopSink:
        """Return a new no-op sink."""
        return NoopSink()
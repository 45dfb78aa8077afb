"""Batch request and configuration builders driven by environment variables."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Union

DEFAULT_DATA_DIR = "data"
DEFAULT_DATA_PATH = "scheduler"
DEFAULT_FILE_NAME = "Agents-sm.csv"
DEFAULT_METRICS_PORT = "9464"
DEFAULT_OTEL_ENDPOINT = "otel-collector:4317"

_log = logging.getLogger(__name__)


@dataclass
class MongoBatchConfig:
    """Connection settings for a MongoDB database."""

    protocol: str = ""
    host: str = ""
    user: str = ""
    pwd: str = ""
    params: str = ""
    name: str = ""


@dataclass
class LocalCSVBatchConfig:
    """Location of a CSV file on the local file system."""

    name: str = ""
    path: str = ""


@dataclass
class CloudCSVBatchConfig:
    """Location of a CSV object in a cloud storage bucket."""

    name: str = ""
    path: str = ""
    bucket: str = ""


@dataclass
class LocalCSVMongoBatchConfig:
    """A local CSV file to be loaded into a MongoDB collection."""

    csv: LocalCSVBatchConfig = field(default_factory=LocalCSVBatchConfig)
    mongo: MongoBatchConfig = field(default_factory=MongoBatchConfig)
    collection: str = ""


@dataclass
class CloudCSVMongoBatchConfig:
    """A cloud CSV object to be loaded into a MongoDB collection."""

    csv: CloudCSVBatchConfig = field(default_factory=CloudCSVBatchConfig)
    mongo: MongoBatchConfig = field(default_factory=MongoBatchConfig)
    collection: str = ""


BatchConfig = Union[
    LocalCSVBatchConfig,
    CloudCSVBatchConfig,
    LocalCSVMongoBatchConfig,
    CloudCSVMongoBatchConfig,
]


@dataclass
class BatchRequest:
    """A batch processing request: limits, mapping rules and where the data lives."""

    max_batches: int
    batch_size: int
    config: BatchConfig
    mapping_rules: Mapping[str, str] | None = None


def build_file_path() -> str:
    """Data path under ``DATA_DIR`` (default ``data``); raises if it does not exist."""
    data_dir = os.environ.get("DATA_DIR", "")
    if not data_dir:
        data_dir = DEFAULT_DATA_DIR
        _log.info("DATA_DIR environment variable is not set, using default: %s", data_dir)

    file_path = f"{data_dir}/{DEFAULT_DATA_PATH}"
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"data path does not exist: {file_path}")
    return file_path


def build_file_name() -> str:
    """File name from ``FILE_NAME``, or the default sample file name."""
    file_name = os.environ.get("FILE_NAME", "")
    if not file_name:
        file_name = DEFAULT_FILE_NAME
        _log.info("FILE_NAME environment variable is not set, using default: %s", file_name)
    return file_name


def build_mongo_collection() -> str:
    """Collection name from ``MONGO_COLLECTION``; raises if it is not set."""
    collection = os.environ.get("MONGO_COLLECTION", "")
    if not collection:
        raise ValueError("MONGO_COLLECTION environment variable is not set")
    return collection


def _bucket() -> str:
    bucket = os.environ.get("BUCKET", "")
    if not bucket:
        raise ValueError("BUCKET environment variable is not set")
    return bucket


def build_mongo_config() -> MongoBatchConfig:
    """MongoDB settings from the ``MONGO_*`` environment variables."""
    env = os.environ
    return MongoBatchConfig(
        protocol=env.get("MONGO_PROTOCOL", ""),
        host=env.get("MONGO_HOSTNAME", ""),
        user=env.get("MONGO_USERNAME", ""),
        pwd=env.get("MONGO_PASSWORD", ""),
        params=env.get("MONGO_CONN_PARAMS", ""),
        name=env.get("MONGO_DBNAME", ""),
    )


def build_local_csv_batch_config() -> LocalCSVBatchConfig:
    """Local CSV location from the environment."""
    file_path = build_file_path()
    return LocalCSVBatchConfig(name=build_file_name(), path=file_path)


def build_cloud_csv_batch_config() -> CloudCSVBatchConfig:
    """Cloud CSV location from the environment; ``BUCKET`` is required."""
    file_name = build_file_name()
    return CloudCSVBatchConfig(name=file_name, path=DEFAULT_DATA_PATH, bucket=_bucket())


def build_local_csv_mongo_batch_config() -> LocalCSVMongoBatchConfig:
    """Local CSV to MongoDB settings from the environment."""
    file_path = build_file_path()
    file_name, mongo = build_file_name(), build_mongo_config()
    collection = build_mongo_collection()
    return LocalCSVMongoBatchConfig(
        csv=LocalCSVBatchConfig(name=file_name, path=file_path),
        mongo=mongo,
        collection=collection,
    )


def build_cloud_csv_mongo_batch_config() -> CloudCSVMongoBatchConfig:
    """Cloud CSV to MongoDB settings from the environment."""
    file_name = build_file_name()
    mongo = build_mongo_config()
    bucket = _bucket()
    collection = build_mongo_collection()
    return CloudCSVMongoBatchConfig(
        csv=CloudCSVBatchConfig(name=file_name, path=DEFAULT_DATA_PATH, bucket=bucket),
        mongo=mongo,
        collection=collection,
    )


def build_local_csv_batch_request(max_batches: int, size: int) -> BatchRequest:
    """Request for a local CSV file."""
    return BatchRequest(
        max_batches=max_batches, batch_size=size, config=build_local_csv_batch_config()
    )


def build_cloud_csv_batch_request(max_batches: int, size: int) -> BatchRequest:
    """Request for a cloud CSV object."""
    return BatchRequest(
        max_batches=max_batches, batch_size=size, config=build_cloud_csv_batch_config()
    )


def build_local_csv_mongo_batch_request(
    max_batches: int, size: int, mapping_rules: Mapping[str, str] | None
) -> BatchRequest:
    """Request for loading a local CSV file into MongoDB."""
    return BatchRequest(
        max_batches=max_batches,
        batch_size=size,
        config=build_local_csv_mongo_batch_config(),
        mapping_rules=mapping_rules,
    )


def build_cloud_csv_mongo_batch_request(
    max_batches: int, size: int, mapping_rules: Mapping[str, str] | None
) -> BatchRequest:
    """Request for loading a cloud CSV object into MongoDB."""
    return BatchRequest(
        max_batches=max_batches,
        batch_size=size,
        config=build_cloud_csv_mongo_batch_config(),
        mapping_rules=mapping_rules,
    )


def build_metrics_config() -> tuple[str, str]:
    """Metrics port and telemetry collector endpoint from the environment.

    A configured ``METRICS_PORT`` is returned as ``:<port>``; the default is
    returned as the bare port number.
    """
    metrics_port = os.environ.get("METRICS_PORT", "")
    metrics_port = f":{metrics_port}" if metrics_port else DEFAULT_METRICS_PORT
    otel_endpoint = os.environ.get("OTEL_ENDPOINT", "") or DEFAULT_OTEL_ENDPOINT
    return metrics_port, otel_endpoint


def generate_run_id(config: object) -> str:
    """Run identifier derived from a batch configuration."""
    match config:
        case LocalCSVBatchConfig(name=name, path=path):
            return f"{path}/{name}"
        case CloudCSVBatchConfig(name=name, path=path, bucket=bucket):
            return f"{bucket}-{path}/{name}"
        case LocalCSVMongoBatchConfig(csv=csv):
            return f"{csv.path}/{csv.name}"
        case CloudCSVMongoBatchConfig(csv=csv, collection=collection):
            return f"{csv.bucket}-{csv.path}/{csv.name}-{collection}"
        case _:
            raise TypeError(f"unknown batch config type: {type(config).__name__}")
# batchflow

Read delimited files in byte-bounded batches, clean and map each row, and
write the rows to a document store one batch at a time. Every batch knows
where it started and where the next one begins, so a long import can be
stopped and picked up again from a saved offset.

## Modules

- `batchflow.strutil` - string cleaning helpers for CSV headers and fields:
  `clean_alpha_numerics`, `clean_alpha_numerics_list`,
  `clean_leading_trailing`, `alnum_start`, `alnum_end`, `clean_headers`,
  `clean_record`, `clean_csv_line_quotes`, `read_single_record`,
  `lower_first` and `map_tokens`.
- `batchflow.batch` - the dataclasses `BatchResult`, `BatchRecord` and
  `BatchProcess`, and the readers `read_csv_batch` and `read_csv_stream`,
  which parse a chunk of bytes into records, drop a trailing partial line and
  report where the next read should start.
- `batchflow.local_csv` - `LocalCSVConfig` builds a `LocalCSVSource`, whose
  `next(offset, size)` returns one `BatchProcess` and whose
  `next_stream(offset, size)` returns an iterator of `BatchRecord`s.
  `build_transformer(headers, rules)` turns a header row and renaming rules
  into a row transformer. Problems raise `LocalCSVError`.
- `batchflow.sinks` - `MongoSinkConfig` builds a `MongoSink` that inserts each
  record as a document; `NoopSinkConfig` builds a `NoopSink` that echoes each
  record's data back as its result. `MongoDocWriter` is the protocol a Mongo
  sink's client must follow, and `to_map_any` turns a record into a plain
  dict. Problems raise `SinkError`.
- `batchflow.workflows` - the task queue name `APPLICATION_NAME`, `HOST_ID`,
  workflow and activity alias names, and `continue_as_new_for_batch` /
  `run_continue_as_new`, which advance a counter in bounded runs and chain
  runs until a total is reached.
- `batchflow.future` - `DelayedFuture(delay, fn, arg)`, a value computed in a
  background thread after a delay.
- `batchflow.environment` - builds batch configurations and `BatchRequest`s
  from environment variables, and `generate_run_id(config)` derives a run
  identifier from a configuration.

## Reading a file in batches

```python
from batchflow.local_csv import LocalCSVConfig

config = LocalCSVConfig(path="data/scheduler/agents.csv", delimiter="|", has_header=True)
source = config.build_source()

batch = source.next(0, 400)
for record in batch.records:
    print(record.start, record.end, record.data)

while not batch.done:
    batch = source.next(batch.next_offset, 400)

source.close()
```

The size is a number of bytes, not rows; choose one larger than the longest
line in the file. A read that ends in the middle of a line stops at the last
complete line, and `next_offset` (an absolute file offset) points at the
start of the incomplete one. `done` is set once a read returns fewer bytes
than asked for. Record `start`/`end` values are byte positions within the
chunk that was read.

With `has_header=True`, `build_source` reads the first row, cleans the names
with `clean_headers` and renames them through `mapping_rules`; each row then
becomes a dict keyed by those names, with field values cleaned by
`clean_alpha_numerics_list`. At offset 0 the header row is skipped.

A row that fails strict CSV parsing is retried after removing asterisks and
field quotes; if it still fails, the record carries the message in
`batch_result.error` instead of data.

`next_stream` yields the same records one at a time; when the end of the file
was reached, a record with `done=True` comes first.

## Writing batches

```python
from batchflow.sinks import MongoSinkConfig, NoopSinkConfig

with NoopSinkConfig().build_sink() as sink:
    written = sink.write(batch)      # every record's result is its data; batch.done is set

pwd = "password"
mongo = MongoSinkConfig(
    protocol="mongodb",
    host="localhost:27017",
    db_name="testdb",
    user="user",
    pwd=pwd,
    collection="people",
)
with mongo.build_sink() as sink:
    sink.write(batch)
```

`MongoSinkConfig.build_sink` requires a protocol, host, database name, user,
password and collection, raising `SinkError` for the first one missing, then
connects and pings the server. `MongoSink.write` skips records that already
carry an error; a record that fails to convert or insert gets its error
recorded and the rest of the batch goes on. `write_stream(start, data)`
returns an iterator of `BatchResult`s, one per item.

## Continue-as-new runs

```python
from batchflow.workflows import ContinueAsNewForBatchInput, run_continue_as_new

result = run_continue_as_new(ContinueAsNewForBatchInput(), 5, 27)
result.counter    # 27
result.run_count  # 6
```

`continue_as_new_for_batch` performs a single run and raises `ContinueAsNew`
carrying the input for the next run while the total is not yet reached.

## Delayed values

```python
from batchflow.future import DelayedFuture

fut = DelayedFuture(0.5, lambda name: "Hello, " + name, "world")
fut.is_ready()                  # False
fut.get(fut.arg(), timeout=5)   # "Hello, world"
```

`get` starts the computation on its first call, raises `TimeoutError` if the
value is not ready in time, and re-raises any exception the function raised.

## Configuration from the environment

| Variable | Used for | Default |
| --- | --- | --- |
| `DATA_DIR` | base directory of local files | `data` |
| `FILE_NAME` | file to process | `Agents-sm.csv` |
| `BUCKET` | cloud bucket | required for cloud configurations |
| `MONGO_COLLECTION` | target collection | required for Mongo configurations |
| `MONGO_PROTOCOL`, `MONGO_HOSTNAME`, `MONGO_USERNAME`, `MONGO_PASSWORD`, `MONGO_CONN_PARAMS`, `MONGO_DBNAME` | database connection | empty |
| `METRICS_PORT` | returned by `build_metrics_config` as `:<port>` | `9464` |
| `OTEL_ENDPOINT` | returned by `build_metrics_config` | `otel-collector:4317` |

Local files are looked up under `<DATA_DIR>/scheduler`; if that path is
missing, `build_file_path()` raises `FileNotFoundError`. Missing required
variables raise `ValueError`. `generate_run_id` raises `TypeError` for an
object that is not one of the four configuration classes.

```python
from batchflow.environment import build_local_csv_mongo_batch_config, generate_run_id

config = build_local_csv_mongo_batch_config()
print(generate_run_id(config))   # "<DATA_DIR>/scheduler/<FILE_NAME>"
```

## What the package does not do

- There is no cloud storage source: `CloudCSVBatchConfig` and the cloud alias
  names describe where such data lives, but nothing here reads from a bucket.
- There is no workflow engine, worker or scheduler service. The alias names
  are plain strings, and `run_continue_as_new` chains runs in-process.
- There is no command-line program; everything is used from Python.
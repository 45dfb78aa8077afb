import pytest

from batchflow.batch import (
    BatchProcess,
    BatchRecord,
    BatchResult,
    read_csv_batch,
    read_csv_stream,
)


def two_columns(values):
    return dict(zip(["id", "name"], values))


def three_columns(values):
    return dict(zip(["name", "id", "city"], values))


def test_empty_data_returns_offset():
    records, next_offset = read_csv_batch(b"", 17, ",", True, two_columns)
    assert records == []
    assert next_offset == 17


def test_header_is_skipped_at_start():
    data = b"id,name\n1,alpha\n2,beta\n"
    records, next_offset = read_csv_batch(data, 0, ",", True, two_columns)
    assert [r.data for r in records] == [
        {"id": "1", "name": "alpha"},
        {"id": "2", "name": "beta"},
    ]
    assert next_offset == len(data)
    assert next_offset == records[-1].end


def test_header_not_skipped_past_start():
    data = b"1,alpha\n2,beta\n"
    records, next_offset = read_csv_batch(data, 40, ",", True, two_columns)
    assert [r.data["name"] for r in records] == ["alpha", "beta"]
    assert next_offset == 40 + len(data)


def test_partial_trailing_line_is_left_for_next_batch():
    complete = b"1,alpha\n2,beta\n"
    records, next_offset = read_csv_batch(complete + b"3,gam", 10, ",", False, two_columns)
    assert len(records) == 2
    assert next_offset == 10 + len(complete)


def test_values_are_cleaned():
    data = b"!!1!!,**alpha  beta**\n"
    records, _ = read_csv_batch(data, 5, ",", False, two_columns)
    assert records[0].data == {"id": "1", "name": "alpha beta"}


def test_recovers_row_with_stray_quote_text():
    data = b'"FORENSIC TESTING SERVICES".|4841189|SAN DIEGO\n'
    records, next_offset = read_csv_batch(data, 3, "|", False, three_columns)
    assert records[0].data == {
        "name": "FORENSIC TESTING SERVICES",
        "id": "4841189",
        "city": "SAN DIEGO",
    }
    assert records[0].batch_result.error == ""
    assert next_offset == 3 + len(data)


def test_unrecoverable_row_becomes_error_record():
    data = b'ab"c|d\nx|y\n'
    records, next_offset = read_csv_batch(data, 3, "|", False, two_columns)
    assert records[0].data is None
    assert records[0].batch_result.error.startswith("read data row: ")
    assert records[1].data == {"id": "x", "name": "y"}
    assert next_offset == 3 + len(data)


def test_quoted_field_across_lines():
    data = b'"line one\nline two"|x\n'
    records, next_offset = read_csv_batch(data, 1, "|", False, two_columns)
    assert len(records) == 1
    assert records[0].data == {"id": "line one line two", "name": "x"}
    assert next_offset == 1 + len(data)


def test_crlf_line_endings():
    data = b"a,b\r\nc,d\r\n"
    records, next_offset = read_csv_batch(data, 2, ",", False, two_columns)
    assert [r.data for r in records] == [
        {"id": "a", "name": "b"},
        {"id": "c", "name": "d"},
    ]
    assert next_offset == 2 + len(data)


def test_blank_lines_are_skipped():
    data = b"a,b\n\n\nc,d\n"
    records, _ = read_csv_batch(data, 2, ",", False, two_columns)
    assert [r.data["id"] for r in records] == ["a", "c"]


def test_missing_transform_raises():
    with pytest.raises(ValueError):
        read_csv_batch(b"a,b\n", 2, ",", False, None)


def test_invalid_delimiter_raises():
    with pytest.raises(ValueError):
        read_csv_batch(b"a,b\n", 2, '"', False, two_columns)


def test_stream_records_are_contiguous():
    data = b"id,name\n1,alpha\n2,beta\n3,gamma\n"
    records = list(read_csv_stream(data, 0, ",", True, two_columns))
    assert [r.data["name"] for r in records] == ["alpha", "beta", "gamma"]
    for current, following in zip(records, records[1:]):
        assert current.end == following.start
    assert records[-1].end == len(data)


def test_stream_matches_batch_data():
    data = b'1,alpha\n2,"be,ta"\n3,gamma\n4,del'
    batch, _ = read_csv_batch(data, 9, ",", False, two_columns)
    streamed = list(read_csv_stream(data, 9, ",", False, two_columns))
    assert [r.data for r in batch] == [r.data for r in streamed]
    assert streamed[1].data["name"] == "be,ta"


def test_stream_error_record():
    records = list(read_csv_stream(b'ab"c|d\n', 4, "|", False, two_columns))
    assert len(records) == 1
    assert records[0].batch_result.error.startswith("read data row: ")


def test_dataclass_defaults():
    record = BatchRecord()
    assert record.batch_result == BatchResult()
    assert record.data is None and record.done is False
    assert BatchProcess().records == []
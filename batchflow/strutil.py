"""String helpers for cleaning CSV headers, records and field values."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from itertools import groupby

_LINE_PATTERN = re.compile(r"[^\n]*\n|[^\n]+")
_RECORD_DELIMITER = "|"


def _is_kept(ch: str, exclude: Iterable[str] | None) -> bool:
    return ch.isalpha() or ch.isdecimal() or (exclude is not None and ch in exclude)


def map_tokens(tokens: Iterable[str], mapping: Mapping[str, str]) -> list[str]:
    """Replace each token by its mapped value, keeping unmapped tokens as they are."""
    return [mapping.get(token, token) for token in tokens]


def lower_first(s: str) -> str:
    """Lower-case the first character of ``s``."""
    if not s:
        return ""
    return s[0].lower() + s[1:]


def alnum_start(s: str, exclude: Iterable[str] | None = None) -> int:
    """Index of the first letter, digit or excluded character.

    Returns -1 for an empty string and ``len(s)`` when no such character exists.
    """
    if not s:
        return -1
    exclude = set(exclude or ())
    return next((i for i, ch in enumerate(s) if _is_kept(ch, exclude)), len(s))


def alnum_end(s: str, exclude: Iterable[str] | None = None) -> int:
    """Index of the last letter, digit or excluded character, or -1 if none."""
    if not s:
        return -1
    exclude = set(exclude or ())
    return next(
        (i for i in range(len(s) - 1, -1, -1) if _is_kept(s[i], exclude)), -1
    )


def clean_alpha_numerics(
    s: str, space_separator: bool = True, exclude: Iterable[str] | None = None
) -> str:
    """Trim non-alphanumerics at both ends and collapse inner runs to one separator.

    Inner runs become a space when ``space_separator`` is true, otherwise an
    underscore. Characters in ``exclude`` count as alphanumeric.
    """
    exclude = set(exclude or ())
    start = alnum_start(s, exclude)
    end = alnum_end(s, exclude)
    if start < 0 or end < 0 or start > end:
        return ""

    separator = " " if space_separator else "_"
    pieces = []
    for kept, run in groupby(s[start : end + 1], key=lambda ch: _is_kept(ch, exclude)):
        pieces.append("".join(run) if kept else separator)
    return "".join(pieces)


def clean_alpha_numerics_list(
    values: Iterable[str], exclude: Iterable[str] | None = None
) -> list[str]:
    """Apply :func:`clean_alpha_numerics` with space separators to every value."""
    exclude = set(exclude or ())
    return [clean_alpha_numerics(value, True, exclude) for value in values]


def clean_leading_trailing(s: str, exclude: Iterable[str] | None = None) -> str:
    """Strip leading and trailing characters that are not alphanumeric."""
    start = alnum_start(s, exclude)
    end = alnum_end(s, exclude)
    if start < 0 or end < 0 or start > end:
        return ""
    return s[start : end + 1]


def clean_csv_line_quotes(line: str, separator: str = ",") -> str:
    """Drop the outermost pair of quotes (and what lies outside it) from each field."""
    separator = separator or ","
    fields = []
    for field in line.split(separator):
        first, last = field.find('"'), field.rfind('"')
        if first >= 0 and last > 0 and first < last and len(field) >= 2:
            field = field[first + 1 : last]
        fields.append(field)
    return separator.join(fields)


def clean_headers(headers: Iterable[str]) -> list[str]:
    """Normalise header names, joining words with underscores."""
    return [clean_alpha_numerics(header, False, "-_") for header in headers]


def clean_record(record: str) -> str:
    """Remove asterisks and field quotes from a pipe-delimited record line."""
    return clean_csv_line_quotes(record.replace("*", ""), "|")


def _lines(text: str) -> Iterator[str]:
    for match in _LINE_PATTERN.finditer(text):
        line = match.group()
        if line.endswith("\r\n"):
            line = line[:-2] + "\n"
        elif line.endswith("\r"):
            line = line[:-1]
        yield line


def read_single_record(record: str) -> list[str]:
    """Parse the first pipe-delimited CSV record in ``record``.

    Quoting rules are strict: a quote inside an unquoted field, or text after a
    closing quote, raises :class:`ValueError`. An input without any record also
    raises :class:`ValueError`.
    """
    delimiter = _RECORD_DELIMITER
    lines = _lines(record)
    line = next((ln for ln in lines if ln != "\n"), None)
    if line is None:
        raise ValueError("no record to read")

    fields: list[str] = []
    while True:
        if not line.startswith('"'):
            idx = line.find(delimiter)
            field = line[:idx] if idx >= 0 else line.removesuffix("\n")
            if '"' in field:
                raise ValueError('bare " in non-quoted field')
            fields.append(field)
            if idx < 0:
                return fields
            line = line[idx + len(delimiter) :]
            continue

        line = line[1:]
        parts: list[str] = []
        while True:
            idx = line.find('"')
            if idx >= 0:
                parts.append(line[:idx])
                line = line[idx + 1 :]
                if line.startswith('"'):
                    parts.append('"')
                    line = line[1:]
                elif line.startswith(delimiter):
                    line = line[len(delimiter) :]
                    fields.append("".join(parts))
                    break
                elif line in ("", "\n"):
                    fields.append("".join(parts))
                    return fields
                else:
                    raise ValueError('extraneous or missing " in quoted field')
            elif line:
                parts.append(line)
                line = next(lines, None)
                if line is None:
                    raise ValueError('extraneous or missing " in quoted field')
            else:
                raise ValueError('extraneous or missing " in quoted field')
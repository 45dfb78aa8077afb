import pytest

from batchflow.strutil import (
    alnum_end,
    alnum_start,
    clean_alpha_numerics,
    clean_alpha_numerics_list,
    clean_csv_line_quotes,
    clean_headers,
    clean_leading_trailing,
    clean_record,
    lower_first,
    map_tokens,
    read_single_record,
)

SAMPLES = [
    "!!hello--world!!",
    "___a***b___",
    "...hello...",
    "1234-5678-90",
    "$$$",
    "",
]


def test_map_tokens_keeps_unmapped():
    assert map_tokens(["a", "b", "c"], {"a": "x", "c": "z"}) == ["x", "b", "z"]


def test_lower_first():
    assert lower_first("CamelCase") == "camelCase"


def test_lower_first_empty():
    assert lower_first("") == ""


@pytest.mark.parametrize(
    "value, expected",
    [
        ("!!hello--world!!", "hello--world"),
        ("___a***b___", "___a b___"),
        ("...hello...", "...hello..."),
        ("1234-5678-90", "1234-5678-90"),
        ("$$$", ""),
        ("", ""),
    ],
)
def test_clean_alpha_numerics_with_exclude(value, expected):
    cleaned = clean_alpha_numerics(value, True, ".-_#")
    assert cleaned == expected
    for ch in "!*$":
        assert ch not in cleaned


def test_clean_alpha_numerics_underscore_separator():
    assert clean_alpha_numerics("  Entity   Name!! ", False, None) == "Entity_Name"


def test_clean_alpha_numerics_collapses_runs_to_space():
    assert clean_alpha_numerics("a!@#b$%c", True, None) == "a b c"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("!!hello--world!!", "hello--world"),
        ("___a***b___", "___a***b___"),
        ("...hello...", "...hello..."),
        ("1234-5678-90", "1234-5678-90"),
        ("$$$", ""),
        ("", ""),
    ],
)
def test_clean_leading_trailing(value, expected):
    assert clean_leading_trailing(value, ".-_#") == expected


def test_clean_leading_trailing_without_exclude():
    assert clean_leading_trailing("__a*b__", None) == "a*b"


def test_alnum_start_and_end():
    assert alnum_start("", None) == -1
    assert alnum_start("$$$", None) == 3
    assert alnum_start("!!a", None) == 2
    assert alnum_end("", None) == -1
    assert alnum_end("$$$", None) == -1
    assert alnum_end("a!!", None) == 0
    assert alnum_end("..a..", ".") == 4


def test_clean_csv_line_quotes_source_case():
    line = (
        '"FORENSIC TESTING SERVICES".|4841189||CHRISTOPHER|RAYMOND|BOMMARITO|'
        "1817 DALE STREET|||SAN DIEGO|CA|United States|92102|Individual Agent"
    )
    cleaned = clean_csv_line_quotes(line, "|").lower()
    assert '"' not in cleaned
    assert cleaned.startswith("forensic testing services|4841189||")


def test_clean_csv_line_quotes_default_separator():
    assert clean_csv_line_quotes('"a",b,"c"', "") == "a,b,c"


def test_clean_csv_line_quotes_leaves_single_quote():
    assert clean_csv_line_quotes('a"b|c', "|") == 'a"b|c'


def test_clean_alpha_numerics_list():
    original = list(SAMPLES)
    cleaned = clean_alpha_numerics_list(original, ".-_#&@")
    assert cleaned == [
        "hello--world",
        "___a b___",
        "...hello...",
        "1234-5678-90",
        "",
        "",
    ]
    for value in cleaned:
        for ch in "!*$":
            assert ch not in value
    assert original == SAMPLES


def test_clean_headers():
    assert clean_headers(["Entity Name", " ENTITY-NUM ", "a__b", "X (Y)"]) == [
        "Entity_Name",
        "ENTITY-NUM",
        "a__b",
        "X_Y",
    ]


def test_clean_record():
    assert clean_record('FOO*BAR|"quoted"|x') == "FOOBAR|quoted|x"


def test_read_single_record_simple():
    assert read_single_record("a|b|c") == ["a", "b", "c"]


def test_read_single_record_first_line_only():
    assert read_single_record("\n1|2\n3|4\n") == ["1", "2"]


def test_read_single_record_quoted_fields():
    assert read_single_record('"x|y"|z|"he said ""hi"""') == ["x|y", "z", 'he said "hi"']


def test_read_single_record_multiline_quoted():
    assert read_single_record('"a\nb"|c\n') == ["a\nb", "c"]


def test_read_single_record_trailing_empty_field():
    assert read_single_record("a|\r\n") == ["a", ""]


def test_read_single_record_bare_quote():
    with pytest.raises(ValueError):
        read_single_record('a"b|c')


def test_read_single_record_extraneous_quote():
    with pytest.raises(ValueError):
        read_single_record('"a"b|c')


def test_read_single_record_unterminated_quote():
    with pytest.raises(ValueError):
        read_single_record('"abc|d')


def test_read_single_record_empty():
    with pytest.raises(ValueError):
        read_single_record("")
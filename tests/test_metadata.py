import pytest

from exifwrap.metadata import (
    ExiftoolError,
    FileMetadata,
    KeyNotFoundError,
    empty_file_metadata,
)


@pytest.fixture
def fm():
    return FileMetadata(
        fields={
            "stringMono": "stringMonoValue",
            "float": 3.14,
            "integer": 42,
            "unsupported": 22,
            "strFloat": "6.28",
            "strInt": "84",
            "int32": 32,
            "float32": 32.32,
            "array": ["str", 64.64, 32.32, 64, True],
        }
    )


@pytest.mark.parametrize(
    "key,expected",
    [("float", 3), ("integer", 42), ("strInt", 84), ("int32", 32)],
)
def test_get_int(fm, key, expected):
    assert fm.get_int(key) == expected


def test_get_int_unparsable(fm):
    with pytest.raises(ExiftoolError):
        fm.get_int("stringMono")


def test_get_int_missing(fm):
    with pytest.raises(KeyNotFoundError):
        fm.get_int("unexisting")


@pytest.mark.parametrize("text", [" 84", "8_4", "1.5", "99999999999999999999", "true"])
def test_get_int_rejects_invalid_strings(text):
    meta = FileMetadata(fields={"k": text})
    with pytest.raises(ExiftoolError):
        meta.get_int("k")


def test_get_int_signed_string():
    meta = FileMetadata(fields={"k": "-17"})
    assert meta.get_int("k") == -17


def test_get_int_truncates_negative_float():
    meta = FileMetadata(fields={"k": -2.9})
    assert meta.get_int("k") == -2


@pytest.mark.parametrize(
    "key,expected",
    [("float", 3.14), ("integer", 42.0), ("strFloat", 6.28), ("float32", 32.32)],
)
def test_get_float(fm, key, expected):
    assert fm.get_float(key) == expected


def test_get_float_unparsable(fm):
    with pytest.raises(ExiftoolError):
        fm.get_float("stringMono")


def test_get_float_missing(fm):
    with pytest.raises(KeyNotFoundError):
        fm.get_float("unexisting")


def test_get_float_hex_string():
    meta = FileMetadata(fields={"k": "0x1p-2"})
    assert meta.get_float("k") == 0.25


@pytest.mark.parametrize(
    "key,expected",
    [
        ("stringMono", "stringMonoValue"),
        ("float", "3.14"),
        ("integer", "42"),
        ("unsupported", "22"),
    ],
)
def test_get_string(fm, key, expected):
    assert fm.get_string(key) == expected


def test_get_string_missing(fm):
    with pytest.raises(KeyNotFoundError):
        fm.get_string("unexisting")


@pytest.mark.parametrize(
    "value,expected",
    [(42.0, "42"), (1e-07, "0.0000001"), (100.0, "100"), (1.5, "1.5"), (False, "false")],
)
def test_get_string_formatting(value, expected):
    meta = FileMetadata(fields={"k": value})
    assert meta.get_string("k") == expected


@pytest.mark.parametrize(
    "key,expected",
    [
        ("stringMono", ["stringMonoValue"]),
        ("float", ["3.14"]),
        ("integer", ["42"]),
        ("unsupported", ["22"]),
        ("array", ["str", "64.64", "32.32", "64", "true"]),
    ],
)
def test_get_strings(fm, key, expected):
    assert fm.get_strings(key) == expected


def test_get_strings_missing(fm):
    with pytest.raises(KeyNotFoundError):
        fm.get_strings("unexisting")


def test_set_string():
    meta = empty_file_metadata()
    meta.set_string("k", "string")
    assert meta.get_string("k") == "string"


def test_set_strings():
    meta = empty_file_metadata()
    meta.set_strings("k", ["a", "b"])
    assert meta.get_strings("k") == ["a", "b"]


def test_set_strings_copies_input():
    values = ["a"]
    meta = empty_file_metadata()
    meta.set_strings("k", values)
    values.append("b")
    assert meta.get_strings("k") == ["a"]


def test_set_float():
    meta = empty_file_metadata()
    meta.set_float("k", 1.2)
    assert meta.get_float("k") == 1.2


def test_set_int():
    meta = empty_file_metadata()
    meta.set_int("k", 42)
    assert meta.get_int("k") == 42


@pytest.mark.parametrize("getter", ["get_string", "get_int", "get_float", "get_strings"])
def test_clear(getter):
    meta = empty_file_metadata()
    meta.set_string("k", "v")
    meta.clear("k")
    assert "k" in meta.fields
    with pytest.raises(KeyNotFoundError):
        getattr(meta, getter)("k")


@pytest.mark.parametrize("getter", ["get_string", "get_int", "get_float", "get_strings"])
def test_clear_all(getter):
    meta = empty_file_metadata()
    meta.set_string("k", "v")
    meta.clear_all()
    assert meta.fields == {"k": None}
    with pytest.raises(KeyNotFoundError):
        getattr(meta, getter)("k")


def test_clear_all_keeps_keys():
    meta = empty_file_metadata()
    meta.set_string("a", "1")
    meta.set_int("b", 2)
    meta.clear_all()
    assert meta.fields == {"a": None, "b": None}


def test_empty_file_metadata():
    meta = empty_file_metadata()
    assert meta.file == ""
    assert meta.fields == {}
    assert meta.err is None


def test_empty_file_metadata_instances_independent():
    first = empty_file_metadata()
    second = empty_file_metadata()
    first.set_string("k", "v")
    assert second.fields == {}


def test_key_not_found_is_lookup_error():
    meta = empty_file_metadata()
    with pytest.raises(LookupError):
        meta.get_string("missing")
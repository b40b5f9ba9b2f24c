# exifwrap

Read and write image, audio and video metadata by driving a single
long-running `exiftool` process. The process is started once with
`-stay_open True` and reused for every request, so handling many files costs
one process start, not one per file.

`exiftool` must be installed and on your `PATH` (`exiftool.exe` on Windows),
or its location given with `set_exiftool_binary_path`.

## Installing

```
pip install exifwrap
```

## Reading metadata

```python
from exifwrap.process import Exiftool

with Exiftool() as et:
    for fm in et.extract_metadata("photo.jpg", "missing.jpg"):
        if fm.err is not None:
            print(f"{fm.file}: {fm.err}")
            continue
        print(fm.get_string("DateTimeOriginal"))
        print(fm.get_int("ImageWidth"))
```

`extract_metadata` returns one `FileMetadata` per path, in the order given.
A problem with one file is stored in that entry's `err` and does not stop the
others:

- `FileNotExistError` when the path does not exist,
- `NotAFileError` when the path is a directory,
- `BufferTooSmallError` when exiftool's answer does not fit the read buffer,
- `ExiftoolError` for other failures (unreadable output, bad JSON, exiftool
  having exited).

All of these live in `exifwrap.process` and derive from `ExiftoolError`
(`exifwrap.metadata`).

## Working with fields

`FileMetadata` (in `exifwrap.metadata`) is a dataclass with `file`, `fields`
(a dict of the values exiftool returned as JSON) and `err`.

- `get_string(key)` renders the value as text; floats are written without an
  exponent or trailing zeros, booleans as `true`/`false`.
- `get_float(key)` returns numbers as they are and parses strings.
- `get_int(key)` returns integers, truncates floats toward zero and parses
  strings as base-10 64-bit integers.
- `get_strings(key)` returns a list; a single value gives a one-item list.

Each getter raises `KeyNotFoundError` when the field is absent or has been
cleared, and `ExiftoolError` when a value cannot be converted.

The setters `set_string`, `set_int`, `set_float` and `set_strings` store a
value; `clear(key)` and `clear_all()` mark fields for removal.
`empty_file_metadata()` returns a record with no file and no fields.

## Writing metadata

```python
from exifwrap.process import Exiftool

with Exiftool() as et:
    fms = et.extract_metadata("photo.jpg")
    fms[0].set_string("Title", "newTitle")
    fms[0].set_strings("Keywords", ["kw1", "kw2"])
    fms[0].clear("Flash")
    et.write_metadata(fms)
    if fms[0].err is not None:
        print(fms[0].err)
```

`write_metadata` first resets each record's `err`, then sends every field:
a cleared field as `-Tag=`, any other as one `-Tag=value` per value. Files are
overwritten in place unless `backup_original()` is given. A failed write is
stored in the record's `err`.

## Options

Options are passed to the constructor:

```python
from exifwrap.process import Exiftool, charset, coord_format, print_group_names

with Exiftool(charset("filename=utf8"), coord_format("%+f"), print_group_names("0")) as et:
    ...
```

| Option | Effect |
| --- | --- |
| `buffer(initial_size, max_size)` | cap one exiftool answer at the larger of the two sizes (default 64 KiB) |
| `charset(value)` | `-charset value` |
| `api(value)` | `-api value` |
| `no_print_conversion()` | `-n` |
| `extract_embedded()` | `-ee` |
| `extract_all_binary_metadata()` | `-b` |
| `date_format(fmt)` | `-dateFormat fmt` |
| `coord_format(fmt)` | `-coordFormat fmt` |
| `print_group_names(group_numbers)` | `-G<group_numbers>` |
| `backup_original()` | keep `<file>_original` when writing |
| `ignore_minor_errors()` | `-m` when writing |
| `clear_fields_before_writing()` | `-All=` before writing |
| `set_exiftool_binary_path(path)` | use this exiftool executable; the path must exist |

An option that raises makes the constructor raise `ExiftoolError`, as does a
failure to start the process.

## Closing

`close()` (or leaving the `with` block) asks exiftool to exit and waits up to
`WAIT_TIMEOUT` seconds (1.0 by default). A timeout, a non-zero exit status or
a failure to close a pipe raises `ExiftoolError`; calling `close()` a second
time raises too.

## What it does not do

This is a library only: it has no command-line tool of its own, and it does
not read or write metadata without an installed `exiftool`.
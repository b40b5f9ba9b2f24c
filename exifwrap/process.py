"""A long-running exiftool process driven through its stay-open protocol."""

from __future__ import annotations

import json
import os
import stat
import subprocess
import sys
import threading
from collections.abc import Callable, Iterable, Iterator
from typing import IO, Any

from exifwrap.metadata import ExiftoolError, FileMetadata

if sys.platform == "win32":
    READY_TOKEN = b"{ready}\r\n"
    WRITE_METADATA_SUCCESS_TOKEN = "image files updated\r\n"
    DEFAULT_BINARY = "exiftool.exe"
else:
    READY_TOKEN = b"{ready}\n"
    WRITE_METADATA_SUCCESS_TOKEN = "image files updated\n"
    DEFAULT_BINARY = "exiftool"

#: Seconds to wait for exiftool to exit when closing.
WAIT_TIMEOUT = 1.0

_EXECUTE_ARG = "-execute"
_INIT_ARGS = ("-stay_open", "True", "-@", "-")
_EXTRACT_ARGS = ("-j",)
_CLOSE_ARGS = ("-stay_open", "False", _EXECUTE_ARG)
_DEFAULT_MAX_TOKEN_SIZE = 64 * 1024
_READ_CHUNK = 64 * 1024

Option = Callable[["Exiftool"], None]


class FileNotExistError(ExiftoolError):
    """Raised for a file that does not exist."""

    def __init__(self, path: str = "") -> None:
        super().__init__("file does not exist")
        self.path = path


class NotAFileError(ExiftoolError):
    """Raised when a directory is given instead of a regular file."""

    def __init__(self, path: str = "") -> None:
        super().__init__("can't extract metadata from folder")
        self.path = path


class BufferTooSmallError(ExiftoolError):
    """Raised when exiftool's answer does not fit in the read buffer."""

    def __init__(self) -> None:
        super().__init__("exiftool's buffer too small (see buffer option)")


def split_ready_token(data: bytes) -> Iterator[bytes]:
    """Yield the answers in ``data``, each terminated by the ready token.

    Raises ExiftoolError if bytes remain after the last token.
    """
    rest = data
    while True:
        index = rest.find(READY_TOKEN)
        if index == -1:
            break
        yield rest[:index]
        rest = rest[index + len(READY_TOKEN):]
    if rest:
        raise ExiftoolError("no final token found")


def handle_write_metadata_response(response: str) -> None:
    """Raise ExiftoolError unless ``response`` reports a successful write."""
    if not response.endswith(WRITE_METADATA_SUCCESS_TOKEN):
        raise ExiftoolError(response.strip())


class _SegmentReader:
    """Reads ready-token terminated answers from exiftool's merged output."""

    def __init__(self, stream: IO[bytes], limit: int) -> None:
        self._stream = stream
        self._limit = limit
        self._pending = bytearray()
        self._error: ExiftoolError | None = None

    def _fail(self, error: ExiftoolError) -> ExiftoolError:
        self._error = error
        return error

    def next_segment(self) -> bytes:
        if self._error is not None:
            raise self._error
        while True:
            index = self._pending.find(READY_TOKEN)
            if index != -1:
                end = index + len(READY_TOKEN)
                if end > self._limit:
                    raise self._fail(BufferTooSmallError())
                segment = bytes(self._pending[:index])
                del self._pending[:end]
                return segment
            if len(self._pending) >= self._limit:
                raise self._fail(BufferTooSmallError())
            try:
                chunk = self._stream.read1(_READ_CHUNK)
            except (OSError, ValueError) as exc:
                raise ExiftoolError(f"error while reading stdMergedOut: {exc}") from exc
            if not chunk:
                if self._pending:
                    raise self._fail(
                        ExiftoolError("error while reading stdMergedOut: no final token found")
                    )
                raise ExiftoolError("error while reading stdMergedOut: EOF")
            self._pending += chunk


class Exiftool:
    """A running exiftool process, configured by option callables."""

    def __init__(self, *args: Option) -> None:
        self.binary_path = DEFAULT_BINARY
        self.extra_init_args: list[str] = []
        self.buffer_size: int | None = None
        self.buffer_max_size: int | None = None
        self.backup_original = False
        self.clear_fields_before_writing = False
        self.ignore_minor_errors = False
        self._lock = threading.Lock()
        self._closed = False

        for option in args:
            try:
                option(self)
            except Exception as exc:
                raise ExiftoolError(f"error when configuring exiftool: {exc}") from exc

        command = [self.binary_path, *_INIT_ARGS]
        if self.extra_init_args:
            command += ["-common_args", *self.extra_init_args]

        try:
            self._process = subprocess.Popen(
                command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
            )
        except OSError as exc:
            raise ExiftoolError(f"error when executing command: {exc}") from exc

        if self.buffer_size is None:
            limit = _DEFAULT_MAX_TOKEN_SIZE
        else:
            limit = max(self.buffer_size, self.buffer_max_size or 0)
        self._reader = _SegmentReader(self._process.stdout, limit)

    def __enter__(self) -> Exiftool:
        return self

    def __exit__(self, *args: Any) -> None:
        if not self._closed:
            self.close()

    def _send(self, lines: Iterable[str]) -> None:
        payload = "".join(f"{line}\n" for line in lines).encode("utf-8")
        try:
            self._process.stdin.write(payload)
            self._process.stdin.flush()
        except (OSError, ValueError) as exc:
            raise ExiftoolError(f"error while writing to exiftool: {exc}") from exc

    def close(self) -> None:
        """Ask exiftool to exit and release its pipes."""
        with self._lock:
            if self._closed:
                raise ExiftoolError("exiftool is already closed")
            self._closed = True
            self._send(_CLOSE_ARGS)

            errors: list[str] = []
            streams = (("stdMergedOut", self._process.stdout), ("stdin", self._process.stdin))
            for name, stream in streams:
                try:
                    stream.close()
                except OSError as exc:
                    errors.append(f"error while closing {name}: {exc}")

            try:
                code = self._process.wait(timeout=WAIT_TIMEOUT)
            except subprocess.TimeoutExpired:
                errors.append("Timed out waiting for exiftool to exit")
                self._process.kill()
                self._process.wait()
            else:
                if code != 0:
                    errors.append(
                        f"error while waiting for exiftool to exit: exit status {code}"
                    )

            if errors:
                raise ExiftoolError(f"error while closing exiftool: {errors}")

    def _extract_one(self, path: str) -> dict[str, Any]:
        try:
            info = os.stat(path)
        except FileNotFoundError as exc:
            raise FileNotExistError(path) from exc
        if stat.S_ISDIR(info.st_mode):
            raise NotAFileError(path)

        self._send([*_EXTRACT_ARGS, path, _EXECUTE_ARG])
        text = self._reader.next_segment().decode("utf-8", errors="replace")
        try:
            records = json.loads(text)
            record = records[0]
        except (ValueError, IndexError, KeyError, TypeError) as exc:
            raise ExiftoolError(f"error during unmarshaling ({text}): {exc}") from exc
        if not isinstance(record, dict):
            raise ExiftoolError(f"error during unmarshaling ({text}): not an object")
        return record

    def extract_metadata(self, *args: str) -> list[FileMetadata]:
        """Extract the metadata of each given file; failures go to ``err``."""
        with self._lock:
            results = []
            for path in args:
                result = FileMetadata(file=path)
                try:
                    result.fields = self._extract_one(path)
                except (ExiftoolError, OSError) as exc:
                    result.err = exc
                results.append(result)
            return results

    def _write_one(self, metadata: FileMetadata) -> None:
        try:
            os.stat(metadata.file)
        except FileNotFoundError as exc:
            raise FileNotExistError(metadata.file) from exc

        lines: list[str] = []
        if not self.backup_original:
            lines.append("-overwrite_original")
        if self.ignore_minor_errors:
            lines.append("-m")
        if self.clear_fields_before_writing:
            lines.append("-All=")
        for key, value in metadata.fields.items():
            if value is None:
                lines.append(f"-{key}=")
            else:
                lines.extend(f"-{key}={text}" for text in metadata.get_strings(key))
        lines += [metadata.file, _EXECUTE_ARG]

        self._send(lines)
        response = self._reader.next_segment().decode("utf-8", errors="replace")
        try:
            handle_write_metadata_response(response)
        except ExiftoolError as exc:
            raise ExiftoolError(f"Error writing metadata: {exc}") from exc

    def write_metadata(self, file_metadata: Iterable[FileMetadata]) -> None:
        """Write each item's fields to its file; failures go to its ``err``."""
        with self._lock:
            for metadata in file_metadata:
                metadata.err = None
                try:
                    self._write_one(metadata)
                except (ExiftoolError, OSError) as exc:
                    metadata.err = exc


def buffer(initial_size: int, max_size: int) -> Option:
    """Size the buffer that holds one exiftool answer."""

    def apply(tool: Exiftool) -> None:
        tool.buffer_size = initial_size
        tool.buffer_max_size = max_size

    return apply


def _extra_args(*values: str) -> Option:
    def apply(tool: Exiftool) -> None:
        tool.extra_init_args.extend(values)

    return apply


def charset(value: str) -> Option:
    """Pass ``-charset value`` to exiftool."""
    return _extra_args("-charset", value)


def api(value: str) -> Option:
    """Pass ``-api value`` to exiftool."""
    return _extra_args("-api", value)


def no_print_conversion() -> Option:
    """Disable print conversion (``-n``)."""
    return _extra_args("-n")


def extract_embedded() -> Option:
    """Extract embedded metadata (``-ee``)."""
    return _extra_args("-ee")


def extract_all_binary_metadata() -> Option:
    """Extract all binary metadata (``-b``)."""
    return _extra_args("-b")


def date_format(fmt: str) -> Option:
    """Pass ``-dateFormat fmt`` to exiftool."""
    return _extra_args("-dateFormat", fmt)


def coord_format(fmt: str) -> Option:
    """Pass ``-coordFormat fmt`` to exiftool."""
    return _extra_args("-coordFormat", fmt)


def print_group_names(group_numbers: str) -> Option:
    """Prefix tag names with their group names (``-G<numbers>``)."""
    return _extra_args("-G" + group_numbers)


def backup_original() -> Option:
    """Keep a backup of each file that is written."""

    def apply(tool: Exiftool) -> None:
        tool.backup_original = True

    return apply


def ignore_minor_errors() -> Option:
    """Ignore minor errors when writing (``-m``)."""

    def apply(tool: Exiftool) -> None:
        tool.ignore_minor_errors = True

    return apply


def clear_fields_before_writing() -> Option:
    """Remove every existing tag before writing new ones."""

    def apply(tool: Exiftool) -> None:
        tool.clear_fields_before_writing = True

    return apply


def set_exiftool_binary_path(path: str) -> Option:
    """Use the exiftool binary at ``path`` instead of the one on PATH."""

    def apply(tool: Exiftool) -> None:
        try:
            os.stat(path)
        except OSError as exc:
            raise ExiftoolError(
                f"error while checking if path '{path}' exists: {exc}"
            ) from exc
        tool.binary_path = path

    return apply
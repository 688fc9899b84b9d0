"""Filesystem capabilities consumed by the cleanup engine.

The engine never touches ``pathlib`` directly; it talks to a gateway so the
same code runs against the real scaffold (``LocalFilesystem``) and against an
in-memory tree in tests (``MemoryFilesystem``).
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path, PurePosixPath
from typing import Iterable, Iterator, Protocol


class FilesystemError(RuntimeError):
    pass


class FilesystemGateway(Protocol):
    def exists(self, path: Path) -> bool: ...

    def is_directory(self, path: Path) -> bool: ...

    def list_children(self, path: Path) -> list[Path]: ...

    def remove_file(self, path: Path) -> None: ...

    def remove_directory(self, path: Path) -> None: ...

    def read_text(self, path: Path) -> str: ...

    def write_text(self, path: Path, content: str) -> None: ...


@contextmanager
def _wrap_os_errors(action: str, path: Path) -> Iterator[None]:
    try:
        yield
    except OSError as error:
        raise FilesystemError(f"Could not {action} {path}: {error.strerror or error}") from error
    except (UnicodeDecodeError, UnicodeEncodeError) as error:
        raise FilesystemError(f"Could not {action} {path}: not valid UTF-8 ({error.reason})") from error


class LocalFilesystem:
    """Gateway over the real disk. Symlinks are treated as files and never followed."""

    def exists(self, path: Path) -> bool:
        return path.is_symlink() or path.exists()

    def is_directory(self, path: Path) -> bool:
        return path.is_dir() and not path.is_symlink()

    def list_children(self, path: Path) -> list[Path]:
        with _wrap_os_errors("list", path):
            return sorted(path.iterdir())

    def remove_file(self, path: Path) -> None:
        with _wrap_os_errors("delete", path):
            path.unlink()

    def remove_directory(self, path: Path) -> None:
        with _wrap_os_errors("delete directory", path):
            path.rmdir()

    def read_text(self, path: Path) -> str:
        with _wrap_os_errors("read", path):
            with path.open(encoding="utf-8", newline="") as handle:
                return handle.read()

    def write_text(self, path: Path, content: str) -> None:
        with _wrap_os_errors("write", path):
            with path.open("w", encoding="utf-8", newline="") as handle:
                handle.write(content)


class MemoryFilesystem:
    """In-memory tree with the same semantics as ``LocalFilesystem``.

    Paths listed in ``fail_on`` raise ``FilesystemError`` when removed or
    written, which lets tests simulate permission errors mid-run.
    """

    def __init__(self, fail_on: Iterable[Path | str] = ()) -> None:
        self.files: dict[str, str] = {}
        self.directories: set[str] = {"/"}
        self.fail_on = {self._key(path) for path in fail_on}

    @staticmethod
    def _key(path: Path | str) -> str:
        return PurePosixPath(path).as_posix()

    def _check_failure(self, action: str, key: str) -> None:
        if key in self.fail_on:
            raise FilesystemError(f"Could not {action} {key}: Permission denied")

    def add_file(self, path: Path | str, content: str = "") -> None:
        key = self._key(path)
        for parent in PurePosixPath(key).parents:
            self.directories.add(parent.as_posix())
        self.files[key] = content

    def add_directory(self, path: Path | str) -> None:
        key = PurePosixPath(self._key(path))
        self.directories.add(key.as_posix())
        for parent in key.parents:
            self.directories.add(parent.as_posix())

    def exists(self, path: Path) -> bool:
        key = self._key(path)
        return key in self.files or key in self.directories

    def is_directory(self, path: Path) -> bool:
        return self._key(path) in self.directories

    def list_children(self, path: Path) -> list[Path]:
        key = self._key(path)
        if key not in self.directories:
            raise FilesystemError(f"Could not list {key}: No such directory")
        children = {
            entry
            for entry in (*self.files, *self.directories)
            if entry != key and PurePosixPath(entry).parent.as_posix() == key
        }
        return [Path(entry) for entry in sorted(children)]

    def remove_file(self, path: Path) -> None:
        key = self._key(path)
        self._check_failure("delete", key)
        if key not in self.files:
            raise FilesystemError(f"Could not delete {key}: No such file")
        del self.files[key]

    def remove_directory(self, path: Path) -> None:
        key = self._key(path)
        self._check_failure("delete directory", key)
        if key not in self.directories:
            raise FilesystemError(f"Could not delete directory {key}: No such directory")
        if self.list_children(path):
            raise FilesystemError(f"Could not delete directory {key}: Directory not empty")
        self.directories.discard(key)

    def read_text(self, path: Path) -> str:
        key = self._key(path)
        if key not in self.files:
            raise FilesystemError(f"Could not read {key}: No such file")
        return self.files[key]

    def write_text(self, path: Path, content: str) -> None:
        key = self._key(path)
        self._check_failure("write", key)
        if key in self.directories:
            raise FilesystemError(f"Could not write {key}: Is a directory")
        if PurePosixPath(key).parent.as_posix() not in self.directories:
            raise FilesystemError(f"Could not write {key}: No such file or directory")
        self.files[key] = content

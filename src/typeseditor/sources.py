"""File sources: where a types.xml lives and how its bytes move.

The editor only needs "read bytes / write bytes for a path"; the file picker
also lists directories.  :class:`LocalFileSource` talks to the local
filesystem, :class:`typeseditor.remote.RemoteFileSource` to an SFTP server.
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Protocol

from typeseditor.errors import NotFoundError, SourceIOError, TypesEditorError

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".bak"


@dataclass(frozen=True)
class DirEntry:
    name: str
    is_dir: bool


class FileSource(Protocol):
    """Byte-oriented access to files on one host."""

    label: str

    def read(self, path: str | PurePath) -> bytes: ...

    def write(self, path: str | PurePath, data: bytes) -> None: ...

    def list_dir(self, path: str | PurePath) -> list[DirEntry]: ...


@dataclass
class FileSelection:
    """A file chosen in the picker, together with the source it lives on."""

    path: PurePath
    source: FileSource


class LocalFileSource:
    """Local filesystem access with atomic writes."""

    label = "local"

    def read(self, path: str | PurePath) -> bytes:
        try:
            return Path(path).read_bytes()
        except FileNotFoundError as err:
            raise NotFoundError(f"No such file: {path}") from err
        except OSError as err:
            raise SourceIOError(f"Cannot read {path}: {err}") from err

    def write(self, path: str | PurePath, data: bytes) -> None:
        """Write *data* to *path* atomically.

        1. Writes to a temporary file in the same directory.
        2. Uses os.replace() to atomically swap into place.
        """
        path = Path(path)
        try:
            fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), suffix=".xml.tmp")
        except OSError as err:
            raise SourceIOError(f"Cannot write {path}: {err}") from err
        try:
            os.write(fd, data)
            os.close(fd)
            fd = -1  # mark as closed
            os.replace(tmp_path, str(path))
        except OSError as err:
            raise SourceIOError(f"Cannot write {path}: {err}") from err
        finally:
            if fd >= 0:
                os.close(fd)
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)

    def list_dir(self, path: str | PurePath) -> list[DirEntry]:
        try:
            with os.scandir(path) as it:
                return [DirEntry(entry.name, entry.is_dir()) for entry in it]
        except FileNotFoundError as err:
            raise NotFoundError(f"No such directory: {path}") from err
        except OSError as err:
            raise SourceIOError(f"Cannot list {path}: {err}") from err


def backup_path(path: str | PurePath) -> PurePath:
    """``types.xml`` -> ``types.xml.bak`` on the same source."""
    path = PurePath(path) if isinstance(path, str) else path
    return path.with_name(path.name + BACKUP_SUFFIX)


def save_with_backup(source: FileSource, path: str | PurePath, data: bytes) -> None:
    """Copy the current content of *path* to its ``.bak`` sibling, then write.

    The backup is best-effort: if the old content cannot be read (for
    example on the first save) or the backup cannot be written, the save
    still goes ahead.  A failure of the primary write propagates.
    """
    path = PurePath(path) if isinstance(path, str) else path
    try:
        previous = source.read(path)
    except TypesEditorError as err:
        logger.info("No backup for %s: %s", path, err)
    else:
        bak = backup_path(path)
        try:
            source.write(bak, previous)
        except TypesEditorError as err:
            logger.warning("Backup to %s failed: %s", bak, err)
        else:
            logger.debug("Backed up %s to %s", path, bak)
    source.write(path, data)

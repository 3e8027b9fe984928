"""SSH/SFTP access to a remote game server.

One :class:`SshBackend` is shared by the file picker (listings, reads) and
the editor (reads, writes).  Every SFTP operation takes the backend's lock
without waiting; finding it held means two operations overlapped, which
is reported as :class:`BackendBusyError` instead of blocking.
"""

from __future__ import annotations

import logging
import os
import stat
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import PurePath, PurePosixPath

import paramiko

from typeseditor.errors import (
    AuthFailedError,
    BackendBusyError,
    NotFoundError,
    SourceIOError,
)
from typeseditor.sources import DirEntry

logger = logging.getLogger(__name__)

DEFAULT_SSH_PORT = 22
CONNECT_TIMEOUT = 10.0


@dataclass
class RemoteConfig:
    host: str
    username: str
    port: int = DEFAULT_SSH_PORT
    password: str | None = None
    key_path: str | None = None
    passphrase: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RemoteConfig | None:
        """Build a config from ``SSH_*`` variables; None without host and user."""
        env = os.environ if environ is None else environ
        host = env.get("SSH_HOST")
        username = env.get("SSH_USER")
        if not host or not username:
            return None
        try:
            port = int(env.get("SSH_PORT", DEFAULT_SSH_PORT))
        except ValueError:
            port = DEFAULT_SSH_PORT
        return cls(
            host=host,
            username=username,
            port=port,
            password=env.get("SSH_PASSWORD") or None,
            key_path=env.get("SSH_KEY") or None,
            passphrase=env.get("SSH_PASSPHRASE") or None,
        )


def _auth_kwargs(config: RemoteConfig) -> dict:
    """Key file first, then password, then agent / default keys."""
    if config.key_path:
        return {
            "key_filename": config.key_path,
            "passphrase": config.passphrase,
            "allow_agent": False,
            "look_for_keys": False,
        }
    if config.password:
        return {
            "password": config.password,
            "allow_agent": False,
            "look_for_keys": False,
        }
    return {"allow_agent": True, "look_for_keys": True}


class SshBackend:
    """An authenticated SSH session with an open SFTP channel."""

    def __init__(self, client: paramiko.SSHClient, sftp: paramiko.SFTPClient) -> None:
        self._client = client
        self._sftp = sftp
        self._lock = threading.Lock()

    @classmethod
    def connect(cls, config: RemoteConfig) -> SshBackend:
        client = paramiko.SSHClient()
        client.load_system_host_keys()
        client.set_missing_host_key_policy(paramiko.WarningPolicy())
        logger.info("Connecting to %s@%s:%d", config.username, config.host, config.port)
        try:
            client.connect(
                config.host,
                port=config.port,
                username=config.username,
                timeout=CONNECT_TIMEOUT,
                **_auth_kwargs(config),
            )
        except paramiko.AuthenticationException as err:
            client.close()
            raise AuthFailedError(f"SSH authentication failed: {err}") from err
        except (paramiko.SSHException, OSError) as err:
            client.close()
            raise SourceIOError(f"SSH connect: {err}") from err

        try:
            sftp = client.open_sftp()
        except (paramiko.SSHException, OSError) as err:
            client.close()
            raise SourceIOError(f"SSH SFTP init: {err}") from err
        return cls(client, sftp)

    @contextmanager
    def locked(self) -> Iterator[paramiko.SFTPClient]:
        if not self._lock.acquire(blocking=False):
            raise BackendBusyError()
        try:
            yield self._sftp
        finally:
            self._lock.release()

    def list_dir(self, path: str | PurePath) -> list[DirEntry]:
        with self.locked() as sftp:
            try:
                attrs = sftp.listdir_attr(str(path))
            except FileNotFoundError as err:
                raise NotFoundError(f"No such directory: {path}") from err
            except (OSError, paramiko.SSHException) as err:
                raise SourceIOError(f"SFTP readdir: {err}") from err
        return [
            DirEntry(a.filename, a.st_mode is not None and stat.S_ISDIR(a.st_mode))
            for a in attrs
        ]

    def read_file(self, path: str | PurePath) -> bytes:
        with self.locked() as sftp:
            try:
                with sftp.open(str(path), "rb") as fh:
                    return fh.read()
            except FileNotFoundError as err:
                raise NotFoundError(f"No such file: {path}") from err
            except (OSError, paramiko.SSHException) as err:
                raise SourceIOError(f"SFTP open: {err}") from err

    def write_file(self, path: str | PurePath, data: bytes) -> None:
        with self.locked() as sftp:
            try:
                with sftp.open(str(path), "wb") as fh:
                    fh.write(data)
            except (OSError, paramiko.SSHException) as err:
                raise SourceIOError(f"SFTP create: {err}") from err

    def close(self) -> None:
        self._sftp.close()
        self._client.close()


class RemoteFileSource:
    """FileSource backed by a shared :class:`SshBackend`."""

    label = "ssh"

    def __init__(self, backend: SshBackend) -> None:
        self.backend = backend

    def read(self, path: str | PurePath) -> bytes:
        return self.backend.read_file(PurePosixPath(path))

    def write(self, path: str | PurePath, data: bytes) -> None:
        self.backend.write_file(PurePosixPath(path), data)

    def list_dir(self, path: str | PurePath) -> list[DirEntry]:
        return self.backend.list_dir(PurePosixPath(path))

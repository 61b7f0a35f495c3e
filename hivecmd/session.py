"""State and commands of an interactive Hive drive session.

A :class:`Session` holds at most one client, one drive and one open file.
It does not talk to any storage backend itself. It asks a *client factory*
for a client object and then drives that object through a small duck-typed
interface.

``client_factory(options)`` returns a client. ``options`` is a dictionary
whose ``drive_type`` is ``"onedrive"`` or ``"ipfs"``.

Client objects provide:
    ``login(open_url)``, ``logout()``, ``get_info()`` (a mapping with
    ``user_id``, ``display_name``, ``email``, ``phone_number`` and
    ``region``), ``open_drive()`` and ``close()``.

Drive objects provide:
    ``get_info()`` (a mapping with ``driveid``), ``file_stat(path)`` (a
    mapping with ``fileid``, ``type`` and ``size``), ``list_files(path)``
    (an iterable of entries, each a mapping or a sequence of key/value
    pairs), ``mkdir(path)``, ``move_file(src, dst)``, ``copy_file(src, dst)``,
    ``delete_file(path)``, ``open_file(path, mode)`` and ``close()``.

File objects provide:
    ``seek(offset, whence)``, ``read(size)`` (bytes), ``write(data)``,
    ``commit()``, ``discard()`` and ``close()``.

Backend failures are reported by raising :class:`HiveError`. Every
session command takes the command's arguments without the command name.
A command that cannot be carried out raises :class:`CommandError`, whose
text is the message to show the user.
"""

from __future__ import annotations

import os
import re
import subprocess
import sys
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, TextIO

from .config import CmdConfig

__all__ = [
    "REDIRECT_URL",
    "SCOPE",
    "ONEDRIVE_CLIENT_ID",
    "HiveError",
    "CommandError",
    "Session",
    "open_url",
]

REDIRECT_URL = "http://localhost:12345"
SCOPE = "User.Read Files.ReadWrite.All offline_access"
ONEDRIVE_CLIENT_ID = "afd3d647-a8b7-4723-bf9d-1b832f43b881"

_SYNTAX_ERROR = "Error: invalid command syntax."
_NUMBER_RE = re.compile(r"\s*[+-]?\d+")
_WHENCE = {"set": os.SEEK_SET, "cur": os.SEEK_CUR, "end": os.SEEK_END}


class HiveError(Exception):
    """Raised by a backend client, drive or file when an operation fails."""


class CommandError(Exception):
    """Raised when a session command cannot be carried out."""


def open_url(url: str) -> None:
    """Open *url* in the desktop's default browser."""
    if sys.platform.startswith("win"):
        os.startfile(url)  # type: ignore[attr-defined]
    elif sys.platform.startswith("linux"):
        subprocess.run(["xdg-open", url], check=False)
    elif sys.platform == "darwin":
        subprocess.run(["open", url], check=False)
    else:
        raise OSError(f"cannot open URLs on platform {sys.platform!r}")


def _expect_args(args: Sequence[str], count: int) -> None:
    if len(args) != count:
        raise CommandError(_SYNTAX_ERROR)


def _parse_number(text: str) -> int:
    if not _NUMBER_RE.fullmatch(text):
        raise CommandError(_SYNTAX_ERROR)
    return int(text)


def _pairs(entry: Any) -> Iterable[tuple[Any, Any]]:
    if isinstance(entry, Mapping):
        return entry.items()
    return entry


class Session:
    """One user's client, drive and open file, driven by shell commands."""

    def __init__(
        self,
        config: CmdConfig,
        client_factory: Callable[[dict[str, Any]], Any],
        out: TextIO | None = None,
    ) -> None:
        self.config = config
        self._client_factory = client_factory
        self._out = out if out is not None else sys.stdout
        self.client: Any = None
        self.drive: Any = None
        self.file: Any = None

    def __enter__(self) -> Session:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _say(self, text: str) -> None:
        print(text, file=self._out)

    @staticmethod
    def _attempt(action: str, func: Callable[..., Any], *args: Any) -> Any:
        try:
            return func(*args)
        except HiveError as exc:
            raise CommandError(f"Error: {action} failed. Reason: {exc}.") from exc

    def _require_client(self) -> Any:
        if self.client is None:
            raise CommandError("Error: No client instance created.")
        return self.client

    def _require_drive(self, action: str) -> Any:
        if self.drive is None:
            raise CommandError(f"Error: {action} failed. Reason: not login.")
        return self.drive

    def _require_file(self, action: str) -> Any:
        self._require_drive(action)
        if self.file is None:
            raise CommandError(f"Error: {action} failed. Reason: no file is opened.")
        return self.file

    def _client_options(self, backend: str) -> dict[str, Any]:
        if backend == "onedrive":
            return {
                "drive_type": "onedrive",
                "persistent_location": self.config.persistent_location,
                "redirect_url": REDIRECT_URL,
                "scope": SCOPE,
                "client_id": ONEDRIVE_CLIENT_ID,
            }
        if backend == "ipfs":
            return {
                "drive_type": "ipfs",
                "persistent_location": self.config.persistent_location,
                "uid": self.config.uid,
                "rpc_nodes": tuple(self.config.ipfs_rpc_nodes),
            }
        raise CommandError("Error: unsupported backend type.")

    def client_open(self, args: Sequence[str]) -> None:
        """Create a client for the backend named in ``args[0]``."""
        _expect_args(args, 1)
        if self.client is not None:
            raise CommandError("Error: a client instance already exists.")
        options = self._client_options(args[0])
        try:
            client = self._client_factory(options)
        except HiveError as exc:
            raise CommandError("create hive client instance failure.") from exc
        if client is None:
            raise CommandError("create hive client instance failure.")
        self.client = client

    def client_close(self, args: Sequence[str]) -> None:
        """Close the open file, the drive and the client."""
        _expect_args(args, 0)
        self.close()

    def login(self, args: Sequence[str]) -> None:
        """Log the client in and open its drive."""
        _expect_args(args, 0)
        client = self._require_client()
        self._attempt("login", client.login, open_url)
        self.drive = self._attempt("create drive", client.open_drive)

    def logout(self, args: Sequence[str]) -> None:
        """Log the client out."""
        _expect_args(args, 0)
        client = self._require_client()
        self._attempt("logout", client.logout)

    def client_info(self, args: Sequence[str]) -> None:
        """Print the logged-in user's details."""
        _expect_args(args, 0)
        client = self._require_client()
        info = self._attempt("get client info", client.get_info)
        self._say(f"user id: {info['user_id']}")
        self._say(f"display name: {info['display_name']}")
        self._say(f"email: {info['email']}")
        self._say(f"phone number: {info['phone_number']}")
        self._say(f"region: {info['region']}")

    def drive_info(self, args: Sequence[str]) -> None:
        """Print the drive's identifier."""
        _expect_args(args, 0)
        drive = self._require_drive("get drive info")
        info = self._attempt("get drive info", drive.get_info)
        self._say(f"drive id: {info['driveid']}")

    def file_info(self, args: Sequence[str]) -> None:
        """Print the identifier, type and size of the file at ``args[0]``."""
        _expect_args(args, 1)
        drive = self._require_drive("get file info")
        info = self._attempt("get file info", drive.file_stat, args[0])
        self._say(f"file id: {info['fileid']}")
        self._say(f"type: {info['type']}")
        self._say(f"size: {info['size']}")

    def ls(self, args: Sequence[str]) -> None:
        """List the directory at ``args[0]``, one block of properties per entry."""
        _expect_args(args, 1)
        drive = self._require_drive("ls")

        def show() -> None:
            for index, entry in enumerate(drive.list_files(args[0])):
                if index:
                    self._say("")
                for key, value in _pairs(entry):
                    self._say(f"{key}: {value}")

        self._attempt("ls", show)

    def mkdir(self, args: Sequence[str]) -> None:
        """Create the directory ``args[0]``."""
        _expect_args(args, 1)
        drive = self._require_drive("mkdir")
        self._attempt("mkdir", drive.mkdir, args[0])

    def mv(self, args: Sequence[str]) -> None:
        """Move ``args[0]`` to ``args[1]``."""
        _expect_args(args, 2)
        drive = self._require_drive("mv")
        self._attempt("mv", drive.move_file, args[0], args[1])

    def cp(self, args: Sequence[str]) -> None:
        """Copy ``args[0]`` to ``args[1]``."""
        _expect_args(args, 2)
        drive = self._require_drive("cp")
        self._attempt("cp", drive.copy_file, args[0], args[1])

    def rm(self, args: Sequence[str]) -> None:
        """Delete ``args[0]``."""
        _expect_args(args, 1)
        drive = self._require_drive("rm")
        self._attempt("rm", drive.delete_file, args[0])

    def fopen(self, args: Sequence[str]) -> None:
        """Open file ``args[0]`` with mode ``args[1]``."""
        _expect_args(args, 2)
        drive = self._require_drive("fopen")
        if self.file is not None:
            raise CommandError("Error: fopen failed. Reason: a file is already opened.")
        self.file = self._attempt("fopen", drive.open_file, args[0], args[1])

    def fclose(self, args: Sequence[str]) -> None:
        """Close the open file."""
        _expect_args(args, 0)
        file = self._require_file("fclose")
        self._attempt("fclose", file.close)
        self.file = None

    def fseek(self, args: Sequence[str]) -> None:
        """Move the open file's position by ``args[0]`` from ``args[1]``."""
        _expect_args(args, 2)
        offset = _parse_number(args[0])
        whence = _WHENCE.get(args[1])
        if whence is None:
            raise CommandError(_SYNTAX_ERROR)
        file = self._require_file("fseek")
        self._attempt("fseek", file.seek, offset, whence)

    def fread(self, args: Sequence[str]) -> None:
        """Read up to ``args[0]`` bytes from the open file and print them."""
        _expect_args(args, 1)
        size = _parse_number(args[0])
        if size <= 0:
            raise CommandError(_SYNTAX_ERROR)
        file = self._require_file("fread")
        data = self._attempt("fread", file.read, size)
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("utf-8", errors="replace")
        self._say(data)

    def fwrite(self, args: Sequence[str]) -> None:
        """Write the text ``args[0]`` to the open file."""
        _expect_args(args, 1)
        file = self._require_file("fwrite")
        self._attempt("fwrite", file.write, args[0].encode("utf-8"))

    def fcommit(self, args: Sequence[str]) -> None:
        """Commit the open file's pending changes."""
        _expect_args(args, 0)
        file = self._require_file("fcommit")
        self._attempt("fcommit", file.commit)

    def fdiscard(self, args: Sequence[str]) -> None:
        """Discard the open file's pending changes."""
        _expect_args(args, 0)
        file = self._require_file("fdiscard")
        self._attempt("fdiscard", file.discard)

    def close(self) -> None:
        """Close whatever is open: file, then drive, then client."""
        for name in ("file", "drive", "client"):
            handle = getattr(self, name)
            setattr(self, name, None)
            if handle is not None:
                try:
                    handle.close()
                except HiveError:
                    pass
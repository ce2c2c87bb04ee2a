"""Opening files for redirections."""

from __future__ import annotations

import enum
import os


class OpenKind(enum.Enum):
    """The ways a redirection may open a file."""

    OPEN = os.O_RDONLY
    CREATE = os.O_WRONLY | os.O_CREAT | os.O_TRUNC
    APPEND = os.O_WRONLY | os.O_CREAT | os.O_APPEND
    READ_WRITE = os.O_RDWR | os.O_CREAT
    READ_CREATE = os.O_RDWR | os.O_CREAT | os.O_TRUNC
    READ_APPEND = os.O_RDWR | os.O_CREAT | os.O_APPEND

    @property
    def flags(self) -> int:
        return self.value


def open_file(name: str, kind: OpenKind) -> int:
    """Open ``name`` as ``kind`` and return the file descriptor; raises OSError."""
    if not isinstance(kind, OpenKind):
        raise TypeError("kind must be an OpenKind")
    return os.open(name, kind.flags, 0o666)
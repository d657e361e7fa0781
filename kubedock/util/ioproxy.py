"""A writer that frames output in the multiplexed docker stream format."""

import struct
import threading
from enum import IntEnum
from typing import BinaryIO

FLUSH_DELAY = 0.1


class StdType(IntEnum):
    """The standard stream a frame belongs to."""

    STDIN = 0
    STDOUT = 1
    STDERR = 2


class IoProxy:
    """Buffers written data and emits it as framed chunks.

    Complete lines are emitted as soon as they are written; whatever
    remains is emitted by :meth:`flush`, which runs automatically shortly
    after a write that leaves data behind.
    """

    def __init__(self, out: BinaryIO, prefix: StdType) -> None:
        self._out = out
        self._prefix = StdType(prefix)
        self._buf = bytearray()
        self._flush_pending = False
        self._lock = threading.Lock()

    @property
    def pending(self) -> bytes:
        """Data that has been written but not emitted yet."""
        with self._lock:
            return bytes(self._buf)

    def write(self, data: bytes) -> int:
        """Buffer ``data`` and emit every complete line; return its length."""
        with self._lock:
            self._buf += data
            while self._emit_line():
                pass
            if self._buf and not self._flush_pending:
                self._flush_pending = True
                timer = threading.Timer(FLUSH_DELAY, self.flush)
                timer.daemon = True
                timer.start()
        return len(data)

    def flush(self) -> None:
        """Emit all buffered data as a single frame."""
        with self._lock:
            self._frame(bytes(self._buf))
            self._buf.clear()
            self._flush_pending = False

    def _emit_line(self) -> bool:
        # The final byte is never considered, so a trailing newline waits
        # for the flush.
        pos = self._buf.find(b"\n", 0, len(self._buf) - 1)
        if pos < 0:
            return False
        self._frame(bytes(self._buf[: pos + 1]))
        del self._buf[: pos + 1]
        return True

    def _frame(self, payload: bytes) -> None:
        self._out.write(struct.pack(">B3xI", self._prefix, len(payload)))
        self._out.write(payload)
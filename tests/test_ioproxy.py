import io
import time

from kubedock.util.ioproxy import IoProxy, StdType

WRITE = b"hello\n\nto the bat-mobile\nlet's go"
READ = bytes(
    [
        0x1, 0x0, 0x0, 0x0, 0x0, 0x0, 0x0, 0x6, 0x68, 0x65, 0x6C, 0x6C, 0x6F, 0xA,
        0x1, 0x0, 0x0, 0x0, 0x0, 0x0, 0x0, 0x1, 0xA,
        0x1, 0x0, 0x0, 0x0, 0x0, 0x0, 0x0, 0x12, 0x74, 0x6F, 0x20, 0x74, 0x68,
        0x65, 0x20, 0x62, 0x61, 0x74, 0x2D, 0x6D, 0x6F, 0x62, 0x69, 0x6C, 0x65, 0xA,
    ]
)
FLUSH = READ + bytes(
    [0x1, 0x0, 0x0, 0x0, 0x0, 0x0, 0x0, 0x8, 0x6C, 0x65, 0x74, 0x27, 0x73, 0x20, 0x67, 0x6F]
)


def test_write_with_manual_flush():
    buf = io.BytesIO()
    proxy = IoProxy(buf, StdType.STDOUT)
    assert proxy.write(WRITE) == len(WRITE)
    assert buf.getvalue() == READ
    assert proxy.pending == b"let's go"
    proxy.flush()
    assert buf.getvalue() == FLUSH
    assert proxy.pending == b""


def test_write_with_automatic_flush():
    buf = io.BytesIO()
    proxy = IoProxy(buf, StdType.STDOUT)
    proxy.write(WRITE)
    deadline = time.monotonic() + 2.0
    while proxy.pending and time.monotonic() < deadline:
        time.sleep(0.02)
    time.sleep(0.02)
    assert buf.getvalue() == FLUSH
    assert proxy.pending == b""


def test_large_line():
    buf = io.BytesIO()
    proxy = IoProxy(buf, StdType.STDOUT)
    data = b"A" * 1349 + b"\n"
    proxy.write(data)
    assert buf.getvalue() == b""
    proxy.flush()
    assert len(buf.getvalue()) == 1350 + 8


def test_flush_of_empty_buffer_writes_empty_frame():
    buf = io.BytesIO()
    proxy = IoProxy(buf, StdType.STDOUT)
    proxy.flush()
    assert buf.getvalue() == bytes([0x1, 0x0, 0x0, 0x0, 0x0, 0x0, 0x0, 0x0])


def test_stderr_prefix():
    buf = io.BytesIO()
    proxy = IoProxy(buf, StdType.STDERR)
    proxy.write(b"x\ny")
    assert buf.getvalue() == bytes([0x2, 0x0, 0x0, 0x0, 0x0, 0x0, 0x0, 0x2]) + b"x\n"
"""A small TCP reverse proxy from a local port to a remote address."""

import logging
import socket
import threading
from typing import Optional

log = logging.getLogger(__name__)

_POLL_INTERVAL = 0.2
_CHUNK = 65536


class ReverseProxy:
    """Listens on ``localhost:local_port`` and forwards to the remote address.

    A ``local_port`` of 0 picks a free port; after :meth:`start` the
    attribute holds the port actually bound. ``timeout`` limits how long
    dialing the remote address may take; None or 0 means no limit.
    """

    def __init__(
        self,
        local_port: int,
        remote_ip: str,
        remote_port: int,
        timeout: Optional[float] = None,
    ) -> None:
        self.local_port = local_port
        self.remote_ip = remote_ip
        self.remote_port = remote_port
        self.timeout = timeout
        self._stopped = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def local_address(self) -> str:
        return f"localhost:{self.local_port}"

    @property
    def remote_address(self) -> str:
        return f"{self.remote_ip}:{self.remote_port}"

    def start(self) -> None:
        """Open the listening socket and start accepting connections."""
        if self._thread is not None:
            raise RuntimeError("reverse proxy already started")
        listener = socket.create_server(("localhost", self.local_port))
        listener.settimeout(_POLL_INTERVAL)
        self.local_port = listener.getsockname()[1]
        log.info("start reverse-proxy %s->%s", self.local_address, self.remote_address)
        self._stopped.clear()
        self._thread = threading.Thread(target=self._serve, args=(listener,), daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop accepting connections and close the listening socket."""
        self._stopped.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def __enter__(self) -> "ReverseProxy":
        self.start()
        return self

    def __exit__(self, *args) -> None:
        self.stop()

    def _serve(self, listener: socket.socket) -> None:
        with listener:
            while not self._stopped.is_set():
                try:
                    conn, _ = listener.accept()
                except socket.timeout:
                    continue
                except OSError as exc:
                    if not self._stopped.is_set():
                        log.warning("error accepting connection: %s", exc)
                    continue
                threading.Thread(target=self._handle, args=(conn,), daemon=True).start()
        log.info("stopped reverse-proxy %s->%s", self.local_address, self.remote_address)

    def _handle(self, conn: socket.socket) -> None:
        try:
            remote = socket.create_connection(
                (self.remote_ip, self.remote_port), timeout=self.timeout or None
            )
        except OSError as exc:
            log.warning("error dialing remote addr: %s", exc)
            conn.close()
            return
        remote.settimeout(None)
        try:
            threading.Thread(target=_pipe, args=(conn, remote), daemon=True).start()
            _pipe(remote, conn)
        finally:
            for sock in (remote, conn):
                try:
                    sock.shutdown(socket.SHUT_RDWR)
                except OSError:
                    pass
                sock.close()


def _pipe(src: socket.socket, dst: socket.socket) -> None:
    try:
        while True:
            chunk = src.recv(_CHUNK)
            if not chunk:
                return
            dst.sendall(chunk)
    except OSError:
        return
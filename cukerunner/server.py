"""Socket servers that answer a protocol handler one line at a time."""

from __future__ import annotations

import contextlib
import os
import socket
from typing import Any, Optional, TextIO

from cukerunner.wire import ProtocolHandler


class SocketServer:
    """Accepts a connection and answers each request line with one reply line."""

    def __init__(self, protocol_handler: ProtocolHandler) -> None:
        self.protocol_handler = protocol_handler
        self._acceptor: Optional[socket.socket] = None

    def _listening_socket(self) -> socket.socket:
        if self._acceptor is None:
            raise OSError("Server is not listening")
        return self._acceptor

    def accept_once(self) -> None:
        """Serve a single connection until the client closes it."""
        connection, _ = self._listening_socket().accept()
        with connection:
            try:
                with connection.makefile("rw", encoding="utf-8", newline="") as stream:
                    self.process_stream(stream)
            except ConnectionError:
                pass

    def process_stream(self, stream: TextIO) -> None:
        """Answer every line read from ``stream`` until end of input."""
        for line in iter(stream.readline, ""):
            request = line[:-1] if line.endswith("\n") else line
            stream.write(self.protocol_handler.handle(request) + "\n")
            stream.flush()

    def close(self) -> None:
        if self._acceptor is not None:
            self._acceptor.close()
            self._acceptor = None

    def __enter__(self) -> SocketServer:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


class TCPSocketServer(SocketServer):
    """Serves over TCP."""

    def listen(self, port: int = 0, host: str = "0.0.0.0") -> None:
        """Bind and listen; port 0 picks a free port."""
        family = socket.AF_INET6 if ":" in host else socket.AF_INET
        acceptor = socket.socket(family, socket.SOCK_STREAM)
        try:
            acceptor.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            acceptor.bind((host, port))
            acceptor.listen()
        except OSError:
            acceptor.close()
            raise
        self.close()
        self._acceptor = acceptor

    def listen_endpoint(self) -> tuple[str, int]:
        """The address and port being listened on."""
        host, port = self._listening_socket().getsockname()[:2]
        return host, port


class UnixSocketServer(SocketServer):
    """Serves over a local stream socket, removing the socket file on close."""

    def __init__(self, protocol_handler: ProtocolHandler) -> None:
        super().__init__(protocol_handler)
        self._path: Optional[str] = None

    def listen(self, path: str) -> None:
        acceptor = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            acceptor.bind(path)
            acceptor.listen()
        except OSError:
            acceptor.close()
            raise
        self.close()
        self._acceptor = acceptor
        self._path = path

    def listen_endpoint(self) -> str:
        """The path of the socket being listened on."""
        return self._listening_socket().getsockname()

    def close(self) -> None:
        super().close()
        if self._path is not None:
            with contextlib.suppress(FileNotFoundError):
                os.remove(self._path)
            self._path = None
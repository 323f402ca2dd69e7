import logging
import socket

from concurrent.futures import ThreadPoolExecutor
from typing import Callable

from .http import HTTPParser
from .http import write_response
from .types import HTTPParseError
from .types import PayloadTooLarge
from .types import Request
from .types import Response

MAX_LINE = 8192

logger = logging.getLogger(__name__)


class Connection:
    """A client socket read line by line, with a bound on line length."""

    def __init__(self, sock: socket.socket, max_line: int = MAX_LINE):
        self.sock = sock
        self.max_line = max_line
        self.buffer = bytearray()

    def readline(self) -> str:
        while True:
            idx = self.buffer.find(b"\r\n")
            if idx != -1:
                line = self.buffer[:idx].decode("latin-1")
                del self.buffer[:idx + 2]
                return line
            if len(self.buffer) > self.max_line:
                raise HTTPParseError("Request line or header too long")
            self._fill()

    def read(self, n: int) -> bytes:
        while len(self.buffer) < n:
            self._fill()
        data = bytes(self.buffer[:n])
        del self.buffer[:n]
        return data

    def send(self, response: Response) -> None:
        write_response(self.sock, response)

    def close(self) -> None:
        self.sock.close()

    def _fill(self) -> None:
        chunk = self.sock.recv(4096)
        if not chunk:
            raise ConnectionError("Disconnected")
        self.buffer.extend(chunk)


class Server:
    """Threaded keep-alive server feeding parsed requests to ``handler``.

    Transport failures (bad framing, oversized bodies, handler crashes) are
    answered here. ``error_headers`` supplies the headers those answers carry,
    so browsers still see the router's CORS headers on a 500.
    """

    def __init__(
        self,
        handler: Callable[[Request], Response],
        host: str = "127.0.0.1",
        port: int = 8000,
        workers: int | None = None,
        *,
        error_headers: Callable[[], dict[str, str]] | None = None,
        max_body_size: int = 1_048_576,
        keep_alive_timeout: float = 30.0,
        max_requests: int = 1000,
    ):
        self.handler = handler
        self.host = host
        self.port = port
        self.workers = workers
        self.error_headers = error_headers
        self.max_body_size = max_body_size
        self.keep_alive_timeout = keep_alive_timeout
        self.max_requests = max_requests

    def run(self) -> None:
        with socket.create_server((self.host, self.port)) as sock, \
                ThreadPoolExecutor(max_workers=self.workers) as pool:
            sock.settimeout(1.0)
            logger.info("nanoroute listening on http://%s:%d", self.host, self.port)
            try:
                while True:
                    try:
                        client, _ = sock.accept()
                    except TimeoutError:
                        continue
                    pool.submit(self.serve, client)
            except KeyboardInterrupt:
                logger.info("shutting down")

    def serve(self, client: socket.socket) -> None:
        client.settimeout(self.keep_alive_timeout)
        conn = Connection(client)

        try:
            for _ in range(self.max_requests):
                try:
                    request = HTTPParser(conn, max_body_size=self.max_body_size).parse()
                except PayloadTooLarge as e:
                    logger.debug("413: %s", e)
                    conn.send(self.error_response(413))
                    break
                except HTTPParseError as e:
                    logger.debug("400: %s", e)
                    conn.send(self.error_response(400))
                    break
                except (ConnectionError, TimeoutError):
                    break

                keep_alive = (request.header("connection") or "").lower() != "close"

                try:
                    response = self.handler(request)
                except Exception:
                    logger.exception("500 %s %s", request.method, request.path)
                    conn.send(self.error_response(500))
                    break

                response.headers["Connection"] = "keep-alive" if keep_alive else "close"
                conn.send(response)

                if not keep_alive:
                    break
        except OSError:
            logger.debug("client connection lost", exc_info=True)
        finally:
            conn.close()

    def error_response(self, status: int) -> Response:
        headers = self.error_headers() if self.error_headers else {}
        headers["Content-Length"] = "0"
        headers["Connection"] = "close"
        return Response(status, headers)

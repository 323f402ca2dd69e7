import socket

from typing import Protocol

from .types import HTTPParseError
from .types import PayloadTooLarge
from .types import Request
from .types import Response

STATUS_PHRASES = {
    200: "OK",
    201: "Created",
    204: "No Content",
    400: "Bad Request",
    401: "Unauthorized",
    403: "Access Forbidden",
    404: "Not Found",
    413: "Payload Too Large",
    500: "Internal Server Error",
}

SESSION_COOKIE = "session"
MAX_HEADERS = 100


class LineReader(Protocol):
    def readline(self) -> str: ...

    def read(self, n: int) -> bytes: ...


class HTTPParser:
    def __init__(
        self,
        reader: LineReader,
        session_cookie: str = SESSION_COOKIE,
        max_body_size: int | None = None,
    ):
        self.reader = reader
        self.session_cookie = session_cookie
        self.max_body_size = max_body_size

    def parse(self) -> Request:
        line = self.reader.readline()
        method, target = self._parse_request_line(line)
        path, query = self._split_target(target)
        headers = self._parse_headers()
        body = self._read_body(headers)
        return Request(
            method=method,
            path=path,
            headers=headers,
            query_string=query,
            body=body,
            session=self._has_session(headers),
        )

    def _parse_request_line(self, line: str) -> tuple[str, str]:
        parts = line.split(" ", 2)
        if len(parts) != 3:
            raise HTTPParseError(f"Bad request line: {line}")
        return parts[0].upper(), parts[1]

    def _split_target(self, target: str) -> tuple[str, str]:
        path, _, query = target.partition("?")
        return path, query

    def _parse_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        while True:
            line = self.reader.readline()
            if not line:
                break
            if len(headers) >= MAX_HEADERS:
                raise HTTPParseError("Too many headers")
            idx = line.find(":")
            if idx == -1:
                raise HTTPParseError(f"Bad header: {line}")
            headers[line[:idx].lower()] = line[idx + 1:].strip()
        return headers

    def _read_body(self, headers: dict[str, str]) -> bytes:
        length = headers.get("content-length")
        if not length:
            return b""
        try:
            size = int(length)
        except ValueError:
            raise HTTPParseError(f"Bad content-length: {length}") from None
        # a negative length would slice the next pipelined request into this body
        if size < 0:
            raise HTTPParseError(f"Bad content-length: {length}")
        if self.max_body_size is not None and size > self.max_body_size:
            raise PayloadTooLarge(f"Body of {size} bytes exceeds {self.max_body_size}")
        return self.reader.read(size)

    def _has_session(self, headers: dict[str, str]) -> bool:
        for part in headers.get("cookie", "").split(";"):
            name, _, value = part.strip().partition("=")
            if name == self.session_cookie and value:
                return True
        return False


def write_response(sock: socket.socket, response: Response) -> None:
    phrase = STATUS_PHRASES.get(response.status_code, "Unknown")
    lines = [f"HTTP/1.1 {response.status_code} {phrase}"]
    for k, v in response.headers.items():
        lines.append(f"{k}: {v}")
    lines.append("")
    lines.append("")
    head = "\r\n".join(lines).encode("latin-1")
    sock.sendall(head + response.body)

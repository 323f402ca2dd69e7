import json

from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import Callable
from urllib.parse import parse_qs

from pydantic import BaseModel

DEFAULT_STATUS = 404

Handler = Callable[..., Any]
Verifier = Callable[[str, str], bool]


class HTTPException(Exception):
    def __init__(self, status_code: int, detail: str = ""):
        self.status_code = status_code
        self.detail = detail
        super().__init__(detail)


class NotFound(HTTPException):
    def __init__(self, detail: str = "Not Found"):
        super().__init__(404, detail)


class HTTPParseError(Exception):
    pass


class PayloadTooLarge(HTTPParseError):
    pass


@dataclass(slots=True)
class Request:
    method: str
    path: str
    headers: dict[str, str] = field(default_factory=dict)
    query_string: str = ""
    body: bytes = b""
    session: bool = False
    _query: dict[str, list[str]] | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.headers = {k.lower(): v for k, v in self.headers.items()}

    def header(self, name: str, default: str | None = None) -> str | None:
        return self.headers.get(name.lower(), default)

    @property
    def query_params(self) -> dict[str, list[str]]:
        if self._query is None:
            self._query = parse_qs(self.query_string)
        return self._query

    def query(self, name: str, default: str | None = None) -> str | None:
        values = self.query_params.get(name)
        return values[0] if values else default

    def json(self) -> Any:
        if not self.body:
            return None
        return json.loads(self.body)


@dataclass(slots=True)
class Response:
    status_code: int = 200
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""


@dataclass(slots=True)
class ResponseState:
    code: int = DEFAULT_STATUS

    def override(self, code: int) -> None:
        self.code = code

    def finalize(self, transport_status: int) -> int:
        if self.code and transport_status == 200:
            return self.code
        return transport_status


def encode_body(result: Any) -> bytes:
    if result is None:
        return b""
    if isinstance(result, bytes):
        return result
    if isinstance(result, str):
        return result.encode()
    if isinstance(result, BaseModel):
        return result.model_dump_json().encode()
    if isinstance(result, list):
        items = [x.model_dump() if isinstance(x, BaseModel) else x for x in result]
        return json.dumps(items).encode()
    return json.dumps(result).encode()

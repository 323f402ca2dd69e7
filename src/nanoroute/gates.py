"""Cross-cutting request gates: CORS origin handling and HTTP basic auth."""

import base64
import binascii

from dataclasses import dataclass

from .types import Request
from .types import Response

ALLOW_METHODS = "OPTIONS, POST, GET, PUT, DELETE"
ALLOW_HEADERS = "Authorization, Origin, X-Requested-With, Content-Type, Accept"
FALLBACK_ALLOW_HEADERS = "Content-Type, Access-Control-Allow-Headers, Authorization, X-Requested-With"
JSON_CONTENT_TYPE = "application/json; charset=UTF-8"


@dataclass(slots=True)
class OriginGate:
    origin: str = "*"
    preflight_max_age: int = 1728000
    fallback_max_age: int = 3600

    def default_headers(self) -> dict[str, str]:
        return {
            "Access-Control-Allow-Origin": self.origin,
            "Content-Type": JSON_CONTENT_TYPE,
            "Access-Control-Allow-Methods": ALLOW_METHODS,
            "Access-Control-Allow-Headers": ALLOW_HEADERS,
        }

    def is_preflight(self, request: Request) -> bool:
        return request.method.upper() == "OPTIONS"

    def check_origin(self, request: Request) -> bool:
        if self.origin == "*":
            return True
        return request.header("origin") == self.origin

    def preflight(self, request: Request, response: Response) -> bool:
        """Answer an OPTIONS request in place.

        Returns True when the origin was accepted. A rejected origin leaves
        the response at 403 with a plain-text content type.
        """
        if self.check_origin(request):
            response.headers["Access-Control-Max-Age"] = str(self.preflight_max_age)
            response.headers["Content-Length"] = "0"
            response.headers["Content-Type"] = "text/plain"
            response.status_code = 200
            return True

        response.status_code = 403
        response.headers["Content-Type"] = "text/plain"
        response.headers["Access-Control-Max-Age"] = str(self.fallback_max_age)
        response.headers["Access-Control-Allow-Headers"] = FALLBACK_ALLOW_HEADERS
        return False


def basic_credentials(authorization: str | None) -> tuple[str, str] | None:
    """Decode an ``Authorization: Basic ...`` header value.

    Returns None when the header is absent or uses another scheme. A payload
    that does not decode, or has no ``:``, yields empty credentials. Missing
    ``=`` padding is tolerated.
    """
    if authorization is None or authorization[:6].lower() != "basic ":
        return None
    payload = authorization[6:].strip()
    payload += "=" * (-len(payload) % 4)
    try:
        decoded = base64.b64decode(payload).decode("utf-8", "replace")
    except (binascii.Error, ValueError):
        return "", ""
    user, sep, password = decoded.partition(":")
    if not sep:
        return "", ""
    return user, password

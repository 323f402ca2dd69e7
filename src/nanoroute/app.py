import logging

from contextvars import ContextVar
from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import Callable

from .config import Settings
from .config import settings as default_settings
from .gates import basic_credentials
from .gates import OriginGate
from .pattern import normalize_path
from .router import RouteTable
from .server import Server
from .types import DEFAULT_STATUS
from .types import encode_body
from .types import Handler
from .types import HTTPException
from .types import Request
from .types import Response
from .types import ResponseState
from .types import Verifier


@dataclass(slots=True)
class Exchange:
    request: Request
    response: Response
    state: ResponseState = field(default_factory=ResponseState)


_exchange: ContextVar[Exchange] = ContextVar("nanoroute_exchange")


class Api:
    def __init__(
        self,
        origin: str | None = None,
        logger: logging.Logger | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or default_settings
        self.table = RouteTable()
        self.gate = OriginGate(
            origin if origin is not None else self.settings.origin,
            self.settings.preflight_max_age,
            self.settings.fallback_max_age,
        )
        if logger is None and self.settings.log_requests:
            logger = logging.getLogger("nanoroute")
        self.logger = logger
        self.default_status = DEFAULT_STATUS

    @property
    def origin(self) -> str:
        return self.gate.origin

    def register(self, method: str, path: str, handler: Handler) -> None:
        self.table.register(method, path, handler)

    def get(self, path: str) -> Callable:
        return self._route(path, "GET")

    def post(self, path: str) -> Callable:
        return self._route(path, "POST")

    def put(self, path: str) -> Callable:
        return self._route(path, "PUT")

    def patch(self, path: str) -> Callable:
        return self._route(path, "PATCH")

    def delete(self, path: str) -> Callable:
        return self._route(path, "DELETE")

    def options(self, path: str) -> Callable:
        return self._route(path, "OPTIONS")

    def head(self, path: str) -> Callable:
        return self._route(path, "HEAD")

    def _route(self, path: str, method: str) -> Callable:
        def decorator(fn: Handler) -> Handler:
            self.register(method, path, fn)
            return fn
        return decorator

    def set_prefix(self, prefix: str) -> None:
        self.table.set_prefix(prefix)

    def set_logger(self, logger: logging.Logger) -> None:
        self.logger = logger

    def override_response_code(self, code: int) -> None:
        exchange = _exchange.get(None)
        if exchange is None:
            # outside a request: becomes the default for every later one
            self.default_status = code
            return
        exchange.state.override(code)

    def guard(self, handler: Callable[[], Any], verifier: Verifier) -> Any:
        exchange = _exchange.get(None)
        if exchange is None:
            raise RuntimeError("Api.guard() must be called from a handler while a request is being handled")
        result = None

        credentials = basic_credentials(exchange.request.header("authorization"))
        if credentials is not None:
            if verifier(*credentials):
                result = handler()
            else:
                exchange.state.override(401)

        # a live session admits the request on its own, even after basic auth ran
        if exchange.request.session:
            result = handler()

        return result

    def dispatch(self, method: str, path: str) -> Any:
        match = self.table.resolve(method, path)
        if match is None:
            return None

        exchange = _exchange.get(None)
        if exchange is not None:
            exchange.state.override(200)

        self._log(
            "Request",
            method=method.lower(),
            path=normalize_path(path),
            values=match.values,
            headers=dict(exchange.request.headers) if exchange else {},
        )
        result = match.route.handler(*match.values)
        if exchange is not None:
            self._log(
                "Response",
                code=exchange.state.finalize(exchange.response.status_code),
                headers=dict(exchange.response.headers),
            )
        return result

    def handle(self, request: Request) -> Response:
        response = Response(headers=self.gate.default_headers())
        exchange = Exchange(request, response, ResponseState(self.default_status))
        token = _exchange.set(exchange)

        try:
            if self.gate.is_preflight(request):
                if self.gate.preflight(request, response):
                    exchange.state.override(200)
            else:
                try:
                    result = self.dispatch(request.method, request.path)
                except HTTPException as e:
                    exchange.state.override(e.status_code)
                    result = {"detail": e.detail}
                if request.method.upper() != "HEAD":
                    response.body = encode_body(result)
        finally:
            _exchange.reset(token)

        response.status_code = exchange.state.finalize(response.status_code)
        if response.body:
            response.headers["Content-Length"] = str(len(response.body))
        return response

    def _log(self, event: str, **fields: Any) -> None:
        if self.logger is not None:
            self.logger.info(event, extra=fields)

    def server(self, host: str | None = None, port: int | None = None, workers: int | None = None) -> Server:
        return Server(
            self.handle,
            host or self.settings.host,
            port if port is not None else self.settings.port,
            workers or self.settings.workers,
            error_headers=self.gate.default_headers,
            max_body_size=self.settings.max_body_size,
            keep_alive_timeout=self.settings.keep_alive_timeout,
            max_requests=self.settings.max_requests_per_connection,
        )

    def run(self, host: str | None = None, port: int | None = None, workers: int | None = None) -> None:
        self.server(host, port, workers).run()

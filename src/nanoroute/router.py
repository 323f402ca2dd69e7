import logging

from dataclasses import dataclass
from dataclasses import field

from .pattern import compile_pattern
from .pattern import normalize_path
from .pattern import PathPattern
from .types import Handler
from .types import NotFound

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Route:
    method: str
    template: str
    handler: Handler
    pattern: PathPattern

    @property
    def path(self) -> str:
        return self.pattern.path


@dataclass(slots=True)
class Match:
    route: Route
    values: list[str] = field(default_factory=list)


class RouteTable:
    def __init__(self) -> None:
        self.endpoints: dict[str, dict[str, Route]] = {}
        self.wildcards: list[PathPattern] = []

    def register(self, method: str, template: str, handler: Handler) -> Route | None:
        method = method.lower()
        self.endpoints.setdefault(method, {})

        if not isinstance(template, str) or not callable(handler):
            return None

        pattern = compile_pattern(template)
        route = Route(method, template, handler, pattern)
        if pattern.templated:
            self.wildcards.append(pattern)
        self.endpoints[method][pattern.path] = route
        logger.debug("registered %s /%s", method.upper(), pattern.path)
        return route

    def set_prefix(self, prefix: str) -> None:
        prefix = prefix.strip("/")

        endpoints: dict[str, dict[str, Route]] = {}
        for method, routes in self.endpoints.items():
            endpoints[method] = {}
            for key, route in routes.items():
                path = prefix + ("/" + key if key else "")
                route.pattern = self._reprefix(route.pattern, path)
                endpoints[method][route.path] = route

        self.endpoints = endpoints
        self.wildcards = [
            self._reprefix(wildcard, prefix + "/" + wildcard.path)
            for wildcard in self.wildcards
        ]
        logger.debug("prefixed %d wildcard routes with %r", len(self.wildcards), prefix)

    def lookup(self, method: str, path: str) -> Route | None:
        return self.endpoints.get(method.lower(), {}).get(path)

    def compare_against_wildcards(self, path: str) -> tuple[PathPattern, list[str]] | None:
        for wildcard in self.wildcards:
            values = wildcard.match(path)
            if values is not None:
                return wildcard, values
        return None

    def resolve(self, method: str, path: str) -> Match | None:
        method = method.lower()
        path = normalize_path(path)

        route = self.lookup(method, path)
        if route is not None:
            return Match(route)

        compared = self.compare_against_wildcards(path)
        if compared is None:
            return None

        wildcard, values = compared
        route = self.lookup(method, wildcard.path)
        if route is None:
            raise NotFound(f"No {method.upper()} handler for /{wildcard.path}")
        return Match(route, values)

    def _reprefix(self, pattern: PathPattern, path: str) -> PathPattern:
        if not pattern.templated:
            return PathPattern(normalize_path(path))
        return compile_pattern(path)

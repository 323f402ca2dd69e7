import re

from dataclasses import dataclass
from dataclasses import field

BRACKETS_RE = re.compile(r"\{(.+)\}")
PARAM_RE = re.compile(r"/*\{(.+?)\}")
CAPTURE = "/*([^/{}]*)"


def normalize_path(path: str) -> str:
    """Drop any query string or fragment and trim boundary slashes.

    Internal runs of slashes are left alone; only the edges are normalized.
    """
    for sep in ("?", "#"):
        path = path.split(sep, 1)[0]
    return path.strip("/")


def has_brackets(path: str) -> bool:
    return BRACKETS_RE.search(path) is not None


@dataclass(slots=True)
class PathPattern:
    path: str
    templated: bool = False
    param_names: list[str] = field(default_factory=list)
    regex: re.Pattern[str] | None = None

    def match(self, path: str) -> list[str] | None:
        if self.regex is None:
            return None
        m = self.regex.fullmatch(path)
        if m is None:
            return None
        return list(m.groups())


def compile_pattern(template: str) -> PathPattern:
    path = normalize_path(template)
    if not has_brackets(path):
        return PathPattern(path)

    param_names: list[str] = []
    regex_parts: list[str] = []
    last = 0

    for m in PARAM_RE.finditer(path):
        regex_parts.append(re.escape(path[last:m.start()]))
        param_names.append(m.group(1))
        regex_parts.append(CAPTURE)
        last = m.end()

    regex_parts.append(re.escape(path[last:]))
    regex = re.compile("".join(regex_parts))

    return PathPattern(path, True, param_names, regex)

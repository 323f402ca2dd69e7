from .app import Api
from .config import Settings
from .pattern import compile_pattern
from .pattern import PathPattern
from .router import RouteTable
from .types import HTTPException
from .types import NotFound
from .types import Request
from .types import Response

__version__ = "0.1.0"
__all__ = [
    "Api",
    "compile_pattern",
    "HTTPException",
    "NotFound",
    "PathPattern",
    "Request",
    "Response",
    "RouteTable",
    "Settings",
]

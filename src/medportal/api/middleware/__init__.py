from .catchall import CatchAllExceptionMiddleware
from .request_size_limit import MULTIPART_OVERHEAD, RequestSizeLimitMiddleware

__all__ = [
    "CatchAllExceptionMiddleware",
    "MULTIPART_OVERHEAD",
    "RequestSizeLimitMiddleware",
]

"""
Middleware package.
"""
from backoffice.middleware.error_handler import ErrorHandlerMiddleware, register_exception_handlers
from backoffice.middleware.request_id import RequestIdMiddleware

__all__ = [
    "ErrorHandlerMiddleware",
    "RequestIdMiddleware",
    "register_exception_handlers",
]

"""
Request middleware: the pipeline base class, the local accounts middleware
and the injector that decides whether to install it.
"""
from ethapi.middleware.base import Middleware, resolving_middleware
from ethapi.middleware.injector import MiddlewareInjector
from ethapi.middleware.local import LocalAccountsMiddleware

__all__ = [
    "Middleware",
    "MiddlewareInjector",
    "LocalAccountsMiddleware",
    "resolving_middleware",
]

"""
restmount — URL Resolvers
===========================

What:  Answers "what base URL should responses reference?".
How:   A static resolver always returns the same base URL. A request-aware
       resolver derives a NEW resolver from each incoming request
       (`for_request`) instead of being rebound in place, so concurrent
       requests never observe each other's host.
Who:   Held by the API registry inside a URLInfo; the per-request URLInfo is
       attached to the pooled context and used for Location headers.

Example (multi-tenant hosts):
    customer1.api.example.com → base URL http://customer1.api.example.com
    customer2.api.example.com → base URL http://customer2.api.example.com
"""

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from starlette.requests import Request


@runtime_checkable
class URLResolver(Protocol):
    def get_base_url(self) -> str: ...


@runtime_checkable
class RequestAwareURLResolver(URLResolver, Protocol):
    """A resolver whose answer depends on the request being served."""

    def for_request(self, request: Request) -> URLResolver: ...


@dataclass(frozen=True)
class StaticResolver:
    """Returns a fixed base URL for every request."""

    base_url: str = ""

    def get_base_url(self) -> str:
        return self.base_url


@dataclass(frozen=True)
class RequestHostResolver:
    """
    Builds the base URL from the scheme and Host of each request.

    `default` is answered when no request is bound, e.g. outside a request.
    A `path` suffix ("/tenant") is appended to the derived URL.
    """

    default: str = ""
    path: str = ""

    def get_base_url(self) -> str:
        return self.default

    def for_request(self, request: Request) -> URLResolver:
        return StaticResolver(f"{request.url.scheme}://{request.url.netloc}{self.path}")


@dataclass(frozen=True)
class URLInfo:
    """
    The path prefix and resolver of one registry.

    Immutable; `for_request` returns a request-specific copy when the
    resolver is request-aware and `self` otherwise.
    """

    prefix: str = ""
    resolver: URLResolver = field(default_factory=StaticResolver)
    request_aware: bool = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "request_aware", isinstance(self.resolver, RequestAwareURLResolver)
        )

    @property
    def base_url(self) -> str:
        return self.resolver.get_base_url().rstrip("/")

    def for_request(self, request: Request) -> "URLInfo":
        if not self.request_aware:
            return self
        return URLInfo(prefix=self.prefix, resolver=self.resolver.for_request(request))

    def url_for(self, path: str) -> str:
        """Absolute (or root-relative, with no base URL) link to `path`."""
        return self.base_url + path

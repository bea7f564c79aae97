from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from crumb.cookie import Cookie


class CrumbError(Exception):
    """Base error for crumb."""


class InvalidCookieError(CrumbError, ValueError):
    """Raised when a cookie is given no name or no value."""


class JarBusyError(CrumbError):
    """
    Raised when a jar mutation is attempted while another one is in flight
    and the jar was built with ``raise_on_busy=True``.

    The rejected cookie is handed back through ``cookie``; the jar keeps no
    reference to it.
    """

    def __init__(self, cookie: Cookie | None = None, operation: str = "add") -> None:
        self.cookie = cookie
        self.operation = operation
        msg = f"Cookie jar busy, {operation} rejected"
        if cookie is not None:
            msg += f" for {cookie.name!r}"
        super().__init__(msg)

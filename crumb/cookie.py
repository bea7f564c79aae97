from __future__ import annotations

import logging
from datetime import datetime, timedelta
from http.cookies import Morsel
from email.utils import parsedate_to_datetime

from crumb.errors import InvalidCookieError
from crumb.utils import EPOCH, LATEST, as_utc, utcnow

LOGGER = logging.getLogger(__name__)


class Cookie:
    """
    A single HTTP cookie (RFC 6265).

    ``domain`` is either an exact host or, when it starts with ".", a domain
    that matches the string after the dot and any host ending in it.
    ``path`` is ``None`` when the cookie applies to every path, and
    ``expires`` is ``None`` for a session cookie.

    Args:
        name: Cookie name, may be empty but not None
        value: Cookie value, may be empty but not None
        domain: Cookie domain or hostname
        path: Cookie path, or None
        max_age: Lifetime in seconds; -1 for a session cookie, 0 for an
            already-expired one
    """

    def __init__(
        self,
        name: str,
        value: str,
        domain: str | None,
        path: str | None = None,
        max_age: int = -1,
    ) -> None:
        self.name = name
        self.value = value
        if domain is None:
            # Tolerated so callers can still set the domain right after.
            LOGGER.warning("cookie %r created without a domain", name)
        self.domain = domain
        self.path = path
        self.expires: datetime | None = None
        self.secure = False
        self.http_only = False
        self.set_max_age(max_age)

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, name: str) -> None:
        if name is None:
            raise InvalidCookieError("cookie name must not be None")
        self._name = name

    @property
    def value(self) -> str:
        return self._value

    @value.setter
    def value(self, value: str) -> None:
        if value is None:
            raise InvalidCookieError("cookie value must not be None")
        self._value = value

    def set_max_age(self, max_age: int) -> None:
        """
        Set the expiry from a lifetime in seconds.

        -1 makes a session cookie. 0 pins the expiry to the epoch so that a
        client with a slow clock still sees the cookie as expired.
        """
        if max_age == -1:
            self.expires = None
        elif max_age == 0:
            self.expires = EPOCH
        else:
            try:
                self.expires = utcnow() + timedelta(seconds=max_age)
            except OverflowError:
                # Clamp to the nearest representable instant.
                self.expires = LATEST if max_age > 0 else EPOCH

    def set_expires(self, expires: datetime | None) -> None:
        self.expires = as_utc(expires) if expires is not None else None

    @property
    def is_session(self) -> bool:
        return self.expires is None

    @property
    def expired(self) -> bool:
        """True when the cookie has an expiry strictly in the past."""
        return self.expires is not None and as_utc(self.expires) < utcnow()

    def same_slot(self, other: Cookie) -> bool:
        """Whether both cookies occupy the same (name, path) slot."""
        return self.name == other.name and self.path == other.path

    def copy(self) -> Cookie:
        dup = Cookie.__new__(Cookie)
        dup._name = self._name
        dup._value = self._value
        dup.domain = self.domain
        dup.path = self.path
        # datetimes are immutable, so sharing one is a value copy.
        dup.expires = self.expires
        dup.secure = self.secure
        dup.http_only = self.http_only
        return dup

    __copy__ = copy

    def __deepcopy__(self, memo) -> Cookie:
        return self.copy()

    def __eq__(self, other: object) -> bool:
        # Domains are not compared.
        if not isinstance(other, Cookie):
            return NotImplemented
        return (
            self.name == other.name
            and self.value == other.value
            and self.path == other.path
        )

    __hash__ = None  # type: ignore[assignment]

    @classmethod
    def from_morsel(cls, morsel: Morsel, host: str) -> Cookie:
        """
        Build a cookie from a parsed Set-Cookie morsel received from ``host``.

        A Domain attribute always denotes a domain, so a leading dot is added
        when the server left it out. Max-Age takes precedence over Expires.
        """
        domain = morsel["domain"] or host
        if morsel["domain"] and not domain.startswith("."):
            domain = "." + domain
        cookie = cls(morsel.key, morsel.value, domain, morsel["path"] or None)

        max_age = morsel["max-age"]
        expires = morsel["expires"]
        if max_age:
            try:
                seconds = int(max_age)
            except ValueError:
                LOGGER.debug("ignoring bad Max-Age %r on %r", max_age, morsel.key)
            else:
                # Any non-positive Max-Age expires the cookie immediately.
                cookie.set_max_age(max(seconds, 0))
        elif expires:
            try:
                cookie.set_expires(parsedate_to_datetime(expires))
            except (TypeError, ValueError):
                LOGGER.debug("ignoring bad Expires %r on %r", expires, morsel.key)

        cookie.secure = bool(morsel["secure"])
        cookie.http_only = bool(morsel["httponly"])
        return cookie

    def __repr__(self) -> str:
        return f"<Cookie {self.name}={self.value!r} domain={self.domain!r} path={self.path!r}>"


def equal(cookie1: Cookie, cookie2: Cookie) -> bool:
    """
    Test if two cookies are equal: same name, value and path.

    Note that this does not check that the cookie domains match.
    """
    return cookie1 == cookie2

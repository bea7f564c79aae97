from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Iterator
from enum import Enum
from operator import itemgetter
from typing import Any

from crumb.cookie import Cookie
from crumb.errors import JarBusyError
from crumb.headers import cookies_from_headers
from crumb.utils import ascii_lower

LOGGER = logging.getLogger(__name__)

ChangeHandler = Callable[["CookieJar", Any, Cookie | None, Cookie | None], None]


class Outcome(Enum):
    """What a single add or delete did to the jar."""

    ADDED = "added"
    REPLACED = "replaced"
    # Replaced by a cookie with the same value; nobody is notified.
    UNCHANGED = "unchanged"
    # An existing cookie was removed by an already-expired one.
    EXPIRED = "expired"
    # A new, already-expired cookie was dropped.
    DISCARDED = "discarded"
    DELETED = "deleted"
    NOT_FOUND = "not_found"
    BUSY = "busy"
    INVALID = "invalid"


class CookieJar:
    """
    In-memory cookie store indexed by domain.

    Cookies are kept per domain (compared ASCII case-insensitively) in arrival
    order. Every add or delete that changes what the jar holds is reported to
    ``changed`` and to handlers registered with ``on_changed``, synchronously
    and while the jar lock is held. Only one mutation may be in flight at a
    time: a handler calling ``add`` or ``delete`` on the same jar gets
    ``Outcome.BUSY`` back instead of deadlocking.

    This class keeps nothing on disk. Persistent jars subclass it, fill it in
    ``load`` and follow changes through ``changed``.

    Args:
        cookies: Cookies to start with; adding them emits no notifications
        raise_on_busy: If True, raise JarBusyError instead of returning
            Outcome.BUSY when a mutation is rejected
    """

    def __init__(
        self,
        cookies: Iterable[Cookie] = (),
        raise_on_busy: bool = False,
    ) -> None:
        self.raise_on_busy = raise_on_busy
        self._domains: dict[str, list[Cookie]] = {}
        # id(cookie) -> serial, for every cookie currently stored.
        self._serials: dict[int, int] = {}
        self._serial = 0
        self._handlers: list[ChangeHandler] = []
        self._ongoing = False
        self._lock = threading.RLock()
        self._ready = False

        self.load()
        for cookie in cookies:
            self.add(cookie)
        self._ready = True

    @property
    def ready(self) -> bool:
        """False while the jar is still being constructed."""
        return self._ready

    def load(self) -> None:
        """
        Populate the jar during construction.

        Subclasses backed by storage call ``add`` here. Nothing is reported
        to ``changed`` or to handlers until construction has finished.
        """

    def changed(self, author: Any, old: Cookie | None, new: Cookie | None) -> None:
        """
        Called for every change once the jar is ready, before the handlers.

        ``old`` is None for an added cookie and ``new`` is None for a removed
        one; both are set when a cookie's value was replaced. Subclasses
        should compare ``author`` against themselves to skip their own
        changes.
        """

    def on_changed(self, handler: ChangeHandler) -> ChangeHandler:
        """Register ``handler(jar, author, old, new)``. Usable as a decorator."""
        with self._lock:
            self._handlers.append(handler)
        return handler

    def remove_handler(self, handler: ChangeHandler) -> None:
        with self._lock:
            self._handlers.remove(handler)

    def _start_operation(self) -> bool:
        if self._ongoing:
            return False
        self._ongoing = True
        return True

    def _finish_operation(self) -> None:
        self._ongoing = False

    def _busy(self, cookie: Cookie, operation: str) -> Outcome:
        LOGGER.debug("jar busy, rejecting %s of %r", operation, cookie)
        if self.raise_on_busy:
            raise JarBusyError(cookie, operation)
        return Outcome.BUSY

    def _track(self, old: Cookie | None, new: Cookie | None) -> None:
        if old is not None and old is not new:
            self._serials.pop(id(old), None)
        if new is not None:
            self._serial += 1
            self._serials[id(new)] = self._serial

    def _changed(self, author: Any, old: Cookie | None, new: Cookie | None) -> None:
        self._track(old, new)
        if not self._ready:
            return
        self.changed(author, old, new)
        for handler in list(self._handlers):
            handler(self, author, old, new)

    def _remove_at(self, key: str, cookies: list[Cookie], index: int) -> None:
        del cookies[index]
        if not cookies:
            del self._domains[key]

    @staticmethod
    def _check(cookie: Cookie | None, operation: str) -> bool:
        if cookie is None or cookie.domain is None:
            LOGGER.error("cannot %s %r: a cookie with a domain is required", operation, cookie)
            return False
        return True

    def add(self, cookie: Cookie, author: Any = None) -> Outcome:
        """
        Add ``cookie`` to the jar, which takes it over.

        A cookie with the same name and path in the same domain is replaced
        in place, or removed when ``cookie`` has already expired. A new
        cookie that has already expired is dropped.

        Returns:
            The Outcome of the call. On Outcome.BUSY the jar did not keep
            ``cookie`` and the caller still owns it.

        Raises:
            JarBusyError: If raise_on_busy is set and a mutation is in flight
        """
        if not self._check(cookie, "add"):
            return Outcome.INVALID
        with self._lock:
            if not self._start_operation():
                return self._busy(cookie, "add")
            try:
                return self._add(cookie, author)
            finally:
                self._finish_operation()

    def _add(self, cookie: Cookie, author: Any) -> Outcome:
        key = ascii_lower(cookie.domain)
        cookies = self._domains.get(key, [])
        for index, old in enumerate(cookies):
            if not old.same_slot(cookie):
                continue
            if cookie.expired:
                # The server expires a cookie by sending it with a past date.
                self._remove_at(key, cookies, index)
                self._changed(author, old, None)
                return Outcome.EXPIRED
            cookies[index] = cookie
            if cookie.value != old.value:
                self._changed(author, old, cookie)
                return Outcome.REPLACED
            self._track(old, cookie)
            return Outcome.UNCHANGED

        if cookie.expired:
            return Outcome.DISCARDED
        self._domains.setdefault(key, []).append(cookie)
        self._changed(author, None, cookie)
        return Outcome.ADDED

    def delete(self, cookie: Cookie, author: Any = None) -> Outcome:
        """
        Delete the stored cookie equal to ``cookie`` (same name, value and
        path) from ``cookie``'s domain. The jar does not keep ``cookie``.

        Raises:
            JarBusyError: If raise_on_busy is set and a mutation is in flight
        """
        if not self._check(cookie, "delete"):
            return Outcome.INVALID
        with self._lock:
            if not self._start_operation():
                return self._busy(cookie, "delete")
            try:
                key = ascii_lower(cookie.domain)
                cookies = self._domains.get(key, [])
                for index, stored in enumerate(cookies):
                    if stored == cookie:
                        self._remove_at(key, cookies, index)
                        self._changed(author, stored, None)
                        return Outcome.DELETED
                return Outcome.NOT_FOUND
            finally:
                self._finish_operation()

    def set_from_headers(
        self, headers: Iterable[tuple[str, str]], host: str, author: Any = None
    ) -> list[Outcome]:
        """Add every cookie set by the Set-Cookie headers of a response from ``host``."""
        return [self.add(cookie, author) for cookie in cookies_from_headers(headers, host)]

    def all_cookies(self) -> list[Cookie]:
        """
        Copies of every cookie in the jar. Cookies of one domain keep their
        arrival order; the order between domains is unspecified.
        """
        with self._lock:
            return [cookie.copy() for cookies in self._domains.values() for cookie in cookies]

    def cookies_by_recency(self) -> list[tuple[int, Cookie]]:
        """Copies of every cookie paired with its serial, least recent first."""
        with self._lock:
            pairs = [
                (self._serials[id(cookie)], cookie.copy())
                for cookies in self._domains.values()
                for cookie in cookies
            ]
        pairs.sort(key=itemgetter(0))
        return pairs

    def serial_of(self, cookie: Cookie) -> int | None:
        """Serial of a cookie object held by the jar, None for any other object."""
        with self._lock:
            return self._serials.get(id(cookie))

    def domains(self) -> list[str]:
        with self._lock:
            return list(self._domains)

    def close(self) -> None:
        """Drop every cookie, serial and handler."""
        with self._lock:
            self._domains.clear()
            self._serials.clear()
            self._handlers.clear()

    def __len__(self) -> int:
        with self._lock:
            return sum(len(cookies) for cookies in self._domains.values())

    def __contains__(self, cookie: object) -> bool:
        if not isinstance(cookie, Cookie) or cookie.domain is None:
            return False
        with self._lock:
            return cookie in self._domains.get(ascii_lower(cookie.domain), [])

    def __iter__(self) -> Iterator[Cookie]:
        return iter(self.all_cookies())

    def __enter__(self) -> CookieJar:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<CookieJar {len(self)} cookies in {len(self.domains())} domains>"

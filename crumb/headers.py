from __future__ import annotations

import logging
from collections.abc import Iterable
from http.cookies import CookieError, SimpleCookie

from crumb.cookie import Cookie

LOGGER = logging.getLogger(__name__)


def parse_set_cookie(value: str, host: str) -> list[Cookie]:
    """
    Parse a single Set-Cookie header value received from ``host``.

    Malformed values are logged and produce no cookies.
    """
    parsed = SimpleCookie()
    try:
        parsed.load(value)
    except CookieError as exc:
        LOGGER.debug("dropping malformed Set-Cookie from %s: %s", host, exc)
        return []
    return [Cookie.from_morsel(morsel, host) for morsel in parsed.values()]


def cookies_from_headers(headers: Iterable[tuple[str, str]], host: str) -> list[Cookie]:
    cookies: list[Cookie] = []
    for name, value in headers:
        if name.lower() != "set-cookie":
            continue
        cookies.extend(parse_set_cookie(value, host))
    return cookies

import logging

from crumb.cookie import Cookie, equal
from crumb.errors import CrumbError, InvalidCookieError, JarBusyError
from crumb.headers import cookies_from_headers, parse_set_cookie
from crumb.jar import CookieJar, Outcome

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Cookie",
    "CookieJar",
    "Outcome",
    "equal",
    "CrumbError",
    "InvalidCookieError",
    "JarBusyError",
    "cookies_from_headers",
    "parse_set_cookie",
]

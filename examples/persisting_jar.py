#!/usr/bin/env python3
"""
Change Notification Example

Feeds a few Set-Cookie responses to a jar and records every change as a
JSON line, the way a persistence layer would follow the jar.
"""

import json

import click
from crumb import Cookie, CookieJar, Outcome

RESPONSES = [
    ("example.com", "session=abc123; Path=/; HttpOnly"),
    ("example.com", "theme=dark; Path=/; Max-Age=86400"),
    ("example.com", "session=def456; Path=/; HttpOnly"),
    ("example.com", "theme=dark; Path=/; Max-Age=86400"),
    ("api.example.com", "token=xyz; Domain=example.com; Secure"),
    ("example.com", "session=; Path=/; Max-Age=0"),
    ("example.com", "stale=1; Path=/; Expires=Wed, 21 Oct 2015 07:28:00 GMT"),
]


def describe(cookie: Cookie | None) -> dict | None:
    if cookie is None:
        return None
    return {
        "name": cookie.name,
        "value": cookie.value,
        "domain": cookie.domain,
        "path": cookie.path,
        "expires": cookie.expires.isoformat() if cookie.expires else None,
    }


class RecordingJar(CookieJar):
    """Jar that writes every change it did not make itself."""

    def __init__(self, out) -> None:
        self.out = out
        super().__init__()

    def changed(self, author, old, new) -> None:
        if author is self:
            return
        record = {
            "serial": self.serial_of(new) if new is not None else None,
            "author": author,
            "old": describe(old),
            "new": describe(new),
        }
        self.out.write(json.dumps(record) + "\n")


@click.command()
@click.option("--output", type=click.File("w"), default="-", help="Where to write change records.")
def main(output) -> None:
    jar = RecordingJar(output)

    for host, header in RESPONSES:
        outcomes = jar.set_from_headers([("Set-Cookie", header)], host, author="transport")
        if not outcomes:
            click.secho(f"{host}: {header} -> ignored", fg="red", err=True)
        for outcome in outcomes:
            color = "red" if outcome in (Outcome.EXPIRED, Outcome.DISCARDED) else "green"
            click.secho(f"{host}: {header} -> {outcome.value}", fg=color, err=True)

    click.secho("\nStored, least recent first:", fg="yellow", err=True)
    for serial, cookie in jar.cookies_by_recency():
        click.secho(f"  #{serial} {cookie.domain} {cookie.name}={cookie.value}", err=True)


if __name__ == "__main__":
    main()

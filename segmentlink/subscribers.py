"""Subscriber verification database."""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass

DATABASE_FILE = "Verification_Database.txt"
MAX_SUBSCRIBERS = 10

STATUS_UNKNOWN = -1
STATUS_NOT_PAID = 0
STATUS_PAID = 1


@dataclass(frozen=True)
class Subscriber:
    """One database entry: number, technology and payment status."""

    number: int
    technology: int
    status: int


def parse_subscribers(lines: Iterable[str | bytes]) -> list[Subscriber]:
    """Parse lines of ``number technology status``; blank lines are skipped."""
    subscribers: list[Subscriber] = []
    for line_no, line in enumerate(lines, start=1):
        if isinstance(line, bytes):
            line = line.decode("utf-8", errors="replace")
        fields = line.split()
        if not fields:
            continue
        if len(fields) < 3:
            raise ValueError(f"line {line_no}: expected subscriber number, technology and status")
        try:
            number, technology, status = (int(field) for field in fields[:3])
        except ValueError as exc:
            raise ValueError(f"line {line_no}: {exc}") from None
        if len(subscribers) == MAX_SUBSCRIBERS:
            raise ValueError(f"database holds more than {MAX_SUBSCRIBERS} subscribers")
        subscribers.append(Subscriber(number, technology, status))
    return subscribers


def load_subscribers(path: str | os.PathLike = DATABASE_FILE) -> list[Subscriber]:
    """Read the verification database from ``path``."""
    with open(path, encoding="utf-8") as handle:
        return parse_subscribers(handle)


def verify_user(subscribers: Iterable[Subscriber], number: int, technology: int) -> int:
    """Return the status of the matching subscriber, or STATUS_UNKNOWN."""
    return next(
        (s.status for s in subscribers if s.number == number and s.technology == technology),
        STATUS_UNKNOWN,
    )
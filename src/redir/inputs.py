"""Start URL extraction from free-form text."""

from __future__ import annotations

import re
from typing import Iterable, Iterator

URL_PATTERN = re.compile(r"https?://[^\s]+")


def extract_url(line: str) -> str | None:
    match = URL_PATTERN.search(line)
    return match.group(0) if match else None


def iter_urls(lines: Iterable[str]) -> Iterator[str]:
    """Yield the first http(s) URL of every line; lines without one are skipped."""
    for line in lines:
        url = extract_url(line)
        if url:
            yield url

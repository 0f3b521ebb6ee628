"""Utility helpers for scraping third-party pages."""

from __future__ import annotations

import json
import math
import re
from typing import Any, Callable


JSON_LD_RE = re.compile(
    r"<script[^>]*type=\"application/ld\+json\"[^>]*>(.*?)</script>",
    re.DOTALL | re.IGNORECASE,
)
LINE_BREAK_RE = re.compile(r"<br\s*/?\s*>", re.IGNORECASE)
TAG_RE = re.compile(r"<[^>]+>")
WHITESPACE_RE = re.compile(r"\s+")
ENTITY_RE = re.compile(r"&(lt|gt|amp|quot|#39|nbsp);")

HTML_ENTITIES = {
    "&lt;": "<",
    "&gt;": ">",
    "&amp;": "&",
    "&quot;": '"',
    "&#39;": "'",
    "&nbsp;": " ",
}


def decode_entities(text: str | None) -> str:
    """Decode the handful of HTML entities review sites commonly emit."""

    if not text:
        return ""
    return ENTITY_RE.sub(lambda match: HTML_ENTITIES[match.group(0)], text)


def clean_text(html: str | None) -> str:
    """Reduce an HTML fragment to a single line of readable text."""

    if not html:
        return ""
    text = LINE_BREAK_RE.sub("\n", html)
    text = TAG_RE.sub(" ", text)
    text = WHITESPACE_RE.sub(" ", text).strip()
    return decode_entities(text)


def find_json_ld(
    html: str, predicate: Callable[[dict[str, Any]], bool]
) -> dict[str, Any] | None:
    """Return the first structured-data block on the page matching ``predicate``.

    Script bodies that are not valid JSON are skipped. Top-level arrays are
    searched item by item.
    """

    for match in JSON_LD_RE.finditer(html or ""):
        try:
            payload = json.loads(match.group(1))
        except json.JSONDecodeError:
            continue
        candidates = payload if isinstance(payload, list) else [payload]
        for candidate in candidates:
            if isinstance(candidate, dict) and predicate(candidate):
                return candidate
    return None


def parse_float(value: Any) -> float | None:
    """Return ``value`` as a finite float, or ``None`` when it is not numeric."""

    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip().replace(",", ""))
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number


def parse_int(value: Any) -> int | None:
    """Return the leading integer in ``value`` ignoring thousands separators."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    match = re.match(r"\s*(\d[\d,]*)", str(value))
    if not match:
        return None
    return int(match.group(1).replace(",", ""))


def image_url(value: Any) -> str | None:
    """Resolve a structured-data ``image`` field to a URL string."""

    if isinstance(value, str):
        return value or None
    if isinstance(value, dict):
        url = value.get("url")
        return url if isinstance(url, str) and url else None
    if isinstance(value, list):
        for item in value:
            resolved = image_url(item)
            if resolved:
                return resolved
    return None

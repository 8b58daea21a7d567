"""Identifier normalization for integration ids and dispatch names."""

from __future__ import annotations

import re
import unicodedata

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]+")
_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")


def _transliterate(value: str) -> str:
    """Strip accents from Latin letters (``é`` -> ``e``).

    Other non-ASCII characters are kept so the separator pass turns them
    into ``_`` rather than gluing their neighbours together.
    """
    normalized = unicodedata.normalize("NFKD", value)
    return "".join(ch for ch in normalized if not unicodedata.combining(ch))


def sanitize_function_name(name: str) -> str:
    """Turn an action id into a name safe for tool-calling protocols.

    Every run of non-alphanumeric characters becomes one ``_`` and leading or
    trailing underscores are stripped, so ``send_grid.send_email`` becomes
    ``send_grid_send_email``. Idempotent. Distinct ids may collide.
    """
    return _NON_ALNUM.sub("_", _transliterate(name)).strip("_")


def to_snake_case(name: str) -> str:
    """Derive an integration id from a display name (``SendGrid`` -> ``send_grid``).

    Idempotent: an already snake-cased value is returned unchanged.
    """
    value = _transliterate(name)
    value = _ACRONYM_BOUNDARY.sub(r"\1_\2", value)
    value = _CAMEL_BOUNDARY.sub(r"\1_\2", value)
    return _NON_ALNUM.sub("_", value).strip("_").lower()

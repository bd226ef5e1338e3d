"""
Aggregation type codec.

Stat widgets need a base kind (``stat``) and a calculation mode.
Contexts that only carry one type discriminator fold both into an
encoded tag::

    encode_type("stat", "sum")      -> "statcard-sum"
    decode_type("statcard-sum")     -> ("stat", "sum")
    decode_type("stat")             -> ("stat", "count")
    decode_type("statcard")         -> ("stat", "count")
    decode_type("bar")              -> ("bar", None)

The legacy un-hyphenated spelling (``statcardsum``) is still accepted
on read, and a bare ``statcard`` with no mode is read like a plain
``stat`` tag.  Encoding always produces the hyphenated form.
"""

from __future__ import annotations

import logging
import re
from typing import Optional, Tuple

from smart_widgets.core.errors import WidgetConfigError
from smart_widgets.models.widget import CALCULATION_MODES

logger = logging.getLogger(__name__)

STAT_BASE = "stat"
ENCODED_PREFIX = "statcard-"

_ENCODED_PATTERN = re.compile(
    r"^statcard-?(" + "|".join(CALCULATION_MODES) + r")?$",
    re.IGNORECASE,
)


def encode_type(base: str, mode: Optional[str] = None) -> str:
    """Fold *mode* into *base* when *base* is ``stat``; pass through otherwise."""
    if base != STAT_BASE:
        return base
    mode = (mode or "count").lower()
    if mode not in CALCULATION_MODES:
        raise WidgetConfigError(f"Unknown calculation type '{mode}'")
    return f"{ENCODED_PREFIX}{mode}"


def decode_type(tag: str, fallback_mode: Optional[str] = None) -> Tuple[str, Optional[str]]:
    """
    Split *tag* into ``(base, mode)``.

    ``fallback_mode`` is used only for a tag without a mode (``stat``,
    ``statcard``); an encoded mode always wins over it.
    """
    match = _ENCODED_PATTERN.match(tag or "")
    if match and match.group(1):
        mode = match.group(1).lower()
        if fallback_mode and fallback_mode.lower() != mode:
            logger.warning(
                f"[Codec] '{tag}' disagrees with calculationType "
                f"'{fallback_mode}', using '{mode}'"
            )
        return STAT_BASE, mode

    if match or tag == STAT_BASE:
        mode = (fallback_mode or "count").lower()
        if mode not in CALCULATION_MODES:
            logger.warning(f"[Codec] Unknown calculationType '{fallback_mode}', using 'count'")
            mode = "count"
        return STAT_BASE, mode

    return tag, None


def is_encoded_stat(tag: str) -> bool:
    return bool(_ENCODED_PATTERN.match(tag or ""))


def is_stat_tag(tag: str) -> bool:
    return tag == STAT_BASE or is_encoded_stat(tag)

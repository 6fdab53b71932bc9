"""User-friendly names for bank transaction descriptions"""

import re
from typing import Optional

# Trailing reference clauses banks append to descriptions ("... WEB ID: 123")
_REFERENCE_SUFFIX = re.compile(
    r"\s+(?:(?:WEB|PPD|CO|TEL)\s+)?(?:ID\s*:|ID\b|CONFIRMATION\s*#|CONF\s*#).*$",
    re.IGNORECASE,
)
_FILLER_WORDS = {"for", "to"}


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


def format_display_name(name: Optional[str]) -> str:
    """
    Turn a raw bank description into something readable.

    Example:
        "KEEP THE CHANGE TRANSFER TO ACCT FOR" -> "Keep The Change Transfer Acct"
    """
    if not name:
        return ""

    trimmed = _REFERENCE_SUFFIX.sub("", name.strip())
    words = [word for word in trimmed.split() if word.lower() not in _FILLER_WORDS]
    return " ".join(_capitalize(word) for word in words)


def format_external_name(external_name: Optional[str]) -> str:
    return format_display_name(external_name)

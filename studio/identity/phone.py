"""Validate and canonicalize participant phone numbers.

Accepted written forms of the same mobile number:
    +972 5X XXX XXXX   (international, with plus)
    972 5X XXX XXXX    (international, without plus)
    05X XXX XXXX       (trunk prefix)

Spaces and hyphens between digits are ignored. Every accepted form
normalizes to ``+9725XXXXXXXX``, which is what gets stored and compared.
"""
import re

CANONICAL_PREFIX = "+972"

_SEPARATORS = re.compile(r"[\s-]+")
_PATTERNS = (
    re.compile(r"^\+9725[0-9]{8}$"),
    re.compile(r"^9725[0-9]{8}$"),
    re.compile(r"^05[0-9]{8}$"),
)


def _strip(raw: str) -> str:
    return _SEPARATORS.sub("", raw or "")


def validate(raw: str | None) -> bool:
    """Return True if ``raw`` is a local mobile number in an accepted form."""
    if not raw:
        return False
    cleaned = _strip(raw)
    return any(pattern.match(cleaned) for pattern in _PATTERNS)


def normalize(raw: str) -> str:
    """Rewrite an accepted phone number into the canonical form.

    Raises:
        ValueError: if ``raw`` is not an accepted form.
    """
    if not validate(raw):
        raise ValueError(f"Invalid phone number: {raw!r}")

    cleaned = _strip(raw)
    if cleaned.startswith("+"):
        return cleaned
    if cleaned.startswith("972"):
        return "+" + cleaned
    # Trunk form: drop the leading 0
    return CANONICAL_PREFIX + cleaned[1:]

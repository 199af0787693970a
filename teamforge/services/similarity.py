"""Text normalisation, token similarity and the keyword detectors used by the scorers."""

import math
import re
from typing import Iterable, List

_WHITESPACE_RE = re.compile(r"\s+")
_NON_WORD_RE = re.compile(r"\W+")
_ACCUMULATOR_RE = re.compile(r"[+\-*/]=")
_RETURN_RE = re.compile(r"\breturn\b")

COMMENT_MARKERS = ("//", "#", "/*", "*")
STATEMENT_KEYWORDS = ("let ", "const ", "var ", "return ")
LINE_TERMINATORS = (";", "{", "}")


def normalize(text) -> str:
    """Collapse whitespace runs, trim and lowercase. Non-strings become ``""``."""
    if not isinstance(text, str):
        return ""
    return _WHITESPACE_RE.sub(" ", text).strip().lower()


def tokenize(text) -> List[str]:
    """Split normalised text on non-word boundaries, dropping empty tokens."""
    return [token for token in _NON_WORD_RE.split(normalize(text)) if token]


def token_similarity(a, b) -> float:
    """
    Share of ``a``'s tokens that also appear in ``b``, over the longer token list.

    Identical (normalised, non-empty) texts score exactly 1.0. Membership in
    ``b`` is set-based, so a repeated token in ``a`` counts every time.
    """
    norm_a, norm_b = normalize(a), normalize(b)
    if norm_a and norm_a == norm_b:
        return 1.0

    tokens_a = tokenize(norm_a)
    tokens_b = tokenize(norm_b)
    longest = max(len(tokens_a), len(tokens_b))
    if longest == 0:
        return 0.0

    vocabulary_b = set(tokens_b)
    common = sum(1 for token in tokens_a if token in vocabulary_b)
    return common / longest


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounding up (2.5 -> 3, 74.5 -> 75)."""
    return int(math.floor(value + 0.5))


def clamp(value: float, low: int = 0, high: int = 100) -> float:
    return max(low, min(high, value))


# ── Pattern detectors (case-sensitive) ──

def contains_any(text: str, keywords: Iterable[str]) -> bool:
    return any(keyword in text for keyword in keywords)


def is_comment_line(line: str) -> bool:
    return line.lstrip().startswith(COMMENT_MARKERS)


def is_statement_line(line: str) -> bool:
    """Lines that declare, accumulate into, or return a value."""
    return contains_any(line, STATEMENT_KEYWORDS) or bool(_ACCUMULATOR_RE.search(line))


def has_terminator(line: str) -> bool:
    return line.rstrip().endswith(LINE_TERMINATORS)


def has_function_definition(code: str) -> bool:
    return "function " in code or bool(re.search(r"^\s*def ", code, re.MULTILINE))


def has_return(code: str) -> bool:
    return bool(_RETURN_RE.search(code))


def unterminated_statements(code: str) -> List[str]:
    """Non-comment statement lines that do not end in ``;``, ``{`` or ``}``."""
    missing = []
    for raw_line in code.split("\n"):
        line = raw_line.strip()
        if not line or is_comment_line(line):
            continue
        if is_statement_line(line) and not has_terminator(line):
            missing.append(line)
    return missing

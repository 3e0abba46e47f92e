"""String similarity used to score fuzzy candidates."""

from rapidfuzz import fuzz


def similarity(a: str, b: str) -> float:
    """Normalized Indel similarity of two strings, in [0, 1].

    1.0 exactly when the strings are equal, 0.0 when they share no
    characters. Case is not folded here; callers lower-case both sides.
    Empty or missing input scores 0.0.
    """
    if not a or not b:
        return 0.0
    return fuzz.ratio(a, b, processor=None) / 100.0

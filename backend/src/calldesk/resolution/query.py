"""Filter construction for client searches.

Turns a search request into two campaign-scoped filters:

1. Phone filter: bounds the candidate set using phone fragments
2. Exact filter: phone filter plus case-insensitive full-string
   equality on the supplied name and first name

User input only ever reaches a pattern through PatternBuilder.literal(),
which escapes it.
"""

import re
from dataclasses import dataclass, field
from uuid import UUID

from ..models import SearchRequest


@dataclass(frozen=True)
class FieldPattern:
    """A regular expression constraint on one client column."""

    field: str
    pattern: str
    case_insensitive: bool = False

    def matches(self, value: str | None) -> bool:
        """Evaluate the constraint against a value in Python.

        A trailing ``$`` anchor only matches at the very end of the value,
        as with PostgreSQL's ``~`` and ``~*`` operators.
        """
        if value is None:
            return False
        flags = re.IGNORECASE if self.case_insensitive else 0
        return re.search(_end_of_string(self.pattern), value, flags) is not None


def _end_of_string(pattern: str) -> str:
    body = pattern[:-1]
    escapes = len(body) - len(body.rstrip("\\"))
    if pattern.endswith("$") and escapes % 2 == 0:
        return body + r"\Z"
    return pattern


@dataclass(frozen=True)
class ClientFilter:
    """Campaign membership plus zero or more column patterns."""

    campaign_id: UUID
    patterns: tuple[FieldPattern, ...] = field(default_factory=tuple)

    def with_pattern(self, pattern: FieldPattern) -> "ClientFilter":
        return ClientFilter(self.campaign_id, self.patterns + (pattern,))

    def pattern_for(self, column: str) -> FieldPattern | None:
        for pattern in self.patterns:
            if pattern.field == column:
                return pattern
        return None


class PatternBuilder:
    """Assembles a regular expression from anchors and escaped literals."""

    def __init__(self):
        self._parts: list[str] = []

    def start(self) -> "PatternBuilder":
        self._parts.append("^")
        return self

    def end(self) -> "PatternBuilder":
        self._parts.append("$")
        return self

    def optional_plus(self) -> "PatternBuilder":
        self._parts.append(r"\+?")
        return self

    def digits(self) -> "PatternBuilder":
        self._parts.append(r"\d*")
        return self

    def literal(self, text: str) -> "PatternBuilder":
        self._parts.append(re.escape(text))
        return self

    def build(self) -> str:
        return "".join(self._parts)


def phone_pattern(start: str | None, end: str | None) -> str | None:
    """Build the phone pattern for the supplied fragments.

    Returns None when neither fragment is present.
    """
    builder = PatternBuilder()
    if start and end:
        builder.start().optional_plus().literal(start).digits().literal(end).end()
    elif start:
        builder.start().optional_plus().literal(start)
    elif end:
        builder.literal(end).end()
    else:
        return None
    return builder.build()


def exact_pattern(value: str) -> str:
    """Anchored full-string pattern for an exact name comparison."""
    return PatternBuilder().start().literal(value).end().build()


class QueryBuilder:
    """Builds the phone and exact filters for a search request."""

    def build(self, request: SearchRequest) -> tuple[ClientFilter, ClientFilter]:
        """Return (phone_filter, exact_filter) for the request."""
        phone_filter = ClientFilter(campaign_id=request.campaign_id)

        pattern = phone_pattern(
            request.phone_fragment_start, request.phone_fragment_end
        )
        if pattern is not None:
            phone_filter = phone_filter.with_pattern(FieldPattern("phone", pattern))

        exact_filter = phone_filter
        if request.name:
            exact_filter = exact_filter.with_pattern(
                FieldPattern("name", exact_pattern(request.name), case_insensitive=True)
            )
        if request.first_name:
            exact_filter = exact_filter.with_pattern(
                FieldPattern(
                    "firstname",
                    exact_pattern(request.first_name),
                    case_insensitive=True,
                )
            )

        return phone_filter, exact_filter

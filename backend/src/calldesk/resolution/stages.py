"""Exact and fuzzy resolution passes.

Exact pass: one cheap query for a case-insensitive full-name match.
Only a unique hit counts; zero or several hits fall through.

Fuzzy pass: streams phone-filtered candidates, scores each one on
name and first name, and keeps the best. The scan is a fold over the
candidate stream that short-circuits on a near-perfect score or when
the candidate ceiling is reached.
"""

import asyncio
from dataclasses import dataclass
from typing import AsyncIterator, Callable, TypeVar

from ..logging import get_context_logger
from ..models import ClientRecord, SearchRequest
from .query import ClientFilter
from .similarity import similarity
from .store import ClientStore, StoreUnavailable

logger = get_context_logger(__name__)

T = TypeVar("T")
A = TypeVar("A")

EARLY_EXIT_THRESHOLD = 1.8


async def fold_until(
    items: AsyncIterator[T],
    step: Callable[[A, T], A],
    initial: A,
    done: Callable[[A], bool],
) -> A:
    """Fold an async iterator, stopping as soon as done(acc) holds."""
    acc = initial
    async for item in items:
        acc = step(acc, item)
        if done(acc):
            break
    return acc


class ExactMatchStage:
    """First pass: unique case-insensitive match on the exact filter."""

    def __init__(self, store: ClientStore):
        self.store = store

    async def run(self, exact_filter: ClientFilter) -> ClientRecord | None:
        # Two rows are enough to tell "unique" from "ambiguous"
        records = await self.store.find_exact(exact_filter, limit=2)
        if len(records) == 1:
            return records[0]
        if len(records) > 1:
            logger.debug(
                "Exact pass ambiguous, deferring to fuzzy pass",
                extra={"campaign_id": str(exact_filter.campaign_id)},
            )
        return None


@dataclass(frozen=True)
class FuzzyAccumulator:
    """Best-so-far state of a fuzzy scan."""

    best_score: float = 0.0
    best: ClientRecord | None = None
    last_score: float = 0.0
    examined: int = 0

    def add(self, candidate: ClientRecord, score: float) -> "FuzzyAccumulator":
        # Strictly greater: the first candidate to reach a score keeps it
        if score > self.best_score:
            return FuzzyAccumulator(score, candidate, score, self.examined + 1)
        return FuzzyAccumulator(
            self.best_score, self.best, score, self.examined + 1
        )


@dataclass(frozen=True)
class FuzzyOutcome:
    """Result of a completed fuzzy scan."""

    best_score: float
    best: ClientRecord | None
    examined: int
    early_exit: bool = False
    truncated: bool = False


class FuzzyMatchStage:
    """Second pass: stream phone-filtered candidates and score them."""

    def __init__(
        self,
        store: ClientStore,
        scorer: Callable[[str, str], float] = similarity,
        early_exit_threshold: float = EARLY_EXIT_THRESHOLD,
        max_candidates: int | None = None,
        timeout_seconds: float | None = None,
    ):
        self.store = store
        self.scorer = scorer
        self.early_exit_threshold = early_exit_threshold
        self.max_candidates = max_candidates
        self.timeout_seconds = timeout_seconds

    def score(self, request: SearchRequest, candidate: ClientRecord) -> float:
        """Combined name + first name similarity, each term in [0, 1]."""
        total = 0.0
        if request.name and candidate.name:
            total += self.scorer(request.name.lower(), candidate.name.lower())
        if request.first_name and candidate.firstname:
            total += self.scorer(
                request.first_name.lower(), candidate.firstname.lower()
            )
        return total

    async def run(
        self, request: SearchRequest, phone_filter: ClientFilter
    ) -> FuzzyOutcome:
        scan = self._scan(request, phone_filter)
        if self.timeout_seconds is None:
            return await scan
        try:
            return await asyncio.wait_for(scan, timeout=self.timeout_seconds)
        except asyncio.TimeoutError as e:
            logger.error(
                f"Fuzzy scan exceeded {self.timeout_seconds}s",
                extra={"campaign_id": str(phone_filter.campaign_id)},
            )
            raise StoreUnavailable("Fuzzy scan timed out") from e

    async def _scan(
        self, request: SearchRequest, phone_filter: ClientFilter
    ) -> FuzzyOutcome:
        def step(acc: FuzzyAccumulator, candidate: ClientRecord) -> FuzzyAccumulator:
            return acc.add(candidate, self.score(request, candidate))

        def done(acc: FuzzyAccumulator) -> bool:
            return self._is_confident(acc) or self._is_capped(acc)

        async with self.store.stream(phone_filter) as candidates:
            acc = await fold_until(candidates, step, FuzzyAccumulator(), done)

        truncated = self._is_capped(acc) and not self._is_confident(acc)
        if truncated:
            logger.warning(
                f"Fuzzy scan stopped at the {self.max_candidates} candidate ceiling",
                extra={"campaign_id": str(phone_filter.campaign_id)},
            )

        return FuzzyOutcome(
            best_score=acc.best_score,
            best=acc.best,
            examined=acc.examined,
            early_exit=self._is_confident(acc),
            truncated=truncated,
        )

    def _is_confident(self, acc: FuzzyAccumulator) -> bool:
        return acc.examined > 0 and acc.last_score >= self.early_exit_threshold

    def _is_capped(self, acc: FuzzyAccumulator) -> bool:
        return self.max_candidates is not None and acc.examined >= self.max_candidates

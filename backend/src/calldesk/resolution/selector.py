"""Match results and the selector that produces them."""

from enum import Enum

from pydantic import BaseModel

from ..logging import log_resolution_event
from ..models import ClientRecord
from .stages import FuzzyOutcome

ACCEPT_THRESHOLD = 0.5


class MatchPass(str, Enum):
    """Which resolution pass produced a result."""

    EXACT = "exact"
    FUZZY = "fuzzy"
    NONE = "none"


class MatchResult(BaseModel):
    """Outcome of a client search: Found(record, pass) or NotFound."""

    record: ClientRecord | None = None
    match_pass: MatchPass = MatchPass.NONE
    score: float | None = None
    candidates_examined: int | None = None

    @property
    def found(self) -> bool:
        return self.record is not None

    @classmethod
    def not_found(
        cls, score: float | None = None, candidates_examined: int | None = None
    ) -> "MatchResult":
        return cls(score=score, candidates_examined=candidates_examined)


class ResultSelector:
    """Turns stage outcomes into MatchResults and reports the pass used."""

    def __init__(self, accept_threshold: float = ACCEPT_THRESHOLD):
        self.accept_threshold = accept_threshold

    def exact(self, record: ClientRecord) -> MatchResult:
        return MatchResult(record=record, match_pass=MatchPass.EXACT)

    def fuzzy(self, outcome: FuzzyOutcome) -> MatchResult:
        if outcome.best is not None and outcome.best_score >= self.accept_threshold:
            return MatchResult(
                record=outcome.best,
                match_pass=MatchPass.FUZZY,
                score=outcome.best_score,
                candidates_examined=outcome.examined,
            )
        return MatchResult.not_found(
            score=outcome.best_score if outcome.best is not None else None,
            candidates_examined=outcome.examined,
        )

    def report(self, result: MatchResult, campaign_id: str) -> MatchResult:
        """Log which pass resolved the search; the result passes through."""
        log_resolution_event(
            match_pass=result.match_pass.value,
            campaign_id=campaign_id,
            client_id=str(result.record.id) if result.record else None,
            score=result.score,
            candidates_examined=result.candidates_examined,
        )
        return result

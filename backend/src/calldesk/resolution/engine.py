"""Client identity resolution.

Resolves a caller-supplied name, first name and phone fragments to the
single client of a campaign they designate.

Resolution flow:
1. Exact pass (unique case-insensitive name match) -> pass: exact
2. Fuzzy pass over phone-filtered candidates -> pass: fuzzy
3. Nothing above the acceptance threshold -> NotFound

A request without any identifying field is NotFound; the store is not
queried.

Store failures propagate as StoreUnavailable; they are never reported
as NotFound.
"""

from ..config import Settings
from ..models import SearchRequest
from .query import QueryBuilder
from .selector import ACCEPT_THRESHOLD, MatchResult, ResultSelector
from .stages import EARLY_EXIT_THRESHOLD, ExactMatchStage, FuzzyMatchStage
from .store import ClientStore


class ClientResolver:
    """Runs the exact and fuzzy passes for a search request."""

    def __init__(
        self,
        store: ClientStore,
        accept_threshold: float = ACCEPT_THRESHOLD,
        early_exit_threshold: float = EARLY_EXIT_THRESHOLD,
        max_candidates: int | None = None,
        timeout_seconds: float | None = None,
    ):
        """Initialize the resolver.

        Args:
            store: Client store the passes query
            accept_threshold: Minimum combined score for a fuzzy match
            early_exit_threshold: Combined score that ends the fuzzy scan
            max_candidates: Ceiling on candidates scored per search
            timeout_seconds: Wall-clock budget for the fuzzy scan
        """
        self.queries = QueryBuilder()
        self.exact_stage = ExactMatchStage(store)
        self.fuzzy_stage = FuzzyMatchStage(
            store,
            early_exit_threshold=early_exit_threshold,
            max_candidates=max_candidates,
            timeout_seconds=timeout_seconds,
        )
        self.selector = ResultSelector(accept_threshold)

    @classmethod
    def from_settings(cls, store: ClientStore, settings: Settings) -> "ClientResolver":
        return cls(
            store,
            accept_threshold=settings.resolution_accept_threshold,
            early_exit_threshold=settings.resolution_early_exit_threshold,
            max_candidates=settings.resolution_max_candidates,
            timeout_seconds=settings.resolution_scan_timeout_seconds,
        )

    async def resolve(self, request: SearchRequest) -> MatchResult:
        """Resolve a search request to at most one client.

        Args:
            request: Validated search, scoped to its campaign

        Returns:
            MatchResult carrying the record and the pass that found it

        Raises:
            StoreUnavailable: If either pass could not query the store
        """
        if not request.has_criteria:
            return self.selector.report(
                MatchResult.not_found(), str(request.campaign_id)
            )

        phone_filter, exact_filter = self.queries.build(request)

        record = await self.exact_stage.run(exact_filter)
        if record is not None:
            result = self.selector.exact(record)
        else:
            outcome = await self.fuzzy_stage.run(request, phone_filter)
            result = self.selector.fuzzy(outcome)

        return self.selector.report(result, str(request.campaign_id))

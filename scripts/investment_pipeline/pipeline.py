"""
Main pipeline orchestrator.
"""
import logging
import random
import time
from datetime import datetime, UTC
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence, Union

from .analyzers import ItemAnalyzer
from .config import Config, MarketProfile
from .exceptions import CatalogError, InvalidInputError
from .filters import CandidateFilter
from .models import AnalysisResult, CatalogEntry, ItemId, PipelineResult
from .normalizer import SeriesNormalizer
from .ranking import rank_results
from .utils.budget import parse_budget, parse_item_count

logger = logging.getLogger(__name__)

FetchFn = Callable[[ItemId], Any]

MODES = ('sample', 'until_found')


class PipelineState(str, Enum):
    IDLE = 'idle'
    SELECTING = 'selecting'
    FETCHING = 'fetching'
    ANALYZING = 'analyzing'
    COLLECTING = 'collecting'
    RANKING = 'ranking'
    DONE = 'done'


def _utc_now() -> str:
    return datetime.now(UTC).isoformat().replace('+00:00', 'Z')


class InvestmentPipeline:
    """Fetches, analyses, filters and ranks catalog items for one market."""

    def __init__(
        self,
        market: MarketProfile,
        fetch: FetchFn,
        budget: Union[str, float],
        top_n: Optional[int] = None,
        candidate_filter: Optional[CandidateFilter] = None,
        normalizer: Optional[SeriesNormalizer] = None,
        rng: Optional[random.Random] = None,
        delay: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize pipeline.

        Args:
            market: Market profile (scoring constants, delay, filter stage)
            fetch: Callable returning a raw history payload, or None, for an item id
            budget: Budget as a number or compact string ("2.5m")
            top_n: Number of recommendations to keep (default from market)
            candidate_filter: Liquidity/limit/membership rules
            normalizer: Raw payload normalizer
            rng: Random source for item selection
            delay: Seconds between fetches (default from market)
            sleep: Sleep function, replaceable in tests
            clock: Monotonic clock used for elapsed time
        """
        # Invalid input fails here, before anything is fetched
        self.budget = parse_budget(budget)
        self.top_n = parse_item_count(top_n if top_n is not None else market.top_n)

        self.market = market
        self.fetch = fetch
        self.filter = candidate_filter or CandidateFilter()
        if self.filter.allowed_tiers is not None and not market.has_tiers:
            # Every entry would fail the tier check, but only after its fetch
            raise InvalidInputError(
                f"{market.display_name} has no membership tiers; drop the tier restriction"
            )
        self.normalizer = normalizer or SeriesNormalizer()
        self.analyzer = ItemAnalyzer(market.scoring)
        self.rng = rng or random.Random()
        self.delay = market.request_delay if delay is None else delay
        self.sleep = sleep
        self.clock = clock

        self.state = PipelineState.IDLE
        self.result: Optional[PipelineResult] = None

    def run(
        self,
        catalog: Sequence[CatalogEntry],
        item_count: Optional[int] = None,
        mode: Optional[str] = None
    ) -> PipelineResult:
        """
        Execute the pipeline.

        Args:
            catalog: Candidate items in any order
            item_count: Items to sample ('sample') or to find ('until_found');
                None analyses the whole catalog
            mode: 'sample' or 'until_found' (default from market)

        Returns:
            PipelineResult with ranked recommendations and run counters
        """
        mode = mode or self.market.default_mode
        if mode not in MODES:
            raise ValueError(f"Unknown mode '{mode}' (expected one of: {', '.join(MODES)})")
        count = parse_item_count(item_count) if item_count is not None else None

        self.state = PipelineState.IDLE
        self.result = PipelineResult(
            market=self.market.key,
            budget=self.budget,
            started_at=_utc_now()
        )
        started = self.clock()
        collected: List[AnalysisResult] = []

        logger.info('=' * 80)
        logger.info(f"{self.market.display_name.upper()} INVESTMENT ANALYSIS")
        logger.info('=' * 80)
        logger.info(f"Budget: {self.budget:,.0f} {self.market.currency}")
        logger.info(f"Mode: {mode}" + (f" ({count} items)" if count else " (all items)"))

        try:
            queue = self._step_select(catalog, count, mode)
            target = count if mode == 'until_found' else None
            self._step_analyze(queue, target, collected)

            self.state = PipelineState.RANKING
            self.result.recommendations = rank_results(collected, self.top_n)
            self.result.add_log('Rank', 'success', f'{len(self.result.recommendations)} recommendations')

            self.state = PipelineState.DONE
            return self.result

        except KeyboardInterrupt:
            logger.warning("[INTERRUPTED] Pipeline cancelled by user")
            self.result.add_error('Pipeline', 'Cancelled by user')
            self.result.recommendations = rank_results(collected, self.top_n)
            raise

        except Exception as e:
            logger.error(f"[FATAL ERROR] Pipeline failed: {e}")
            self.result.add_error('Pipeline', str(e))
            self.result.recommendations = rank_results(collected, self.top_n)
            raise

        finally:
            self.result.analyzed = list(collected)
            self.result.total_analyzed = len(collected)
            self.result.elapsed_seconds = self.clock() - started
            self.result.completed_at = _utc_now()

    def _step_select(
        self,
        catalog: Sequence[CatalogEntry],
        count: Optional[int],
        mode: str
    ) -> List[CatalogEntry]:
        """Filter the catalog (when the market filters up front) and draw the run's items."""
        self.state = PipelineState.SELECTING
        self.result.add_log('Select', 'started')

        candidates = list(catalog or [])
        self.result.catalog_count = len(candidates)
        if not candidates:
            raise CatalogError("Catalog is empty")

        if self.market.filter_stage == 'catalog':
            candidates = [e for e in candidates if self.filter.prefilter(e, self.budget) is None]
            logger.info(f"{len(candidates):,} of {self.result.catalog_count:,} catalog items pass the filters")
            if not candidates:
                raise CatalogError("No catalog items pass the liquidity and limit filters")

        self.rng.shuffle(candidates)
        if mode == 'sample' and count is not None:
            candidates = candidates[:min(count, len(candidates))]

        self.result.add_log('Select', 'success', f'{len(candidates)} items queued')
        return candidates

    def _step_analyze(
        self,
        queue: List[CatalogEntry],
        target: Optional[int],
        collected: List[AnalysisResult]
    ):
        """Fetch and analyse items one at a time, pausing between requests."""
        total = len(queue)
        logger.info(f"Analyzing up to {total:,} items...")

        for i, entry in enumerate(queue):
            if target is not None and len(collected) >= target:
                break

            if i > 0 and self.delay > 0:
                self.sleep(self.delay)

            self.result.total_checked += 1
            analysis = self._analyze_entry(entry)
            if analysis is not None:
                self.state = PipelineState.COLLECTING
                collected.append(analysis)

            checked = self.result.total_checked
            if checked % Config.PROGRESS_EVERY == 0 or checked == total:
                logger.info(f"Progress: {checked}/{total} ({len(collected)} analyzed)")

        logger.info(f"[SUCCESS] Analyzed {len(collected)} items ({self.result.total_checked} checked)")

    def _analyze_entry(self, entry: CatalogEntry) -> Optional[AnalysisResult]:
        self.state = PipelineState.FETCHING
        logger.debug(f"Checking {entry.name} ({entry.id})")
        try:
            raw = self.fetch(entry.id)
        except Exception as e:
            logger.warning(f"Fetch failed for {entry.name} ({entry.id}): {e}")
            self.result.add_error('Fetch', f'{entry.id}: {e}')
            return None

        if raw is None:
            logger.warning(f"No data for {entry.name} ({entry.id})")
            self.result.add_error('Fetch', f'{entry.id}: no data')
            return None

        self.state = PipelineState.ANALYZING
        series = self.normalizer.normalize(raw)
        if not series:
            logger.warning(f"No usable history for {entry.name} ({entry.id})")
            self.result.add_error('Fetch', f'{entry.id}: no usable history')
            return None

        analysis = self.analyzer.analyze(entry, series, self.budget)
        if analysis is None:
            return None

        if self.market.filter_stage == 'series' and not self.filter.accept(
            entry,
            analysis.units_affordable,
            analysis.source_volume,
            analysis.current_price
        ):
            return None

        return analysis

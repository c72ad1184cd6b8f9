"""Concurrent fetch-and-aggregate flows over a record store."""
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional, Tuple, Union

from coinary.ledger.aggregator import range_totals, summarize_month, weekly_category_totals, CategoryTotals
from coinary.ledger.models import MonetaryRecord, MonthlySummary, RangeTotals, RecordKind, TimeRange
from coinary.ledger.windows import rolling_months, time_range_window, week_window
from coinary.store.base import RecordStore
from coinary.utils.logger import get_logger
from coinary.utils.retry import retry_with_backoff

logger = get_logger()

Task = Tuple[Callable, tuple]


@dataclass
class MonthSnapshot:
    """Records fetched for one month of a rolling window."""
    month: int
    year: int
    incomes: List[MonetaryRecord] = field(default_factory=list)
    expenses: List[MonetaryRecord] = field(default_factory=list)
    failed: bool = False


class SummaryOrchestrator:
    """Fans store fetches out over a thread pool and aggregates the results.

    Each fetch is retried on retryable store errors and bounded by a
    timeout. A fetch that still fails degrades the affected month or
    window to empty data instead of failing the whole call.
    """

    def __init__(
        self,
        store: RecordStore,
        window_size: int = 3,
        max_workers: int = 6,
        fetch_timeout: float = 15.0,
        max_retries: int = 3,
        initial_delay: float = 1.0,
        backoff_factor: float = 2.0
    ):
        """
        Initialize orchestrator.

        Args:
            store: Persistence collaborator
            window_size: Default number of months in a rolling summary
            max_workers: Maximum concurrent fetches
            fetch_timeout: Seconds to wait for each fetch
            max_retries: Attempts per fetch on retryable errors
            initial_delay: First retry delay in seconds
            backoff_factor: Multiplier between retry delays
        """
        self.store = store
        self.window_size = window_size
        self.max_workers = max_workers
        self.fetch_timeout = fetch_timeout
        self._fetch = retry_with_backoff(
            max_retries=max_retries,
            backoff_factor=backoff_factor,
            initial_delay=initial_delay
        )(self._call)

    @classmethod
    def from_settings(cls, store: RecordStore, settings) -> "SummaryOrchestrator":
        return cls(
            store,
            window_size=settings.rolling_window_months,
            max_workers=settings.max_concurrent_fetches,
            fetch_timeout=settings.fetch_timeout_seconds,
            max_retries=settings.retry_max_retries,
            initial_delay=settings.retry_initial_delay_seconds,
            backoff_factor=settings.retry_backoff_factor
        )

    @staticmethod
    def _call(func: Callable, *args):
        return func(*args)

    def _gather(self, tasks: List[Task]) -> List[Union[object, Exception]]:
        """
        Run fetches concurrently and collect their results in task order.

        A task that raises or times out contributes its exception instead
        of a result.
        """
        executor = ThreadPoolExecutor(max_workers=self.max_workers)
        try:
            futures = [executor.submit(self._fetch, func, *args) for func, args in tasks]
            results = []
            for future in futures:
                try:
                    results.append(future.result(timeout=self.fetch_timeout))
                except Exception as e:
                    results.append(e)
            return results
        finally:
            # Hung fetches must not hold up the caller
            executor.shutdown(wait=False, cancel_futures=True)

    def fetch_window(self, month: int, year: int, size: Optional[int] = None) -> List[MonthSnapshot]:
        """
        Fetch incomes and expenses for every month of a rolling window.

        Args:
            month: Target month (1-12)
            year: Target year
            size: Months in the window, target included

        Returns:
            One snapshot per month, oldest first
        """
        months = rolling_months(month, year, self.window_size if size is None else size)

        tasks: List[Task] = []
        for m, y in months:
            tasks.append((self.store.fetch_month, (RecordKind.INCOME, m, y)))
            tasks.append((self.store.fetch_month, (RecordKind.EXPENSE, m, y)))

        results = self._gather(tasks)

        snapshots = []
        for index, (m, y) in enumerate(months):
            incomes, expenses = results[2 * index], results[2 * index + 1]
            errors = [r for r in (incomes, expenses) if isinstance(r, Exception)]
            if errors:
                logger.error(f"Error fetching summary for {m}/{y}: {errors[0]!r}")
                snapshots.append(MonthSnapshot(month=m, year=y, failed=True))
            else:
                snapshots.append(MonthSnapshot(month=m, year=y, incomes=incomes, expenses=expenses))

        return sorted(snapshots, key=lambda s: (s.year, s.month))

    def build(self, month: int, year: int, size: Optional[int] = None) -> List[MonthlySummary]:
        """Rolling income/expense summary ending at the target month, oldest first."""
        snapshots = self.fetch_window(month, year, size)
        summaries = [
            MonthlySummary.empty(s.month, s.year) if s.failed
            else summarize_month(s.month, s.year, s.incomes, s.expenses)
            for s in snapshots
        ]
        failed = sum(1 for s in snapshots if s.failed)
        logger.info(
            f"Built {len(summaries)}-month summary ending {month}/{year}"
            + (f" ({failed} months degraded to zero)" if failed else "")
        )
        return summaries

    def weekly_summary(self, reference: Optional[datetime] = None) -> CategoryTotals:
        """Expense totals per category for the Monday-Sunday week of reference."""
        reference = reference or datetime.now()
        window = week_window(reference)
        result, = self._gather([(self.store.fetch_range, (RecordKind.EXPENSE, window.start, window.end))])
        if isinstance(result, Exception):
            logger.error(f"Error fetching weekly expenses: {result!r}")
            return {}
        return weekly_category_totals(reference, result)

    def dashboard(self, time_range: TimeRange = TimeRange.WEEK, now: Optional[datetime] = None) -> RangeTotals:
        """Income, expense and per-category expense totals for a dashboard period."""
        window = time_range_window(time_range, now)
        incomes, expenses = self._gather([
            (self.store.fetch_range, (RecordKind.INCOME, window.start, window.end)),
            (self.store.fetch_range, (RecordKind.EXPENSE, window.start, window.end)),
        ])
        if isinstance(incomes, Exception):
            logger.error(f"Error fetching total income: {incomes!r}")
            incomes = []
        if isinstance(expenses, Exception):
            logger.error(f"Error fetching total expenses: {expenses!r}")
            expenses = []
        return range_totals(incomes, expenses)

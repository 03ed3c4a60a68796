"""
RELGRAPH Pass Statistics

Per-pass view of the statistics gateway. Each statistic is fetched at most
once per pass, and a failed statistic is recorded, logged and then read as
zero (or an empty key) so the pass continues with what it has.
"""

import threading
from typing import Dict, List, Optional, Tuple

from ..core.logger import Logger
from .statistics_gateway import StatisticError, StatisticResult, StatisticsGateway


class PassStatistics:
    """Memoising, failure-recording front for a ``StatisticsGateway``."""

    def __init__(self, gateway: StatisticsGateway, logger: Optional[Logger] = None):
        self.gateway = gateway
        self.logger = logger or Logger("pass_statistics")
        self.failures: List[Tuple[str, StatisticError]] = []
        self._distinct: Dict[Tuple[str, str], int] = {}
        self._grouped: Dict[Tuple[str, str, str], int] = {}
        self._lock = threading.Lock()

    def _fallback(self, subject: str, result: StatisticResult, default):
        if not result.ok:
            with self._lock:
                self.failures.append((subject, result.error))
            self.logger.warning(
                f"Statistic unavailable for {subject} ({result.error.kind}): {result.error.message}; using {default!r}"
            )
        return result.value_or(default)

    def distinct_count(self, entity: str, column: str) -> int:
        key = (entity, column)
        if key not in self._distinct:
            result = self.gateway.distinct_count(entity, column)
            value = self._fallback(f"{entity}.{column}", result, 0)
            with self._lock:
                self._distinct[key] = value
        return self._distinct[key]

    def grouped_max(self, entity: str, group_by: str, count_column: str) -> int:
        key = (entity, group_by, count_column)
        if key not in self._grouped:
            result = self.gateway.grouped_max_distinct(entity, group_by, count_column)
            value = self._fallback(f"{entity}.{group_by}->{count_column}", result, 0)
            with self._lock:
                self._grouped[key] = value
        return self._grouped[key]

    def grouped_max_pair(self, entity: str, first: str, second: str) -> Tuple[int, int]:
        """Grouped maxima in both directions: (first->second, second->first)."""
        return (
            self.grouped_max(entity, first, second),
            self.grouped_max(entity, second, first),
        )

    def primary_key_columns(self, entity: str) -> List[str]:
        result = self.gateway.primary_key_columns(entity)
        return list(self._fallback(f"primary key of {entity}", result, []))

"""
RELGRAPH Fact Emitter

Accumulates the facts produced during one inference pass. Appends happen
under a lock so that concurrent pair classification can share one emitter.
"""

import threading
from collections import Counter
from typing import Any, Dict, List, Optional, Type

from pydantic import ValidationError

from ..core.logger import Logger
from .facts import Fact


class FactEmitter:
    """
    Fact buffer with validation.

    ``emit`` appends an already built fact. ``record`` builds the fact first
    and skips it, with an error log, when its fields are malformed; a bad fact
    never aborts the pass.
    """

    def __init__(self, logger: Optional[Logger] = None):
        self.logger = logger or Logger("fact_emitter")
        self._facts: List[Fact] = []
        self._lock = threading.Lock()
        self.rejected = 0

    def emit(self, fact: Fact) -> None:
        """Append a fact."""
        with self._lock:
            self._facts.append(fact)

    def record(self, fact_cls: Type[Fact], **fields: Any) -> Optional[Fact]:
        """
        Build a fact of ``fact_cls`` and emit it.

        Args:
            fact_cls (Type[Fact]): Fact model to build
            **fields: Model fields

        Returns:
            Optional[Fact]: The emitted fact, or None if it was rejected
        """
        try:
            fact = fact_cls(**fields)
        except ValidationError as e:
            with self._lock:
                self.rejected += 1
            self.logger.error(
                f"Skipping malformed {fact_cls.__name__} {fields}: "
                f"{e.error_count()} validation error(s): {e.errors()[0]['msg']}"
            )
            return None
        self.emit(fact)
        return fact

    @property
    def facts(self) -> List[Fact]:
        """Facts in emission order."""
        with self._lock:
            return list(self._facts)

    def sorted_facts(self) -> List[Fact]:
        """Facts in canonical order, independent of emission order."""
        return sorted(self.facts, key=lambda fact: fact.sort_key())

    def counts_by_kind(self) -> Dict[str, int]:
        counts = Counter(fact.kind.value for fact in self.facts)
        return dict(sorted(counts.items()))

    def clear(self) -> None:
        with self._lock:
            self._facts.clear()
            self.rejected = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._facts)

"""
RELGRAPH Relationship Classifier

Classifies every column pair of a table as one-to-many, many-to-many or
unrelated from the grouped maximum statistic in both directions:

    i1 = max distinct ``second`` values per ``first`` group
    i2 = max distinct ``first`` values per ``second`` group

    i1 == 1, i2 > 1  -> one-to-many, one side ``first``
    i1 > 1,  i2 == 1 -> one-to-many, one side ``second``
    i1 > 1,  i2 > 1  -> many-to-many
    anything else    -> no fact (1:1 coincidences and empty tables included)
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type

from ..core.logger import Logger
from ..core.models import InferenceSettings
from ..model.emitter import FactEmitter
from ..model.facts import Fact, ManyToManyFact, OneToManyFact
from .pass_statistics import PassStatistics
from .subsets import pairs

Decision = Tuple[Type[Fact], Dict[str, Any]]


class RelationshipClassifier:
    """Pairwise one-to-many / many-to-many classification."""

    def __init__(self, statistics: PassStatistics, emitter: FactEmitter, settings: Optional[InferenceSettings] = None):
        self.statistics = statistics
        self.emitter = emitter
        self.settings = settings or InferenceSettings()
        self.logger = Logger("relationship_classifier")

    def decide(self, first: str, second: str, i1: int, i2: int) -> Optional[Decision]:
        """Apply the decision table to one pair's grouped maxima."""
        single = self.settings.relationship_threshold
        if i1 == single and i2 > single:
            return OneToManyFact, {"one": first, "many": second}
        if i1 > single and i2 == single:
            return OneToManyFact, {"one": second, "many": first}
        if i1 > single and i2 > single:
            return ManyToManyFact, {"first": first, "second": second}
        return None

    def fetch(self, entity: str, pair: Tuple[str, str]) -> Tuple[int, int]:
        first, second = pair
        i1, i2 = self.statistics.grouped_max_pair(entity, first, second)
        self.logger.debug(f"{entity}: {first} -> {i1}, {second} -> {i2}")
        return i1, i2

    def emit_decision(self, entity: str, first: str, second: str, i1: int, i2: int) -> Optional[Fact]:
        decision = self.decide(first, second, i1, i2)
        if decision is None:
            return None
        fact_cls, fields = decision
        return self.emitter.record(fact_cls, entity=entity, **fields)

    def classify(self, entity: str, first: str, second: str) -> Optional[Fact]:
        """Fetch, decide and emit for one pair."""
        i1, i2 = self.fetch(entity, (first, second))
        return self.emit_decision(entity, first, second, i1, i2)

    def classify_table(self, entity: str, columns: Sequence[str], max_workers: int = 1) -> List[Fact]:
        """
        Classify every column pair of one table.

        With ``max_workers > 1`` statistics for the pairs are fetched
        concurrently; decisions are still emitted in pair enumeration order.

        Args:
            entity (str): Table name
            columns (Sequence[str]): All columns of the table
            max_workers (int): Threads for statistic fetching

        Returns:
            List[Fact]: Relationship facts emitted for the table
        """
        all_pairs = list(pairs(columns))
        if max_workers > 1 and len(all_pairs) > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                maxima = list(executor.map(lambda pair: self.fetch(entity, pair), all_pairs))
        else:
            maxima = [self.fetch(entity, pair) for pair in all_pairs]

        facts = []
        for (first, second), (i1, i2) in zip(all_pairs, maxima):
            fact = self.emit_decision(entity, first, second, i1, i2)
            if fact is not None:
                facts.append(fact)
        self.logger.debug(f"{entity}: {len(all_pairs)} column pairs, {len(facts)} relationships")
        return facts

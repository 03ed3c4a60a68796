"""
RELGRAPH Key Classifier

Turns a table's declared primary key into key facts. A single-column key is
a single key. A compound key is analysed pair by pair: each pair of key
columns gets a compound key fact, and when both grouped maxima reach the
strength threshold the column with the lower grouped maximum (the one whose
groups its partner fragments less) is marked strong, its partner weak.

Keys of three or more columns are still only analysed as pairs.
"""

from typing import List, Optional, Sequence, Tuple

from ..core.logger import Logger
from ..core.models import InferenceSettings
from ..model.emitter import FactEmitter
from ..model.facts import CompoundKeyFact, Fact, KeyStrengthFact, SingleKeyFact
from .pass_statistics import PassStatistics
from .subsets import pairs


class KeyClassifier:
    """Single / compound key classification with strong-weak ranking."""

    def __init__(self, statistics: PassStatistics, emitter: FactEmitter, settings: Optional[InferenceSettings] = None):
        self.statistics = statistics
        self.emitter = emitter
        self.settings = settings or InferenceSettings()
        self.logger = Logger("key_classifier")

    def rank(self, first: str, second: str, i1: int, i2: int) -> Optional[Tuple[str, str]]:
        """
        Rank a compound key pair as (strong, weak).

        Args:
            first (str): First key column
            second (str): Second key column
            i1 (int): Grouped maximum first -> second
            i2 (int): Grouped maximum second -> first

        Returns:
            Optional[Tuple[str, str]]: (strong, weak), or None when below the
            threshold on either side or tied
        """
        threshold = self.settings.strength_threshold
        if i1 < threshold or i2 < threshold:
            return None
        if i1 < i2:
            return first, second
        if i1 > i2:
            return second, first
        return None

    def classify(self, entity: str, key_columns: Sequence[str]) -> List[Fact]:
        """
        Emit the key facts for one table.

        Returns:
            List[Fact]: Facts emitted (empty when the table has no key)
        """
        facts: List[Fact] = []
        if not key_columns:
            self.logger.debug(f"{entity}: no primary key")
            return facts

        if len(key_columns) == 1:
            fact = self.emitter.record(SingleKeyFact, entity=entity, column=key_columns[0])
            return [fact] if fact is not None else facts

        if len(key_columns) > 2:
            self.logger.debug(f"{entity}: {len(key_columns)}-column key analysed pairwise only")

        for first, second in pairs(key_columns):
            compound = self.emitter.record(CompoundKeyFact, entity=entity, first=first, second=second)
            if compound is not None:
                facts.append(compound)

            i1, i2 = self.statistics.grouped_max_pair(entity, first, second)
            self.logger.debug(f"compound key {entity}: {first} -> {i1}, {second} -> {i2}")
            ranking = self.rank(first, second, i1, i2)
            if ranking is None:
                continue
            strong, weak = ranking
            strength = self.emitter.record(
                KeyStrengthFact, entity=entity, first=first, second=second, strong=strong, weak=weak
            )
            if strength is not None:
                facts.append(strength)
        return facts

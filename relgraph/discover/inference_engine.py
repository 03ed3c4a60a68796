"""
RELGRAPH Inference Engine

Runs one read-and-derive pass over a schema. For each table, in name order:
1. Columns - membership and underlying data type
2. Dimensions - distinct count and discrete/scalar label per column
3. Keys - declared primary key columns, single or compound key facts
4. Relationships - one-to-many / many-to-many over every column pair

Statistic failures do not stop the pass; an unreachable statistics source
does (``GatewayConnectionError`` propagates to the caller).
"""

import time
from collections import Counter, OrderedDict
from dataclasses import dataclass
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ..core.logger import Logger
from ..core.models import InferenceSettings
from ..model.emitter import FactEmitter
from ..model.facts import (
    ColumnFact,
    DataTypeFact,
    DimensionFact,
    DimensionLabel,
    DistinctCountFact,
    Fact,
    KeyColumnFact,
)
from .dimension_classifier import DimensionClassifier
from .key_classifier import KeyClassifier
from .pass_statistics import PassStatistics
from .relationship_classifier import RelationshipClassifier
from .statistics_gateway import ColumnInfo, StatisticsGateway


class InferenceSummary(BaseModel):
    """Counts describing one inference pass."""
    schema_name: str = Field(..., description="Schema analyzed")
    total_tables: int = Field(0, description="Tables seen in the catalog")
    total_columns: int = Field(0, description="Columns seen in the catalog")
    total_facts: int = Field(0, description="Facts emitted")
    facts_by_kind: Dict[str, int] = Field(default_factory=dict, description="Facts emitted per kind")
    statistic_failures: int = Field(0, description="Statistics that fell back to zero")
    rejected_facts: int = Field(0, description="Malformed facts skipped")
    processing_time_ms: int = Field(0, description="Wall time of the pass")


@dataclass
class InferenceResult:
    facts: List[Fact]
    summary: InferenceSummary

    def sorted_facts(self) -> List[Fact]:
        """Facts in canonical order, for order-insensitive consumers."""
        return sorted(self.facts, key=lambda fact: fact.sort_key())


class InferenceEngine:
    """
    Relational structure inference over a statistics gateway.

    The engine depends only on the gateway interface and on the explicit
    settings it is given.
    """

    def __init__(self, gateway: StatisticsGateway, settings: Optional[InferenceSettings] = None):
        self.gateway = gateway
        self.settings = settings or InferenceSettings()
        self.dimension_classifier = DimensionClassifier(self.settings)
        self.logger = Logger("inference_engine")

    @staticmethod
    def _group_by_entity(columns: List[ColumnInfo]) -> "OrderedDict[str, List[ColumnInfo]]":
        grouped: Dict[str, List[ColumnInfo]] = {}
        for info in columns:
            grouped.setdefault(info.entity, []).append(info)
        return OrderedDict((entity, grouped[entity]) for entity in sorted(grouped))

    def run(self, schema: str, emitter: Optional[FactEmitter] = None) -> InferenceResult:
        """
        Infer facts for every table of ``schema``.

        Args:
            schema (str): Schema to analyze
            emitter (Optional[FactEmitter]): Fact sink; a fresh one by default.
                Facts it already holds are kept but not reported.

        Returns:
            InferenceResult: Emitted facts and a pass summary

        Raises:
            GatewayConnectionError: If the catalog cannot be read
        """
        started = time.perf_counter()
        self.logger.log_phase_start("inference", schema=schema)

        emitter = emitter if emitter is not None else FactEmitter()
        already_emitted = len(emitter)
        already_rejected = emitter.rejected
        statistics = PassStatistics(self.gateway)
        key_classifier = KeyClassifier(statistics, emitter, self.settings)
        relationship_classifier = RelationshipClassifier(statistics, emitter, self.settings)

        columns = self.gateway.list_columns(schema)
        tables = self._group_by_entity(columns)

        for entity, infos in tables.items():
            self.logger.info(f"Processing table: {entity} ({len(infos)} columns)")
            self._describe_columns(entity, infos, emitter)
            self._classify_dimensions(entity, infos, statistics, emitter)
            self._classify_keys(entity, infos, statistics, key_classifier, emitter)
            names = [info.column for info in infos]
            relationship_classifier.classify_table(entity, names, self.settings.max_workers)

        facts = emitter.facts[already_emitted:]
        facts_by_kind = Counter(fact.kind.value for fact in facts)
        summary = InferenceSummary(
            schema_name=schema,
            total_tables=len(tables),
            total_columns=len(columns),
            total_facts=len(facts),
            facts_by_kind=dict(sorted(facts_by_kind.items())),
            statistic_failures=len(statistics.failures),
            rejected_facts=emitter.rejected - already_rejected,
            processing_time_ms=int((time.perf_counter() - started) * 1000),
        )
        self.logger.log_phase_complete("inference", schema=schema)
        self.logger.info(
            f"Schema {schema}: {summary.total_tables} tables, {summary.total_facts} facts, "
            f"{summary.statistic_failures} statistic failures, {summary.rejected_facts} rejected facts"
        )
        return InferenceResult(facts=facts, summary=summary)

    def _describe_columns(self, entity: str, infos: List[ColumnInfo], emitter: FactEmitter) -> None:
        if not self.settings.include_descriptive:
            return
        for info in infos:
            emitter.record(ColumnFact, entity=entity, column=info.column)
            emitter.record(DataTypeFact, entity=entity, column=info.column, data_type=info.udt_name)

    def _classify_dimensions(self, entity: str, infos: List[ColumnInfo], statistics: PassStatistics, emitter: FactEmitter) -> None:
        for info in infos:
            count = statistics.distinct_count(entity, info.column)
            if self.settings.include_descriptive:
                emitter.record(DistinctCountFact, entity=entity, column=info.column, count=count)
            label = self.dimension_classifier.classify(info, count)
            if label is not DimensionLabel.UNCLASSIFIED:
                emitter.record(DimensionFact, entity=entity, column=info.column, dimension=label)

    def _classify_keys(
        self,
        entity: str,
        infos: List[ColumnInfo],
        statistics: PassStatistics,
        key_classifier: KeyClassifier,
        emitter: FactEmitter,
    ) -> None:
        known = {info.column for info in infos}
        key_columns = []
        for name in statistics.primary_key_columns(entity):
            if name in known:
                key_columns.append(name)
            else:
                self.logger.warning(f"{entity}: primary key column {name!r} not in catalog, ignored")

        if self.settings.include_descriptive:
            for name in key_columns:
                emitter.record(KeyColumnFact, entity=entity, column=name)
        key_classifier.classify(entity, key_columns)

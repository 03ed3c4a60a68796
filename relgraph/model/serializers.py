"""
RELGRAPH Fact Serializers

Renders inferred facts for downstream consumers:
- N-Triples graph statements
- JSON records
- CSV rows (via pandas)
"""

import io
import json
from typing import Callable, Dict, Iterable, List, TextIO, Tuple
from urllib.parse import quote

import pandas as pd

from ..core.models import OutputFormat
from .facts import Fact, FactKind

XSD_INTEGER = "http://www.w3.org/2001/XMLSchema#integer"

CSV_COLUMNS = [
    "kind", "entity", "column", "data_type", "count", "dimension",
    "first", "second", "strong", "weak", "one", "many",
]

Triple = Tuple[str, str, str]


class FactSerializer:
    """Base class: turn a sequence of facts into text."""

    media_type = "text/plain"

    def serialize(self, facts: Iterable[Fact]) -> str:
        raise NotImplementedError

    def write(self, facts: Iterable[Fact], stream: TextIO) -> None:
        stream.write(self.serialize(facts))


class NTriplesSerializer(FactSerializer):
    """
    N-Triples rendering of facts.

    IRIs follow the scheme ``{base}entity/{table}`` for entities,
    ``{base}entity/{table}/column/{column}`` for columns, and
    ``/compound/``, ``/one2many/`` and ``/many2many/`` nodes for pairs.
    Predicates live under ``{base}predicate/``.
    """

    media_type = "application/n-triples"

    def __init__(self, base_iri: str = "http://dooodle/"):
        if not base_iri.endswith("/"):
            base_iri += "/"
        self.base_iri = base_iri
        self._renderers: Dict[FactKind, Callable[[Fact], List[Triple]]] = {
            FactKind.COLUMN: self._column,
            FactKind.DATA_TYPE: self._data_type,
            FactKind.DISTINCT_COUNT: self._distinct_count,
            FactKind.DIMENSION: self._dimension,
            FactKind.KEY_COLUMN: self._key_column,
            FactKind.SINGLE_KEY: self._single_key,
            FactKind.COMPOUND_KEY: self._compound_key,
            FactKind.KEY_STRENGTH: self._key_strength,
            FactKind.ONE_TO_MANY: self._one_to_many,
            FactKind.MANY_TO_MANY: self._many_to_many,
        }

    # IRI construction

    @staticmethod
    def _segment(name: str) -> str:
        # keeps [A-Za-z0-9_.-~], encodes '/', spaces and anything IRIREF forbids
        return quote(name, safe="")

    def _iri(self, path: str) -> str:
        return f"<{self.base_iri}{path}>"

    def entity_iri(self, entity: str) -> str:
        return self._iri(f"entity/{self._segment(entity)}")

    def column_iri(self, entity: str, column: str) -> str:
        return self._iri(f"entity/{self._segment(entity)}/column/{self._segment(column)}")

    def pair_iri(self, entity: str, middle: str, first: str, second: str) -> str:
        return self._iri(
            f"entity/{self._segment(entity)}/{middle}/{self._segment(first)}/{self._segment(second)}"
        )

    def predicate(self, name: str) -> str:
        return self._iri(f"predicate/{name}")

    @staticmethod
    def integer_literal(value: int) -> str:
        return f'"{int(value)}"^^<{XSD_INTEGER}>'

    # Fact renderers

    def _column(self, fact) -> List[Triple]:
        return [(self.entity_iri(fact.entity), self.predicate("hasColumn"), self.column_iri(fact.entity, fact.column))]

    def _data_type(self, fact) -> List[Triple]:
        return [(
            self.column_iri(fact.entity, fact.column),
            self.predicate("hasDataType"),
            self._iri(f"dataType/{self._segment(fact.data_type)}"),
        )]

    def _distinct_count(self, fact) -> List[Triple]:
        return [(self.column_iri(fact.entity, fact.column), self.predicate("numDistinct"), self.integer_literal(fact.count))]

    def _dimension(self, fact) -> List[Triple]:
        return [(
            self.column_iri(fact.entity, fact.column),
            self.predicate("hasDimension"),
            self._iri(f"dimension/{fact.dimension.value}"),
        )]

    def _key_column(self, fact) -> List[Triple]:
        return [(self.entity_iri(fact.entity), self.predicate("hasKey"), self.column_iri(fact.entity, fact.column))]

    def _single_key(self, fact) -> List[Triple]:
        return [(self.entity_iri(fact.entity), self.predicate("hasSingleKey"), self.column_iri(fact.entity, fact.column))]

    def _compound_key(self, fact) -> List[Triple]:
        node = self.pair_iri(fact.entity, "compound", fact.first, fact.second)
        return [(self.entity_iri(fact.entity), self.predicate("hasCompoundKey"), node)]

    def _key_strength(self, fact) -> List[Triple]:
        node = self.pair_iri(fact.entity, "compound", fact.first, fact.second)
        return [
            (node, self.predicate("hasStrongKey"), self.column_iri(fact.entity, fact.strong)),
            (node, self.predicate("hasWeakKey"), self.column_iri(fact.entity, fact.weak)),
        ]

    def _one_to_many(self, fact) -> List[Triple]:
        node = self.pair_iri(fact.entity, "one2many", fact.one, fact.many)
        return [
            (self.entity_iri(fact.entity), self.predicate("hasOne2ManyKey"), node),
            (node, self.predicate("hasOneKey"), self.column_iri(fact.entity, fact.one)),
            (node, self.predicate("hasManyKey"), self.column_iri(fact.entity, fact.many)),
        ]

    def _many_to_many(self, fact) -> List[Triple]:
        node = self.pair_iri(fact.entity, "many2many", fact.first, fact.second)
        return [
            (self.entity_iri(fact.entity), self.predicate("hasMany2ManyKey"), node),
            (node, self.predicate("hasManyKey"), self.column_iri(fact.entity, fact.first)),
            (node, self.predicate("hasManyKey"), self.column_iri(fact.entity, fact.second)),
        ]

    def triples(self, fact: Fact) -> List[Triple]:
        """Graph statements for one fact."""
        return self._renderers[fact.kind](fact)

    def serialize(self, facts: Iterable[Fact]) -> str:
        lines = []
        for fact in facts:
            for subject, predicate, obj in self.triples(fact):
                lines.append(f"{subject} {predicate} {obj} .\n")
        return "".join(lines)


class JsonSerializer(FactSerializer):
    """JSON array of fact records."""

    media_type = "application/json"

    def records(self, facts: Iterable[Fact]) -> List[Dict]:
        return [fact.model_dump(mode="json") for fact in facts]

    def serialize(self, facts: Iterable[Fact]) -> str:
        return json.dumps(self.records(facts), indent=2) + "\n"


class CsvSerializer(FactSerializer):
    """One CSV row per fact; columns a fact does not use are left empty."""

    media_type = "text/csv"

    def to_dataframe(self, facts: Iterable[Fact]) -> pd.DataFrame:
        records = [fact.model_dump(mode="json") for fact in facts]
        present = {key for record in records for key in record}
        columns = [name for name in CSV_COLUMNS if name in present] or ["kind", "entity"]
        return pd.DataFrame(records, columns=columns, dtype=object)

    def serialize(self, facts: Iterable[Fact]) -> str:
        buffer = io.StringIO()
        self.to_dataframe(facts).to_csv(buffer, index=False)
        return buffer.getvalue()


def get_serializer(output_format, base_iri: str = "http://dooodle/") -> FactSerializer:
    """
    Get the serializer for a format name.

    Raises:
        ValueError: For an unsupported format
    """
    fmt = OutputFormat(output_format)
    if fmt is OutputFormat.NTRIPLES:
        return NTriplesSerializer(base_iri)
    if fmt is OutputFormat.JSON:
        return JsonSerializer()
    return CsvSerializer()

"""
RELGRAPH Model Layer

Fact shapes produced by the inference engine and their renderings:
- Fact models (keys, dimensions, relationships, descriptive facts)
- Fact emitter buffering one pass
- N-Triples, JSON and CSV serializers
"""

from .facts import (
    Fact,
    FactKind,
    DimensionLabel,
    ColumnFact,
    DataTypeFact,
    DistinctCountFact,
    DimensionFact,
    KeyColumnFact,
    SingleKeyFact,
    CompoundKeyFact,
    KeyStrengthFact,
    OneToManyFact,
    ManyToManyFact,
)
from .emitter import FactEmitter
from .serializers import (
    FactSerializer,
    NTriplesSerializer,
    JsonSerializer,
    CsvSerializer,
    get_serializer,
)

__all__ = [
    'Fact',
    'FactKind',
    'DimensionLabel',
    'ColumnFact',
    'DataTypeFact',
    'DistinctCountFact',
    'DimensionFact',
    'KeyColumnFact',
    'SingleKeyFact',
    'CompoundKeyFact',
    'KeyStrengthFact',
    'OneToManyFact',
    'ManyToManyFact',
    'FactEmitter',
    'FactSerializer',
    'NTriplesSerializer',
    'JsonSerializer',
    'CsvSerializer',
    'get_serializer',
]

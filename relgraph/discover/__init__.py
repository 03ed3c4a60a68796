"""
RELGRAPH Discover Phase

Inference of relational structure from catalog statistics:
- Statistics gateways (PostgreSQL, pandas DataFrames)
- Dimension classification
- Key classification (single, compound, strong/weak)
- Relationship classification (one-to-many, many-to-many)
- The inference engine running a full pass
"""

from .statistics_gateway import (
    ColumnInfo,
    StatisticError,
    StatisticResult,
    StatisticsGateway,
    PostgresStatisticsGateway,
    DataFrameStatisticsGateway,
    create_gateway,
)
from .subsets import pairs, subsets_of_size
from .pass_statistics import PassStatistics
from .dimension_classifier import DimensionClassifier
from .key_classifier import KeyClassifier
from .relationship_classifier import RelationshipClassifier
from .inference_engine import InferenceEngine, InferenceResult, InferenceSummary

__all__ = [
    'ColumnInfo',
    'StatisticError',
    'StatisticResult',
    'StatisticsGateway',
    'PostgresStatisticsGateway',
    'DataFrameStatisticsGateway',
    'create_gateway',
    'pairs',
    'subsets_of_size',
    'PassStatistics',
    'DimensionClassifier',
    'KeyClassifier',
    'RelationshipClassifier',
    'InferenceEngine',
    'InferenceResult',
    'InferenceSummary',
]

"""
RELGRAPH Dimension Classifier

Labels a column as a discrete or a scalar dimension, in the visualization
sense:
- discrete dimensions have a relatively small number of distinct values,
  which may or may not have a natural ordering; they choose a mark or vary
  a channel of a mark.
- scalar dimensions have a relatively large number of distinct values with a
  natural numeric ordering; they are represented by a channel of a mark.
"""

from typing import Optional

from ..core.models import InferenceSettings
from ..model.facts import DimensionLabel
from .statistics_gateway import ColumnInfo


class DimensionClassifier:
    """Discrete/scalar classification from distinct count and declared type."""

    def __init__(self, settings: Optional[InferenceSettings] = None):
        self.settings = settings or InferenceSettings()

    def is_geographic(self, column_name: str) -> bool:
        """Coordinates are numeric but not a meaningful scalar axis."""
        return any(marker in column_name for marker in self.settings.geo_markers)

    def classify(self, column: ColumnInfo, distinct_count: Optional[int]) -> DimensionLabel:
        """
        Classify one column; first matching rule wins.

        1. at most ``discrete_threshold`` distinct values -> discrete
        2. not geographic and declared type in ``scalar_types`` -> scalar
        3. otherwise unclassified

        A missing count reads as 0.
        """
        count = distinct_count or 0
        if count <= self.settings.discrete_threshold:
            return DimensionLabel.DISCRETE
        if not self.is_geographic(column.column) and column.data_type in self.settings.scalar_types:
            return DimensionLabel.SCALAR
        return DimensionLabel.UNCLASSIFIED

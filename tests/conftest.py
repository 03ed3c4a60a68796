"""
Pytest configuration for the RELGRAPH test suite.

Shared fixtures: a scripted statistics gateway whose every statistic is set
by the test, and small pandas-backed schemas.
"""

import sys
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd
import pytest

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from relgraph.core.exceptions import GatewayConnectionError
from relgraph.core.models import InferenceSettings
from relgraph.discover.statistics_gateway import (
    ColumnInfo,
    DataFrameStatisticsGateway,
    StatisticsGateway,
)


class ScriptedGateway(StatisticsGateway):
    """Gateway returning statistics from dictionaries; listed keys raise."""

    recoverable_errors = (RuntimeError,)

    def __init__(
        self,
        tables: Dict[str, Sequence[Tuple[str, str]]],
        primary_keys: Optional[Dict[str, List[str]]] = None,
        distinct: Optional[Dict[Tuple[str, str], int]] = None,
        grouped: Optional[Dict[Tuple[str, str, str], int]] = None,
        failing: Iterable[tuple] = (),
        unreachable: bool = False,
    ):
        super().__init__()
        self.tables = tables
        self.primary_keys = primary_keys or {}
        self.distinct = distinct or {}
        self.grouped = grouped or {}
        self.failing = set(failing)
        self.unreachable = unreachable
        self.grouped_calls: List[Tuple[str, str, str]] = []

    def _list_columns(self, schema):
        if self.unreachable:
            raise GatewayConnectionError("statistics source is down")
        return [
            ColumnInfo(entity, name, data_type, data_type)
            for entity, columns in self.tables.items()
            for name, data_type in columns
        ]

    def _primary_key_columns(self, entity):
        if (entity,) in self.failing:
            raise RuntimeError("no constraint access")
        return self.primary_keys.get(entity, [])

    def _distinct_count(self, entity, column_name):
        if (entity, column_name) in self.failing:
            raise RuntimeError("count failed")
        return self.distinct.get((entity, column_name), 0)

    def _grouped_max_distinct(self, entity, group_by, count_column):
        key = (entity, group_by, count_column)
        self.grouped_calls.append(key)
        if key in self.failing:
            raise RuntimeError("grouped maximum failed")
        return self.grouped.get(key, 1)


@pytest.fixture
def scripted_gateway():
    """Factory for a ScriptedGateway whose catalog is already loaded."""
    def make(*args, **kwargs) -> ScriptedGateway:
        gateway = ScriptedGateway(*args, **kwargs)
        if not gateway.unreachable:
            gateway.list_columns("public")
        return gateway
    return make


@pytest.fixture
def settings():
    """Default inference settings."""
    return InferenceSettings()


@pytest.fixture
def airline_tables():
    """A small schema with a compound key, a one-to-many pair and geo columns."""
    flight = pd.DataFrame({
        "airline_code": ["AA", "AA", "AA", "BA", "BA"],
        "flight_number": [1, 2, 3, 1, 2],
        "origin": ["JFK", "JFK", "LAX", "LHR", "LHR"],
    })
    airport = pd.DataFrame({
        "iata_code": [f"A{i:03d}" for i in range(150)],
        "city": [f"city{i % 120}" for i in range(150)],
        "elevation": list(range(150)),
        "latitude": [i / 3 for i in range(150)],
    })
    return {"flight": flight, "airport": airport}


@pytest.fixture
def airline_gateway(airline_tables):
    """DataFrame gateway over ``airline_tables`` with declared primary keys."""
    return DataFrameStatisticsGateway(
        airline_tables,
        primary_keys={"flight": ["airline_code", "flight_number"], "airport": ["iata_code"]},
    )

"""
RELGRAPH Statistics Gateway

Supplies the catalog and cardinality statistics the classifiers work from:
- column list of a schema (with declared and underlying types)
- declared primary key columns per table
- distinct value count per column
- grouped maximum of distinct values for a column pair

Every statistic comes back as a ``StatisticResult`` holding either a value
or an error; the caller decides what a failure falls back to. Identifiers
are checked against the catalog loaded by ``list_columns`` before any query
is built, and queries are built with SQLAlchemy constructs rather than
string interpolation.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd
from sqlalchemy import column, distinct, func, select, table
from sqlalchemy.exc import SQLAlchemyError

from ..core.database import DatabaseManager
from ..core.exceptions import GatewayConnectionError
from ..core.logger import Logger
from ..core.models import ConnectionSettings

QUERY_FAILED = "query_failed"
INVALID_IDENTIFIER = "invalid_identifier"

CATALOG_QUERY = """
SELECT c.table_name, c.column_name, c.data_type, c.udt_name
FROM information_schema.columns c
JOIN information_schema.tables t
  ON c.table_name = t.table_name AND c.table_schema = t.table_schema
WHERE c.table_schema = :schema
ORDER BY c.table_name, c.ordinal_position
"""

PRIMARY_KEY_QUERY = """
SELECT kc.column_name
FROM information_schema.table_constraints tc
JOIN information_schema.key_column_usage kc
  ON kc.table_name = tc.table_name
 AND kc.table_schema = tc.table_schema
 AND kc.constraint_name = tc.constraint_name
WHERE tc.constraint_type = 'PRIMARY KEY'
  AND tc.table_schema = :schema
  AND tc.table_name = :entity
  AND kc.ordinal_position IS NOT NULL
ORDER BY kc.ordinal_position
"""


@dataclass(frozen=True)
class ColumnInfo:
    """One catalog row: a column of an entity and its types."""
    entity: str
    column: str
    data_type: str
    udt_name: str


@dataclass(frozen=True)
class StatisticError:
    """Why a statistic could not be produced."""
    kind: str
    message: str


@dataclass(frozen=True)
class StatisticResult:
    """Either a statistic value or the error that prevented it."""
    value: Any = None
    error: Optional[StatisticError] = None

    @classmethod
    def success(cls, value: Any) -> "StatisticResult":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: str, message: str) -> "StatisticResult":
        return cls(error=StatisticError(kind, message))

    @property
    def ok(self) -> bool:
        return self.error is None

    def value_or(self, default: Any) -> Any:
        """The value, or ``default`` when the statistic failed."""
        return self.value if self.ok else default


class StatisticsGateway(ABC):
    """
    Base class for statistics sources.

    Subclasses implement the ``_``-prefixed fetch methods and list the
    exception types that mean "this one statistic failed" in
    ``recoverable_errors``; the public methods turn those into
    ``StatisticResult`` failures.
    """

    recoverable_errors: Tuple[type, ...] = ()

    def __init__(self):
        self.logger = Logger(type(self).__name__)
        self.schema: Optional[str] = None
        self._catalog: Dict[str, List[str]] = {}

    def connect(self) -> None:
        """Open the source. Raises GatewayConnectionError when unreachable."""

    def disconnect(self) -> None:
        """Release the source."""

    def __enter__(self) -> "StatisticsGateway":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()

    # Catalog

    def list_columns(self, schema: str) -> List[ColumnInfo]:
        """
        List every column of every entity in ``schema``.

        Also records the catalog used to validate identifiers of later
        statistic requests.

        Raises:
            GatewayConnectionError: If the catalog cannot be read
        """
        columns = self._list_columns(schema)
        self.schema = schema
        self._catalog = {}
        for info in columns:
            self._catalog.setdefault(info.entity, []).append(info.column)
        self.logger.info(f"Catalog for schema {schema}: {len(self._catalog)} tables, {len(columns)} columns")
        return columns

    def _validate(self, entity: str, *columns: str) -> Optional[StatisticResult]:
        known = self._catalog.get(entity)
        if known is None:
            return StatisticResult.failure(INVALID_IDENTIFIER, f"unknown entity {entity!r}")
        for name in columns:
            if name not in known:
                return StatisticResult.failure(INVALID_IDENTIFIER, f"unknown column {entity}.{name}")
        return None

    def _guarded(self, description: str, fetch, *args) -> StatisticResult:
        try:
            return StatisticResult.success(fetch(*args))
        except self.recoverable_errors as e:
            self.logger.debug(f"{description} failed: {e}")
            return StatisticResult.failure(QUERY_FAILED, f"{description}: {e}")

    # Statistics

    def primary_key_columns(self, entity: str) -> StatisticResult:
        """Declared primary key columns of ``entity``, in key order (may be empty)."""
        invalid = self._validate(entity)
        if invalid:
            return invalid
        return self._guarded(f"primary key of {entity}", self._primary_key_columns, entity)

    def distinct_count(self, entity: str, column_name: str) -> StatisticResult:
        """Number of distinct non-null values in ``entity.column_name``."""
        invalid = self._validate(entity, column_name)
        if invalid:
            return invalid
        return self._guarded(f"distinct count of {entity}.{column_name}", self._distinct_count, entity, column_name)

    def grouped_max_distinct(self, entity: str, group_by: str, count_column: str) -> StatisticResult:
        """
        Max over groups of ``group_by`` of the distinct ``count_column`` values in the group.

        0 for an empty table.
        """
        invalid = self._validate(entity, group_by, count_column)
        if invalid:
            return invalid
        return self._guarded(
            f"grouped maximum {entity}.{group_by}->{count_column}",
            self._grouped_max_distinct, entity, group_by, count_column,
        )

    @abstractmethod
    def _list_columns(self, schema: str) -> List[ColumnInfo]:
        pass

    @abstractmethod
    def _primary_key_columns(self, entity: str) -> List[str]:
        pass

    @abstractmethod
    def _distinct_count(self, entity: str, column_name: str) -> int:
        pass

    @abstractmethod
    def _grouped_max_distinct(self, entity: str, group_by: str, count_column: str) -> int:
        pass


class PostgresStatisticsGateway(StatisticsGateway):
    """Statistics from a PostgreSQL database through SQLAlchemy."""

    recoverable_errors = (SQLAlchemyError,)

    def __init__(self, settings: Optional[ConnectionSettings] = None, database: Optional[DatabaseManager] = None):
        """
        Initialize the gateway.

        Args:
            settings (Optional[ConnectionSettings]): Connection parameters
            database (Optional[DatabaseManager]): Existing manager, used instead of settings
        """
        super().__init__()
        self.settings = settings
        self.database = database or DatabaseManager(settings)

    def connect(self) -> None:
        self.database.test_connection()

    def disconnect(self) -> None:
        self.database.dispose()

    def _table(self, entity: str, *column_names: str):
        return table(entity, *(column(name) for name in column_names), schema=self.schema)

    def _list_columns(self, schema: str) -> List[ColumnInfo]:
        try:
            rows = self.database.execute_query(CATALOG_QUERY, {"schema": schema})
        except SQLAlchemyError as e:
            raise GatewayConnectionError(
                f"Cannot read catalog of schema {schema}: {e}", target=self.database.target
            ) from e
        return [
            ColumnInfo(
                entity=row["table_name"],
                column=row["column_name"],
                data_type=row["data_type"],
                udt_name=row["udt_name"],
            )
            for row in rows
        ]

    def _primary_key_columns(self, entity: str) -> List[str]:
        rows = self.database.execute_query(PRIMARY_KEY_QUERY, {"schema": self.schema, "entity": entity})
        return [row["column_name"] for row in rows]

    def _distinct_count(self, entity: str, column_name: str) -> int:
        t = self._table(entity, column_name)
        value = self.database.execute_scalar(select(func.count(distinct(t.c[column_name]))))
        return int(value or 0)

    def _grouped_max_distinct(self, entity: str, group_by: str, count_column: str) -> int:
        t = self._table(entity, group_by, count_column)
        derived = (
            select(t.c[group_by], func.count(distinct(t.c[count_column])).label("output"))
            .group_by(t.c[group_by])
            .subquery("derived")
        )
        value = self.database.execute_scalar(select(func.max(derived.c.output)))
        return int(value or 0)


TypeDeclaration = Union[str, Tuple[str, str]]


class DataFrameStatisticsGateway(StatisticsGateway):
    """
    Statistics computed in memory from pandas DataFrames, one per entity.

    Declared types are derived from the frame dtypes unless given
    explicitly as ``declared_types[entity][column]`` (a data type, or a
    ``(data_type, udt_name)`` pair).
    """

    recoverable_errors = (KeyError, ValueError, TypeError)

    def __init__(
        self,
        tables: Mapping[str, pd.DataFrame],
        primary_keys: Optional[Mapping[str, Sequence[str]]] = None,
        declared_types: Optional[Mapping[str, Mapping[str, TypeDeclaration]]] = None,
    ):
        super().__init__()
        self.tables = dict(tables)
        self.primary_keys = {entity: list(cols) for entity, cols in (primary_keys or {}).items()}
        self.declared_types = declared_types or {}

    @classmethod
    def from_csv_dir(
        cls,
        directory: Union[str, Path],
        primary_keys: Optional[Mapping[str, Sequence[str]]] = None,
    ) -> "DataFrameStatisticsGateway":
        """
        Load every ``*.csv`` file of a directory as an entity named after the file.

        A file pandas cannot parse is skipped with a warning.

        Raises:
            GatewayConnectionError: If the directory is missing, or none of
                its CSV files can be read
        """
        path = Path(directory)
        if not path.is_dir():
            raise GatewayConnectionError(f"CSV directory {path} does not exist", target=str(path))
        logger = Logger(cls.__name__)
        tables = {}
        skipped = []
        for csv_file in sorted(path.glob("*.csv")):
            try:
                tables[csv_file.stem] = pd.read_csv(csv_file)
            except (OSError, ValueError) as e:
                logger.warning(f"Skipping {csv_file}: {e}")
                skipped.append(csv_file.name)
        if skipped and not tables:
            raise GatewayConnectionError(
                f"No readable CSV file in {path} (skipped {', '.join(skipped)})", target=str(path)
            )
        return cls(tables, primary_keys=primary_keys)

    @staticmethod
    def _types_from_dtype(dtype) -> Tuple[str, str]:
        if pd.api.types.is_bool_dtype(dtype):
            return "boolean", "bool"
        if pd.api.types.is_integer_dtype(dtype):
            return "integer", "int8"
        if pd.api.types.is_float_dtype(dtype):
            return "numeric", "numeric"
        if pd.api.types.is_datetime64_any_dtype(dtype):
            return "timestamp without time zone", "timestamp"
        return "text", "text"

    def _column_types(self, entity: str, column_name: str, dtype) -> Tuple[str, str]:
        declared = self.declared_types.get(entity, {}).get(column_name)
        if declared is None:
            return self._types_from_dtype(dtype)
        if isinstance(declared, str):
            return declared, declared
        return declared[0], declared[1]

    def _list_columns(self, schema: str) -> List[ColumnInfo]:
        columns = []
        for entity in sorted(self.tables):
            frame = self.tables[entity]
            for column_name in frame.columns:
                data_type, udt_name = self._column_types(entity, column_name, frame[column_name].dtype)
                columns.append(ColumnInfo(entity, str(column_name), data_type, udt_name))
        return columns

    def _primary_key_columns(self, entity: str) -> List[str]:
        return list(self.primary_keys.get(entity, []))

    def _distinct_count(self, entity: str, column_name: str) -> int:
        return int(self.tables[entity][column_name].nunique())

    def _grouped_max_distinct(self, entity: str, group_by: str, count_column: str) -> int:
        frame = self.tables[entity]
        if frame.empty:
            return 0
        per_group = frame.groupby(group_by, dropna=False)[count_column].nunique()
        return int(per_group.max()) if len(per_group) else 0


def create_gateway(settings: ConnectionSettings) -> StatisticsGateway:
    """Build the gateway for a set of connection settings."""
    return PostgresStatisticsGateway(settings)

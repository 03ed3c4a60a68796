"""
RELGRAPH Fact Models

One immutable pydantic model per fact shape. Every fact is scoped to a single
entity (table) and names one or two of its columns. Identifier fields reject
blank values, so a malformed fact fails at construction time.
"""

from enum import Enum
from typing import Literal, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class FactKind(str, Enum):
    """Fact shapes, in canonical output order within an entity."""
    COLUMN = "column"
    DATA_TYPE = "data_type"
    DISTINCT_COUNT = "distinct_count"
    DIMENSION = "dimension"
    KEY_COLUMN = "key_column"
    SINGLE_KEY = "single_key"
    COMPOUND_KEY = "compound_key"
    KEY_STRENGTH = "key_strength"
    ONE_TO_MANY = "one_to_many"
    MANY_TO_MANY = "many_to_many"


_KIND_ORDER = {kind: index for index, kind in enumerate(FactKind)}


class DimensionLabel(str, Enum):
    """Visualization dimension of a column."""
    DISCRETE = "discrete"
    SCALAR = "scalar"
    UNCLASSIFIED = "unclassified"


class Fact(BaseModel):
    """Base fact: something inferred about one entity."""
    model_config = ConfigDict(frozen=True)

    kind: FactKind
    entity: str = Field(..., description="Table the fact belongs to")

    @field_validator('*', mode='after')
    @classmethod
    def reject_blank(cls, v):
        """Identifiers must be non-empty."""
        if isinstance(v, str) and not v.strip():
            raise ValueError("identifier must not be empty")
        return v

    def columns(self) -> Tuple[str, ...]:
        """Column names this fact refers to, in field order."""
        return ()

    def sort_key(self) -> Tuple:
        """Canonical ordering: entity, fact kind, then the fact's own fields."""
        values = tuple(str(value) for name, value in self if name not in ("kind", "entity"))
        return (self.entity, _KIND_ORDER[self.kind], values)


class ColumnFact(Fact):
    """The entity has this column."""
    kind: Literal[FactKind.COLUMN] = FactKind.COLUMN
    column: str

    def columns(self) -> Tuple[str, ...]:
        return (self.column,)


class DataTypeFact(Fact):
    """Underlying storage type of a column."""
    kind: Literal[FactKind.DATA_TYPE] = FactKind.DATA_TYPE
    column: str
    data_type: str

    def columns(self) -> Tuple[str, ...]:
        return (self.column,)


class DistinctCountFact(Fact):
    """Number of distinct values observed in a column."""
    kind: Literal[FactKind.DISTINCT_COUNT] = FactKind.DISTINCT_COUNT
    column: str
    count: int = Field(..., ge=0)

    def columns(self) -> Tuple[str, ...]:
        return (self.column,)


class DimensionFact(Fact):
    """A column is a discrete or a scalar dimension."""
    kind: Literal[FactKind.DIMENSION] = FactKind.DIMENSION
    column: str
    dimension: DimensionLabel

    @field_validator('dimension')
    @classmethod
    def classified_only(cls, v: DimensionLabel) -> DimensionLabel:
        if v is DimensionLabel.UNCLASSIFIED:
            raise ValueError("unclassified columns carry no dimension fact")
        return v

    def columns(self) -> Tuple[str, ...]:
        return (self.column,)


class KeyColumnFact(Fact):
    """A column takes part in the declared primary key."""
    kind: Literal[FactKind.KEY_COLUMN] = FactKind.KEY_COLUMN
    column: str

    def columns(self) -> Tuple[str, ...]:
        return (self.column,)


class SingleKeyFact(Fact):
    """The declared primary key is exactly this column."""
    kind: Literal[FactKind.SINGLE_KEY] = FactKind.SINGLE_KEY
    column: str

    def columns(self) -> Tuple[str, ...]:
        return (self.column,)


class _PairFact(Fact):
    """Fact over two distinct columns of one entity."""
    first: str
    second: str

    @model_validator(mode='after')
    def distinct_pair(self):
        if self.first == self.second:
            raise ValueError(f"column {self.first!r} cannot pair with itself")
        return self

    def columns(self) -> Tuple[str, ...]:
        return (self.first, self.second)


class CompoundKeyFact(_PairFact):
    """Two columns of a multi-column primary key, taken as a pair."""
    kind: Literal[FactKind.COMPOUND_KEY] = FactKind.COMPOUND_KEY


class KeyStrengthFact(_PairFact):
    """Within a compound key pair, which column is strong and which weak."""
    kind: Literal[FactKind.KEY_STRENGTH] = FactKind.KEY_STRENGTH
    strong: str
    weak: str

    @model_validator(mode='after')
    def strong_weak_from_pair(self):
        if {self.strong, self.weak} != {self.first, self.second} or self.strong == self.weak:
            raise ValueError("strong and weak must be the two columns of the pair")
        return self


class OneToManyFact(Fact):
    """Each value of ``one`` relates to many values of ``many``."""
    kind: Literal[FactKind.ONE_TO_MANY] = FactKind.ONE_TO_MANY
    one: str
    many: str

    @model_validator(mode='after')
    def distinct_sides(self):
        if self.one == self.many:
            raise ValueError(f"column {self.one!r} cannot relate to itself")
        return self

    def columns(self) -> Tuple[str, ...]:
        return (self.one, self.many)


class ManyToManyFact(_PairFact):
    """Values of both columns relate to many values of the other."""
    kind: Literal[FactKind.MANY_TO_MANY] = FactKind.MANY_TO_MANY


FACT_TYPES = {
    FactKind.COLUMN: ColumnFact,
    FactKind.DATA_TYPE: DataTypeFact,
    FactKind.DISTINCT_COUNT: DistinctCountFact,
    FactKind.DIMENSION: DimensionFact,
    FactKind.KEY_COLUMN: KeyColumnFact,
    FactKind.SINGLE_KEY: SingleKeyFact,
    FactKind.COMPOUND_KEY: CompoundKeyFact,
    FactKind.KEY_STRENGTH: KeyStrengthFact,
    FactKind.ONE_TO_MANY: OneToManyFact,
    FactKind.MANY_TO_MANY: ManyToManyFact,
}

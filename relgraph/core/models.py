"""
RELGRAPH Settings Models

Pydantic models for the explicit values passed between components:
- Connection settings for the statistics gateway
- Inference thresholds for the classifiers
- Output formats
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.engine import URL


class OutputFormat(str, Enum):
    """Fact rendering formats."""
    NTRIPLES = "ntriples"
    JSON = "json"
    CSV = "csv"


class ConnectionSettings(BaseModel):
    """Connection parameters for a PostgreSQL statistics source."""
    model_config = ConfigDict(populate_by_name=True)

    host: str = Field("localhost", description="Database host")
    port: int = Field(5432, description="Database port")
    user: str = Field("postgres", description="Database user")
    password: str = Field("", description="Database password")
    database: str = Field("postgres", description="Database name")
    sslmode: Optional[str] = Field("disable", description="libpq sslmode")
    schema_name: str = Field("public", alias="schema", description="Schema to analyze")

    def url(self) -> URL:
        """Build the SQLAlchemy URL for these settings."""
        query = {"sslmode": self.sslmode} if self.sslmode else {}
        return URL.create(
            "postgresql+psycopg2",
            username=self.user,
            password=self.password or None,
            host=self.host,
            port=self.port,
            database=self.database,
            query=query,
        )

    def describe(self) -> str:
        """Connection target without credentials, for log messages."""
        return f"{self.database} on {self.host}:{self.port}"


class InferenceSettings(BaseModel):
    """Thresholds and switches for one inference pass."""
    discrete_threshold: int = Field(100, ge=0, description="Max distinct values of a discrete dimension")
    strength_threshold: int = Field(10, ge=0, description="Min grouped maximum on both sides to rank compound key parts")
    relationship_threshold: int = Field(1, ge=0, description="Grouped maximum meaning 'functionally determined'")
    scalar_types: List[str] = Field(default_factory=lambda: ["integer", "numeric"], description="Declared types that may be scalar")
    geo_markers: List[str] = Field(default_factory=lambda: ["latitude", "longitude"], description="Name fragments excluded from scalar")
    include_descriptive: bool = Field(True, description="Emit column, data type, distinct count and key column facts")
    max_workers: int = Field(1, ge=1, description="Worker threads for pairwise statistics")

    @field_validator('scalar_types', 'geo_markers', mode='before')
    @classmethod
    def split_csv(cls, v):
        """Accept comma separated strings (environment/CLI values)."""
        if isinstance(v, str):
            return [part.strip() for part in v.split(',') if part.strip()]
        return v

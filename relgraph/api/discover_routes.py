"""
RELGRAPH Discover API Routes

Runs an inference pass over the configured statistics source and returns the
facts as JSON records or as N-Triples / CSV text.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel, Field

from ..core.config import Config
from ..core.exceptions import GatewayConnectionError
from ..core.logger import Logger
from ..core.models import OutputFormat
from ..discover.inference_engine import InferenceEngine
from ..discover.statistics_gateway import StatisticsGateway
from ..model.serializers import JsonSerializer, get_serializer
from .dependencies import get_config, get_gateway

discover_router = APIRouter(prefix="/api/v1/discover", tags=["Discover"])
logger = Logger("api.discover")


class GraphRequest(BaseModel):
    """Request model for a graph extraction."""
    schema_name: Optional[str] = Field(None, description="Schema to analyze; configured schema by default")
    format: OutputFormat = Field(OutputFormat.JSON, description="Response format")
    include_descriptive: Optional[bool] = Field(None, description="Override emission of descriptive facts")


@discover_router.post("/graph")
def build_graph(
    request: GraphRequest,
    gateway: StatisticsGateway = Depends(get_gateway),
    config: Config = Depends(get_config),
) -> Any:
    """
    Infer keys, dimensions and relationships of a schema.

    JSON responses carry the pass summary next to the facts; other formats
    return the rendered text only.
    """
    schema = request.schema_name or config.get("database.schema", "public")
    settings = config.inference_settings()
    if request.include_descriptive is not None:
        settings = settings.model_copy(update={"include_descriptive": request.include_descriptive})

    try:
        with gateway:
            result = InferenceEngine(gateway, settings).run(schema)
    except GatewayConnectionError as e:
        logger.error(f"Statistics source unavailable: {str(e)}")
        raise HTTPException(status_code=503, detail=f"Statistics source unavailable: {e}")

    if request.format is OutputFormat.JSON:
        body: Dict[str, Any] = {
            "status": "success",
            "summary": result.summary.model_dump(),
            "facts": JsonSerializer().records(result.facts),
        }
        return body

    serializer = get_serializer(request.format, config.get("output.base_iri"))
    return Response(content=serializer.serialize(result.facts), media_type=serializer.media_type)

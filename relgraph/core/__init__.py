"""
RELGRAPH Core Components

Shared infrastructure for the whole package:
- Configuration management
- Logging
- Exceptions
- Settings models
- Database connections
"""

from .config import Config
from .logger import Logger
from .exceptions import RelgraphError, GatewayConnectionError
from .models import ConnectionSettings, InferenceSettings, OutputFormat
from .database import DatabaseManager

__all__ = [
    'Config',
    'Logger',
    'RelgraphError',
    'GatewayConnectionError',
    'ConnectionSettings',
    'InferenceSettings',
    'OutputFormat',
    'DatabaseManager'
]

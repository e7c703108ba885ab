"""Connector package exports."""

from .base import ITEM_COLUMNS, SALES_COLUMNS, BaseConnector, ConnectorConfig
from .demo import DemoConnector

__all__ = [
    "ITEM_COLUMNS",
    "SALES_COLUMNS",
    "BaseConnector",
    "ConnectorConfig",
    "DemoConnector",
]

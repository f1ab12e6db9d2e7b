"""Destination table adapters and the metadata registry."""

from syncappend.storage.base import DestinationTable
from syncappend.storage.registry import MetadataRegistry
from syncappend.storage.warehouse_table import WarehouseTable

__all__ = [
    "DestinationTable",
    "MetadataRegistry",
    "WarehouseTable",
]

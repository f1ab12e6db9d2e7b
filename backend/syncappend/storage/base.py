"""Abstract destination table capability interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


class DestinationTable(ABC):
    """
    The capabilities the append engine needs from a destination table.

    The engine never depends on a concrete table implementation. Implementations
    can back this with:
    - a DuckDB table (WarehouseTable)
    - a remote table proxied through an API
    - an in-memory fake for tests
    """

    name: str
    schema_name: str
    owner: Optional[str] = None
    table_id: Optional[int] = None

    @abstractmethod
    def add_column(self, name: str, logical_type: str) -> None:
        """
        Add a nullable column of the given logical type.

        Args:
            name: Column name
            logical_type: Logical (platform) type of the column
        """
        pass

    @abstractmethod
    def refresh_identity(self) -> None:
        """Re-derive the table's structural identity (``table_id``)."""
        pass

    @abstractmethod
    def reload(self) -> None:
        """Force a reload of the table's schema metadata."""
        pass

    @abstractmethod
    def mark_imported(self, staging_name: str) -> None:
        """
        Record that the table was updated by an import.

        Args:
            staging_name: Qualified name of the staging table that was merged
        """
        pass

    @abstractmethod
    def refresh_derived_state(self) -> None:
        """Refresh state derived from the data (geometry column, statistics)."""
        pass

    @abstractmethod
    def invalidate_cache(self) -> None:
        """Invalidate any external read-through cache holding this table."""
        pass

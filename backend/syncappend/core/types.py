"""Logical <-> physical column type catalog."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

import yaml

# Logical types known to the platform, keyed to the DuckDB type names that
# represent them. The first entry of each tuple is the canonical physical type.
DEFAULT_TYPES: Dict[str, Tuple[str, ...]] = {
    "number": (
        "DOUBLE",
        "FLOAT",
        "REAL",
        "DECIMAL",
        "NUMERIC",
        "TINYINT",
        "SMALLINT",
        "INTEGER",
        "BIGINT",
        "HUGEINT",
        "UTINYINT",
        "USMALLINT",
        "UINTEGER",
        "UBIGINT",
        "DOUBLE PRECISION",
    ),
    "string": (
        "VARCHAR",
        "TEXT",
        "STRING",
        "CHAR",
        "BPCHAR",
        "CHARACTER VARYING",
        "CHARACTER",
    ),
    "date": (
        "TIMESTAMP WITH TIME ZONE",
        "TIMESTAMPTZ",
        "TIMESTAMP",
        "TIMESTAMP WITHOUT TIME ZONE",
        "DATETIME",
        "DATE",
    ),
    "boolean": ("BOOLEAN", "BOOL"),
    "geometry": ("GEOMETRY",),
}

_PARAMS_RE = re.compile(r"\s*\(.*\)\s*$")


def normalize_type(physical_type: str) -> str:
    """
    Normalize a physical type name for lookup.

    Examples:
        >>> normalize_type("decimal(18, 3)")
        'DECIMAL'
        >>> normalize_type("timestamp  with time zone")
        'TIMESTAMP WITH TIME ZONE'
    """
    collapsed = " ".join(physical_type.upper().split())
    return _PARAMS_RE.sub("", collapsed)


@dataclass(frozen=True)
class TypeCatalog:
    """
    Stateless lookup table between logical and physical column types.

    The catalog is passed explicitly to whatever needs it; there is no
    process-wide registry.
    """

    types: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: dict(DEFAULT_TYPES))

    def __post_init__(self) -> None:
        normalized: Dict[str, Tuple[str, ...]] = {}
        for logical, physicals in self.types.items():
            if not physicals:
                raise ValueError(f"Logical type '{logical}' has no physical types")
            normalized[logical] = tuple(normalize_type(p) for p in physicals)
        object.__setattr__(self, "types", normalized)

    @property
    def logical_types(self) -> List[str]:
        return list(self.types)

    def logical_type_for(self, physical_type: str) -> Optional[str]:
        """Map a physical type back to its logical type, or None if unknown."""
        wanted = normalize_type(physical_type)
        for logical, physicals in self.types.items():
            if wanted in physicals:
                return logical
        return None

    def physical_types_for(self, logical_type: str) -> Tuple[str, ...]:
        """All physical type names representing a logical type."""
        try:
            return self.types[logical_type]
        except KeyError:
            raise ValueError(f"Unknown logical type: {logical_type}") from None

    def physical_type_for(self, logical_type: str) -> str:
        """Canonical physical type used when materializing a logical type."""
        return self.physical_types_for(logical_type)[0]

    def to_dict(self) -> Dict[str, List[str]]:
        return {logical: list(physicals) for logical, physicals in self.types.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> TypeCatalog:
        types: Dict[str, Tuple[str, ...]] = {}
        for logical, physicals in data.items():
            if isinstance(physicals, str):
                physicals = [physicals]
            if not isinstance(physicals, (list, tuple)):
                raise ValueError(f"Physical types for '{logical}' must be a list")
            types[str(logical)] = tuple(str(p) for p in physicals)
        return cls(types=types)

    @classmethod
    def from_yaml(cls, path: Path) -> TypeCatalog:
        """
        Load a catalog from a YAML file of ``logical: [physical, ...]`` entries.

        Args:
            path: YAML file path

        Returns:
            TypeCatalog built from the file
        """
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict) or not data:
            raise ValueError(f"Type catalog file '{path}' is empty or not a mapping")

        return cls.from_dict(data)


def default_catalog() -> TypeCatalog:
    """Return the built-in DuckDB type catalog."""
    return TypeCatalog()

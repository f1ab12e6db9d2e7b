"""Column classification between a destination and a staging schema."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Tuple


@dataclass(frozen=True)
class ColumnClassification:
    """
    Disjoint partition of the staging (source) columns.

    Attributes:
        reserved: System columns dropped from consideration
        matching: Present in the destination with the same physical type
        mismatched: Present in the destination with a different physical type
        unmatched: Absent from the destination (new columns)
        projection: Every non-reserved source column, in source order
        targets: Destination spelling of each projected column, parallel to
            ``projection`` (new columns keep their source spelling)
    """

    reserved: Tuple[str, ...] = field(default_factory=tuple)
    matching: Tuple[str, ...] = field(default_factory=tuple)
    mismatched: Tuple[str, ...] = field(default_factory=tuple)
    unmatched: Tuple[str, ...] = field(default_factory=tuple)
    projection: Tuple[str, ...] = field(default_factory=tuple)
    targets: Tuple[str, ...] = field(default_factory=tuple)

    def target_for(self, column_name: str) -> str:
        """Destination column a projected source column lands in."""
        return self.targets[self.projection.index(column_name)]

    def is_converged(self) -> bool:
        """True when no cast or column addition is required."""
        return not self.mismatched and not self.unmatched

    def __repr__(self) -> str:
        return (
            f"ColumnClassification(reserved={len(self.reserved)}, matching={len(self.matching)}, "
            f"mismatched={len(self.mismatched)}, unmatched={len(self.unmatched)})"
        )


def classify(
    destination: Mapping[str, str],
    source: Mapping[str, str],
    reserved_names: Iterable[str],
) -> ColumnClassification:
    """
    Partition source columns against the destination schema.

    Depends only on the two name -> physical type mappings. Names are compared
    case-insensitively, like DuckDB identifiers; types are compared exactly.

    Examples:
        >>> c = classify(
        ...     {"id": "INTEGER", "name": "VARCHAR", "created_at": "TIMESTAMP"},
        ...     {"cartodb_id": "INTEGER", "Name": "VARCHAR", "price": "DOUBLE"},
        ...     ["cartodb_id", "created_at"],
        ... )
        >>> c.matching, c.unmatched, c.reserved, c.targets
        (('Name',), ('price',), ('cartodb_id',), ('name', 'price'))
    """
    reserved_set = {name.lower() for name in reserved_names}
    destination_names: Dict[str, str] = {name.lower(): name for name in destination}

    reserved: List[str] = []
    matching: List[str] = []
    mismatched: List[str] = []
    unmatched: List[str] = []
    projection: List[str] = []
    targets: List[str] = []

    for name, physical_type in source.items():
        if name.lower() in reserved_set:
            reserved.append(name)
            continue

        target = destination_names.get(name.lower())
        projection.append(name)
        targets.append(target or name)
        if target is None:
            unmatched.append(name)
        elif destination[target] != physical_type:
            mismatched.append(name)
        else:
            matching.append(name)

    return ColumnClassification(
        reserved=tuple(reserved),
        matching=tuple(matching),
        mismatched=tuple(mismatched),
        unmatched=tuple(unmatched),
        projection=tuple(projection),
        targets=tuple(targets),
    )

"""
Field Mapper

Assigns logical field names to the table's fixed positional attribute
columns (FIELD0..FIELD9).

Slots are handed out in the order the fields are supplied, starting at
slot 0. No name -> slot association is remembered between calls, so the
same set of fields supplied in a different order lands in different
slots. With `order="sorted"` the names are sorted first, which makes the
mapping independent of the caller's ordering.
"""

from __future__ import annotations

from typing import Iterable, Literal, Optional, Sequence

from lakebench.errors import FieldMappingError

ATTRIBUTE_NAMES: tuple[str, ...] = tuple(f"FIELD{i}" for i in range(10))

FieldOrder = Literal["insertion", "sorted"]


class FieldMapper:
    """Maps logical field names onto positional slot columns."""

    def __init__(
        self,
        slots: Sequence[str] = ATTRIBUTE_NAMES,
        order: FieldOrder = "insertion",
    ) -> None:
        if order not in ("insertion", "sorted"):
            raise ValueError(f"Unknown field order: {order!r}")
        self.slots = tuple(slots)
        self.order = order

    @property
    def capacity(self) -> int:
        return len(self.slots)

    def ordered(self, fields: Iterable[str]) -> list[str]:
        """Field names in the order they will receive slots (duplicates dropped)."""
        names = list(dict.fromkeys(fields))
        if self.order == "sorted":
            names.sort()
        return names

    def map_fields(self, fields: Optional[Iterable[str]]) -> Optional[dict[str, str]]:
        """
        Return field name -> slot column for the given fields.

        None or an empty collection means "all fields" and returns None; the
        caller then uses the store's own column names unchanged.

        Raises:
            FieldMappingError: More fields than slots.
        """
        if fields is None:
            return None
        names = self.ordered(fields)
        if not names:
            return None
        if len(names) > self.capacity:
            raise FieldMappingError(
                f"{len(names)} fields supplied but only {self.capacity} slots exist"
            )
        return {name: self.slots[i] for i, name in enumerate(names)}

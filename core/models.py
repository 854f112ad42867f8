"""
Data models for price snapshots.

A Snapshot is one fetched-or-cached dataset for a (league, dataset type)
key. Records keep the provider line as an opaque payload; only the display
name and the chaos value are interpreted.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple, Type

from core.catalog import DatasetFamily, DatasetType, League


class RecordParseError(ValueError):
    """Raised when a provider line does not have the expected record shape."""


@dataclass(frozen=True)
class PriceRecord:
    """A single priced entity from a poe.ninja overview."""
    display_name: str
    value: float
    payload: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    # Provider field names, set by each record shape
    NAME_FIELD: ClassVar[str] = "name"
    VALUE_FIELD: ClassVar[str] = "chaosValue"

    @classmethod
    def from_dict(cls, data: Any) -> "PriceRecord":
        """
        Build a record from one provider line.

        Raises:
            RecordParseError: if the name or value field is missing or mistyped
        """
        if not isinstance(data, dict):
            raise RecordParseError(f"Expected an object, got {type(data).__name__}")

        name = data.get(cls.NAME_FIELD)
        if not isinstance(name, str):
            raise RecordParseError(f"Missing or invalid '{cls.NAME_FIELD}'")

        raw_value = data.get(cls.VALUE_FIELD)
        # bool is an int subclass but never a price
        if isinstance(raw_value, bool) or not isinstance(raw_value, (int, float)):
            raise RecordParseError(f"Missing or invalid '{cls.VALUE_FIELD}' for {name!r}")

        return cls(display_name=name, value=float(raw_value), payload=MappingProxyType(dict(data)))

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to the provider line for JSON serialization."""
        data = dict(self.payload)
        data[self.NAME_FIELD] = self.display_name
        data[self.VALUE_FIELD] = self.value
        return data


@dataclass(frozen=True)
class CurrencyRecord(PriceRecord):
    """Line of a currencyoverview response."""
    NAME_FIELD: ClassVar[str] = "currencyTypeName"
    VALUE_FIELD: ClassVar[str] = "chaosEquivalent"


@dataclass(frozen=True)
class ItemRecord(PriceRecord):
    """Line of an itemoverview response."""
    NAME_FIELD: ClassVar[str] = "name"
    VALUE_FIELD: ClassVar[str] = "chaosValue"


RECORD_TYPES: Dict[DatasetFamily, Type[PriceRecord]] = {
    DatasetFamily.CURRENCY: CurrencyRecord,
    DatasetFamily.ITEM: ItemRecord,
}


def record_type_for(family: DatasetFamily) -> Type[PriceRecord]:
    """Get the record shape used by a dataset family."""
    return RECORD_TYPES[family]


@dataclass(frozen=True)
class DatasetKey:
    """Identifies one cache slot and one remote query."""
    league: League
    dataset_type: DatasetType

    @property
    def family(self) -> DatasetFamily:
        return self.dataset_type.family

    def __str__(self) -> str:
        return f"{self.league.value}/{self.family.value}/{self.dataset_type.value}"


@dataclass(frozen=True)
class Snapshot:
    """
    One dataset with its freshness marker.

    ``fetched_at is None`` is the empty sentinel: no data was ever obtained.
    Instances are immutable; a refresh produces a new Snapshot.
    """
    records: Tuple[PriceRecord, ...] = ()
    fetched_at: Optional[datetime] = None
    # Other top-level collections of the response (e.g. currencyDetails)
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def empty(cls) -> "Snapshot":
        """The "no data" sentinel."""
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.fetched_at is None

    def __len__(self) -> int:
        return len(self.records)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the JSON layout used on disk and by the ``data`` dump.

        The timestamp is ISO-8601 including its UTC offset.
        """
        data: Dict[str, Any] = {"lines": [record.to_dict() for record in self.records]}
        for key, value in self.extra.items():
            data[key] = value
        data["updated"] = self.fetched_at.isoformat() if self.fetched_at else None
        return data

    @classmethod
    def from_dict(cls, data: Any, family: DatasetFamily) -> "Snapshot":
        """
        Create from the on-disk JSON layout.

        Raises:
            RecordParseError: if the payload is not a snapshot of ``family``
        """
        if not isinstance(data, dict):
            raise RecordParseError("Snapshot payload is not an object")

        lines = data.get("lines")
        if not isinstance(lines, list):
            raise RecordParseError("Snapshot payload has no 'lines' array")

        record_cls = record_type_for(family)
        records = tuple(record_cls.from_dict(line) for line in lines)

        updated = data.get("updated")
        fetched_at: Optional[datetime] = None
        if updated is not None:
            if not isinstance(updated, str):
                raise RecordParseError("Invalid 'updated' timestamp")
            try:
                fetched_at = datetime.fromisoformat(updated.replace("Z", "+00:00"))
            except ValueError as exc:
                raise RecordParseError(f"Invalid 'updated' timestamp: {updated!r}") from exc

        extra = {k: v for k, v in data.items() if k not in ("lines", "updated")}
        return cls(records=records, fetched_at=fetched_at, extra=extra)

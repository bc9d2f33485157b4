from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Mapping

from ..recommendations.models import Intensity, Occasion, Protein, Season, WineType

UNKNOWN = "unknown"
UNKNOWN_INDEX = 0

CUISINES = (
    "french",
    "italian",
    "spanish",
    "portuguese",
    "greek",
    "german",
    "austrian",
    "american",
    "mediterranean",
    "japanese",
    "chinese",
    "thai",
    "indian",
    "mexican",
    "middle_eastern",
    "international",
)


def normalize_category(value: str | Enum | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, Enum):
        value = value.value
    value = str(value).strip().lower().replace(" ", "_")
    return value or None


class CategoryTable:
    """Bidirectional category <-> index table.

    Index 0 is reserved for values that were not seen at training time, so an
    unknown value never collides with a real category.
    """

    def __init__(self, name: str, values: Iterable[str]) -> None:
        self.name = name
        self._values: list[str] = []
        self._index: dict[str, int] = {}
        for raw in values:
            value = normalize_category(raw)
            if value is None or value == UNKNOWN:
                continue
            if value in self._index:
                raise ValueError(f"duplicate category {value!r} in table {name!r}")
            self._values.append(value)
            self._index[value] = len(self._values)

    def index(self, value: str | Enum | None) -> int:
        key = normalize_category(value)
        if key is None:
            return UNKNOWN_INDEX
        return self._index.get(key, UNKNOWN_INDEX)

    def value(self, index: int) -> str:
        if 1 <= index <= len(self._values):
            return self._values[index - 1]
        return UNKNOWN

    @property
    def values(self) -> tuple[str, ...]:
        return tuple(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, value: object) -> bool:
        return normalize_category(value) in self._index  # type: ignore[arg-type]


@dataclass(frozen=True)
class FeatureTables:
    """The category tables a model was trained with, plus their version."""

    version: str
    cuisine: CategoryTable
    protein: CategoryTable
    intensity: CategoryTable
    wine_type: CategoryTable
    occasion: CategoryTable
    season: CategoryTable

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Iterable[str]], version: str) -> FeatureTables:
        missing = [name for name in TABLE_NAMES if name not in mapping]
        if missing:
            raise ValueError(f"mapping is missing tables: {', '.join(missing)}")
        return cls(version=version, **{name: CategoryTable(name, mapping[name]) for name in TABLE_NAMES})

    def to_mapping(self) -> dict[str, list[str]]:
        return {name: list(getattr(self, name).values) for name in TABLE_NAMES}


TABLE_NAMES = ("cuisine", "protein", "intensity", "wine_type", "occasion", "season")

BUILTIN_TABLES = FeatureTables.from_mapping(
    {
        "cuisine": CUISINES,
        "protein": [p.value for p in Protein],
        "intensity": [i.value for i in Intensity],
        "wine_type": [w.value for w in WineType],
        "occasion": [o.value for o in Occasion],
        "season": [s.value for s in Season],
    },
    version="builtin-v1",
)

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Protocol

import pandas as pd

from .config import DEFAULT_INVENTORY_CONFIG, InventoryConfig
from .models import CandidateFilter, WineCandidate

logger = logging.getLogger(__name__)

_LIST_SEP = ";"


class InventoryGateway(Protocol):
    def list_available_candidates(self, candidate_filter: CandidateFilter) -> list[WineCandidate]:
        ...


def _matches(candidate: WineCandidate, candidate_filter: CandidateFilter) -> bool:
    if candidate.available_quantity < candidate_filter.min_quantity:
        return False
    if candidate_filter.wine_types and candidate.type not in candidate_filter.wine_types:
        return False
    return True


class StaticInventory:
    """Fixed in-memory candidate list."""

    def __init__(self, candidates: Iterable[WineCandidate] = ()) -> None:
        self._candidates = list(candidates)

    def list_available_candidates(self, candidate_filter: CandidateFilter) -> list[WineCandidate]:
        return [c for c in self._candidates if _matches(c, candidate_filter)]


def _split(value) -> list[str]:
    if not isinstance(value, str):
        return []
    return [part.strip() for part in value.split(_LIST_SEP) if part.strip()]


def _optional(value):
    return None if pd.isna(value) else value


def _row_to_candidate(row: pd.Series) -> WineCandidate:
    year = _optional(row.get("year"))
    return WineCandidate(
        wine_id=str(row["wine_id"]),
        vintage_id=str(row["vintage_id"]),
        name=row.get("name") or "",
        producer=row.get("producer") or None,
        year=int(year) if year is not None else None,
        type=row["type"],
        region=row.get("region") or "",
        country=row.get("country") or "",
        grape_varieties=frozenset(_split(row.get("grape_varieties"))),
        style=row.get("style") or None,
        tasting_notes=row.get("tasting_notes") or "",
        food_pairings=tuple(_split(row.get("food_pairings"))),
        available_quantity=int(row.get("available_quantity") or 0),
    )


class CsvInventory:
    """
    Inventory backed by a CSV export of the cellar, one row per vintage.

    List columns (``grape_varieties``, ``food_pairings``) are ``;`` separated.
    The file is read once on first use; call ``refresh()`` after it changes.
    """

    def __init__(self, path: Path | str | None = None, config: InventoryConfig = DEFAULT_INVENTORY_CONFIG) -> None:
        self.path = Path(path or config.csv_path)
        self._df: pd.DataFrame | None = None
        self._candidates: list[WineCandidate] | None = None

    def _load(self) -> pd.DataFrame:
        df = pd.read_csv(self.path, dtype={"wine_id": str, "vintage_id": str})
        text_cols = ["name", "producer", "region", "country", "style", "tasting_notes"]
        for col in text_cols:
            if col in df.columns:
                df[col] = df[col].fillna("").astype(str).str.strip()
        df["type"] = df["type"].fillna("").str.strip().str.lower()
        df["available_quantity"] = pd.to_numeric(df["available_quantity"], errors="coerce").fillna(0).astype(int)
        return df

    def get_dataframe(self) -> pd.DataFrame:
        if self._df is None:
            self._df = self._load()
        return self._df

    def candidates(self) -> list[WineCandidate]:
        if self._candidates is None:
            parsed = []
            for _, row in self.get_dataframe().iterrows():
                try:
                    parsed.append(_row_to_candidate(row))
                except ValueError:
                    logger.warning("Skipping invalid inventory row %s:%s", row.get("wine_id"), row.get("vintage_id"), exc_info=True)
            self._candidates = parsed
            logger.info("Loaded %d candidates from %s", len(parsed), self.path)
        return self._candidates

    def list_available_candidates(self, candidate_filter: CandidateFilter) -> list[WineCandidate]:
        df = self.get_dataframe()
        mask = df["available_quantity"] >= candidate_filter.min_quantity
        if candidate_filter.wine_types:
            mask = mask & df["type"].isin([t.value for t in candidate_filter.wine_types])
        keep = set(zip(df.loc[mask, "wine_id"], df.loc[mask, "vintage_id"]))
        return [c for c in self.candidates() if (c.wine_id, c.vintage_id) in keep]

    def refresh(self) -> None:
        self._df = None
        self._candidates = None

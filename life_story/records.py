from __future__ import annotations

import csv
import io
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .errors import DataShapeError

logger = logging.getLogger(__name__)

# Accepted spellings of the value column, first match wins.
VALUE_COLUMNS = ("life_expectancy", "lifeExpectancy", "lifeExp")


@dataclass(frozen=True)
class Record:
    country: str
    year: int
    life_expectancy: float


class Dataset:
    """
    Ordered, read-only sequence of records for one session.

    Column arrays are built once so scenes can filter with numpy masks;
    every query returns records in dataset order.
    """

    def __init__(self, records: Iterable[Record]) -> None:
        self._records: Tuple[Record, ...] = tuple(records)
        self._years = np.array([r.year for r in self._records], dtype=np.int64)
        self._countries = np.array([r.country for r in self._records], dtype=object)
        self._index: Dict[Tuple[str, int], Record] = {}
        for r in self._records:
            # first occurrence wins for duplicate (country, year) rows
            self._index.setdefault((r.country, r.year), r)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self._records)

    def __getitem__(self, i: int) -> Record:
        return self._records[i]

    @property
    def records(self) -> Tuple[Record, ...]:
        return self._records

    def countries(self) -> List[str]:
        seen: Dict[str, None] = {}
        for r in self._records:
            seen.setdefault(r.country, None)
        return list(seen)

    def where(
        self,
        *,
        year: Optional[int] = None,
        min_year: Optional[int] = None,
        max_year: Optional[int] = None,
        countries: Optional[Iterable[str]] = None,
    ) -> List[Record]:
        if not self._records:
            return []
        mask = np.ones(len(self._records), dtype=bool)
        if year is not None:
            mask &= self._years == int(year)
        if min_year is not None:
            mask &= self._years >= int(min_year)
        if max_year is not None:
            mask &= self._years <= int(max_year)
        if countries is not None:
            wanted = set(countries)
            mask &= np.array([c in wanted for c in self._countries], dtype=bool)
        return [self._records[i] for i in np.flatnonzero(mask)]

    def lookup(self, country: str, year: int) -> Optional[Record]:
        return self._index.get((country, int(year)))


def group_by_country(records: Sequence[Record]) -> Dict[str, List[Record]]:
    """Group order follows first appearance; records keep their input order."""
    groups: Dict[str, List[Record]] = {}
    for r in records:
        groups.setdefault(r.country, []).append(r)
    return groups


def _parse_finite(raw: Optional[str], field: str, line: int) -> float:
    s = (raw or "").strip()
    if not s:
        raise DataShapeError(f"missing {field}", line=line)
    try:
        v = float(s)
    except ValueError:
        raise DataShapeError(f"{field} is not a number: {s!r}", line=line) from None
    if not math.isfinite(v):
        raise DataShapeError(f"{field} is not finite: {s!r}", line=line)
    return v


def _value_column(fieldnames: Sequence[str]) -> str:
    for name in VALUE_COLUMNS:
        if name in fieldnames:
            return name
    raise DataShapeError(
        "header must contain a life expectancy column "
        f"({', '.join(VALUE_COLUMNS)}); got {list(fieldnames)}",
        line=1,
    )


def read_records(f: io.TextIOBase) -> List[Record]:
    reader = csv.DictReader(f)
    fieldnames = reader.fieldnames or []
    for required in ("country", "year"):
        if required not in fieldnames:
            raise DataShapeError(f"header is missing {required!r}", line=1)
    value_col = _value_column(fieldnames)

    out: List[Record] = []
    for row in reader:
        line = reader.line_num
        country = (row.get("country") or "").strip()
        if not country:
            raise DataShapeError("missing country", line=line)
        year = _parse_finite(row.get("year"), "year", line)
        if year != int(year):
            raise DataShapeError(f"year is not an integer: {row.get('year')!r}", line=line)
        value = _parse_finite(row.get(value_col), value_col, line)
        out.append(Record(country=country, year=int(year), life_expectancy=value))
    return out


def load_csv(path: str | Path) -> Dataset:
    path = Path(path)
    # utf-8-sig drops a leading byte-order mark
    try:
        with open(path, "r", newline="", encoding="utf-8-sig") as f:
            records = read_records(f)
    except UnicodeDecodeError as e:
        raise DataShapeError(f"{path} is not valid UTF-8: {e.reason}") from None
    ds = Dataset(records)
    logger.info("Loaded %d records for %d countries from %s", len(ds), len(ds.countries()), path)
    return ds


def dataset_from_csv_string(text: str) -> Dataset:
    return Dataset(read_records(io.StringIO(text)))

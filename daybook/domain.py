from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

SCHEMA_VERSION = 1


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    icon: str = ""
    color: str = ""
    score: Optional[float] = None  # mood weight, unused by most profiles


@dataclass(frozen=True)
class Record:
    id: str
    date: datetime
    cat_id: str
    title: str = ""
    note: str = ""
    values: tuple[tuple[str, Optional[float]], ...] = ()  # (name, measurement)
    tags: tuple[str, ...] = ()
    subject_id: Optional[str] = None  # plant, pet, ... the entry is about
    archived: bool = False
    favorite: bool = False

    def value(self, name: str) -> Optional[float]:
        for key, v in self.values:
            if key == name:
                return v
        return None


@dataclass(frozen=True)
class CategoryShare:
    cat_id: str
    count: int
    percent: float


@dataclass(frozen=True)
class GrowthLeader:
    subject_id: str
    growth: float
    entries: int


@dataclass(frozen=True)
class DayBreakdown:
    day: date
    count: int
    delta: Optional[float]
    tags: tuple[str, ...]


@dataclass(frozen=True)
class PeriodComparison:
    current: int
    previous: int
    change: Optional[float]  # relative change, None when previous is 0


@dataclass(frozen=True)
class Summary:
    total: int
    last_7_days: int
    last_30_days: int
    frequency_30_days: float

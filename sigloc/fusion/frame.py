"""Reference frame anchored at station 1, plus the station 1-2 baseline."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from sigloc.errors import ConfigurationError

_COLLINEAR_EPS = 1e-9


@dataclass(frozen=True)
class Station:
    label: str
    x: float
    y: float


@dataclass(frozen=True)
class Position:
    x: float
    y: float

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class Baseline:
    """Line a*x + b*y + c = 0 through stations 1 and 2 (original frame)."""

    a: float
    b: float
    c: float

    @classmethod
    def through(cls, x1: float, y1: float, x2: float, y2: float) -> Baseline:
        return cls(a=y1 - y2, b=x2 - x1, c=x1 * y2 - y1 * x2)

    @property
    def norm_sq(self) -> float:
        return self.a * self.a + self.b * self.b

    def evaluate(self, x: float, y: float) -> float:
        return self.a * x + self.b * y + self.c

    def offset(self, x: float, y: float) -> float:
        """Signed offset d such that (x, y) - d*(a, b) lies on the line."""
        return self.evaluate(x, y) / self.norm_sq

    def distance(self, x: float, y: float) -> float:
        return abs(self.evaluate(x, y)) / math.sqrt(self.norm_sq)

    def project(self, x: float, y: float) -> tuple[float, float]:
        d = self.offset(x, y)
        return (x - d * self.a, y - d * self.b)

    def reflect(self, x: float, y: float) -> tuple[float, float]:
        d = self.offset(x, y)
        return (x - 2.0 * d * self.a, y - 2.0 * d * self.b)


@dataclass(frozen=True)
class ReferenceFrame:
    """Stations expressed relative to station 1.

    Station 1 sits at the local origin; station2/station3 hold the translated
    coordinates (x2p, y2p) and (x3p, y3p).
    """

    stations: tuple[Station, Station, Station]
    station2: tuple[float, float]
    station3: tuple[float, float]
    baseline: Baseline

    @property
    def origin(self) -> tuple[float, float]:
        first = self.stations[0]
        return (first.x, first.y)

    @property
    def labels(self) -> tuple[str, str, str]:
        return (self.stations[0].label, self.stations[1].label, self.stations[2].label)

    def to_local(self, x: float, y: float) -> tuple[float, float]:
        x1, y1 = self.origin
        return (x - x1, y - y1)

    def to_global(self, x: float, y: float) -> tuple[float, float]:
        x1, y1 = self.origin
        return (x + x1, y + y1)


def build_frame(stations: Sequence[Station]) -> ReferenceFrame:
    """Translate three stations into a frame anchored at the first one.

    Raises ConfigurationError for anything other than three distinct,
    non-collinear stations.
    """
    if len(stations) != 3:
        raise ConfigurationError(f"expected 3 stations, got {len(stations)}")

    s1, s2, s3 = stations
    x2p, y2p = s2.x - s1.x, s2.y - s1.y
    x3p, y3p = s3.x - s1.x, s3.y - s1.y

    baseline = Baseline.through(s1.x, s1.y, s2.x, s2.y)
    if baseline.norm_sq == 0.0:
        raise ConfigurationError(
            f"stations {s1.label!r} and {s2.label!r} coincide; baseline is undefined"
        )

    cross = x2p * y3p - y2p * x3p
    scale = math.hypot(x2p, y2p) * math.hypot(x3p, y3p)
    if abs(cross) <= _COLLINEAR_EPS * max(scale, 1.0):
        raise ConfigurationError(
            f"stations {s1.label!r}, {s2.label!r}, {s3.label!r} are collinear"
        )

    return ReferenceFrame(
        stations=(s1, s2, s3),
        station2=(x2p, y2p),
        station3=(x3p, y3p),
        baseline=baseline,
    )

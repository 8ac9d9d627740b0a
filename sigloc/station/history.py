"""Caller-owned distance history per station."""

from __future__ import annotations

from collections.abc import Mapping

import numpy as np


class DistanceHistory:
    """Recent distance estimates keyed by station label.

    The trilateration core is stateless; callers that want smoothing keep one
    of these alongside it and feed the medians back in.
    """

    def __init__(self, limit: int = 20) -> None:
        self._limit = max(int(limit), 1)
        self._samples: dict[str, list[float]] = {}

    def push(self, station: str, distance: float) -> None:
        samples = self._samples.setdefault(station, [])
        samples.append(float(distance))
        if len(samples) > self._limit:
            del samples[:-self._limit]

    def extend(self, distances: Mapping[str, float]) -> None:
        for station, distance in distances.items():
            self.push(station, distance)

    def samples(self, station: str) -> list[float]:
        return list(self._samples.get(station, []))

    def median(self, station: str) -> float | None:
        samples = self._samples.get(station)
        if not samples:
            return None
        # Median is robust to occasional RSSI distance outliers.
        return float(np.median(np.array(samples, dtype=np.float64)))

    def medians(self) -> dict[str, float]:
        return {
            station: float(np.median(np.array(samples, dtype=np.float64)))
            for station, samples in self._samples.items()
            if samples
        }

    def clear(self, station: str | None = None) -> None:
        if station is None:
            self._samples.clear()
        else:
            self._samples.pop(station, None)

    def __len__(self) -> int:
        return len(self._samples)

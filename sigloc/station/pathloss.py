"""Per-station linear path-loss model: RSSI -> distance."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from sigloc.errors import ConfigurationError


@dataclass(frozen=True)
class Calibration:
    slope: float  # negative: weaker signal, larger distance
    intercept: float

    def distance(self, rssi: float) -> float:
        return distance(rssi, self.slope, self.intercept)


def distance(rssi: float, slope: float, intercept: float) -> float:
    """Estimate distance from RSSI under a fitted linear model.

    distance = slope * rssi + intercept

    Readings outside the calibrated range may yield negative distances;
    they are returned as-is.
    """
    return slope * rssi + intercept


def distances(
    readings: Mapping[str, float],
    calibrations: Mapping[str, Calibration],
) -> dict[str, float]:
    """Convert {station_label: rssi} into {station_label: distance}."""
    result: dict[str, float] = {}
    for label, rssi in readings.items():
        calibration = calibrations.get(label)
        if calibration is None:
            raise ConfigurationError(f"no calibration for station {label!r}")
        result[label] = calibration.distance(float(rssi))
    return result

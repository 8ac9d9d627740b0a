from __future__ import annotations

import pytest

from sigloc.errors import ConfigurationError
from sigloc.fusion.frame import Baseline, Station, build_frame


def _stations(*coords: tuple[float, float]) -> list[Station]:
    return [Station(label=f"s{i + 1}", x=x, y=y) for i, (x, y) in enumerate(coords)]


def test_build_frame_translates_to_station_one() -> None:
    frame = build_frame(_stations((2.0, 1.0), (13.0, 6.0), (12.0, 1.0)))
    assert frame.origin == (2.0, 1.0)
    assert frame.station2 == (11.0, 5.0)
    assert frame.station3 == (10.0, 0.0)
    assert frame.to_global(*frame.to_local(7.0, 3.0)) == (7.0, 3.0)
    assert frame.labels == ("s1", "s2", "s3")


def test_baseline_passes_through_both_stations() -> None:
    frame = build_frame(_stations((2.0, 1.0), (13.0, 6.0), (12.0, 1.0)))
    baseline = frame.baseline
    assert baseline.c == 2.0 * 6.0 - 1.0 * 13.0
    assert baseline.evaluate(2.0, 1.0) == 0.0
    assert baseline.evaluate(13.0, 6.0) == 0.0


def test_baseline_reflection_and_projection() -> None:
    baseline = Baseline.through(0.0, 0.0, 10.0, 0.0)
    assert baseline.reflect(3.0, 4.0) == (3.0, -4.0)
    assert baseline.project(3.0, 4.0) == (3.0, 0.0)
    assert baseline.distance(3.0, -4.0) == 4.0


def test_build_frame_rejects_collinear_stations() -> None:
    with pytest.raises(ConfigurationError):
        build_frame(_stations((0.0, 0.0), (1.0, 1.0), (3.0, 3.0)))


def test_build_frame_rejects_coincident_baseline() -> None:
    with pytest.raises(ConfigurationError):
        build_frame(_stations((1.0, 1.0), (1.0, 1.0), (4.0, 0.0)))


def test_build_frame_requires_three_stations() -> None:
    with pytest.raises(ConfigurationError):
        build_frame(_stations((0.0, 0.0), (1.0, 0.0)))

from __future__ import annotations

from sigloc.station.history import DistanceHistory


def test_history_median_ignores_single_outlier() -> None:
    history = DistanceHistory(limit=10)
    for value in (5.0, 5.2, 4.9, 30.0, 5.1):
        history.push("a", value)
    assert history.median("a") == 5.1


def test_history_trims_to_limit() -> None:
    history = DistanceHistory(limit=3)
    history.extend({"a": 1.0})
    history.extend({"a": 2.0})
    history.extend({"a": 3.0})
    history.extend({"a": 4.0})
    assert history.samples("a") == [2.0, 3.0, 4.0]
    assert history.medians() == {"a": 3.0}


def test_history_unknown_station_has_no_median() -> None:
    history = DistanceHistory()
    assert history.median("missing") is None
    history.push("b", 2.0)
    history.clear("b")
    assert len(history) == 0

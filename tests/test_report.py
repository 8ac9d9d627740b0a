from __future__ import annotations

import io

from rich.console import Console

from sigloc.fusion.branch import Branch
from sigloc.fusion.frame import Position, Station
from sigloc.fusion.trilateration import Fix
from sigloc.ui.renderer import render_fix
from sigloc.ui.report import build_report

STATIONS = [
    Station(label="s1", x=2.0, y=1.0),
    Station(label="s2", x=13.0, y=6.0),
    Station(label="s3", x=12.0, y=1.0),
]


def _fix() -> Fix:
    return Fix(
        position=Position(x=7.0, y=3.0),
        distances={"s1": 5.385, "s2": 6.708, "s3": -0.5},
        branch=Branch.REFLECTED,
        iterations=5,
        residual=1e-6,
        policy="fixed-step",
        readings={"s1": -53.9, "s2": -67.1, "s3": -53.9},
    )


def test_render_fix_places_stations_and_target() -> None:
    rendered = render_fix(STATIONS, Position(x=7.0, y=3.0), width=40, height=12)
    text = "\n".join(rendered.lines())
    assert len(rendered.lines()) == 12
    assert text.count("◈") == 3
    assert "✖" in text

    # Station 1 is lower-left of station 2 on screen.
    g1 = rendered.world_to_grid(2.0, 1.0)
    g2 = rendered.world_to_grid(13.0, 6.0)
    assert g1 is not None and g2 is not None
    assert g1[0] < g2[0]
    assert g1[1] > g2[1]


def test_build_report_lists_stations_and_position() -> None:
    console = Console(file=io.StringIO(), width=100, record=True)
    console.print(build_report(_fix(), STATIONS))
    text = console.export_text()

    assert "(7.000, 3.000)" in text
    assert "reflected" in text
    for station in STATIONS:
        assert station.label in text
    assert "-0.500" in text
    assert "-53.9" in text


def test_build_report_without_map() -> None:
    console = Console(file=io.StringIO(), width=100, record=True)
    console.print(build_report(_fix(), STATIONS, show_map=False))
    assert "◈" not in console.export_text()

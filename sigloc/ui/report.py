"""Terminal report of a position fix using rich."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from sigloc.fusion.branch import Branch
from sigloc.fusion.frame import Station
from sigloc.fusion.trilateration import Fix
from sigloc.ui.renderer import RenderedMap, render_fix

_BRANCH_STYLE = {
    Branch.DIRECT: "green",
    Branch.PROJECTED: "yellow",
    Branch.REFLECTED: "cyan",
}


def _header(fix: Fix) -> Text:
    text = Text()
    text.append("position ", "bold white")
    text.append(f"({fix.position.x:.3f}, {fix.position.y:.3f})", "bold green")
    text.append("\n")
    text.append(f"{fix.policy}", "dim")
    text.append(f"  {fix.iterations} iterations", "dim")
    text.append(f"  residual {fix.residual:.2e}", "dim")
    text.append("  branch ", "dim")
    text.append(fix.branch.value, _BRANCH_STYLE[fix.branch])
    return text


def _station_table(fix: Fix, stations: Sequence[Station]) -> Table:
    table = Table(box=None, pad_edge=False, header_style="bold")
    table.add_column("station")
    table.add_column("x", justify="right")
    table.add_column("y", justify="right")
    if fix.readings:
        table.add_column("rssi", justify="right")
    table.add_column("distance", justify="right")

    for station in stations:
        row = [station.label, f"{station.x:.2f}", f"{station.y:.2f}"]
        if fix.readings:
            rssi = fix.readings.get(station.label)
            row.append(f"{rssi:.1f}" if rssi is not None else "-")
        distance = fix.distances.get(station.label)
        if distance is None:
            row.append("-")
        elif distance < 0:
            row.append(Text(f"{distance:.3f}", "red"))
        else:
            row.append(f"{distance:.3f}")
        table.add_row(*row)
    return table


def _map_text(rendered: RenderedMap) -> Text:
    return Text("\n".join(rendered.lines()), no_wrap=True)


def build_report(
    fix: Fix,
    stations: Sequence[Station],
    show_map: bool = True,
    map_size: tuple[int, int] = (48, 16),
) -> Panel:
    """Compose the fix, the per-station ranges and an optional map."""
    parts: list = [_header(fix), Text(""), _station_table(fix, stations)]
    if show_map:
        width, height = map_size
        rendered = render_fix(stations, fix.position, width=width, height=height)
        parts.extend([Text(""), _map_text(rendered)])
    return Panel(Group(*parts), title="sigloc", title_align="left", border_style="blue")


def print_report(
    fix: Fix,
    stations: Sequence[Station],
    console: Console | None = None,
    show_map: bool = True,
    map_size: tuple[int, int] = (48, 16),
) -> None:
    console = console or Console()
    console.print(build_report(fix, stations, show_map=show_map, map_size=map_size))

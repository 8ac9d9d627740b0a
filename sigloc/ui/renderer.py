"""Stations + position fix -> character grid."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Callable

from sigloc.fusion.frame import Position, Station


@dataclass
class RenderedMap:
    grid: list[list[str]]
    width: int
    height: int
    world_to_grid: Callable[[float, float], tuple[int, int] | None]

    def lines(self) -> list[str]:
        return ["".join(row) for row in self.grid]


_BASELINE = "·"  # ·
_STATION = "◈"   # ◈
_TARGET = "✖"    # ✖


def _make_grid(width: int, height: int, fill: str = " ") -> list[list[str]]:
    return [[fill] * width for _ in range(height)]


def _bresenham(x0: int, y0: int, x1: int, y1: int) -> list[tuple[int, int]]:
    """Integer Bresenham line from (x0,y0) to (x1,y1)."""
    points: list[tuple[int, int]] = []
    dx = abs(x1 - x0)
    dy = abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx - dy
    while True:
        points.append((x0, y0))
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        if e2 > -dy:
            err -= dy
            x0 += sx
        if e2 < dx:
            err += dx
            y0 += sy
    return points


def _bounds(
    stations: Sequence[Station],
    position: Position | None,
    margin: float,
) -> tuple[float, float, float, float]:
    xs = [s.x for s in stations]
    ys = [s.y for s in stations]
    if position is not None:
        xs.append(position.x)
        ys.append(position.y)
    if not xs:
        return (-1.0, -1.0, 1.0, 1.0)
    return (min(xs) - margin, min(ys) - margin, max(xs) + margin, max(ys) + margin)


def render_fix(
    stations: Sequence[Station],
    position: Position | None,
    width: int = 48,
    height: int = 16,
    margin: float = 1.0,
) -> RenderedMap:
    """Render stations, the station 1-2 baseline and the estimate.

    World y grows upward; grid rows grow downward.
    """
    width = max(width, 8)
    height = max(height, 4)
    grid = _make_grid(width, height)

    x_min, y_min, x_max, y_max = _bounds(stations, position, margin)
    w_range = max(x_max - x_min, 0.01)
    h_range = max(y_max - y_min, 0.01)

    usable_w = width - 2
    usable_h = height - 2

    # Terminal cells are ~2x taller than wide: rows per unit = 0.5 * cols per unit.
    scale_x = min(usable_w / w_range, 2.0 * usable_h / h_range)
    scale_y = 0.5 * scale_x

    def world_to_grid(wx: float, wy: float) -> tuple[int, int] | None:
        gx = int(round((wx - x_min) * scale_x)) + 1
        gy = height - 2 - int(round((wy - y_min) * scale_y))
        if 0 <= gx < width and 0 <= gy < height:
            return (gx, gy)
        return None

    if len(stations) >= 2:
        start = world_to_grid(stations[0].x, stations[0].y)
        end = world_to_grid(stations[1].x, stations[1].y)
        if start is not None and end is not None:
            for gx, gy in _bresenham(start[0], start[1], end[0], end[1]):
                grid[gy][gx] = _BASELINE

    for station in stations:
        g = world_to_grid(station.x, station.y)
        if g is None:
            continue
        gx, gy = g
        grid[gy][gx] = _STATION
        for i, ch in enumerate(station.label[:6]):
            cx = gx + 1 + i
            if cx < width and grid[gy][cx] in (" ", _BASELINE):
                grid[gy][cx] = ch

    if position is not None:
        g = world_to_grid(position.x, position.y)
        if g is not None:
            grid[g[1]][g[0]] = _TARGET

    return RenderedMap(grid=grid, width=width, height=height, world_to_grid=world_to_grid)

"""Pick the circle intersection consistent with station 3."""

from __future__ import annotations

import logging
from enum import Enum

from sigloc.fusion.frame import Position, ReferenceFrame

log = logging.getLogger(__name__)


class Branch(Enum):
    DIRECT = "direct"
    PROJECTED = "projected"
    REFLECTED = "reflected"


def range_error(frame: ReferenceFrame, x: float, y: float, r3: float) -> float:
    """|squared distance to station 3 - r3^2| for a point in the local frame."""
    x3p, y3p = frame.station3
    dx = x - x3p
    dy = y - y3p
    return abs(dx * dx + dy * dy - r3 * r3)


def select_branch(
    frame: ReferenceFrame,
    x: float,
    y: float,
    r3: float,
    tolerance: float,
) -> tuple[Position, Branch]:
    """Resolve the two-fold ambiguity of a circle intersection.

    (x, y) is the solver output in the station-1 frame. The two circles around
    stations 1 and 2 meet at mirror images across their baseline; keep the
    candidate when station 3's range confirms it, fall back to the projection
    when the candidate sits on the baseline, otherwise reflect it. Returns the
    chosen point in the original frame.

    A candidate that misses the tolerance is always reflected, even when it
    was on the right side; an under-iterated FixedStep can therefore land on
    the mirror image.
    """
    gx, gy = frame.to_global(x, y)
    baseline = frame.baseline

    if range_error(frame, x, y, r3) < tolerance:
        branch = Branch.DIRECT
        chosen = (gx, gy)
    elif baseline.distance(gx, gy) < tolerance:
        # Tangent circles: both intersections collapse onto the baseline.
        branch = Branch.PROJECTED
        chosen = baseline.project(gx, gy)
    else:
        branch = Branch.REFLECTED
        chosen = baseline.reflect(gx, gy)

    log.debug("branch %s -> (%.4f, %.4f)", branch.value, chosen[0], chosen[1])
    return Position(x=chosen[0], y=chosen[1]), branch

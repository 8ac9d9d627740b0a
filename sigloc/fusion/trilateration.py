"""Transmitter positioning: three station ranges -> one (x, y) fix."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from sigloc.config import SiglocConfig
from sigloc.errors import ConfigurationError
from sigloc.fusion.branch import Branch, select_branch
from sigloc.fusion.frame import Position, ReferenceFrame, build_frame
from sigloc.fusion.newton import CirclePair, FixedStep, SolverPolicy, solve
from sigloc.station.history import DistanceHistory
from sigloc.station.pathloss import distances as rssi_distances

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Fix:
    position: Position
    distances: dict[str, float]
    branch: Branch
    iterations: int
    residual: float
    policy: str
    readings: dict[str, float] = field(default_factory=dict)


def solve_fix(
    r1: float,
    r2: float,
    r3: float,
    tolerance: float,
    *,
    frame: ReferenceFrame,
    policy: SolverPolicy | None = None,
    readings: Mapping[str, float] | None = None,
) -> Fix:
    """Run frame transform -> Newton intersection -> branch selection."""
    if policy is None:
        policy = FixedStep()

    x2p, y2p = frame.station2
    result = solve(CirclePair(x2p=x2p, y2p=y2p, r1=r1, r2=r2), policy)
    position, branch = select_branch(frame, result.x, result.y, r3, tolerance)

    labels = frame.labels
    return Fix(
        position=position,
        distances={labels[0]: r1, labels[1]: r2, labels[2]: r3},
        branch=branch,
        iterations=result.iterations,
        residual=result.residual,
        policy=result.policy,
        readings=dict(readings or {}),
    )


def estimate_position(
    r1: float,
    r2: float,
    r3: float,
    tolerance: float,
    *,
    frame: ReferenceFrame,
    policy: SolverPolicy | None = None,
) -> Position:
    """Estimate the transmitter position from its distances to the three stations.

    Args:
        r1, r2, r3: distances to the frame's stations, in station order
        tolerance: range-consistency tolerance used to pick the branch
        frame: station geometry from build_frame()
        policy: Newton control policy; FixedStep() when omitted

    Raises:
        SolverDegenerate, NonConvergence: see sigloc.fusion.newton.solve
    """
    return solve_fix(r1, r2, r3, tolerance, frame=frame, policy=policy).position


def locate(
    readings: Mapping[str, float],
    config: SiglocConfig,
    history: DistanceHistory | None = None,
) -> Fix:
    """Turn one RSSI reading per station into a position fix.

    When a history is given, the new distances are appended to it and the
    per-station medians feed the solver instead of the raw values.
    """
    frame = build_frame(config.stations)
    labels = frame.labels

    missing = [label for label in labels if label not in readings]
    if missing:
        raise ConfigurationError(f"missing readings for stations: {', '.join(missing)}")

    station_readings = {label: float(readings[label]) for label in labels}
    estimates = rssi_distances(station_readings, config.calibrations)

    if history is not None:
        history.extend(estimates)
        estimates = {label: history.median(label) for label in labels}

    fix = solve_fix(
        estimates[labels[0]],
        estimates[labels[1]],
        estimates[labels[2]],
        config.tolerance,
        frame=frame,
        policy=config.policy,
        readings=station_readings,
    )
    log.debug(
        "fix (%.3f, %.3f) via %s branch from %s",
        fix.position.x,
        fix.position.y,
        fix.branch.value,
        ", ".join(f"{label}={distance:.2f}" for label, distance in fix.distances.items()),
    )
    return fix

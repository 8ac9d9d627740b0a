"""Two-circle intersection via Newton's method with explicit control policies."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import ClassVar

from sigloc.errors import ConfigurationError, NonConvergence, SolverDegenerate

log = logging.getLogger(__name__)

# Smallest |sin| of the angle between the iterate and station 2.
_DEGENERATE_SINE = 1e-6
# Largest single step, in units of r1 + r2 + |station 2|.
_MAX_STEP_SCALE = 10.0

# Tuned on the reference deployment; configurable, not invariants.
DEFAULT_SEED = (4.5, 3.0)
# Equals 0.2 on the 2/cross step of the old tuning; see FixedStep.
DEFAULT_ETA = 0.8
DEFAULT_ITERATIONS = 5


@dataclass(frozen=True)
class CirclePair:
    """Circle of radius r1 at the origin and radius r2 at (x2p, y2p)."""

    x2p: float
    y2p: float
    r1: float
    r2: float

    def residuals(self, x: float, y: float) -> tuple[float, float]:
        dx = x - self.x2p
        dy = y - self.y2p
        f0 = x * x + y * y - self.r1 * self.r1
        f1 = dx * dx + dy * dy - self.r2 * self.r2
        return (f0, f1)


@dataclass(frozen=True)
class SolverState:
    x: float
    y: float
    f0: float
    f1: float
    iteration: int = 0

    @classmethod
    def at(cls, circles: CirclePair, x: float, y: float, iteration: int = 0) -> SolverState:
        f0, f1 = circles.residuals(x, y)
        return cls(x=x, y=y, f0=f0, f1=f1, iteration=iteration)

    @property
    def residual(self) -> float:
        return self.f0 * self.f0 + self.f1 * self.f1


@dataclass(frozen=True)
class SolverResult:
    x: float
    y: float
    iterations: int
    residual: float
    policy: str


def newton_step(circles: CirclePair, state: SolverState, eta: float = 1.0) -> SolverState:
    """One (optionally damped) Newton update on the two circle residuals.

    The 2x2 Jacobian is inverted in closed form; its determinant is
    proportional to the cross product of the iterate and station 2, so the
    step is undefined whenever the iterate lies on the baseline. Near the
    baseline the step explodes instead, so an iterate within a negligible
    angle of it, or a step far beyond the size of the problem, is rejected
    too.
    """
    x2p, y2p = circles.x2p, circles.y2p
    xk, yk = state.x, state.y

    cross = yk * x2p - xk * y2p
    spread = math.hypot(xk, yk) * math.hypot(x2p, y2p)
    if not math.isfinite(cross) or abs(cross) <= _DEGENERATE_SINE * spread:
        raise SolverDegenerate(
            f"iterate ({xk:.6g}, {yk:.6g}) is collinear with the baseline "
            f"at iteration {state.iteration}"
        )

    c = 1.0 / (2.0 * cross)
    dx = xk - x2p
    dy = yk - y2p
    x_next = xk - eta * c * (dy * state.f0 - yk * state.f1)
    y_next = yk - eta * c * (-dx * state.f0 + xk * state.f1)
    if not (math.isfinite(x_next) and math.isfinite(y_next)):
        raise SolverDegenerate(f"non-finite iterate at iteration {state.iteration + 1}")

    limit = _MAX_STEP_SCALE * (abs(circles.r1) + abs(circles.r2) + math.hypot(x2p, y2p))
    step = math.hypot(x_next - xk, y_next - yk)
    if step > limit:
        raise SolverDegenerate(
            f"step of {step:.3g} from ({xk:.6g}, {yk:.6g}) exceeds {limit:.3g} "
            f"at iteration {state.iteration}"
        )

    return SolverState.at(circles, x_next, y_next, iteration=state.iteration + 1)


def default_seed(circles: CirclePair) -> tuple[float, float]:
    """Baseline midpoint pushed off the baseline by half its length."""
    half_x = 0.5 * circles.x2p
    half_y = 0.5 * circles.y2p
    return (half_x - half_y, half_y + half_x)


@dataclass(frozen=True)
class ConvergenceDriven:
    """Iterate undamped until f0^2 + f1^2 <= epsilon, at most max_iter steps."""

    name: ClassVar[str] = "convergence"

    epsilon: float = 1e-10
    max_iter: int = 100
    seed: tuple[float, float] | None = None

    def __post_init__(self) -> None:
        if not self.epsilon > 0:
            raise ConfigurationError(f"epsilon must be positive, got {self.epsilon}")
        if self.max_iter < 1:
            raise ConfigurationError(f"max_iter must be at least 1, got {self.max_iter}")

    def seed_for(self, circles: CirclePair) -> tuple[float, float]:
        if self.seed is None:
            return default_seed(circles)
        return self.seed

    def advance(self, circles: CirclePair, state: SolverState) -> tuple[SolverState, bool]:
        if state.residual <= self.epsilon:
            return state, True
        if state.iteration >= self.max_iter:
            raise NonConvergence(
                f"residual {state.residual:.3g} above {self.epsilon:.3g} "
                f"after {state.iteration} iterations"
            )
        return newton_step(circles, state), False


@dataclass(frozen=True)
class FixedStep:
    """Run exactly `iterations` damped steps from a fixed seed.

    `eta` scales the exact Newton step. Tunings written against the older
    2/cross coefficient took steps four times larger, so their eta of 0.2
    is 0.8 here.
    """

    name: ClassVar[str] = "fixed-step"

    iterations: int = DEFAULT_ITERATIONS
    eta: float = DEFAULT_ETA
    seed: tuple[float, float] = DEFAULT_SEED

    def __post_init__(self) -> None:
        if self.iterations < 0:
            raise ConfigurationError(f"iterations must be non-negative, got {self.iterations}")
        if not 0.0 < self.eta <= 1.0:
            raise ConfigurationError(f"eta must lie in (0, 1], got {self.eta}")

    def seed_for(self, circles: CirclePair) -> tuple[float, float]:
        return self.seed

    def advance(self, circles: CirclePair, state: SolverState) -> tuple[SolverState, bool]:
        if state.iteration >= self.iterations:
            return state, True
        state = newton_step(circles, state, eta=self.eta)
        return state, state.iteration >= self.iterations


SolverPolicy = ConvergenceDriven | FixedStep


def solve(circles: CirclePair, policy: SolverPolicy) -> SolverResult:
    """Find one intersection of the circle pair under the given policy.

    Raises:
        SolverDegenerate: the Jacobian determinant vanished along the way.
        NonConvergence: convergence-driven policy hit its iteration cap.
    """
    x0, y0 = policy.seed_for(circles)
    state = SolverState.at(circles, float(x0), float(y0))
    done = False
    while not done:
        state, done = policy.advance(circles, state)

    log.debug(
        "%s solve: (%.4f, %.4f) after %d iterations, residual %.3g",
        policy.name,
        state.x,
        state.y,
        state.iteration,
        state.residual,
    )
    return SolverResult(
        x=state.x,
        y=state.y,
        iterations=state.iteration,
        residual=state.residual,
        policy=policy.name,
    )

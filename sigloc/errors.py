"""Error taxonomy for the trilateration core."""

from __future__ import annotations


class TrilaterationError(Exception):
    """Base exception for position estimation failures."""


class SolverDegenerate(TrilaterationError):
    """Newton update is undefined: the Jacobian determinant vanished."""


class NonConvergence(TrilaterationError):
    """Convergence-driven solve exceeded its iteration cap."""


class ConfigurationError(TrilaterationError):
    """Stations or calibrations cannot support a position estimate."""

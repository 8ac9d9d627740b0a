"""Runtime configuration for sigloc."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from sigloc.errors import ConfigurationError
from sigloc.fusion.frame import Station
from sigloc.fusion.newton import ConvergenceDriven, FixedStep, SolverPolicy
from sigloc.station.pathloss import Calibration


@dataclass
class SiglocConfig:
    # Deployment
    stations: list[Station] = field(default_factory=list)
    calibrations: dict[str, Calibration] = field(default_factory=dict)

    # Solver
    policy: SolverPolicy = field(default_factory=FixedStep)
    tolerance: float = 0.01

    # Smoothing
    history_limit: int = 20

    # UI
    show_map: bool = True
    map_width: int = 48
    map_height: int = 16

    # Paths
    data_dir: Path = field(default_factory=lambda: Path.home() / ".sigloc")


def load_config_file(path: Path) -> dict:
    """Load config overrides from a TOML file. Returns empty dict if not found."""
    if not path.exists():
        return {}
    import tomllib
    return tomllib.loads(path.read_text())


def apply_overrides(config: SiglocConfig, overrides: dict) -> SiglocConfig:
    """Apply dict overrides (from TOML or CLI) onto a config."""
    for key, value in overrides.items():
        if key == "stations" and isinstance(value, list):
            config.stations = [_station_from_dict(item) for item in value]
        elif key in ("calibration", "calibrations") and isinstance(value, dict):
            for label, params in value.items():
                config.calibrations[label] = _calibration_from_dict(label, params)
        elif key in ("solver", "policy") and isinstance(value, dict):
            config.policy = policy_from_dict(value)
        elif key == "policy" and isinstance(value, str):
            config.policy = policy_from_dict({"policy": value})
        elif key == "tolerance" and isinstance(value, int | float) and not isinstance(value, bool):
            config.tolerance = float(value)
        elif key == "data_dir" and isinstance(value, str):
            config.data_dir = Path(value)
        elif hasattr(config, key):
            current = getattr(config, key)
            if isinstance(value, bool) != isinstance(current, bool) or not isinstance(
                value, type(current)
            ):
                raise ConfigurationError(
                    f"{key} expects {type(current).__name__}, got {value!r}"
                )
            setattr(config, key, value)
    return config


def _station_from_dict(d: dict) -> Station:
    try:
        return Station(label=str(d["label"]), x=float(d["x"]), y=float(d["y"]))
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(f"invalid station entry {d!r}") from e


def _calibration_from_dict(label: str, d: dict) -> Calibration:
    try:
        return Calibration(slope=float(d["slope"]), intercept=float(d["intercept"]))
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(f"invalid calibration for {label!r}: {d!r}") from e


def policy_from_dict(d: dict) -> SolverPolicy:
    """Build a solver policy from a `[solver]` table."""
    kind = parse_policy(str(d.get("policy", FixedStep.name)))
    try:
        seed = d.get("seed")
        if seed is not None:
            seed = parse_point(seed) if isinstance(seed, str) else (float(seed[0]), float(seed[1]))

        if kind == ConvergenceDriven.name:
            defaults = ConvergenceDriven()
            return ConvergenceDriven(
                epsilon=float(d.get("epsilon", defaults.epsilon)),
                max_iter=int(d.get("max_iter", defaults.max_iter)),
                seed=seed,
            )

        defaults = FixedStep()
        return FixedStep(
            iterations=int(d.get("iterations", defaults.iterations)),
            eta=float(d.get("eta", defaults.eta)),
            seed=seed if seed is not None else defaults.seed,
        )
    except (IndexError, TypeError, ValueError) as e:
        raise ConfigurationError(f"invalid solver settings {d!r}") from e


def parse_policy(s: str) -> str:
    """Normalize a policy name: 'fixed-step'/'fixed' or 'convergence'/'converge'."""
    s = s.lower().strip().replace("_", "-")
    if s in ("fixed-step", "fixed", "fixedstep"):
        return FixedStep.name
    if s in ("convergence", "converge", "convergence-driven"):
        return ConvergenceDriven.name
    raise ConfigurationError(f"unknown solver policy: {s!r}")


def parse_point(s: str) -> tuple[float, float]:
    """Parse 'x,y' into a coordinate pair."""
    parts = [p.strip() for p in s.split(",")]
    if len(parts) != 2:
        raise ConfigurationError(f"expected 'x,y', got {s!r}")
    try:
        return (float(parts[0]), float(parts[1]))
    except ValueError as e:
        raise ConfigurationError(f"expected 'x,y', got {s!r}") from e


def parse_station(s: str) -> Station:
    """Parse 'label:x,y' into a Station."""
    label, sep, coords = s.partition(":")
    if not sep or not label.strip():
        raise ConfigurationError(f"expected 'label:x,y', got {s!r}")
    x, y = parse_point(coords)
    return Station(label=label.strip(), x=x, y=y)


def parse_calibration(s: str) -> tuple[str, Calibration]:
    """Parse 'label:slope,intercept' into (label, Calibration)."""
    label, sep, params = s.partition(":")
    if not sep or not label.strip():
        raise ConfigurationError(f"expected 'label:slope,intercept', got {s!r}")
    slope, intercept = parse_point(params)
    return label.strip(), Calibration(slope=slope, intercept=intercept)


def parse_reading(s: str) -> tuple[str, float]:
    """Parse 'label=rssi' into (label, rssi)."""
    label, sep, value = s.partition("=")
    if not sep or not label.strip():
        raise ConfigurationError(f"expected 'label=rssi', got {s!r}")
    try:
        return label.strip(), float(value)
    except ValueError as e:
        raise ConfigurationError(f"expected 'label=rssi', got {s!r}") from e

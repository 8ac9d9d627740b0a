"""Main entry point: readings -> distances -> trilateration -> report."""

from __future__ import annotations

import argparse
import dataclasses
import logging
from pathlib import Path

from sigloc.config import (
    SiglocConfig,
    apply_overrides,
    load_config_file,
    parse_calibration,
    parse_policy,
    parse_reading,
    parse_station,
    policy_from_dict,
)
from sigloc.errors import ConfigurationError, TrilaterationError
from sigloc.fusion.frame import build_frame
from sigloc.fusion.trilateration import Fix, locate, solve_fix
from sigloc.station.history import DistanceHistory
from sigloc.station.pathloss import distances
from sigloc.ui.report import print_report

log = logging.getLogger("sigloc")

_COMMANDS = ("solve", "locate")


def _command(config: SiglocConfig) -> str | None:
    return getattr(config, "_command", None)


def _operands(config: SiglocConfig) -> list[str]:
    return list(getattr(config, "_operands", []))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sigloc", description="RSSI trilateration")
    parser.add_argument("command", choices=_COMMANDS, help="solve R1 R2 R3 | locate LABEL=RSSI ...")
    parser.add_argument("operands", nargs="+", help="distances or station readings")
    parser.add_argument("--config", type=Path, default=None, help="TOML config file")
    parser.add_argument(
        "--station", action="append", default=[], help="label:x,y (repeat three times)"
    )
    parser.add_argument(
        "--calibration", action="append", default=[], help="label:slope,intercept"
    )
    parser.add_argument("--policy", type=str, default=None, help="fixed-step|convergence")
    parser.add_argument("--iterations", type=int, default=None, help="Fixed-step iterations")
    parser.add_argument("--eta", type=float, default=None, help="Fixed-step damping in (0, 1]")
    parser.add_argument("--epsilon", type=float, default=None, help="Convergence tolerance")
    parser.add_argument("--max-iter", type=int, default=None, help="Convergence iteration cap")
    parser.add_argument("--seed", type=str, default=None, help="Initial iterate x,y")
    parser.add_argument("--tolerance", type=float, default=None, help="Branch selection tolerance")
    parser.add_argument("--no-map", action="store_true", help="Skip the map in the report")
    parser.add_argument("--debug", action="store_true", help="Debug logging")
    return parser


def _solver_overrides(config: SiglocConfig, args: argparse.Namespace) -> dict | None:
    solver: dict = {}
    if args.policy is not None:
        solver["policy"] = args.policy
    if args.iterations is not None:
        solver["iterations"] = args.iterations
    if args.eta is not None:
        solver["eta"] = args.eta
    if args.epsilon is not None:
        solver["epsilon"] = args.epsilon
    if args.max_iter is not None:
        solver["max_iter"] = args.max_iter
    if args.seed is not None:
        solver["seed"] = args.seed
    if not solver:
        return None

    current = config.policy
    merged: dict = {"policy": current.name}
    if parse_policy(str(solver.get("policy", current.name))) == current.name:
        merged.update(dataclasses.asdict(current))
    merged.update(solver)
    return merged


def build_config(argv: list[str] | None = None) -> SiglocConfig:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
    )

    config = SiglocConfig()

    try:
        # Load from config file
        config_path = args.config or config.data_dir / "config.toml"
        file_overrides = load_config_file(config_path)
        apply_overrides(config, file_overrides)

        # Apply CLI overrides
        if args.station:
            config.stations = [parse_station(s) for s in args.station]
        for item in args.calibration:
            label, calibration = parse_calibration(item)
            config.calibrations[label] = calibration
        solver = _solver_overrides(config, args)
        if solver is not None:
            config.policy = policy_from_dict(solver)
    except ConfigurationError as e:
        parser.error(str(e))

    if args.tolerance is not None:
        config.tolerance = args.tolerance
    if args.no_map:
        config.show_map = False

    if args.command == "solve" and len(args.operands) != 3:
        parser.error("solve takes exactly three distances")

    config._command = args.command  # type: ignore[attr-defined]
    config._operands = args.operands  # type: ignore[attr-defined]
    return config


def _solve_command(config: SiglocConfig, operands: list[str]) -> Fix:
    try:
        r1, r2, r3 = (float(value) for value in operands)
    except ValueError as e:
        raise ConfigurationError(f"distances must be numbers: {' '.join(operands)}") from e
    frame = build_frame(config.stations)
    return solve_fix(r1, r2, r3, config.tolerance, frame=frame, policy=config.policy)


def _locate_command(config: SiglocConfig, operands: list[str]) -> Fix:
    grouped: dict[str, list[float]] = {}
    for item in operands:
        label, rssi = parse_reading(item)
        grouped.setdefault(label, []).append(rssi)

    # Repeated readings for a station are smoothed through a median history.
    history: DistanceHistory | None = None
    if any(len(values) > 1 for values in grouped.values()):
        history = DistanceHistory(limit=config.history_limit)
        for label, values in grouped.items():
            for rssi in values[:-1]:
                history.extend(distances({label: rssi}, config.calibrations))

    latest = {label: values[-1] for label, values in grouped.items()}
    return locate(latest, config, history=history)


def run(config: SiglocConfig) -> int:
    command = _command(config)
    operands = _operands(config)
    try:
        if command == "solve":
            fix = _solve_command(config, operands)
        else:
            fix = _locate_command(config, operands)
    except TrilaterationError as e:
        log.error("%s: %s", type(e).__name__, e)
        return 1

    log.debug("%s -> (%.4f, %.4f)", command, fix.position.x, fix.position.y)
    print_report(
        fix,
        config.stations,
        show_map=config.show_map,
        map_size=(config.map_width, config.map_height),
    )
    return 0


def main() -> None:
    config = build_config()
    raise SystemExit(run(config))


if __name__ == "__main__":
    main()

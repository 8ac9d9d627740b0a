from __future__ import annotations

import math
from pathlib import Path

import pytest

from sigloc.fusion.newton import ConvergenceDriven, FixedStep
from sigloc.main import build_config, run

_STATIONS = ["--station", "s1:2,1", "--station", "s2:13,6", "--station", "s3:12,1"]


def _argv(tmp_path: Path, *args: str) -> list[str]:
    return [*args, "--config", str(tmp_path / "none.toml"), *_STATIONS]


def test_cli_policy_override(tmp_path: Path) -> None:
    config = build_config(_argv(tmp_path, "solve", "1", "2", "3", "--policy", "convergence", "--epsilon", "1e-8"))
    assert config.policy == ConvergenceDriven(epsilon=1e-8)
    assert [s.label for s in config.stations] == ["s1", "s2", "s3"]


def test_cli_damping_keeps_fixed_step_seed(tmp_path: Path) -> None:
    config = build_config(_argv(tmp_path, "solve", "1", "2", "3", "--eta", "0.5", "--seed=-1,2"))
    assert config.policy == FixedStep(eta=0.5, seed=(-1.0, 2.0))


def test_solve_requires_three_distances(tmp_path: Path) -> None:
    with pytest.raises(SystemExit):
        build_config(_argv(tmp_path, "solve", "1", "2"))


def test_run_solve_prints_position(tmp_path: Path, capsys) -> None:
    r1 = math.dist((7, 3), (2, 1))
    r2 = math.dist((7, 3), (13, 6))
    r3 = math.dist((7, 3), (12, 1))
    config = build_config(_argv(tmp_path, "solve", str(r1), str(r2), str(r3), "--no-map"))

    assert run(config) == 0
    out = capsys.readouterr().out
    assert "position" in out
    assert "(7.00" in out or "(6.99" in out


def test_run_locate_with_repeated_readings(tmp_path: Path, capsys) -> None:
    argv = _argv(
        tmp_path,
        "locate",
        "s1=-53.85",
        "s1=-53.85",
        "s2=-67.08",
        "s3=-53.85",
    )
    for label in ("s1", "s2", "s3"):
        argv.extend(["--calibration", f"{label}:-0.1,0"])
    config = build_config(argv)

    assert run(config) == 0
    assert "rssi" in capsys.readouterr().out


def test_run_reports_collinear_stations(tmp_path: Path) -> None:
    config = build_config([
        "solve", "1", "2", "3",
        "--config", str(tmp_path / "none.toml"),
        "--station", "a:0,0", "--station", "b:1,1", "--station", "c:2,2",
    ])
    assert run(config) == 1


def test_mistyped_config_file_exits_cleanly(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text('calibrations = "s1:-0.1,0"\n')
    with pytest.raises(SystemExit):
        build_config(["solve", "1", "2", "3", "--config", str(path), *_STATIONS])

import argparse
import json
import re

import pytest

from tsp_race import cli


def run_args(**kwargs):
    values = dict(
        data=None,
        format=None,
        config=None,
        workers=None,
        population=None,
        offspring=None,
        duration=None,
        seed=None,
        executor=None,
        baseline=False,
    )
    values.update(kwargs)
    return argparse.Namespace(**values)


def test_data_command(cities_file, capsys):
    cli.main(["data", "--data", str(cities_file)])
    out = capsys.readouterr().out
    assert "12 cities" in out
    assert "nearest_neighbor+two_opt length" in out


def test_data_command_load_error(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["data", "--data", str(tmp_path / "missing.tsp")])
    assert excinfo.value.code == 1
    assert "error:" in capsys.readouterr().err


def test_run_command(cities_file, capsys):
    cli.main(
        [
            "run",
            "--data",
            str(cities_file),
            "--executor",
            "thread",
            "--workers",
            "2",
            "--population",
            "10",
            "--duration",
            "0.3",
            "--seed",
            "1",
            "--baseline",
        ]
    )
    out = capsys.readouterr().out
    assert "Score = " in out
    assert "best score = " in out
    assert re.search(r"baseline = [\d.]+ \([+-]\d+\.\d{2}% against the GA best\)", out)
    assert out.rstrip().endswith("Done.")


def test_run_command_with_config(cities_file, tmp_path, capsys):
    cfg = tmp_path / "cfg.json"
    cfg.write_text(json.dumps({"data_path": str(cities_file), "workers": 1, "run_duration": 0.0}))
    cli.main(["run", "--config", str(cfg)])
    out = capsys.readouterr().out
    assert "(process)" in out
    assert out.rstrip().endswith("Done.")


def test_build_config_defaults_to_processes(cities_file):
    assert cli.build_config(run_args(data=str(cities_file))).executor == "process"
    cfg = cli.build_config(run_args(data=str(cities_file), executor="thread"))
    assert cfg.executor == "thread"


def test_build_config_file_then_flags(cities_file, tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"executor": "thread", "workers": 3, "population_size": 9}))
    cfg = cli.build_config(run_args(config=str(path), data=str(cities_file), workers=4))
    assert cfg.executor == "thread"
    assert cfg.workers == 4
    assert cfg.population_size == 9


def test_run_command_bad_config(cities_file, capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["run", "--data", str(cities_file), "--population", "0"])
    assert excinfo.value.code == 1
    assert "invalid configuration" in capsys.readouterr().err


@pytest.mark.parametrize(
    "values",
    [
        {"workers": "3"},
        {"run_duration": None},
        {"workers": 2.5},
        {"population_size": True},
        {"mutation_rate": "0.1"},
        {"data_path": 7},
    ],
)
def test_run_command_rejects_wrongly_typed_config(cities_file, tmp_path, capsys, values):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"data_path": str(cities_file), **values}))
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["run", "--config", str(path)])
    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert "invalid configuration" in err
    assert next(iter(values)) in err


def test_run_command_rejects_malformed_json(tmp_path, capsys):
    path = tmp_path / "cfg.json"
    path.write_text("{workers: 2")
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["run", "--config", str(path)])
    assert excinfo.value.code == 1


def test_run_command_load_error(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(
            [
                "run",
                "--data",
                str(tmp_path / "missing.tsp"),
                "--executor",
                "thread",
                "--duration",
                "2",
            ]
        )
    assert excinfo.value.code == 1

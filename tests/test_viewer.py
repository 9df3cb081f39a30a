import json

import pytest

import viewer
from config import QuantumNumbers, SampleRequest


def test_cli_samples_and_saves(tmp_path):
    out = tmp_path / "cloud.json"
    code = viewer.main(["-n", "1", "-l", "0", "-m", "0", "-s", "20", "--seed", "3", "--no-show", "--save", str(out)])
    assert code == 0
    data = json.loads(out.read_text())
    assert len(data["points"]) == 20
    assert all(p["phase"] == 0 for p in data["points"])


def test_cli_reports_invalid_quantum_numbers(capsys):
    code = viewer.main(["-n", "1", "-l", "1", "--no-show"])
    assert code == 1
    assert "incompatible" in capsys.readouterr().out


def test_cli_reports_budget_exhaustion(capsys):
    code = viewer.main(["-n", "3", "-l", "0", "-s", "10", "--max-attempts", "100", "--no-show"])
    assert code == 1
    assert "Gave up" in capsys.readouterr().out


def test_command_line_overrides_config_file(tmp_path):
    path = tmp_path / "run.yaml"
    path.write_text("quantum_numbers: {n: 3, l: 2, ml: 2}\nsample_size: 50\nsampling: {seed: 1}\n")
    args = viewer.build_parser().parse_args(["--config", str(path), "-m", "-1", "--seed", "4", "--clamp"])
    config = viewer.resolve_config(args)
    assert config.request == SampleRequest(QuantumNumbers(3, 2, -1), 50)
    assert config.sampling.seed == 4
    assert config.sampling.clamp is True


def test_parser_rejects_non_integer():
    with pytest.raises(SystemExit):
        viewer.build_parser().parse_args(["-n", "two"])


def test_cli_accepts_float_budget_from_config(tmp_path, capsys):
    path = tmp_path / "run.yaml"
    path.write_text("quantum_numbers: {n: 3, l: 0, ml: 0}\nsample_size: 10\nsampling: {max_attempts: 5000.0}\n")
    code = viewer.main(["--config", str(path), "--no-show"])
    assert code == 1
    assert "Gave up after 5000 candidates" in capsys.readouterr().out


def test_cli_reports_bad_config_value(tmp_path, capsys):
    path = tmp_path / "run.yaml"
    path.write_text("sampling: {max_attempts: plenty}\n")
    assert viewer.main(["--config", str(path), "--no-show"]) == 1
    assert "max_attempts must be an integer" in capsys.readouterr().out

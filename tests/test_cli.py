"""Tests for the command-line launcher."""

import main


def test_simulate_prints_log_and_outcome(capsys):
    code = main.main(["--data-dir", "data-tests", "simulate", "katara", "zuko", "--env", "omashu", "--seed", "1"])
    out = capsys.readouterr().out
    assert code == 0
    assert out.startswith("[ 0] ")
    assert "Outcome: " in out
    assert "katara: " in out and "zuko: " in out


def test_simulate_unknown_environment(capsys):
    code = main.main(["--data-dir", "data-tests", "simulate", "katara", "zuko", "--env", "atlantis"])
    assert code == 2
    assert "Environment 'atlantis' not found" in capsys.readouterr().err

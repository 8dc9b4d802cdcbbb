# tests/test_cli.py
# How to run:
#   pytest -q
#
# What this covers:
#   - simulate: fast vs slow fixed-pace typing
#   - replay: timestamps and penalty lines from a file, malformed input
#   - profiles listing and unknown profile handling

import pytest

import tools.cpm_cli as cli

@pytest.fixture(autouse=True)
def _no_logging_config(monkeypatch):
    # keep structlog at its defaults so other tests can capture logs
    monkeypatch.setattr(cli, "configure_logging", lambda debug=False: None)

def test_simulate_fast_progresses(capsys):
    assert cli.main(["simulate", "--step", "500", "--count", "15"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 15
    assert lines[-1].endswith("PROGRESS")
    assert not any(line.endswith("PROGRESS") for line in lines[:-1])

def test_simulate_slow_does_not_progress(capsys):
    assert cli.main(["simulate", "--step", "2000", "--count", "15"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[-1].endswith("-")

def test_simulate_with_errors_penalises():
    steps = cli.simulate_steps(100, 5, error_every=2)
    assert steps.count(("penalty", None)) == 2
    assert [v for k, v in steps if k == "key"] == [0.0, 100.0, 200.0, 300.0, 400.0]

def test_parse_replay():
    steps = cli.parse_replay(["# header", "0", "", "250  # comment", "penalty", "penalty 300", "900"])
    assert steps == [("key", 0.0), ("key", 250.0), ("penalty", None), ("penalty", 300.0), ("key", 900.0)]

def test_parse_replay_rejects_garbage():
    with pytest.raises(ValueError, match="line 2"):
        cli.parse_replay(["0", "abc"])

@pytest.mark.parametrize("line", ["nan", "inf", "-inf", "penalty nan", "penalty inf"])
def test_parse_replay_rejects_non_finite(line):
    with pytest.raises(ValueError, match="line 2.*not a finite number"):
        cli.parse_replay(["0", line])

def test_replay_file(tmp_path, capsys):
    f = tmp_path / "keys.txt"
    f.write_text("0\npenalty 400\n100\n", encoding="utf-8")
    assert cli.main(["replay", str(f)]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 2
    assert "t=     500.0ms" in lines[1]

def test_replay_malformed_exits_2(tmp_path, capsys):
    f = tmp_path / "bad.txt"
    f.write_text("0\n1 2\n", encoding="utf-8")
    assert cli.main(["replay", str(f)]) == 2
    assert "line 2" in capsys.readouterr().err

def test_unknown_profile_exits_2(capsys):
    assert cli.main(["simulate", "--profile", "turbo"]) == 2
    assert "unknown profile" in capsys.readouterr().err

def test_profiles_listing(capsys):
    assert cli.main(["profiles"]) == 0
    out = capsys.readouterr().out
    assert "default:" in out and "strict:" in out
    assert "cpm_threshold=75.0" in out

import json
import os

import pytest

from ipsbench import __version__
from ipsbench.cli import main

FAST_ARGS = ["--warmup", "0", "--time", "0.05"]


def test_run_prints_comparison(testfolder: str, capsys: pytest.CaptureFixture) -> None:
    rc = main(["run", os.path.join(testfolder, "arithmetic.py"), *FAST_ARGS])
    out = capsys.readouterr().out

    assert rc == 0
    assert "add" in out
    assert "multiply" in out
    assert "Comparison:" in out
    assert "x slower" in out


def test_run_with_failures_exits_nonzero(testfolder: str, capsys: pytest.CaptureFixture) -> None:
    rc = main(["run", testfolder, *FAST_ARGS])
    out = capsys.readouterr().out

    assert rc == 1
    assert "explode" in out
    assert "kaboom" in out


def test_run_json_output(testfolder: str, capsys: pytest.CaptureFixture) -> None:
    args = ["run", os.path.join(testfolder, "strings.py"), *FAST_ARGS]
    rc = main([*args, "--json", "-n", "cli-run", "--context", "host=ci"])
    report = json.loads(capsys.readouterr().out)

    assert rc == 0
    assert report["run"] == "cli-run"
    assert report["context"] == {"host": "ci"}
    assert sorted(e["name"] for e in report["entries"]) == ["format", "join"]
    assert report["entries"][0]["slowdown_factor"] == 1.0
    assert report["failures"] == []


def test_invalid_arguments(testfolder: str, capsys: pytest.CaptureFixture) -> None:
    path = os.path.join(testfolder, "arithmetic.py")

    assert main(["run", path, "--time", "0"]) == 1
    assert "error: measurement duration" in capsys.readouterr().err

    assert main(["run", path, *FAST_ARGS, "--context", "novalue"]) == 1
    assert "context values need to be of the form" in capsys.readouterr().err


def test_no_command_prints_help(capsys: pytest.CaptureFixture) -> None:
    assert main([]) == 1
    assert "Available commands" in capsys.readouterr().out


def test_version(capsys: pytest.CaptureFixture) -> None:
    with pytest.raises(SystemExit):
        main(["--version"])
    assert __version__ in capsys.readouterr().out

from pathlib import Path

import pytest

from ipsbench.util import error_margin, load_module, python_files


def test_error_margin() -> None:
    assert error_margin([]) == 0.0
    assert error_margin([100.0]) == 0.0
    assert error_margin([100.0, 100.0, 100.0]) == 0.0

    # sample stdev 11.547, mean 100, n = 4.
    samples = [90.0, 110.0, 90.0, 110.0]
    expected = 1.959964 * (11.547005 / 100) / 2 * 100
    assert error_margin(samples) == pytest.approx(expected, rel=1e-4)
    # a higher confidence level widens the margin.
    assert error_margin(samples, 0.99) > error_margin(samples, 0.95)


def test_load_module_from_file(tmp_path: Path) -> None:
    f = tmp_path / "answer_module.py"
    f.write_text("import ipsbench\n\nANSWER = 42\nregistry = ipsbench.Registry()\n")

    mod = load_module(f)
    assert mod.ANSWER == 42
    # loading again, even through a different spelling of the path, reuses the module.
    assert load_module(str(tmp_path / "." / "answer_module.py")) is mod


def test_load_module_by_name() -> None:
    mod = load_module("ipsbench.compare")
    assert hasattr(mod, "compare")


@pytest.mark.parametrize("target", ["pipapo", "pipapo.sub", "no/such/file.py"])
def test_load_module_rejects_unknown_targets(target: str) -> None:
    with pytest.raises(ValueError, match="expected a module name, Python file, or directory"):
        load_module(target)


def test_load_module_rejects_non_python_files(tmp_path: Path) -> None:
    f = tmp_path / "notes.txt"
    f.write_text("not python")
    with pytest.raises(ValueError, match="is not a Python file"):
        load_module(f)


def test_python_files(tmp_path: Path) -> None:
    for rel in ["b.py", "a.py", "sub/c.py", "__pycache__/d.py", "readme.md"]:
        p = tmp_path / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text("")

    names = [p.relative_to(tmp_path).as_posix() for p in python_files(tmp_path)]
    assert names == ["a.py", "b.py", "sub/c.py"]

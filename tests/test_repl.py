import importlib.util
import sys
from pathlib import Path
import uuid
import pytest

def _load_repl_module():
    """Dynamically load the top-level ostrich_repl.py as a module with a unique name."""
    repl_path = Path(__file__).resolve().parents[1] / "ostrich_repl.py"
    mod_name = f"ostrich_repl_for_test_{uuid.uuid4().hex}"
    spec = importlib.util.spec_from_file_location(mod_name, str(repl_path))
    mod = importlib.util.module_from_spec(spec)
    sys.modules[mod_name] = mod
    assert spec.loader is not None
    spec.loader.exec_module(mod)
    return mod


def _feed(monkeypatch, repl, lines):
    it = iter(lines)

    async def fake_ainput(prompt: str) -> str:
        return next(it)
    monkeypatch.setattr(repl, "ainput", fake_ainput)


@pytest.mark.asyncio
async def test_repl_exit_immediately(monkeypatch, capsys):
    repl = _load_repl_module()
    _feed(monkeypatch, repl, ["exit"])

    await repl.main([])
    out = capsys.readouterr().out
    assert "ostrich REPL v0.1" in out
    assert "Type 'exit' or press Ctrl+D to quit." in out


@pytest.mark.asyncio
async def test_repl_prints_values(monkeypatch, capsys):
    repl = _load_repl_module()
    _feed(monkeypatch, repl, ["sum 10 20 'dog' 9", "", "exit"])

    await repl.main([])
    out, err = capsys.readouterr()
    assert "30 'dog' 9" in out
    assert err == ""


@pytest.mark.asyncio
async def test_repl_json_output(monkeypatch, capsys):
    repl = _load_repl_module()
    _feed(monkeypatch, repl, ["swap 1 2", "exit"])

    await repl.main(["--format", "json"])
    out = capsys.readouterr().out
    assert "[\n  2,\n  1\n]" in out


@pytest.mark.asyncio
async def test_repl_template_output(monkeypatch, capsys):
    repl = _load_repl_module()
    _feed(monkeypatch, repl, ["add 1 2", "exit"])

    await repl.main(["--template", "result={{first}}"])
    out = capsys.readouterr().out
    assert "result=3" in out


@pytest.mark.asyncio
async def test_repl_errors_print_to_stderr(monkeypatch, capsys):
    repl = _load_repl_module()
    _feed(monkeypatch, repl, ["add 1", "add 1 'a'", "exit"])

    await repl.main([])
    out, err = capsys.readouterr()
    assert "ostrich REPL v0.1" in out
    assert "IncompleteChain: add needs 2 arguments, 1 available" in err
    assert "TypeError:" in err


@pytest.mark.asyncio
async def test_repl_eof_quits(monkeypatch, capsys):
    repl = _load_repl_module()

    async def fake_ainput(prompt: str) -> str:
        raise EOFError
    monkeypatch.setattr(repl, "ainput", fake_ainput)

    await repl.main([])
    out = capsys.readouterr().out
    assert "ostrich REPL v0.1" in out
    assert "Exiting." in out


def test_run_script_file(tmp_path, capsys):
    repl = _load_repl_module()
    script = tmp_path / "chain.txt"
    script.write_text("# totals\nx: sum 1 2 3\nmul x 2\n", encoding="utf-8")
    opts = repl.parse_args([str(script)])
    repl.run_script_file(str(script), opts)
    out = capsys.readouterr().out.splitlines()
    assert out == ["6", "12"]


def test_run_script_file_exits_on_error(tmp_path, capsys):
    repl = _load_repl_module()
    script = tmp_path / "bad.txt"
    script.write_text("add 1\n", encoding="utf-8")
    opts = repl.parse_args([str(script)])
    with pytest.raises(SystemExit) as exc:
        repl.run_script_file(str(script), opts)
    assert exc.value.code == 1
    assert "IncompleteChain" in capsys.readouterr().err


def test_run_script_file_missing(capsys):
    repl = _load_repl_module()
    opts = repl.parse_args(["/no/such/file"])
    with pytest.raises(SystemExit):
        repl.run_script_file("/no/such/file", opts)
    assert "file not found" in capsys.readouterr().err


@pytest.mark.parametrize("value,expected", [("1", True), ("yes", True), ("", False), ("0", False), ("false", False)])
def test_debug_enabled_reads_environment(monkeypatch, value, expected):
    repl = _load_repl_module()
    monkeypatch.setenv("OSTRICH_DEBUG", value)
    assert repl.debug_enabled() is expected

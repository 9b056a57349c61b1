"""CLI integration tests."""

from __future__ import annotations

import shlex
import sys
from pathlib import Path

import pytest

from globdispatch.cli import main
from globdispatch.platforms import current_platform

SEP = current_platform().sep


def _make_tree(root: Path) -> None:
    """a/{x.y,x.a} and a/b/{z.y,z.a}."""
    b = root / "a" / "b"
    b.mkdir(parents=True)
    for path in [root / "a" / "x.y", root / "a" / "x.a", b / "z.y", b / "z.a"]:
        path.write_text("")


def _lines(out: str) -> list[str]:
    return [line for line in out.split("\n") if line]


def test_help_exits_zero(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["--help"])
    assert exc.value.code == 0
    out = capsys.readouterr().out
    assert "globdispatch: Expand glob patterns" in out
    assert "Common usage:" in out
    assert "--all" in out
    assert "--platform" in out


def test_no_patterns(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    assert main([]) == 1
    err = capsys.readouterr().err
    assert "No patterns provided" in err
    assert "usage: globdispatch" in err


def test_bad_platform(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--platform=glorb"]) == 1
    err = capsys.readouterr().err
    assert 'Invalid value provided for --platform: "glorb"\n' in err


def test_bad_platform_aborts_before_filesystem_access(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    def fail(*_args: object) -> None:
        raise AssertionError("filesystem accessed before platform validation")

    monkeypatch.setattr("globdispatch.cli.find_config_file", fail)
    monkeypatch.setattr("globdispatch.cli.FileResolver", fail)
    assert main(["--platform", "glorb", "*"]) == 1
    assert '"glorb"' in capsys.readouterr().err


def test_finds_matches_for_a_pattern(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    _make_tree(tmp_path)
    monkeypatch.chdir(tmp_path)
    assert main(["**/*.y"]) == 0
    assert _lines(capsys.readouterr().out) == [f"a{SEP}b{SEP}z.y", f"a{SEP}x.y"]


def test_win32_platform_override(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    _make_tree(tmp_path)
    monkeypatch.chdir(tmp_path)
    assert main(["--platform=win32", "**/*.y"]) == 0
    assert _lines(capsys.readouterr().out) == ["a\\b\\z.y", "a\\x.y"]


def test_exact_match_priority_unless_all(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    routes = tmp_path / "routes"
    routes.mkdir()
    for name in ["[id].tsx", "i.tsx", "d.tsx"]:
        (routes / name).write_text("")
    monkeypatch.chdir(tmp_path)

    assert main(["routes/[id].tsx"]) == 0
    assert capsys.readouterr().out == f"routes{SEP}[id].tsx\n"

    assert main(["routes/[id].tsx", "--all"]) == 0
    out = capsys.readouterr().out
    assert f"routes{SEP}i.tsx\n" in out
    assert f"routes{SEP}d.tsx\n" in out


def test_pattern_option(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    _make_tree(tmp_path)
    monkeypatch.chdir(tmp_path)

    assert main(["-p", "**/*.y"]) == 0
    out = capsys.readouterr().out
    assert f"a{SEP}x.y\n" in out
    assert f"a{SEP}b{SEP}z.y\n" in out

    assert main(["-p", "**/*.y", "**/*.a"]) == 0
    out = capsys.readouterr().out
    assert f"a{SEP}x.a\n" in out
    assert f"a{SEP}b{SEP}z.a\n" in out


def test_default_patterns_from_config(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    _make_tree(tmp_path)
    (tmp_path / ".globdispatch.toml").write_text('default-patterns = ["**/*.a"]\n')
    monkeypatch.chdir(tmp_path)
    assert main([]) == 0
    assert _lines(capsys.readouterr().out) == [f"a{SEP}b{SEP}z.a", f"a{SEP}x.a"]


def test_no_config_flag_skips_config(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / ".globdispatch.toml").write_text('default-patterns = ["*"]\n')
    monkeypatch.chdir(tmp_path)
    assert main(["--no-config"]) == 1
    assert "No patterns provided" in capsys.readouterr().err


def test_invalid_platform_in_config(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / "globdispatch.toml").write_text('platform = "glorb"\n')
    monkeypatch.chdir(tmp_path)
    assert main(["*"]) == 1
    assert '"glorb"' in capsys.readouterr().err


def test_malformed_config(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / "globdispatch.toml").write_text("dot = \n")
    monkeypatch.chdir(tmp_path)
    assert main(["*"]) == 1
    assert "Invalid config file" in capsys.readouterr().err


def test_cwd_option(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _make_tree(tmp_path)
    assert main(["-C", str(tmp_path), "a/*.y"]) == 0
    assert capsys.readouterr().out == f"a{SEP}x.y\n"


def test_no_matches(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    assert main(["*.nothing"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "No matches found" in captured.err


def test_invalid_jobs(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    assert main(["-j", "0", "*"]) == 1
    assert 'Invalid value provided for --jobs: "0"' in capsys.readouterr().err


def test_ignore_option(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    _make_tree(tmp_path)
    monkeypatch.chdir(tmp_path)
    assert main(["-i", "b/", "**/*.y"]) == 0
    assert _lines(capsys.readouterr().out) == [f"a{SEP}x.y"]


def test_prevents_command_injection_via_cmd(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / "$(touch injected_poc)").write_text("")
    (tmp_path / "normal-file.txt").write_text("")
    monkeypatch.chdir(tmp_path)
    injected = tmp_path / "injected_poc"
    assert not injected.exists()

    cmd = shlex.join([sys.executable, "-c", "import sys; print('\\n'.join(sys.argv[1:]))"])
    assert main(["-c", cmd, "**/*"]) == 0
    out = capsys.readouterr().out
    assert "$(touch injected_poc)\n" in out
    assert "normal-file.txt\n" in out
    assert not injected.exists()


@pytest.mark.skipif(sys.platform == "win32", reason="relies on POSIX echo")
def test_prevents_command_injection_with_echo(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / "$(touch injected_poc)").write_text("")
    (tmp_path / "normal-file.txt").write_text("")
    monkeypatch.chdir(tmp_path)
    assert main(["-c", "echo", "**/*"]) == 0
    out = capsys.readouterr().out
    assert "$(touch injected_poc)" in out
    assert "normal-file.txt" in out
    assert not (tmp_path / "injected_poc").exists()


def test_dispatch_each_propagates_exit_code(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / "3").write_text("")
    (tmp_path / "0").write_text("")
    monkeypatch.chdir(tmp_path)
    cmd = shlex.join([sys.executable, "-c", "import sys; sys.exit(int(sys.argv[1]))"])
    assert main(["-c", cmd, "--each", "*"]) == 3


def test_dispatch_not_run_without_matches(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    cmd = shlex.join([sys.executable, "-c", "open('ran', 'w').close()"])
    assert main(["-c", cmd, "*.nothing"]) == 1
    assert not (tmp_path / "ran").exists()


def test_invalid_cmd_template(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / "a.txt").write_text("")
    monkeypatch.chdir(tmp_path)
    assert main(["-c", "echo 'unterminated", "*"]) == 1
    assert "Invalid --cmd" in capsys.readouterr().err


def test_version(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--version"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("v") or out.startswith("unknown")


def test_prevents_command_injection_in_each_mode(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / "$(touch injected_poc)").write_text("")
    (tmp_path / "`touch injected_tick`").write_text("")
    monkeypatch.chdir(tmp_path)

    cmd = shlex.join([sys.executable, "-c", "import sys; print(sys.argv[1])", "{}"])
    assert main(["-c", cmd, "--each", "-j", "2", "*"]) == 0
    out = capsys.readouterr().out
    assert "$(touch injected_poc)\n" in out
    assert "`touch injected_tick`\n" in out
    assert not (tmp_path / "injected_poc").exists()
    assert not (tmp_path / "injected_tick").exists()


def test_config_bare_string_default_pattern(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / "x.md").write_text("")
    (tmp_path / ".globdispatch.toml").write_text('default-patterns = "*.md"\n')
    monkeypatch.chdir(tmp_path)
    assert main([]) == 0
    assert capsys.readouterr().out == "x.md\n"


def test_config_wrong_type_is_reported(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / "x.md").write_text("")
    (tmp_path / ".globdispatch.toml").write_text('jobs = "4"\n')
    monkeypatch.chdir(tmp_path)
    assert main(["*.md"]) == 1
    err = capsys.readouterr().err
    assert "Invalid config file" in err
    assert "jobs" in err


def test_cmd_help_mentions_dot_relative(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit):
        main(["--help"])
    out = " ".join(capsys.readouterr().out.split())
    assert "Use --dot-relative so paths starting with '-' aren't read as options" in out


def test_dot_relative_protects_dash_filenames_in_each_mode(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / "-rf").write_text("")
    monkeypatch.chdir(tmp_path)
    cmd = shlex.join([sys.executable, "-c", "import sys; print(sys.argv[1])"])
    assert main(["-c", cmd, "--each", "--dot-relative", "*"]) == 0
    assert capsys.readouterr().out == f".{SEP}-rf\n"

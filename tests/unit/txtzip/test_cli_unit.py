from __future__ import annotations

from pathlib import Path

import pytest

from txtzip import __version__, cli
from txtzip.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def _no_env_args(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TXTZIP_ARGS", raising=False)


@pytest.mark.unit
def test_parse_args_maps_flags_to_settings(tmp_path: Path) -> None:
    settings = cli.parse_args(
        [
            "-s",
            str(tmp_path),
            "-o",
            "bundle.md",
            "-w",
            "-S",
            "-e",
            "-i",
            "*.ts",
            "--include",
            "src/**",
            "-x",
            "src/skip.ts",
            "-m",
            "64k",
            "--tree",
        ],
        environ={},
    )

    assert settings.source == tmp_path
    assert settings.output == Path("bundle.md")
    assert settings.overwrite is True
    assert settings.source_only is True
    assert settings.strip_empty_lines is True
    assert settings.include == ["*.ts", "src/**"]
    assert settings.exclude == ["src/skip.ts"]
    assert settings.max_chunk_bytes == 64 * 1024
    assert settings.tree is True
    assert settings.format == "markdown"


@pytest.mark.unit
def test_parse_args_plain_flag_switches_format_and_default_output(tmp_path: Path) -> None:
    settings = cli.parse_args(["--source", str(tmp_path), "--plain"], environ={})

    assert settings.format == "plain"
    assert settings.output == Path("text-archive.txt")


@pytest.mark.unit
def test_parse_args_layers_config_env_and_command_line(tmp_path: Path) -> None:
    (tmp_path / ".txtzip.yaml").write_text(
        "tree: true\nmax-chunk-bytes: 64k\nexclude: ['*.log']\nstrip_empty_lines: true\n",
        encoding="utf-8",
    )

    from_file = cli.parse_args(["-s", str(tmp_path)], environ={})
    from_env = cli.parse_args(["-s", str(tmp_path)], environ={"TXTZIP_ARGS": "--no-tree -m 1k"})
    from_cli = cli.parse_args(["-s", str(tmp_path), "-m", "2k"], environ={"TXTZIP_ARGS": "--no-tree -m 1k"})

    assert from_file.tree is True
    assert from_file.max_chunk_bytes == 64 * 1024
    assert from_file.exclude == ["*.log"]
    assert from_env.tree is False
    assert from_env.max_chunk_bytes == 1024
    assert from_env.strip_empty_lines is True
    assert from_cli.max_chunk_bytes == 2048
    assert from_cli.tree is False


@pytest.mark.unit
def test_parse_args_explicit_config_file(tmp_path: Path) -> None:
    config = tmp_path / "custom.yaml"
    config.write_text("format: plain\n", encoding="utf-8")

    settings = cli.parse_args(["-s", str(tmp_path), "--config", str(config)], environ={})

    assert settings.format == "plain"
    with pytest.raises(ConfigurationError, match="Config file not found"):
        cli.parse_args(["--config", str(tmp_path / "missing.yaml")], environ={})


@pytest.mark.unit
def test_parse_args_rejects_malformed_size(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="Invalid size value"):
        cli.parse_args(["-s", str(tmp_path), "-m", "lots"], environ={})


@pytest.mark.unit
def test_env_args_split_like_a_shell() -> None:
    assert cli.env_args({"TXTZIP_ARGS": '-x "my file.txt" -w'}) == ["-x", "my file.txt", "-w"]
    assert cli.env_args({}) == []
    with pytest.raises(ConfigurationError, match="TXTZIP_ARGS"):
        cli.env_args({"TXTZIP_ARGS": '-x "unclosed'})


@pytest.mark.unit
def test_parse_args_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.parse_args(["--version"], environ={})

    assert exc_info.value.code == 0
    captured = capsys.readouterr()
    assert __version__ in captured.out


@pytest.mark.unit
def test_main_reports_success_line(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / "app.py").write_text("print('hi')\n", encoding="utf-8")
    output = tmp_path / "out" / "archive.md"

    exit_code = cli.main(["-s", str(tmp_path), "-o", str(output)])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "Text archive created successfully: 1 file(s) written" in out
    assert str(output) in out
    assert "## File: app.py" in output.read_text(encoding="utf-8")


@pytest.mark.unit
def test_main_refuses_existing_output(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / "app.py").write_text("print('hi')\n", encoding="utf-8")
    output = tmp_path / "out.md"
    output.write_bytes(b"keep me\x00")

    exit_code = cli.main(["-s", str(tmp_path), "-o", str(output)])

    assert exit_code == 1
    assert output.read_bytes() == b"keep me\x00"
    assert "already exists" in capsys.readouterr().err


@pytest.mark.unit
def test_main_reports_missing_source(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = cli.main(["-s", str(tmp_path / "nope"), "-o", str(tmp_path / "out.md")])

    assert exit_code == 1
    assert "Source folder not found" in capsys.readouterr().err


@pytest.mark.unit
def test_main_reports_configuration_errors(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / ".txtzip.yaml").write_text("tree: [\n", encoding="utf-8")

    exit_code = cli.main(["-s", str(tmp_path)])

    assert exit_code == 1
    assert "Cannot load config file" in capsys.readouterr().err

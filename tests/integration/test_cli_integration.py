from pathlib import Path

import pytest
from pytest_mock import MockerFixture

from txtzip import cli
from txtzip.filters import FilterSet


@pytest.mark.integration
def test_main_archives_the_files_selected_by_the_walker(
    tmp_path: Path,
    mocker: MockerFixture,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.delenv("TXTZIP_ARGS", raising=False)
    repo = tmp_path / "repo"
    file_path = repo / "src" / "app.py"
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text("print('hi')", encoding="utf-8")
    (repo / "other.py").write_text("never selected", encoding="utf-8")

    walk = mocker.patch.object(cli, "walk_files", return_value=["src/app.py"])

    output = tmp_path / "out.md"
    exit_code = cli.main(["--source", str(repo), "--output", str(output)])

    assert exit_code == 0
    walk.assert_called_once()
    source_arg, filters_arg = walk.call_args.args
    assert source_arg == repo.resolve()
    assert isinstance(filters_arg, FilterSet)
    text = output.read_text(encoding="utf-8")
    assert text == "## File: src/app.py\n\n```python\nprint('hi')\n```\n\n"
    assert "never selected" not in text


@pytest.mark.integration
def test_main_passes_every_buffer_to_the_writer(
    tmp_path: Path,
    mocker: MockerFixture,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.delenv("TXTZIP_ARGS", raising=False)
    repo = tmp_path / "repo"
    repo.mkdir()
    for name in ("a.txt", "b.txt", "c.txt"):
        (repo / name).write_text(name * 20, encoding="utf-8")

    write = mocker.patch.object(cli, "write_archives", return_value=[tmp_path / "x.01.md", tmp_path / "x.02.md"])

    exit_code = cli.main(["-s", str(repo), "-o", str(tmp_path / "x.md"), "-m", "120", "-w"])

    assert exit_code == 0
    contents, output = write.call_args.args
    assert output == tmp_path / "x.md"
    assert write.call_args.kwargs == {"overwrite": True}
    assert len(contents) > 1
    assert all(len(c.encode("utf-8")) <= 120 for c in contents)
    assert "## File: a.txt" in contents[0]


@pytest.mark.integration
def test_main_logs_to_file_when_requested(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.delenv("TXTZIP_ARGS", raising=False)
    repo = tmp_path / "repo"
    repo.mkdir()
    (repo / "app.py").write_text("x = 1\n", encoding="utf-8")
    log_file = tmp_path / "txtzip.log"

    exit_code = cli.main(["-s", str(repo), "-o", str(tmp_path / "out.md"), "--log-file", str(log_file)])

    assert exit_code == 0
    assert "Archive assembled" in log_file.read_text(encoding="utf-8")

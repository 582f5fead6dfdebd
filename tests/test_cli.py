from __future__ import annotations

import io
from pathlib import Path

import pytest

from conftest import KeywordModel, read_bytes, write_lines
from langid_driver import cli
from langid_driver.models import ModelLoadError
from langid_driver.utils import FILTER_BANNER, NO_FILE


class TerminalInput(io.BytesIO):
    def isatty(self) -> bool:
        return True


@pytest.fixture
def use_factory(monkeypatch, factory):
    """Route the dispatcher's model loading through the keyword factory."""
    requested = []

    def fake_model_factory(model_path=None):
        requested.append(model_path)
        return factory

    monkeypatch.setattr(cli, "model_factory", fake_model_factory)
    factory.requested = requested
    return factory


def test_conflicting_modes_exit_before_loading_the_model(use_factory, capsys) -> None:
    assert cli.main(["-l", "-b"]) == cli.EXIT_FATAL
    assert cli.main(["-l", "-b", "-f", "a", "en", "fr", "out"]) == cli.EXIT_FATAL

    assert use_factory.requested == []
    assert use_factory.models == []
    assert "Cannot specify more than one" in capsys.readouterr().err


def test_unknown_option_exits_with_status_1(use_factory, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["-x"])

    assert excinfo.value.code == cli.EXIT_USAGE
    assert "-x" in capsys.readouterr().err
    assert use_factory.models == []


def test_filter_mode_requires_four_arguments(use_factory) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["-f", "a", "en"])

    assert excinfo.value.code == cli.EXIT_USAGE


def test_line_mode(use_factory) -> None:
    stdout = io.StringIO()

    status = cli.main(["-l"], stdin=io.BytesIO(b"hello\nbonjour\n"), stdout=stdout)

    assert status == cli.EXIT_OK
    assert stdout.getvalue() == "en,6\nfr,8\n"
    assert len(use_factory.models) == 1
    assert use_factory.models[0].released


def test_default_mode_reads_the_whole_stream(use_factory) -> None:
    stdout = io.StringIO()

    cli.main([], stdin=io.BytesIO(b"hello\nbonjour\n"), stdout=stdout)

    assert stdout.getvalue() == "en,14\n"


def test_terminal_input_selects_interactive_mode(use_factory) -> None:
    stdout = io.StringIO()

    cli.main([], stdin=TerminalInput(b"bonjour\n\n"), stdout=stdout)

    assert stdout.getvalue() == "langid interactive mode.\n>>> fr,8\n>>> Bye!\n"


def test_line_flag_wins_over_terminal_detection(use_factory) -> None:
    stdout = io.StringIO()

    cli.main(["-l"], stdin=TerminalInput(b"bonjour\n\nhello\n"), stdout=stdout)

    assert stdout.getvalue() == "fr,8\nun,1\nen,6\n"


def test_batch_mode(use_factory, tmp_path: Path) -> None:
    missing = tmp_path / "missing.txt"
    stdout = io.StringIO()

    cli.main(["-b"], stdin=io.BytesIO(f"{missing}\n".encode("utf-8")), stdout=stdout)

    assert stdout.getvalue() == f"{missing},0,{NO_FILE}\n"


def test_model_path_is_forwarded(use_factory) -> None:
    cli.main(["-m", "models/lid.176.bin"], stdin=io.BytesIO(b""), stdout=io.StringIO())

    assert use_factory.requested == ["models/lid.176.bin"]


def test_filter_mode(use_factory, tmp_path: Path) -> None:
    prefix = str(tmp_path / "a")
    write_lines(f"{prefix}.en", ["Hello world\n", "Bonjour\n"])
    write_lines(f"{prefix}.fr", ["Bonjour monde\n", "Hello\n"])
    dest = str(tmp_path / "clean")
    stdout = io.StringIO()

    status = cli.main(["-f", prefix, "en", "fr", dest], stdin=io.BytesIO(b""), stdout=stdout)

    assert status == cli.EXIT_OK
    assert stdout.getvalue() == f"{FILTER_BANNER}\n"
    assert read_bytes(f"{dest}.en") == b"Hello world\n"
    assert read_bytes(f"{dest}.fr") == b"Bonjour monde\n"
    # the dispatcher's model plus the source worker's private one
    assert len(use_factory.models) == 2
    assert all(model.released for model in use_factory.models)


def test_filter_mode_missing_corpus_is_fatal(use_factory, tmp_path: Path) -> None:
    prefix = str(tmp_path / "a")

    status = cli.main(
        ["-f", prefix, "en", "fr", str(tmp_path / "clean")], stdin=io.BytesIO(b""), stdout=io.StringIO()
    )

    assert status == cli.EXIT_FATAL
    assert use_factory.models[0].released


def test_model_load_failure_is_fatal(monkeypatch) -> None:
    def broken_factory(model_path=None):
        def load():
            raise ModelLoadError("no model")
        return load

    monkeypatch.setattr(cli, "model_factory", broken_factory)

    assert cli.main(["-l"], stdin=io.BytesIO(b"hello\n"), stdout=io.StringIO()) == cli.EXIT_FATAL


def test_model_is_released_when_a_strategy_fails(monkeypatch) -> None:
    class CrashingModel(KeywordModel):
        def _classify(self, buffer):
            raise RuntimeError("crash")

    created = []

    def crashing_factory(model_path=None):
        def load():
            created.append(CrashingModel())
            return created[-1]
        return load

    monkeypatch.setattr(cli, "model_factory", crashing_factory)

    status = cli.main(["-l"], stdin=io.BytesIO(b"hello\n"), stdout=io.StringIO())

    assert status == cli.EXIT_FATAL
    assert len(created) == 1
    assert created[0].released


def test_default_model_end_to_end_on_empty_input() -> None:
    stdout = io.StringIO()

    assert cli.main([], stdin=io.BytesIO(b""), stdout=stdout) == cli.EXIT_OK
    assert stdout.getvalue() == "un,0\n"

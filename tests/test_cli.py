from io import StringIO

import pytest
from rich.console import Console

from polysight_rag_assistant import cli
from polysight_rag_assistant.logger import ConsoleLogger


def test_trailing_arguments_form_one_question(monkeypatch) -> None:
    calls = {}

    def fake_run_app(cfg, logger, question=""):
        calls["question"] = question
        return 0

    monkeypatch.setenv("GOOGLE_API_KEY", "key")
    monkeypatch.setattr(cli, "run_app", fake_run_app)

    with pytest.raises(SystemExit) as exc_info:
        cli.main(["What", "are", "the", "requirements?"])

    assert exc_info.value.code == 0
    assert calls["question"] == "What are the requirements?"


def test_no_arguments_means_interactive(monkeypatch) -> None:
    calls = {}

    def fake_run_app(cfg, logger, question=""):
        calls["question"] = question
        return 1

    monkeypatch.setenv("GOOGLE_API_KEY", "key")
    monkeypatch.setattr(cli, "run_app", fake_run_app)

    with pytest.raises(SystemExit) as exc_info:
        cli.main([])

    assert exc_info.value.code == 1
    assert calls["question"] == ""


def test_setup_yes_flag_confirms_overwrite(monkeypatch) -> None:
    calls = {}

    def fake_setup_data(cfg, logger, confirm):
        calls["answer"] = confirm("Overwrite data? (y/n)")
        return 0

    monkeypatch.setenv("GOOGLE_API_KEY", "key")
    monkeypatch.setattr(cli, "setup_data", fake_setup_data)

    with pytest.raises(SystemExit) as exc_info:
        cli.setup_main(["--yes"])

    assert exc_info.value.code == 0
    assert calls["answer"] == "y"


def test_console_logger_hides_debug_unless_enabled() -> None:
    quiet = ConsoleLogger(console=Console(file=StringIO(), width=120))
    verbose = ConsoleLogger(console=Console(file=StringIO(), width=120), debug=True)

    for logger in (quiet, verbose):
        logger.info("Processing batch [1/2]")
        logger.debug("Collection state")
        logger.error("Error while processing question", RuntimeError("boom"))

    quiet_out = quiet.console.file.getvalue()
    verbose_out = verbose.console.file.getvalue()
    assert "Processing batch [1/2]" in quiet_out
    assert "Collection state" not in quiet_out
    assert "Collection state" in verbose_out
    assert "boom" in quiet_out


def test_double_dash_allows_question_starting_with_dash(monkeypatch) -> None:
    calls = {}

    def fake_run_app(cfg, logger, question=""):
        calls["question"] = question
        return 0

    monkeypatch.setenv("GOOGLE_API_KEY", "key")
    monkeypatch.setattr(cli, "run_app", fake_run_app)

    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--", "-x", "marks", "the", "spot?"])

    assert exc_info.value.code == 0
    assert calls["question"] == "-x marks the spot?"


def test_app_help_mentions_double_dash() -> None:
    help_text = " ".join(cli.build_app_parser().format_help().split())

    assert "Put -- before a question" in help_text

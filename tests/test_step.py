import io
import sys

import pytest

from kyma_cli.step import (
    FAILURE_GLYPH,
    INFO_GLYPH,
    QUESTION_GLYPH,
    SUCCESS_GLYPH,
    WARNING_GLYPH,
    SimpleStep,
    SpinnerStep,
    StepFactory,
)


def test_simple_start(capsys):
    SimpleStep("Installing").start()
    assert capsys.readouterr().out == "Installing\n"


def test_simple_status(capsys):
    SimpleStep("Installing").status("half way")
    assert capsys.readouterr().out == "Installing: half way\n"


def test_simple_success_and_failure(capsys):
    step = SimpleStep("Installing")
    step.success()
    step.failure()
    assert capsys.readouterr().out == (
        f"{SUCCESS_GLYPH}Installing\n{FAILURE_GLYPH}Installing\n"
    )


def test_simple_successf_replaces_message(capsys):
    step = SimpleStep("Installing")
    step.successf("Installed %s in %d steps", "kyma", 3)
    assert capsys.readouterr().out == f"{SUCCESS_GLYPH}Installed kyma in 3 steps\n"
    assert step.msg == "Installed kyma in 3 steps"


def test_simple_failuref(capsys):
    SimpleStep("x").failuref("broken %s", "thing")
    assert capsys.readouterr().out == f"{FAILURE_GLYPH}broken thing\n"


def test_simple_logging(capsys):
    step = SimpleStep("x")
    step.log_info("info")
    step.log_infof("value %s", "a")
    step.log_error("oops")
    step.log_errorf("bad %s", "b")
    captured = capsys.readouterr()
    assert captured.out == f"{INFO_GLYPH}info\n{INFO_GLYPH}value a\n"
    assert captured.err == f"{WARNING_GLYPH}oops\n{WARNING_GLYPH}bad b\n"


def test_simple_prompt(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO("  answer  \n"))
    assert SimpleStep("x").prompt("Name: ") == "answer"
    assert capsys.readouterr().out == f"{QUESTION_GLYPH}Name: "


def test_simple_prompt_end_of_input(monkeypatch):
    monkeypatch.setattr(sys, "stdin", io.StringIO(""))
    with pytest.raises(EOFError):
        SimpleStep("x").prompt("Name: ")


def test_simple_prompt_yes_no(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO("y\n"))
    assert SimpleStep("x").prompt_yes_no("Continue? ") is True
    assert capsys.readouterr().out.startswith(f"{QUESTION_GLYPH}Continue? ")


def test_factory_non_interactive_gives_simple_step():
    step = StepFactory(non_interactive=True).new_step("msg")
    assert isinstance(step, SimpleStep)
    assert step.msg == "msg"


def test_factory_non_darwin_gives_simple_step(monkeypatch, capsys):
    monkeypatch.setattr(sys, "platform", "linux")
    step = StepFactory().new_step("msg")
    assert isinstance(step, SimpleStep)
    step.start()
    assert capsys.readouterr().out == "msg\n"


def test_factory_darwin_gives_spinner(monkeypatch, capsys):
    monkeypatch.setattr(sys, "platform", "darwin")
    step = StepFactory().new_step("msg")
    assert isinstance(step, SpinnerStep)
    step.start()
    step.success()
    out = capsys.readouterr().out
    assert out.endswith("msg\n")
    assert SUCCESS_GLYPH in out


def test_spinner_stop_prints_final_message(capsys):
    step = SpinnerStep("Working")
    step.start()
    step.status("still going")
    step.failuref("failed %s", "hard")
    out = capsys.readouterr().out
    assert out.endswith("failed hard\n")
    assert FAILURE_GLYPH in out


def test_spinner_log_info_while_running(capsys):
    step = SpinnerStep("Working")
    step.start()
    step.log_info("detail")
    step.success()
    out = capsys.readouterr().out
    assert f"{INFO_GLYPH}detail\n" in out
    assert out.endswith("Working\n")


def test_spinner_log_error_goes_to_stderr(capsys):
    step = SpinnerStep("Working")
    step.log_error("warn")
    assert capsys.readouterr().err.endswith("warn\n")


def test_spinner_prompt(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO("value\n"))
    step = SpinnerStep("Working")
    step.start()
    assert step.prompt("Enter: ") == "value"
    step.success()
    assert f"{QUESTION_GLYPH}Enter: " in capsys.readouterr().out


def test_spinner_prompt_yes_no(monkeypatch):
    monkeypatch.setattr(sys, "stdin", io.StringIO("n\n"))
    assert SpinnerStep("Working").prompt_yes_no("Sure? ") is False
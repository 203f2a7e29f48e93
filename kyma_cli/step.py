"""Progress steps shown to the user while a command runs."""

from __future__ import annotations

import sys
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass

from termcolor import colored

from kyma_cli import root

SUCCESS_GLYPH = "- "
FAILURE_GLYPH = "X "
WARNING_GLYPH = "! "
QUESTION_GLYPH = "? "
INFO_GLYPH = "  "

_SPINNER_FRAMES = ("/", "-", "\\", "|")
_SPINNER_DELAY = 0.2


def _format(format: str, args: tuple) -> str:
    return format % args if args else format


def _read_answer() -> str:
    line = sys.stdin.readline()
    if line == "":
        raise EOFError("no answer given")
    return line.strip()


class Step(ABC):
    """A unit of progress that can be started, updated, logged to and stopped."""

    def __init__(self, msg: str) -> None:
        self.msg = msg

    @abstractmethod
    def start(self) -> None:
        """Announce the start of the step."""

    @abstractmethod
    def status(self, msg: str) -> None:
        """Show an intermediate status of the step."""

    @abstractmethod
    def stop(self, success: bool) -> None:
        """Finish the step, marking it successful or failed."""

    @abstractmethod
    def log_info(self, msg: str) -> None:
        """Print an informational line."""

    @abstractmethod
    def log_error(self, msg: str) -> None:
        """Print a warning line to standard error."""

    @abstractmethod
    def prompt(self, msg: str) -> str:
        """Ask a question and return the trimmed answer."""

    @abstractmethod
    def prompt_yes_no(self, msg: str) -> bool:
        """Ask a yes/no question."""

    def success(self) -> None:
        self.stop(True)

    def successf(self, format: str, *args) -> None:
        self.stopf(True, format, *args)

    def failure(self) -> None:
        self.stop(False)

    def failuref(self, format: str, *args) -> None:
        self.stopf(False, format, *args)

    def stopf(self, success: bool, format: str, *args) -> None:
        self.msg = _format(format, args)
        self.stop(success)

    def log_infof(self, format: str, *args) -> None:
        self.log_info(_format(format, args))

    def log_errorf(self, format: str, *args) -> None:
        self.log_error(_format(format, args))


class SimpleStep(Step):
    """A step that prints plain lines."""

    def start(self) -> None:
        print(self.msg)

    def status(self, msg: str) -> None:
        print(f"{self.msg}: {msg}")

    def stop(self, success: bool) -> None:
        glyph = SUCCESS_GLYPH if success else FAILURE_GLYPH
        print(f"{glyph}{self.msg}")

    def log_info(self, msg: str) -> None:
        print(f"{INFO_GLYPH}{msg}")

    def log_error(self, msg: str) -> None:
        print(f"{WARNING_GLYPH}{msg}", file=sys.stderr)

    def prompt(self, msg: str) -> str:
        sys.stdout.write(f"{QUESTION_GLYPH}{msg}")
        sys.stdout.flush()
        return _read_answer()

    def prompt_yes_no(self, msg: str) -> bool:
        sys.stdout.write(f"{QUESTION_GLYPH}{msg}")
        sys.stdout.flush()
        return root.prompt_user()


class _Spinner:
    """A terminal spinner animated by a background thread."""

    def __init__(self, suffix: str) -> None:
        self.suffix = suffix
        self.final_msg = ""
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def active(self) -> bool:
        return self._thread is not None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._spin, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        if self._thread is None:
            return
        self._stop_event.set()
        self._thread.join()
        self._thread = None
        with self._lock:
            sys.stdout.write("\r\033[K")
            if self.final_msg:
                sys.stdout.write(self.final_msg)
            sys.stdout.flush()

    def _spin(self) -> None:
        index = 0
        while not self._stop_event.is_set():
            with self._lock:
                frame = _SPINNER_FRAMES[index % len(_SPINNER_FRAMES)]
                sys.stdout.write(f"\r\033[K{frame}{self.suffix}")
                sys.stdout.flush()
            index += 1
            self._stop_event.wait(_SPINNER_DELAY)


class SpinnerStep(Step):
    """A step shown as an animated spinner with coloured results."""

    def __init__(self, msg: str) -> None:
        super().__init__(msg)
        self._spinner = _Spinner(" " + msg)

    def start(self) -> None:
        self._spinner.start()

    def status(self, msg: str) -> None:
        self._spinner.suffix = f" {self.msg}: {msg}"

    def stop(self, success: bool) -> None:
        if success:
            glyph = colored(SUCCESS_GLYPH, "green")
        else:
            glyph = colored(FAILURE_GLYPH, "red")
        self._spinner.final_msg = f"{glyph}{self.msg}\n"
        if self._spinner.active:
            self._spinner.stop()
        else:
            sys.stdout.write(self._spinner.final_msg)
            sys.stdout.flush()

    def _paused(self):
        return _PausedSpinner(self._spinner)

    def log_info(self, msg: str) -> None:
        with self._paused():
            print(f"{INFO_GLYPH}{msg}")

    def log_error(self, msg: str) -> None:
        with self._paused():
            print(f"{colored(WARNING_GLYPH, 'yellow')}{msg}", file=sys.stderr)

    def prompt(self, msg: str) -> str:
        with self._paused():
            sys.stdout.write(f"{QUESTION_GLYPH}{msg}")
            sys.stdout.flush()
            return _read_answer()

    def prompt_yes_no(self, msg: str) -> bool:
        with self._paused():
            sys.stdout.write(f"{QUESTION_GLYPH}{msg}")
            sys.stdout.flush()
            return root.prompt_user()


class _PausedSpinner:
    """Stops a spinner for the duration of a block and restarts it if it ran."""

    def __init__(self, spinner: _Spinner) -> None:
        self._spinner = spinner
        self._was_active = False

    def __enter__(self) -> None:
        self._was_active = self._spinner.active
        self._spinner.stop()

    def __exit__(self, *exc) -> None:
        if self._was_active:
            self._spinner.start()


@dataclass
class StepFactory:
    """Creates steps suited to the terminal and the interactivity setting."""

    non_interactive: bool = False

    def new_step(self, msg: str) -> Step:
        if self.non_interactive or sys.platform != "darwin":
            return SimpleStep(msg)
        return SpinnerStep(msg)
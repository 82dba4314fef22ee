"""
Duplex input: the single source of line-oriented input.

What this module provides
- Input: blocking "next line or end-of-input" reads plus three small prompts
  (confirm, ask, choose). When bound to an interactive stdin, reads go through
  the builtin input() so that readline editing, history and completion apply;
  any other stream (files, io.StringIO in tests) is read directly and the
  prompt is written to the Output.
- History: the persisted shell history file (one entry per line, newest last,
  capped). Missing or unreadable files are tolerated silently.
- Completer: prefix-based tab completion over a live set of candidates.

readline is optional: on platforms without it, history still persists through
the file and completion is simply not installed.
"""
import builtins
import logging
import os
import sys
from collections import deque

from .output import Output
from .utils import Unset, coalesce

try:
    import readline
except ImportError:  # no line editor on this platform; completion is skipped
    readline = None

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 1000


class Input:
    def __init__(self, stream=Unset, output=Unset, /):
        self._stream = stream
        self.output = coalesce(output, Output())

    @property
    def stream(self):
        return coalesce(self._stream, sys.stdin)

    @property
    def interactive(self):
        """True when reading a terminal stdin (line editing available)."""
        stream = self.stream
        return stream is sys.stdin and hasattr(stream, "isatty") and stream.isatty()

    def readline(self, prompt="", /):
        """return the next line (newline included for streams), or None at end of input."""
        if self.interactive:
            try:
                return builtins.input(prompt)
            except EOFError:
                return None

        if prompt:
            self.output.prompt(prompt)
        return self.stream.readline() or None

    def confirm(self, question, /, default=None):
        """yes/no question; blank or unrecognized answers give default."""
        marker = {True: "[Y/n]", False: "[y/N]"}.get(default, "[y/n]")
        self.output.prompt(f"{question} {marker} ")

        match (self.stream.readline() or "").strip().lower():
            case "y" | "yes":
                return True
            case "n" | "no":
                return False
            case _:
                return default

    def ask(self, question, /, default=None):
        """free-form question; blank answers give default."""
        self.output.prompt(f"{question} [{default}]: " if default else f"{question}: ")
        response = (self.stream.readline() or "").strip()
        return response or default

    def choose(self, question, choices, /, default=None):
        """
        numbered menu. default is a 1-based index (marked with '*').
        returns the chosen item, the default item on a blank answer, or None.
        """
        choices = list(choices)
        self.output.warning(question)
        for number, choice in enumerate(choices, 1):
            self.output.info(f"{'*' if number == default else ' '} {number}) {choice}")
        self.output.prompt("choice: ")

        response = (self.stream.readline() or "").strip()
        if not response:
            return choices[default - 1] if default else None
        try:
            index = int(response) - 1
        except ValueError:
            return None
        return choices[index] if 0 <= index < len(choices) else None


class History:
    """persisted shell history, newest entries last, at most `limit` kept."""

    def __init__(self, path, /, limit=HISTORY_LIMIT):
        self.path = os.path.expanduser(os.fspath(path))
        self.limit = limit
        self.entries = deque(maxlen=limit)

    def load(self):
        try:
            with open(self.path, encoding="utf-8") as file:
                for line in file:
                    self.entries.append(line.rstrip("\n"))
        except (OSError, UnicodeDecodeError) as error:
            logger.debug("history not loaded from %s: %s", self.path, error)
        return self

    def record(self, line, /):
        if line := line.rstrip("\n"):
            if line.strip():
                self.entries.append(line)

    def sync(self):
        """mirror the loaded entries into readline (interactive sessions only)."""
        if readline is None:
            return
        readline.clear_history()
        readline.set_history_length(self.limit)
        for entry in self.entries:
            readline.add_history(entry)

    def save(self):
        try:
            with open(self.path, "w", encoding="utf-8") as file:
                file.writelines(entry + "\n" for entry in self.entries)
        except OSError as error:
            logger.debug("history not saved to %s: %s", self.path, error)


class Completer:
    """
    readline completer over candidates(): a callable returning the names that
    are reachable right now (commands, aliases, mounts, built-ins).
    """

    def __init__(self, candidates, /):
        self.candidates = candidates
        self.matches = []

    def complete(self, text, state, /):
        if state == 0:
            self.matches = list(dict.fromkeys(
                candidate for candidate in self.candidates() if candidate.startswith(text)
            ))
        try:
            return self.matches[state]
        except IndexError:
            return None

    def install(self):
        if readline is None:
            logger.debug("readline unavailable; tab completion disabled")
            return False
        readline.set_completer(self.complete)
        readline.set_completer_delims(" \t\n")
        readline.parse_and_bind("tab: complete")
        return True


__all__ = (
    "Input",
    "History",
    "Completer",
    "HISTORY_LIMIT",
)

"""
Duplex output: the single destination for user-facing text.

What this module provides
- Styling helpers (emphasis, alert, caution, subdued, positive): pure
  string → rich Text functions. Styles are dropped on non-terminals by rich and
  can be suppressed entirely with Output(colorful=False).
- Output: line-oriented writer over a rich Console with the primitives the
  dispatcher, shell and commands use (banner, header, info, success, failure,
  warning, hint, tables, check results, prompts).
- configure_logging(): attach a RichHandler to the package logger.

Design notes
- Console markup, emoji and highlighting are disabled: user strings such as
  "[--verbose]" or "config:set" must reach the terminal verbatim.
- The destination file is injectable (any text stream), which is how the test
  suite captures output.
"""
import logging

from rich.box import Box
from rich.console import Console
from rich.logging import RichHandler
from rich.padding import Padding
from rich.table import Table
from rich.text import Text

from .utils import Unset, coalesce, envflag

logger = logging.getLogger(__name__)

# blank borders and a dashed rule under the header row
HEADER_RULE = Box(
    "    \n"
    "    \n"
    " -- \n"
    "    \n"
    "    \n"
    "    \n"
    "    \n"
    "    \n",
    ascii=True,
)


def emphasis(text, /):
    return Text(str(text), style="bold")


def alert(text, /):
    return Text(str(text), style="bold red")


def caution(text, /):
    return Text(str(text), style="yellow")


def subdued(text, /):
    return Text(str(text), style="dim")


def positive(text, /):
    return Text(str(text), style="bold green")


class Output:
    """
    line-oriented writer over a rich Console.

    parameters
    - file: text stream (default: the process stdout, resolved at write time).
    - colorful: False strips every style; Unset lets rich decide per terminal.
    - verbose / debug: gate verbose() and debug(); Unset reads the VERBOSE and
      DEBUG environment variables.
    """

    def __init__(self, file=Unset, /, *, colorful=Unset, verbose=Unset, debug=Unset):
        self.console = Console(
            file=coalesce(file),
            markup=False,
            emoji=False,
            highlight=False,
            soft_wrap=True,
            color_system=None if colorful is False else "auto",
        )
        self.colorful = bool(coalesce(colorful, True))
        self.verbosity = bool(coalesce(verbose, envflag("VERBOSE")))
        self.debugging = bool(coalesce(debug, envflag("DEBUG")))

    def _write(self, text="", /, *, end="\n"):
        if isinstance(text, Text) and not self.colorful:
            text = Text(text.plain)
        elif not isinstance(text, Text):
            text = Text(str(text))
        self.console.print(text, end=end)

    def render(self, renderable, /):
        """print any rich renderable (faults render themselves via __rich__)."""
        self.console.print(renderable)

    # ── plain lines ────────────────────────────────────────────────────────
    def nl(self):
        self._write()

    def info(self, text, /):
        self._write(text)

    def prompt(self, text, /):
        """write a prompt without a trailing newline."""
        self._write(caution(text), end="")

    # ── styled lines ───────────────────────────────────────────────────────
    def banner(self, text, /):
        if text:
            self._write(alert(text))

    def header(self, text, /):
        self._write(emphasis(text))

    def desc(self, text, /):
        self._write(subdued(text))

    def success(self, text, /):
        self._write(positive(text))

    def failure(self, text, /):
        self._write(alert(text))

    def warning(self, text, /):
        self._write(caution(text))

    def hint(self, text, /):
        self._write(subdued(text))

    def label(self, text, /):
        self._write(caution(text))

    def verbose(self, text, /):
        if self.verbosity:
            self._write(subdued(text))

    def debug(self, text, /):
        if self.debugging:
            self._write(subdued(f"[debug] {text}"))

    # ── composites ─────────────────────────────────────────────────────────
    def check_result(self, name, result, /):
        status = positive("pass") if result.passed else alert("fail")
        self._write(Text.assemble(status, f": {name}"))
        self._write(f"      {result.message}")

    def table(self, rows, /, headers=None, *, indent=0):
        """
        render rows of cells with every column padded to its widest cell
        (header included). headers, when given, are printed bold above a dashed
        rule; columns are separated by two spaces.
        """
        rows = [[str(cell) for cell in row] for row in rows]
        if not rows:
            return

        columns = max(len(row) for row in ([headers] if headers else []) + rows)
        table = Table(
            box=HEADER_RULE,
            show_header=bool(headers),
            show_edge=False,
            pad_edge=False,
            padding=(0, 1, 0, 0),
            header_style="bold" if self.colorful else "",
        )
        for index in range(columns):
            title = headers[index] if headers and index < len(headers) else ""
            table.add_column(Text(str(title)), no_wrap=True)
        for row in rows:
            table.add_row(*map(Text, row))

        self.console.print(Padding(table, (0, 0, 0, indent), expand=False))


def configure_logging(level=logging.WARNING, /):
    """
    route the package logger through rich on stderr.

    idempotent: a second call only adjusts the level.
    """
    root = logging.getLogger(__name__.rpartition(".")[0])
    if not any(isinstance(handler, RichHandler) for handler in root.handlers):
        root.addHandler(RichHandler(console=Console(stderr=True), show_path=False))
    root.setLevel(level)
    return root


__all__ = (
    "Output",
    "emphasis",
    "alert",
    "caution",
    "subdued",
    "positive",
    "configure_logging",
)

"""
Duplex interactive shell.

REPL(app).run() reads lines until end of input or an exit command and moves
through these states:

    BOOTING → READING → DISPATCHING | HELP | CONFIG_VIEW | CONFIG_SET
                      | ENTER_SUBMODE | EXITING

Built-ins (checked before commands)
- exit, quit, q          leave the session
- back                   leave a nested session (warns at the top level)
- help, h, ?             grouped command listing
- config, c              settings view
- config:set <k> <v>     mutate a setting
- <mount name>           enter a nested session on the mounted App

Anything else is resolved against the App. Unknown names and too few
positional arguments are reported and the command is not run; a command's
result is discarded. Errors a command does not rescue propagate out of run().
"""
import logging
import os
from enum import Enum, auto

from .display import Presenter
from .faults import (
    FaultCode,
    InsufficientArgumentsError,
    NotNestedWarning,
    UnresolvedCommandError,
    trigger,
)
from .input import Completer, History, Input
from .output import Output, emphasis
from .utils import Unset, coalesce

logger = logging.getLogger(__name__)

BUILTINS = ("help", "h", "?", "config", "c", "config:set", "exit", "quit", "q")


class State(Enum):
    BOOTING = auto()
    READING = auto()
    DISPATCHING = auto()
    HELP = auto()
    CONFIG_VIEW = auto()
    CONFIG_SET = auto()
    ENTER_SUBMODE = auto()
    EXITING = auto()


class REPL(Presenter):
    """
    one interactive session over an App.

    parameters
    - prompt: session name, shown as "<prompt>> " (defaults to the App name).
    - history: persist entered lines to history_file.
    - history_file: defaults to the App's history path, then
      ~/.duplex_<prompt>_history.
    - parent: the enclosing session when nested (enables 'back').
    - output / input: shared with nested sessions and executed commands.
    """

    def __init__(
            self,
            app,
            /,
            *,
            prompt=Unset,
            history=True,
            history_file=Unset,
            parent=None,
            output=Unset,
            input=Unset,
    ):
        self.app = app
        self.prompt = coalesce(prompt, app.name)
        self.history = bool(history)
        self.history_file = coalesce(
            history_file,
            app.history or os.path.expanduser(f"~/.duplex_{self.prompt}_history"),
        )
        self.parent = parent
        self.out = coalesce(output, Output())
        self.input = coalesce(input, Input(Unset, self.out))
        self.state = State.BOOTING
        self.last = None
        self._completer = Completer(self.candidates)

    @property
    def nested(self):
        return self.parent is not None

    def candidates(self):
        """names reachable from this session, for tab completion."""
        for command in self.app.commands:
            yield command.spec.name
            yield from command.spec.aliases
        yield from self.app.mounts
        yield from BUILTINS
        if self.nested:
            yield "back"

    def run(self):
        self.state = State.BOOTING
        history = self._open_history()
        if self.input.interactive:
            self._completer.install()
        self._boot()

        try:
            while True:
                self.state = State.READING
                if (line := self.input.readline(f"{self.prompt}> ")) is None:
                    break
                if history is not None:
                    history.record(line)
                if not (line := line.strip()):
                    continue

                self.last = line
                name, *rest = line.split()

                match name:
                    case "exit" | "quit" | "q":
                        break
                    case "back" if self.nested:
                        break
                    case "back":
                        trigger(NotNestedWarning("not in a sub-app"), self.out, code=FaultCode.NOT_NESTED)
                    case "help" | "h" | "?":
                        self.state = State.HELP
                        self.help()
                    case "config" | "c":
                        self.state = State.CONFIG_VIEW
                        self._show_config()
                    case "config:set":
                        self.state = State.CONFIG_SET
                        self._set_config(*(rest + [None, None])[:2])
                    case _ if not rest and (child := self.app.find_mount(name)) is not None:
                        self.state = State.ENTER_SUBMODE
                        self._enter(child, name)
                    case _:
                        self.state = State.DISPATCHING
                        self._dispatch(name, rest)

                self.out.nl()
        finally:
            self.state = State.EXITING
            if history is not None:
                history.save()

        self.out.hint("goodbye")

    def _open_history(self):
        if not self.history:
            return None
        history = History(self.history_file).load()
        logger.debug("%s: %d history entries from %s", self.prompt, len(history.entries), history.path)
        if self.input.interactive:
            history.sync()
        return history

    def _boot(self):
        match self.app.boot:
            case "none":
                return
            case "minimal":
                self.out.banner(self.app.banner)
                self.out.nl()
                self.out.info(emphasis(self.prompt) + " - interactive mode")
                self.out.hint("type 'help' for commands, 'exit' to quit")
                self.out.nl()
            case _:
                self.out.banner(self.app.banner)
                self.out.nl()
                self.out.info(emphasis(self.prompt) + " - interactive mode")
                self.out.nl()
                self.help()
                self.out.nl()

        self._show_config()
        self.out.nl()

    def help(self):
        self.out.header("commands:")
        self._list_commands(
            width=30,
            nested_width=26,
            mount_width=28,
            mount_label=lambda prefix, child: (prefix, f"enter {child.banner or prefix}"),
        )

        self.out.nl()
        self.out.info("  config, c".ljust(32) + "show current config")
        self.out.info("  config:set <key> <value>".ljust(32) + "set a config value")
        self.out.info("  help, h, ?".ljust(32) + "show this help")
        if self.nested:
            self.out.info("  back".ljust(32) + "return to parent app")
        self.out.info("  exit, quit, q".ljust(32) + "exit")

    def _enter(self, child, name, /):
        logger.debug("%s: entering %s", self.prompt, name)
        REPL(
            child,
            prompt=f"{self.prompt}:{name}",
            history=False,
            parent=self,
            output=self.out,
            input=self.input,
        ).run()
        if self.input.interactive:
            self._completer.install()

    def _dispatch(self, name, rest, /):
        app, command = self.app.locate(name)
        if command is None:
            trigger(
                UnresolvedCommandError(f"unknown command: {name}"),
                self.out,
                code=FaultCode.UNRESOLVED_COMMAND,
                hint="type 'help' for available commands",
                token=name,
            )
            return

        positional, options = command.parse_options(rest)
        if len(command.spec.args) > len(positional):
            trigger(
                InsufficientArgumentsError(f"usage: {command.usage()}"),
                self.out,
                code=FaultCode.INSUFFICIENT_ARGUMENTS,
            )
            return

        command(app, output=self.out, input=self.input).execute(*positional, **options)


__all__ = (
    "BUILTINS",
    "State",
    "REPL",
)

"""
Duplex one-shot dispatcher.

CLI(app).run(argv) maps one argument vector to an exit status:

- no arguments: start the interactive shell (or print usage and fail when the
  shell is disabled);
- help, -h, --help: usage screen, status 1;
- config / config:set <key> <value>: settings view / mutation, status 0;
- anything else is resolved against the App; unknown names print a warning
  and the usage screen (status 1); known commands are parsed and executed and
  a bool result becomes 0/1, any other result 0.

Errors raised by a command that its rescue table does not handle propagate.

Entry point
    from duplex import App, run

    app = App("ops")
    ...
    if __name__ == "__main__":
        run(app)
"""
import logging
import shlex
import sys

from .display import Presenter
from .faults import DisabledModeError, FaultCode, UnresolvedCommandError, trigger
from .input import Input
from .output import Output, configure_logging, emphasis
from .repl import REPL
from .utils import Unset, coalesce, envflag

logger = logging.getLogger(__name__)


class CLI(Presenter):
    def __init__(self, app, /, *, prompt=Unset, history=True, output=Unset, input=Unset):
        self.app = app
        self.prompt = coalesce(prompt, app.name)
        self.history = history
        self.out = coalesce(output, Output())
        self.input = coalesce(input, Input(Unset, self.out))

    def run(self, argv, /):
        argv = list(argv)
        logger.debug("%s: dispatching %r", self.app.name, argv)

        if not argv:
            if self.app.repl:
                REPL(
                    self.app,
                    prompt=self.prompt,
                    history=self.history,
                    output=self.out,
                    input=self.input,
                ).run()
                return 0
            self.usage()
            return 1

        if not self.app.cli:
            trigger(
                DisabledModeError("CLI mode is disabled"),
                self.out,
                code=FaultCode.DISABLED_MODE,
                hint="run without arguments for interactive mode" if self.app.repl else None,
            )
            return 1

        name, *rest = argv
        match name:
            case "help" | "-h" | "--help":
                self.usage()
                return 1
            case "config":
                self._show_config()
                return 0
            case "config:set":
                self._set_config(*(rest + [None, None])[:2])
                return 0

        app, command = self.app.locate(name)
        if command is None:
            trigger(
                UnresolvedCommandError(f"unknown command: {name}"),
                self.out,
                code=FaultCode.UNRESOLVED_COMMAND,
                token=name,
            )
            self.usage()
            return 1

        positional, options = command.parse_options(rest)
        result = command(app, output=self.out, input=self.input).execute(*positional, **options)

        if isinstance(result, bool):
            return 0 if result else 1
        return 0

    def usage(self):
        self.out.banner(self.app.banner)
        self.out.info(emphasis(self.prompt) + " - CLI app")
        self.out.nl()
        self.out.header("usage:")
        self.out.info(f"  {self.prompt.ljust(24)}start interactive mode")
        self.out.info(f"  {(self.prompt + ' <command>').ljust(24)}run a single command")
        self.out.nl()
        self.out.header("commands:")

        self._list_commands(
            width=34,
            nested_width=32,
            mount_width=32,
            mount_label=lambda prefix, child: (f"{prefix}:*", child.banner or prefix),
        )

        self.out.info(f"  {'config'.ljust(34)}show current config")
        self.out.info(f"  {'config:set <key> <value>'.ljust(34)}set a config value")

        self.out.nl()
        self._show_config()
        self.out.nl()

        self.out.header("environment:")
        for key, _, setting in self.app.config:
            line = f"  {key.upper()}"
            if setting.descr:
                line += f" - {setting.descr}"
            self.out.info(line)

    def main(self, argv=Unset, /):
        sys.exit(self.run(coalesce(argv, sys.argv[1:])))


def run(app, argv=Unset, /, **options):
    """
    run app from the command line and exit with its status.

    - argv: a list of tokens, a shell-like string, or Unset for sys.argv[1:].
    - options are passed to CLI (prompt, history, output, input).
    """
    configure_logging(logging.DEBUG if envflag("DEBUG") else logging.WARNING)
    if isinstance(argv, str):
        argv = shlex.split(argv)
    elif argv is not Unset:
        argv = list(argv)
        if not all(isinstance(token, str) for token in argv):
            raise TypeError("run() tokens must be strings")
    CLI(app, **options).main(argv)


__all__ = (
    "CLI",
    "run",
)

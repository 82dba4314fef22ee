"""
Duplex application registry.

An App is one node of the application tree. It owns, per instance:

- an ordered list of command classes (insertion order is the help order);
- a list of check classes;
- a prefix → child App mapping (mounts);
- a Config;
- boot/display metadata (banner, cli/repl switches, boot mode, history path).

Registration has two paths:

- implicit (attach): used by `class Hello(Command, app=app)`, the @app.command
  and @app.check decorators and include(). Ignored once the App has switched to
  explicit mode;
- explicit (register): switches the App into explicit mode for good and always
  appends.

Example
    app = App("ops", banner="ops console")
    admin = App("admin")
    app.mount(admin, "admin")

    @admin.command
    class Users(Command):
        \"\"\"list users\"\"\"
        def __call__(self):
            ...

    app.resolve("admin:users") is Users  # True
"""
import importlib
import inspect
import logging
from types import MappingProxyType

from .checks import Check
from .commands import Command
from .config import Config
from .utils import Unset, coalesce, mglob

logger = logging.getLogger(__name__)

BOOT_MODES = ("help", "minimal", "none")


class App:
    def __init__(
            self,
            name,
            /,
            *,
            banner="",
            cli=True,
            repl=True,
            boot="help",
            history=None,
            config=Unset,
    ):
        if not isinstance(name, str) or not (name := name.strip()):
            raise TypeError("App name must be a non-empty string")
        if not isinstance(banner, str):
            raise TypeError(f"App {name!r} banner must be a string")
        if boot not in BOOT_MODES:
            raise ValueError(f"App {name!r} boot must be one of {', '.join(BOOT_MODES)}")
        if history is not None and not isinstance(history, str):
            raise TypeError(f"App {name!r} history must be a path string")

        self.name = name
        self.banner = banner
        self.cli = bool(cli)
        self.repl = bool(repl)
        self.boot = boot
        self.history = history
        self._config = coalesce(config, Config())
        self._commands = []
        self._checks = []
        self._mounts = {}
        self._explicit = False

    # ── read-only views ────────────────────────────────────────────────────
    @property
    def commands(self):
        return tuple(self._commands)

    @property
    def checks(self):
        return tuple(self._checks)

    @property
    def mounts(self):
        return MappingProxyType(self._mounts)

    @property
    def config(self):
        return self._config

    @property
    def explicit(self):
        """True once register() has been used; implicit attachment is then ignored."""
        return self._explicit

    # ── registration ───────────────────────────────────────────────────────
    def _append(self, cls):
        if isinstance(cls, type) and issubclass(cls, Command) and hasattr(cls, "spec"):
            self._commands.append(cls)
        elif isinstance(cls, type) and issubclass(cls, Check):
            self._checks.append(cls)
        else:
            raise TypeError(f"App {self.name!r} can only hold Command or Check subclasses, not {cls!r}")
        logger.debug("%s: registered %s", self.name, cls.__qualname__)

    def attach(self, cls, /):
        """implicit registration; returns False (and does nothing) in explicit mode."""
        if self._explicit:
            logger.debug("%s: explicit mode, %s not attached", self.name, cls.__qualname__)
            return False
        self._append(cls)
        return True

    def register(self, cls, /):
        """explicit registration; duplicates are kept."""
        self._explicit = True
        self._append(cls)
        return cls

    def command(self, cls, /):
        """class decorator attaching a Command subclass."""
        if not (isinstance(cls, type) and issubclass(cls, Command)):
            raise TypeError(f"App {self.name!r} command() expects a Command subclass")
        self.attach(cls)
        return cls

    def check(self, cls, /):
        """class decorator attaching a Check subclass."""
        if not (isinstance(cls, type) and issubclass(cls, Check)):
            raise TypeError(f"App {self.name!r} check() expects a Check subclass")
        self.attach(cls)
        return cls

    def include(self, source, /):
        """
        Import modules and attach the commands and checks they define.

        - source: module glob ("myapp.commands.*"), expanded with mglob.
        - only classes defined in the module itself are picked up, in
          definition order; imported names are skipped.
        - classes already held by this App are not attached twice.

        Raises TypeError when source is not a string or a module cannot be
        imported.
        """
        if not isinstance(source, str):
            raise TypeError("include() argument must be a string")

        def imp(module):
            try:
                return importlib.import_module(module)
            except ImportError:
                raise TypeError(f"unable to import module {module!r}")

        attached = []
        for module in map(imp, mglob(source)):
            for object in vars(module).values():
                if not inspect.isclass(object) or object.__module__ != module.__name__:
                    continue
                if object in self._commands or object in self._checks:
                    continue
                if (issubclass(object, Command) and hasattr(object, "spec")) or issubclass(object, Check):
                    if self.attach(object):
                        attached.append(object)
        logger.debug("%s: included %d classes from %s", self.name, len(attached), source)
        return attached

    def mount(self, child, prefix, /):
        """make child reachable as '<prefix>:<command>'; remounting a prefix replaces it."""
        if not isinstance(child, App):
            raise TypeError(f"App {self.name!r} can only mount App instances")
        if not isinstance(prefix, str) or not (prefix := prefix.strip()) or ":" in prefix:
            raise ValueError(f"App {self.name!r} mount prefix must be a non-empty string without ':'")
        self._mounts[prefix] = child
        logger.debug("%s: mounted %s as %r", self.name, child.name, prefix)
        return child

    # ── lookup ─────────────────────────────────────────────────────────────
    def find_mount(self, name, /):
        return self._mounts.get(name)

    def locate(self, token, /):
        """
        (owning app, command class) for token, or (None, None).

        'prefix:rest' with a mounted prefix resolves rest inside the child;
        anything else is matched against local names and aliases, first wins.
        """
        prefix, separator, rest = token.partition(":")
        if separator and (child := self._mounts.get(prefix)) is not None:
            return child.locate(rest)
        for command in self._commands:
            if command.matches(token):
                return self, command
        return None, None

    def resolve(self, token, /):
        """command class for token, or None (see locate)."""
        return self.locate(token)[1]

    def __repr__(self):
        return f"app(name={self.name!r}, commands={len(self._commands)}, mounts={list(self._mounts)!r})"


__all__ = (
    "App",
    "BOOT_MODES",
)

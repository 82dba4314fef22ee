"""
Duplex command layer: declare, parse and invoke commands.

What this module provides
- Command: base class for one invocable action. Metadata is declared as class
  attributes and frozen into an immutable CommandSpec when the class is created.
- CommandSpec: the declarative metadata plus matching, usage and the option
  parsing algorithm.
- Option: one named, typed option (long name, optional short flag, default).
- Hook: a before/after step or error handler, held either as a method name or
  as a callable receiving the command instance first.

Declaring a command
    class Deploy(Command, app=app):
        \"\"\"deploy the current build\"\"\"
        aliases = ("d", "dep")
        args = ("env",)
        options = (
            Option("verbose", short="v", type=bool, default=False, descr="chatty output"),
        )
        group = "release"
        before = ("authorize",)
        rescue = ((ConnectionError, "offline"),)

        def authorize(self, env, **options):
            return env != "forbidden"

        def offline(self, error):
            self.out.failure(f"network is down: {error}")
            return False

        def __call__(self, env, *, verbose):
            ...

Invocation pipeline (Command.execute)
- title header (when declared) → before hooks → body → after hooks.
- a before hook returning exactly False aborts: the body and after hooks are
  skipped and False is the result.
- after hooks receive the body's result as result=...; their own return values
  are ignored.
- any exception raised by hooks or body is matched against the rescue table in
  declaration order; the first matching handler's return value becomes the
  result. Without a match the exception propagates unchanged.

Option parsing (CommandSpec.parse_options)
- "--name=value" and "--name value"; hyphens in names map to underscores.
- unknown long options are dropped; without "=value" they still consume the
  following token.
- "-x value" for declared short flags; unknown two-character "-x" tokens are
  dropped and consume nothing.
- everything else is positional, in order. Values are coerced by option type.
- positional arity is not checked here (the shell checks it, one-shot runs do not).
"""
import builtins
import functools
import inspect
import logging
import operator
from types import MappingProxyType
from typing import Any, NamedTuple

from .input import Input
from .output import Output
from .utils import Unset, coalesce, coerce, underscore

logger = logging.getLogger(__name__)


class Option(NamedTuple):
    name: str
    short: str | None = None
    type: Any = str
    default: Any = None
    descr: str | None = None

    @property
    def flag(self):
        """display form of the long flag ("dry_run" → "--dry-run")."""
        return "--" + self.name.replace("_", "-")


class Hook(NamedTuple):
    """
    a hook or handler reference.

    - str target: method selector, resolved on the command instance.
    - callable target: called with the command instance as first argument.
    """
    target: Any

    def __call__(self, command, /, *args, **kwargs):
        if isinstance(self.target, str):
            return getattr(command, self.target)(*args, **kwargs)
        return self.target(command, *args, **kwargs)

    def __repr__(self):
        return repr(self.target) if isinstance(self.target, str) else getattr(self.target, "__qualname__", repr(self.target))


class CommandSpec(NamedTuple):
    name: str
    descr: str = ""
    title: str | None = None
    explain: str | None = None
    aliases: tuple = ()
    args: tuple = ()
    options: MappingProxyType = MappingProxyType({})
    group: str | None = None
    before: tuple = ()
    after: tuple = ()
    rescuers: tuple = ()

    def matches(self, token, /):
        """exact match against the canonical name or any alias (no prefixes)."""
        return token == self.name or token in self.aliases

    def usage(self):
        parts = [self.name]
        parts.extend(f"<{arg}>" for arg in self.args)
        for option in self.options.values():
            parts.append(f"[-{option.short}/{option.flag}]" if option.short else f"[{option.flag}]")
        return " ".join(parts)

    def parse_options(self, argv, /):
        """
        split argv into (positional, options).

        options start at their declared defaults; only values supplied on the
        command line are coerced.
        """
        argv = list(argv)
        positional = []
        options = {name: option.default for name, option in self.options.items()}
        shorts = {option.short: name for name, option in self.options.items() if option.short}

        index = 0
        while index < len(argv):
            token = argv[index]
            if token.startswith("--"):
                key, separator, value = token[2:].partition("=")
                key = key.replace("-", "_")
                if not separator:
                    # unknown long flags consume their would-be value too
                    index += 1
                    value = argv[index] if index < len(argv) else None
                if key in self.options:
                    options[key] = coerce(value, self.options[key].type)
            elif token.startswith("-") and len(token) == 2:
                if (key := shorts.get(token[1])) is not None:
                    index += 1
                    options[key] = coerce(argv[index] if index < len(argv) else None, self.options[key].type)
            else:
                positional.append(token)
            index += 1

        return positional, options


def _process_strings(cls, metadata):
    """
    Normalize the scalar text fields.

    - name: required non-empty string without whitespace.
    - descr: string (empty allowed).
    - title/explain/group: None or non-empty string (trimmed).
    """
    if not isinstance(metadata["name"], str) or not metadata["name"].strip():
        raise TypeError(f"{cls.__typename__} 'name' must be a non-empty string")
    name = metadata["name"].strip()
    if any(char.isspace() for char in name):
        raise ValueError(f"{cls.__typename__} 'name' cannot contain whitespace")
    metadata["name"] = name

    if not isinstance(metadata["descr"], str):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    metadata["descr"] = metadata["descr"].strip()

    for key in ("title", "explain", "group"):
        if (object := metadata[key]) is None:
            continue
        if not isinstance(object, str):
            raise TypeError(f"{cls.__typename__} {key!r} must be a string")
        if not (object := object.strip()):
            raise ValueError(f"{cls.__typename__} {key!r} cannot be empty")
        metadata[key] = object


def _process_names(cls, metadata):
    """aliases and positional args: iterables of non-empty strings, order kept."""
    for key in ("aliases", "args"):
        if isinstance(object := metadata[key], str):
            object = (object,)
        items = []
        for item in object:
            if not isinstance(item, str) or not (item := item.strip()):
                raise TypeError(f"{cls.__typename__} {key!r} must be an iterable of non-empty strings")
            items.append(item)
        metadata[key] = tuple(items)


def _process_options(cls, metadata):
    """
    Validate Option declarations and index them by name.

    - names are Python identifiers once hyphens become underscores (they are
      passed to the body as keyword arguments). "result" is reserved for the
      after hooks.
    - short flags are single characters; a leading '-' is tolerated.
    - names and short flags must be unique within one command.
    """
    options = {}
    shorts = set()
    for option in metadata["options"]:
        if not isinstance(option, Option):
            raise TypeError(f"{cls.__typename__} 'options' must be an iterable of options")
        name = option.name.replace("-", "_") if isinstance(option.name, str) else option.name
        if not isinstance(name, str) or not name.isidentifier():
            raise ValueError(f"{cls.__typename__} option name {option.name!r} must be an identifier")
        if name == "result":
            raise ValueError(f"{cls.__typename__} option name 'result' is reserved for after hooks")
        if name in options:
            raise ValueError(f"{cls.__typename__} option name {name!r} is already in use")
        short = option.short
        if short is not None:
            if not isinstance(short, str) or len(short := short.lstrip("-")) != 1:
                raise ValueError(f"{cls.__typename__} option {name!r} short flag must be a single character")
            if short in shorts:
                raise ValueError(f"{cls.__typename__} short flag {short!r} is already in use")
            shorts.add(short)
        options[name] = option._replace(name=name, short=short)
    metadata["options"] = MappingProxyType(options)


def _resolve_hook(cls, key, target):
    if isinstance(target, Hook):
        target = target.target
    if not isinstance(target, str) and not builtins.callable(target):
        raise TypeError(f"{cls.__typename__} {key!r} entries must be method names or callables")
    if isinstance(target, str) and not target.isidentifier():
        raise ValueError(f"{cls.__typename__} {key!r} method name {target!r} is not an identifier")
    return Hook(target)


def _process_hooks(cls, metadata):
    """before/after: ordered Hook tuples."""
    for key in ("before", "after"):
        targets = metadata[key]
        if isinstance(targets, str) or builtins.callable(targets):
            targets = (targets,)
        metadata[key] = tuple(_resolve_hook(cls, key, target) for target in targets)


def _process_rescue(cls, metadata):
    """
    Compile the rescue table.

    Input: iterable of (kinds, handler) where kinds is an Exception subclass or
    a tuple of them. Output: tuple of (kinds-tuple, Hook), order preserved
    (first match wins at runtime, so list specific kinds first).
    """
    rescuers = []
    for entry in metadata.pop("rescue"):
        try:
            kinds, handler = entry
        except (TypeError, ValueError):
            raise TypeError(f"{cls.__typename__} 'rescue' entries must be (exception, handler) pairs") from None
        kinds = kinds if isinstance(kinds, tuple) else (kinds,)
        if not kinds or not all(isinstance(kind, type) and issubclass(kind, Exception) for kind in kinds):
            raise TypeError(f"{cls.__typename__} 'rescue' kinds must be Exception subclasses")
        rescuers.append((kinds, _resolve_hook(cls, "rescue", handler)))
    metadata["rescuers"] = tuple(rescuers)


class CommandType(type):
    """
    Metaclass that freezes declared command metadata into a CommandSpec.

    Responsibilities
    - Read the declarative class attributes (inheriting from bases where the
      class does not override them) and validate them once, at class creation.
    - Derive the canonical name from the class name when none is declared.
    - Expose matches()/usage()/parse_options() on the class itself.
    - Attach the class to an App when declared with app=<App>.
    - Provide a compact, stable __repr__ for diagnostics.
    """

    def __new__(cls, name, bases, namespace, /, app=Unset, **options):
        self = super().__new__(cls, name, bases, namespace, **options)
        self.__typename__ = underscore(name).replace("_", "-")

        if not any(isinstance(base, CommandType) for base in bases):
            return self

        docstring = inspect.cleandoc(namespace.get("__doc__") or "")
        metadata = {
            "name": namespace.get("name", underscore(name)),
            "descr": coalesce(getattr(self, "descr"), docstring.partition("\n")[0]),
            "title": getattr(self, "title"),
            "explain": getattr(self, "explain"),
            "aliases": getattr(self, "aliases"),
            "args": getattr(self, "args"),
            "options": getattr(self, "options"),
            "group": getattr(self, "group"),
            "before": getattr(self, "before"),
            "after": getattr(self, "after"),
            "rescue": getattr(self, "rescue"),
        }
        _process_strings(self, metadata)
        _process_names(self, metadata)
        _process_options(self, metadata)
        _process_hooks(self, metadata)
        _process_rescue(self, metadata)

        self.spec = CommandSpec(**metadata)
        self.name = self.spec.name

        if app is not Unset:
            app.attach(self)
        return self

    def matches(self, token, /):
        return self.spec.matches(token)

    def usage(self):
        return self.spec.usage()

    def parse_options(self, argv, /):
        return self.spec.parse_options(argv)

    def __repr__(self):
        spec = getattr(self, "spec", None)
        if spec is None:
            return f"<command base {self.__qualname__}>"
        fields = (("name", spec.name), ("aliases", spec.aliases), ("args", spec.args), ("group", spec.group))
        return f"command({', '.join(map(functools.partial(operator.mod, '%s=%r'), fields))})"


class Command(metaclass=CommandType):
    """
    base class for commands; subclasses implement __call__ (the body).

    Instances are created per invocation, bound to the App that resolved them
    and to the Output/Input the caller is using.
    """
    name = Unset
    descr = Unset
    title = None
    explain = None
    aliases = ()
    args = ()
    options = ()
    group = None
    before = ()
    after = ()
    rescue = ()

    def __init__(self, app=Unset, /, *, output=Unset, input=Unset):
        self.app = app
        self.out = coalesce(output, Output())
        self.input = coalesce(input, Input(Unset, self.out))

    def __call__(self, *args, **options):
        raise NotImplementedError(f"{type(self).__name__} must implement __call__")

    @property
    def config(self):
        if self.app is Unset:
            raise TypeError(f"{type(self).__name__} is not bound to an app")
        return self.app.config

    def execute(self, *args, **options):
        """run the title/hooks/body pipeline under the rescue table."""
        spec = type(self).spec

        if spec.title:
            self.out.header(spec.title)
            if spec.explain:
                self.out.desc(spec.explain)
            self.out.nl()

        try:
            for hook in spec.before:
                if (result := hook(self, *args, **options)) is False:
                    logger.debug("%s: before hook %r aborted the run", spec.name, hook)
                    return result

            result = self(*args, **options)

            for hook in spec.after:
                hook(self, *args, result=result, **options)

            return result
        except Exception as error:
            for kinds, handler in spec.rescuers:
                if isinstance(error, kinds):
                    logger.debug("%s: %s rescued by %r", spec.name, type(error).__name__, handler)
                    return handler(self, error)
            raise

    # ── helpers for check-running commands ────────────────────────────────
    def checking(self, name, /):
        self.out.warning(f"checking: {name}")
        self.out.nl()

    def dropping(self, target, /):
        self.out.warning(f"dropping: {target}")
        self.out.nl()

    def done(self, hint=None, /):
        self.out.nl()
        self.out.success("done")
        if hint:
            self.out.hint(hint)

    def checks_passed(self, passed, /, *, pass_hint=None, fail_hint=None):
        self.out.nl()
        if passed:
            self.out.success("all checks passed")
            if pass_hint:
                self.out.hint(pass_hint)
        else:
            self.out.failure("some checks failed")
            if fail_hint:
                self.out.hint(fail_hint)
        return passed

    def run_checks(self, *checks, args=()):
        """run each check class, print its result, and report whether all passed."""
        results = []
        for check in checks:
            result = check(self.app, *args)()
            self.out.check_result(check.name, result)
            self.out.nl()
            results.append(result.passed)
        return all(results)



__all__ = (
    "Option",
    "Hook",
    "CommandSpec",
    "Command",
)

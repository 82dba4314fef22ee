"""
Duplex faults (errors and warnings) and rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing issue the
  registry, dispatcher and shell can report.
- Fault / FaultWarning: base types carrying a message plus options (code, title,
  hint) that know how to render themselves through rich.
- trigger(): central entry point to surface a fault, either rendered to an
  Output (shell mode) or raised/warned (library mode).

Taxonomy
- UnknownSettingError: access or mutation of an undeclared config key. Always
  surfaced to the immediate caller (it is also a LookupError).
- UnresolvedCommandError: a token that no command matches. Reported as a
  warning; the shell keeps reading, the one-shot dispatcher exits 1.
- InsufficientArgumentsError: shell-only arity shortfall; the command is not run.
- DisabledModeError: the application does not allow one-shot CLI runs.
- MissingValueError: a built-in such as config:set was given too few tokens.
- NotNestedWarning: 'back' typed outside of a sub-application.

Errors raised inside command bodies are not faults: they are matched against
the command's rescue table and otherwise propagate unchanged.
"""
import logging
import warnings
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.text import Text

from .utils import Unset

logger = logging.getLogger(__name__)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - configuration (311xx): UNKNOWN_SETTING, MISSING_VALUE
    - routing (312xx): UNRESOLVED_COMMAND, INSUFFICIENT_ARGUMENTS
    - modes (313xx): DISABLED_MODE
    - warnings (32xxx): NOT_NESTED
    """
    # --- configuration errors ---
    UNKNOWN_SETTING        = 31101
    MISSING_VALUE          = 31102

    # --- routing errors ---
    UNRESOLVED_COMMAND     = 31201
    INSUFFICIENT_ARGUMENTS = 31202

    # --- mode errors ---
    DISABLED_MODE          = 31301

    # --- warnings ---
    NOT_NESTED             = 32101


class Fault(Exception):
    """
    base error carrying a lowercased message plus rendering options.

    options
    - code: FaultCode
    - title: short label, used by library-mode logging
    - hint: one actionable sentence, rendered dim under the message
    - any other context the reporter wants to keep (key, token, command...)
    """
    style = "bold red"

    def __init__(self, message, /, **options):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__} message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    @property
    def hint(self):
        return self.options.get("hint")

    def __str__(self):
        return self.message

    def __rich__(self):
        lines = [Text(self.message, style=self.style)]
        if self.hint:
            lines.append(Text(self.hint, style="dim"))
        return Group(*lines)

    def __trigger__(self, output, /):
        if output is Unset:
            raise self
        output.render(self)

    def __replace__(self, **overrides):
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownSettingError(Fault, LookupError):
    """raised by Config for keys that were never declared."""


class UnresolvedCommandError(Fault):
    style = "yellow"


class InsufficientArgumentsError(Fault):
    style = "yellow"


class MissingValueError(Fault):
    style = "yellow"


class DisabledModeError(Fault): ...


class FaultWarning(Warning):
    """soft feedback: rendered in shell mode, emitted via warnings otherwise."""
    style = "yellow"

    def __init__(self, message, /, **options):
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def hint(self):
        return self.options.get("hint")

    def __str__(self):
        return self.message

    def __rich__(self):
        lines = [Text(self.message, style=self.style)]
        if self.hint:
            lines.append(Text(self.hint, style="dim"))
        return Group(*lines)

    def __trigger__(self, output, /):
        if output is Unset:
            return warnings.warn(self, stacklevel=3)
        output.render(self)

    def __replace__(self, **overrides):
        return type(self)(self.message, **{**self.options, **overrides})


class NotNestedWarning(FaultWarning): ...


def trigger(fault, /, output=Unset, **options):
    """
    surface a fault.

    contract
    - fault must provide __trigger__ and __replace__ (see Fault / FaultWarning).
    - options are merged into the fault before triggering.
    - with an Output the fault is rendered (shell mode); without one, errors are
      raised and warnings go through the warnings module.
    """
    if (
        not callable(getattr(fault, "__trigger__", None)) or
        not callable(getattr(fault, "__replace__", None))
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    if options:
        fault = fault.__replace__(**options)
    logger.debug("fault %s: %s", fault.options.get("code") or "-", fault.message)
    fault.__trigger__(output)


__all__ = (
    "FaultCode",
    "Fault",
    "UnknownSettingError",
    "UnresolvedCommandError",
    "InsufficientArgumentsError",
    "MissingValueError",
    "DisabledModeError",
    "FaultWarning",
    "NotNestedWarning",
    "trigger",
)

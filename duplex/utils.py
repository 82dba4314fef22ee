"""
Duplex utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the config, command and app layers.
- Public-but-internal leaning: stable enough for consumers, designed primarily
  to support the higher-level registry and dispatch layers.

Overview
- UnsetType / Unset
  • Singleton sentinel for "value not provided" without conflating with None.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, preserving legitimate falsey values.

- envflag(name)
  • "1"/"true" environment switches (VERBOSE, DEBUG).

- coerce(raw, kind)
  • Forgiving string → str/int/bool conversion used by options and settings.

- underscore(name)
  • CamelCase class names → snake_case command names ("DeployApp" → "deploy_app").

- mglob(pattern)
  • Module globbing for App.include(): "pkg.**.commands" → importable module names.

Quick examples
    >>> coerce("7", int)
    7
    >>> coerce("Yes", bool)
    True
    >>> underscore("HTTPServerCheck")
    'http_server_check'
"""
import functools
import importlib
import os
import pkgutil
import re
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset".
    - Non-subclassable and a singleton per process.
    """

    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()
"""
Internal sentinel for "not provided".

Use Unset as a default when None is a valid, user-meaningful value (option
defaults, setting defaults, injected streams) and materialize with coalesce().
"""


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Falsey values like None, 0, "" or [] are preserved as-is; only Unset is replaced.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def envflag(name, /):
    """environment switch: "1" or "true" (any case) turns it on."""
    return os.environ.get(name, "").strip().lower() in ("1", "true")


TRUTHY = frozenset({"true", "1", "yes"})
"""Lowercased literals that coerce to True; everything else is False."""

# Kind aliases accepted next to the builtin types.
_KINDS = {
    "string": str,
    "integer": int,
    "boolean": bool,
}


def coerce(raw, kind=str, /):
    """
    Convert a raw token into a typed value.

    kinds
    - str (or "string"): identity; a missing value (None) stays None.
    - int (or "integer"): leading-integer parse in the spirit of forgiving CLIs:
      "12abc" -> 12, "abc" -> 0, None -> 0. Never raises.
    - bool (or "boolean"): case-insensitive membership in TRUTHY.
    - anything else behaves as str.

    notes
    - parse failures never raise: a bad number becomes 0 and the invocation
      goes on.
    """
    kind = _KINDS.get(kind, kind) if isinstance(kind, str) else kind

    if kind is bool:
        return ("" if raw is None else str(raw)).strip().lower() in TRUTHY
    if kind is int:
        if isinstance(raw, int) and not isinstance(raw, bool):
            return raw
        match = re.match(r"\s*([+-]?\d+)", "" if raw is None else str(raw))
        return int(match[1]) if match else 0
    return raw


@functools.cache
def underscore(name, /):
    """
    Derive a snake_case identifier from a CamelCase class name.

    - "Hello"           -> "hello"
    - "DeployApp"       -> "deploy_app"
    - "HTTPServerCheck" -> "http_server_check"
    """
    if not isinstance(name, str):
        raise TypeError("underscore() argument must be a string")
    name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    name = re.sub(r"([a-z\d])([A-Z])", r"\1_\2", name)
    return name.lower()


@functools.cache
def _translate_segment(segment):
    r"""
    translate one module-glob segment into a regex snippet (dots never match).
      *       → zero or more non-dot chars
      ?       → exactly one non-dot char
      [...]   → character class, [!...] negated
      \x      → literal x
    """
    parts = []
    index = 0
    while index < len(segment):
        char = segment[index]
        if char == "\\" and index + 1 < len(segment):
            parts.append(re.escape(segment[index + 1]))
            index += 2
            continue
        if char == "*":
            parts.append(r"[^.]*")
        elif char == "?":
            parts.append(r"[^.]")
        elif char == "[" and (end := segment.find("]", index + 1)) != -1:
            body = segment[index + 1:end]
            if body[:1] in ("!", "^"):
                body = "^" + body[1:]
            parts.append(f"[{body}]")
            index = end
        else:
            parts.append(re.escape(char))
        index += 1
    return "".join(parts)


@functools.cache
def _compile_glob(pattern):
    """compile a dotted module glob; '**' spans zero or more whole segments."""
    body = ""
    for position, segment in enumerate(pattern.split(".")):
        if segment == "**":
            body += r"(?:\.[A-Za-z_]\w*)*"
        else:
            body += ("" if position == 0 else r"\.") + _translate_segment(segment)
    return re.compile(body)


def mglob(source, /):
    """
    expand a dot-separated module glob into fully-qualified module names.

    rules
    - must start with at least one concrete segment.
    - a pattern without wildcards is returned as-is (no import performed).
    - matches are returned sorted; an unimportable prefix yields [].

    examples
    - "tools.commands"       → ["tools.commands"]
    - "tools.commands.*"     → direct children of tools.commands
    - "tools.**.checks"      → any checks module below tools
    """
    if not isinstance(source, str):
        raise TypeError("mglob() argument must be a string")
    elif not (source := source.strip()):
        raise ValueError("mglob() argument must be a non-empty string")

    if re.fullmatch(r"(?!\d)\w+(\.(?!\d)\w+)*", source):
        return [source]

    prefixes = []
    for segment in source.split("."):
        if not re.fullmatch(r"(?!\d)\w+", segment):
            break
        prefixes.append(segment)

    if not prefixes:
        raise ValueError("mglob() pattern must start with a concrete package segment")

    try:
        package = importlib.import_module(prefix := ".".join(prefixes))
    except ImportError:
        return []

    pattern = _compile_glob(source)
    matches = {prefix} if pattern.fullmatch(prefix) else set()

    if hasattr(package, "__path__"):
        for metadata in pkgutil.walk_packages(package.__path__, prefix + "."):
            if pattern.fullmatch(metadata.name):
                matches.add(metadata.name)

    return sorted(matches)


__all__ = (
    # Functions
    "coalesce",
    "envflag",
    "coerce",
    "underscore",
    "mglob",

    # Types
    "UnsetType",

    # Constants
    "Unset",
    "TRUTHY",
)

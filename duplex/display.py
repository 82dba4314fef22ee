"""
Presentation shared by the one-shot dispatcher and the interactive shell.

Presenter is a mixin: the host class provides `app` (an App) and `out` (an
Output). It renders the settings view, applies `config:set`, and lists
commands grouped the way both surfaces show them.
"""
import logging

from .faults import FaultCode, MissingValueError, UnknownSettingError, trigger
from .output import emphasis

logger = logging.getLogger(__name__)


class Presenter:
    def _show_config(self):
        self.out.header("config:")
        for key, value, setting in self.app.config:
            line = f"  {key}: {value}"
            if setting.descr:
                line += f" - {setting.descr}"
            self.out.desc(line)

    def _set_config(self, key, value, /):
        """mutate one setting; usage and unknown-key problems are reported, not raised."""
        if key is None or value is None:
            trigger(
                MissingValueError("usage: config:set <key> <value>"),
                self.out,
                code=FaultCode.MISSING_VALUE,
            )
            return False

        try:
            self.app.config.set(key, value)
        except UnknownSettingError as error:
            self.out.failure(error.message)
            return False

        self.out.success(f"{key} = {self.app.config[key]}")
        return True

    def _list_commands(self, *, width, nested_width, mount_width, mount_label):
        """
        ungrouped commands first, then each group (sorted), then mounted sub-apps.

        - width / nested_width / mount_width: column of the description for
          top-level, grouped and sub-app entries.
        - mount_label: callable(prefix, app) -> (left column, description).
        """
        grouped = {}
        for command in self.app.commands:
            grouped.setdefault(command.spec.group, []).append(command)

        for command in grouped.pop(None, []):
            self._list_command(command, indent="  ", width=width)

        for group in sorted(grouped):
            self.out.nl()
            self.out.info(emphasis(f"  {group}:"))
            for command in grouped[group]:
                self._list_command(command, indent="    ", width=nested_width)

        if self.app.mounts:
            self.out.nl()
            self.out.info(emphasis("  sub-apps:"))
            for prefix, child in self.app.mounts.items():
                left, descr = mount_label(prefix, child)
                self.out.info(f"    {left.ljust(mount_width)}{descr}")

    def _list_command(self, command, /, *, indent, width):
        self.out.info(f"{indent}{command.usage().ljust(width)}{command.spec.descr}")
        if command.spec.aliases:
            self.out.desc(f"{indent}  aliases: {', '.join(command.spec.aliases)}")


__all__ = (
    "Presenter",
)

"""
Duplex diagnostic checks.

- CheckResult: immutable (passed, message) outcome.
- Check: base class for one diagnostic. Subclasses implement __call__ and
  return self.succeed(...) or self.fail(...). Declaring a subclass with
  app=<App> attaches it to that application (see App.attach).

Example
    class DatabaseReachable(Check, app=app):
        def __call__(self):
            if ping(self.config["database"]):
                return self.succeed("database answers")
            return self.fail("database is down")

    DatabaseReachable.name  # "database reachable"
"""
from typing import NamedTuple

from .utils import Unset, underscore


class CheckResult(NamedTuple):
    passed: bool
    message: str

    @property
    def failed(self):
        return not self.passed

    def __str__(self):
        return f"{'passed' if self.passed else 'failed'}: {self.message}"


class Check:
    name = Unset

    def __init_subclass__(cls, /, app=Unset, **options):
        super().__init_subclass__(**options)
        if "name" not in cls.__dict__:
            cls.name = underscore(cls.__name__).replace("_", " ")
        if app is not Unset:
            app.attach(cls)

    def __init__(self, app=Unset, /, *args):
        self.app = app
        self.args = args

    def __call__(self):
        raise NotImplementedError(f"{type(self).__name__} must implement __call__")

    @property
    def config(self):
        if self.app is Unset:
            raise TypeError(f"{type(self).__name__} is not bound to an app")
        return self.app.config

    def succeed(self, message, /):
        return CheckResult(passed=True, message=message)

    def fail(self, message, /):
        return CheckResult(passed=False, message=message)


__all__ = (
    "CheckResult",
    "Check",
)

"""
Command layer tests (declaration, option parsing, invocation pipeline).

Scope
- Metadata freezing: derived names, docstring descriptions, validation errors.
- parse_options: defaults, ordering, inline/spaced values, unknown flags.
- execute: title header, before/after hooks, rescue table.
- Helpers used by check-running commands.

Conventions
- Test method names follow CamelCase per project convention.
- Output is captured through an injected io.StringIO.
"""
import io
import unittest
from unittest import TestCase

from duplex.checks import Check
from duplex.commands import Command, CommandSpec, Hook, Option
from duplex.output import Output


class Deploy(Command):
    """deploy the current build

    longer text is not part of the description
    """
    aliases = ("d", "dep")
    args = ("env",)
    options = (
        Option("verbose", short="v", type=bool, default=False, descr="chatty output"),
        Option("count", short="c", type=int, default=1),
        Option("dry_run", type=bool, default=False),
        Option("tag"),
    )
    group = "release"

    def __call__(self, env, **options):
        return env, options


class CommandDeclarationTest(TestCase):
    def testDerivedMetadata(self):
        spec = Deploy.spec
        self.assertIsInstance(spec, CommandSpec)
        self.assertEqual(Deploy.name, "deploy")
        self.assertEqual(spec.descr, "deploy the current build")
        self.assertEqual(spec.aliases, ("d", "dep"))
        self.assertEqual(spec.args, ("env",))
        self.assertEqual(list(spec.options), ["verbose", "count", "dry_run", "tag"])
        self.assertEqual(spec.group, "release")

    def testNameFromCamelCase(self):
        class DeployApp(Command):
            def __call__(self): ...

        self.assertEqual(DeployApp.name, "deploy_app")

    def testExplicitNameAndDescr(self):
        class Anything(Command):
            name = "hello"
            descr = "say hello"

        self.assertEqual(Anything.spec.name, "hello")
        self.assertEqual(Anything.spec.descr, "say hello")

    def testMissingDocstringGivesEmptyDescr(self):
        class Quiet(Command): ...

        self.assertEqual(Quiet.spec.descr, "")

    def testSubclassInheritsDeclarations(self):
        class Redeploy(Deploy):
            """deploy again"""

        self.assertEqual(Redeploy.name, "redeploy")
        self.assertEqual(Redeploy.spec.args, ("env",))
        self.assertEqual(Redeploy.spec.descr, "deploy again")
        self.assertEqual(Deploy.name, "deploy")

    def testMatches(self):
        self.assertTrue(Deploy.matches("deploy"))
        self.assertTrue(Deploy.matches("dep"))
        self.assertFalse(Deploy.matches("depl"))
        self.assertFalse(Deploy.matches("Deploy"))

    def testUsage(self):
        self.assertEqual(Deploy.usage(), "deploy <env> [-v/--verbose] [-c/--count] [--dry-run] [--tag]")

    def testRepr(self):
        self.assertEqual(
            repr(Deploy),
            "command(name='deploy', aliases=('d', 'dep'), args=('env',), group='release')",
        )

    def testInvalidName(self):
        with self.assertRaises(ValueError):
            class Broken(Command):
                name = "two words"
        with self.assertRaises(TypeError):
            class Nameless(Command):
                name = ""

    def testInvalidOptions(self):
        with self.assertRaises(TypeError):
            class Loose(Command):
                options = ("verbose",)
        with self.assertRaises(ValueError):
            class Clash(Command):
                options = (Option("one", short="x"), Option("two", short="-x"))
        with self.assertRaises(ValueError):
            class Twice(Command):
                options = (Option("one"), Option("one"))
        with self.assertRaises(ValueError):
            class Wide(Command):
                options = (Option("one", short="xy"),)
        with self.assertRaises(ValueError):
            class Shadow(Command):
                options = (Option("result"),)

    def testInvalidHooks(self):
        with self.assertRaises(TypeError):
            class NotCallable(Command):
                before = (42,)
        with self.assertRaises(TypeError):
            class NotAnError(Command):
                rescue = ((int, "handler"),)
        with self.assertRaises(TypeError):
            class TooBroad(Command):
                rescue = ((SystemExit, "stay"),)
        with self.assertRaises(TypeError):
            class NotAPair(Command):
                rescue = (ValueError,)

    def testHyphenatedOptionNames(self):
        class Sync(Command):
            options = (Option("dry-run", type=bool, default=False),)

        self.assertIn("dry_run", Sync.spec.options)
        self.assertEqual(Sync.spec.options["dry_run"].flag, "--dry-run")


class ParseOptionsTest(TestCase):
    def testEmptyArgvKeepsDefaults(self):
        self.assertEqual(
            Deploy.parse_options([]),
            ([], {"verbose": False, "count": 1, "dry_run": False, "tag": None}),
        )

    def testPositionalOrderIsPreserved(self):
        positional, _ = Deploy.parse_options(["a", "b", "--count=2", "c"])
        self.assertEqual(positional, ["a", "b", "c"])

    def testInlineAndSpacedValues(self):
        positional, options = Deploy.parse_options(["prod", "--verbose=true", "--count", "3", "--tag", "v1"])
        self.assertEqual(positional, ["prod"])
        self.assertEqual(options, {"verbose": True, "count": 3, "dry_run": False, "tag": "v1"})

    def testShortFlags(self):
        positional, options = Deploy.parse_options(["-v", "yes", "prod", "-c", "12abc"])
        self.assertEqual(positional, ["prod"])
        self.assertIs(options["verbose"], True)
        self.assertEqual(options["count"], 12)

    def testHyphenatedLongFlag(self):
        _, options = Deploy.parse_options(["--dry-run", "1"])
        self.assertIs(options["dry_run"], True)

    def testUnknownLongFlagConsumesNextToken(self):
        positional, options = Deploy.parse_options(["--force", "prod"])
        self.assertEqual(positional, [])
        self.assertNotIn("force", options)

    def testUnknownInlineLongFlagConsumesNothing(self):
        positional, options = Deploy.parse_options(["--force=1", "prod"])
        self.assertEqual(positional, ["prod"])
        self.assertNotIn("force", options)

    def testUnknownShortFlagIsDropped(self):
        positional, _ = Deploy.parse_options(["-x", "prod"])
        self.assertEqual(positional, ["prod"])

    def testOtherDashedTokensArePositional(self):
        positional, _ = Deploy.parse_options(["-", "-abc"])
        self.assertEqual(positional, ["-", "-abc"])

    def testTrailingFlagWithoutValue(self):
        _, options = Deploy.parse_options(["--count"])
        self.assertEqual(options["count"], 0)

    def testDefaultsAreNotCoerced(self):
        class Lazy(Command):
            options = (Option("level", type=int, default="high"),)

        self.assertEqual(Lazy.parse_options([])[1], {"level": "high"})


class ExecuteTest(TestCase):
    def setUp(self):
        self.stream = io.StringIO()
        self.out = Output(self.stream, colorful=False)
        self.calls = []

    def make(self, cls):
        return cls(output=self.out)

    def testBodyResultIsReturned(self):
        self.assertEqual(self.make(Deploy).execute("prod", verbose=True), ("prod", {"verbose": True}))

    def testTitleIsPrintedFirst(self):
        class Release(Command):
            title = "Release"
            explain = "ships the build"

            def __call__(self):
                self.out.info("body")

        self.make(Release).execute()
        self.assertEqual(self.stream.getvalue(), "Release\nships the build\n\nbody\n")

    def testHooksRunInOrder(self):
        calls = self.calls

        def audit(command, *args, **options):
            calls.append(("audit", args, options))

        class Ship(Command):
            before = ("first", audit)
            after = ("report",)

            def first(self, *args, **options):
                calls.append(("first", args, options))

            def report(self, *args, result, **options):
                calls.append(("report", args, result))

            def __call__(self, target, *, fast=False):
                calls.append(("body", target, fast))
                return "shipped"

        self.assertEqual(self.make(Ship).execute("box", fast=True), "shipped")
        self.assertEqual(calls, [
            ("first", ("box",), {"fast": True}),
            ("audit", ("box",), {"fast": True}),
            ("body", "box", True),
            ("report", ("box",), "shipped"),
        ])

    def testBeforeHookFalseShortCircuits(self):
        calls = self.calls

        class Guarded(Command):
            before = ("deny", "never")
            after = ("never",)

            def deny(self):
                calls.append("deny")
                return False

            def never(self, **options):
                calls.append("never")

            def __call__(self):
                calls.append("body")

        self.assertIs(self.make(Guarded).execute(), False)
        self.assertEqual(calls, ["deny"])

    def testFalsyButNotFalseDoesNotAbort(self):
        class Lenient(Command):
            before = ("check",)

            def check(self):
                return 0

            def __call__(self):
                return "ran"

        self.assertEqual(self.make(Lenient).execute(), "ran")

    def testRescueSubstitutesResult(self):
        class Risky(Command):
            rescue = ((KeyError, "missing"), ((ValueError, TypeError), "invalid"), (Exception, "anything"))

            def missing(self, error):
                return "missing"

            def invalid(self, error):
                return f"invalid: {error}"

            def anything(self, error):
                return "anything"

            def __call__(self, kind):
                raise kind("boom")

        command = self.make(Risky)
        self.assertEqual(command.execute(ValueError), "invalid: boom")
        self.assertEqual(command.execute(TypeError), "invalid: boom")
        self.assertEqual(command.execute(KeyError), "missing")
        self.assertEqual(command.execute(RuntimeError), "anything")

    def testRescueCoversHooks(self):
        class Fragile(Command):
            before = ("explode",)
            rescue = ((ZeroDivisionError, lambda command, error: "caught"),)

            def explode(self):
                return 1 / 0

            def __call__(self): ...

        self.assertEqual(self.make(Fragile).execute(), "caught")

    def testUnmatchedErrorPropagates(self):
        class Narrow(Command):
            rescue = ((KeyError, "handler"),)

            def handler(self, error):
                return "nope"

            def __call__(self):
                raise RuntimeError("unhandled")

        with self.assertRaises(RuntimeError):
            self.make(Narrow).execute()

    def testSystemExitBypassesRescue(self):
        class Leaving(Command):
            rescue = ((Exception, lambda command, error: "caught"),)

            def __call__(self):
                raise SystemExit(3)

        with self.assertRaises(SystemExit):
            self.make(Leaving).execute()

    def testBodyIsRequired(self):
        class Empty(Command): ...

        with self.assertRaises(NotImplementedError):
            self.make(Empty).execute()

    def testHookCallsCallables(self):
        hook = Hook(lambda command, value: (command, value))
        self.assertEqual(hook("cmd", 1), ("cmd", 1))


class HelperTest(TestCase):
    def setUp(self):
        self.stream = io.StringIO()
        self.command = Deploy(output=Output(self.stream, colorful=False))

    def testRunChecks(self):
        class Up(Check):
            def __call__(self):
                return self.succeed("it is up")

        class Down(Check):
            def __call__(self):
                return self.fail("it is down")

        self.assertTrue(self.command.run_checks(Up))
        self.assertFalse(self.command.run_checks(Up, Down))
        self.assertIn("pass: up\n      it is up\n", self.stream.getvalue())
        self.assertIn("fail: down\n      it is down\n", self.stream.getvalue())

    def testChecksPassed(self):
        self.assertTrue(self.command.checks_passed(True, pass_hint="ship it"))
        self.assertFalse(self.command.checks_passed(False, fail_hint="fix it"))
        output = self.stream.getvalue()
        self.assertIn("all checks passed\nship it\n", output)
        self.assertIn("some checks failed\nfix it\n", output)

    def testProgressLines(self):
        self.command.checking("database")
        self.command.dropping("cache")
        self.command.done("all set")
        self.assertEqual(
            self.stream.getvalue(),
            "checking: database\n\ndropping: cache\n\n\ndone\nall set\n",
        )

    def testUnboundConfigRaises(self):
        with self.assertRaises(TypeError):
            self.command.config


if __name__ == "__main__":
    unittest.main()

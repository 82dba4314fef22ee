"""
One-shot dispatcher tests (exit statuses, built-ins, usage screen).
"""
import io
import unittest
from unittest import TestCase

from duplex.apps import App
from duplex.cli import CLI, run
from duplex.commands import Command, Option
from duplex.config import Config
from duplex.input import Input
from duplex.output import Output


def build_app(**options):
    config = Config({})
    config.setting("database", default="dev", descr="database name")
    config.setting("workers", default=4, type=int)
    app = App("ops", config=config, **options)

    class Greet(Command, app=app):
        """say hello"""
        args = ("who",)
        options = (Option("loud", short="l", type=bool, default=False),)

        def __call__(self, who="world", *, loud):
            message = f"hello {who}"
            self.out.info(message.upper() if loud else message)

    class Verify(Command, app=app):
        """verify the build"""
        group = "release"

        def __call__(self, outcome="yes"):
            return outcome == "yes"

    class Database(Command, app=app):
        """print the database setting"""

        def __call__(self):
            self.out.info(self.config["database"])
            return "ignored"

    admin = App("admin", banner="administration", config=Config({}))

    class Users(Command, app=admin):
        """list users"""

        def __call__(self):
            self.out.info(f"users of {self.app.name}")

    app.mount(admin, "admin")
    return app


class CLITest(TestCase):
    def setUp(self):
        self.stream = io.StringIO()
        self.out = Output(self.stream, colorful=False)

    def cli(self, app=None, **options):
        return CLI(app or build_app(), output=self.out, input=Input(io.StringIO(), self.out), **options)

    def written(self):
        return self.stream.getvalue()

    def testCommandRuns(self):
        self.assertEqual(self.cli().run(["greet", "there", "--loud", "true"]), 0)
        self.assertEqual(self.written(), "HELLO THERE\n")

    def testMissingPositionalsAreNotChecked(self):
        self.assertEqual(self.cli().run(["greet"]), 0)
        self.assertEqual(self.written(), "hello world\n")

    def testBooleanResultsMapToStatus(self):
        self.assertEqual(self.cli().run(["verify"]), 0)
        self.assertEqual(self.cli().run(["verify", "no"]), 1)

    def testOtherResultsExitZero(self):
        self.assertEqual(self.cli().run(["database"]), 0)
        self.assertEqual(self.written(), "dev\n")

    def testMountedCommandBindsChildApp(self):
        self.assertEqual(self.cli().run(["admin:users"]), 0)
        self.assertEqual(self.written(), "users of admin\n")

    def testHelpExitsOne(self):
        for token in ("help", "-h", "--help"):
            with self.subTest(token=token):
                self.assertEqual(self.cli().run([token]), 1)
        self.assertIn("usage:", self.written())

    def testUnknownCommand(self):
        self.assertEqual(self.cli().run(["bogus"]), 1)
        self.assertTrue(self.written().startswith("unknown command: bogus\n"))
        self.assertIn("commands:", self.written())

    def testConfigView(self):
        self.assertEqual(self.cli().run(["config"]), 0)
        self.assertEqual(self.written(), "config:\n  database: dev - database name\n  workers: 4\n")

    def testConfigSet(self):
        app = build_app()
        self.assertEqual(self.cli(app).run(["config:set", "workers", "9"]), 0)
        self.assertEqual(app.config["workers"], 9)
        self.assertEqual(self.written(), "workers = 9\n")

    def testConfigSetUnknownKey(self):
        app = build_app()
        before = app.config.to_dict()
        self.assertEqual(self.cli(app).run(["config:set", "unknownkey", "value"]), 0)
        self.assertEqual(self.written(), "unknown config key: unknownkey\n")
        self.assertEqual(app.config.to_dict(), before)

    def testConfigSetMissingValue(self):
        self.assertEqual(self.cli().run(["config:set", "workers"]), 0)
        self.assertEqual(self.written(), "usage: config:set <key> <value>\n")

    def testDisabledCli(self):
        self.assertEqual(self.cli(build_app(cli=False)).run(["greet"]), 1)
        self.assertEqual(self.written(), "CLI mode is disabled\nrun without arguments for interactive mode\n")

    def testDisabledCliWithoutRepl(self):
        self.assertEqual(self.cli(build_app(cli=False, repl=False)).run(["greet"]), 1)
        self.assertEqual(self.written(), "CLI mode is disabled\n")

    def testEmptyArgvWithoutRepl(self):
        self.assertEqual(self.cli(build_app(repl=False)).run([]), 1)
        self.assertIn("commands:", self.written())

    def testEmptyArgvStartsRepl(self):
        app = build_app(boot="none")
        cli = CLI(app, output=self.out, input=Input(io.StringIO("greet you\nexit\n"), self.out), history=False)
        self.assertEqual(cli.run([]), 0)
        self.assertIn("hello you\n", self.written())
        self.assertTrue(self.written().endswith("goodbye\n"))

    def testUsageScreen(self):
        self.cli(build_app(banner="ops console")).usage()
        written = self.written()
        self.assertTrue(written.startswith("ops console\nops - CLI app\n\nusage:\n"))
        self.assertIn("  greet <who> [-l/--loud]", written)
        self.assertIn("\n  release:\n    verify", written)
        self.assertIn("\n  sub-apps:\n    admin:*", written)
        self.assertIn("administration\n", written)
        self.assertIn("  config:set <key> <value>", written)
        self.assertTrue(written.endswith("environment:\n  DATABASE - database name\n  WORKERS\n"))

    def testUnhandledErrorsPropagate(self):
        app = App("boom", config=Config({}))

        class Explode(Command, app=app):
            def __call__(self):
                raise RuntimeError("boom")

        with self.assertRaises(RuntimeError):
            self.cli(app).run(["explode"])

    def testMainExits(self):
        with self.assertRaises(SystemExit) as context:
            self.cli().main(["verify", "no"])
        self.assertEqual(context.exception.code, 1)

    def testRunHelperAcceptsStrings(self):
        with self.assertRaises(SystemExit) as context:
            run(build_app(), "greet 'dear friend'", output=self.out, input=Input(io.StringIO(), self.out))
        self.assertEqual(context.exception.code, 0)
        self.assertEqual(self.written(), "hello dear friend\n")


if __name__ == "__main__":
    unittest.main()

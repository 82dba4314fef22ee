"""
Check and CheckResult tests.
"""
import unittest
from unittest import TestCase

from duplex.apps import App
from duplex.checks import Check, CheckResult
from duplex.config import Config


class CheckResultTest(TestCase):
    def testFields(self):
        result = CheckResult(True, "ok")
        self.assertTrue(result.passed)
        self.assertFalse(result.failed)
        self.assertEqual(result.message, "ok")

    def testImmutable(self):
        result = CheckResult(False, "down")
        with self.assertRaises(AttributeError):
            result.passed = True

    def testString(self):
        self.assertEqual(str(CheckResult(True, "all good")), "passed: all good")
        self.assertEqual(str(CheckResult(False, "broken")), "failed: broken")


class CheckTest(TestCase):
    def testDerivedName(self):
        class AlwaysPass(Check):
            def __call__(self):
                return self.succeed("fine")

        self.assertEqual(AlwaysPass.name, "always pass")

    def testExplicitName(self):
        class Probe(Check):
            name = "db probe"

        self.assertEqual(Probe.name, "db probe")

    def testHelpers(self):
        class Flaky(Check):
            def __call__(self):
                return self.fail("nope")

        self.assertEqual(Flaky()(), CheckResult(False, "nope"))
        self.assertEqual(Flaky().succeed("yes"), CheckResult(True, "yes"))

    def testBodyIsRequired(self):
        class Empty(Check): ...

        with self.assertRaises(NotImplementedError):
            Empty()()

    def testConfigComesFromApp(self):
        config = Config({"THRESHOLD": "3"})
        config.setting("threshold", default=1, type=int)
        app = App("probe", config=config)

        class Threshold(Check, app=app):
            def __call__(self):
                return self.succeed(f"threshold {self.config['threshold']}")

        self.assertEqual(app.checks, (Threshold,))
        self.assertEqual(Threshold(app)().message, "threshold 3")

    def testUnboundConfigRaises(self):
        class Loose(Check): ...

        with self.assertRaises(TypeError):
            Loose().config

    def testArgumentsAreKept(self):
        class Reachable(Check):
            def __call__(self):
                host, = self.args
                return self.succeed(f"{host} answers")

        self.assertEqual(Reachable(None, "db")().message, "db answers")


if __name__ == "__main__":
    unittest.main()

"""
Help renderer behavioral tests.

Scope
- Validate the exact layout (padding, attribute lists, blank lines).
- Validate the round-trip property: every option shown in help is accepted
  by a dispatch of the command it is listed under.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import re
import sys
import unittest
from unittest import TestCase, mock

from commandeer import (
    Dispatcher,
    Parameter,
    SchemaModel,
    build,
    command,
    render,
    parse_option,
    DispatchError,
    UnknownParameterError,
)


class Program:
    verbose = Parameter("verbose", "vb", "verbose output", type=bool)
    level = Parameter("level", type=int, default="3", required=True)

    @command("simple", "s", "simple command")
    def simple(self):
        pass

    @command("complex", "c", "complex command")
    def complex(
            self,
            value1=Parameter("value1", descr="value1 description", type=int),
            value2=Parameter("value2", "v2", "value2 description", required=True),
            value3=Parameter("value3", descr="value3 description", type=bool, default="true"),
            files=Parameter("files", type=list[str], unnamed=True),
    ):
        pass

    @command("help", "h", help=True)
    def help(self, text=Parameter("help")):
        pass


class Verbose:
    verbosity = Parameter("verbosity-level", "vl", "verbose output", type=bool)
    output = Parameter("output-directory", descr="output directory")

    @command("deploy-everything", "de", "deploy all services")
    def deploy(
            self,
            config=Parameter("configuration-file", descr="configuration file"),
            dry=Parameter("dry-run-with-report", "dr", type=bool),
    ):
        pass

    @command("help", help=True)
    def help(self, text=Parameter("help")):
        pass


class TestLayout(TestCase):

    def testFullLayout(self):
        expected = "\n".join([
            "Usage: tool <command> [options...]",
            "",
            "Global options:",
            "  --verbose, -vb" + " " * 4 + "verbose output [bool]",
            "  --level" + " " * 12 + "[int, Required, Default=3]",
            "",
            "Commands:",
            "  simple (s)" + " " * 8 + "simple command",
            "",
            "  complex (c)" + " " * 7 + "complex command",
            "    --value1" + " " * 12 + "value1 description [int]",
            "    --value2, -v2" + " " * 7 + "value2 description [str, Required]",
            "    --value3" + " " * 12 + "value3 description [bool, Default=true]",
            "    --files" + " " * 14 + "[list[str], Unnamed]",
            "",
            "  help (h)",
            "    --help" + " " * 15 + "[str]",
            "",
        ]) + "\n"
        self.assertEqual(render(build(Program()), prog="tool"), expected)

    def testNamesFillingTheirColumn(self):
        expected = "\n".join([
            "Usage: tool <command> [options...]",
            "",
            "Global options:",
            "  --verbosity-level, -vl verbose output [bool]",
            "  --output-directory output directory [str]",
            "",
            "Commands:",
            "  deploy-everything (de) deploy all services",
            "    --configuration-file configuration file [str]",
            "    --dry-run-with-report, -dr  [bool]",
            "",
            "  help",
            "    --help" + " " * 15 + "[str]",
            "",
        ]) + "\n"
        self.assertEqual(render(build(Verbose()), prog="tool"), expected)

    def testEmptyModel(self):
        self.assertEqual(
            render(SchemaModel(), prog="tool"),
            "Usage: tool <command> [options...]\n\nGlobal options:\n\nCommands:\n",
        )

    def testProgramNameFromArgv(self):
        with mock.patch.object(sys, "argv", ["/usr/local/bin/deploy", "run"]):
            self.assertTrue(render(SchemaModel()).startswith("Usage: deploy <command>"))

    def testProgramNameFromMain(self):
        main = sys.modules["__main__"]
        with mock.patch.object(main, "__prog__", "custom", create=True):
            self.assertTrue(render(SchemaModel()).startswith("Usage: custom <command>"))

    def testDispatcherHelpUsesItsProgramName(self):
        self.assertTrue(Dispatcher(Program(), prog="tool").help().startswith("Usage: tool "))

    def testRenderingIsDeterministic(self):
        self.assertEqual(render(build(Program()), prog="x"), render(build(Program()), prog="x"))


class TestRoundTrip(TestCase):
    """Every option listed in help is recognized for its command."""

    def _listed(self, text):
        listed = {}
        globals = []
        current = None
        for line in text.splitlines():
            if match := re.match(r"^  (--\S+?)(?:, (-\S+))?\s", line):
                globals.extend(token for token in match.groups() if token)
            elif match := re.match(r"^  (\w\S*)", line):
                current = match[1]
                listed[current] = []
            elif match := re.match(r"^    (--\S+?)(?:, (-\S+))?\s", line):
                listed[current].extend(token for token in match.groups() if token)
        return globals, listed

    def _assertRecognized(self, dispatcher, globals, listed):
        for name, tokens in listed.items():
            for token in [*tokens, *globals]:
                with self.subTest(command=name, token=token):
                    try:
                        dispatcher.dispatch([name, token])
                    except UnknownParameterError:
                        self.fail("%s is listed for %s but not recognized" % (token, name))
                    except DispatchError:
                        pass

    def testListedOptionsAreRecognized(self):
        dispatcher = Dispatcher(Program(), prog="tool")
        globals, listed = self._listed(dispatcher.help())
        self.assertEqual(set(listed), {"simple", "complex", "help"})
        self.assertEqual(globals, ["--verbose", "-vb", "--level"])
        self._assertRecognized(dispatcher, globals, listed)

    def testLongOptionsAreRecognized(self):
        dispatcher = Dispatcher(Verbose(), prog="tool")
        globals, listed = self._listed(dispatcher.help())
        self.assertEqual(set(listed), {"deploy-everything", "help"})
        self.assertEqual(globals, ["--verbosity-level", "-vl", "--output-directory"])
        self.assertEqual(listed["deploy-everything"], ["--configuration-file", "--dry-run-with-report", "-dr"])
        for token in globals:
            with self.subTest(token=token):
                self.assertIn(parse_option(token).name, ("verbosity-level", "vl", "output-directory"))
        self._assertRecognized(dispatcher, globals, listed)


if __name__ == "__main__":
    unittest.main()

"""
Schema module behavioral tests (registration, discovery, build failures).

Conventions
- Test method names follow CamelCase per project convention.
- Declarative fixtures are plain classes and synthetic modules.
"""

from __future__ import annotations

import types
import unittest
from unittest import TestCase

from commandeer import (
    Schema,
    SchemaModel,
    Command,
    Parameter,
    Slot,
    IntegerRange,
    NonEmpty,
    Regex,
    build,
    command,
    Unset,
    DuplicateCommandNameError,
    DuplicateDefaultCommandError,
    HelpCommandSignatureError,
    ParameterNameUndefinedError,
    AmbiguousValidatorError,
)


class Program:
    server = Parameter("server", "srv", "server address")

    @command("default", "d", "default command", default=True)
    def default(self):
        pass

    @command("simple", "s", "simple command")
    def simple(self):
        pass

    @command("complex", "c", "complex command")
    def complex(
            self,
            value1=Parameter("value1", type=int, validator=IntegerRange(10, 100)),
            value2=Parameter("value2", "v2", required=True, validator=Regex("a[0-9]+")),
            value3=Parameter("value3", type=bool, default="true"),
    ):
        pass

    @command("help", "h", "help command", help=True)
    def help(self, text=Parameter("help")):
        pass


def _shape(model):
    return (
        [(c.name, c.short, c.default, c.help, [p.name for p in c.parameters]) for c in model.commands],
        [entry.parameter.name for entry in model.globals],
    )


class TestSchemaBuilder(TestCase):
    """Explicit registration API."""

    def testDecoratorRegistersCommand(self):
        schema = Schema()

        @schema.command("run", "r")
        def run():
            return "ran"

        self.assertIsInstance(run, Command)
        self.assertEqual(run(), "ran")
        self.assertEqual(schema.build().commands, (run,))

    def testDirectRegistration(self):
        schema = Schema()
        c = schema.command(lambda: None, "run")
        self.assertIs(schema.build().find("run"), c)

    def testDuplicateNameRejected(self):
        schema = Schema()
        schema.command(lambda: None, "run", "r")
        with self.assertRaises(DuplicateCommandNameError) as context:
            schema.command(lambda: None, "run")
        self.assertEqual(context.exception.argument, "run")

    def testShortNameClashRejected(self):
        schema = Schema()
        schema.command(lambda: None, "run", "r")
        with self.assertRaises(DuplicateCommandNameError):
            schema.command(lambda: None, "r")
        with self.assertRaises(DuplicateCommandNameError):
            schema.command(lambda: None, "reset", "run")

    def testSecondDefaultRejected(self):
        schema = Schema()
        schema.command(lambda: None, "run", default=True)
        with self.assertRaises(DuplicateDefaultCommandError):
            schema.command(lambda: None, "stop", default=True)

    def testHelpCommandTakesTheText(self):
        schema = Schema()
        schema.command(lambda text=Parameter("help"): None, "help", help=True)
        schema.command(lambda text: None, "usage", parameters=[Parameter("usage")], help=True)
        self.assertEqual([c.name for c in schema.build().commands if c.help], ["help", "usage"])

    def testHelpCommandSignatureRejected(self):
        for callback, parameters in (
                (lambda: None, Unset),
                (lambda *, text=Parameter("text"): None, Unset),
                (lambda text=Parameter("text"), page=Parameter("page", type=int): None, Unset),
                (lambda: None, []),
        ):
            with self.subTest(parameters=parameters), self.assertRaises(HelpCommandSignatureError) as context:
                Schema().command(callback, "help", parameters=parameters, help=True)
            self.assertEqual(context.exception.argument, "help")

    def testHelpCommandCheckedOnDiscovery(self):
        class Broken:
            @command("help", help=True)
            def help(self):
                pass

        with self.assertRaises(HelpCommandSignatureError):
            build(Broken())

    def testGlobalParameter(self):
        schema = Schema()
        settings = {}
        p = schema.parameter(Parameter("level", type=int), Slot(settings, "level"))
        (entry,) = schema.build().globals
        self.assertIs(entry.parameter, p)
        self.assertIs(entry.slot.target, settings)

    def testNamelessGlobalRejected(self):
        with self.assertRaises(ParameterNameUndefinedError):
            Schema().parameter(Parameter(short="l"), Slot({}, "level"))

    def testAmbiguousGlobalValidatorRejected(self):
        with self.assertRaises(AmbiguousValidatorError):
            Schema().parameter(Parameter("level", validator=[NonEmpty(), NonEmpty()]), Slot({}, "level"))

    def testGlobalNeedsSlot(self):
        with self.assertRaises(TypeError):
            Schema().parameter(Parameter("level"), {})

    def testAddRejectsNonCommands(self):
        with self.assertRaises(TypeError):
            Schema().add(lambda: None)


class TestDiscovery(TestCase):
    """Declarative discovery of instances and modules."""

    def testInstanceDiscovery(self):
        model = build(Program())
        self.assertEqual(_shape(model), (
            [
                ("default", "d", True, False, []),
                ("simple", "s", False, False, []),
                ("complex", "c", False, False, ["value1", "value2", "value3"]),
                ("help", "h", False, True, ["help"]),
            ],
            ["server"],
        ))
        self.assertEqual(model.default.name, "default")

    def testBuildIsDeterministic(self):
        self.assertEqual(_shape(build(Program())), _shape(build(Program())))

    def testCommandsAreBoundToTheInstance(self):
        calls = []

        class Tool:
            @command
            def run(self):
                calls.append(self)

        tool = Tool()
        build(tool).find("run")()
        self.assertEqual(calls, [tool])

    def testGlobalSlotTargetsTheInstance(self):
        program = Program()
        (entry,) = build(program).globals
        self.assertIs(entry.slot.target, program)
        self.assertEqual(entry.slot.key, "server")

    def testSubclassOverrideKeepsPosition(self):
        class Base:
            @command
            def first(self):
                return "base"

            @command
            def second(self):
                pass

        class Derived(Base):
            @command
            def first(self):
                return "derived"

            @command
            def third(self):
                pass

        model = build(Derived())
        self.assertEqual([c.name for c in model.commands], ["first", "second", "third"])
        self.assertEqual(model.find("first")(), "derived")

    def testStaticMethodCommand(self):
        class Tool:
            @staticmethod
            @command("ping")
            def ping():
                return "pong"

        self.assertEqual(build(Tool()).find("ping")(), "pong")

    def testModuleDiscovery(self):
        module = types.ModuleType("tool")
        module.level = Parameter("level", type=int)

        @command("run")
        def run(fast=Parameter("fast", type=bool)):
            pass

        module.run = run
        model = build(module)
        self.assertEqual([c.name for c in model.commands], ["run"])
        (entry,) = model.globals
        self.assertIs(entry.slot.target, module)

    def testClassDiscoveryRejected(self):
        with self.assertRaises(TypeError):
            build(Program)

    def testUndeclaredHandlerParameterRejected(self):
        class Tool:
            @command
            def run(self, fast):
                pass

        with self.assertRaises(ParameterNameUndefinedError):
            build(Tool())

    def testDuplicateDefaultAcrossDiscovery(self):
        class Tool:
            @command(default=True)
            def one(self):
                pass

            @command(default=True)
            def two(self):
                pass

        with self.assertRaises(DuplicateDefaultCommandError):
            build(Tool())


class TestSchemaModel(TestCase):

    def testFindIsCaseInsensitive(self):
        model = build(Program())
        self.assertEqual(model.find("COMPLEX").name, "complex")
        self.assertEqual(model.find("C").name, "complex")
        self.assertIsNone(model.find("unknown"))

    def testBuildPassesModelsThrough(self):
        model = build(Program())
        self.assertIs(build(model), model)

    def testEmptyModel(self):
        model = SchemaModel()
        self.assertEqual(model.commands, ())
        self.assertIsNone(model.default)
        self.assertEqual(model.globals, ())


if __name__ == "__main__":
    unittest.main()

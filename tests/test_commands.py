import pytest

from scenekit.core.commands import (CommandError, OneArgCommand,
                                    TwoArgCommand, ZeroArgCommand,
                                    command_from_task, expected_arity,
                                    parse_command)


class TestParseCommand:

    def test_plain_string(self):
        assert parse_command("turnOn") == ZeroArgCommand("turnOn")

    def test_single_item_tuple(self):
        assert parse_command(("turnOn",)) == ZeroArgCommand("turnOn")

    def test_one_argument(self):
        command = parse_command(("setValue", 50))
        assert command == OneArgCommand("setValue", 50)
        assert command.args == (50,)
        assert command.to_fields() == {"cmd": "setValue", "value": 50}

    def test_two_arguments_from_list(self):
        command = parse_command(["setThermostatSetpoint", 1, 21])
        assert command == TwoArgCommand("setThermostatSetpoint", 1, 21)
        assert command.to_fields() == {"cmd": "setThermostatSetpoint", "arg1": 1, "arg2": 21}

    def test_unknown_commands_may_take_arguments(self):
        assert parse_command(("customAction", "x")).args == ("x",)

    @pytest.mark.parametrize("spec", ["setValue", ("setMode",), ("setSlider", 1), "", ("",), (), ("a", 1, 2, 3), 42])
    def test_rejected(self, spec):
        with pytest.raises(CommandError):
            parse_command(spec)

    def test_command_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_command("pressButton")


def test_expected_arity():
    assert expected_arity("turnOn") == 0
    assert expected_arity("setVolume") == 1
    assert expected_arity("setProperty") == 2


class TestCommandFromTask:

    def test_zero_arg(self):
        assert command_from_task({"time": 1, "cmd": "turnOff"}) == ZeroArgCommand("turnOff")

    def test_value(self):
        assert command_from_task({"cmd": "setValue", "value": 0}) == OneArgCommand("setValue", 0)

    def test_args_take_precedence_over_value(self):
        task = {"cmd": "setProperty", "value": 9, "arg1": "a", "arg2": False}
        assert command_from_task(task) == TwoArgCommand("setProperty", "a", False)


@pytest.mark.parametrize("spec", [
    ("setValue", None),
    ("customAction", None),
    ["setProperty", "a", None],
    ("setSlider", None, 1),
    OneArgCommand("setVolume", None),
])
def test_null_arguments_are_rejected(spec):
    with pytest.raises(CommandError):
        parse_command(spec)


def test_falsy_arguments_are_kept():
    assert parse_command(("setValue", 0)).args == (0,)
    assert parse_command(("setProperty", "", False)).args == ("", False)

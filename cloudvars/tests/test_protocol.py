import json
import math

import pytest

from cloudvars.errors import ProtocolError
from cloudvars.protocol import CLOUD_PREFIX, build_handshake, build_set, decode_frame, decode_line, is_scalar, to_variable_name


@pytest.mark.parametrize("name", ["foo", "☁ foo", "", "☁ ", "☁☁ x", " spaced"])
def test_prefix_normalisation_is_idempotent(name):
    once = to_variable_name(name)
    assert once.startswith(CLOUD_PREFIX)
    assert to_variable_name(once) == once


@pytest.mark.parametrize("value", ["", "text", 0, -3, 1.5, True, False])
def test_scalars_are_accepted(value):
    assert is_scalar(value)


@pytest.mark.parametrize("value", [None, [1], {"a": 1}, math.nan, math.inf, b"bytes", object()])
def test_non_scalars_are_rejected(value):
    assert not is_scalar(value)


def test_build_handshake_wire_format():
    frame = build_handshake(project_id="123", user="player0042")
    assert frame == '{"method":"handshake","project_id":"123","user":"player0042"}'


def test_build_set_keeps_key_order_and_value_type():
    frame = build_set(project_id="123", user="player0042", name="☁ score", value=True)
    assert list(json.loads(frame)) == ["method", "project_id", "user", "name", "value"]
    assert json.loads(frame)["value"] is True
    assert json.loads(build_set(project_id="1", user="u", name="☁ n", value=7))["value"] == 7
    assert json.loads(build_set(project_id="1", user="u", name="☁ s", value="7"))["value"] == "7"


def test_decode_frame_handles_multiple_lines_and_blank_lines():
    frame = '{"method":"set","name":"☁ a","value":1}\n\n{"method":"set","name":"☁ b","value":"x"}\n'
    result = decode_frame(frame)
    assert result.ok
    assert [(m.name, m.value) for m in result.messages] == [("☁ a", 1), ("☁ b", "x")]


def test_decode_line_ignores_unknown_methods():
    assert decode_line('{"method":"rename","name":"☁ a"}') is None
    assert decode_line('{"name":"☁ a","value":1}') is None


@pytest.mark.parametrize(
    "line, message",
    [
        ("not json", "Received invalid JSON"),
        ("null", "Received invalid object"),
        ("0", "Received invalid object"),
        ("[1, 2]", "Received invalid object"),
        ('{"method":"set","name":5,"value":1}', "Received invalid name"),
        ('{"method":"set","value":1}', "Received invalid name"),
        ('{"method":"set","name":"☁ a","value":[1]}', "Received invalid value"),
        ('{"method":"set","name":"☁ a","value":null}', "Received invalid value"),
        ('{"method":"set","name":"☁ a","value":NaN}', "Received invalid value"),
    ],
)
def test_decode_line_reports_protocol_errors(line, message):
    decoded = decode_line(line)
    assert isinstance(decoded, ProtocolError)
    assert str(decoded).startswith(message)


def test_decode_frame_discards_valid_lines_when_a_later_line_is_invalid():
    result = decode_frame('{"method":"set","name":"☁ a","value":1}\n{oops')
    assert not result.ok
    assert result.messages == []
    assert "invalid JSON" in str(result.error)

"""
Tests for Message and MessageType
"""

import itertools

import pytest

from splunk_rest.messages import Message, MessageType


def compare(a, b):
    return (a > b) - (a < b)


MESSAGES = [
    Message(MessageType.WARN, "disk low"),
    Message(MessageType.WARN, "cpu high"),
    Message(MessageType.ERROR, "disk low"),
    Message(MessageType.DEBUG, "zzz"),
    Message(MessageType.FATAL, ""),
    Message(MessageType.INFO, "disk low"),
]


class TestMessage:
    """Test cases for Message"""

    @pytest.mark.parametrize("a,b", list(itertools.product(MESSAGES, repeat=2)))
    def test_compare_is_antisymmetric(self, a, b):
        assert compare(a, b) == -compare(b, a)

    @pytest.mark.parametrize("a,b", list(itertools.product(MESSAGES, repeat=2)))
    def test_order_follows_type_then_text(self, a, b):
        assert compare(a, b) == compare((a.type, a.text), (b.type, b.text))

    def test_sorting(self):
        ordered = sorted(MESSAGES)
        assert [str(m) for m in ordered] == [
            "DEBUG: zzz",
            "INFO: disk low",
            "WARN: cpu high",
            "WARN: disk low",
            "ERROR: disk low",
            "FATAL: ",
        ]

    def test_equality_and_hash(self):
        a = Message(MessageType.WARN, "disk low")
        b = Message(MessageType.WARN, "disk low")
        assert a == b
        assert hash(a) == hash(b)
        assert a != Message(MessageType.ERROR, "disk low")
        assert a != Message(MessageType.WARN, "disk full")

    def test_integer_type_is_coerced(self):
        message = Message(3, "disk low")
        assert message.type is MessageType.WARN
        assert message == Message(MessageType.WARN, "disk low")

    @pytest.mark.parametrize("severity", [0, 6, -1, "WARN", None])
    def test_out_of_range_type_rejected(self, severity):
        with pytest.raises(ValueError):
            Message(severity, "disk low")

    def test_text_must_be_string(self):
        with pytest.raises(TypeError):
            Message(MessageType.INFO, None)

    def test_immutable(self):
        message = Message(MessageType.INFO, "hello")
        with pytest.raises(AttributeError):
            message.text = "changed"


class TestMessageType:
    """Test cases for MessageType.parse"""

    @pytest.mark.parametrize("value,expected", [
        ("DEBUG", MessageType.DEBUG),
        ("info", MessageType.INFO),
        ("Information", MessageType.INFO),
        ("WARN", MessageType.WARN),
        ("warning", MessageType.WARN),
        ("ERROR", MessageType.ERROR),
        (" FATAL ", MessageType.FATAL),
    ])
    def test_parse(self, value, expected):
        assert MessageType.parse(value) is expected

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            MessageType.parse("CRITICAL")

    def test_severity_order(self):
        assert MessageType.DEBUG < MessageType.INFO < MessageType.WARN < MessageType.ERROR < MessageType.FATAL

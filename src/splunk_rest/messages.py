"""
Diagnostic messages returned by Splunk in ``<messages>`` blocks
"""

from dataclasses import dataclass
from enum import IntEnum


class MessageType(IntEnum):
    """Message severity, ordered from least to most severe"""

    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4
    FATAL = 5

    @classmethod
    def parse(cls, value: str) -> "MessageType":
        """Map the ``type`` attribute of a ``<msg>`` element to a MessageType"""
        name = value.strip().upper()
        name = _ALIASES.get(name, name)
        try:
            return cls[name]
        except KeyError:
            raise ValueError(f"Unknown message type: {value!r}") from None


_ALIASES = {
    "INFORMATION": "INFO",
    "WARNING": "WARN",
}


@dataclass(frozen=True, order=True)
class Message:
    """A (severity, text) pair; sorts by severity, then by text"""

    type: MessageType
    text: str

    def __post_init__(self):
        try:
            severity = MessageType(self.type)
        except ValueError:
            raise ValueError(f"Message type out of range: {self.type!r}") from None
        if not isinstance(self.text, str):
            raise TypeError("Message text must be a string")
        object.__setattr__(self, "type", severity)

    def __str__(self) -> str:
        return f"{self.type.name}: {self.text}"

from typing import List, Protocol


class MessageAppender(Protocol):
    """What the chat handlers need from a history container."""

    def history(self) -> List[dict]:
        """Ordered messages, oldest first."""
        ...

    def append(self, role: str, content: str) -> dict:
        """Append and persist one message; returns the stored message."""
        ...

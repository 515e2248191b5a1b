"""
Error types raised while reading SQL dump statements.
"""

from typing import Optional


class SqlSyntaxError(ValueError):
    """
    A matched INSERT statement whose VALUES payload violates the tuple grammar.

    Attributes:
        position: 0-based character offset into the payload
        char: offending character, or None at end of input
        state: parser state the machine was in when it failed
        reason: short description of what was expected
        line_number: 1-based dump line, filled in by SqlReader
    """

    def __init__(self, position: int, char: Optional[str], state, reason: str):
        self.position = position
        self.char = char
        self.state = state
        self.reason = reason
        self.line_number: Optional[int] = None
        super().__init__(position, char, state, reason)

    def __str__(self):
        where = f"line {self.line_number}, " if self.line_number is not None else ""
        found = "end of input" if self.char is None else repr(self.char)
        state_name = getattr(self.state, "name", self.state)
        return f"{where}offset {self.position}: {self.reason} (found {found} in state {state_name})"


class ReaderClosedError(OSError):
    """Read attempted on a SqlReader after close()."""

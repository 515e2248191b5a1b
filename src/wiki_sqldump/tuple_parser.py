"""
VALUES PAYLOAD PARSER

Finite-state machine that turns the payload of a mysqldump INSERT statement,

    (1,'a',NULL),(2,'b\\'s',3.5)

into a list of rows of typed values. The grammar:

    Payload      := Tuple (',' Tuple)*
    Tuple        := '(' Item (',' Item)* ')'
    Item         := Number | QuotedString | 'NULL'
    Number       := maximal run of [0-9.-]
    QuotedString := "'" (char except unescaped "'")* "'"

Each state has one handler. A handler gets the current character and returns
either the next State or a SqlSyntaxError describing why the character was
rejected. Nothing is raised inside the machine; parse_tuples() raises the
error once the machine has stopped.
"""

from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Union

from .errors import SqlSyntaxError
from .values import INT64_MAX, INT64_MIN, NULL, Batch, Float, Integer, Text, Value

NUMBER_CHARS = frozenset("0123456789-.")
ESCAPABLE_CHARS = frozenset("'\"\\")


class State(Enum):
    AWAIT_FIRST_OPEN = "await-first-open"
    AWAIT_ITEM = "await-item"
    IN_NUMBER = "in-number"
    IN_STRING = "in-string"
    IN_STRING_ESCAPE = "in-string-escape"
    IN_NULL_TOKEN = "in-null-token"
    AFTER_ITEM = "after-item"
    AWAIT_NEXT_ITEM = "await-next-item"
    AFTER_TUPLE = "after-tuple"
    AWAIT_NEXT_OPEN = "await-next-open"


# What each non-accepting state still needed when the payload ran out
_EXPECTED_AT_END: Dict[State, str] = {
    State.AWAIT_FIRST_OPEN: "expected '('",
    State.AWAIT_ITEM: "expected number, quoted string or NULL",
    State.IN_NUMBER: "unterminated number, expected ',' or ')'",
    State.IN_STRING: "unterminated quoted string",
    State.IN_STRING_ESCAPE: "unterminated escape sequence",
    State.IN_NULL_TOKEN: "unterminated NULL, expected ',' or ')'",
    State.AFTER_ITEM: "expected ',' or ')'",
    State.AWAIT_NEXT_ITEM: "expected number, quoted string or NULL after ','",
    State.AWAIT_NEXT_OPEN: "expected '(' after ','",
}


class ParseResult(NamedTuple):
    """Outcome of scan_tuples(): exactly one of rows/error is set."""
    rows: Optional[Batch]
    error: Optional[SqlSyntaxError]


Transition = Union[State, SqlSyntaxError]


class _TupleMachine:
    """Single-use machine over one payload string."""

    def __init__(self, text: str):
        self.text = text
        self.rows: Batch = []
        self.items: List[Value] = []
        self.token_start = -1
        # Unescaped pieces of the current string; empty until a backslash shows up
        self.pieces: List[str] = []
        self.segment_start = -1
        self.handlers = {
            State.AWAIT_FIRST_OPEN: self._await_open,
            State.AWAIT_ITEM: self._await_item,
            State.IN_NUMBER: self._in_number,
            State.IN_STRING: self._in_string,
            State.IN_STRING_ESCAPE: self._in_string_escape,
            State.IN_NULL_TOKEN: self._in_null_token,
            State.AFTER_ITEM: self._after_item,
            State.AWAIT_NEXT_ITEM: self._await_item,
            State.AFTER_TUPLE: self._after_tuple,
            State.AWAIT_NEXT_OPEN: self._await_open,
        }

    def run(self) -> ParseResult:
        state = State.AWAIT_FIRST_OPEN
        handlers = self.handlers
        for i, c in enumerate(self.text):
            outcome = handlers[state](i, c, state)
            if isinstance(outcome, SqlSyntaxError):
                return ParseResult(None, outcome)
            state = outcome

        if state is not State.AFTER_TUPLE:
            error = SqlSyntaxError(len(self.text), None, state, _EXPECTED_AT_END[state])
            return ParseResult(None, error)
        return ParseResult(self.rows, None)

    # ------------------------------------------------------------------------
    # Structural states
    # ------------------------------------------------------------------------

    def _await_open(self, i: int, c: str, state: State) -> Transition:
        if c == "(":
            return State.AWAIT_ITEM
        return SqlSyntaxError(i, c, state, "expected '('")

    def _await_item(self, i: int, c: str, state: State) -> Transition:
        if c in NUMBER_CHARS:
            self.token_start = i
            return State.IN_NUMBER
        if c == "'":
            self.token_start = self.segment_start = i + 1
            self.pieces = []
            return State.IN_STRING
        if c == "N":
            self.token_start = i
            return State.IN_NULL_TOKEN
        return SqlSyntaxError(i, c, state, "expected number, quoted string or NULL")

    def _after_item(self, i: int, c: str, state: State) -> Transition:
        if c == "," or c == ")":
            return self._end_item(c)
        return SqlSyntaxError(i, c, state, "expected ',' or ')'")

    def _after_tuple(self, i: int, c: str, state: State) -> Transition:
        if c == ",":
            return State.AWAIT_NEXT_OPEN
        return SqlSyntaxError(i, c, state, "expected ',' or end of payload")

    def _end_item(self, c: str) -> State:
        if c == ",":
            return State.AWAIT_NEXT_ITEM
        self.rows.append(tuple(self.items))
        self.items = []
        return State.AFTER_TUPLE

    # ------------------------------------------------------------------------
    # Token states
    # ------------------------------------------------------------------------

    def _in_number(self, i: int, c: str, state: State) -> Transition:
        if c in NUMBER_CHARS:
            return state
        if c == "," or c == ")":
            value = self._number_value(i, state)
            if isinstance(value, SqlSyntaxError):
                return value
            self.items.append(value)
            return self._end_item(c)
        return SqlSyntaxError(i, c, state, "expected digit, '-', '.', ',' or ')'")

    def _number_value(self, end: int, state: State) -> Union[Value, SqlSyntaxError]:
        # The scanner only collects [0-9.-]; whether the run is a real
        # literal is decided here
        literal = self.text[self.token_start:end]
        try:
            if "." not in literal:
                number = int(literal)
                if not INT64_MIN <= number <= INT64_MAX:
                    return SqlSyntaxError(self.token_start, literal[0], state,
                                          f"integer out of 64-bit range: {literal}")
                return Integer(number)
            return Float(float(literal))
        except ValueError:
            return SqlSyntaxError(self.token_start, literal[0], state,
                                  f"invalid numeric literal {literal!r}")

    def _in_string(self, i: int, c: str, state: State) -> Transition:
        if c == "'":
            if self.pieces:
                self.pieces.append(self.text[self.segment_start:i])
                content = "".join(self.pieces)
                self.pieces = []
            else:
                content = self.text[self.token_start:i]
            self.items.append(Text(content))
            return State.AFTER_ITEM
        if c == "\\":
            self.pieces.append(self.text[self.segment_start:i])
            return State.IN_STRING_ESCAPE
        return state

    def _in_string_escape(self, i: int, c: str, state: State) -> Transition:
        if c in ESCAPABLE_CHARS:
            self.pieces.append(c)
            self.segment_start = i + 1
            return State.IN_STRING
        return SqlSyntaxError(i, c, state, "invalid escape, expected \\', \\\" or \\\\")

    def _in_null_token(self, i: int, c: str, state: State) -> Transition:
        if "A" <= c <= "Z":
            return state
        if c == "," or c == ")":
            word = self.text[self.token_start:i]
            if word != "NULL":
                return SqlSyntaxError(self.token_start, word[0], state,
                                      f"unknown keyword {word!r}, expected NULL")
            self.items.append(NULL)
            return self._end_item(c)
        return SqlSyntaxError(i, c, state, "expected NULL")


def scan_tuples(text: str) -> ParseResult:
    """Run the machine over text and return rows or the error, without raising."""
    return _TupleMachine(text).run()


def parse_tuples(text: str) -> Batch:
    """
    Parse a VALUES payload into rows.

    Raises:
        SqlSyntaxError: text does not match the tuple grammar
    """
    result = scan_tuples(text)
    if result.error is not None:
        raise result.error
    return result.rows

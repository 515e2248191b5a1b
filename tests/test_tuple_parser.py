import pytest

from wiki_sqldump.errors import SqlSyntaxError
from wiki_sqldump.tuple_parser import State, parse_tuples, scan_tuples
from wiki_sqldump.values import NULL, Float, Integer, Text, format_tuples


def syntax_error(payload):
    with pytest.raises(SqlSyntaxError) as excinfo:
        parse_tuples(payload)
    return excinfo.value


class TestParseTuples:
    def test_mixed_values(self):
        rows = parse_tuples("(1,'a',NULL),(2,'b\\'s',3.5)")
        assert rows == [
            (Integer(1), Text("a"), NULL),
            (Integer(2), Text("b's"), Float(3.5)),
        ]

    def test_single_item_tuple(self):
        assert parse_tuples("(42)") == [(Integer(42),)]

    def test_negative_and_fractional_numbers(self):
        rows = parse_tuples("(-7,-0.25,.5,10.)")
        assert rows == [(Integer(-7), Float(-0.25), Float(0.5), Float(10.0))]
        assert isinstance(rows[0][0], Integer)
        assert isinstance(rows[0][3], Float)

    def test_int64_bounds(self):
        rows = parse_tuples("(9223372036854775807,-9223372036854775808)")
        assert rows == [(Integer(2 ** 63 - 1), Integer(-(2 ** 63)))]

    def test_rows_keep_their_own_arity(self):
        rows = parse_tuples("(1,2,3),(4)")
        assert [len(r) for r in rows] == [3, 1]

    def test_string_escapes(self):
        rows = parse_tuples("('a\\\\b','say \\\"hi\\\"','it\\'s')")
        assert rows == [(Text("a\\b"), Text('say "hi"'), Text("it's"))]

    def test_string_with_structural_characters(self):
        rows = parse_tuples("('(1),(2)','NULL',',')")
        assert rows == [(Text("(1),(2)"), Text("NULL"), Text(","))]

    def test_empty_string(self):
        assert parse_tuples("('')") == [(Text(""),)]

    def test_unicode_text(self):
        assert parse_tuples("('Zürich','東京')") == [(Text("Zürich"), Text("東京"))]

    def test_each_call_returns_a_fresh_batch(self):
        first = parse_tuples("(1)")
        second = parse_tuples("(1)")
        assert first == second
        assert first is not second

    def test_round_trip_through_format_tuples(self):
        rows = [
            (Integer(0), Integer(-12), Float(1e-05), Float(-2.5), Float(1e20)),
            (Text("plain"), Text("quote ' and \\ and \""), NULL, Text("")),
        ]
        assert parse_tuples(format_tuples(rows)) == rows


class TestSyntaxErrors:
    def test_empty_payload(self):
        err = syntax_error("")
        assert err.position == 0
        assert err.char is None
        assert err.state is State.AWAIT_FIRST_OPEN

    def test_dangling_top_level_comma(self):
        err = syntax_error("(1),(2),")
        assert err.position == 8
        assert err.char is None
        assert err.state is State.AWAIT_NEXT_OPEN

    def test_dangling_comma_inside_tuple(self):
        err = syntax_error("(1,)")
        assert err.position == 3
        assert err.char == ")"
        assert err.state is State.AWAIT_NEXT_ITEM

    def test_empty_tuple(self):
        err = syntax_error("()")
        assert err.position == 1
        assert err.char == ")"
        assert err.state is State.AWAIT_ITEM

    def test_invalid_escape(self):
        err = syntax_error("(1,'a\\q')")
        assert err.char == "q"
        assert err.position == 6
        assert err.state is State.IN_STRING_ESCAPE

    def test_unterminated_string(self):
        err = syntax_error("(1,'2)")
        assert err.position == 6
        assert err.char is None
        assert err.state is State.IN_STRING

    def test_leading_garbage(self):
        err = syntax_error(" (1)")
        assert err.position == 0
        assert err.char == " "

    def test_trailing_garbage(self):
        err = syntax_error("(1);")
        assert err.position == 3
        assert err.state is State.AFTER_TUPLE

    def test_missing_close(self):
        err = syntax_error("(1")
        assert err.char is None
        assert err.state is State.IN_NUMBER

    def test_space_after_comma(self):
        err = syntax_error("(1, 2)")
        assert err.position == 3
        assert err.char == " "

    @pytest.mark.parametrize("literal", ["1--2", "1.2.3", "-", ".", "1-"])
    def test_malformed_number_reported_at_token_start(self, literal):
        err = syntax_error(f"(5,{literal})")
        assert err.position == 3
        assert err.state is State.IN_NUMBER
        assert literal in err.reason

    def test_integer_out_of_range(self):
        err = syntax_error("(9223372036854775808)")
        assert err.position == 1
        assert "64-bit" in err.reason

    def test_lowercase_null(self):
        err = syntax_error("(null)")
        assert err.char == "n"
        assert err.state is State.AWAIT_ITEM

    def test_other_uppercase_word(self):
        err = syntax_error("(1,NUL)")
        assert err.position == 3
        assert err.state is State.IN_NULL_TOKEN
        assert "NUL" in err.reason

    def test_word_not_starting_with_n(self):
        err = syntax_error("(TRUE)")
        assert err.char == "T"
        assert err.state is State.AWAIT_ITEM

    def test_character_after_string(self):
        err = syntax_error("('a'b)")
        assert err.position == 4
        assert err.state is State.AFTER_ITEM

    def test_message_names_position_and_state(self):
        err = syntax_error("(1,'a\\q')")
        message = str(err)
        assert "offset 6" in message
        assert "'q'" in message
        assert "IN_STRING_ESCAPE" in message


class TestScanTuples:
    def test_success_has_no_error(self):
        result = scan_tuples("(1)")
        assert result.rows == [(Integer(1),)]
        assert result.error is None

    def test_failure_returns_error_without_partial_rows(self):
        result = scan_tuples("(1),(2),(x)")
        assert result.rows is None
        assert isinstance(result.error, SqlSyntaxError)
        assert result.error.char == "x"

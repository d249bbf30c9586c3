import pytest

from TagFormula import error as E
from TagFormula.TagEngine import (
    LEFT,
    LITERAL,
    OPERAND,
    OPERANDS,
    RIGHT,
    TAG,
    Token,
    TokenSequence,
    check_side,
    classify_input,
    ends_with_operand,
    serialize_expression,
)


def seq(*values: str) -> TokenSequence:
    return TokenSequence([Token.literal(v) for v in values])


@pytest.mark.parametrize("operand", OPERANDS)
def test_literal_then_operand_is_split_in_reading_order(operand: str) -> None:
    tokens, buffer = classify_input("12" + operand)
    assert [(t.kind, t.value) for t in tokens] == [(LITERAL, "12"), (OPERAND, operand)]
    assert buffer == ""


@pytest.mark.parametrize("operand", OPERANDS)
def test_single_operand_gives_exactly_one_token(operand: str) -> None:
    tokens, buffer = classify_input(operand)
    assert len(tokens) == 1
    assert tokens[0].kind == OPERAND
    assert tokens[0].value == operand
    assert buffer == ""


@pytest.mark.parametrize(
    "value, expected_buffer",
    [
        pytest.param("", ""),
        pytest.param(" ", ""),
        pytest.param("a", "a"),
        pytest.param("ap", "ap"),
        pytest.param(" ap", " ap"),
        pytest.param("apple pie ", "apple pie "),
        pytest.param("3.5", "3.5"),
    ],
)
def test_text_without_operand_stays_pending(value: str, expected_buffer: str) -> None:
    tokens, buffer = classify_input(value)
    assert tokens == []
    assert buffer == expected_buffer


def test_whitespace_before_operand_never_becomes_a_token() -> None:
    tokens, buffer = classify_input("  *")
    assert [t.value for t in tokens] == ["*"]
    assert buffer == ""


def test_multi_word_literal_keeps_internal_spaces() -> None:
    tokens, _ = classify_input("apple pie +")
    assert tokens[0].value == "apple pie "


@pytest.mark.parametrize(
    "value, expected",
    [
        pytest.param("", False),
        pytest.param("12", False),
        pytest.param("12+", True),
        pytest.param("(", True),
        pytest.param("a%", True),
        pytest.param("+a", False),
    ],
)
def test_ends_with_operand(value: str, expected: bool) -> None:
    assert ends_with_operand(value) is expected


@pytest.mark.parametrize("value", ["", "   ", None])
def test_token_refuses_empty_value(value) -> None:
    with pytest.raises(E.TokenError) as exc_info:
        Token(value, value)
    assert exc_info.value.code == "7001"


def test_tag_token_display_name_falls_back_to_value() -> None:
    token = Token(None, "5", TAG)
    assert token.display_name == "5"
    assert token.is_tag


def test_append_and_prepend_keep_block_order() -> None:
    tokens = seq("3")
    tokens.append([Token.operand("+"), Token.literal("4")])
    tokens.prepend([Token.literal("2"), Token.operand("*")])
    assert tokens.values() == ["2", "*", "3", "+", "4"]


def test_insert_dispatches_on_side() -> None:
    tokens = seq("x")
    tokens.insert(LEFT, [Token.literal("a")])
    tokens.insert(RIGHT, [Token.literal("b")])
    assert tokens.values() == ["a", "x", "b"]


def test_unknown_side_is_rejected() -> None:
    with pytest.raises(ValueError):
        check_side("middle")


def test_delete_middle_token_shifts_the_rest() -> None:
    tokens = seq("3", "+", "4")
    last = tokens[2]
    removed = tokens.delete_at(1)
    assert removed.value == "+"
    assert len(tokens) == 2
    assert tokens[1] is last
    assert all(t is not removed for t in tokens)


@pytest.mark.parametrize("index", [3, 10, -1, None])
def test_stale_delete_is_a_noop(index) -> None:
    tokens = seq("3", "+", "4")
    assert tokens.delete_at(index) is None
    assert tokens.values() == ["3", "+", "4"]


def test_two_rapid_deletes_of_the_last_index() -> None:
    tokens = seq("1", "2")
    assert tokens.delete_at(1) is not None
    assert tokens.delete_at(1) is None
    assert tokens.values() == ["1"]


def test_serialize_joins_values_with_single_spaces() -> None:
    tokens = seq("3", "+", "4")
    assert serialize_expression(tokens) == "3 + 4"
    assert serialize_expression(tokens).split(" ") == tokens.values()


@pytest.mark.parametrize(
    "pending, expected",
    [
        pytest.param("", "3 +"),
        pytest.param("   ", "3 +"),
        pytest.param("4", "3 + 4"),
    ],
)
def test_serialize_adds_non_blank_pending_text(pending: str, expected: str) -> None:
    tokens = seq("3", "+")
    assert serialize_expression(tokens, pending) == expected
    assert tokens.values() == ["3", "+"]


def test_serialize_uses_value_not_display_name() -> None:
    tokens = TokenSequence([Token("apple", "5", TAG), Token.operand("*"), Token.literal("2")])
    assert serialize_expression(tokens) == "5 * 2"

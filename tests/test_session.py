import pytest

from TagFormula import error as E
from TagFormula.FormulaSession import FormulaSession
from TagFormula.SuggestionEngine import CatalogState, SuggestionEntry
from TagFormula.TagEngine import LEFT, RIGHT, TAG, Token

CATALOG = [
    {"name": "apple", "value": "5", "inputs": {"source": "orchard"}, "category": "fruit"},
    {"name": "banana", "value": "7"},
]


@pytest.fixture
def session() -> FormulaSession:
    s = FormulaSession()
    s.on_catalog_loaded(CATALOG)
    return s


def type_text(session: FormulaSession, side: str, text: str) -> None:
    """Feed text one keystroke at a time, the way an edit slot reports it."""
    for char in text:
        session.on_buffer_change(side, session.buffer(side) + char)


def test_right_commit_appends_literal_and_operand(session: FormulaSession) -> None:
    session.on_buffer_change(RIGHT, "12+")
    assert session.tokens.values() == ["12", "+"]
    assert session.right_buffer == ""


def test_single_operand_on_empty_sequence(session: FormulaSession) -> None:
    session.on_buffer_change(RIGHT, "(")
    assert session.tokens.values() == ["("]
    assert session.right_buffer == ""


def test_typing_keystroke_by_keystroke(session: FormulaSession) -> None:
    type_text(session, RIGHT, "3+4*")
    assert session.tokens.values() == ["3", "+", "4", "*"]
    type_text(session, RIGHT, "2")
    assert session.right_buffer == "2"


def test_left_commit_prepends_block_in_reading_order(session: FormulaSession) -> None:
    session.on_buffer_change(RIGHT, "3+")
    session.on_buffer_change(RIGHT, "4")
    assert session.left_visible
    session.on_buffer_change(LEFT, "2*")
    assert session.tokens.values() == ["2", "*", "3", "+"]
    assert session.left_buffer == ""
    assert session.right_buffer == "4"


def test_left_slot_hidden_while_sequence_is_empty(session: FormulaSession) -> None:
    assert not session.left_visible
    session.on_buffer_change(RIGHT, "1+")
    assert session.left_visible
    session.on_token_delete(0)
    session.on_token_delete(0)
    assert not session.left_visible


def test_typing_filters_suggestions(session: FormulaSession) -> None:
    session.on_buffer_change(RIGHT, "ap")
    assert [s.name for s in session.filtered_suggestions] == ["apple"]
    session.on_buffer_change(RIGHT, "ap+")
    assert session.filtered_suggestions == []


def test_left_slot_drives_suggestions_too(session: FormulaSession) -> None:
    session.on_buffer_change(RIGHT, "1+")
    session.on_buffer_change(LEFT, "BAN")
    assert [s.name for s in session.filtered_suggestions] == ["banana"]


def test_select_with_empty_right_buffer_prepends(session: FormulaSession) -> None:
    session.on_buffer_change(RIGHT, "+")
    session.on_buffer_change(RIGHT, "1")
    session.on_buffer_change(RIGHT, "")
    session.on_buffer_change(LEFT, "ap")

    token = session.on_suggestion_select(SuggestionEntry("apple", "5"))

    assert session.tokens[0] is token
    assert token.kind == TAG
    assert session.tokens.values() == ["5", "+"]
    assert session.left_buffer == ""
    assert session.right_buffer == ""
    assert session.filtered_suggestions == []
    assert session.focus == RIGHT


def test_select_while_typing_on_the_right_appends(session: FormulaSession) -> None:
    session.on_buffer_change(RIGHT, "2*")
    session.on_buffer_change(RIGHT, "app")
    session.on_suggestion_select(session.filtered_suggestions[0])
    assert session.tokens.values() == ["2", "*", "5"]
    assert session.tokens[-1].display_name == "apple"
    assert session.right_buffer == ""


def test_selected_tag_keeps_inputs_and_category(session: FormulaSession) -> None:
    session.on_buffer_change(RIGHT, "apple")
    token = session.on_suggestion_select(CATALOG[0])
    assert token.inputs == {"source": "orchard"}
    assert token.category == "fruit"


def test_select_catalog_entry_with_blank_value() -> None:
    s = FormulaSession()
    s.on_catalog_loaded([{"name": "apple", "value": ""}])
    s.on_buffer_change(RIGHT, "ap")
    token = s.on_suggestion_select(s.filtered_suggestions[0])
    assert token.value == "apple"
    assert s.tokens.values() == ["apple"]
    assert s.right_buffer == ""
    assert s.filtered_suggestions == []


def test_select_entry_without_value_changes_nothing(session: FormulaSession) -> None:
    session.on_buffer_change(RIGHT, "gh")
    assert session.on_suggestion_select(SuggestionEntry(None, None)) is None
    assert len(session.tokens) == 0
    assert session.right_buffer == "gh"


def test_delete_middle_token(session: FormulaSession) -> None:
    session.on_buffer_change(RIGHT, "3+")
    session.on_buffer_change(RIGHT, "4")
    session.on_commit()
    removed = session.on_token_delete(1)
    assert removed.value == "+"
    assert session.tokens.values() == ["3", "4"]


def test_stale_delete_changes_nothing(session: FormulaSession) -> None:
    session.on_buffer_change(RIGHT, "3+")
    assert session.on_token_delete(5) is None
    assert session.tokens.values() == ["3", "+"]


def test_right_backspace_removes_last_token_only_when_buffer_empty(session: FormulaSession) -> None:
    session.on_buffer_change(RIGHT, "3+")
    session.on_buffer_change(RIGHT, "4")
    assert session.on_right_backspace() is None
    assert len(session.tokens) == 2
    session.on_buffer_change(RIGHT, "")
    assert session.on_right_backspace().value == "+"
    assert session.tokens.values() == ["3"]


def test_right_backspace_on_empty_sequence_is_harmless(session: FormulaSession) -> None:
    assert session.on_right_backspace() is None


def test_commit_evaluates_sequence() -> None:
    seen = []

    def evaluator(expression: str) -> int:
        seen.append(expression)
        return 7

    s = FormulaSession(evaluator=evaluator)
    s.tokens.append([Token.literal("3"), Token.operand("+"), Token.literal("4")])
    assert s.on_commit() == "7"
    assert seen == ["3 + 4"]
    assert s.final_result == "7"
    assert s.last_error is None


def test_commit_with_real_engine(session: FormulaSession) -> None:
    session.on_buffer_change(RIGHT, "3+")
    session.on_buffer_change(RIGHT, "4")
    assert session.expression() == "3 + 4"
    assert session.on_commit() == "7"
    assert session.tokens.values() == ["3", "+", "4"]
    assert session.right_buffer == ""


def test_commit_with_tag_values(session: FormulaSession) -> None:
    session.on_buffer_change(RIGHT, "2*")
    session.on_buffer_change(RIGHT, "ban")
    session.on_suggestion_select(session.filtered_suggestions[0])
    assert session.on_commit() == "14"


def test_commit_of_empty_input_clears_result() -> None:
    calls = []
    s = FormulaSession(evaluator=lambda expression: calls.append(expression))
    s.on_buffer_change(RIGHT, " ")
    assert s.on_commit() == ""
    assert calls == []
    assert len(s.tokens) == 0


def test_malformed_expression_keeps_tokens(session: FormulaSession) -> None:
    session.on_buffer_change(RIGHT, "(")
    session.on_buffer_change(RIGHT, "3+")
    session.on_commit()
    assert session.tokens.values() == ["(", "3", "+"]
    assert isinstance(session.last_error, E.MathError)
    assert session.final_result.startswith("Error ")


def test_error_is_cleared_by_next_good_commit(session: FormulaSession) -> None:
    session.on_buffer_change(RIGHT, "3+")
    session.on_commit()
    assert session.last_error is not None
    session.on_buffer_change(RIGHT, "1")
    assert session.on_commit() == "4"
    assert session.last_error is None


def test_catalog_failure_degrades_to_no_suggestions() -> None:
    s = FormulaSession()
    s.on_catalog_failed(E.CatalogError("down", code="6001"))
    assert s.catalog.state == CatalogState.FAILED
    s.on_buffer_change(RIGHT, "ap")
    assert s.filtered_suggestions == []
    s.on_buffer_change(RIGHT, "ap+")
    assert s.tokens.values() == ["ap", "+"]


def test_catalog_arriving_while_typing_refreshes_suggestions() -> None:
    s = FormulaSession()
    s.on_buffer_change(RIGHT, "an")
    assert s.filtered_suggestions == []
    s.on_catalog_loaded(CATALOG)
    assert [e.name for e in s.filtered_suggestions] == ["banana"]


def test_on_change_called_after_each_operation() -> None:
    calls = []
    s = FormulaSession(evaluator=lambda expression: "1", on_change=calls.append)
    s.on_catalog_loaded(CATALOG)
    s.on_buffer_change(RIGHT, "1+")
    s.on_token_delete(1)
    s.on_token_delete(9)
    s.on_commit()
    assert len(calls) == 4
    assert all(c is s for c in calls)


def test_unknown_side_is_rejected(session: FormulaSession) -> None:
    with pytest.raises(ValueError):
        session.on_buffer_change("top", "1")

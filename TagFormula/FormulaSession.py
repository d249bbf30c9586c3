# FormulaSession.py
"""""
Session state of one formula input.

The session owns everything the UI renders: the token sequence, the two edit
slots (left of the first chip, right of the last chip), the visible
suggestions, the suggestion catalog and the final result. The UI only reads
these attributes and calls the on_* methods; `on_change` is invoked after
each of them so the UI can re-render.

All methods run on the UI thread, one user event at a time.
"""""

from . import config_manager as config_manager
from . import error as E
from . import MathEngine as MathEngine
from .TagEngine import LEFT, RIGHT, Token, TokenSequence, check_side, classify_input, serialize_expression
from .SuggestionEngine import Catalog, as_entry, filter_suggestions, has_value

# Debug toggle for optional prints in this module
debug = config_manager.load_setting_value("debug", False)


class FormulaSession:
    def __init__(self, evaluator=None, on_change=None):
        self.tokens = TokenSequence()
        self.left_buffer = ""
        self.right_buffer = ""
        self.filtered_suggestions = []
        self.final_result = ""
        self.last_error = None
        self.focus = RIGHT  # Edit slot that should hold the keyboard focus
        self.catalog = Catalog()
        self.evaluator = evaluator if evaluator is not None else MathEngine.calculate
        self.on_change = on_change

    # --- Read-only helpers for the UI ---

    @property
    def left_visible(self):
        """The left slot only exists once there is a chip to type in front of."""
        return len(self.tokens) > 0

    def buffer(self, side):
        return self.left_buffer if check_side(side) == LEFT else self.right_buffer

    def expression(self):
        """Expression as it would be evaluated right now (pending right text included)."""
        return serialize_expression(self.tokens, self.right_buffer)

    def _set_buffer(self, side, value):
        if side == LEFT:
            self.left_buffer = value
        else:
            self.right_buffer = value

    def _changed(self):
        if self.on_change is not None:
            self.on_change(self)

    # --- Mutating operations ---

    def on_buffer_change(self, side, new_raw_value):
        """Keystroke in one of the edit slots.

        Text ending in an operand is committed as chips at that side's end,
        anything else stays in the slot and drives the suggestion list.
        """
        check_side(side)
        committed, buffer = classify_input(new_raw_value)

        if committed:
            self.tokens.insert(side, committed)
            if debug == True:
                print(f"Committed {committed} on the {side}: {self.tokens}")

        self._set_buffer(side, buffer)
        self.focus = side
        self.filtered_suggestions = filter_suggestions(self.catalog, buffer)
        self._changed()

    def on_token_delete(self, index):
        """Delete the chip at index; a stale index changes nothing."""
        removed = self.tokens.delete_at(index)
        if removed is not None:
            self._changed()
        return removed

    def on_right_backspace(self):
        """Backspace or Delete in an empty right slot removes the last chip."""
        if self.right_buffer:
            return None
        return self.on_token_delete(len(self.tokens) - 1)

    def on_suggestion_select(self, entry):
        """Turn the chosen suggestion into a tag chip.

        With text pending in the right slot the user was typing at the end, so
        the tag is appended; otherwise it goes to the front.
        """
        entry = as_entry(entry)
        if not has_value(entry):
            if debug == True:
                print(f"Ignored suggestion without value: {entry}")
            return None
        token = Token.from_suggestion(entry)

        if self.right_buffer:
            self.tokens.append([token])
        else:
            self.tokens.prepend([token])

        self.left_buffer = ""
        self.right_buffer = ""
        self.filtered_suggestions = []
        self.focus = RIGHT
        self._changed()
        return token

    def on_commit(self):
        """Right slot lost focus: commit pending text and evaluate."""
        pending = self.right_buffer
        if pending.strip():
            self.tokens.append([Token.literal(pending)])
        self.right_buffer = ""
        self.filtered_suggestions = []

        expression = serialize_expression(self.tokens)
        if not expression.strip():
            self.final_result = ""
            self.last_error = None
        else:
            try:
                self.final_result = str(self.evaluator(expression))
                self.last_error = None
            except E.MathError as e:
                # Tokens stay as they are so the user can fix the formula
                self.last_error = e
                self.final_result = str(e)
                if debug == True:
                    print(f"Evaluation failed for {expression!r}: {e}")

        self._changed()
        return self.final_result

    def on_catalog_loaded(self, entries):
        """Store the fetched catalog; only the first result counts."""
        if self.catalog.resolve(entries):
            self.filtered_suggestions = filter_suggestions(self.catalog, self.buffer(self.focus))
            self._changed()

    def on_catalog_failed(self, error=None):
        """Catalog unavailable: keep working without suggestions."""
        if self.catalog.fail(error):
            self.filtered_suggestions = []
            self._changed()

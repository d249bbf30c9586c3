# TagEngine.py
"""""
Token engine for the Tag Formula Calculator.

Pipeline
--------
1) Classifier: looks at the new value of an edit slot after a keystroke and
   decides whether it ends in an operand. If so the text is split into a
   literal token and an operand token, otherwise it stays pending.
2) TokenSequence: ordered list of tokens; the left slot prepends, the right
   slot appends, chips are deleted by index.
3) Serializer: joins the token values into one expression string for
   MathEngine.
"""""

from . import config_manager as config_manager
from . import error as E

# Debug toggle for optional prints in this module
debug = config_manager.load_setting_value("debug", False)

# Characters that close a literal and become a token of their own
OPERANDS = ["+", "-", "*", "/", ")", "(", "^", "%"]

# Token kinds
LITERAL = "literal"
OPERAND = "operand"
TAG = "tag"

LEFT = "left"
RIGHT = "right"
SIDES = (LEFT, RIGHT)


# -----------------------------
# Utilities / small helpers
# -----------------------------

def isOp(zeichen):
    """Return index of a known operand symbol or -1 if unknown."""
    try:
        return OPERANDS.index(zeichen)
    except ValueError:
        return -1


def ends_with_operand(value):
    """Return True if the last character of value is an operand symbol."""
    return bool(value) and isOp(value[-1]) != -1


def check_side(side):
    if side not in SIDES:
        raise ValueError(f"Unknown edit side: {side!r}")
    return side


# -----------------------------
# Token
# -----------------------------

class Token:
    """One chip of the formula.

    display_name is what the chip shows, value is what goes into the
    expression. Tag tokens come from the suggestion catalog and may carry
    `inputs` (shown on demand) and a `category`.
    """
    def __init__(self, display_name, value, kind=LITERAL, inputs=None, category=None):
        if not isinstance(value, str) or not value.strip():
            raise E.TokenError("Token without value.", code="7001")
        self.display_name = display_name if display_name else value
        self.value = value
        self.kind = kind
        self.inputs = inputs
        self.category = category

    @classmethod
    def literal(cls, text):
        return cls(text, text, LITERAL)

    @classmethod
    def operand(cls, symbol):
        return cls(symbol, symbol, OPERAND)

    @classmethod
    def from_suggestion(cls, entry):
        """Build a tag token from a SuggestionEntry."""
        return cls(entry.name, entry.value, TAG, inputs=entry.inputs, category=entry.category)

    @property
    def is_tag(self):
        return self.kind == TAG

    def __eq__(self, other):
        if not isinstance(other, Token):
            return NotImplemented
        return (self.display_name, self.value, self.kind, self.inputs, self.category) == \
               (other.display_name, other.value, other.kind, other.inputs, other.category)

    def __repr__(self):
        return f"Token({self.kind}, {self.value!r})"


# -----------------------------
# Classifier
# -----------------------------

def classify_input(value):
    """Split the new raw value of an edit slot into committed tokens and the
    text that stays in the slot.

    Returns:
        (tokens, buffer)
    tokens is [] while the user is still typing a literal, [operand] when the
    operand is the only character, or [literal, operand] otherwise. buffer is
    "" after a commit.
    """
    if not ends_with_operand(value):
        # Single characters are trimmed so a lone space never sticks,
        # longer text is kept as typed.
        buffer = value if len(value) > 1 else value.strip()
        return [], buffer

    operand = value[-1]
    if len(value) == 1:
        return [Token.operand(operand)], ""

    literal_text = value[:-1]
    tokens = []
    if literal_text.strip():
        tokens.append(Token.literal(literal_text))
    elif debug == True:
        print(f"Whitespace before {operand!r} dropped.")
    tokens.append(Token.operand(operand))
    return tokens, ""


# -----------------------------
# Token sequence
# -----------------------------

class TokenSequence:
    """Ordered tokens; list order is the expression order."""
    def __init__(self, tokens=None):
        self.items = list(tokens) if tokens else []

    def prepend(self, tokens):
        """Insert tokens, in their given order, before index 0."""
        self.items[0:0] = list(tokens)

    def append(self, tokens):
        """Insert tokens, in their given order, after the last index."""
        self.items.extend(tokens)

    def insert(self, side, tokens):
        if check_side(side) == LEFT:
            self.prepend(tokens)
        else:
            self.append(tokens)

    def delete_at(self, index):
        """Remove the token at index; stale or negative indexes do nothing.

        Returns the removed token or None.
        """
        if not isinstance(index, int) or index < 0 or index >= len(self.items):
            if debug == True:
                print(f"Ignored delete of index {index} (length {len(self.items)}).")
            return None
        return self.items.pop(index)

    def values(self):
        return [token.value for token in self.items]

    def __len__(self):
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def __getitem__(self, index):
        return self.items[index]

    def __bool__(self):
        return bool(self.items)

    def __repr__(self):
        return f"TokenSequence({self.items})"


# -----------------------------
# Serializer
# -----------------------------

def serialize_expression(sequence, pending=""):
    """Join token values (plus non-blank pending text) with single spaces."""
    values = [token.value for token in sequence]
    if pending and pending.strip():
        values.append(pending)
    expression = " ".join(values)
    if debug == True:
        print("Serialized expression: " + expression)
    return expression

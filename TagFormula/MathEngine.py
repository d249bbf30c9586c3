# MathEngine.py
"""""
Expression evaluator for the Tag Formula Calculator.

The token engine hands over one expression string per commit, e.g.
"12 + apple_value * ( 3 - 1 )". This module turns it into a number.

Pipeline
--------
1) Tokenizer: converts the expression string into a flat list of tokens.
2) Parser (AST): recursive descent, precedence aware
   (sum -> term -> unary -> power -> factor).
3) Evaluator: walks the AST with Decimal arithmetic.
4) Formatter: rounds to the configured number of decimal places.
"""""

from decimal import Decimal, getcontext, localcontext, Overflow, DivisionByZero, InvalidOperation
import inspect

from . import config_manager as config_manager
from . import ScientificEngine
from . import error as E

# Debug toggle for optional prints in this module
debug = config_manager.load_setting_value("debug", False)

# Binary operators, grouped by precedence level
Operations = ["+", "-", "*", "/", "%", "^"]
Sum_Operations = ("+", "-")
Term_Operations = ("*", "/", "%")

# Global Decimal precision used by this module
getcontext().prec = 50

APPROX_SIGN = "≈"  # "≈"


# -----------------------------
# Utilities / small helpers
# -----------------------------

def get_line_number():
    """Return the caller line number (small debug helper)."""
    return inspect.currentframe().f_back.f_lineno


def isOp(zeichen):
    """Return index of a known binary operator or -1 if unknown."""
    try:
        return Operations.index(zeichen)
    except ValueError:
        return -1


def isName(token):
    """Identifiers (constants, function names) are the only alphabetic tokens."""
    return isinstance(token, str) and (token[0].isalpha() or token[0] == "_")


# -----------------------------
# AST node types
# -----------------------------

class Number:
    """AST node for numeric literal backed by Decimal."""
    def __init__(self, value):
        if not isinstance(value, Decimal):
            value = Decimal(str(value))
        self.value = value

    def evaluate(self):
        return self.value

    def __repr__(self):
        return f"Number({self.value})"


class BinOp:
    """AST node for a binary operation: left <operator> right."""
    def __init__(self, left, operator, right):
        self.left = left
        self.operator = operator
        self.right = right

    def evaluate(self):
        """Evaluate both subtrees and apply the binary operator."""
        left_value = self.left.evaluate()
        right_value = self.right.evaluate()

        if self.operator == '+':
            return left_value + right_value
        elif self.operator == '-':
            return left_value - right_value
        elif self.operator == '*':
            return left_value * right_value
        elif self.operator == '^':
            return left_value ** right_value
        elif self.operator == '/':
            if right_value == 0:
                raise E.CalculationError("Division by zero", code="3003")
            return left_value / right_value
        elif self.operator == '%':
            if right_value == 0:
                raise E.CalculationError("Modulo by zero", code="3003")
            return left_value % right_value
        else:
            raise E.CalculationError(f"Unknown operator: {self.operator}", code="3004")

    def __repr__(self):
        return f"BinOp({self.operator!r}, left={self.left}, right={self.right})"


class Call:
    """AST node for a scientific function call: name(arg, ...)."""
    def __init__(self, name, arguments):
        self.name = name
        self.arguments = arguments

    def evaluate(self):
        return ScientificEngine.call(self.name, [argument.evaluate() for argument in self.arguments])

    def __repr__(self):
        return f"Call({self.name!r}, {self.arguments})"


# -----------------------------
# Tokenizer
# -----------------------------

def translator(problem):
    """Convert the expression string into a token list.

    Numbers become Decimal, operators/parentheses/commas stay single-char
    strings, identifiers are kept as strings ('√' is mapped to 'sqrt').
    """
    full_problem = []
    b = 0

    while b < len(problem):
        current_char = problem[b]

        # --- Numbers: digits and decimal separator ---
        if current_char.isdigit() or current_char == ".":
            str_number = current_char
            hat_schon_komma = current_char == "."  # Only one dot allowed in a numeric literal

            while (b + 1 < len(problem)) and (problem[b + 1].isdigit() or problem[b + 1] == "."):
                if problem[b + 1] == ".":
                    if hat_schon_komma:
                        raise E.SyntaxError("Double comma sign.", code="3008")
                    hat_schon_komma = True
                b += 1
                str_number += problem[b]

            if str_number == ".":
                raise E.SyntaxError("Unexpected token: .", code="3011")
            full_problem.append(Decimal(str_number))

        # --- Operators, parentheses and argument separator ---
        elif isOp(current_char) != -1 or current_char in "(),":
            full_problem.append(current_char)

        # --- Whitespace (ignored) ---
        elif current_char.isspace():
            pass

        elif current_char == "√":
            full_problem.append("sqrt")

        # --- Identifiers: constants and function names ---
        elif current_char.isalpha() or current_char == "_":
            name_end = b + 1
            while name_end < len(problem) and (problem[name_end].isalnum() or problem[name_end] == "_"):
                name_end += 1
            full_problem.append(problem[b:name_end])
            b = name_end - 1

        else:
            raise E.SyntaxError(f"Unexpected token: {current_char}", code="3011")

        b = b + 1

    return full_problem


# -----------------------------
# Parser (recursive descent)
# -----------------------------

def starts_implicit_factor(token):
    """True if token can follow an operand as an implicit multiplication.

    Two plain numbers in a row ("5 6") are not multiplied.
    """
    return token == "(" or isName(token)


def ast(received_string):
    """Parse an expression string into an AST.
    Implements precedence via nested functions: factor → power → unary → term → sum.
    """
    analysed = translator(received_string)

    if debug == True:
        print(analysed)

    if not analysed:
        raise E.SyntaxError(f"Empty expression.", code="3012")

    # ---- Parsing functions in precedence order ----

    def parse_factor(tokens):
        """Numbers, sub-expressions in '()', constants and function calls."""
        if len(tokens) > 0:
            token = tokens.pop(0)
        else:
            raise E.SyntaxError("Missing Number at the end.", code="3012")

        # Parenthesized sub-expression
        if token == "(":
            baum_in_der_klammer = parse_sum(tokens)
            if not tokens or tokens.pop(0) != ')':
                raise E.SyntaxError("Missing closing parenthesis ')'", code="3009")
            return baum_in_der_klammer

        elif isinstance(token, Decimal):
            return Number(token)

        elif isName(token):
            if ScientificEngine.is_function(token):
                # function must be followed by '('
                if not tokens or tokens.pop(0) != '(':
                    raise E.SyntaxError(f"Missing opening parenthesis after function {token}", code="3010")
                arguments = [parse_sum(tokens)]
                while tokens and tokens[0] == ',':
                    tokens.pop(0)
                    arguments.append(parse_sum(tokens))
                if not tokens or tokens.pop(0) != ')':
                    raise E.SyntaxError(f"Missing closing parenthesis after function '{token}'", code="3009")
                return Call(token, arguments)

            wert = ScientificEngine.constant(token)
            if wert is None:
                raise E.CalculationError(f"Unknown symbol: {token}", code="3013")
            return Number(wert)

        else:
            raise E.SyntaxError(f"Unexpected token: {token}", code="3011")

    def parse_power(tokens):
        """Exponentiation '^' (right associative, binds tighter than unary minus)."""
        basis = parse_factor(tokens)
        if tokens and tokens[0] == "^":
            operator = tokens.pop(0)
            exponent = parse_unary(tokens)
            return BinOp(basis, operator, exponent)
        return basis

    def parse_unary(tokens):
        """Handle leading '+'/'-' (unary minus becomes 0 - operand)."""
        if tokens and tokens[0] in ('+', '-'):
            operator = tokens.pop(0)
            operand = parse_unary(tokens)
            if operator == '-':
                return BinOp(Number('0'), '-', operand)
            return operand
        return parse_power(tokens)

    def parse_term(tokens):
        """Multiplication, division, modulo and implicit multiplication."""
        aktueller_baum = parse_unary(tokens)
        while tokens and (tokens[0] in Term_Operations or starts_implicit_factor(tokens[0])):
            if tokens[0] in Term_Operations:
                operator = tokens.pop(0)
            else:
                operator = "*"  # 2(3), 2pi, (1)(2)
            rechtes_teil = parse_unary(tokens)
            aktueller_baum = BinOp(aktueller_baum, operator, rechtes_teil)
        return aktueller_baum

    def parse_sum(tokens):
        """Addition and subtraction."""
        aktueller_baum = parse_term(tokens)
        while tokens and tokens[0] in Sum_Operations:
            operator = tokens.pop(0)
            rechte_seite = parse_term(tokens)
            aktueller_baum = BinOp(aktueller_baum, operator, rechte_seite)
        return aktueller_baum

    finaler_baum = parse_sum(analysed)

    # Everything must be consumed; a stray ')' means a missing '('
    if analysed:
        rest = analysed[0]
        if rest == ")":
            raise E.SyntaxError("Missing opening parenthesis '('", code="3010")
        raise E.SyntaxError(f"Unexpected token: {rest}", code="3011")

    if debug == True:
        print("Final AST:")
        print(finaler_baum)

    return finaler_baum


# -----------------------------
# Result formatting
# -----------------------------

def cleanup(ergebnis):
    """Round a Decimal result to the configured number of decimal places.

    Returns:
        (rendered_string, rounding_flag)
    where rounding_flag indicates whether rounding changed the value.
    """
    rounding = False

    if ergebnis == ergebnis.to_integral_value():
        # Integer result – plain digits, no exponent, no "-0"
        if ergebnis == 0:
            return "0", rounding
        return format(ergebnis.normalize(), "f"), rounding

    target_decimals = config_manager.load_setting_value("decimal_places", 10)

    # Temporary precision boost prevents InvalidOperation in quantize()
    # for long or repeating numbers.
    with localcontext() as ctx:
        ctx.prec = 128
        rundungs_muster = Decimal(1).scaleb(-max(target_decimals, 0))
        gerundetes_ergebnis = ergebnis.quantize(rundungs_muster)

    if gerundetes_ergebnis != ergebnis:
        rounding = True

    if gerundetes_ergebnis == 0:
        return "0", rounding
    return format(gerundetes_ergebnis.normalize(), "f"), rounding


# -----------------------------
# Public entry point
# -----------------------------

def calculate(problem):
    """Main API: parse → evaluate → format → render string."""
    # Guard precision locally before each calculation
    getcontext().prec = 50
    try:
        finaler_baum = ast(problem)
        ergebnis = finaler_baum.evaluate()

        ausgabe_string, rounding = cleanup(ergebnis)

        if rounding == True:
            return f"{APPROX_SIGN} {ausgabe_string}"
        return ausgabe_string

    # Known numeric overflow
    except Overflow:
        raise E.CalculationError(
            message="Number too large (Arithmetic overflow).",
            code="3026",
            equation=problem
        )
    except DivisionByZero:
        raise E.CalculationError(message="Division by zero", code="3003", equation=problem)
    except InvalidOperation:
        raise E.CalculationError(message="Invalid operation.", code="3012", equation=problem)
    # Re-raise our domain errors after attaching the source expression
    except E.MathError as e:
        e.equation = problem
        raise e
    # Convert unexpected Python exceptions to our unified error type
    except Exception as e:
        if debug == True:
            print(f"[line {get_line_number()}] unexpected: {e!r}")
        raise E.MathError(message=str(e).strip(), code="9999", equation=problem) from e


def test_main():
    """Simple REPL-like runner for manual testing of the engine."""
    print("Enter the expression: ")
    problem = input()
    try:
        print(calculate(problem))
    except E.MathError as e:
        print(e)


if __name__ == "__main__":
    test_main()

# ScientificEngine
import math
from decimal import Decimal, InvalidOperation

from . import error as E


degree_setting_sincostan = 0  # 0 = radians, 1 = degrees


CONSTANTS = {
    "pi": Decimal(repr(math.pi)),
    "π": Decimal(repr(math.pi)),
    "e": Decimal(1).exp(),
}


def _trig(fn):
    def apply(number):
        clean_number = float(number)
        if degree_setting_sincostan == 1:
            clean_number = math.radians(clean_number)
        return Decimal(repr(fn(clean_number)))
    return apply


def _log(number, base=None):
    if number <= 0:
        raise ValueError("logarithm of a non-positive number")
    if base is None:
        return number.ln()
    if base <= 0:
        raise ValueError("logarithm with a non-positive base")
    return number.ln() / base.ln()


def _log10(number):
    if number <= 0:
        raise ValueError("logarithm of a non-positive number")
    return number.log10()


def _sqrt(number):
    if number < 0:
        raise ValueError("square root of a negative number")
    return number.sqrt()


# name -> (implementation, allowed argument counts)
FUNCTIONS = {
    "sin": (_trig(math.sin), (1,)),
    "cos": (_trig(math.cos), (1,)),
    "tan": (_trig(math.tan), (1,)),
    "sqrt": (_sqrt, (1,)),
    "exp": (lambda number: number.exp(), (1,)),
    "log": (_log, (1, 2)),
    "ln": (_log, (1,)),
    "log10": (_log10, (1,)),
    "abs": (lambda number: abs(number), (1,)),
}


def is_function(name):
    return name in FUNCTIONS


def constant(name):
    """Return the Decimal value of a named constant, or None."""
    return CONSTANTS.get(name)


def call(name, arguments):
    """Apply the function `name` to a list of Decimal arguments."""
    if name not in FUNCTIONS:
        raise E.CalculationError(f"Unknown function: {name}", code="2004")

    implementation, arities = FUNCTIONS[name]
    if len(arguments) not in arities:
        raise E.CalculationError(
            f"{name}() takes {' or '.join(str(a) for a in arities)} argument(s), got {len(arguments)}",
            code="2005")

    try:
        ergebnis = implementation(*arguments)
    except (ValueError, InvalidOperation) as e:
        raise E.CalculationError(f"{name}: {e}", code="2005")

    return ergebnis

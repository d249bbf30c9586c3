# error.py
"""""
Coded exception family shared by the formula engines and the UI.

Every error carries a 4-digit code; the UI looks the code up in ERROR_MESSAGES
to show a readable text next to the details of the failing expression.
"""""


class MathError(Exception):
    def __init__(self, message, code="9999", equation=None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.equation = equation

    def __str__(self):
        return f"Error {self.code}: {self.message}"

class SyntaxError(MathError):
    pass

class CalculationError(MathError):
    pass

class CatalogError(MathError):
    pass

class TokenError(MathError):
    pass



Error_Dictionary = {

    "1" : "Missing Files",
    "2" : "Scientific Function Error",
    "3" : "Calculator Error",
    "4" : "UI Error",
    "5" : "Configuration Error",
    "6" : "Catalog Error",
    "7" : "Token Error"

}

#Error Messages are structured in:
# 1. Digit: Main Error
# 2. Digit: Specification
# 3. and 4. Digit: Error Number



ERROR_MESSAGES = {
    "1000" : "Required files are missing.",

    "2004" : "Unable to identify given function: ", # + function name
    "2005" : "Invalid argument for function: ", # + function name

    "3003" : "Division by Zero",
    "3004" : "Invalid Operator: ", # + operator
    "3008" : "More than one '.' in one number.",
    "3009" : "Missing ')'. ",
    "3010" : "Missing '('. ",
    "3011" : "Unexpected Token: ", # + Token
    "3012" : "Invalid expression: ", # + expression
    "3013" : "Unknown symbol: ", # + symbol
    "3026" : "Number too big.",

    "5001" : "Settings could not be loaded.",
    "5002" : "Not all Settings could be saved: ", # + Error raising setting

    "6001" : "Suggestion catalog could not be reached.",
    "6002" : "Suggestion catalog answered with an error status: ", # + status
    "6003" : "Suggestion catalog sent malformed data.",

    "7001" : "Token without value.",

    "9999" : "Unexpected Error: " #+error
}

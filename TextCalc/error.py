class MathError(Exception):
    def __init__(self, message, code="9999", equation=None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.equation = equation

class SyntaxError(MathError):
    pass

class CalculationError(MathError):
    pass

class InvalidVariableName(MathError):
    pass

class InvalidBase(MathError):
    pass

class InvalidDigitForBase(MathError):
    pass

class LeadingZeroError(MathError):
    pass


class UndefinedVariable(MathError):
    """Reference to a name that has no binding, or only a pending one.

    Never leaves the evaluator: it is rendered as a notice.
    """
    def __init__(self, name, code="3120", equation=None):
        super().__init__(f"Variable '{name}' is not defined", code=code, equation=equation)
        self.name = name


class UnresolvedBlock(MathError):
    """Raised after the fixed-point pass when assignments are still pending.

    pending  -- {name: last known right-hand side}
    outcomes -- everything the block produced before giving up
    """
    def __init__(self, pending, outcomes=None, code="3140"):
        names = ", ".join(f"{name} = {expression}" for name, expression in pending.items())
        super().__init__(f"Unresolved instructions: {names}", code=code)
        self.pending = dict(pending)
        self.outcomes = list(outcomes or [])



Error_Dictionary= {

    "1" : "Missing Files",
    "3" : "Calculator Error",
    "5" : "Configuration Error",
    "9" : "Runtime Error"

}

#Error Messages are structured in:
# 1. Digit: Main Error
# 2. Digit: Specification (0 = syntax, 1 = variables, 2 = numeral bases, 3 = arithmetic)
# 3. and 4. Digit: Error Number



ERROR_MESSAGES = {
    "3000" : "Symbols that are not allowed: ", # + Symbols
    "3001" : "Unknown instruction format.",
    "3002" : "Missing closing parenthesis.",
    "3003" : "Expected number.",
    "3004" : "Unexpected token: ", # + Token
    "3005" : "More than one '.' in one number.",
    "3006" : "Leading zero in number: ", # + Number
    "3007" : "Empty expression.",

    "3100" : "Invalid variable name: ", # + Name
    "3120" : "Variable not defined: ", # + Name
    "3140" : "Unresolved instructions: ", # + Names

    "3200" : "Base must be between 2 and 16: ", # + Base
    "3201" : "Digit not valid for base: ", # + Digit
    "3202" : "Leading zero in based number: ", # + Number

    "3300" : "Cannot convert a non finite value.",


    "9999" : "Unexpected Error: " #+error
}


def error_text(error):
    """'Error <code>: <title>' for display, the title taken from ERROR_MESSAGES.

    The error's own message is the detail: shown alone when it already starts with
    the title, appended after it otherwise.
    """
    title = ERROR_MESSAGES.get(error.code, "Unknown error").rstrip(" :.")
    detail = error.message or ""
    if detail.startswith(title):
        return f"Error {error.code}: {detail}"
    if not detail:
        return f"Error {error.code}: {title}"
    return f"Error {error.code}: {title}: {detail}"

# MathEngine.py
"""""
Expression evaluator of the text calculator.

Pipeline (one expression)
-------------------------
1) Substitution: every resolved variable is replaced by its value (longest names first).
   Names that are still unknown make the evaluation Pending instead of failing.
2) Unary minus: a '-' with no left operand becomes the marker 'u'.
3) Special notations: repeating decimals and based literals become plain decimals.
4) Tokenizer: flat list of floats, operators and parentheses.
5) Parser (AST): recursive descent, precedence  + -  <  * /  <  ^ (right associative).
6) Evaluation: IEEE double arithmetic (x/0 gives inf/nan, it is not an error here).

Instruction lines
-----------------
process() runs one classified line against the variable environment, process_block()
runs a whole block and afterwards resolves forward references until nothing changes.
"""""

import logging
import math
import re

from . import config_manager as config_manager
from . import error as E
from . import Lexer
from . import NumeralCodec
from . import RationalEngine

logger = logging.getLogger(__name__)

UNARY_MINUS = "u"

# Operators after which a '-' has no left operand
Operations = ["+", "-", "*", "/", "^"]

NAME_CHARS = "0-9A-Za-z_"
UNRESOLVED_NAME_RE = re.compile(
    rf"(?<![{NAME_CHARS}.])[A-Za-z][{NAME_CHARS}]*(?:\.[0-9A-Fa-f]+_\d+)?")


# -----------------------------
# Evaluation state
# -----------------------------

class Resolved:
    def __init__(self, value):
        self.value = value

    def __repr__(self):
        return f"Resolved({self.value!r})"


class Pending:
    """Evaluation is waiting for variables that have no value yet."""
    def __init__(self, names):
        self.names = list(names)

    def __repr__(self):
        return f"Pending({self.names!r})"


class Fatal:
    def __init__(self, error):
        self.error = error

    def __repr__(self):
        return f"Fatal({self.error.code}: {self.error.message})"


# -----------------------------
# Variable environment
# -----------------------------

class Binding:
    """A variable: either a value, or the right-hand side still waiting for other variables."""
    def __init__(self, name, value=None, expression=None, line=None):
        self.name = name
        self.value = value
        self.expression = expression
        self.line = line

    @property
    def pending(self):
        return self.value is None

    def __repr__(self):
        if self.pending:
            return f"Binding({self.name!r}, pending={self.expression!r})"
        return f"Binding({self.name!r}, value={self.value!r})"


class Environment:
    """Variables of one instruction block, owned by a single Evaluator."""
    def __init__(self):
        self.bindings = {}

    def assign(self, name, value, expression=None):
        self.bindings[name] = Binding(name, value=value, expression=expression)

    def defer(self, name, expression, line=None):
        self.bindings[name] = Binding(name, expression=expression, line=line)

    def get(self, name):
        return self.bindings.get(name)

    def remove(self, name):
        self.bindings.pop(name, None)

    def resolved_values(self):
        return {name: b.value for name, b in self.bindings.items() if not b.pending}

    def pending_bindings(self):
        return [b for b in self.bindings.values() if b.pending]

    def clear(self):
        self.bindings.clear()

    def __contains__(self, name):
        return name in self.bindings

    def __len__(self):
        return len(self.bindings)


# -----------------------------
# Outcomes handed to the shell
# -----------------------------

class Outcome:
    ASSIGNMENT = "assignment"
    QUERY = "query"
    NOT_DEFINED = "not_defined"
    RESULT = "result"
    BASE_RESULT = "base_result"
    ALTERNATE_BASE = "alternate_base"
    ERROR = "error"

    def __init__(self, kind, text, name=None, value=None, base=None, line=None, error=None):
        self.kind = kind
        self.text = text
        self.name = name
        self.value = value
        self.base = base
        self.line = line
        self.error = error

    def __repr__(self):
        return f"Outcome({self.kind!r}, {self.text!r})"


def format_value(value, decimal_places=6):
    """Display form: at most decimal_places fractional digits, no trailing zeros."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"

    text = f"{value:.{max(decimal_places, 0)}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text == "-0":
        text = "0"
    return text


# -----------------------------
# Text passes
# -----------------------------

def format_substitution(value):
    """Value as expression text that parses back to exactly the same double."""
    literal = NumeralCodec.format_literal(value)
    if math.isfinite(value) and math.copysign(1.0, value) < 0:
        return f"({literal})"
    return literal


def substitute_variables(expression, values):
    """Replace every name in values by its value, longest names first.

    A name negated by a '-' without left operand (start, '(' or an operator before it)
    becomes (-1*value).
    """
    for name in sorted(values, key=len, reverse=True):
        literal = format_substitution(values[name])
        escaped = re.escape(name)

        def replace_negated(match):
            before = match.string[:match.start()].rstrip()
            if before and before[-1] not in "(" + "".join(Operations):
                return match.group(0)
            return f"(-1*{literal})"

        # a following '.' means the name is the integer digits of a based literal (A.8_16)
        expression = re.sub(rf"-\s*{escaped}(?![{NAME_CHARS}.])", replace_negated, expression)
        expression = re.sub(rf"(?<![{NAME_CHARS}.]){escaped}(?![{NAME_CHARS}.])", lambda match: literal, expression)

    return expression


def find_unresolved_names(expression):
    """Identifiers left in a substituted expression, in order of appearance, without repeats.

    Based literals such as FF_16 look like identifiers and are skipped.
    """
    names = []
    for match in UNRESOLVED_NAME_RE.finditer(expression):
        word = match.group(0)
        if NumeralCodec.BASED_LITERAL_FULL_RE.fullmatch(word):
            continue
        if word not in names:
            names.append(word)
    return names


def normalize_unary_minus(expression):
    """Mark each '-' that follows start of text, '(' or another operator as unary."""
    result = []
    previous = None
    for current_char in expression:
        if current_char == "-" and (previous is None or previous == "(" or previous in Operations
                                    or previous == UNARY_MINUS):
            current_char = UNARY_MINUS
        result.append(current_char)
        if not current_char.isspace():
            previous = current_char
    return "".join(result)


# -----------------------------
# AST node types
# -----------------------------

def divide(left_value, right_value):
    """IEEE division: x/0 is +-inf, 0/0 is nan."""
    if right_value == 0:
        if left_value == 0 or math.isnan(left_value):
            return math.nan
        return math.copysign(math.inf, left_value) * math.copysign(1.0, right_value)
    return left_value / right_value


def power(base, exponent):
    """IEEE pow: overflow gives inf, 0^negative gives inf, negative^fraction gives nan."""
    try:
        return math.pow(base, exponent)
    except OverflowError:
        if base < 0 and exponent == math.floor(exponent) and exponent % 2 == 1:
            return -math.inf
        return math.inf
    except ValueError:
        if base == 0 and exponent < 0:
            return math.inf
        return math.nan


class Number:
    """AST node for a numeric literal."""
    def __init__(self, value):
        self.value = float(value)

    def evaluate(self):
        return self.value

    def __repr__(self):
        return f"Number({self.value!r})"


class Negate:
    """AST node for unary minus."""
    def __init__(self, operand):
        self.operand = operand

    def evaluate(self):
        return -self.operand.evaluate()

    def __repr__(self):
        return f"Negate({self.operand})"


class BinOp:
    """AST node for a binary operation: left <operator> right."""
    def __init__(self, left, operator, right):
        self.left = left
        self.operator = operator
        self.right = right

    def evaluate(self):
        left_value = self.left.evaluate()
        right_value = self.right.evaluate()

        if self.operator == '+':
            return left_value + right_value
        elif self.operator == '-':
            return left_value - right_value
        elif self.operator == '*':
            return left_value * right_value
        elif self.operator == '/':
            return divide(left_value, right_value)
        elif self.operator == '^':
            return power(left_value, right_value)
        else:
            raise E.CalculationError(f"Unknown operator: {self.operator}", code="3004")

    def __repr__(self):
        return f"BinOp({self.operator!r}, left={self.left}, right={self.right})"


# -----------------------------
# Tokenizer
# -----------------------------

def translator(expression):
    """Convert an expanded expression into a token list (floats, operators, parens, 'u')."""
    tokens = []
    b = 0

    while b < len(expression):
        current_char = expression[b]

        # --- Numbers: digits, one decimal point, optional exponent ---
        if current_char in "0123456789.":
            start = b
            has_point = False
            while b < len(expression) and expression[b] in "0123456789.":
                if expression[b] == ".":
                    if has_point:
                        raise E.SyntaxError("More than one '.' in one number.", code="3005")
                    has_point = True
                b += 1

            if b < len(expression) and expression[b] in "eE":
                exponent_end = b + 1
                if exponent_end < len(expression) and expression[exponent_end] in "+-":
                    exponent_end += 1
                if exponent_end < len(expression) and expression[exponent_end] in "0123456789":
                    b = exponent_end
                    while b < len(expression) and expression[b] in "0123456789":
                        b += 1

            str_number = expression[start:b]
            try:
                tokens.append(float(str_number))
            except ValueError:
                raise E.SyntaxError(f"Expected number, got '{str_number}'", code="3003")
            continue

        # --- Operators, parentheses and the unary minus marker ---
        elif current_char in Operations or current_char in "()" or current_char == UNARY_MINUS:
            tokens.append(current_char)

        # --- Whitespace (ignored) ---
        elif current_char.isspace():
            pass

        else:
            raise E.SyntaxError(f"Unexpected token: '{current_char}'", code="3004")

        b += 1

    return tokens


# -----------------------------
# Parser (recursive descent)
# -----------------------------

def ast(tokens):
    """Parse a token list into an AST.

    Expression := Term (('+'|'-') Term)*
    Term       := Power (('*'|'/') Power)*
    Power      := Primary ('^' Power)?
    Primary    := '(' Expression ')' | 'u' Primary | Number
    """
    tokens = list(tokens)

    def parse_primary(tokens):
        if not tokens:
            raise E.SyntaxError("Expected number", code="3003")
        token = tokens.pop(0)

        if token == "(":
            baum_in_der_klammer = parse_sum(tokens)
            if not tokens or tokens.pop(0) != ")":
                raise E.SyntaxError("Missing closing parenthesis", code="3002")
            return baum_in_der_klammer

        elif token == UNARY_MINUS:
            return Negate(parse_primary(tokens))

        elif isinstance(token, float):
            return Number(token)

        raise E.SyntaxError(f"Expected number, got '{token}'", code="3003")

    def parse_power(tokens):
        """Exponent side recurses into parse_power: 2^3^2 = 2^(3^2)."""
        basis = parse_primary(tokens)
        if tokens and tokens[0] == "^":
            operator = tokens.pop(0)
            exponent = parse_power(tokens)
            return BinOp(basis, operator, exponent)
        return basis

    def parse_term(tokens):
        aktueller_baum = parse_power(tokens)
        while tokens and tokens[0] in ("*", "/"):
            operator = tokens.pop(0)
            rechtes_teil = parse_power(tokens)
            aktueller_baum = BinOp(aktueller_baum, operator, rechtes_teil)
        return aktueller_baum

    def parse_sum(tokens):
        aktueller_baum = parse_term(tokens)
        while tokens and tokens[0] in ("+", "-"):
            operator = tokens.pop(0)
            rechte_seite = parse_term(tokens)
            aktueller_baum = BinOp(aktueller_baum, operator, rechte_seite)
        return aktueller_baum

    finaler_baum = parse_sum(tokens)
    if tokens:
        raise E.SyntaxError(f"Unexpected token: '{tokens[0]}'", code="3004")

    logger.debug("AST: %s", finaler_baum)
    return finaler_baum


def compute(expression):
    """Tokenize, parse and evaluate an already expanded expression."""
    return ast(translator(expression)).evaluate()


# -----------------------------
# Evaluator
# -----------------------------

class Evaluator:
    """Runs instruction lines against its own variable environment."""

    def __init__(self, settings=None, environment=None):
        self.settings = config_manager.merge_settings(settings)
        self.environment = environment if environment is not None else Environment()

    def reset(self):
        self.environment.clear()

    # --- expressions ---

    def try_evaluate(self, expression):
        """Evaluate expression text; returns Resolved, Pending or Fatal."""
        expression = Lexer.strip_terminator(expression)
        try:
            substituted = substitute_variables(expression, self.environment.resolved_values())
            missing = find_unresolved_names(substituted)
            if missing:
                logger.debug("%r waits for %s", expression, missing)
                return Pending(missing)

            normalized = normalize_unary_minus(substituted)
            expanded = NumeralCodec.expand_special_notations(normalized)
            Lexer.validate_characters(expanded)
            logger.debug("evaluating %r as %r", expression, expanded)
            return Resolved(compute(expanded))

        except E.MathError as e:
            if e.equation is None:
                e.equation = expression
            return Fatal(e)
        # Huge literals overflow, deeply nested parentheses exhaust the parser's recursion
        except (ValueError, OverflowError, ZeroDivisionError, TypeError, RecursionError) as e:
            return Fatal(E.MathError(message=str(e).strip(), code="9999", equation=expression))

    def evaluate(self, expression):
        """Value of expression; raises UndefinedVariable or the parse/codec error."""
        state = self.try_evaluate(expression)
        if isinstance(state, Resolved):
            return state.value
        if isinstance(state, Pending):
            raise E.UndefinedVariable(state.names[0], equation=expression)
        raise state.error

    # --- rendering ---

    def format(self, value):
        return format_value(value, self.settings["decimal_places"])

    def to_base(self, value, base):
        return NumeralCodec.to_base(value, base, self.settings["max_fraction_digits"])

    def alternate_base(self, label, value):
        """Advisory line showing value in the smallest base where it terminates (or nothing)."""
        if not self.settings["suggest_finite_base"]:
            return []
        max_denominator = self.settings["max_denominator"]
        if not RationalEngine.has_repeating_decimal(value, max_denominator):
            return []
        base = RationalEngine.find_best_finite_base(value, max_denominator)
        if base is None:
            return []
        digits = self.to_base(value, base)
        return [Outcome(Outcome.ALTERNATE_BASE, f"{label} in base {base}: {digits}",
                        name=label, value=value, base=base)]

    def _assignment_echo(self, name, value, line):
        return Outcome(Outcome.ASSIGNMENT, f"{name} = {self.format(value)}", name=name, value=value, line=line)

    def _not_defined(self, name, line):
        notice = E.UndefinedVariable(name, equation=line)
        return Outcome(Outcome.NOT_DEFINED, notice.message, name=name, line=line, error=notice)

    # --- instruction lines ---

    def process(self, line):
        """Validate, classify and run one line. Returns a list of Outcome (possibly empty)."""
        try:
            Lexer.validate_characters(line)
            Lexer.detect_invalid_leading_zeros(line)
            instruction = Lexer.classify(line)
            logger.debug("%r -> %s", line, instruction)

            if instruction.kind == Lexer.ASSIGNMENT:
                return self._run_assignment(instruction)
            elif instruction.kind == Lexer.QUERY:
                return self._run_query(instruction)
            elif instruction.kind == Lexer.EXPRESSION:
                return self._run_expression(instruction)
            else:
                return self._run_base_conversion(instruction)

        # Re-raise our domain errors after attaching the source line
        except E.MathError as e:
            e.equation = line
            raise e
        # Convert unexpected Python exceptions to our unified error type
        except (ValueError, OverflowError, ZeroDivisionError, TypeError, RecursionError) as e:
            raise E.MathError(message=str(e).strip(), code="9999", equation=line)

    def _run_assignment(self, instruction):
        name = instruction.name
        state = self.try_evaluate(instruction.expression)

        if isinstance(state, Resolved):
            self.environment.assign(name, state.value, instruction.expression)
            return [self._assignment_echo(name, state.value, instruction.line)]

        if isinstance(state, Pending):
            self.environment.defer(name, instruction.expression, instruction.line)
            logger.debug("%s deferred until %s are defined", name, ", ".join(state.names))
            return []

        raise state.error

    def _run_query(self, instruction):
        name = instruction.name
        binding = self.environment.get(name)
        if binding is None:
            return [self._not_defined(name, instruction.line)]
        if binding.pending:
            return []
        echo = Outcome(Outcome.QUERY, f"{name} = {self.format(binding.value)}",
                       name=name, value=binding.value, line=instruction.line)
        return [echo] + self.alternate_base(name, binding.value)

    def _run_expression(self, instruction):
        state = self.try_evaluate(instruction.expression)
        if isinstance(state, Pending):
            return [self._not_defined(state.names[0], instruction.line)]
        if isinstance(state, Fatal):
            raise state.error
        result = Outcome(Outcome.RESULT, f"Result: {self.format(state.value)}",
                         value=state.value, line=instruction.line)
        return [result] + self.alternate_base("Result", state.value)

    def _run_base_conversion(self, instruction):
        state = self.try_evaluate(instruction.expression)
        if isinstance(state, Pending):
            return [self._not_defined(state.names[0], instruction.line)]
        if isinstance(state, Fatal):
            raise state.error
        digits = self.to_base(state.value, instruction.base)
        return [Outcome(Outcome.BASE_RESULT, f"Result in base {instruction.base}: {digits}",
                        value=state.value, base=instruction.base, line=instruction.line)]

    # --- blocks ---

    def resolve_pending(self):
        """Re-evaluate pending bindings until a full pass resolves nothing.

        Returns the echoes of newly resolved bindings (and errors of ones that failed).
        """
        outcomes = []
        changed = True
        while changed:
            changed = False
            for binding in self.environment.pending_bindings():
                state = self.try_evaluate(binding.expression)

                if isinstance(state, Resolved):
                    self.environment.assign(binding.name, state.value, binding.expression)
                    outcomes.append(self._assignment_echo(binding.name, state.value, binding.line))
                    logger.debug("%s resolved to %r", binding.name, state.value)
                    changed = True

                elif isinstance(state, Fatal):
                    self.environment.remove(binding.name)
                    state.error.equation = binding.line or binding.expression
                    outcomes.append(error_outcome(state.error))
                    changed = True

        return outcomes

    def process_block(self, lines):
        """Run every non-blank line, then resolve forward references.

        Errors of single lines become error outcomes; assignments that stay pending
        raise UnresolvedBlock (carrying the outcomes produced so far).
        """
        outcomes = []
        for line in lines:
            if not line.strip():
                continue
            try:
                outcomes.extend(self.process(line))
            except E.MathError as e:
                logger.debug("line %r failed: %s", line, e.message)
                outcomes.append(error_outcome(e))

        outcomes.extend(self.resolve_pending())

        unresolved = self.environment.pending_bindings()
        if unresolved:
            raise E.UnresolvedBlock({b.name: b.expression for b in unresolved}, outcomes=outcomes)
        return outcomes


def error_outcome(error):
    return Outcome(Outcome.ERROR, E.error_text(error), line=error.equation, error=error)


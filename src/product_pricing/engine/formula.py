"""
Formula Evaluator - safe arithmetic for calculated products.

Catalog formulas such as ``"width * height * basePrice + 500"`` are parsed
into a small AST over a closed grammar and evaluated with Decimal
arithmetic. Nothing is ever handed to ``eval``.

Grammar::

    expr   := term (('+' | '-') term)*
    term   := factor (('*' | '/') factor)*
    factor := ('+' | '-') factor | NUMBER | IDENT | '(' expr ')'
"""
import operator
import re
from dataclasses import dataclass
from decimal import Decimal, DivisionByZero, InvalidOperation, Overflow
from typing import Callable, Union

VARIABLES = ('width', 'height', 'length', 'area', 'quantity', 'basePrice')

# Formulas come from catalog authors; keep the parser away from pathological nesting.
MAX_DEPTH = 64

_TOKEN_RE = re.compile(r"\s*(?:(\d+(?:\.\d*)?|\.\d+)|([A-Za-z_][A-Za-z0-9_]*)|(.))")

_OPS: dict[str, Callable[[Decimal, Decimal], Decimal]] = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
}


class FormulaError(ValueError):
    """Raised when a formula cannot be parsed or evaluated."""


@dataclass(frozen=True)
class Number:
    value: Decimal


@dataclass(frozen=True)
class Variable:
    name: str


@dataclass(frozen=True)
class UnaryOp:
    op: str
    operand: 'Node'


@dataclass(frozen=True)
class BinaryOp:
    op: str
    left: 'Node'
    right: 'Node'


Node = Union[Number, Variable, UnaryOp, BinaryOp]


def tokenize(formula: str) -> list[tuple[str, str]]:
    """Split a formula into (kind, text) tokens: NUM, IDENT or OP."""
    tokens = []
    pos = 0
    formula = formula.rstrip()
    while pos < len(formula):
        match = _TOKEN_RE.match(formula, pos)
        number, ident, other = match.groups()
        if number is not None:
            tokens.append(("NUM", number))
        elif ident is not None:
            tokens.append(("IDENT", ident))
        elif other in "+-*/()":
            tokens.append(("OP", other))
        else:
            raise FormulaError(f"Unexpected character '{other}' at position {match.start(3)}")
        pos = match.end()
    return tokens


class _Parser:
    def __init__(self, tokens: list[tuple[str, str]]):
        self.tokens = tokens
        self.pos = 0
        self.depth = 0

    def peek(self):
        return self.tokens[self.pos] if self.pos < len(self.tokens) else (None, None)

    def take(self):
        token = self.peek()
        self.pos += 1
        return token

    def parse(self) -> Node:
        if not self.tokens:
            raise FormulaError("Formula is empty")
        node = self.expr()
        if self.pos < len(self.tokens):
            raise FormulaError(f"Unexpected token '{self.peek()[1]}'")
        return node

    def expr(self) -> Node:
        node = self.term()
        while self.peek() in (("OP", "+"), ("OP", "-")):
            op = self.take()[1]
            node = BinaryOp(op, node, self.term())
        return node

    def term(self) -> Node:
        node = self.factor()
        while self.peek() in (("OP", "*"), ("OP", "/")):
            op = self.take()[1]
            node = BinaryOp(op, node, self.factor())
        return node

    def factor(self) -> Node:
        self.depth += 1
        if self.depth > MAX_DEPTH:
            raise FormulaError("Formula is nested too deeply")
        try:
            kind, text = self.take()
            if kind is None:
                raise FormulaError("Unexpected end of formula")
            if kind == "NUM":
                return Number(Decimal(text))
            if kind == "IDENT":
                if text not in VARIABLES:
                    raise FormulaError(f"Unknown identifier '{text}'")
                return Variable(text)
            if text in ("+", "-"):
                return UnaryOp(text, self.factor())
            if text == "(":
                node = self.expr()
                if self.take() != ("OP", ")"):
                    raise FormulaError("Missing closing parenthesis")
                return node
            raise FormulaError(f"Unexpected token '{text}'")
        finally:
            self.depth -= 1


def parse(formula: str) -> Node:
    """Parse a formula into an AST, raising FormulaError on bad syntax."""
    if formula is None:
        raise FormulaError("Formula is empty")
    return _Parser(tokenize(formula)).parse()


def variables_in(formula: str) -> list[str]:
    """Identifiers referenced by a formula, in order of first appearance."""
    names = []
    for kind, text in tokenize(formula or ""):
        if kind == "IDENT" and text not in names:
            names.append(text)
    return names


def _eval(node: Node, variables: dict[str, Decimal]) -> Decimal:
    if isinstance(node, Number):
        return node.value
    if isinstance(node, Variable):
        if node.name not in variables:
            raise FormulaError(f"Variable '{node.name}' has no value")
        return variables[node.name]
    if isinstance(node, UnaryOp):
        value = _eval(node.operand, variables)
        return -value if node.op == "-" else value
    left = _eval(node.left, variables)
    right = _eval(node.right, variables)
    if node.op == "/" and right == 0:
        raise FormulaError("Division by zero")
    return _OPS[node.op](left, right)


def evaluate(formula: str, variables: dict[str, Decimal]) -> Decimal:
    """
    Evaluate a formula against bound variables.

    Args:
        formula: Arithmetic expression over VARIABLES and numeric literals
        variables: Bound values; names missing here cause a FormulaError

    Returns:
        The finite Decimal result
    """
    tree = parse(formula)
    bound = {name: Decimal(str(value)) for name, value in variables.items()}
    try:
        result = _eval(tree, bound)
    except (DivisionByZero, InvalidOperation, Overflow) as e:
        raise FormulaError(f"Arithmetic error: {e}") from e
    if not result.is_finite():
        raise FormulaError("Result is not a finite number")
    return result

"""
Parser for neuron and synapse model specifications.

Grammar (section order is fixed):

    Name<OutputDim, TimeDim>:
    params      { name: Type, ... }
    initialize  { name: Type = expr; ... }
    time_step   { name = expr; name @= expr; ... }

    # neuron
    spike_when  { expr }
    get_voltage { expr }            # or get_current
    reset       { name = expr; name += expr; ... }

    # synapse
    weight_getter { expr }
    on_pre        { name += expr; ... }
    on_post       { name += expr; ... }

List sections must hold at least one item; one trailing separator is
allowed. Expressions use Python expression syntax and are checked with the
``ast`` module. Any deviation raises SpecificationError pointing at the
offending token.

Example:
    >>> spec = parse_spec('''
    ... Leaky<Voltage, Time>:
    ... params { tau: Time }
    ... initialize { v: Voltage = 0.0 }
    ... time_step { v @= (input - v) / tau }
    ... spike_when { v > 1.0 }
    ... get_voltage { v }
    ... reset { v = 0.0 }
    ... ''')
    >>> spec.kind
    <ModelKind.NEURON: 'neuron'>
"""

from __future__ import annotations

import ast
import keyword
import logging
from typing import Dict, List, Optional, Set, Tuple, Type

from spikespec.dsl.lexer import EOF, NAME, OP, Token, tokenize
from spikespec.dsl.model import (
    RESERVED_NAMES,
    Equation,
    EquationKind,
    Expression,
    Initializer,
    ModelHeader,
    ModelKind,
    ModelSpec,
    NeuronSpec,
    Param,
    Statement,
    SynapseSpec,
)
from spikespec.errors import SourceLocation, SpecificationError
from spikespec.units import Dimension

logger = logging.getLogger(__name__)

GETTER_KEYWORDS: Dict[str, Dimension] = {
    "get_voltage": Dimension.VOLTAGE,
    "get_current": Dimension.CURRENT,
}

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = frozenset(_OPENERS.values())

_AUGMENTED_OPS: Dict[str, Type[ast.operator]] = {
    "+=": ast.Add,
    "-=": ast.Sub,
    "*=": ast.Mult,
    "/=": ast.Div,
    "//=": ast.FloorDiv,
    "%=": ast.Mod,
    "**=": ast.Pow,
}

_FORBIDDEN_NODES: Tuple[type, ...] = (
    ast.Lambda,
    ast.ListComp,
    ast.SetComp,
    ast.DictComp,
    ast.GeneratorExp,
    ast.NamedExpr,
    ast.Await,
    ast.Yield,
    ast.YieldFrom,
    ast.Starred,
)


class Parser:
    """Recursive-descent parser over a token list.

    Most callers want `parse_spec`; the class is exposed for tools that need
    to inspect tokens around an error.
    """

    def __init__(self, text: str):
        self.text = text
        self.tokens = tokenize(text)
        self.pos = 0

    # ------------------------------------------------------------------
    # Token helpers
    # ------------------------------------------------------------------

    def peek(self) -> Token:
        return self.tokens[self.pos]

    def advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.kind != EOF:
            self.pos += 1
        return token

    def expect_op(self, text: str, context: str) -> Token:
        token = self.advance()
        if not token.is_op(text):
            raise SpecificationError(
                f"Expected `{text}` {context}, found {token.describe()}", token.location
            )
        return token

    def expect_keyword(self, keyword_text: str) -> Token:
        token = self.advance()
        if token.kind != NAME or token.text != keyword_text:
            raise SpecificationError(
                f"Expected `{keyword_text}` keyword, found {token.describe()}", token.location
            )
        return token

    def _slice(self, tokens: List[Token]) -> str:
        return self.text[tokens[0].start:tokens[-1].end]

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def parse(self, kind: Optional[ModelKind] = None) -> ModelSpec:
        """Parse the whole text as one model specification.

        Args:
            kind: Expected model kind; None infers it from the keyword that
                follows the ``time_step`` section
        """
        header = self._header()
        self.expect_keyword("params")
        params = self._params()
        self.expect_keyword("initialize")
        initializers = self._initializers({p.name for p in params})
        self.expect_keyword("time_step")
        time_step = [self._equation(item) for item in self._braced_items("time_step", ";")]

        if kind is None:
            kind = self._infer_kind()

        spec: ModelSpec
        if kind is ModelKind.NEURON:
            spec = self._neuron_tail(header, params, initializers, time_step)
            last_section = "reset"
        else:
            spec = self._synapse_tail(header, params, initializers, time_step)
            last_section = "on_post"

        trailing = self.peek()
        if trailing.kind != EOF:
            raise SpecificationError(
                f"Unexpected {trailing.describe()} after `{last_section}` section",
                trailing.location,
            )
        logger.debug(
            "Parsed %s %s: %d params, %d initializers, %d equations",
            spec.kind.value, header.type_name, len(params), len(initializers), len(time_step),
        )
        return spec

    def _infer_kind(self) -> ModelKind:
        token = self.peek()
        if token.kind == NAME and token.text == "spike_when":
            return ModelKind.NEURON
        if token.kind == NAME and token.text == "weight_getter":
            return ModelKind.SYNAPSE
        raise SpecificationError(
            f"Expected `spike_when` or `weight_getter` keyword, found {token.describe()}",
            token.location,
        )

    def _header(self) -> ModelHeader:
        name_token = self.advance()
        if name_token.kind != NAME or keyword.iskeyword(name_token.text):
            raise SpecificationError(
                f"Expected a type name, found {name_token.describe()}", name_token.location
            )
        self.expect_op("<", "after the type name")
        output_dimension = self._dimension("output")
        self.expect_op(",", "between the output and time dimensions")
        time_dimension = self._dimension("time")
        self.expect_op(">", "after the time dimension")
        self.expect_op(":", "after the model header")
        return ModelHeader(
            name_token.text, output_dimension, time_dimension, name_token.location
        )

    def _dimension(self, role: str) -> Dimension:
        first = self.advance()
        if first.kind != NAME:
            raise SpecificationError(
                f"Expected the {role} dimension, found {first.describe()}", first.location
            )
        parts = [first]
        while self.peek().is_op("."):
            self.advance()
            part = self.advance()
            if part.kind != NAME:
                raise SpecificationError(
                    f"Expected a name after `.`, found {part.describe()}", part.location
                )
            parts.append(part)
        name = self._slice(parts)
        try:
            dimension = Dimension.from_name(name)
        except KeyError:
            raise SpecificationError(f"Unknown dimension `{name}`", first.location) from None
        if role == "output" and not dimension.is_output:
            raise SpecificationError(
                f"Output dimension must be a voltage or current, got `{name}`", first.location
            )
        if role == "time" and dimension is not Dimension.TIME:
            raise SpecificationError(
                f"Time dimension must be a time, got `{name}`", first.location
            )
        return dimension

    def _params(self) -> List[Param]:
        params: List[Param] = []
        seen: Set[str] = set()
        for item in self._braced_items("params", ","):
            name_token = self._declared_name(item, seen, "params")
            if len(item) < 2 or not item[1].is_op(":"):
                found = item[1] if len(item) > 1 else item[0]
                raise SpecificationError(
                    f"Expected `:` after parameter `{name_token.text}`", found.location
                )
            if len(item) < 3:
                raise SpecificationError(
                    f"Expected a type for parameter `{name_token.text}`", item[1].location
                )
            params.append(Param(name_token.text, self._slice(item[2:]), name_token.location))
        return params

    def _initializers(self, param_names: Set[str]) -> List[Initializer]:
        initializers: List[Initializer] = []
        seen = set(param_names)
        for item in self._braced_items("initialize", ";"):
            name_token = self._declared_name(item, seen, "initialize")
            if len(item) < 2 or not item[1].is_op(":"):
                found = item[1] if len(item) > 1 else item[0]
                raise SpecificationError(
                    f"Expected `:` after `{name_token.text}`", found.location
                )
            equals = _find_top_level(item, "=", start=2)
            if equals is None:
                raise SpecificationError(
                    f"Expected `=` and an initial value for `{name_token.text}`",
                    item[-1].location,
                )
            if equals == 2:
                raise SpecificationError(
                    f"Expected a type for `{name_token.text}`", item[2].location
                )
            type_name = self._slice(item[2:equals])
            value = self._expression(item[equals + 1:], "initialize", item[equals])
            initializers.append(
                Initializer(name_token.text, type_name, value, name_token.location)
            )
        return initializers

    def _neuron_tail(
        self,
        header: ModelHeader,
        params: List[Param],
        initializers: List[Initializer],
        time_step: List[Equation],
    ) -> NeuronSpec:
        self.expect_keyword("spike_when")
        spike_when = self._braced_expression("spike_when")

        getter_token = self.advance()
        if getter_token.kind != NAME or getter_token.text not in GETTER_KEYWORDS:
            raise SpecificationError(
                f"Expected `get_voltage` or `get_current` keyword, found {getter_token.describe()}",
                getter_token.location,
            )
        getter = self._braced_expression(getter_token.text)
        if GETTER_KEYWORDS[getter_token.text] is not header.output_dimension:
            logger.warning(
                "%s declares a %s output but uses `%s`",
                header.type_name, header.output_dimension.value, getter_token.text,
            )

        self.expect_keyword("reset")
        reset = [self._statement(item, "reset") for item in self._braced_items("reset", ";")]
        return NeuronSpec(
            header=header,
            params=tuple(params),
            initializers=tuple(initializers),
            time_step=tuple(time_step),
            spike_when=spike_when,
            getter_name=getter_token.text,
            getter=getter,
            reset=tuple(reset),
        )

    def _synapse_tail(
        self,
        header: ModelHeader,
        params: List[Param],
        initializers: List[Initializer],
        time_step: List[Equation],
    ) -> SynapseSpec:
        self.expect_keyword("weight_getter")
        weight_getter = self._braced_expression("weight_getter")
        self.expect_keyword("on_pre")
        on_pre = [self._statement(item, "on_pre") for item in self._braced_items("on_pre", ";")]
        self.expect_keyword("on_post")
        on_post = [
            self._statement(item, "on_post") for item in self._braced_items("on_post", ";")
        ]
        return SynapseSpec(
            header=header,
            params=tuple(params),
            initializers=tuple(initializers),
            time_step=tuple(time_step),
            weight_getter=weight_getter,
            on_pre=tuple(on_pre),
            on_post=tuple(on_post),
        )

    # ------------------------------------------------------------------
    # Braced bodies
    # ------------------------------------------------------------------

    def _braced_body(self, section: str) -> Tuple[Token, List[Token]]:
        """Consume ``{ ... }`` and return the opening brace and inner tokens."""
        open_token = self.expect_op("{", f"to open the `{section}` section")
        stack = ["}"]
        body: List[Token] = []
        while True:
            token = self.advance()
            if token.kind == EOF:
                raise SpecificationError(
                    f"Unclosed `{{` in `{section}` section", open_token.location
                )
            if token.kind == OP and token.text in _OPENERS:
                stack.append(_OPENERS[token.text])
            elif token.kind == OP and token.text in _CLOSERS:
                if token.text != stack[-1]:
                    raise SpecificationError(
                        f"Mismatched `{token.text}` in `{section}` section", token.location
                    )
                stack.pop()
                if not stack:
                    return open_token, body
            body.append(token)

    def _braced_items(self, section: str, separator: str) -> List[List[Token]]:
        open_token, body = self._braced_body(section)
        items: List[List[Token]] = [[]]
        depth = 0
        for token in body:
            if token.kind == OP and token.text in _OPENERS:
                depth += 1
            elif token.kind == OP and token.text in _CLOSERS:
                depth -= 1
            if depth == 0 and token.is_op(separator):
                if not items[-1]:
                    raise SpecificationError(
                        f"Expected an item before `{separator}` in `{section}` section",
                        token.location,
                    )
                items.append([])
            else:
                items[-1].append(token)
        if not items[-1]:
            items.pop()
        if not items:
            raise SpecificationError(
                f"`{section}` section must not be empty", open_token.location
            )
        return items

    def _braced_expression(self, section: str) -> Expression:
        open_token, body = self._braced_body(section)
        return self._expression(body, section, open_token)

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def _declared_name(self, item: List[Token], seen: Set[str], section: str) -> Token:
        token = item[0]
        if token.kind != NAME or keyword.iskeyword(token.text):
            raise SpecificationError(
                f"Expected a name in `{section}` section, found {token.describe()}",
                token.location,
            )
        if token.text in RESERVED_NAMES or token.text == "self":
            raise SpecificationError(
                f"`{token.text}` is reserved and cannot be declared", token.location
            )
        if token.text in seen:
            raise SpecificationError(f"`{token.text}` is declared twice", token.location)
        seen.add(token.text)
        return token

    def _equation(self, item: List[Token]) -> Equation:
        target = item[0]
        if target.kind != NAME or keyword.iskeyword(target.text):
            raise SpecificationError(
                f"Expected a state name in `time_step` section, found {target.describe()}",
                target.location,
            )
        rest = item[1:]
        if rest and rest[0].is_op("@="):
            kind, value_tokens, marker = EquationKind.DERIVATIVE, rest[1:], rest[0]
        elif len(rest) >= 2 and rest[0].is_op("@") and rest[1].is_op("="):
            kind, value_tokens, marker = EquationKind.DERIVATIVE, rest[2:], rest[1]
        elif rest and rest[0].is_op("="):
            kind, value_tokens, marker = EquationKind.DIRECT, rest[1:], rest[0]
        else:
            found = rest[0] if rest else target
            raise SpecificationError(
                f"Expected `=` or `@=` after `{target.text}`", found.location
            )
        value = self._expression(value_tokens, "time_step", marker)
        return Equation(target.text, kind, value, target.location)

    def _statement(self, item: List[Token], section: str) -> Statement:
        target = item[0]
        operator = item[1] if len(item) > 1 else None
        if (
            target.kind != NAME
            or keyword.iskeyword(target.text)
            or operator is None
            or operator.kind != OP
            or (operator.text != "=" and operator.text not in _AUGMENTED_OPS)
        ):
            raise SpecificationError(
                f"Expected an assignment such as `x = ...` or `x += ...` in `{section}` section",
                target.location,
            )
        value = self._expression(item[2:], section, operator)
        name = ast.Name(id=target.text, ctx=ast.Store())
        node: ast.stmt
        if operator.text == "=":
            node = ast.Assign(targets=[name], value=value.node, type_comment=None)
        else:
            node = ast.AugAssign(
                target=name, op=_AUGMENTED_OPS[operator.text](), value=value.node
            )
        return Statement(self._slice(item), node, target.location)  # type: ignore[arg-type]

    def _expression(self, tokens: List[Token], section: str, anchor: Token) -> Expression:
        """Parse tokens as one Python expression.

        Args:
            tokens: Expression tokens (may span lines)
            section: Section name for diagnostics
            anchor: Token preceding the expression, used when it is empty
        """
        if not tokens:
            raise SpecificationError(
                f"Expected an expression in `{section}` section after {anchor.describe()}",
                anchor.location,
            )
        source = self._slice(tokens)
        first = tokens[0].location
        try:
            # Parenthesised so the expression may span several lines.
            node = ast.parse(f"({source}\n)", mode="eval").body
        except SyntaxError as exc:
            raise SpecificationError(
                f"Malformed expression in `{section}` section: {exc.msg}",
                _shift_location(first, exc.lineno or 1, (exc.offset or 1) - 1),
            ) from None
        for child in ast.walk(node):
            if isinstance(child, _FORBIDDEN_NODES):
                raise SpecificationError(
                    f"{type(child).__name__} is not allowed in `{section}` section",
                    _shift_location(first, child.lineno, child.col_offset),
                )
        return Expression(source, node, first)


def _find_top_level(tokens: List[Token], text: str, start: int = 0) -> Optional[int]:
    depth = 0
    for index in range(start, len(tokens)):
        token = tokens[index]
        if token.kind == OP and token.text in _OPENERS:
            depth += 1
        elif token.kind == OP and token.text in _CLOSERS:
            depth -= 1
        elif depth == 0 and token.is_op(text):
            return index
    return None


def _shift_location(first: SourceLocation, lineno: int, col_offset: int) -> SourceLocation:
    """Map a position inside ``"(" + source`` back to the specification text."""
    if lineno <= 1:
        column = max(col_offset - 1, 0)
        return SourceLocation(first.line, first.column + column, first.offset + column)
    return SourceLocation(first.line + lineno - 1, col_offset, first.offset)


def parse_spec(text: str, kind: Optional[ModelKind] = None) -> ModelSpec:
    """Parse a neuron or synapse specification.

    Args:
        text: Specification source
        kind: Expected kind, or None to infer it

    Raises:
        SpecificationError: If the text does not follow the grammar
    """
    return Parser(text).parse(kind)


def parse_neuron(text: str) -> NeuronSpec:
    return Parser(text).parse(ModelKind.NEURON)  # type: ignore[return-value]


def parse_synapse(text: str) -> SynapseSpec:
    return Parser(text).parse(ModelKind.SYNAPSE)  # type: ignore[return-value]

"""
Code generator: specification tree -> Python unit class.

Translation rules:
    - State = parameters followed by initialized variables. The constructor
      takes one argument per parameter in declared order, assigns them, then
      evaluates each initializer in order (initializers may read parameters
      and earlier initializers).
    - ``did_spike`` / getters / ``current_weight`` evaluate their expression
      against the current state without mutating it.
    - Neuron ``handle_input(input, dt)``: if ``did_spike()``, run the reset
      statements; then run the time-step equations.
    - Synapse ``advance_once(dt)`` runs the time-step equations only;
      ``on_pre(input)`` / ``on_post(input)`` run their statement lists.
    - Direct equation ``x = rhs`` becomes ``self.x = rhs``. Derivative
      equation ``x @= rhs`` becomes ``self.x = self.x + rhs * dt``.
      Equations run in declaration order, each seeing the updates of the
      ones before it.

Generation fails only on identifiers with no binding in their scope, or on
names that clash with the generated class surface.

Usage:
    source = generate_source(spec)              # class source text
    module = generate_module([neuron, synapse])  # importable module text
    Izhikevich = compile_model(spec)            # ready-to-use class
"""

from __future__ import annotations

import ast
import copy
import linecache
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Type, Union

from spikespec.codegen.functions import FUNCTIONS
from spikespec.config import CodegenConfig
from spikespec.dsl.model import (
    RESERVED_NAMES,
    Equation,
    EquationKind,
    Expression,
    ModelKind,
    ModelSpec,
    NeuronSpec,
    Statement,
    SynapseSpec,
)
from spikespec.dsl.parser import parse_neuron, parse_spec, parse_synapse
from spikespec.errors import GenerationError, SourceLocation
from spikespec.runtime.protocols import InnerSpikeGenerator, Synaptic
from spikespec.units import Dimension

logger = logging.getLogger(__name__)

INDENT = "    "

_BASE_CLASSES: Dict[ModelKind, type] = {
    ModelKind.NEURON: InnerSpikeGenerator,
    ModelKind.SYNAPSE: Synaptic,
}

_UNIT_SURFACE = frozenset({
    "self",
    "did_spike",
    "get_output",
    "get_voltage",
    "get_current",
    "handle_input",
    "advance",
    "on_pre",
    "on_post",
    "current_weight",
    "advance_once",
    "param_names",
    "state_names",
    "output_dimension",
    "time_dimension",
    "spec",
})
"""Attributes of generated classes that state variables must not shadow."""


class _StateRewriter(ast.NodeTransformer):
    """Rewrite bare state names into ``self.<name>`` attribute access."""

    def __init__(self, state: Set[str]):
        self.state = state

    def visit_Name(self, node: ast.Name) -> ast.AST:
        if node.id in self.state:
            return ast.copy_location(
                ast.Attribute(value=ast.Name(id="self", ctx=ast.Load()), attr=node.id, ctx=node.ctx),
                node,
            )
        return node


class CodeGenerator:
    """Emits the class for one validated model specification."""

    def __init__(self, spec: ModelSpec, config: Optional[CodegenConfig] = None):
        self.spec = spec
        self.config = config or CodegenConfig()
        self.state = set(spec.state_names)
        self.functions_used: Set[str] = set()
        self._rewriter = _StateRewriter(self.state)

    # ------------------------------------------------------------------
    # Binding checks
    # ------------------------------------------------------------------

    def _check_declarations(self) -> None:
        name = self.spec.type_name
        if name in FUNCTIONS or name in ("Dimension", "InnerSpikeGenerator", "Synaptic"):
            raise GenerationError(
                name, "model header", self.spec.header.location,
                reason="clashes with a name used by generated code",
            )
        declared = list(self.spec.params) + list(self.spec.initializers)
        for declaration in declared:
            if declaration.name in _UNIT_SURFACE or declaration.name.startswith("__"):
                raise GenerationError(
                    declaration.name, f"declaration of `{declaration.name}`", declaration.location,
                    reason="clashes with an attribute of the generated unit",
                )
            if declaration.name in FUNCTIONS:
                raise GenerationError(
                    declaration.name, f"declaration of `{declaration.name}`", declaration.location,
                    reason="shadows a function available to expressions",
                )

    def _check_bound(
        self,
        node: ast.AST,
        scope: Set[str],
        context: str,
        location: SourceLocation,
    ) -> None:
        """Raise GenerationError for the first name not bound in ``scope``."""
        function_refs: Set[int] = set()
        for child in ast.walk(node):
            if (
                isinstance(child, ast.Call)
                and isinstance(child.func, ast.Name)
                and child.func.id not in scope
                and child.func.id in FUNCTIONS
            ):
                function_refs.add(id(child.func))
                self.functions_used.add(child.func.id)
        for child in ast.walk(node):
            if isinstance(child, ast.Name) and id(child) not in function_refs:
                if child.id not in scope:
                    raise GenerationError(child.id, context, location)

    def _check_target(self, target: str, context: str, location: SourceLocation) -> None:
        if target not in self.state:
            raise GenerationError(
                target, context, location, reason="is not a declared state variable"
            )

    def validate(self) -> None:
        """Check every identifier against its scope.

        Raises:
            GenerationError: Naming the first offending identifier
        """
        spec = self.spec
        self._check_declarations()

        initialized = set(spec.param_names)
        for init in spec.initializers:
            self._check_bound(
                init.value.node, initialized, f"initializer `{init.name}`", init.value.location
            )
            initialized.add(init.name)

        if isinstance(spec, NeuronSpec):
            step_scope = self.state | RESERVED_NAMES
        else:
            step_scope = self.state | {"dt"}
        for index, equation in enumerate(spec.time_step, start=1):
            context = f"time_step equation {index} `{equation.source}`"
            self._check_target(equation.target, context, equation.location)
            self._check_bound(equation.value.node, step_scope, context, equation.value.location)

        if isinstance(spec, NeuronSpec):
            self._check_bound(spec.spike_when.node, self.state, "spike_when", spec.spike_when.location)
            self._check_bound(spec.getter.node, self.state, spec.getter_name, spec.getter.location)
            self._check_statements(spec.reset, "reset", self.state | RESERVED_NAMES)
        elif isinstance(spec, SynapseSpec):
            self._check_bound(
                spec.weight_getter.node, self.state, "weight_getter", spec.weight_getter.location
            )
            self._check_statements(spec.on_pre, "on_pre", self.state | {"input"})
            self._check_statements(spec.on_post, "on_post", self.state | {"input"})

    def _check_statements(
        self, statements: Sequence[Statement], section: str, scope: Set[str]
    ) -> None:
        for index, statement in enumerate(statements, start=1):
            context = f"{section} statement {index} `{statement.source}`"
            self._check_target(statement.target, context, statement.location)
            self._check_bound(statement.node.value, scope, context, statement.location)

    # ------------------------------------------------------------------
    # Emission
    # ------------------------------------------------------------------

    def _expr(self, expression: Expression) -> str:
        return ast.unparse(self._rewriter.visit(copy.deepcopy(expression.node)))

    def _statement(self, statement: Statement) -> str:
        node = self._rewriter.visit(copy.deepcopy(statement.node))
        return ast.unparse(ast.fix_missing_locations(node))

    def _equation(self, equation: Equation) -> str:
        target = ast.Attribute(
            value=ast.Name(id="self", ctx=ast.Load()), attr=equation.target, ctx=ast.Store()
        )
        value = self._rewriter.visit(copy.deepcopy(equation.value.node))
        if equation.kind is EquationKind.DERIVATIVE:
            current = ast.Attribute(
                value=ast.Name(id="self", ctx=ast.Load()), attr=equation.target, ctx=ast.Load()
            )
            increment = ast.BinOp(left=value, op=ast.Mult(), right=ast.Name(id="dt", ctx=ast.Load()))
            value = ast.BinOp(left=current, op=ast.Add(), right=increment)
        node = ast.Assign(targets=[target], value=value, type_comment=None)
        return ast.unparse(ast.fix_missing_locations(node))

    def _constructor(self) -> List[str]:
        spec = self.spec
        args = ", ".join(f"{p.name}: {p.type_name!r}" for p in spec.params)
        lines = [f"def __init__(self, {args}):"]
        lines += [f"{INDENT}self.{p.name} = {p.name}" for p in spec.params]
        for init in spec.initializers:
            lines.append(f"{INDENT}self.{init.name} = {self._expr(init.value)}")
        return lines

    def _method(self, signature: str, body: Iterable[str]) -> List[str]:
        return [f"def {signature}:"] + [f"{INDENT}{line}" for line in body]

    def _time_step_lines(self) -> List[str]:
        return [self._equation(equation) for equation in self.spec.time_step]

    def _neuron_methods(self, spec: NeuronSpec) -> List[List[str]]:
        step = ["if self.did_spike():"]
        step += [f"{INDENT}{self._statement(s)}" for s in spec.reset]
        step += self._time_step_lines()
        return [
            self._method("did_spike(self) -> bool", [f"return bool({self._expr(spec.spike_when)})"]),
            self._method(f"{spec.getter_name}(self)", [f"return {self._expr(spec.getter)}"]),
            self._method("get_output(self)", [f"return self.{spec.getter_name}()"]),
            self._method("handle_input(self, input, dt) -> None", step),
        ]

    def _synapse_methods(self, spec: SynapseSpec) -> List[List[str]]:
        return [
            self._method("on_pre(self, input) -> None", [self._statement(s) for s in spec.on_pre]),
            self._method("on_post(self, input) -> None", [self._statement(s) for s in spec.on_post]),
            self._method("current_weight(self)", [f"return {self._expr(spec.weight_getter)}"]),
            self._method("advance_once(self, dt) -> None", self._time_step_lines()),
        ]

    def class_source(self) -> str:
        """Validate the specification and return the class definition source."""
        self.validate()
        spec = self.spec
        base = _BASE_CLASSES[spec.kind].__name__
        header = spec.header

        body: List[str] = [
            f'"""Generated from the `{spec.type_name}` {spec.kind.value} specification."""',
            "",
            f"output_dimension = Dimension.{header.output_dimension.name}",
            f"time_dimension = Dimension.{header.time_dimension.name}",
            f"param_names = {tuple(spec.param_names)!r}",
            f"state_names = {tuple(spec.state_names)!r}",
        ]
        if self.config.use_slots:
            body.append(f"__slots__ = {tuple(spec.state_names)!r}")

        methods = [self._constructor()]
        if isinstance(spec, NeuronSpec):
            methods += self._neuron_methods(spec)
        elif isinstance(spec, SynapseSpec):
            methods += self._synapse_methods(spec)
        methods.append(self._method("__repr__(self)", [
            'fields = ", ".join(f"{name}={getattr(self, name)!r}" for name in self.state_names)',
            'return f"{type(self).__name__}({fields})"',
        ]))
        for method in methods:
            body.append("")
            body.extend(method)

        lines = [f"class {spec.type_name}({base}):"]
        lines += [f"{INDENT}{line}" if line else "" for line in body]
        return "\n".join(lines) + "\n"


# =============================================================================
# Public API
# =============================================================================


def generate_source(spec: ModelSpec, config: Optional[CodegenConfig] = None) -> str:
    """Class definition source for one specification.

    Raises:
        GenerationError: On an unbound or clashing identifier
    """
    return CodeGenerator(spec, config).class_source()


def generate_module(
    specs: Sequence[ModelSpec], config: Optional[CodegenConfig] = None
) -> str:
    """Source of an importable module defining one class per specification."""
    classes: List[str] = []
    functions: Set[str] = set()
    bases: Set[str] = set()
    for spec in specs:
        generator = CodeGenerator(spec, config)
        classes.append(generator.class_source())
        functions |= generator.functions_used
        bases.add(_BASE_CLASSES[spec.kind].__name__)

    lines = ['"""Generated by spikespec. Do not edit."""', ""]
    if functions:
        lines.append(f"from spikespec.codegen.functions import {', '.join(sorted(functions))}")
    lines.append(f"from spikespec.runtime.protocols import {', '.join(sorted(bases))}")
    lines.append("from spikespec.units import Dimension")
    lines.append("")
    lines.append(f"__all__ = {[spec.type_name for spec in specs]!r}")
    for source in classes:
        lines.extend(["", "", source.rstrip("\n")])
    return "\n".join(lines) + "\n"


def compile_model(
    spec: Union[ModelSpec, str], config: Optional[CodegenConfig] = None
) -> Type[Any]:
    """Generate and execute the class for ``spec``.

    Args:
        spec: Parsed specification, or specification text (kind inferred)
        config: Emission settings

    Returns:
        The generated class, a subclass of InnerSpikeGenerator (neurons)
        or Synaptic (synapses)
    """
    if isinstance(spec, str):
        spec = parse_spec(spec)
    config = config or CodegenConfig()
    source = generate_source(spec, config)

    filename = f"<spikespec {spec.type_name}>"
    code = compile(source, filename, "exec")
    if config.register_source:
        linecache.cache[filename] = (len(source), None, source.splitlines(True), filename)

    namespace: Dict[str, Any] = {
        "Dimension": Dimension,
        "InnerSpikeGenerator": InnerSpikeGenerator,
        "Synaptic": Synaptic,
        **FUNCTIONS,
    }
    exec(code, namespace)
    cls = namespace[spec.type_name]
    cls.__module__ = config.module_name
    cls.spec = spec
    logger.debug("Compiled %s (%d source lines)", spec.type_name, source.count("\n"))
    return cls


def define_model(text: str, config: Optional[CodegenConfig] = None) -> Type[Any]:
    """Parse and compile a specification, inferring neuron or synapse."""
    return compile_model(parse_spec(text), config)


def define_neuron(text: str, config: Optional[CodegenConfig] = None) -> Type[InnerSpikeGenerator]:
    """Parse and compile a neuron specification."""
    return compile_model(parse_neuron(text), config)


def define_synapse(text: str, config: Optional[CodegenConfig] = None) -> Type[Synaptic]:
    """Parse and compile a synapse specification."""
    return compile_model(parse_synapse(text), config)

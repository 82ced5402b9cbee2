"""
In-memory specification tree for neuron and synapse models.

The parser builds these records; the code generator walks them. Expressions
and statements keep both their source text (for diagnostics and generated
comments) and their parsed Python ``ast`` node (for translation).

Tree:
    ModelSpec
    ├── header: ModelHeader (type name + output/time dimensions)
    ├── params: [Param]
    ├── initializers: [Initializer]
    ├── time_step: [Equation]
    └── NeuronSpec: spike_when, getter, reset: [Statement]
        SynapseSpec: weight_getter, on_pre/on_post: [Statement]
"""

from __future__ import annotations

import ast
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple, Union

from spikespec.errors import SourceLocation
from spikespec.units import Dimension

RESERVED_NAMES = frozenset({"input", "dt"})
"""Names supplied by the step methods rather than declared in the model."""


class ModelKind(Enum):
    NEURON = "neuron"
    SYNAPSE = "synapse"


class EquationKind(Enum):
    """How a time-step equation updates its state variable."""

    DIRECT = "direct"
    """``x = rhs``: state := rhs"""

    DERIVATIVE = "derivative"
    """``x @= rhs``: state := state + rhs * dt (forward Euler)"""


@dataclass(frozen=True)
class Expression:
    source: str
    node: ast.expr = field(compare=False, repr=False)
    location: SourceLocation = field(compare=False)


@dataclass(frozen=True)
class Statement:
    """Assignment statement from a ``reset``/``on_pre``/``on_post`` list."""

    source: str
    node: Union[ast.Assign, ast.AugAssign] = field(compare=False, repr=False)
    location: SourceLocation = field(compare=False)

    @property
    def target(self) -> str:
        if isinstance(self.node, ast.AugAssign):
            return self.node.target.id  # type: ignore[union-attr]
        return self.node.targets[0].id  # type: ignore[union-attr]


@dataclass(frozen=True)
class Param:
    name: str
    type_name: str
    location: SourceLocation = field(compare=False)


@dataclass(frozen=True)
class Initializer:
    name: str
    type_name: str
    value: Expression
    location: SourceLocation = field(compare=False)


@dataclass(frozen=True)
class Equation:
    target: str
    kind: EquationKind
    value: Expression
    location: SourceLocation = field(compare=False)

    @property
    def source(self) -> str:
        marker = " @=" if self.kind is EquationKind.DERIVATIVE else " ="
        return f"{self.target}{marker} {self.value.source}"


@dataclass(frozen=True)
class ModelHeader:
    type_name: str
    output_dimension: Dimension
    time_dimension: Dimension
    location: SourceLocation = field(compare=False)


@dataclass(frozen=True)
class ModelSpec(ABC):
    """Parts shared by neuron and synapse specifications."""

    header: ModelHeader
    params: Tuple[Param, ...]
    initializers: Tuple[Initializer, ...]
    time_step: Tuple[Equation, ...]

    @property
    @abstractmethod
    def kind(self) -> ModelKind:
        """Neuron or synapse."""

    @property
    def type_name(self) -> str:
        return self.header.type_name

    @property
    def param_names(self) -> List[str]:
        return [p.name for p in self.params]

    @property
    def state_names(self) -> List[str]:
        """Persistent state: parameters followed by initialized variables."""
        return self.param_names + [i.name for i in self.initializers]


@dataclass(frozen=True)
class NeuronSpec(ModelSpec):
    spike_when: Expression
    getter_name: str
    getter: Expression
    reset: Tuple[Statement, ...]

    @property
    def kind(self) -> ModelKind:
        return ModelKind.NEURON


@dataclass(frozen=True)
class SynapseSpec(ModelSpec):
    weight_getter: Expression
    on_pre: Tuple[Statement, ...]
    on_post: Tuple[Statement, ...]

    @property
    def kind(self) -> ModelKind:
        return ModelKind.SYNAPSE

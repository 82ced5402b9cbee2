"""
Model specification language: lexer, specification tree and parser.

    from spikespec.dsl import parse_spec, ModelKind
"""

from spikespec.dsl.lexer import Token, tokenize
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
from spikespec.dsl.parser import Parser, parse_neuron, parse_spec, parse_synapse

__all__ = [
    "Token",
    "tokenize",
    "Parser",
    "parse_spec",
    "parse_neuron",
    "parse_synapse",
    "RESERVED_NAMES",
    "ModelKind",
    "ModelSpec",
    "NeuronSpec",
    "SynapseSpec",
    "ModelHeader",
    "Param",
    "Initializer",
    "Equation",
    "EquationKind",
    "Expression",
    "Statement",
]

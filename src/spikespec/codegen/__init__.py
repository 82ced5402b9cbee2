"""
Code generation from model specifications.

    from spikespec.codegen import define_neuron, generate_module
"""

from spikespec.codegen.functions import FUNCTIONS
from spikespec.codegen.generator import (
    CodeGenerator,
    compile_model,
    define_model,
    define_neuron,
    define_synapse,
    generate_module,
    generate_source,
)

__all__ = [
    "FUNCTIONS",
    "CodeGenerator",
    "compile_model",
    "define_model",
    "define_neuron",
    "define_synapse",
    "generate_module",
    "generate_source",
]

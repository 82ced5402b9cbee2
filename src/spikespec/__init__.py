"""
SPIKESPEC - Spiking neuron and synapse models from declarative specifications

Write a model once as a small specification, get a Python class that
implements the simulation contracts, and drive it with the runtime
generators.

Quick Start:
============

    from spikespec import define_neuron, SpikeAtTimes, record_hidden_unit

    Leaky = define_neuron('''
    Leaky<Voltage, Time>:
    params { tau: Time }
    initialize { v: Voltage = 0.0 }
    time_step { v @= (input - v) / tau }
    spike_when { v > 1.0 }
    get_voltage { v }
    reset { v = 0.0 }
    ''')
    unit = Leaky(10.0)
    record = record_hidden_unit(unit, [2.0] * 100, dt=1.0)

Internal Development:
=====================

Internal code should use explicit imports:

    from spikespec.dsl.parser import parse_spec
    from spikespec.codegen.generator import compile_model
    from spikespec.runtime.discrete import SpikeAtRate

Ready-made models live in `spikespec.library`.
"""

__version__ = "0.1.0"

# ============================================================================
# PUBLIC API
# ============================================================================

# Errors
from spikespec.errors import (
    ConfigurationError,
    GenerationError,
    SourceLocation,
    SpecificationError,
    SpikespecError,
)

# Configuration
from spikespec.config import CodegenConfig, SimulationConfig

# Units
from spikespec.units import Dimension, Quantity

# Specification language
from spikespec.dsl import ModelKind, NeuronSpec, SynapseSpec, parse_spec

# Code generation
from spikespec.codegen import (
    compile_model,
    define_model,
    define_neuron,
    define_synapse,
    generate_module,
    generate_source,
)

# Runtime
from spikespec.runtime import (
    InnerSpikeGenerator,
    InnerWithSpikeDecay,
    InputSpikeGenerator,
    SpikeAtRate,
    SpikeAtTimes,
    SpikeGenerator,
    Synaptic,
    WithSpikeDecay,
    exp_decay,
    with_spike_decay,
)

# Recording
from spikespec.recording import (
    SpikeRecord,
    record_hidden_unit,
    record_input_generator,
    record_synapse,
)

__all__ = [
    "__version__",
    # Errors
    "SpikespecError",
    "SpecificationError",
    "GenerationError",
    "ConfigurationError",
    "SourceLocation",
    # Configuration
    "SimulationConfig",
    "CodegenConfig",
    # Units
    "Dimension",
    "Quantity",
    # Specification language
    "parse_spec",
    "ModelKind",
    "NeuronSpec",
    "SynapseSpec",
    # Code generation
    "generate_source",
    "generate_module",
    "compile_model",
    "define_model",
    "define_neuron",
    "define_synapse",
    # Runtime
    "SpikeGenerator",
    "InnerSpikeGenerator",
    "InputSpikeGenerator",
    "Synaptic",
    "SpikeAtTimes",
    "SpikeAtRate",
    "WithSpikeDecay",
    "InnerWithSpikeDecay",
    "with_spike_decay",
    "exp_decay",
    # Recording
    "SpikeRecord",
    "record_input_generator",
    "record_hidden_unit",
    "record_synapse",
]

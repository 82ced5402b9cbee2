"""
Simulation and code generation settings.

SimulationConfig drives the recording helpers in ``spikespec.recording``;
CodegenConfig controls how generated unit classes are emitted.
"""

from __future__ import annotations

from dataclasses import dataclass

from .base import BaseConfig
from .validation import ValidatedConfig


@dataclass
class SimulationConfig(BaseConfig, ValidatedConfig):
    """Fixed-step recording parameters.

    Inherits device, dtype and seed from BaseConfig.

    Example:
        config = SimulationConfig(dt=0.1, n_steps=300)
        record = record_input_generator(spiker, config=config)
    """

    dt: float = 1.0
    """Time step handed to every advance/handle_input call."""

    n_steps: int = 100
    """Number of ticks to record."""

    _validation_rules = {
        'dt': ('positive', 'finite'),
        'n_steps': ('positive_integer',),
    }

    def __post_init__(self) -> None:
        self.validate_config()


@dataclass
class CodegenConfig(ValidatedConfig):
    """How the code generator emits unit classes."""

    use_slots: bool = True
    """Emit ``__slots__`` for the unit's state so typos in state names fail loudly."""

    register_source: bool = True
    """Register compiled source with linecache so tracebacks show generated lines."""

    module_name: str = "spikespec.generated"
    """Value of ``__module__`` on classes built by compile_model."""

    _validation_rules = {
        'module_name': ('non_empty_string',),
    }

    def __post_init__(self) -> None:
        self.validate_config()

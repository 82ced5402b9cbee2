"""
Configuration for spikespec.

    from spikespec.config import SimulationConfig, CodegenConfig
"""

from .base import BaseConfig
from .simulation import CodegenConfig, SimulationConfig
from .validation import ValidatedConfig, ValidatorRegistry

__all__ = [
    "BaseConfig",
    "CodegenConfig",
    "SimulationConfig",
    "ValidatedConfig",
    "ValidatorRegistry",
]

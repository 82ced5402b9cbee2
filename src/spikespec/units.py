"""Physical-quantity interface for spiking units.

The quantity substrate itself (numbers tagged with a physical dimension) is
not implemented here. Runtime components depend only on the small numeric
interface below plus a named dimension tag, so plain floats, one-element
torch tensors and third-party quantity types all work unchanged.

Example usage:
    from spikespec.units import Dimension, Time, Voltage, require_quantity

    tolerance = require_quantity(Time(0.1), "tolerance", Dimension.TIME)
    rest = Voltage(-65.0)
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, NewType, Protocol, TypeVar, runtime_checkable

import torch

from spikespec.errors import ConfigurationError

# =============================================================================
# DIMENSIONS
# =============================================================================


class Dimension(Enum):
    """Physical dimension tag carried by a unit's output or time axis."""

    TIME = "time"
    VOLTAGE = "voltage"
    CURRENT = "current"
    DIMENSIONLESS = "dimensionless"

    @property
    def is_output(self) -> bool:
        """Whether this dimension can be a spike generator's output."""
        return self in (Dimension.VOLTAGE, Dimension.CURRENT)

    @classmethod
    def from_name(cls, name: str) -> "Dimension":
        """Resolve a dimension from a header name such as ``Volt`` or ``si.Second``.

        Raises:
            KeyError: If the name is not a known alias
        """
        key = name.rsplit(".", 1)[-1].strip()
        try:
            return _DIMENSION_ALIASES[key.lower()]
        except KeyError:
            raise KeyError(name) from None


_DIMENSION_ALIASES: Dict[str, Dimension] = {
    "time": Dimension.TIME,
    "second": Dimension.TIME,
    "s": Dimension.TIME,
    "voltage": Dimension.VOLTAGE,
    "volt": Dimension.VOLTAGE,
    "v": Dimension.VOLTAGE,
    "current": Dimension.CURRENT,
    "ampere": Dimension.CURRENT,
    "amp": Dimension.CURRENT,
    "a": Dimension.CURRENT,
    "dimensionless": Dimension.DIMENSIONLESS,
    "unitless": Dimension.DIMENSIONLESS,
}

# =============================================================================
# SCALAR TYPES
# =============================================================================

Voltage = NewType("Voltage", float)
"""Membrane potential or spike amplitude."""

Current = NewType("Current", float)
"""Injected or synaptic current."""

Time = NewType("Time", float)
"""Simulation time, time step or tolerance. The time base is the caller's choice."""

VoltageTensor = NewType("VoltageTensor", torch.Tensor)
"""Tensor of voltages, e.g. a recorded output trace [n_steps]."""

# =============================================================================
# QUANTITY INTERFACE
# =============================================================================


@runtime_checkable
class Quantity(Protocol):
    """Numeric value supporting the operations runtime components rely on.

    Ordering, addition, subtraction and scaling by a scalar (multiplication
    or division). Floats, ints,
    torch tensors and typical unit-library quantities all satisfy it.
    """

    def __lt__(self, other: Any) -> Any:
        ...

    def __add__(self, other: Any) -> Any:
        ...

    def __sub__(self, other: Any) -> Any:
        ...

    def __mul__(self, other: Any) -> Any:
        ...

    def __truediv__(self, other: Any) -> Any:
        ...


Q = TypeVar("Q")


def require_quantity(value: Q, name: str, dimension: Dimension) -> Q:
    """Check once, at construction, that ``value`` can be used as a quantity.

    Values exposing a ``dimension`` attribute must carry the expected tag;
    untagged values are accepted on structure alone.

    Raises:
        ConfigurationError: If the value lacks the quantity operations or
            carries the wrong dimension tag
    """
    if isinstance(value, bool) or not isinstance(value, Quantity):
        raise ConfigurationError(
            f"{name} must be a {dimension.value} quantity, got {type(value).__name__}"
        )
    tag = getattr(value, "dimension", None)
    if isinstance(tag, Dimension) and tag is not dimension:
        raise ConfigurationError(
            f"{name} has dimension {tag.value}, expected {dimension.value}"
        )
    return value


def require_output_quantity(value: Q, name: str) -> Q:
    """Like require_quantity, for values on a unit's output axis (voltage or current)."""
    if isinstance(value, bool) or not isinstance(value, Quantity):
        raise ConfigurationError(
            f"{name} must be a voltage or current quantity, got {type(value).__name__}"
        )
    tag = getattr(value, "dimension", None)
    if isinstance(tag, Dimension) and not tag.is_output:
        raise ConfigurationError(
            f"{name} has dimension {tag.value}, expected voltage or current"
        )
    return value


def zero_like(value: Q) -> Q:
    """Zero in the same representation (type, dtype, device) as ``value``."""
    return value * 0


def to_base_units(value: Any) -> float:
    """Convert a quantity to a plain float in its base unit.

    Unit-library quantities (pint-style) are first converted with their own
    ``to_base_units()`` and then stripped to their ``magnitude``, so
    ``250 ms`` becomes ``0.25``.
    """
    if hasattr(value, "to_base_units"):
        value = value.to_base_units()
    if hasattr(value, "magnitude"):
        value = value.magnitude
    if isinstance(value, torch.Tensor):
        return float(value.item())
    return float(value)

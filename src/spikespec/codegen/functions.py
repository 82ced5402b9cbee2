"""
Function table available to model expressions.

Names in call position that are not model state resolve here. Each
function works on plain numbers (via ``math``/builtins) and on
``torch.Tensor`` state (via ``torch``), so a unit can keep one-element
tensors as state without changing its specification.

Example (in a specification):
    time_step { a_pre = a_pre * decay(dt, tau_pre) }
"""

from __future__ import annotations

import builtins
import math
from typing import Any, Callable, Dict

import torch


def _elementwise(scalar_fn: Callable[[Any], Any], tensor_fn: Callable[[Any], Any]):
    def fn(x: Any) -> Any:
        if isinstance(x, torch.Tensor):
            return tensor_fn(x)
        return scalar_fn(x)

    fn.__name__ = scalar_fn.__name__
    fn.__doc__ = f"{scalar_fn.__name__}(x) for numbers or tensors."
    return fn


exp = _elementwise(math.exp, torch.exp)
log = _elementwise(math.log, torch.log)
sqrt = _elementwise(math.sqrt, torch.sqrt)
tanh = _elementwise(math.tanh, torch.tanh)
sin = _elementwise(math.sin, torch.sin)
cos = _elementwise(math.cos, torch.cos)
abs = _elementwise(builtins.abs, torch.abs)  # noqa: A001


def min(a: Any, b: Any) -> Any:  # noqa: A001
    """Smaller of two numbers or elementwise minimum of tensors."""
    if isinstance(a, torch.Tensor) or isinstance(b, torch.Tensor):
        return torch.minimum(torch.as_tensor(a), torch.as_tensor(b))
    return builtins.min(a, b)


def max(a: Any, b: Any) -> Any:  # noqa: A001
    """Larger of two numbers or elementwise maximum of tensors."""
    if isinstance(a, torch.Tensor) or isinstance(b, torch.Tensor):
        return torch.maximum(torch.as_tensor(a), torch.as_tensor(b))
    return builtins.max(a, b)


def decay(dt: Any, tau: Any) -> Any:
    """Exponential decay factor exp(-dt / tau) over one step."""
    return exp(-dt / tau)


FUNCTIONS: Dict[str, Callable[..., Any]] = {
    "exp": exp,
    "log": log,
    "sqrt": sqrt,
    "tanh": tanh,
    "sin": sin,
    "cos": cos,
    "abs": abs,
    "min": min,
    "max": max,
    "decay": decay,
}
"""Name -> callable for every function a model expression may call."""

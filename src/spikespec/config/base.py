"""
Base Configuration Classes.

This module provides the base configuration dataclass shared by the
recording helpers and the code generator settings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import torch

from spikespec.errors import ConfigurationError


@dataclass
class BaseConfig:
    """Base configuration with common fields for tensor-producing components.

    - device: Hardware device (cpu/cuda) for recorded tensors
    - dtype: Tensor data type for recorded outputs
    - seed: Random seed for reproducibility
    """

    device: str = "cpu"
    """Device to record on: 'cpu', 'cuda', 'cuda:0', etc."""

    dtype: str = "float32"
    """Data type for recorded output tensors: 'float32', 'float64', 'float16'"""

    seed: Optional[int] = None
    """Random seed for reproducibility. None = no seeding."""

    def get_torch_device(self) -> torch.device:
        """Get PyTorch device object."""
        return torch.device(self.device)

    def get_torch_dtype(self) -> torch.dtype:
        """Get PyTorch dtype object."""
        dtype_map = {
            "float32": torch.float32,
            "float64": torch.float64,
            "float16": torch.float16,
            "bfloat16": torch.bfloat16,
        }
        if self.dtype not in dtype_map:
            raise ConfigurationError(
                f"Unknown dtype '{self.dtype}'. "
                f"Choose from: {list(dtype_map.keys())}"
            )
        return dtype_map[self.dtype]

    def apply_seed(self) -> None:
        """Seed torch if a seed is configured."""
        if self.seed is not None:
            torch.manual_seed(self.seed)

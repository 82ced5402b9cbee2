"""
Declarative validation for spikespec configs.

A config dataclass lists rule names per field in ``_validation_rules`` and
calls ``validate_config()`` from ``__post_init__``. Rules live in
ValidatorRegistry so new configs can reuse them by name.
"""

from __future__ import annotations

import math
from typing import Any, Callable, Dict, List, Tuple

from spikespec.errors import ConfigurationError

Validator = Callable[[Any, str], None]


class ValidatorRegistry:
    """Named validation rules.

    Usage:
        ValidatorRegistry.get_validator('positive')(0.1, 'dt')   # passes
        ValidatorRegistry.get_validator('positive')(-1.0, 'dt')  # ConfigurationError
    """

    _validators: Dict[str, Validator] = {}

    @classmethod
    def register(cls, name: str, validator: Validator) -> None:
        cls._validators[name] = validator

    @classmethod
    def get_validator(cls, rule: str) -> Validator:
        try:
            return cls._validators[rule]
        except KeyError:
            raise ValueError(f"Unknown validation rule: {rule}") from None


def _require_number(value: Any, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{name} must be numeric, got {type(value)}")


def positive(value: Any, name: str) -> None:
    _require_number(value, name)
    if value <= 0:
        raise ConfigurationError(f"{name}={value} must be positive")


def finite(value: Any, name: str) -> None:
    _require_number(value, name)
    if not math.isfinite(value):
        raise ConfigurationError(f"{name}={value} must be finite (not inf/nan)")


def positive_integer(value: Any, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be integer, got {type(value)}")
    if value <= 0:
        raise ConfigurationError(f"{name}={value} must be positive integer")


def non_empty_string(value: Any, name: str) -> None:
    if not isinstance(value, str):
        raise ConfigurationError(f"{name} must be string, got {type(value)}")
    if not value.strip():
        raise ConfigurationError(f"{name} must be non-empty string")


for _rule in (positive, finite, positive_integer, non_empty_string):
    ValidatorRegistry.register(_rule.__name__, _rule)


class ValidatedConfig:
    """Mixin running the rules in ``_validation_rules`` over a config's fields.

    Example:
        @dataclass
        class SimulationConfig(BaseConfig, ValidatedConfig):
            dt: float = 1.0

            _validation_rules = {'dt': ('positive', 'finite')}

            def __post_init__(self) -> None:
                self.validate_config()
    """

    _validation_rules: Dict[str, Tuple[str, ...]] = {}

    def validate_config(self) -> None:
        """Check every rule and report all failures together.

        Raises:
            ConfigurationError: Listing each failing field and rule
        """
        errors: List[str] = []
        for field_name, rules in self._validation_rules.items():
            value = getattr(self, field_name)
            for rule in rules:
                try:
                    ValidatorRegistry.get_validator(rule)(value, field_name)
                except ConfigurationError as e:
                    errors.append(str(e))

        if errors:
            details = "\n".join(f"  - {e}" for e in errors)
            raise ConfigurationError(
                f"{self.__class__.__name__} validation failed:\n{details}"
            )

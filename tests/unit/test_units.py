"""
Unit tests for dimension tags and the quantity interface.
"""

import pytest
import torch

from spikespec.errors import ConfigurationError
from spikespec.units import (
    Dimension,
    Quantity,
    require_output_quantity,
    require_quantity,
    to_base_units,
    zero_like,
)


@pytest.mark.unit
class TestDimension:

    @pytest.mark.parametrize("name, expected", [
        ("Voltage", Dimension.VOLTAGE),
        ("volt", Dimension.VOLTAGE),
        ("V", Dimension.VOLTAGE),
        ("Current", Dimension.CURRENT),
        ("Amp", Dimension.CURRENT),
        ("si.Ampere", Dimension.CURRENT),
        ("Time", Dimension.TIME),
        ("Second", Dimension.TIME),
        ("units.s", Dimension.TIME),
    ])
    def test_aliases(self, name, expected):
        assert Dimension.from_name(name) is expected

    def test_unknown_name(self):
        with pytest.raises(KeyError):
            Dimension.from_name("Furlong")

    def test_output_dimensions(self):
        assert Dimension.VOLTAGE.is_output
        assert Dimension.CURRENT.is_output
        assert not Dimension.TIME.is_output


@pytest.mark.unit
class TestQuantity:

    @pytest.mark.parametrize("value", [1, 0.5, torch.tensor(0.5)])
    def test_numbers_and_tensors_are_quantities(self, value):
        assert isinstance(value, Quantity)
        assert require_quantity(value, "x", Dimension.TIME) is value

    @pytest.mark.parametrize("value", [True, "0.5", None, [0.5]])
    def test_rejected_values(self, value):
        with pytest.raises(ConfigurationError, match="x must be a time quantity"):
            require_quantity(value, "x", Dimension.TIME)

    def test_output_quantity(self):
        assert require_output_quantity(0.3, "out") == 0.3
        with pytest.raises(ConfigurationError, match="voltage or current"):
            require_output_quantity(None, "out")

    def test_zero_like_keeps_representation(self):
        assert zero_like(3.5) == 0.0
        zero = zero_like(torch.tensor([1.0, 2.0], dtype=torch.float64))
        assert zero.dtype == torch.float64
        assert zero.shape == (2,)

    def test_to_base_units(self):
        assert to_base_units(torch.tensor(0.25)) == 0.25
        assert to_base_units(2) == 2.0

    def test_to_base_units_unit_library_quantity(self, duration):
        assert to_base_units(duration(250.0, scale=0.001)) == pytest.approx(0.25)
        assert to_base_units(duration(2.0)) == 2.0
        with pytest.raises(TypeError):
            float(duration(2.0))

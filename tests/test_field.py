"""
Tests for the displacement field container and regions.
"""

import pytest
import torch

from torchvarreg.field import DisplacementField, ImageRegion


class TestImageRegion:
    """Test image regions."""

    def test_basic_properties(self):
        """Test dimension and pixel count."""
        region = ImageRegion(index=(0, 0, 0), size=(4, 5, 6))

        assert region.dimension == 3
        assert region.number_of_pixels == 120

    def test_length_mismatch(self):
        """Test that index and size must have the same length."""
        with pytest.raises(ValueError, match="same length"):
            ImageRegion(index=(0, 0), size=(4, 5, 6))

    def test_equality(self):
        """Test value equality of regions."""
        assert ImageRegion((1, 2), (3, 4)) == ImageRegion([1, 2], [3, 4])
        assert ImageRegion((1, 2), (3, 4)) != ImageRegion((1, 2), (3, 5))

    def test_is_inside(self):
        """Test region containment."""
        outer = ImageRegion((0, 0), (10, 8))

        assert ImageRegion((2, 3), (5, 5)).is_inside(outer)
        assert outer.is_inside(outer)
        assert not ImageRegion((6, 0), (5, 2)).is_inside(outer)
        assert not ImageRegion((-1, 0), (2, 2)).is_inside(outer)
        assert not ImageRegion((0, 0, 0), (1, 1, 1)).is_inside(outer)

    def test_slices_are_array_ordered(self):
        """Test that slices are returned last axis first."""
        region = ImageRegion(index=(2, 5), size=(3, 4))

        assert region.slices((0, 0)) == (slice(5, 9), slice(2, 5))
        assert region.slices((1, 5)) == (slice(0, 4), slice(1, 4))


class TestDisplacementField:
    """Test the displacement field container."""

    def test_default_geometry(self):
        """Test default spacing, origin, direction and index."""
        field = DisplacementField(torch.zeros(3, 4, 5, 6))

        assert field.dimension == 3
        assert field.size == (6, 5, 4)
        assert field.spacing == (1.0, 1.0, 1.0)
        assert field.origin == (0.0, 0.0, 0.0)
        assert field.direction == (1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0)
        assert field.buffered_region == ImageRegion((0, 0, 0), (6, 5, 4))

    def test_component_count_must_match_dimension(self):
        """Test that vector arity must equal the spatial dimension."""
        with pytest.raises(ValueError, match="must have 2 components"):
            DisplacementField(torch.zeros(3, 8, 8))

    def test_scalar_tensor_rejected(self):
        """Test that a tensor without spatial dims is rejected."""
        with pytest.raises(ValueError, match="must have shape"):
            DisplacementField(torch.zeros(3))

    def test_geometry_length_checked(self):
        """Test that geometry tuples must match the dimension."""
        with pytest.raises(ValueError, match="spacing must have 2 entries"):
            DisplacementField(torch.zeros(2, 4, 4), spacing=(1.0, 1.0, 1.0))
        with pytest.raises(ValueError, match="direction must have 4 entries"):
            DisplacementField(torch.zeros(2, 4, 4), direction=(1.0, 0.0))

    def test_new_like_allocates(self):
        """Test that new_like allocates a buffer with the same geometry."""
        field = DisplacementField(
            torch.zeros(2, 4, 6, dtype=torch.float64),
            spacing=(0.5, 2.0),
            origin=(1.0, 2.0),
            index=(3, 4),
        )

        other = field.new_like()

        assert other is not field
        assert other.data.data_ptr() != field.data.data_ptr()
        assert other.same_geometry(field)
        assert other.dtype == torch.float64

    def test_new_like_with_data_shares_tensor(self):
        """Test that new_like keeps the given tensor without copying."""
        field = DisplacementField(torch.zeros(2, 4, 6))
        data = torch.ones(2, 4, 6)

        other = field.new_like(data)

        assert other.data is data

    def test_same_geometry(self):
        """Test geometry comparison."""
        field = DisplacementField(torch.zeros(2, 4, 6), spacing=(1.0, 2.0))

        assert field.same_geometry(DisplacementField(torch.ones(2, 4, 6), spacing=(1.0, 2.0)))
        assert not field.same_geometry(DisplacementField(torch.zeros(2, 4, 6)))
        assert not field.same_geometry(
            DisplacementField(torch.zeros(2, 6, 4), spacing=(1.0, 2.0))
        )

    def test_copy_information(self):
        """Test copying geometry between fields."""
        source = DisplacementField(
            torch.zeros(2, 4, 6), spacing=(0.5, 0.5), origin=(3.0, 4.0)
        )
        target = DisplacementField(torch.zeros(2, 4, 6))

        target.copy_information(source)

        assert target.same_geometry(source)

    def test_repr(self):
        """Test the field representation."""
        text = repr(DisplacementField(torch.zeros(2, 4, 6)))

        assert "size=(6, 4)" in text

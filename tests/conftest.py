"""
Test configuration and fixtures for torchvarreg tests.
"""

import numpy as np
import pytest
import SimpleITK as sitk
import torch

from torchvarreg.field import DisplacementField


@pytest.fixture
def device():
    """PyTorch device for testing."""
    return torch.device("cuda:0" if torch.cuda.is_available() else "cpu")


@pytest.fixture
def random_seed():
    """Set random seed for reproducible tests."""
    seed = 42
    torch.manual_seed(seed)
    np.random.seed(seed)
    return seed


@pytest.fixture
def field_2d_shape():
    """Standard 2D field shape (H, W) for testing."""
    return (24, 32)


@pytest.fixture
def field_3d_shape():
    """Standard 3D field shape (D, H, W) for testing."""
    return (12, 16, 20)


@pytest.fixture
def create_field_2d(field_2d_shape, random_seed):
    """Create a noisy synthetic 2D displacement field."""

    def _create_field(shape=None, noise_level=0.5, dtype=torch.float64, **geometry):
        if shape is None:
            shape = field_2d_shape

        H, W = shape
        y, x = torch.meshgrid(
            torch.linspace(-1, 1, H, dtype=dtype),
            torch.linspace(-1, 1, W, dtype=dtype),
            indexing="ij",
        )

        # Swirl around the center, components (dx, dy)
        envelope = torch.exp(-2 * (x**2 + y**2))
        data = torch.stack([-y * envelope, x * envelope], dim=0)

        if noise_level > 0:
            data = data + torch.randn_like(data) * noise_level

        return DisplacementField(data, **geometry)

    return _create_field


@pytest.fixture
def create_field_3d(field_3d_shape, random_seed):
    """Create a random 3D displacement field."""

    def _create_field(shape=None, dtype=torch.float64, **geometry):
        if shape is None:
            shape = field_3d_shape
        data = torch.randn(3, *shape, dtype=dtype)
        return DisplacementField(data, **geometry)

    return _create_field


@pytest.fixture
def create_spike_field_2d():
    """Create a 2D field that is zero everywhere except at one grid point."""

    def _create_field(shape=(21, 21), position=(10, 10), value=1.0):
        data = torch.zeros(2, *shape, dtype=torch.float64)
        data[:, position[0], position[1]] = value
        return DisplacementField(data)

    return _create_field


@pytest.fixture
def create_sitk_field():
    """Create SimpleITK displacement field images."""

    def _create_sitk_field(array: np.ndarray, spacing=None, origin=None):
        image = sitk.GetImageFromArray(array.astype(np.float64), isVector=True)

        if spacing is not None:
            image.SetSpacing(spacing)
        if origin is not None:
            image.SetOrigin(origin)

        return image

    return _create_sitk_field


@pytest.fixture
def tolerance():
    """Default tolerance for numerical comparisons."""
    return {"rtol": 1e-6, "atol": 1e-9}

"""
Tests for the differentiable Gaussian smoothing module.
"""

import numpy as np
import pytest
import torch

from torchvarreg.field import DisplacementField
from torchvarreg.regularizer import GaussianRegularizer
from torchvarreg.smoothing import GaussianSmoothing


class TestGaussianSmoothing:
    """Test Gaussian smoothing functionality."""

    def test_2d_smoothing_initialization(self):
        """Test 2D Gaussian smoothing initialization."""
        smoother = GaussianSmoothing(sigma=1.0, ndim=2)

        assert smoother.ndim == 2
        assert smoother.sigmas == (1.0, 1.0)
        assert smoother.kernel(0).dim() == 1
        assert smoother.kernel(1).numel() % 2 == 1

    def test_per_axis_sigma(self):
        """Test that per-axis sigmas produce per-axis kernels."""
        smoother = GaussianSmoothing(sigma=[0.5, 1.0, 3.0], ndim=3)

        assert smoother.sigmas == (0.5, 1.0, 3.0)
        assert smoother.kernel(2).numel() > smoother.kernel(0).numel()

    def test_per_axis_sigma_from_array(self):
        """Test that per-axis sigmas may be given as numpy arrays or tensors."""
        from_array = GaussianSmoothing(sigma=np.array([0.5, 2.0]), ndim=2)
        from_tensor = GaussianSmoothing(sigma=torch.tensor([0.5, 2.0]), ndim=2)

        assert from_array.sigmas == (0.5, 2.0)
        assert from_tensor.sigmas == (0.5, 2.0)
        assert torch.equal(from_array.kernel(1), from_tensor.kernel(1))

    def test_sigma_count_mismatch(self):
        """Test that the number of sigmas must match ndim."""
        with pytest.raises(ValueError, match="Expected 3 sigma values"):
            GaussianSmoothing(sigma=[1.0, 2.0], ndim=3)

    def test_kernels_are_buffers(self):
        """Test that kernels are registered buffers, not parameters."""
        smoother = GaussianSmoothing(sigma=1.0, ndim=2)

        assert len(list(smoother.parameters())) == 0
        assert {name for name, _ in smoother.named_buffers()} == {
            "kernel_0",
            "kernel_1",
        }

    def test_3d_smoothing_application(self, device):
        """Test applying 3D Gaussian smoothing."""
        smoother = GaussianSmoothing(sigma=1.0, ndim=3).to(device)
        x = torch.randn(2, 3, 8, 12, 16, device=device)

        smoothed = smoother(x)

        assert smoothed.shape == x.shape
        assert smoothed.var() <= x.var()

    def test_matches_regularizer(self, random_seed):
        """Test that the module matches the regularizer on the same field."""
        data = torch.randn(2, 20, 24, dtype=torch.float64)
        sigmas = [1.2, 2.4]

        regularized = GaussianRegularizer(
            dimension=2, standard_deviations=sigmas
        ).regularize(DisplacementField(data))
        smoothed = GaussianSmoothing(sigma=sigmas, ndim=2)(data.unsqueeze(0))

        assert torch.allclose(smoothed[0], regularized.data, atol=1e-12)

    def test_gradient_flow(self):
        """Test that gradients can flow through the smoothing."""
        velocity = torch.randn(1, 2, 16, 16, requires_grad=True)
        smoother = GaussianSmoothing(sigma=1.5, ndim=2)

        loss = (smoother(velocity) ** 2).sum()
        loss.backward()

        assert velocity.grad is not None
        assert velocity.grad.shape == velocity.shape

    def test_wrong_input_dimension(self):
        """Test that the input must be [B, C, *spatial]."""
        smoother = GaussianSmoothing(sigma=1.0, ndim=3)

        with pytest.raises(ValueError, match="3 spatial dims"):
            smoother(torch.randn(1, 2, 16, 16))

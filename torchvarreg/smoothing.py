"""
Differentiable Gaussian smoothing for use inside optimization loops.
"""

from collections.abc import Sequence

import numpy as np
import torch
import torch.nn as nn

from .kernels import GaussianOperator
from .processing import convolve_along_axis


class GaussianSmoothing(nn.Module):
    """
    Apply separable Gaussian smoothing to regularize deformation or velocity fields.

    Uses the same truncated discrete kernels and axis order as
    :class:`torchvarreg.regularizer.GaussianRegularizer`, but works on batched
    tensors and keeps the autograd graph intact.
    """

    def __init__(
        self,
        sigma: float | Sequence[float],
        ndim: int = 3,
        maximum_error: float = 0.1,
        maximum_kernel_width: int = 30,
    ):
        """
        Args:
            sigma: Standard deviation for the Gaussian kernel, for all axes or per axis
            ndim: Number of spatial dimensions
            maximum_error: Kernel mass that may be discarded by truncation
            maximum_kernel_width: Maximum kernel half-width in pixels
        """
        super().__init__()
        self.ndim = ndim
        if np.ndim(sigma) > 0:
            sigmas = [float(s) for s in sigma]
            if len(sigmas) != ndim:
                raise ValueError(f"Expected {ndim} sigma values, got {len(sigmas)}")
        else:
            sigmas = [float(sigma)] * ndim
        self.sigmas = tuple(sigmas)

        for axis, s in enumerate(sigmas):
            operator = GaussianOperator(
                direction=axis,
                variance=s**2,
                maximum_error=maximum_error,
                maximum_kernel_width=maximum_kernel_width,
            )
            self.register_buffer(f"kernel_{axis}", operator.create_directional())

    def kernel(self, axis: int) -> torch.Tensor:
        """Kernel applied along ``axis`` (0 = x)."""
        return getattr(self, f"kernel_{axis}")  # type: ignore[no-any-return]

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        """
        Apply Gaussian smoothing.

        Args:
            x: Tensor of shape [B, C, H, W] for 2D or [B, C, D, H, W] for 3D

        Returns:
            Smoothed tensor of the same shape
        """
        if x.dim() != self.ndim + 2:
            raise ValueError(
                f"Expected a [B, C, *spatial] tensor with {self.ndim} spatial dims, "
                f"got shape {tuple(x.shape)}"
            )
        for axis in range(self.ndim):
            x = convolve_along_axis(x, self.kernel(axis), axis)
        return x

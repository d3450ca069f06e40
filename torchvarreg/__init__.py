"""
TorchVarReg: Gaussian regularization of displacement fields using PyTorch

Regularizers for the update step of iterative (variational) image
registration. A dense displacement field is smoothed component-wise with a
separable Gaussian so that it stays locally smooth between iterations.

Quick Example:
    >>> import torch
    >>> import torchvarreg
    >>>
    >>> field = torchvarreg.DisplacementField(torch.randn(3, 32, 64, 64))  # [N, D, H, W]
    >>>
    >>> regularizer = torchvarreg.GaussianRegularizer(dimension=3)
    >>> regularizer.set_standard_deviations(2.0)
    >>> smoothed = regularizer.regularize(field)
    >>>
    >>> # Per-axis standard deviations (x, y, z)
    >>> regularizer.set_standard_deviations([1.0, 1.0, 2.0])
    >>> smoothed = regularizer.regularize(field)
"""

__version__ = "0.1.0"

# Import submodules to make them available as torchvarreg.submodule
from . import (
    base,
    config,
    conversion,
    field,
    io,
    kernels,
    logging_config,
    processing,
    regularizer,
    smoothing,
)

# Only expose the most essential classes/functions at the top level
from .config import RegularizerConfig
from .field import DisplacementField, ImageRegion
from .regularizer import GaussianRegularizer, regularize_field

__all__ = [
    # Essential classes (top-level access)
    "DisplacementField",
    "GaussianRegularizer",
    "ImageRegion",
    "RegularizerConfig",
    "regularize_field",
    # Submodules (for organized access: torchvarreg.kernels.GaussianOperator, etc.)
    "base",
    "config",
    "conversion",
    "field",
    "io",
    "kernels",
    "logging_config",
    "processing",
    "regularizer",
    "smoothing",
]

"""
Discrete Gaussian kernels for separable smoothing.

The kernel is the sampled discrete analogue of the Gaussian,
``exp(-t) * I_n(t)`` with ``t`` the variance and ``I_n`` the modified Bessel
function of integer order ``n``, truncated once the retained mass reaches
``1 - maximum_error``.
"""

import logging

import numpy as np
import torch
from scipy import special

logger = logging.getLogger(__name__)


class GaussianOperator:
    """
    One-dimensional Gaussian kernel oriented along a single axis.

    Args:
        direction: Axis the kernel is applied along (0 = x)
        variance: Variance of the Gaussian in pixel units
        maximum_error: Upper bound on the kernel mass discarded by truncation
        maximum_kernel_width: Upper bound on the kernel half-width in taps
    """

    def __init__(
        self,
        direction: int = 0,
        variance: float = 1.0,
        maximum_error: float = 0.01,
        maximum_kernel_width: int = 30,
    ):
        self.direction = direction
        self.variance = variance
        self.maximum_error = maximum_error
        self.maximum_kernel_width = maximum_kernel_width
        self._coefficients: torch.Tensor | None = None

    @property
    def maximum_error(self) -> float:
        return self._maximum_error

    @maximum_error.setter
    def maximum_error(self, value: float) -> None:
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"Maximum error must be in the range [0.0, 1.0], got {value}")
        self._maximum_error = float(value)

    def _generate_coefficients(self) -> list[float]:
        """Compute the non-negative half of the kernel, center tap first."""
        t = self.variance
        cap = 1.0 - self.maximum_error
        eps = np.finfo(np.float64).eps

        coeff = [float(special.ive(0, t)), float(special.ive(1, t))]
        total = coeff[0] + 2.0 * coeff[1]

        order = 2
        while total < cap:
            value = float(special.ive(order, t))
            coeff.append(value)
            total += 2.0 * value
            if value < total * eps:
                logger.warning(
                    "Underflow of Gaussian kernel coefficients at order %d "
                    "(variance=%g, maximum_error=%g); the kernel is truncated",
                    order,
                    t,
                    self.maximum_error,
                )
                break
            if len(coeff) > self.maximum_kernel_width:
                logger.warning(
                    "Kernel size has exceeded the specified maximum width of %d "
                    "and has been truncated to %d elements (variance=%g); "
                    "consider increasing the maximum kernel width or the maximum error",
                    self.maximum_kernel_width,
                    2 * len(coeff) - 1,
                    t,
                )
                break
            order += 1

        return [c / total for c in coeff]

    def create_directional(self) -> torch.Tensor:
        """
        Build the symmetric kernel.

        Returns:
            Float64 tensor with ``2 * radius + 1`` normalized coefficients
        """
        half = self._generate_coefficients()
        full = half[:0:-1] + half
        self._coefficients = torch.tensor(full, dtype=torch.float64)
        return self._coefficients

    @property
    def coefficients(self) -> torch.Tensor:
        if self._coefficients is None:
            raise RuntimeError(
                "Kernel coefficients are not available; call create_directional() first"
            )
        return self._coefficients

    @property
    def radius(self) -> int:
        return (self.size - 1) // 2

    @property
    def size(self) -> int:
        return self.coefficients.numel()

    def __repr__(self) -> str:
        return (
            f"GaussianOperator(direction={self.direction}, variance={self.variance}, "
            f"maximum_error={self.maximum_error}, "
            f"maximum_kernel_width={self.maximum_kernel_width})"
        )

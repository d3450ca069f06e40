"""
Gaussian regularization of displacement fields.

The field is smoothed with a separable Gaussian, one 1D pass per axis, each
pass consuming the result of the previous one. Every vector component is
smoothed independently.
"""

import logging
from collections.abc import Sequence

import numpy as np
import torch

from .base import BaseRegularizer
from .config import RegularizerConfig
from .field import DisplacementField
from .kernels import GaussianOperator
from .processing import VectorNeighborhoodOperatorFilter

logger = logging.getLogger(__name__)


class GaussianRegularizer(BaseRegularizer):
    """
    Regularize a displacement field by Gaussian smoothing of its components.

    Smoothing runs along axis 0 (x) first, then axis 1, and so on. The
    standard deviations are in pixel units; the field spacing is not taken
    into account.
    """

    def __init__(
        self,
        dimension: int = 3,
        standard_deviations: float | Sequence[float] = 1.0,
        maximum_error: float = 0.1,
        maximum_kernel_width: int = 30,
    ):
        """
        Args:
            dimension: Spatial dimension of the fields to regularize
            standard_deviations: Gaussian standard deviation, for all axes or per axis
            maximum_error: Kernel mass that may be discarded by truncation
            maximum_kernel_width: Maximum kernel half-width in pixels
        """
        super().__init__(dimension=dimension)
        self._standard_deviations = [1.0] * dimension
        self._maximum_error = float(maximum_error)
        self._maximum_kernel_width = int(maximum_kernel_width)
        self.set_standard_deviations(standard_deviations)

    @classmethod
    def from_config(cls, config: RegularizerConfig) -> "GaussianRegularizer":
        return cls(
            dimension=config.dimension,
            standard_deviations=config.standard_deviations,
            maximum_error=config.maximum_error,
            maximum_kernel_width=config.maximum_kernel_width,
        )

    @property
    def standard_deviations(self) -> tuple[float, ...]:
        return tuple(self._standard_deviations)

    @standard_deviations.setter
    def standard_deviations(self, value: float | Sequence[float]) -> None:
        self.set_standard_deviations(value)

    def set_standard_deviations(self, value: float | Sequence[float]) -> None:
        """
        Set the standard deviations of the Gaussian.

        A scalar is applied to every axis. The regularizer is only marked as
        modified when at least one axis actually changes.

        Args:
            value: Standard deviation for all axes, or one value per axis
        """
        if np.ndim(value) > 0:
            values = [float(v) for v in value]
            if len(values) != self.dimension:
                raise ValueError(
                    f"Expected {self.dimension} standard deviations, got {len(values)}"
                )
        else:
            values = [float(value)] * self.dimension

        if values != self._standard_deviations:
            self._standard_deviations = values
            self.modified()

    @property
    def maximum_error(self) -> float:
        return self._maximum_error

    @maximum_error.setter
    def maximum_error(self, value: float) -> None:
        if value != self._maximum_error:
            self._maximum_error = float(value)
            self.modified()

    @property
    def maximum_kernel_width(self) -> int:
        return self._maximum_kernel_width

    @maximum_kernel_width.setter
    def maximum_kernel_width(self, value: int) -> None:
        if value != self._maximum_kernel_width:
            self._maximum_kernel_width = int(value)
            self.modified()

    def initialize(self) -> None:
        # TODO: scale the standard deviations by the field spacing once it is
        # decided whether sigma should be given in physical units
        super().initialize()

    def _create_smoothers(
        self, field: DisplacementField
    ) -> list[VectorNeighborhoodOperatorFilter]:
        smoothers: list[VectorNeighborhoodOperatorFilter] = []
        for j in range(self.dimension):
            # smooth along this dimension
            operator = GaussianOperator(
                direction=j,
                variance=self._standard_deviations[j] ** 2,
                maximum_error=self._maximum_error,
                maximum_kernel_width=self._maximum_kernel_width,
            )
            operator.create_directional()

            smoother = VectorNeighborhoodOperatorFilter(operator)
            smoother.release_data_flag = True
            smoother.set_input(smoothers[j - 1] if j > 0 else field)
            smoothers.append(smoother)
        return smoothers

    def generate_data(self) -> None:
        """Smooth the input field axis by axis and publish the result."""
        self.allocate_outputs()
        self.initialize()

        field = self.get_input()
        if field is None:
            raise RuntimeError("Input displacement field has not been set")

        smoothers = self._create_smoothers(field)
        logger.debug(
            "Regularizing %s with standard deviations %s (kernel radii %s)",
            field,
            self.standard_deviations,
            [s.operator.radius for s in smoothers],
        )

        last = smoothers[-1]
        last.requested_region = field.buffered_region
        result = last.update()

        self.graft_output(result)
        last.release_data()
        logger.debug("Regularization finished")

    def print_self(self, indent: str = "") -> str:
        text = super().print_self(indent)
        sigmas = ", ".join(str(s) for s in self._standard_deviations)
        text += f"{indent}Standard deviations: [{sigmas}]\n"
        text += f"{indent}MaximumError: {self._maximum_error}\n"
        text += f"{indent}MaximumKernelWidth: {self._maximum_kernel_width}\n"
        return text


def regularize_field(
    field: DisplacementField | torch.Tensor,
    standard_deviations: float | Sequence[float] = 1.0,
    maximum_error: float = 0.1,
    maximum_kernel_width: int = 30,
) -> DisplacementField | torch.Tensor:
    """
    Smooth a displacement field with a separable Gaussian.

    Args:
        field: Displacement field, or a tensor of shape [N, *spatial]
        standard_deviations: Gaussian standard deviation, for all axes or per axis
        maximum_error: Kernel mass that may be discarded by truncation
        maximum_kernel_width: Maximum kernel half-width in pixels

    Returns:
        Regularized field of the same kind as the input
    """
    is_tensor = isinstance(field, torch.Tensor)
    if is_tensor:
        field = DisplacementField(field)

    regularizer = GaussianRegularizer(
        dimension=field.dimension,
        standard_deviations=standard_deviations,
        maximum_error=maximum_error,
        maximum_kernel_width=maximum_kernel_width,
    )
    output = regularizer.regularize(field)
    return output.data if is_tensor else output

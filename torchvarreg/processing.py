"""
One-dimensional convolution passes over displacement fields.

This module contains the separable convolution primitive and the chainable
filter stage built on it. Each stage smooths every vector component of a field
along a single axis.
"""

import logging

import torch
import torch.nn.functional as F

from .field import DisplacementField, ImageRegion
from .kernels import GaussianOperator

logger = logging.getLogger(__name__)


def convolve_along_axis(
    data: torch.Tensor, kernel: torch.Tensor, axis: int
) -> torch.Tensor:
    """
    Convolve a channel-first tensor with a 1D kernel along one spatial axis.

    Works for both [C, *spatial] and [B, C, *spatial] tensors. Values outside
    the buffer are replaced by the nearest edge value (zero-flux Neumann), so
    the output has the same shape as the input.

    Args:
        data: Input tensor, spatial dims in array order
        kernel: Symmetric 1D kernel with an odd number of taps
        axis: Spatial axis in index order (0 = x, the last tensor dim)

    Returns:
        Smoothed tensor of the same shape, dtype and device
    """
    return _convolve(data, kernel, data.dim() - 1 - axis)


def _convolve(data: torch.Tensor, kernel: torch.Tensor, dim: int) -> torch.Tensor:
    if data.numel() == 0:
        raise ValueError(
            f"Cannot convolve a buffer with zero extent, got shape {tuple(data.shape)}"
        )

    kernel_size = kernel.numel()
    padding = kernel_size // 2
    weight = kernel.to(dtype=data.dtype, device=data.device).view(1, 1, kernel_size)

    # Move the smoothed dim last and fold everything else into the batch
    moved = data.movedim(dim, -1)
    moved_shape = moved.shape
    lines = moved.reshape(-1, 1, moved_shape[-1])

    if padding > 0:
        lines = F.pad(lines, (padding, padding), mode="replicate")
    smoothed = F.conv1d(lines, weight)

    return smoothed.reshape(moved_shape).movedim(-1, dim)


class VectorNeighborhoodOperatorFilter:
    """
    Smooth all components of a displacement field along the operator's axis.

    Stages can be chained by passing another stage to ``set_input``; the
    upstream stage is brought up to date before this one runs.

    Args:
        operator: Gaussian operator whose direction and coefficients define the pass
    """

    def __init__(self, operator: GaussianOperator):
        self.operator = operator
        self.requested_region: ImageRegion | None = None
        self.release_data_flag = False
        self._input: DisplacementField | VectorNeighborhoodOperatorFilter | None = None
        self._output: DisplacementField | None = None

    def set_input(
        self, source: "DisplacementField | VectorNeighborhoodOperatorFilter"
    ) -> None:
        self._input = source
        self._output = None

    def get_output(self) -> DisplacementField | None:
        return self._output

    def release_data(self) -> None:
        """Drop the output buffer once a downstream stage has consumed it."""
        self._output = None

    def _resolve_input(self) -> DisplacementField:
        if self._input is None:
            raise RuntimeError("Input field has not been set")

        if isinstance(self._input, VectorNeighborhoodOperatorFilter):
            upstream = self._input
            if upstream.get_output() is None:
                upstream.update()
            field = upstream.get_output()
            if field is None:
                raise RuntimeError("Upstream stage produced no output")
            if upstream.release_data_flag:
                upstream.release_data()
            return field

        return self._input

    def update(self) -> DisplacementField:
        """
        Run the pass.

        Returns:
            Smoothed field cropped to the requested region (if set)
        """
        field = self._resolve_input()
        axis = self.operator.direction
        if not 0 <= axis < field.dimension:
            raise ValueError(
                f"Smoothing direction {axis} is invalid for a {field.dimension}D field"
            )

        region = self.requested_region
        if region is not None and not region.is_inside(field.buffered_region):
            raise ValueError(
                f"Requested region {region} is outside the buffered region "
                f"{field.buffered_region}"
            )

        smoothed = convolve_along_axis(field.data, self.operator.coefficients, axis)

        output = field.new_like(smoothed)
        if region is not None and region != field.buffered_region:
            output = DisplacementField(
                smoothed[(slice(None), *region.slices(field.index))],
                spacing=field.spacing,
                origin=field.origin,
                direction=field.direction,
                index=region.index,
            )

        logger.debug(
            "Smoothed %s along axis %d with kernel radius %d",
            field,
            axis,
            self.operator.radius,
        )
        self._output = output
        return output

"""
Base class for displacement field regularizers.

Regularizers are pull-based computation nodes: parameters are set, an input
field is attached, and the smoothed field is (re)computed on request only when
the node or its input has changed since the last run.
"""

import itertools
import logging
from abc import abstractmethod

import torch

from .field import DisplacementField

logger = logging.getLogger(__name__)

# Process-wide modification clock shared by all regularizers
_modified_clock = itertools.count(1)


class BaseRegularizer:
    """
    Base class for regularizers of N-dimensional displacement fields.

    Provides the modification tracking and the output lifecycle hooks
    (allocate, initialize, graft) used by concrete regularizers.
    """

    def __init__(self, dimension: int = 3):
        """
        Args:
            dimension: Spatial dimension of the fields to regularize
        """
        if dimension < 1:
            raise ValueError(f"dimension must be positive, got {dimension}")
        self.dimension = dimension

        self._input: DisplacementField | None = None
        self._output: DisplacementField | None = None
        self._mtime = 0
        self._update_time = 0
        self.modified()

    def modified(self) -> None:
        """Mark the regularizer as changed so the next update recomputes."""
        self._mtime = next(_modified_clock)

    @property
    def mtime(self) -> int:
        return self._mtime

    @property
    def needs_update(self) -> bool:
        return self._output is None or self._mtime > self._update_time

    def set_input(self, field: DisplacementField | torch.Tensor) -> None:
        """
        Attach the field to regularize.

        The field is only read; a new input object marks the regularizer as modified.
        """
        if isinstance(field, torch.Tensor):
            if self._input is not None and self._input.data is field:
                return
            field = DisplacementField(field)
        if field is not self._input:
            self._input = field
            self.modified()

    def get_input(self) -> DisplacementField | None:
        return self._input

    def get_output(self) -> DisplacementField | None:
        return self._output

    def allocate_outputs(self) -> None:
        """Allocate an output field with the geometry of the input."""
        if self._input is None:
            raise RuntimeError("Input displacement field has not been set")
        # Shape-only placeholder; graft_output supplies the data
        self._output = self._input.new_like(
            torch.empty_like(self._input.data, device="meta")
        )

    def initialize(self) -> None:
        """Check that the input can be regularized."""
        field = self._input
        if field is None:
            raise RuntimeError("Input displacement field has not been set")
        if field.dimension != self.dimension:
            raise ValueError(
                f"{type(self).__name__} expects a {self.dimension}D displacement field, "
                f"got a {field.dimension}D field"
            )

    def graft_output(self, field: DisplacementField) -> None:
        """Publish ``field`` as this regularizer's output without copying its data."""
        if self._output is None:
            self._output = field.new_like(field.data)
        else:
            self._output.data = field.data
            self._output.copy_information(field)

    def update(self) -> DisplacementField:
        """
        Bring the output up to date.

        Returns:
            The regularized field; the cached one when nothing changed
        """
        if self.needs_update:
            try:
                self.generate_data()
            except Exception:
                self._output = None
                raise
            self._update_time = next(_modified_clock)
        if self._output is None:
            raise RuntimeError(f"{type(self).__name__} produced no output")
        return self._output

    def regularize(self, field: DisplacementField | torch.Tensor) -> DisplacementField:
        """
        Regularize a displacement field.

        Args:
            field: Displacement field, or a tensor of shape [N, *spatial]

        Returns:
            Regularized field with the geometry of the input
        """
        self.set_input(field)
        return self.update()

    def __call__(self, field: DisplacementField | torch.Tensor) -> DisplacementField:
        return self.regularize(field)

    @abstractmethod
    def generate_data(self) -> None:
        """
        Compute the regularized output from the input.

        To be implemented by subclasses.
        """
        pass

    def print_self(self, indent: str = "") -> str:
        """Return a textual dump of the regularizer state."""
        lines = [
            f"{indent}{type(self).__name__}",
            f"{indent}Dimension: {self.dimension}",
            f"{indent}Input: {self._input!r}",
        ]
        return "\n".join(lines) + "\n"

    def __str__(self) -> str:
        return self.print_self()

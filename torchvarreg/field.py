"""
Dense displacement field container.

A displacement field holds one vector per grid point, with one component per
spatial axis. Geometry (size, spacing, origin, direction, index) is stored in
index order, i.e. axis 0 is x, following the SimpleITK convention, while the
tensor keeps the array order used by ``sitk.GetArrayFromImage``.
"""

from collections.abc import Sequence
from dataclasses import dataclass

import torch


@dataclass(frozen=True)
class ImageRegion:
    """
    Rectangular region of a grid, given by a start index and a size.

    Both tuples are in index order (x first).
    """

    index: tuple[int, ...]
    size: tuple[int, ...]

    def __post_init__(self) -> None:
        if len(self.index) != len(self.size):
            raise ValueError(
                f"Region index and size must have the same length, "
                f"got {len(self.index)} and {len(self.size)}"
            )
        object.__setattr__(self, "index", tuple(int(i) for i in self.index))
        object.__setattr__(self, "size", tuple(int(s) for s in self.size))

    @property
    def dimension(self) -> int:
        return len(self.size)

    @property
    def number_of_pixels(self) -> int:
        count = 1
        for s in self.size:
            count *= s
        return count

    def is_inside(self, other: "ImageRegion") -> bool:
        """Check whether this region lies completely within ``other``."""
        if self.dimension != other.dimension:
            return False
        for start, length, outer_start, outer_length in zip(
            self.index, self.size, other.index, other.size, strict=True
        ):
            if start < outer_start or start + length > outer_start + outer_length:
                return False
        return True

    def slices(self, buffered_index: Sequence[int]) -> tuple[slice, ...]:
        """
        Tensor slices selecting this region from a buffer starting at ``buffered_index``.

        Returns:
            Slices for the spatial tensor dims, in array order (last axis first)
        """
        slices = [
            slice(start - offset, start - offset + length)
            for start, length, offset in zip(
                self.index, self.size, buffered_index, strict=True
            )
        ]
        return tuple(reversed(slices))


class DisplacementField:
    """
    N-dimensional grid of N-component displacement vectors.

    Args:
        data: Tensor of shape [N, *spatial], spatial dims in array order
            ([D, H, W] for 3D, [H, W] for 2D)
        spacing: Grid spacing per axis (x first), defaults to 1.0
        origin: Physical origin per axis (x first), defaults to 0.0
        direction: Row-major N*N direction cosines, defaults to identity
        index: Start index of the buffered region, defaults to zeros
    """

    def __init__(
        self,
        data: torch.Tensor,
        spacing: Sequence[float] | None = None,
        origin: Sequence[float] | None = None,
        direction: Sequence[float] | None = None,
        index: Sequence[int] | None = None,
    ):
        ndim = data.dim() - 1
        if ndim < 1:
            raise ValueError(
                f"Displacement field data must have shape [N, *spatial], got {tuple(data.shape)}"
            )
        if data.shape[0] != ndim:
            raise ValueError(
                f"Displacement field of dimension {ndim} must have {ndim} components, "
                f"got {data.shape[0]}"
            )

        self.data = data
        self.spacing = self._check_length(
            "spacing", spacing if spacing is not None else (1.0,) * ndim, ndim, float
        )
        self.origin = self._check_length(
            "origin", origin if origin is not None else (0.0,) * ndim, ndim, float
        )
        if direction is None:
            direction = [
                1.0 if row == col else 0.0 for row in range(ndim) for col in range(ndim)
            ]
        self.direction = self._check_length("direction", direction, ndim * ndim, float)
        self.index = self._check_length(
            "index", index if index is not None else (0,) * ndim, ndim, int
        )

    @staticmethod
    def _check_length(name, values, expected, cast):
        values = tuple(cast(v) for v in values)
        if len(values) != expected:
            raise ValueError(f"{name} must have {expected} entries, got {len(values)}")
        return values

    @property
    def dimension(self) -> int:
        return self.data.shape[0]

    @property
    def size(self) -> tuple[int, ...]:
        """Grid size in index order (x first)."""
        return tuple(reversed(self.data.shape[1:]))

    @property
    def buffered_region(self) -> ImageRegion:
        return ImageRegion(self.index, self.size)

    @property
    def dtype(self) -> torch.dtype:
        return self.data.dtype

    @property
    def device(self) -> torch.device:
        return self.data.device

    def copy_information(self, other: "DisplacementField") -> None:
        """Copy spacing, origin, direction and index from another field."""
        self.spacing = other.spacing
        self.origin = other.origin
        self.direction = other.direction
        self.index = other.index

    def new_like(self, data: torch.Tensor | None = None) -> "DisplacementField":
        """
        Create a field with the same geometry.

        Args:
            data: Tensor for the new field; an uninitialized buffer of the same
                shape, dtype and device is allocated when omitted

        Returns:
            New displacement field
        """
        if data is None:
            data = torch.empty_like(self.data)
        return DisplacementField(
            data,
            spacing=self.spacing,
            origin=self.origin,
            direction=self.direction,
            index=self.index,
        )

    def same_geometry(self, other: "DisplacementField") -> bool:
        return (
            self.size == other.size
            and self.spacing == other.spacing
            and self.origin == other.origin
            and self.direction == other.direction
            and self.index == other.index
        )

    def __repr__(self) -> str:
        return (
            f"DisplacementField(size={self.size}, spacing={self.spacing}, "
            f"origin={self.origin}, dtype={self.dtype}, device={self.device})"
        )

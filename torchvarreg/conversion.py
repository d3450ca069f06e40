"""
Utility functions for converting between SimpleITK displacement fields and torch.
"""

import numpy as np
import SimpleITK as sitk
import torch

from .field import DisplacementField


def sitk_to_field(
    image: sitk.Image, dtype: torch.dtype = torch.float32
) -> DisplacementField:
    """
    Convert SimpleITK displacement field image to a DisplacementField.

    Args:
        image: SimpleITK vector image with one component per dimension
        dtype: Desired PyTorch dtype for the field data (default: torch.float32)

    Returns:
        DisplacementField with data of shape [N, *spatial]

    Note:
        - Displacements are kept in the units stored in the image (physical units
          for images used by sitk.DisplacementFieldTransform)
        - SimpleITK arrays are (z, y, x, N); the component axis is moved to the front
    """
    dimension = image.GetDimension()
    components = image.GetNumberOfComponentsPerPixel()
    if components != dimension:
        raise ValueError(
            f"Displacement field image must have {dimension} components per pixel, "
            f"got {components}"
        )

    array = sitk.GetArrayFromImage(image)
    if array.ndim == dimension:
        # Single-component 1D images come back without a component axis
        array = array[..., np.newaxis]
    array = np.moveaxis(array, -1, 0)
    data = torch.from_numpy(np.ascontiguousarray(array)).to(dtype)

    return DisplacementField(
        data,
        spacing=image.GetSpacing(),
        origin=image.GetOrigin(),
        direction=image.GetDirection(),
    )


def field_to_sitk(field: DisplacementField) -> sitk.Image:
    """
    Convert DisplacementField to SimpleITK displacement field image.

    Args:
        field: Displacement field

    Returns:
        SimpleITK float64 vector image with the geometry of the field
    """
    data = field.data
    if data.requires_grad:
        array = data.detach().cpu().numpy()
    else:
        array = data.cpu().numpy()

    # SimpleITK requires float64 for displacement fields
    array = np.moveaxis(array, 0, -1).astype(np.float64)
    image = sitk.GetImageFromArray(array, isVector=True)

    image.SetSpacing(field.spacing)
    image.SetOrigin(field.origin)
    image.SetDirection(field.direction)

    return image


def field_to_displacement_transform(
    field: DisplacementField,
) -> sitk.DisplacementFieldTransform:
    """
    Convert DisplacementField to SimpleITK DisplacementFieldTransform.

    Args:
        field: Displacement field in physical units

    Returns:
        SimpleITK DisplacementFieldTransform
    """
    return sitk.DisplacementFieldTransform(field_to_sitk(field))

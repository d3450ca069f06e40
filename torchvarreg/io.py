"""
Reading and writing displacement fields with SimpleITK.
"""

from pathlib import Path

import SimpleITK as sitk
import torch

from .conversion import field_to_sitk, sitk_to_field
from .field import DisplacementField


def load_displacement_field(
    filepath: str | Path, dtype: torch.dtype = torch.float32
) -> DisplacementField:
    """
    Load displacement field from file using SimpleITK.

    Args:
        filepath: Path to a vector image file
        dtype: PyTorch dtype of the loaded field data

    Returns:
        DisplacementField
    """
    try:
        image = sitk.ReadImage(str(filepath))
    except Exception as e:
        raise OSError(
            f"Failed to load displacement field from {filepath}: {str(e)}"
        ) from e
    return sitk_to_field(image, dtype=dtype)


def save_displacement_field(
    field: DisplacementField | sitk.Image, filepath: str | Path
) -> None:
    """
    Save displacement field to file using SimpleITK.

    Args:
        field: Field to save (DisplacementField or SimpleITK vector image)
        filepath: Output file path
    """
    if isinstance(field, DisplacementField):
        image = field_to_sitk(field)
    else:
        image = field

    try:
        sitk.WriteImage(image, str(filepath))
    except Exception as e:
        raise OSError(f"Failed to save displacement field to {filepath}: {str(e)}") from e

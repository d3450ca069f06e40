import logging
from pathlib import Path

import torchvarreg
from torchvarreg.config import RegularizerConfig
from torchvarreg.io import load_displacement_field, save_displacement_field
from torchvarreg.logging_config import setup_logging


def regularize(
    input_file: Path,
    output_file: Path,
    config_file: Path | None = None,
    sigma: list[float] | None = None,
    max_error: float | None = None,
    max_kernel_width: int | None = None,
):
    field = load_displacement_field(input_file)

    if config_file is not None:
        config = RegularizerConfig.from_yaml(config_file)
    else:
        config = RegularizerConfig()
    config.dimension = field.dimension

    if sigma is not None:
        config.standard_deviations = sigma[0] if len(sigma) == 1 else sigma
    if max_error is not None:
        config.maximum_error = max_error
    if max_kernel_width is not None:
        config.maximum_kernel_width = max_kernel_width

    regularizer = torchvarreg.GaussianRegularizer.from_config(config)
    logging.getLogger("torchvarreg").info("\n%s", regularizer)

    smoothed = regularizer.regularize(field)

    output_file.parent.mkdir(exist_ok=True, parents=True)
    save_displacement_field(smoothed, output_file)


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser()
    parser.add_argument("input_file", type=Path, help="Path to the displacement field")
    parser.add_argument(
        "output_file", type=Path, help="Path of the regularized displacement field"
    )
    parser.add_argument(
        "--config", type=Path, default=None, help="YAML regularizer configuration"
    )
    parser.add_argument(
        "--sigma",
        type=float,
        nargs="+",
        default=None,
        help="Standard deviation in pixels, one value or one per axis",
    )
    parser.add_argument("--max-error", type=float, default=None)
    parser.add_argument("--max-kernel-width", type=int, default=None)
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    args = parser.parse_args()

    setup_logging(getattr(logging, args.log_level))
    regularize(
        args.input_file,
        args.output_file,
        args.config,
        args.sigma,
        args.max_error,
        args.max_kernel_width,
    )

#!/usr/bin/env python3
"""
Matrix Calculator

This script loads named matrices from a YAML or JSON file, evaluates a single
matrix operation on them and prints the result in the library's display
format. A JSON report with shapes and timings can be written alongside.
"""

from __future__ import annotations

import argparse
import copy
import json
import logging
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml

# Add parent directory to path
sys.path.append(str(Path(__file__).resolve().parent.parent))

from matrixlib import Matrix, MatrixError
from matrixlib import evaluate

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"

logger = logging.getLogger("matrix_calc")

DEFAULT_CONFIG = {
    "logging": {"level": "INFO"},
    "display": {"show_shapes": False, "show_summary": False},
    "io": {"report": None},
}

# Operation name -> number of matrix operands
OPERATIONS = {
    "add": 2,
    "subtract": 2,
    "multiply": 2,
    "equals": 2,
    "transpose": 1,
    "identity": 0,
}


def setup_logging(level: Union[str, int] = "INFO") -> None:
    """Configure root logging for the command-line run."""
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(),
        ],
        force=True,
    )


def load_config(config_path: Optional[str] = None) -> Dict:
    """Load configuration from YAML file.

    Keys missing from the file keep their default values.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary
    """
    # Default config path
    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"

    config = copy.deepcopy(DEFAULT_CONFIG)
    if not os.path.exists(config_path):
        logger.debug(f"No configuration at {config_path}, using defaults")
        return config

    with open(config_path, "r") as f:
        loaded = yaml.safe_load(f) or {}

    for section, values in loaded.items():
        if isinstance(values, dict) and isinstance(config.get(section), dict):
            config[section].update(values)
        else:
            config[section] = values

    return config


def load_matrices(path: str) -> Dict[str, Matrix]:
    """Read named matrices from a YAML or JSON file.

    The file must hold a mapping of name to a list of rows, e.g.
    ``{"A": [[1, 2], [3, 4]]}``.

    Args:
        path: Path to a .json, .yaml or .yml file

    Returns:
        Dictionary mapping names to matrices
    """
    logger.info(f"Reading matrices from {path}")

    with open(path, "r") as f:
        if Path(path).suffix.lower() == ".json":
            raw = json.load(f)
        else:
            raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        raise ValueError(f"Expected a mapping of matrix names in {path}")

    matrices = {}
    for name, rows in raw.items():
        matrices[str(name)] = Matrix.from_source(rows)
        logger.debug(f"Loaded {name}: {matrices[str(name)].rows}x{matrices[str(name)].cols}")

    logger.info(f"Read {len(matrices)} matrices")
    return matrices


def evaluate_expression(
    op: str,
    names: List[str],
    matrices: Dict[str, Matrix],
    size: Optional[int] = None,
) -> Union[Matrix, bool]:
    """Apply one operation to named matrices.

    Args:
        op: One of the keys of OPERATIONS
        names: Operand names, in order
        matrices: Available matrices by name
        size: Size for the identity operation

    Returns:
        The resulting matrix, or a bool for "equals"
    """
    if op not in OPERATIONS:
        raise ValueError(f"Unknown operation: {op}")
    if len(names) != OPERATIONS[op]:
        raise ValueError(f"{op} takes {OPERATIONS[op]} operand(s), got {len(names)}")

    missing = [name for name in names if name not in matrices]
    if missing:
        raise ValueError(f"Unknown matrix name(s): {', '.join(missing)}")

    operands = [matrices[name] for name in names]

    if op == "identity":
        if size is None:
            raise ValueError("identity requires --size")
        return Matrix.identity(size)
    if op == "transpose":
        return operands[0].transpose()
    if op == "add":
        return operands[0].add(operands[1])
    if op == "subtract":
        return operands[0].subtract(operands[1])
    if op == "multiply":
        return operands[0].multiply(operands[1])
    return operands[0] == operands[1]


def run_calculation(
    op: str,
    names: List[str],
    input_path: Optional[str] = None,
    size: Optional[int] = None,
    report_path: Optional[str] = None,
    config: Optional[Dict] = None,
) -> Dict:
    """Load operands, evaluate the operation, print and report the result.

    Args:
        op: Operation name
        names: Operand names
        input_path: File holding the named matrices
        size: Size for the identity operation
        report_path: Where to write the JSON report (overrides config)
        config: Configuration dictionary

    Returns:
        Dictionary of run metrics
    """
    config = config or copy.deepcopy(DEFAULT_CONFIG)
    metrics = evaluate.OperationMetrics(op)

    with evaluate.Timer("Calculation") as run_timer:
        matrices = {}
        if input_path is not None:
            with evaluate.Timer("Load Matrices") as timer:
                matrices = load_matrices(input_path)
            metrics.update_stage_timing("load_matrices", timer.elapsed)

        operands = [matrices[name] for name in names if name in matrices]
        metrics.record_operands(*operands)

        with evaluate.Timer(f"Evaluate {op}") as timer:
            result = evaluate_expression(op, names, matrices, size=size)
        metrics.update_stage_timing("evaluate", timer.elapsed)
        metrics.record_result(result)

        if op == "equals" and operands[0].shape == operands[1].shape:
            metrics.update(
                "max_abs_difference", evaluate.max_abs_difference(*operands)
            )

    metrics.update("runtime_s", run_timer.elapsed)

    if config["display"].get("show_shapes"):
        shapes = ", ".join(f"{name}={m.rows}x{m.cols}" for name, m in zip(names, operands))
        print(f"# {op}({shapes})")
    print(str(result), end="" if isinstance(result, Matrix) else "\n")

    if config["display"].get("show_summary"):
        logger.info("\n" + metrics.summary())

    report_path = report_path or config["io"].get("report")
    if report_path:
        report_dir = os.path.dirname(report_path)
        if report_dir:
            os.makedirs(report_dir, exist_ok=True)
        with open(report_path, "w") as f:
            json.dump(metrics.to_dict(), f, indent=2)
        logger.info(f"Report written to {report_path}")

    return metrics.to_dict()


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments and run the calculation."""
    parser = argparse.ArgumentParser(description="Matrix Calculator")
    parser.add_argument(
        "names", nargs="*",
        help="Names of the operand matrices in the input file"
    )
    parser.add_argument(
        "--op", "-p", dest="op", required=True,
        choices=sorted(OPERATIONS),
        help="Operation to evaluate"
    )
    parser.add_argument(
        "--input", "-i", dest="input_path", default=None,
        help="Path to a YAML or JSON file of named matrices"
    )
    parser.add_argument(
        "--size", "-n", dest="size", type=int, default=None,
        help="Size of the identity matrix"
    )
    parser.add_argument(
        "--report", "-r", dest="report_path", default=None,
        help="Path to write a JSON report"
    )
    parser.add_argument(
        "--config", "-c", dest="config_path", default=None,
        help="Path to configuration file"
    )
    parser.add_argument(
        "--verbose", "-v", dest="verbose", action="store_true",
        help="Enable debug logging"
    )

    args = parser.parse_args(argv)

    if args.op != "identity" and args.input_path is None:
        parser.error(f"--input is required for {args.op}")

    config = load_config(args.config_path)
    setup_logging("DEBUG" if args.verbose else config["logging"].get("level", "INFO"))

    try:
        run_calculation(
            args.op,
            args.names,
            input_path=args.input_path,
            size=args.size,
            report_path=args.report_path,
            config=config,
        )
    except MatrixError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Error running calculation: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
===========================================================
Circle Fitting Demo (CLI version, NumPy-only)
===========================================================

Usage
-----
    python3 examples/demo_cli.py path/to/points.csv [-v]

Input
-----
    CSV with 'x,y' columns (header optional), at least 3 points.

Outputs
-------
    fitted_circle.csv
"""

# --- Imports --------------------------------------------------------------

import sys
import logging
import argparse
import numpy as np
from circle_fit import CircleFitter, load_points_csv, save_xy_csv, circle_points
from circle_fit.core import circle_residuals
from circle_fit.logging_config import setup_logging


# --- CLI -----------------------------------------------------------------

def parse_args(argv):
    p = argparse.ArgumentParser(prog="demo_cli.py", description="Least-squares circle fit.")
    p.add_argument("csv", help="Path to the points CSV.")
    p.add_argument("-o", "--output", default="fitted_circle.csv",
                   help="Where to export the sampled fitted circle.")
    p.add_argument("-v", "--verbose", action="store_true",
                   help="Log every conjugate-gradient iteration.")
    return p.parse_args(argv)


# --- Main routine ---------------------------------------------------------

def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    try:
        args = parse_args(argv)
    except SystemExit:
        print("Usage: demo_cli.py path/to/points.csv")
        return 1

    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    x, y = load_points_csv(args.csv)
    if len(x) < 3:
        print(f"❌ Need ≥ 3 points, got {len(x)}")
        return 1

    res = CircleFitter(np.column_stack([x, y])).fit()
    if not res.success:
        print(f"❌ Fit failed ({res.status.value}): {res.message}")
        return 2

    cx, cy = res.center
    r = res.radius
    rms = float(np.sqrt(np.mean(circle_residuals(cx, cy, r, x, y) ** 2)))
    Xf, Yf = circle_points(cx, cy, r)
    save_xy_csv(args.output, Xf, Yf)

    print(f"center=({cx:.4f},{cy:.4f}), r={r:.4f}, rms={rms:.4g}, iterations={res.iterations}")
    print(f"✅ Exported '{args.output}'")
    return 0


# --- Entrypoint -----------------------------------------------------------

if __name__ == "__main__":
    raise SystemExit(main())

"""
===========================================================
Circle Fitting Demo (fit + threshold band + plot)
===========================================================

Steps:
  1) Load a points CSV
  2) Fit the circle (conjugate gradient)
  3) Compute the inner/outer band radii around the fit
  4) Plot the result
"""

# --- Imports --------------------------------------------------------------
import sys
import argparse
import numpy as np
import matplotlib.pyplot as plt

from circle_fit import CircleFitter, load_points_csv, band_points, band_radii
from circle_fit.plotting import plot_fit

# --- CLI -----------------------------------------------------------------
def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Circle fitting demo.")
    p.add_argument("csv", help="Path to the points CSV.")
    p.add_argument("--threshold", type=float, default=30.0,
                   help="Half-width of the band of points kept around the fit.")
    p.add_argument("--increment", type=float, default=10.0,
                   help="Radius step of the inner/outer band circles.")
    p.add_argument("--save", type=str, default="")
    p.add_argument("--title", type=str, default="Circle Fit Overlay")
    return p.parse_args(argv)

# --- Main ----------------------------------------------------------------
def main(argv=None):
    args = parse_args(sys.argv[1:] if argv is None else argv)

    x, y = load_points_csv(args.csv)
    print(f"[info] loaded {len(x)} points from: {args.csv}")

    res = CircleFitter(np.column_stack([x, y])).fit()
    if not res.success:
        print(f"[error] {res.status.value}: {res.message}")
        return 1
    cx, cy = res.center
    print(f"[fit] center=({cx:.2f}, {cy:.2f}), r={res.radius:.2f}, iterations={res.iterations}")

    mask, dist = band_points(x, y, cx, cy, res.radius, args.threshold)
    bands = band_radii(dist, res.radius, args.increment) if mask.any() else None
    if bands is not None:
        print(f"[band] {int(mask.sum())} points, inner={bands[0]:.2f}, outer={bands[1]:.2f}")

    ax = plot_fit(x, y, cx, cy, res.radius, bands=bands, title=args.title, show=False)

    if args.save:
        ax.figure.savefig(args.save, dpi=180, bbox_inches="tight", facecolor="white")
        print(f"[ok] saved figure -> {args.save}")
    else:
        plt.show()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())

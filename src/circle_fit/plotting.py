import matplotlib.pyplot as plt
import numpy as np

from .core import circle_points


def plot_fit(x, y, cx, cy, r, bands=None, title="Cercle ajusté", ax=None, show=True):
    """
    Scatter the points and overlay the fitted circle.

    bands : (inner, outer) radii drawn dashed around the fit, optional.
    Returns the matplotlib Axes.
    """
    if ax is None:
        plt.figure(figsize=(5, 5))
        ax = plt.gca()
    ax.scatter(x, y, s=20, label=f"points (n={len(np.ravel(x))})")
    Xf, Yf = circle_points(cx, cy, r)
    ax.plot(Xf, Yf, linewidth=2, label=f"circle fit (r≈{r:.2f})")
    ax.plot([cx], [cy], "+", color="k", markersize=10)
    if bands is not None:
        for rb in bands:
            Xb, Yb = circle_points(cx, cy, rb)
            ax.plot(Xb, Yb, "--", color="tab:red", linewidth=1)
    ax.set_aspect("equal", "box")
    ax.legend()
    ax.set_title(title)
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    ax.figure.tight_layout()
    if show:
        plt.show()
    return ax

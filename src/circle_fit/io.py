from pathlib import Path
import numpy as np
import pandas as pd


def load_points_csv(path: str, x_col: str = "x", y_col: str = "y"):
    """
    Load paired (x, y) coordinates from a CSV.

    Parameters
    ----------
    path : str
        CSV file path. With a header, the columns named x_col / y_col are
        used; without one, the first two columns.
    x_col, y_col : str
        Column names to read.

    Returns
    -------
    x, y : np.ndarray
        Float coordinates.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"File not found: {p}")
    df = pd.read_csv(p, skipinitialspace=True)
    if x_col not in df.columns or y_col not in df.columns:
        # Headerless file: first row is data
        df = pd.read_csv(p, header=None, skipinitialspace=True)
        if df.shape[1] < 2:
            raise ValueError(f"{p}: expected two columns '{x_col},{y_col}', got {df.shape[1]}")
        df = df.iloc[:, :2]
        df.columns = [x_col, y_col]
    pts = df[[x_col, y_col]].apply(pd.to_numeric, errors="coerce")
    if pts.isna().any().any():
        raise ValueError(f"{p}: non-numeric or missing coordinates")
    return pts[x_col].to_numpy(float), pts[y_col].to_numpy(float)


def save_xy_csv(path: str, x, y):
    """
    Save paired (x, y) coordinates to a CSV.

    Parameters
    ----------
    path : str
        Output CSV file path.
    x, y : array-like
        Sequences of equal length containing coordinates.

    Notes
    -----
    The header is 'x,y', so load_points_csv() reads the file back.
    """
    arr = np.column_stack([x, y])
    np.savetxt(path, arr, delimiter=",", header="x,y", comments="", fmt="%.6f")

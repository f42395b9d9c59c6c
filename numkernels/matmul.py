from typing import MutableSequence, Sequence

import numpy as np


def _check_len(buf: Sequence[float], needed: int, label: str) -> None:
    if len(buf) < needed:
        raise ValueError(f"{label} holds {len(buf)} values but {needed} are required.")


def mat_mult(
    a: Sequence[float],
    b: Sequence[float],
    c: MutableSequence[float],
    i: int,
    j: int,
    k: int,
    check: bool = False,
) -> None:
    """
    C = A @ B on flat row-major buffers.

    a is I x J, b is J x K, c is I x K and is overwritten in place.
    Buffer sizes are the caller's responsibility unless check=True.
    """
    if check:
        _check_len(a, i * j, "a")
        _check_len(b, j * k, "b")
        _check_len(c, i * k, "c")

    for row in range(i):
        for col in range(k):
            t = 0.0
            for inner in range(j):
                t += a[row * j + inner] * b[inner * k + col]
            c[row * k + col] = t


def matmul(a, b) -> np.ndarray:
    """
    Allocating wrapper around mat_mult for 2-D array-likes.
    """
    a_arr = np.asarray(a, dtype=float)
    b_arr = np.asarray(b, dtype=float)
    if a_arr.ndim != 2 or b_arr.ndim != 2:
        raise ValueError("a and b must be 2-D matrices.")
    n_rows, n_inner = a_arr.shape
    if b_arr.shape[0] != n_inner:
        raise ValueError(f"Inner dimensions differ: a is {a_arr.shape}, b is {b_arr.shape}.")
    n_cols = b_arr.shape[1]

    c = np.zeros(n_rows * n_cols, dtype=float)
    mat_mult(a_arr.ravel(), b_arr.ravel(), c, n_rows, n_inner, n_cols)
    return c.reshape(n_rows, n_cols)

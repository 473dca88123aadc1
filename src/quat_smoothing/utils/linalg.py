"""Symmetric eigendecomposition used to recover an average orientation.

The averaging filter only needs one capability from a linear algebra
backend: ``matrix -> (eigenvalues, eigenvectors)`` for a real symmetric
4x4 matrix, with eigenvectors stored as columns in the same order as the
eigenvalues. ``symmetric_eigh`` provides it on top of scipy.
"""

import logging
from typing import Callable, Tuple

import numpy as np
import scipy.linalg

log = logging.getLogger(__name__)

Eigensolver = Callable[[np.ndarray], Tuple[np.ndarray, np.ndarray]]


class EigendecompositionError(RuntimeError):
    """The eigensolver failed to decompose the accumulated matrix."""


def symmetric_eigh(matrix: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Eigendecomposition of a real symmetric 4x4 matrix.

    Only the lower triangle is read. Non-finite entries are passed through to
    LAPACK unchecked, so NaN inputs typically come back as NaN eigenpairs.

    Args:
        matrix: Symmetric matrix [4, 4].

    Returns:
        Tuple of (eigenvalues [4] ascending, eigenvectors [4, 4] as columns).

    Raises:
        ValueError: If the matrix is not 4x4.
        EigendecompositionError: If the solver does not converge.
    """
    matrix = np.asarray(matrix, dtype=np.float64)
    if matrix.shape != (4, 4):
        raise ValueError(f"Expected a 4x4 matrix, got shape {matrix.shape}")

    try:
        eigenvalues, eigenvectors = scipy.linalg.eigh(matrix, check_finite=False)
    except (np.linalg.LinAlgError, scipy.linalg.LinAlgError) as exc:
        log.error(f"Symmetric eigendecomposition failed: {exc}")
        raise EigendecompositionError(
            f"Symmetric eigendecomposition failed: {exc}"
        ) from exc

    return eigenvalues, eigenvectors


def dominant_eigenvector(eigenvalues: np.ndarray, eigenvectors: np.ndarray) -> np.ndarray:
    """Eigenvector belonging to the largest eigenvalue.

    Ties go to the first maximal eigenvalue in index order. Complex
    eigenvalues are compared by their real part.

    Args:
        eigenvalues: Eigenvalues [N].
        eigenvectors: Eigenvectors [N, N] as columns.

    Returns:
        Eigenvector [N].
    """
    index = int(np.argmax(np.real(eigenvalues)))
    return np.real(eigenvectors[:, index])


def is_symmetric(matrix: np.ndarray, atol: float = 1e-12) -> bool:
    """Check matrix == matrix^T within an absolute tolerance."""
    matrix = np.asarray(matrix)
    return bool(np.allclose(matrix, matrix.T, rtol=0.0, atol=atol))

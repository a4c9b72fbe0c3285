"""
Linear Algebra Primitives for SSVEP Scoring

Fast, decomposition-based scoring between a window of EEG data and a
harmonic reference matrix:

- cca_basis: centered, rank-revealing economy QR (computed once per matrix)
- canonical_correlation: largest canonical correlation of two bases
- minimum_energy_combination: MEC signal power of Y against reference X

References:
    Lin, Z., et al. (2006). Frequency recognition based on canonical
    correlation analysis for SSVEP-based BCIs. IEEE TBME, 53(12), 2610-2614.

    Friman, O., et al. (2007). Multiple channel detection of steady-state
    visual evoked potentials for brain-computer interfaces. IEEE TBME,
    54(4), 742-750.
"""

import numpy as np
from scipy import linalg

_EPS = np.finfo(np.float64).eps


def cca_basis(matrix: np.ndarray) -> np.ndarray:
    """Orthonormal basis of the centered column space of `matrix`.

    Uses column-pivoted QR and keeps only the columns of Q that belong to the
    numerical rank, so that duplicated or flat channels do not contribute
    arbitrary directions.

    Args:
        matrix: (n_samples, n_columns)

    Returns:
        Q with shape (n_samples, rank); rank is 0 for a flat matrix.
    """
    centered = matrix - matrix.mean(axis=0)
    q, r, _ = linalg.qr(centered, mode='economic', pivoting=True)
    diag = np.abs(np.diag(r))
    if diag.size == 0 or diag[0] == 0:
        return q[:, :0]
    tol = max(centered.shape) * _EPS * diag[0]
    rank = int(np.count_nonzero(diag > tol))
    return q[:, :rank]


def canonical_correlation(qx: np.ndarray, qy: np.ndarray) -> float:
    """Largest canonical correlation between two pre-decomposed matrices.

    Args:
        qx: Basis from cca_basis(), (n_samples, rank_x)
        qy: Basis from cca_basis(), (n_samples, rank_y)

    Returns:
        Correlation clipped to [0, 1], NaN if either basis is empty.
    """
    if qx.shape[0] != qy.shape[0]:
        raise ValueError(
            f"Row count mismatch: {qx.shape[0]} vs {qy.shape[0]}"
        )
    if qx.shape[1] == 0 or qy.shape[1] == 0:
        return float('nan')
    s = linalg.svd(qx.T @ qy, compute_uv=False)
    return float(np.clip(np.max(s), 0.0, 1.0))


def minimum_energy_combination(y: np.ndarray, x: np.ndarray) -> float:
    """Minimum energy combination score of signal `y` against reference `x`.

    The reference components are projected out of the signal, the residual
    (noise) covariance is eigen-decomposed and used to whiten the channel
    combinations. The score is the mean power of the reference components in
    the whitened combinations:

        p = sum_{l,k} |x_k^T s_l|^2 / (n_combinations * n_references)

    Args:
        y: EEG window, (n_samples, n_channels)
        x: Reference matrix, (n_samples, n_references)

    Returns:
        MEC power; NaN or inf for degenerate (flat) windows.
    """
    if y.shape[0] != x.shape[0]:
        raise ValueError(
            f"Row count mismatch: {y.shape[0]} vs {x.shape[0]}"
        )
    # Residual after removing the reference subspace
    coef, *_ = linalg.lstsq(x, y)
    residual = y - x @ coef
    eigvals, eigvecs = linalg.eigh(residual.T @ residual)

    # Noise energy below double precision of the signal energy is not resolvable
    floor = _EPS * float(np.sum(y * y))
    eigvals = np.maximum(eigvals, floor)

    with np.errstate(divide='ignore', invalid='ignore'):
        w = eigvecs / np.sqrt(eigvals)
        s = y @ w
        p = np.abs(x.T @ s) ** 2
    return float(np.sum(p) / (s.shape[1] * x.shape[1]))

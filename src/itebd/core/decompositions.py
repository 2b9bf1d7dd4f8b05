"""
Tensor decomposition routines for iTEBD.

Provides:
- SVD, and truncated SVD implementing the iTEBD truncation policy
- Eigendecomposition and dominant eigenvectors of transfer matrices
- Square-root factors of Hermitian positive semi-definite matrices
- Matrix exponentials for imaginary-time propagators, and a unitarity check
"""

from __future__ import annotations

import numpy as np
from typing import Tuple, Optional
from dataclasses import dataclass

from itebd.core.tensor import Tensor, as_tensor
from itebd.core.errors import IllPosedStateError, VanishingNormError


# Relative size below which singular values are treated as exact zeros
SCHMIDT_CUTOFF = 1e-10

# Relative gap below which the two largest eigenvalues count as degenerate
DEGENERACY_TOL = 1e-10

# Entry-wise deviation of U^dagger U from the identity accepted as unitary
UNITARY_TOL = 1e-10


@dataclass
class SVDResult:
    """Result of SVD decomposition."""
    U: Tensor
    S: Tensor
    Vh: Tensor
    discarded_weight: float = 0.0
    rank: int = 0

    def reconstruct(self) -> Tensor:
        """Reconstruct the original matrix from SVD factors."""
        US = self.U.data * self.S.data[np.newaxis, :]
        return Tensor(US @ self.Vh.data)


@dataclass
class EigResult:
    """Result of eigendecomposition."""
    eigenvalues: Tensor
    eigenvectors: Tensor


def _as_matrix(tensor: Tensor) -> np.ndarray:
    """Reshape to matrix, grouping the first half of the legs as rows."""
    data = tensor.data
    if tensor.ndim != 2:
        mid = tensor.ndim // 2
        left_dim = int(np.prod(tensor.dims[:mid]))
        right_dim = int(np.prod(tensor.dims[mid:]))
        data = data.reshape(left_dim, right_dim)
    return data


def svd(tensor: Tensor) -> SVDResult:
    """
    Compute the thin Singular Value Decomposition.

    Parameters
    ----------
    tensor : Tensor
        Input tensor (will be reshaped to matrix if not 2D)

    Returns
    -------
    SVDResult
        U, S, Vh tensors, singular values in descending order
    """
    U, S, Vh = np.linalg.svd(_as_matrix(tensor), full_matrices=False)
    return SVDResult(U=Tensor(U), S=Tensor(S), Vh=Tensor(Vh), rank=len(S))


def truncation_rank(
    S: np.ndarray,
    max_rank: int = 0,
    tolerance: float = -1.0,
    cutoff: float = SCHMIDT_CUTOFF,
) -> int:
    """
    Number of singular values kept by the truncation policy.

    Singular values below ``cutoff * S[0]`` are always dropped. With
    ``tolerance >= 0``, values whose relative weight ``s**2 / sum(s**2)``
    is below ``tolerance`` are dropped too. With ``max_rank > 0`` the count
    is capped at ``max_rank`` (a cap above the available rank is clamped).
    At least one value is kept.
    """
    if len(S) == 0:
        return 0
    rank = int(np.sum(S > cutoff * S[0]))
    if tolerance >= 0:
        weights = S ** 2 / np.sum(S ** 2)
        rank = min(rank, int(np.sum(weights >= tolerance)))
    if max_rank > 0:
        rank = min(rank, max_rank)
    return max(1, rank)


def truncated_svd(
    tensor: Tensor,
    max_rank: int = 0,
    tolerance: float = -1.0,
    cutoff: float = SCHMIDT_CUTOFF,
    normalize: bool = True,
) -> SVDResult:
    """
    Truncated Singular Value Decomposition.

    Parameters
    ----------
    tensor : Tensor
        Input tensor
    max_rank : int
        Maximum number of singular values to keep (0 = unbounded)
    tolerance : float
        Minimum relative weight of a kept singular value (negative = no
        weight-based truncation)
    cutoff : float
        Relative size below which singular values are numerical zeros
    normalize : bool
        Whether to renormalize the kept singular values to unit 2-norm

    Returns
    -------
    SVDResult
        Truncated SVD factors; ``discarded_weight`` is the relative
        squared weight of the dropped singular values

    Raises
    ------
    VanishingNormError
        If the matrix is zero.
    """
    result = svd(tensor)
    S = result.S.data

    total = float(np.sum(S ** 2))
    if len(S) == 0 or not total > 0.0:
        raise VanishingNormError("Cannot truncate a matrix with zero norm")

    rank = truncation_rank(S, max_rank=max_rank, tolerance=tolerance, cutoff=cutoff)
    discarded_weight = float(np.sum(S[rank:] ** 2)) / total

    S_trunc = S[:rank]
    if normalize:
        S_trunc = S_trunc / np.linalg.norm(S_trunc)

    return SVDResult(
        U=Tensor(result.U.data[:, :rank]),
        S=Tensor(S_trunc),
        Vh=Tensor(result.Vh.data[:rank, :]),
        discarded_weight=discarded_weight,
        rank=rank,
    )


def eig(
    tensor: Tensor,
    hermitian: bool = False,
) -> EigResult:
    """
    Compute eigendecomposition.

    Parameters
    ----------
    tensor : Tensor
        Input square matrix
    hermitian : bool
        If True, use Hermitian eigendecomposition (ascending eigenvalues)

    Returns
    -------
    EigResult
        Eigenvalues and eigenvectors (as columns)
    """
    data = tensor.data

    if hermitian:
        eigenvalues, eigenvectors = np.linalg.eigh(data)
    else:
        eigenvalues, eigenvectors = np.linalg.eig(data)

    return EigResult(
        eigenvalues=Tensor(eigenvalues),
        eigenvectors=Tensor(eigenvectors),
    )


def leading_eigenvalues(tensor: Tensor, k: int = 2) -> np.ndarray:
    """The ``k`` eigenvalues of largest magnitude, sorted by magnitude."""
    values = np.linalg.eigvals(tensor.data)
    order = np.argsort(-np.abs(values), kind='stable')
    return values[order[:k]]


def dominant_eigenvector(
    tensor: Tensor,
    degeneracy_tol: float = DEGENERACY_TOL,
) -> Tuple[float, Tensor]:
    """
    Dominant eigenpair of a transfer matrix.

    The eigenvalue of largest magnitude must be unique, real and positive,
    as it is for the transfer matrix of a well-defined (injective) infinite
    state.

    Returns
    -------
    eta : float
        Dominant eigenvalue
    vector : Tensor
        Corresponding right eigenvector

    Raises
    ------
    IllPosedStateError
        Degenerate, vanishing, negative or complex dominant eigenvalue.
    """
    result = eig(tensor)
    values = result.eigenvalues.data
    order = np.argsort(-np.abs(values), kind='stable')
    eta = values[order[0]]
    scale = abs(eta)

    if not scale > 0.0:
        raise IllPosedStateError("Transfer operator has a vanishing spectrum")
    if len(values) > 1 and abs(values[order[1]]) >= (1.0 - degeneracy_tol) * scale:
        raise IllPosedStateError(
            f"Degenerate dominant eigenvalue of transfer operator: "
            f"{eta:.6g} and {values[order[1]]:.6g}"
        )
    if abs(np.imag(eta)) > 1e-10 * scale or np.real(eta) <= 0:
        raise IllPosedStateError(
            f"Dominant eigenvalue of transfer operator is not positive: {eta:.6g}"
        )

    return float(np.real(eta)), Tensor(result.eigenvectors.data[:, order[0]])


def hermitian_factor(tensor: Tensor) -> Tensor:
    """
    Square-root factor ``X`` of a Hermitian positive semi-definite matrix,
    ``M = X X^dagger``.

    The matrix is Hermitized first; small negative eigenvalues from
    round-off are clipped to zero.
    """
    data = tensor.data
    data = 0.5 * (data + np.conj(data).T)
    result = eig(Tensor(data), hermitian=True)
    w = np.clip(result.eigenvalues.data, 0.0, None)
    if not np.max(w) > 0.0:
        raise IllPosedStateError("Boundary fixed point is not positive definite")
    return Tensor(result.eigenvectors.data * np.sqrt(w)[np.newaxis, :])


def expm(tensor: Tensor) -> Tensor:
    """
    Compute matrix exponential.

    Parameters
    ----------
    tensor : Tensor
        Input square matrix

    Returns
    -------
    Tensor
        Matrix exponential exp(tensor)
    """
    from scipy import linalg as spla

    data = as_tensor(tensor).numpy()
    result = spla.expm(data)

    return Tensor(result)


def operator_norm(tensor: Tensor) -> float:
    """Largest singular value of a matrix."""
    return float(np.linalg.norm(_as_matrix(tensor), ord=2))


def is_unitary(tensor: Tensor, atol: float = UNITARY_TOL) -> bool:
    """Whether a square matrix satisfies ``U^dagger U = 1`` within ``atol``."""
    data = _as_matrix(tensor)
    if data.shape[0] != data.shape[1]:
        return False
    return bool(np.allclose(np.conj(data).T @ data, np.eye(data.shape[0]), rtol=0.0, atol=atol))

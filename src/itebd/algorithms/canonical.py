"""
Canonical form of a two-site infinite MPS.

The unit cell ``Gamma_A lambda_A Gamma_B lambda_B`` is folded into a single
tensor and brought to canonical form following Orus & Vidal: the dominant
left and right fixed points of the unit-cell transfer matrix are factored
into square roots, the product of those roots is decomposed by SVD to give
the new Schmidt values on the cell boundary, and the cell is finally split
by a second SVD which yields the Schmidt values of the inner bond.

References:
    - Orus & Vidal, Phys. Rev. B 78, 155117 (2008)
"""

from __future__ import annotations

import numpy as np
from typing import Tuple

from itebd.core.tensor import Tensor
from itebd.core.contractions import contract, merge_sites, transfer_matrix
from itebd.core.decompositions import (
    SCHMIDT_CUTOFF,
    dominant_eigenvector,
    hermitian_factor,
    leading_eigenvalues,
    truncated_svd,
)


def _fold(gamma: Tensor, schmidt: Tensor) -> Tensor:
    """Absorb a Schmidt vector into the right bond of a site tensor."""
    return Tensor(gamma.data * schmidt.data[np.newaxis, np.newaxis, :])


def _fixed_point_matrix(vector: Tensor, dim: int, real: bool) -> Tensor:
    """Reshape an eigenvector into a Hermitian matrix with positive trace."""
    matrix = vector.data.reshape(dim, dim)
    tr = np.trace(matrix)
    matrix = matrix * (np.conj(tr) / abs(tr))
    if real:
        matrix = np.real(matrix)
    return Tensor(0.5 * (matrix + np.conj(matrix).T))


def fixed_points(AlA: Tensor, BlB: Tensor) -> Tuple[float, Tensor, Tensor]:
    """
    Boundary fixed points of the unit-cell transfer operator.

    Parameters
    ----------
    AlA, BlB : Tensor
        Folded site tensors of the unit cell

    Returns
    -------
    eta : float
        Dominant eigenvalue of the unit-cell transfer operator
    left : Tensor
        Left fixed point on the bond to the left of ``A``, ``(bra, ket)``
    right : Tensor
        Right fixed point on the bond to the right of ``B``, ``(ket, bra)``

    Raises
    ------
    IllPosedStateError
        If the transfer operator has no unique positive dominant eigenvalue.
    """
    cell = merge_sites(AlA, BlB)
    dim = cell.dims[0]
    real = not cell.is_complex

    eta, right = dominant_eigenvector(transfer_matrix(cell, 'right'))
    _, left = dominant_eigenvector(transfer_matrix(cell, 'left'))

    return (
        eta,
        _fixed_point_matrix(left, dim, real),
        _fixed_point_matrix(right, dim, real),
    )


def canonicalize(
    A: Tensor,
    lA: Tensor,
    B: Tensor,
    lB: Tensor,
) -> Tuple[Tensor, Tensor, Tensor, Tensor]:
    """
    Canonical gauge of the unit cell ``(A, lA, B, lB)``.

    Returns new ``(A, lA, B, lB)`` describing the same infinite state with
    the Schmidt vectors being true (unit-norm) Schmidt coefficients.
    Numerically vanishing Schmidt values are dropped, so bond dimensions
    may shrink.
    """
    dA = A.dims[1]
    dB = B.dims[1]
    AlA = _fold(A, lA)
    BlB = _fold(B, lB)
    cell = merge_sites(AlA, BlB)

    eta, left, right = fixed_points(AlA, BlB)

    # R = X X^dagger and L = Y^dagger Y
    X = hermitian_factor(right)
    Y = hermitian_factor(left).adjoint()

    # Gauge transformation on the cell boundary
    boundary = truncated_svd(Y @ X, cutoff=SCHMIDT_CUTOFF, normalize=False)
    S = boundary.S.data
    left_gauge = (np.conj(boundary.U.data).T @ Y.data) / S[:, np.newaxis]
    right_gauge = X.data @ np.conj(boundary.Vh.data).T
    cell = contract('xa,asb,by->xsy', left_gauge, cell, right_gauge) / np.sqrt(eta)
    new_lB = S / np.linalg.norm(S)

    # Split the canonical cell across the inner bond
    D = len(new_lB)
    theta = Tensor(new_lB[:, np.newaxis, np.newaxis] * cell.data).reshape((D * dA, dB * D))
    inner = truncated_svd(theta, cutoff=SCHMIDT_CUTOFF, normalize=True)
    k = inner.rank
    new_A = inner.U.data.reshape(D, dA, k) / new_lB[:, np.newaxis, np.newaxis]
    new_B = inner.Vh.data.reshape(k, dB, D) / new_lB[np.newaxis, np.newaxis, :]

    return Tensor(new_A), inner.S, Tensor(new_B), Tensor(new_lB)


def correlation_length(AlA: Tensor, BlB: Tensor) -> float:
    """
    Correlation length, in sites, from the unit-cell transfer spectrum.

    ``xi = -2 / log|eta_2 / eta_1|``; zero when the transfer operator has
    a single non-zero eigenvalue (product states).
    """
    cell = merge_sites(AlA, BlB)
    values = np.abs(leading_eigenvalues(transfer_matrix(cell, 'right'), k=2))
    if len(values) < 2 or values[1] <= SCHMIDT_CUTOFF * values[0]:
        return 0.0
    if values[1] >= values[0]:
        return float('inf')
    return float(-2.0 / np.log(values[1] / values[0]))

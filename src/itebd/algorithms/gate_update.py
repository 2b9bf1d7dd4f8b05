"""
Two-site gate application with truncation.

The update procedure on the bond between a left site ``i`` and a right
site ``j``, both in Vidal form:
1. Build the two-site wavefunction ``lambda_left Gamma_i lambda_mid Gamma_j lambda_right``
2. Apply the gate on the two physical legs
3. SVD to separate the sites and truncate the new bond
4. Divide the outer Schmidt vectors back out of the singular vectors

Starting from a canonical pair, the result is again canonical when the gate
is unitary and nothing is truncated. Any other gate, such as an
imaginary-time propagator, leaves the outer bonds out of canonical form.

References:
    - Vidal, Phys. Rev. Lett. 98, 070201 (2007)
    - Orus & Vidal, Phys. Rev. B 78, 155117 (2008)
"""

from __future__ import annotations

import numpy as np
from dataclasses import dataclass
from typing import Any

from itebd.core.tensor import Tensor, as_tensor
from itebd.core.contractions import contract
from itebd.core.decompositions import SCHMIDT_CUTOFF, is_unitary, operator_norm, truncated_svd
from itebd.core.errors import DimensionMismatchError, VanishingNormError


# Relative size of ||U theta|| below which the gate annihilated the state
NORM_UNDERFLOW = 1e-14

# Discarded weight up to which a unitary update still counts as exact
EXACT_WEIGHT = 1e-12


@dataclass
class BondUpdate:
    """Result of a two-site update: new tensors and the new middle bond."""
    left: Tensor
    schmidt: Tensor
    right: Tensor
    discarded_weight: float
    canonical: bool = False


def two_site_operator(op: Any, d1: int, d2: int) -> Tensor:
    """
    Normalize a two-site operator to a ``(d1, d2, d1, d2)`` tensor.

    Accepts a ``(d1*d2, d1*d2)`` matrix in Kronecker ordering (first site
    major) or an already split ``(d1, d2, d1, d2)`` tensor.
    """
    op = as_tensor(op)
    if op.dims == (d1 * d2, d1 * d2):
        return op.reshape((d1, d2, d1, d2))
    if op.dims == (d1, d2, d1, d2):
        return op
    raise DimensionMismatchError("Two-site operator", (d1 * d2, d1 * d2), op.dims)


def update_bond(
    left: Tensor,
    l_mid: Tensor,
    right: Tensor,
    l_out: Tensor,
    gate: Any,
    tolerance: float = -1.0,
    max_dim: int = 0,
) -> BondUpdate:
    """
    Apply a two-site gate across the bond ``l_mid`` and truncate.

    Parameters
    ----------
    left : Tensor
        Gamma tensor of the left site ``(vL, p, vR)``
    l_mid : Tensor
        Schmidt vector on the bond being updated
    right : Tensor
        Gamma tensor of the right site
    l_out : Tensor
        Schmidt vector on the outer bonds (right of ``right`` and, by
        translation invariance, left of ``left``)
    gate : Tensor or array_like
        Two-site operator, ``(d1*d2, d1*d2)`` or ``(d1, d2, d1, d2)``
    tolerance : float
        Minimum relative weight of a kept singular value (< 0: none)
    max_dim : int
        Maximum bond dimension (0: unbounded)

    Returns
    -------
    BondUpdate
        New tensors; ``canonical`` tells whether a canonical input stays
        canonical, which requires a unitary gate and no truncation

    Raises
    ------
    DimensionMismatchError
        If the gate does not match the physical dimensions.
    VanishingNormError
        If the gate annihilates the two-site wavefunction.
    """
    d1 = left.dims[1]
    d2 = right.dims[1]
    U = two_site_operator(gate, d1, d2)
    U_matrix = U.reshape((d1 * d2, d1 * d2))

    theta = contract('a,asb,b,btc,c->astc', l_out, left, l_mid, right, l_out)
    U_theta = contract('stuv,auvc->astc', U, theta)

    norm_in = theta.norm() * operator_norm(U_matrix)
    norm_out = U_theta.norm()
    if not norm_out > NORM_UNDERFLOW * norm_in:
        raise VanishingNormError(
            f"Two-site operator annihilated the state (norm {norm_out:.3e})"
        )

    D_left = theta.dims[0]
    D_right = theta.dims[3]
    matrix = U_theta.reshape((D_left * d1, d2 * D_right))
    result = truncated_svd(
        matrix,
        max_rank=max_dim,
        tolerance=tolerance,
        cutoff=SCHMIDT_CUTOFF,
        normalize=True,
    )

    k = result.rank
    lo = l_out.data
    new_left = result.U.data.reshape(D_left, d1, k) / lo[:, np.newaxis, np.newaxis]
    new_right = result.Vh.data.reshape(k, d2, D_right) / lo[np.newaxis, np.newaxis, :]

    return BondUpdate(
        left=Tensor(new_left),
        schmidt=result.S,
        right=Tensor(new_right),
        discarded_weight=result.discarded_weight,
        canonical=result.discarded_weight <= EXACT_WEIGHT and is_unitary(U_matrix),
    )

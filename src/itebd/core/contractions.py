"""
Tensor contractions for the iTEBD state.

This module provides:
- ``contract``: Einstein summation through opt_einsum, with cached
  contraction expressions (the same few networks are contracted
  thousands of times during an evolution)
- Transfer-map propagation of boundary environments through a folded
  site tensor, with an optional operator insertion
- Dense transfer matrices of a (multi-site) folded tensor

Environment conventions
-----------------------
Left environments are matrices indexed ``(bra, ket)`` and right
environments are indexed ``(ket, bra)``, so that closing a chain is
``trace(left @ right)``. Folded tensors have legs ``(vL, p, vR)``.
"""

from __future__ import annotations

import numpy as np
from typing import Tuple, Optional, Union, Any
from functools import lru_cache

import opt_einsum as oe

from itebd.core.tensor import Tensor


@lru_cache(maxsize=256)
def _expression(subscripts: str, shapes: Tuple[Tuple[int, ...], ...]) -> Any:
    """Build (and cache) an optimized contraction expression."""
    return oe.contract_expression(subscripts, *shapes, optimize='auto')


def contract(
    subscripts: str,
    *operands: Union[Tensor, np.ndarray],
) -> Tensor:
    """
    Contract tensors using Einstein summation.

    Parameters
    ----------
    subscripts : str
        Einstein summation subscripts (e.g., 'ijk,jkl->il')
    operands : Tensor or ndarray
        Tensors to contract

    Returns
    -------
    Tensor
        Result of the contraction

    Examples
    --------
    >>> a = Tensor.random((2, 3, 4))
    >>> b = Tensor.random((4, 5))
    >>> contract('ijk,kl->ijl', a, b).shape == (2, 3, 5)
    True
    """
    arrays = [op.data if isinstance(op, Tensor) else np.asarray(op) for op in operands]
    shapes = tuple(a.shape for a in arrays)
    return Tensor(_expression(subscripts, shapes)(*arrays))


def transfer_left(
    env: Tensor,
    folded: Tensor,
    operator: Optional[Tensor] = None,
) -> Tensor:
    """
    Propagate a left environment one site to the right.

    ``E'[b, e] = sum E[a, d] conj(M[a, t, b]) O[t, s] M[d, s, e]``
    """
    bra = folded.conj()
    if operator is None:
        return contract('ad,asb,dse->be', env, bra, folded)
    return contract('ad,atb,ts,dse->be', env, bra, operator, folded)


def transfer_right(
    env: Tensor,
    folded: Tensor,
    operator: Optional[Tensor] = None,
) -> Tensor:
    """
    Propagate a right environment one site to the left.

    ``F'[a, d] = sum M[a, s, c] O[t, s] conj(M[d, t, f]) F[c, f]``
    """
    bra = folded.conj()
    if operator is None:
        return contract('asc,dsf,cf->ad', folded, bra, env)
    return contract('asc,ts,dtf,cf->ad', folded, operator, bra, env)


def close_environments(left: Tensor, right: Tensor) -> Any:
    """Scalar ``trace(left @ right)`` joining a left and a right environment."""
    return contract('be,eb->', left, right).data[()]


def transfer_matrix(folded: Tensor, side: str = 'right') -> Tensor:
    """
    Dense transfer matrix of a folded tensor ``(vL, p, vR)``.

    ``side='right'`` returns the matrix of ``R -> sum_s M_s R M_s^dagger``
    acting on row-major ``vec(R)``; ``side='left'`` the matrix of
    ``L -> sum_s M_s^dagger L M_s``. Both are ``D^2 x D^2``.
    """
    dl, _, dr = folded.dims
    if side == 'right':
        T = contract('asc,dsf->adcf', folded, folded.conj())
        return T.reshape((dl * dl, dr * dr))
    elif side == 'left':
        T = contract('asb,dse->bead', folded.conj(), folded)
        return T.reshape((dr * dr, dl * dl))
    raise ValueError(f"Unknown transfer matrix side: {side}")


def merge_sites(left: Tensor, right: Tensor) -> Tensor:
    """Fold two neighbouring site tensors into one with a fused physical leg."""
    dl, d1, _ = left.dims
    _, d2, dr = right.dims
    merged = contract('asb,btc->astc', left, right)
    return merged.reshape((dl, d1 * d2, dr))

"""
Expectation values of infinite two-site MPS.

Every value is a ratio of two contractions of the same chain of folded
tensors between the same boundary environments: one with the operators
inserted and one with identities. Normalization of the state therefore
never matters, and the same formulas serve canonical states (whose
boundaries are read off the Schmidt vectors) and non-canonical ones
(whose boundaries are fixed points of the transfer operator).

Sites are reduced to their parity, so any integer is a valid site.
"""

from __future__ import annotations

import numpy as np
from typing import TYPE_CHECKING, Any, List, Optional, Sequence, Union

from itebd.core.tensor import Tensor, as_tensor
from itebd.core.contractions import close_environments, contract, transfer_left
from itebd.core.errors import DimensionMismatchError
from itebd.algorithms import canonical
from itebd.algorithms.gate_update import two_site_operator

if TYPE_CHECKING:
    from itebd.core.itebd_state import ITEBDState


Scalar = Union[float, complex]


def _site_operator(state: 'ITEBDState', op: Any, site: int) -> Tensor:
    op = as_tensor(op)
    d = state.site_dimension(site)
    if op.dims != (d, d):
        raise DimensionMismatchError(f"Operator on site {site}", (d, d), op.dims)
    return op


def _chain(
    state: 'ITEBDState',
    site: int,
    operators: Sequence[Optional[Tensor]],
) -> Scalar:
    """
    ``<O_site O_{site+1} ...>`` for a run of consecutive single-site
    operators, ``None`` standing for the identity.
    """
    env = state.left_boundary(site)
    norm_env = env
    for k, op in enumerate(operators):
        M = state.combined_matrix(site + k)
        env = transfer_left(env, M, op)
        norm_env = transfer_left(norm_env, M)
        # Keep long chains in floating point range
        scale = norm_env.norm()
        env = env / scale
        norm_env = norm_env / scale
    right = state.right_boundary(site + len(operators) - 1)
    value = close_environments(env, right) / close_environments(norm_env, right)
    return value.item()


def expected_value(state: 'ITEBDState', op: Any, site: int = 0) -> Scalar:
    """
    Expectation value of a single-site operator.

    Parameters
    ----------
    state : ITEBDState
        The state
    op : Tensor or array_like
        Operator of shape ``(d, d)`` for the physical dimension of ``site``
    site : int
        Site index, only its parity matters

    Returns
    -------
    float or complex
    """
    return _chain(state, site, [_site_operator(state, op, site)])


def _two_point(
    state: 'ITEBDState',
    first: Any,
    middle: Optional[Any],
    last: Any,
    separation: int,
    site: int,
) -> Scalar:
    separation = int(separation)
    if separation == -1:
        # Both operators on the same site
        op = _site_operator(state, first, site) @ _site_operator(state, last, site)
        return _chain(state, site, [op])

    if separation >= 0:
        start, n_between = site, separation
        head, tail = first, last
    else:
        start, n_between = site + separation + 1, -separation - 2
        head, tail = last, first

    ops: List[Optional[Tensor]] = [_site_operator(state, head, start)]
    for k in range(n_between):
        ops.append(None if middle is None else _site_operator(state, middle, start + 1 + k))
    ops.append(_site_operator(state, tail, start + n_between + 1))
    return _chain(state, start, ops)


def correlation(
    state: 'ITEBDState',
    op1: Any,
    op2: Any,
    separation: int = 0,
    site: int = 0,
) -> Scalar:
    """
    Two-point correlator ``<Op1_site Op2_{site+separation+1}>``.

    ``separation`` counts the sites strictly between the two operators, so
    0 means neighbouring sites. ``separation == -1`` puts both operators on
    the same site (``<Op1 Op2>`` as a product), and smaller values place
    ``Op2`` to the left of ``Op1``.
    """
    return _two_point(state, op1, None, op2, separation, site)


def string_order(
    state: 'ITEBDState',
    op_first: Any,
    op_middle: Any,
    op_last: Any,
    separation: int,
    site: int = 0,
) -> Scalar:
    """
    String order parameter
    ``<Opfirst_site (prod Opmiddle) Oplast_{site+separation+1}>``,
    with ``Opmiddle`` on every site strictly between the endpoints.
    Separations follow the conventions of :func:`correlation`.
    """
    return _two_point(state, op_first, op_middle, op_last, separation, site)


def expected_value12(state: 'ITEBDState', op12: Any, site: int = 0) -> Scalar:
    """
    Expectation value of an operator acting jointly on ``site, site + 1``.

    ``op12`` is a ``(d1*d2, d1*d2)`` matrix in Kronecker ordering or a
    ``(d1, d2, d1, d2)`` array.
    """
    d1 = state.site_dimension(site)
    d2 = state.site_dimension(site + 1)
    O = two_site_operator(op12, d1, d2)

    left = state.left_boundary(site)
    right = state.right_boundary(site + 1)
    M1 = state.combined_matrix(site)
    M2 = state.combined_matrix(site + 1)

    value = contract('ad,akb,blc,klij,die,ejf,fc->', left, M1.conj(), M2.conj(), O, M1, M2, right)
    norm = contract('ad,aib,bjc,die,ejf,fc->', left, M1.conj(), M2.conj(), M1, M2, right)
    return (value.data[()] / norm.data[()]).item()


def energy(state: 'ITEBDState', H12: Any) -> float:
    """
    Energy of one unit cell of ``H = sum_i H12_{i,i+1}``: the sum of the
    bond energies on the even and the odd bond.
    """
    return float(np.real(expected_value12(state, H12, 0) + expected_value12(state, H12, 1)))


def schmidt_values(state: 'ITEBDState', site: int = 0) -> np.ndarray:
    """Schmidt coefficients on the bond to the left of ``site``."""
    if not state.is_canonical():
        state = state.canonical_form()
    return np.array(state.left_vector(site).data, copy=True)


def entropy(state: 'ITEBDState', site: Optional[int] = None) -> float:
    """
    Entanglement entropy ``-sum p log p`` of the cut to the left of
    ``site``, ``p`` being the squared Schmidt coefficients. Without a
    site, the sum over both inequivalent cuts.
    """
    if site is None:
        return entropy(state, 0) + entropy(state, 1)
    p = schmidt_values(state, site) ** 2
    p = p / np.sum(p)
    p = p[p > 0]
    return float(-np.sum(p * np.log(p)))


def correlation_length(state: 'ITEBDState') -> float:
    """Correlation length in sites from the transfer-operator spectrum."""
    return canonical.correlation_length(state.AlA, state.BlB)

"""
iTEBD state representation.

This module defines the infinite, translation-invariant Matrix Product
State with a two-site unit cell

    ... Gamma_A lambda_A Gamma_B lambda_B Gamma_A lambda_A ...

in Vidal form. ``A`` has shape ``(D_B, d_A, D_A)``, ``B`` has shape
``(D_A, d_B, D_B)``; ``lA`` sits on the bond right of ``A`` and ``lB`` on
the bond right of ``B``.

States are immutable: every stored array is a private read-only copy, and
every transformation returns a new state.
"""

from __future__ import annotations

import numpy as np
from typing import Tuple, Optional, Any, Union
from pathlib import Path
import h5py

from itebd.core.tensor import Tensor, as_tensor
from itebd.core.parity import Parity
from itebd.core.errors import DimensionMismatchError
from itebd.core.contractions import transfer_left, transfer_right
from itebd.algorithms import canonical
from itebd.algorithms import observables
from itebd.algorithms.gate_update import update_bond


Site = Union[int, Parity]

# Deviation of a wavefunction norm from 1 still accepted as normalized
_UNIT_NORM_TOL = 1e-12


def _schmidt_vector(name: str, vector: Any) -> Tensor:
    vector = as_tensor(vector)
    if vector.ndim != 1:
        raise DimensionMismatchError(f"Schmidt vector {name}", (vector.size,), vector.dims)
    data = vector.data
    if np.iscomplexobj(data):
        if not np.allclose(data.imag, 0.0):
            raise ValueError(f"Schmidt vector {name} must be real")
        data = data.real
    return Tensor(data)


class ITEBDState:
    """
    Infinite two-site Matrix Product State.

    Parameters
    ----------
    A, B : Tensor or array_like
        Site tensors ``(left bond, physical, right bond)``
    lA, lB : Tensor or array_like
        Schmidt vectors on the bonds right of ``A`` and right of ``B``
    canonical : bool
        Caller's assertion that the tensors are in canonical form
    discarded_weight : float
        Relative squared weight dropped by the truncation that produced
        this state

    Raises
    ------
    DimensionMismatchError
        If the tensors are not rank 3 or bond dimensions do not match.

    Examples
    --------
    >>> psi = ITEBDState.product(np.array([1.0, 0.0]))
    >>> psi.expected_value(np.diag([1.0, -1.0]))
    1.0
    """

    def __init__(
        self,
        A: Any,
        lA: Any,
        B: Any,
        lB: Any,
        canonical: bool = False,
        discarded_weight: float = 0.0,
    ):
        A = as_tensor(A)
        B = as_tensor(B)
        lA = _schmidt_vector('lA', lA)
        lB = _schmidt_vector('lB', lB)
        DA = lA.dims[0]
        DB = lB.dims[0]

        if A.ndim != 3:
            raise DimensionMismatchError("Site tensor A", (DB, -1, DA), A.dims)
        if B.ndim != 3:
            raise DimensionMismatchError("Site tensor B", (DA, -1, DB), B.dims)
        if (A.dims[0], A.dims[2]) != (DB, DA):
            raise DimensionMismatchError("Site tensor A", (DB, A.dims[1], DA), A.dims)
        if (B.dims[0], B.dims[2]) != (DA, DB):
            raise DimensionMismatchError("Site tensor B", (DA, B.dims[1], DB), B.dims)

        self._A = A.frozen()
        self._B = B.frozen()
        self._lA = lA.frozen()
        self._lB = lB.frozen()
        self._AlA = Tensor(A.data * lA.data[np.newaxis, np.newaxis, :]).frozen()
        self._BlB = Tensor(B.data * lB.data[np.newaxis, np.newaxis, :]).frozen()
        self._canonical = bool(canonical)
        self._discarded_weight = float(discarded_weight)
        self._fixed_points: Optional[Tuple[float, Tensor, Tensor]] = None

    # ==================== Constructors ====================

    @classmethod
    def random(
        cls,
        dimension: int,
        bond_dim: int = 1,
        dtype: Any = np.complex128,
        seed: Optional[int] = None,
    ) -> 'ITEBDState':
        """
        Random state; with ``bond_dim == 1`` a random product state.

        Parameters
        ----------
        dimension : int
            Physical dimension of both sites
        bond_dim : int
            Bond dimension of both bonds
        dtype : dtype
            ``float64`` or ``complex128``
        seed : int, optional
            Seed for NumPy's global random source
        """
        if dimension < 1 or bond_dim < 1:
            raise ValueError("Physical and bond dimensions must be positive")
        A = Tensor.random((bond_dim, dimension, bond_dim), dtype=dtype, seed=seed)
        B = Tensor.random((bond_dim, dimension, bond_dim), dtype=dtype)
        l = np.ones(bond_dim) / np.sqrt(bond_dim)
        return cls(A, l, B, l, canonical=False)

    @classmethod
    def product(cls, psi_a: Any, psi_b: Optional[Any] = None) -> 'ITEBDState':
        """
        Product state from one or two single-site wavefunctions.

        The state is flagged canonical only when both wavefunctions are
        normalized.
        """
        psi_a = as_tensor(psi_a).data.ravel()
        psi_b = psi_a if psi_b is None else as_tensor(psi_b).data.ravel()
        normalized = all(
            abs(np.linalg.norm(v) - 1.0) < _UNIT_NORM_TOL for v in (psi_a, psi_b)
        )
        one = np.ones(1)
        return cls(
            psi_a.reshape(1, -1, 1), one,
            psi_b.reshape(1, -1, 1), one,
            canonical=normalized,
        )

    # ==================== Accessors ====================

    @property
    def A(self) -> Tensor:
        return self._A

    @property
    def B(self) -> Tensor:
        return self._B

    @property
    def lA(self) -> Tensor:
        return self._lA

    @property
    def lB(self) -> Tensor:
        return self._lB

    @property
    def AlA(self) -> Tensor:
        return self._AlA

    @property
    def BlB(self) -> Tensor:
        return self._BlB

    @property
    def discarded_weight(self) -> float:
        return self._discarded_weight

    @property
    def dtype(self):
        return np.result_type(self._A.dtype, self._B.dtype)

    @property
    def max_bond_dimension(self) -> int:
        return max(self._lA.dims[0], self._lB.dims[0])

    def is_canonical(self) -> bool:
        return self._canonical

    def site_dimension(self, site: Site = 0) -> int:
        """Physical dimension of ``site``."""
        return self.site_tensor(site).dims[1]

    def bond_dimension(self, site: Site = 0) -> int:
        """Dimension of the bond to the right of ``site``."""
        return self.right_vector(site).dims[0]

    def site_tensor(self, site: Site) -> Tensor:
        return self._B if Parity.of(site) is Parity.ODD else self._A

    def combined_matrix(self, site: Site) -> Tensor:
        """Site tensor folded with the Schmidt vector on its right."""
        return self._BlB if Parity.of(site) is Parity.ODD else self._AlA

    def left_vector(self, site: Site) -> Tensor:
        """Schmidt vector on the bond to the left of ``site``."""
        return self._lA if Parity.of(site) is Parity.ODD else self._lB

    def right_vector(self, site: Site) -> Tensor:
        """Schmidt vector on the bond to the right of ``site``."""
        return self._lB if Parity.of(site) is Parity.ODD else self._lA

    def _boundary_fixed_points(self) -> Tuple[float, Tensor, Tensor]:
        if self._fixed_points is None:
            self._fixed_points = canonical.fixed_points(self._AlA, self._BlB)
        return self._fixed_points

    def left_boundary(self, site: Site) -> Tensor:
        """
        Left environment ``(bra, ket)`` on the bond to the left of ``site``.

        ``diag(left_vector**2)`` for canonical states, otherwise the left
        fixed point of the transfer operator (up to normalization).
        """
        if self._canonical:
            l = self.left_vector(site).data
            return Tensor(np.diag(l * l))
        _, left, _ = self._boundary_fixed_points()
        if Parity.of(site) is Parity.ODD:
            return transfer_left(left, self._AlA)
        return left

    def right_boundary(self, site: Site) -> Tensor:
        """
        Right environment ``(ket, bra)`` on the bond to the right of ``site``.

        The identity for canonical states, otherwise the right fixed point
        of the transfer operator (up to normalization).
        """
        if self._canonical:
            return Tensor.eye(self.bond_dimension(site))
        _, _, right = self._boundary_fixed_points()
        if Parity.of(site) is Parity.EVEN:
            return transfer_right(right, self._BlB)
        return right

    # ==================== Observables ====================

    def expected_value(
        self,
        op1: Any,
        op2: Any = None,
        separation: int = 0,
        site: Site = 0,
    ) -> Union[float, complex]:
        """
        Single-site expectation value or two-point correlator.

        ``psi.expected_value(Op)`` and ``psi.expected_value(Op, site)``
        evaluate ``<Op_site>``; ``psi.expected_value(Op1, Op2, separation,
        site)`` evaluates ``<Op1_site Op2_{site+separation+1}>``, see
        :func:`itebd.algorithms.observables.correlation`.
        """
        if op2 is None:
            return observables.expected_value(self, op1, site)
        if isinstance(op2, (int, np.integer, Parity)):
            return observables.expected_value(self, op1, op2)
        return observables.correlation(self, op1, op2, separation, site)

    def string_order(
        self,
        op_first: Any,
        op_middle: Any,
        op_last: Any,
        separation: int,
        site: Site = 0,
    ) -> Union[float, complex]:
        return observables.string_order(self, op_first, op_middle, op_last, separation, site)

    def expected_value12(self, op12: Any, site: Site = 0) -> Union[float, complex]:
        return observables.expected_value12(self, op12, site)

    def energy(self, H12: Any) -> float:
        return observables.energy(self, H12)

    def entropy(self, site: Optional[Site] = None) -> float:
        return observables.entropy(self, site)

    def schmidt_values(self, site: Site = 0) -> np.ndarray:
        return observables.schmidt_values(self, site)

    def correlation_length(self) -> float:
        return observables.correlation_length(self)

    # ==================== Transformations ====================

    def canonical_form(self) -> 'ITEBDState':
        """
        Same infinite state in canonical gauge.

        Raises
        ------
        IllPosedStateError
            If the transfer operator has no unique positive dominant
            eigenvalue.
        """
        A, lA, B, lB = canonical.canonicalize(self._A, self._lA, self._B, self._lB)
        return ITEBDState(A, lA, B, lB, canonical=True, discarded_weight=self._discarded_weight)

    def apply_operator(
        self,
        U: Any,
        parity: Site = 0,
        tolerance: float = -1.0,
        max_dim: int = 0,
    ) -> 'ITEBDState':
        """
        Apply a two-site operator across the even or odd bond.

        Parameters
        ----------
        U : Tensor or array_like
            ``(d_i d_j, d_i d_j)`` matrix or ``(d_i, d_j, d_i, d_j)`` array
        parity : int or Parity
            0 acts on ``(A, B)``, 1 on ``(B, A)``
        tolerance : float
            Minimum relative weight of a kept Schmidt value (< 0: none)
        max_dim : int
            Maximum bond dimension (0: unbounded)

        Returns
        -------
        ITEBDState
            New state, flagged canonical only after an untruncated unitary
            update; observables of other results use the fixed-point
            boundaries

        Raises
        ------
        DimensionMismatchError
            If ``U`` does not fit the physical dimensions.
        VanishingNormError
            If ``U`` annihilates the state.
        """
        psi = self if self._canonical else self.canonical_form()

        if Parity.of(parity) is Parity.EVEN:
            result = update_bond(psi.A, psi.lA, psi.B, psi.lB, U, tolerance, max_dim)
            return ITEBDState(
                result.left, result.schmidt, result.right, psi.lB,
                canonical=result.canonical,
                discarded_weight=result.discarded_weight,
            )

        result = update_bond(psi.B, psi.lB, psi.A, psi.lA, U, tolerance, max_dim)
        return ITEBDState(
            result.right, psi.lA, result.left, result.schmidt,
            canonical=result.canonical,
            discarded_weight=result.discarded_weight,
        )

    # ==================== I/O ====================

    def save(self, path: Union[str, Path]) -> None:
        """
        Save the state to an HDF5 file.

        Parameters
        ----------
        path : str or Path
            Output file path
        """
        path = Path(path)

        with h5py.File(path, 'w') as f:
            f.attrs['canonical'] = self._canonical
            f.attrs['discarded_weight'] = self._discarded_weight

            tensors_grp = f.create_group('tensors')
            tensors_grp.create_dataset('A', data=self._A.numpy())
            tensors_grp.create_dataset('B', data=self._B.numpy())

            schmidt_grp = f.create_group('schmidt')
            schmidt_grp.create_dataset('lA', data=self._lA.numpy())
            schmidt_grp.create_dataset('lB', data=self._lB.numpy())

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'ITEBDState':
        """Load a state written by :meth:`save`."""
        path = Path(path)

        with h5py.File(path, 'r') as f:
            return cls(
                f['tensors']['A'][:],
                f['schmidt']['lA'][:],
                f['tensors']['B'][:],
                f['schmidt']['lB'][:],
                canonical=bool(f.attrs['canonical']),
                discarded_weight=float(f.attrs.get('discarded_weight', 0.0)),
            )

    def __repr__(self) -> str:
        return (
            f"ITEBDState(d=({self.site_dimension(0)}, {self.site_dimension(1)}), "
            f"D=({self._lA.dims[0]}, {self._lB.dims[0]}), "
            f"canonical={self._canonical})"
        )

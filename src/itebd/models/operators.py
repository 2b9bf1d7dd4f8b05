"""
Local operators for spin chains.

This module provides the single-site operators used to build chain
Hamiltonians and observables:
- Spin operators (Sx, Sy, Sz, S+, S-) for any spin quantum number
- Pauli matrices
- Projectors onto single-site (or two-site) wavefunctions

Operators are real (``float64``) whenever their matrix elements are, so
that real Hamiltonians evolve real states.
"""

from __future__ import annotations

import numpy as np
from typing import Dict, Union, Any
from dataclasses import dataclass

from itebd.core.tensor import Tensor, as_tensor


def _real_if_close(matrix: np.ndarray) -> np.ndarray:
    """Drop a vanishing imaginary part."""
    if np.iscomplexobj(matrix) and np.allclose(matrix.imag, 0.0):
        return np.ascontiguousarray(matrix.real)
    return matrix


@dataclass
class SpinOperators:
    """
    Collection of spin operators for a given spin value.

    Parameters
    ----------
    S : float
        Spin quantum number (1/2, 1, 3/2, ...)

    Attributes
    ----------
    dim : int
        Hilbert space dimension (2S + 1)
    Sx, Sy, Sz : Tensor
        Spin component operators (``Sy`` is complex)
    Sp, Sm : Tensor
        Raising and lowering operators
    identity : Tensor
        Identity operator

    Examples
    --------
    >>> ops = SpinOperators(0.5)
    >>> ops.dim
    2
    """
    S: float

    def __post_init__(self):
        if self.S < 0 or not float(2 * self.S).is_integer():
            raise ValueError(f"Spin must be a non-negative half-integer, got {self.S}")
        self.dim = int(round(2 * self.S)) + 1
        self._build_operators()

    def _build_operators(self) -> None:
        dim = self.dim
        S = self.S

        # Basis ordered m = S, S-1, ..., -S
        m_vals = S - np.arange(dim)

        Sp = np.zeros((dim, dim))
        for i in range(dim - 1):
            m = m_vals[i + 1]
            Sp[i, i + 1] = np.sqrt(S * (S + 1) - m * (m + 1))
        Sm = Sp.T.copy()

        self.Sp = Tensor(Sp)
        self.Sm = Tensor(Sm)
        self.Sx = Tensor((Sp + Sm) / 2)
        self.Sy = Tensor((Sp - Sm) / 2j)
        self.Sz = Tensor(np.diag(m_vals))
        self.identity = Tensor.eye(dim)

    def get(self, name: str) -> Tensor:
        """Get operator by name."""
        operators = {
            'Sx': self.Sx,
            'Sy': self.Sy,
            'Sz': self.Sz,
            'S+': self.Sp,
            'Sp': self.Sp,
            'S-': self.Sm,
            'Sm': self.Sm,
            'I': self.identity,
            'id': self.identity,
        }
        if name not in operators:
            raise ValueError(f"Unknown spin operator: {name}")
        return operators[name]

    def bond(self, first: str, second: str) -> Tensor:
        """Two-site operator ``first (x) second`` in Kronecker ordering."""
        return Tensor(_real_if_close(np.kron(self.get(first).data, self.get(second).data)))

    def heisenberg_bond(self, J: float = 1.0, delta: float = 1.0) -> Tensor:
        """
        XXZ bond operator: ``J (Sx Sx + Sy Sy + delta Sz Sz)``.

        Uses ``Sx Sx + Sy Sy = (S+ S- + S- S+) / 2`` so the result is real.
        """
        SpSm = np.kron(self.Sp.data, self.Sm.data)
        SmSp = np.kron(self.Sm.data, self.Sp.data)
        SzSz = np.kron(self.Sz.data, self.Sz.data)
        return Tensor(J * (0.5 * (SpSm + SmSp) + delta * SzSz))

    def ising_bond(self, J: float = 1.0) -> Tensor:
        """Ising bond operator: ``J Sz Sz``."""
        return Tensor(J * np.kron(self.Sz.data, self.Sz.data))


def pauli_matrices() -> Dict[str, Tensor]:
    """
    Pauli matrices and the 2x2 identity.

    Returns
    -------
    dict
        Keys ``'I'``, ``'X'``, ``'Y'``, ``'Z'``
    """
    return {
        'I': Tensor.eye(2),
        'X': Tensor([[0.0, 1.0], [1.0, 0.0]]),
        'Y': Tensor([[0.0, -1.0j], [1.0j, 0.0]]),
        'Z': Tensor([[1.0, 0.0], [0.0, -1.0]]),
    }


def spin_operators(S: float = 0.5) -> SpinOperators:
    return SpinOperators(S)


def get_operator(name: str, S: float = 0.5) -> Tensor:
    """Look up a spin operator by name (``'Sx'``, ``'S+'``, ``'I'``, ...)."""
    return SpinOperators(S).get(name)


def projector(psi: Union[Tensor, Any]) -> Tensor:
    """
    Orthogonal projector ``|psi><psi| / <psi|psi>`` onto a wavefunction.

    ``psi`` may be a single-site vector or a flattened two-site vector
    ``kron(psi_a, psi_b)``.
    """
    v = as_tensor(psi).data.ravel()
    norm2 = np.vdot(v, v).real
    if not norm2 > 0.0:
        raise ValueError("Cannot build a projector onto a zero vector")
    return Tensor(np.outer(v, np.conj(v)) / norm2)

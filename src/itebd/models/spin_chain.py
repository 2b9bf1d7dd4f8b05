"""
Nearest-neighbour spin-chain Hamiltonians.

A chain Hamiltonian is a sum of identical two-site terms,
``H = sum_i h_{i,i+1}``, where single-site terms are split evenly over the
two bonds touching a site. The bond term ``h`` is what the imaginary-time
evolution and the energy evaluation consume.

Supported models:
- Transverse-field Ising chain ``-J sum Z Z - g sum X``
- XXZ chain ``J sum (Sx Sx + Sy Sy + delta Sz Sz) - h sum Sz``
- Heisenberg chain (XXZ at ``delta = 1``)
"""

from __future__ import annotations

import numpy as np
from typing import Optional
from dataclasses import dataclass
from abc import ABC, abstractmethod

from itebd.core.tensor import Tensor
from itebd.core.decompositions import expm
from itebd.models.operators import SpinOperators, pauli_matrices


@dataclass
class ChainParams:
    """
    Container for chain Hamiltonian parameters.

    Parameters
    ----------
    J : float
        Nearest-neighbour coupling (default: 1.0)
    g : float
        Transverse field (default: 0.0)
    h : float
        Longitudinal field (default: 0.0)
    delta : float
        Anisotropy (default: 1.0, isotropic)
    S : float
        Spin quantum number (default: 1/2)
    """
    J: float = 1.0
    g: float = 0.0
    h: float = 0.0
    delta: float = 1.0
    S: float = 0.5


class ChainHamiltonian(ABC):
    """
    Abstract base class for translation-invariant chain Hamiltonians.

    Subclasses must implement:
    - get_bond_hamiltonian: the two-site interaction
    - get_site_hamiltonian: single-site terms
    """

    def __init__(self, params: Optional[ChainParams] = None):
        self.params = params or ChainParams()
        self._build_operators()

    @abstractmethod
    def _build_operators(self) -> None:
        """Build the operators needed for this Hamiltonian."""
        pass

    @property
    @abstractmethod
    def dim(self) -> int:
        """Physical dimension of a site."""
        pass

    @abstractmethod
    def get_bond_hamiltonian(self) -> Tensor:
        """
        Two-site interaction term.

        Returns
        -------
        Tensor
            Matrix of shape ``(d*d, d*d)`` in Kronecker ordering
        """
        pass

    @abstractmethod
    def get_site_hamiltonian(self) -> Tensor:
        """
        Single-site term.

        Returns
        -------
        Tensor
            Matrix of shape ``(d, d)``
        """
        pass

    def bond_hamiltonian(self) -> Tensor:
        """
        Full two-site term ``h`` with ``H = sum_i h_{i,i+1}``.

        Each site belongs to two bonds, so each bond carries half of the
        single-site term of both of its sites.
        """
        d = self.dim
        site = self.get_site_hamiltonian().data
        eye = np.eye(d)
        H = self.get_bond_hamiltonian().data + 0.5 * (np.kron(site, eye) + np.kron(eye, site))
        return Tensor(H)

    def get_time_evolution_operator(self, dt: float) -> Tensor:
        """
        Imaginary-time propagator ``exp(-dt h)`` of one bond.

        Parameters
        ----------
        dt : float
            Imaginary time step
        """
        return expm(-dt * self.bond_hamiltonian())

    def exact_energy_per_site(self) -> Optional[float]:
        """Exact ground-state energy per site, where known in closed form."""
        return None


class TransverseFieldIsing(ChainHamiltonian):
    """
    Transverse-field Ising chain in terms of Pauli matrices.

    H = -J Σ Z_i Z_{i+1} - g Σ X_i

    Critical at ``g = J``.
    """

    def _build_operators(self) -> None:
        self.ops = pauli_matrices()

    @property
    def dim(self) -> int:
        return 2

    def get_bond_hamiltonian(self) -> Tensor:
        Z = self.ops['Z'].data
        return Tensor(-self.params.J * np.kron(Z, Z))

    def get_site_hamiltonian(self) -> Tensor:
        return Tensor(-self.params.g * self.ops['X'].data)

    def exact_energy_per_site(self) -> float:
        """
        Ground-state energy per site of the infinite chain.

        ``E/N = -(1/2pi) int_{-pi}^{pi} sqrt(J^2 + g^2 + 2 J g cos k) dk``
        """
        from scipy import integrate

        J = self.params.J
        g = self.params.g

        def dispersion(k):
            return np.sqrt(J ** 2 + g ** 2 + 2 * J * g * np.cos(k))

        value, _ = integrate.quad(dispersion, -np.pi, np.pi)
        return -value / (2 * np.pi)


class XXZChain(ChainHamiltonian):
    """
    XXZ chain with a longitudinal field.

    H = J Σ (Sx Sx + Sy Sy + Δ Sz Sz) - h Σ Sz
    """

    def _build_operators(self) -> None:
        self.spin_ops = SpinOperators(self.params.S)

    @property
    def dim(self) -> int:
        return self.spin_ops.dim

    def get_bond_hamiltonian(self) -> Tensor:
        return self.spin_ops.heisenberg_bond(J=self.params.J, delta=self.params.delta)

    def get_site_hamiltonian(self) -> Tensor:
        return Tensor(-self.params.h * self.spin_ops.Sz.data)


class HeisenbergChain(XXZChain):
    """
    Isotropic Heisenberg chain, H = J Σ S_i · S_{i+1}.

    Parameters
    ----------
    J : float
        Exchange coupling (antiferromagnetic for J > 0)
    S : float
        Spin quantum number
    """

    def __init__(self, J: float = 1.0, S: float = 0.5):
        super().__init__(ChainParams(J=J, delta=1.0, S=S))

    def exact_energy_per_site(self) -> Optional[float]:
        """Bethe-ansatz energy ``J (1/4 - ln 2)`` for the spin-1/2 antiferromagnet."""
        if self.params.S == 0.5 and self.params.J > 0:
            return self.params.J * (0.25 - np.log(2.0))
        return None

"""
Spin-chain models for iTEBD.
"""

from itebd.models.operators import (
    get_operator,
    spin_operators,
    pauli_matrices,
    projector,
    SpinOperators,
)
from itebd.models.spin_chain import (
    ChainParams,
    ChainHamiltonian,
    TransverseFieldIsing,
    XXZChain,
    HeisenbergChain,
)

__all__ = [
    "get_operator",
    "spin_operators",
    "pauli_matrices",
    "projector",
    "SpinOperators",
    "ChainParams",
    "ChainHamiltonian",
    "TransverseFieldIsing",
    "XXZChain",
    "HeisenbergChain",
]

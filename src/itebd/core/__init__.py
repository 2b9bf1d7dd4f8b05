"""
Core tensor operations and the iTEBD state.
"""

from itebd.core.tensor import Tensor, diag, kron
from itebd.core.contractions import contract, transfer_matrix
from itebd.core.decompositions import svd, truncated_svd, eig, expm
from itebd.core.errors import (
    ITEBDError,
    IllPosedStateError,
    VanishingNormError,
    DimensionMismatchError,
)
from itebd.core.parity import Parity
from itebd.core.itebd_state import ITEBDState

__all__ = [
    "Tensor",
    "diag",
    "kron",
    "contract",
    "transfer_matrix",
    "svd",
    "truncated_svd",
    "eig",
    "expm",
    "ITEBDError",
    "IllPosedStateError",
    "VanishingNormError",
    "DimensionMismatchError",
    "Parity",
    "ITEBDState",
]

"""
iTEBD: infinite two-site Matrix Product States in imaginary time

Canonical forms, truncated two-site gate updates, expectation values and
imaginary-time ground-state search for translation-invariant chains.
"""

__version__ = "1.0.0"

from itebd.core.tensor import Tensor
from itebd.core.parity import Parity
from itebd.core.errors import (
    ITEBDError,
    IllPosedStateError,
    VanishingNormError,
    DimensionMismatchError,
)
from itebd.core.itebd_state import ITEBDState
from itebd.algorithms.evolution import (
    ImaginaryTimeEvolution,
    ImaginaryTimeConfig,
    EvolutionReport,
    evolve_itime,
)
from itebd.models.spin_chain import TransverseFieldIsing, HeisenbergChain, XXZChain

__all__ = [
    "Tensor",
    "Parity",
    "ITEBDError",
    "IllPosedStateError",
    "VanishingNormError",
    "DimensionMismatchError",
    "ITEBDState",
    "ImaginaryTimeEvolution",
    "ImaginaryTimeConfig",
    "EvolutionReport",
    "evolve_itime",
    "TransverseFieldIsing",
    "HeisenbergChain",
    "XXZChain",
]

"""
iTEBD algorithms: canonical form, gate updates, observables and
imaginary-time evolution.
"""

from itebd.algorithms.canonical import canonicalize, fixed_points
from itebd.algorithms.gate_update import update_bond, BondUpdate
from itebd.algorithms.evolution import (
    ImaginaryTimeEvolution,
    ImaginaryTimeConfig,
    EvolutionReport,
    evolve_itime,
)

__all__ = [
    "canonicalize",
    "fixed_points",
    "update_bond",
    "BondUpdate",
    "ImaginaryTimeEvolution",
    "ImaginaryTimeConfig",
    "EvolutionReport",
    "evolve_itime",
]

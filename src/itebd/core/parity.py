"""
Site parity of the two-site unit cell.
"""

from __future__ import annotations

from enum import Enum
from typing import Union


class Parity(Enum):
    """Even sites hold tensor ``A``, odd sites hold tensor ``B``."""
    EVEN = 0
    ODD = 1

    @classmethod
    def of(cls, site: Union[int, 'Parity']) -> 'Parity':
        """Parity of an arbitrary (possibly negative) site index."""
        if isinstance(site, Parity):
            return site
        return cls(int(site) & 1)

    def __int__(self) -> int:
        return self.value

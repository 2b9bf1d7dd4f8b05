"""
Core Tensor class used by the iTEBD state and its algorithms.

The Tensor class wraps a NumPy array and provides the small set of
operations the iTEBD machinery needs: arithmetic, reshapes, adjoints,
Kronecker products, norms and tolerance-based comparison.

Scalars are generic: a Tensor keeps the floating point type of its
data (``float64`` or ``complex128``), so the same code paths serve real
and complex states.
"""

from __future__ import annotations

import numpy as np
from typing import Union, Optional, Tuple, Any
from dataclasses import dataclass


@dataclass(eq=False)
class TensorShape:
    """Represents the shape of a tensor with named dimensions."""
    dims: Tuple[int, ...]
    names: Optional[Tuple[str, ...]] = None

    def __post_init__(self):
        if self.names is not None and len(self.names) != len(self.dims):
            raise ValueError("Number of dimension names must match number of dimensions")

    @property
    def ndim(self) -> int:
        return len(self.dims)

    @property
    def total_size(self) -> int:
        return int(np.prod(self.dims))

    def __getitem__(self, idx: int) -> int:
        return self.dims[idx]

    def __len__(self) -> int:
        return len(self.dims)

    def __iter__(self):
        return iter(self.dims)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, TensorShape):
            return self.dims == other.dims
        return self.dims == tuple(other)

    def __repr__(self) -> str:
        return f"TensorShape(dims={self.dims})"


def _as_array(data: Any, dtype: Any) -> np.ndarray:
    """Convert data to a floating point NumPy array."""
    if isinstance(data, Tensor):
        data = data.data
    if dtype is not None:
        return np.asarray(data, dtype=dtype)
    array = np.asarray(data)
    if not np.issubdtype(array.dtype, np.inexact):
        array = array.astype(np.float64)
    return array


class Tensor:
    """
    Dense tensor over real or complex scalars.

    Parameters
    ----------
    data : array_like
        The tensor data
    dtype : dtype, optional
        Data type. If omitted, floating point data keeps its type and
        integer data is promoted to ``float64``.
    labels : tuple of str, optional
        Names for each dimension (e.g. ``('vL', 'p', 'vR')``)

    Examples
    --------
    >>> t = Tensor(np.random.randn(2, 3, 4))
    >>> t.shape == (2, 3, 4)
    True
    >>> Tensor([3.0, 4.0]).norm()
    5.0
    """

    __slots__ = ('_data', '_shape', '_labels')

    def __init__(
        self,
        data: Any,
        dtype: Optional[Any] = None,
        labels: Optional[Tuple[str, ...]] = None,
    ):
        self._labels = labels
        self._data = _as_array(data, dtype)
        self._shape = TensorShape(tuple(self._data.shape), labels)

    @property
    def data(self) -> np.ndarray:
        """Get the underlying tensor data."""
        return self._data

    @property
    def shape(self) -> TensorShape:
        """Get the tensor shape."""
        return self._shape

    @property
    def dims(self) -> Tuple[int, ...]:
        """Get the tensor dimensions as a tuple."""
        return self._shape.dims

    @property
    def ndim(self) -> int:
        """Number of dimensions."""
        return self._shape.ndim

    @property
    def size(self) -> int:
        """Total number of elements."""
        return self._shape.total_size

    @property
    def dtype(self):
        """Data type of the tensor."""
        return self._data.dtype

    @property
    def labels(self) -> Optional[Tuple[str, ...]]:
        """Dimension labels."""
        return self._labels

    @property
    def is_complex(self) -> bool:
        return np.iscomplexobj(self._data)

    @property
    def writeable(self) -> bool:
        return self._data.flags.writeable

    def __repr__(self) -> str:
        return f"Tensor(shape={self.dims}, dtype={self.dtype})"

    # ==================== Factory Methods ====================

    @classmethod
    def random(
        cls,
        shape: Tuple[int, ...],
        dtype: Any = np.complex128,
        labels: Optional[Tuple[str, ...]] = None,
        seed: Optional[int] = None,
    ) -> 'Tensor':
        """Create a random tensor with normally distributed entries."""
        if seed is not None:
            np.random.seed(seed)

        if np.issubdtype(dtype, np.complexfloating):
            real = np.random.randn(*shape)
            imag = np.random.randn(*shape)
            data = (real + 1j * imag) / np.sqrt(2)
        else:
            data = np.random.randn(*shape)

        return cls(data, dtype=dtype, labels=labels)

    @classmethod
    def eye(cls, dim: int, dtype: Any = np.float64) -> 'Tensor':
        """Create an identity matrix."""
        return cls(np.eye(dim, dtype=dtype))

    # ==================== Conversion Methods ====================

    def numpy(self) -> np.ndarray:
        """Return the underlying NumPy array."""
        return self._data

    def clone(self) -> 'Tensor':
        """Create a deep copy of the tensor."""
        return Tensor(np.array(self._data, copy=True), labels=self._labels)

    def frozen(self) -> 'Tensor':
        """Return a private read-only copy of the tensor."""
        result = self.clone()
        result._data.flags.writeable = False
        return result

    # ==================== Basic Operations ====================

    def __add__(self, other: Union['Tensor', float, complex]) -> 'Tensor':
        if isinstance(other, Tensor):
            return Tensor(self._data + other._data)
        return Tensor(self._data + other)

    def __radd__(self, other: Union[float, complex]) -> 'Tensor':
        return self.__add__(other)

    def __sub__(self, other: Union['Tensor', float, complex]) -> 'Tensor':
        if isinstance(other, Tensor):
            return Tensor(self._data - other._data)
        return Tensor(self._data - other)

    def __rsub__(self, other: Union[float, complex]) -> 'Tensor':
        return Tensor(other - self._data)

    def __mul__(self, other: Union['Tensor', float, complex]) -> 'Tensor':
        if isinstance(other, Tensor):
            return Tensor(self._data * other._data)
        return Tensor(self._data * other)

    def __rmul__(self, other: Union[float, complex]) -> 'Tensor':
        return self.__mul__(other)

    def __truediv__(self, other: Union['Tensor', float, complex]) -> 'Tensor':
        if isinstance(other, Tensor):
            return Tensor(self._data / other._data)
        return Tensor(self._data / other)

    def __neg__(self) -> 'Tensor':
        return Tensor(-self._data)

    def __getitem__(self, idx) -> 'Tensor':
        return Tensor(self._data[idx])

    def __matmul__(self, other: 'Tensor') -> 'Tensor':
        return self.matmul(other)

    # ==================== Linear Algebra Operations ====================

    def norm(self, ord: Optional[Union[int, float, str]] = None) -> float:
        """Compute the norm of the tensor (Frobenius by default)."""
        if ord is None:
            return float(np.linalg.norm(self._data.ravel()))
        return float(np.linalg.norm(self._data, ord=ord))

    def conj(self) -> 'Tensor':
        """Complex conjugate."""
        return Tensor(np.conj(self._data), labels=self._labels)

    def adjoint(self) -> 'Tensor':
        """Conjugate transpose of a matrix."""
        return Tensor(np.conj(self._data).T)

    def transpose(self, axes: Optional[Tuple[int, ...]] = None) -> 'Tensor':
        """Transpose tensor axes."""
        if axes is None:
            data = np.transpose(self._data)
            labels = self._labels[::-1] if self._labels else None
        else:
            data = np.transpose(self._data, axes)
            labels = tuple(self._labels[i] for i in axes) if self._labels else None
        return Tensor(data, labels=labels)

    def reshape(self, shape: Tuple[int, ...]) -> 'Tensor':
        """Reshape the tensor."""
        return Tensor(np.reshape(self._data, shape))

    def matmul(self, other: 'Tensor') -> 'Tensor':
        """Matrix multiplication."""
        return Tensor(np.matmul(self._data, other._data))

    def kron(self, other: 'Tensor') -> 'Tensor':
        """Kronecker product, ``self`` being the major (left) factor."""
        return Tensor(np.kron(self._data, other._data))

    # ==================== Comparison ====================

    def allclose(
        self,
        other: Union['Tensor', Any],
        rtol: float = 1e-10,
        atol: float = 1e-12,
    ) -> bool:
        """Element-wise equality up to tolerance."""
        other_data = other.data if isinstance(other, Tensor) else np.asarray(other)
        if np.shape(other_data) != self.dims:
            return False
        return bool(np.allclose(self._data, other_data, rtol=rtol, atol=atol))


def as_tensor(data: Any) -> Tensor:
    """Wrap array-like data in a Tensor (Tensors are returned unchanged)."""
    if isinstance(data, Tensor):
        return data
    return Tensor(data)


def diag(vector: Union[Tensor, Any]) -> Tensor:
    """Diagonal matrix built from a vector."""
    return Tensor(np.diag(as_tensor(vector).data))


def kron(a: Union[Tensor, Any], b: Union[Tensor, Any]) -> Tensor:
    """Kronecker product of two operators, ``a`` acting on the left site."""
    return as_tensor(a).kron(as_tensor(b))

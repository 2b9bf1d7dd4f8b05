"""
Shared fixtures for the iTEBD tests.

=================  ==========================================================
Fixture            Description
=================  ==========================================================
seed_random        Autouse. Seeds NumPy's global random source per test.
make_product       ``make(d, dtype, same=False)`` returns ``(psi, a, b)``:
                   a random product state built from *unnormalized* site
                   vectors and the normalized vectors ``a``, ``b``.
make_entangled     ``make(d, D, dtype)`` returns ``(psi, canonical)``: a random
                   state of bond dimension ``D`` and its canonical form.
make_gate          ``make(d, dtype)`` returns a random invertible two-site
                   operator with singular values in [0.6, 1.4].
aklt               The spin-1 AKLT state in non-canonical form.
make_unitary       ``make(n, dtype)`` returns a random n x n unitary.
transfer_maps      ``(right_map, left_map)`` applying a folded site tensor.
check_canonical    Asserts the Vidal canonical conditions on both sites.
=================  ==========================================================
"""

import pytest
import numpy as np

from itebd.core.tensor import Tensor
from itebd.core.itebd_state import ITEBDState


def random_vector(d, dtype):
    return Tensor.random((d,), dtype=dtype).data


@pytest.fixture(autouse=True)
def seed_random():
    np.random.seed(12345)


@pytest.fixture
def make_product():
    def make(d, dtype, same=False):
        a = random_vector(d, dtype)
        b = a if same else random_vector(d, dtype)
        psi = ITEBDState.product(a, b)
        return psi, a / np.linalg.norm(a), b / np.linalg.norm(b)
    return make


@pytest.fixture
def make_entangled():
    def make(d, D, dtype):
        psi = ITEBDState.random(d, bond_dim=D, dtype=dtype)
        return psi, psi.canonical_form()
    return make


@pytest.fixture
def make_gate():
    def make(d, dtype):
        X = Tensor.random((d * d, d * d), dtype=dtype).data
        return np.eye(d * d) + 0.4 * X / np.linalg.norm(X)
    return make


@pytest.fixture
def aklt():
    """The spin-1 AKLT state, with right-normalized tensors on both sites."""
    sp = np.array([[0.0, 1.0], [0.0, 0.0]])
    A = np.stack([
        np.sqrt(2.0 / 3.0) * sp,
        -np.sqrt(1.0 / 3.0) * np.diag([1.0, -1.0]),
        -np.sqrt(2.0 / 3.0) * sp.T,
    ], axis=1)
    return ITEBDState(A, np.ones(2), A, np.ones(2))


def right_map(M, R):
    return np.einsum('asc,cf,dsf->ad', M, R, M.conj())


def left_map(M, L):
    return np.einsum('ad,asb,dse->be', L, M.conj(), M)


@pytest.fixture
def transfer_maps():
    return right_map, left_map


@pytest.fixture
def check_canonical():
    """Right maps fix the identity, left maps carry diag(l**2) along."""
    def check(psi, atol=1e-10):
        for site in (0, 1):
            M = psi.combined_matrix(site).data
            l_left = psi.left_vector(site).data
            l_right = psi.right_vector(site).data
            D = len(l_right)

            assert np.isclose(np.sum(l_left ** 2), 1.0, atol=atol)
            assert np.allclose(right_map(M, np.eye(D)), np.eye(len(l_left)), atol=atol)
            assert np.allclose(left_map(M, np.diag(l_left ** 2)), np.diag(l_right ** 2),
                               atol=atol)
    return check


@pytest.fixture
def make_unitary():
    def make(n, dtype):
        Q, _ = np.linalg.qr(Tensor.random((n, n), dtype=dtype).data)
        return Q
    return make

"""
Tests for the canonical form of two-site infinite MPS.
"""

import pytest
import numpy as np
from numpy.testing import assert_allclose


@pytest.mark.parametrize("dtype", [np.float64, np.complex128])
@pytest.mark.parametrize("d,D", [(2, 1), (2, 2), (2, 4), (3, 3), (5, 2)])
class TestCanonicalForm:
    """Tests for canonical_form()."""

    def test_invariants(self, check_canonical, d, D, dtype):
        from itebd.core.itebd_state import ITEBDState

        psi = ITEBDState.random(d, bond_dim=D, dtype=dtype).canonical_form()

        assert psi.is_canonical()
        check_canonical(psi)
        assert np.all(psi.lA.data > 0) and np.all(psi.lB.data > 0)
        assert np.all(np.diff(psi.lA.data) <= 1e-14)

    def test_idempotent(self, d, D, dtype):
        """Canonicalizing twice gives an observably equal state."""
        from itebd.core.itebd_state import ITEBDState

        once = ITEBDState.random(d, bond_dim=D, dtype=dtype).canonical_form()
        twice = once.canonical_form()
        op = np.random.randn(d, d)
        op12 = np.random.randn(d * d, d * d)

        assert twice.is_canonical()
        assert_allclose(twice.lA.data, once.lA.data, atol=1e-10)
        assert_allclose(twice.lB.data, once.lB.data, atol=1e-10)
        for site in (0, 1):
            assert_allclose(twice.expected_value(op, site), once.expected_value(op, site), atol=1e-10)
            assert_allclose(twice.expected_value12(op12, site), once.expected_value12(op12, site),
                            atol=1e-10)

    def test_preserves_dtype(self, d, D, dtype):
        from itebd.core.itebd_state import ITEBDState

        psi = ITEBDState.random(d, bond_dim=D, dtype=dtype).canonical_form()

        assert psi.A.dtype == dtype
        assert psi.B.dtype == dtype
        assert psi.lA.dtype == np.float64


class TestCanonicalEdgeCases:
    """Gauge freedom, rank deficiency and ill-posed states."""

    def test_gauge_invariance(self):
        """States related by a gauge transformation canonicalize alike."""
        from itebd.core.itebd_state import ITEBDState

        psi = ITEBDState.random(2, bond_dim=3, dtype=np.complex128)
        G = np.random.randn(3, 3) + 1j * np.random.randn(3, 3)
        Ginv = np.linalg.inv(G)
        # Absorb G into the bond right of A and its inverse into B
        A = np.einsum('asb,bc->asc', psi.AlA.data, G)
        B = np.einsum('ab,bsc->asc', Ginv, psi.B.data)
        phi = ITEBDState(A, np.ones(3), B, psi.lB.data)

        lA1 = psi.canonical_form().lA.data
        lA2 = phi.canonical_form().lA.data
        assert_allclose(lA1, lA2, atol=1e-10)
        assert_allclose(phi.entropy(), psi.entropy(), atol=1e-10)

    def test_rank_deficient_bond_shrinks(self):
        """Redundant bond dimension is removed."""
        from itebd.core.itebd_state import ITEBDState

        a = np.array([0.6, 0.8])
        A = np.zeros((2, 2, 2))
        A[0, :, 0] = a
        B = np.zeros((2, 2, 2))
        B[0, :, 0] = a
        l = np.array([0.9, 0.1])
        # The second bond index never connects: a product state in disguise
        psi = ITEBDState(A, l, B, l).canonical_form()

        assert psi.max_bond_dimension == 1
        assert_allclose(psi.expected_value(np.diag([1.0, -1.0])), 0.36 - 0.64)

    def test_ghz_is_ill_posed(self):
        """A GHZ-like state has a degenerate transfer operator."""
        from itebd.core.itebd_state import ITEBDState
        from itebd.core.errors import IllPosedStateError

        A = np.zeros((2, 2, 2))
        A[0, 0, 0] = A[1, 1, 1] = 1.0
        l = np.ones(2) / np.sqrt(2)
        psi = ITEBDState(A, l, A, l)

        with pytest.raises(IllPosedStateError):
            psi.canonical_form()
        with pytest.raises(IllPosedStateError):
            psi.expected_value(np.eye(2))
        with pytest.raises(IllPosedStateError):
            psi.apply_operator(np.eye(4))


class TestFixedPoints:
    """Tests for the boundary fixed points."""

    def test_fixed_points_are_eigenvectors(self, transfer_maps):
        from itebd.core.tensor import Tensor
        from itebd.core.contractions import merge_sites
        from itebd.algorithms.canonical import fixed_points

        right_map, left_map = transfer_maps
        AlA = Tensor.random((3, 2, 2))
        BlB = Tensor.random((2, 2, 3))
        C = merge_sites(AlA, BlB).data

        eta, L, R = fixed_points(AlA, BlB)

        assert eta > 0
        assert_allclose(right_map(C, R.data), eta * R.data, atol=1e-10)
        assert_allclose(left_map(C, L.data), eta * L.data, atol=1e-10)
        # Hermitian and positive
        assert_allclose(L.data, L.data.conj().T)
        assert np.all(np.linalg.eigvalsh(R.data) > -1e-12)
        assert np.trace(L.data).real > 0


class TestCorrelationLength:
    """Correlation length from the transfer spectrum."""

    def test_product_state(self, make_product):
        psi, _, _ = make_product(2, np.complex128)

        assert psi.correlation_length() == 0.0

    def test_aklt(self, aklt):
        """The AKLT chain has xi = 1 / ln 3."""
        assert_allclose(aklt.correlation_length(), 1.0 / np.log(3.0))

    def test_random_state(self):
        from itebd.core.itebd_state import ITEBDState

        psi = ITEBDState.random(2, bond_dim=2, dtype=np.float64)
        xi = psi.correlation_length()

        assert 0.0 < xi < np.inf
        assert_allclose(psi.canonical_form().correlation_length(), xi, rtol=1e-8)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

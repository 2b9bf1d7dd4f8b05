"""
Tests for physical models and operators.
"""

import pytest
import numpy as np
from numpy.testing import assert_allclose


class TestSpinOperators:
    """Tests for spin operators."""

    @pytest.mark.parametrize("S", [0.5, 1.0, 1.5, 2.0])
    def test_commutators(self, S):
        """Test [Si, Sj] = i*epsilon_ijk * Sk."""
        from itebd.models.operators import SpinOperators

        ops = SpinOperators(S)
        Sx, Sy, Sz = ops.Sx.data, ops.Sy.data, ops.Sz.data

        assert_allclose(Sx @ Sy - Sy @ Sx, 1j * Sz, atol=1e-14)
        assert_allclose(Sy @ Sz - Sz @ Sy, 1j * Sx, atol=1e-14)
        assert_allclose(Sz @ Sx - Sx @ Sz, 1j * Sy, atol=1e-14)

        # Casimir
        S2 = Sx @ Sx + Sy @ Sy + Sz @ Sz
        assert_allclose(S2, S * (S + 1) * np.eye(ops.dim), atol=1e-13)

    def test_spin_half_ladders(self):
        from itebd.models.operators import SpinOperators

        ops = SpinOperators(0.5)
        up = np.array([1.0, 0.0])
        down = np.array([0.0, 1.0])

        assert_allclose(ops.Sp.data @ down, up)
        assert_allclose(ops.Sm.data @ up, down)
        assert_allclose(ops.Sp.data @ up, 0.0)
        assert_allclose(np.linalg.eigvalsh(ops.Sz.data), [-0.5, 0.5])

    def test_spin_one(self):
        from itebd.models.operators import SpinOperators

        ops = SpinOperators(1.0)

        assert ops.dim == 3
        assert_allclose(np.diag(ops.Sz.data), [1.0, 0.0, -1.0])
        assert_allclose(ops.Sp.data[0, 1], np.sqrt(2.0))

    def test_dtypes(self):
        """Only Sy is complex."""
        from itebd.models.operators import SpinOperators

        ops = SpinOperators(1.0)

        for name in ("Sx", "Sz", "S+", "S-", "I"):
            assert ops.get(name).dtype == np.float64
        assert np.iscomplexobj(ops.Sy.data)
        # Sy Sy is real
        assert ops.bond("Sy", "Sy").dtype == np.float64

    def test_invalid(self):
        from itebd.models.operators import SpinOperators, get_operator

        with pytest.raises(ValueError):
            SpinOperators(0.3)
        with pytest.raises(ValueError):
            SpinOperators(-0.5)
        with pytest.raises(ValueError):
            get_operator("Sw")

    def test_heisenberg_bond(self):
        """Singlet and triplet energies of S1 . S2 for two spins 1/2."""
        from itebd.models.operators import SpinOperators

        ops = SpinOperators(0.5)
        H = ops.heisenberg_bond().data

        assert H.dtype == np.float64
        assert_allclose(np.linalg.eigvalsh(H), [-0.75, 0.25, 0.25, 0.25], atol=1e-14)
        full = sum(ops.bond(a, a).data for a in ("Sx", "Sy", "Sz"))
        assert_allclose(H, full, atol=1e-14)

    def test_ising_bond(self):
        from itebd.models.operators import SpinOperators

        ops = SpinOperators(0.5)

        assert_allclose(np.diag(ops.ising_bond(J=4.0).data), [1.0, -1.0, -1.0, 1.0])


class TestHelpers:
    """Pauli matrices, lookups and projectors."""

    def test_pauli(self):
        from itebd.models.operators import pauli_matrices, get_operator

        P = pauli_matrices()
        X, Y, Z = P['X'].data, P['Y'].data, P['Z'].data

        for sigma in (X, Y, Z):
            assert_allclose(sigma @ sigma, np.eye(2))
        assert_allclose(X @ Y, 1j * Z)
        assert_allclose(2 * get_operator('Sx').data, X)

    def test_projector(self):
        from itebd.models.operators import projector

        v = np.array([1.0, 1j, 0.0])
        P = projector(v).data

        assert_allclose(P @ P, P, atol=1e-14)
        assert_allclose(P, P.conj().T)
        assert_allclose(np.trace(P), 1.0)
        assert_allclose(P @ v, v)

    def test_projector_two_site(self):
        from itebd.models.operators import projector

        a = np.array([1.0, 2.0])
        b = np.array([0.0, 1.0, 1.0])
        P = projector(np.kron(a, b)).data

        assert P.shape == (6, 6)
        assert_allclose(np.trace(P), 1.0)

    def test_projector_zero_vector(self):
        from itebd.models.operators import projector

        with pytest.raises(ValueError):
            projector(np.zeros(2))


class TestChainHamiltonians:
    """Tests for the spin-chain models."""

    @pytest.mark.parametrize("g", [0.0, 0.5, 1.0, 2.0])
    def test_ising_bond_hamiltonian(self, g):
        from itebd.models.spin_chain import TransverseFieldIsing, ChainParams

        model = TransverseFieldIsing(ChainParams(J=1.0, g=g))
        H = model.bond_hamiltonian().data
        X = np.array([[0.0, 1.0], [1.0, 0.0]])
        Z = np.diag([1.0, -1.0])
        expected = -np.kron(Z, Z) - 0.5 * g * (np.kron(X, np.eye(2)) + np.kron(np.eye(2), X))

        assert model.dim == 2
        assert H.dtype == np.float64
        assert_allclose(H, expected)

    def test_ising_exact_energy_limits(self):
        from itebd.models.spin_chain import TransverseFieldIsing, ChainParams

        assert_allclose(TransverseFieldIsing(ChainParams(J=1.0, g=0.0)).exact_energy_per_site(),
                        -1.0)
        assert_allclose(TransverseFieldIsing(ChainParams(J=0.0, g=2.0)).exact_energy_per_site(),
                        -2.0)
        # Critical point: -4 / pi
        assert_allclose(TransverseFieldIsing(ChainParams(J=1.0, g=1.0)).exact_energy_per_site(),
                        -4.0 / np.pi, rtol=1e-8)

    def test_ising_duality(self):
        """Kramers-Wannier duality: E(J, g) = E(g, J)."""
        from itebd.models.spin_chain import TransverseFieldIsing, ChainParams

        E1 = TransverseFieldIsing(ChainParams(J=1.0, g=1.5)).exact_energy_per_site()
        E2 = TransverseFieldIsing(ChainParams(J=1.5, g=1.0)).exact_energy_per_site()

        assert_allclose(E1, E2)

    def test_xxz_bond_hamiltonian(self):
        from itebd.models.spin_chain import XXZChain, ChainParams

        model = XXZChain(ChainParams(J=1.0, delta=0.5, h=0.3, S=1.0))
        H = model.bond_hamiltonian().data

        assert H.shape == (9, 9)
        assert H.dtype == np.float64
        assert_allclose(H, H.T)
        # Total Sz is conserved
        Sz = np.diag([1.0, 0.0, -1.0])
        Sz_tot = np.kron(Sz, np.eye(3)) + np.kron(np.eye(3), Sz)
        assert_allclose(H @ Sz_tot, Sz_tot @ H, atol=1e-14)

    def test_heisenberg(self):
        from itebd.models.spin_chain import HeisenbergChain

        spin_half = HeisenbergChain(J=2.0)
        spin_one = HeisenbergChain(S=1.0)

        assert_allclose(spin_half.exact_energy_per_site(), 2.0 * (0.25 - np.log(2.0)))
        assert spin_one.exact_energy_per_site() is None
        assert HeisenbergChain(J=-1.0).exact_energy_per_site() is None

    def test_time_evolution_operator(self):
        from itebd.models.spin_chain import TransverseFieldIsing, ChainParams

        model = TransverseFieldIsing(ChainParams(J=1.0, g=0.7))
        H = model.bond_hamiltonian().data
        w, v = np.linalg.eigh(H)

        U = model.get_time_evolution_operator(0.1).data

        assert_allclose(U, v @ np.diag(np.exp(-0.1 * w)) @ v.T, atol=1e-12)


class TestTimer:
    """Tests for the profiling timer."""

    def test_nested_regions(self):
        from itebd.tools.profiling import Timer

        timer = Timer()
        for _ in range(3):
            with timer.region("step"):
                with timer.region("gates"):
                    pass

        assert sorted(timer.stats) == ["step", "step/gates"]
        assert timer.get_stats("step/gates").call_count == 3
        assert timer.get_stats("step").total_time >= timer.get_stats("step/gates").total_time

    def test_time_function(self):
        from itebd.tools.profiling import Timer

        timer = Timer()

        @timer.time_function()
        def work(x):
            return 2 * x

        assert work(3) == 6
        assert timer.get_stats("work").call_count == 1

    def test_disabled(self):
        from itebd.tools.profiling import Timer

        timer = Timer(enabled=False)
        with timer.region("step"):
            pass

        assert timer.get_stats("step") is None
        assert timer.report() == "No timing data collected."

    def test_report(self):
        from itebd.tools.profiling import Timer

        timer = Timer()
        with timer.region("gates"):
            pass

        assert "gates" in timer.report(sort_by="calls")
        with pytest.raises(ValueError):
            timer.report(sort_by="colour")
        timer.reset()
        assert timer.get_stats("gates") is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

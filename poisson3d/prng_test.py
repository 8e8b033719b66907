import pytest

from poisson3d.prng import PCG32


class TestPCG32:
    def test_reference_values(self):
        """PCG32(seed=42, seq=54) matches C reference output."""
        rng = PCG32(seed=42, seq=54)
        expected = [
            0xA15C02B7,
            0x7B47F409,
            0xBA1D3330,
            0x83D2F293,
            0xBFA4784B,
        ]
        for exp in expected:
            assert rng.next_u32() == exp

    def test_next_float_range(self):
        rng = PCG32(seed=1)
        for _ in range(1000):
            f = rng.next_float()
            assert 0.0 <= f < 1.0

    def test_uniform_range(self):
        rng = PCG32(seed=2)
        for _ in range(1000):
            v = rng.uniform(-5.0, 5.0)
            assert -5.0 <= v < 5.0

    def test_uniform_degenerate_range(self):
        rng = PCG32(seed=2)
        assert rng.uniform(0.25, 0.25) == 0.25

    def test_next_index_range(self):
        rng = PCG32(seed=3)
        seen = set()
        for _ in range(1000):
            i = rng.next_index(7)
            assert 0 <= i < 7
            seen.add(i)
        assert seen == set(range(7))

    def test_next_index_empty_range(self):
        with pytest.raises(ValueError):
            PCG32(seed=3).next_index(0)

    def test_same_seed_same_stream(self):
        a = PCG32(seed=99)
        b = PCG32(seed=99)
        assert [a.next_u32() for _ in range(20)] == [
            b.next_u32() for _ in range(20)
        ]

    def test_seq_selects_a_distinct_stream(self):
        a = PCG32(seed=99, seq=0)
        b = PCG32(seed=99, seq=1)
        assert [a.next_u32() for _ in range(5)] != [
            b.next_u32() for _ in range(5)
        ]

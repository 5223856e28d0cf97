import pytest

from tandem.errors import InvalidConfiguration
from tandem.variates import VariateSource


def test_same_seed_same_stream():
    a, b = VariateSource(9), VariateSource(9)
    assert [a.exponential(2.0) for _ in range(5)] == [b.exponential(2.0) for _ in range(5)]


def test_samples_in_range():
    src = VariateSource(1)
    for _ in range(1000):
        assert src.exponential(0.5) >= 0.0
        u = src.uniform(2.0)
        assert 0.0 <= u < 2.0


def test_exponential_mean_is_close():
    src = VariateSource(42)
    n = 20000
    avg = sum(src.exponential(3.0) for _ in range(n)) / n
    assert avg == pytest.approx(3.0, rel=0.05)


def test_spawn_offsets_seed():
    src = VariateSource(10)
    child = src.spawn(3)
    assert child.seed == 13
    assert child.uniform(1.0) == VariateSource(13).uniform(1.0)


def test_bad_parameters():
    src = VariateSource(0)
    with pytest.raises(InvalidConfiguration):
        src.exponential(0.0)
    with pytest.raises(InvalidConfiguration):
        src.uniform(-1.0)

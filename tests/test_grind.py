import itertools

from xvutils.grind import ParkMiller, do_rand


def test_first_value_from_seed_one():
    assert do_rand(1) == 33613


def test_next_matches_do_rand():
    rng = ParkMiller(1)
    previous = 1
    for _ in range(20):
        value = rng.next()
        assert value == do_rand(previous)
        previous = value


def test_values_in_range():
    rng = ParkMiller(12345)
    for value in itertools.islice(rng, 1000):
        assert 0 <= value <= 0x7FFFFFFD


def test_iteration_is_deterministic():
    a = list(itertools.islice(ParkMiller(1 ^ 31), 10))
    b = ParkMiller(1 ^ 31)
    assert a == [b.next() for _ in range(10)]


def test_state_reduced_modulo():
    assert do_rand(0x7FFFFFFE) == do_rand(0)
    assert 0 <= do_rand(2**64 - 1) <= 0x7FFFFFFD


def test_seed_is_masked_to_64_bits():
    assert ParkMiller(2**64 + 5).state == ParkMiller(5).state
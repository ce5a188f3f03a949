"""Primality tests: exact range checked against a sieve, large values
checked against known Mersenne numbers."""

import pytest

from primality import TRIAL_DIVISION_LIMIT, is_prime, is_probable_prime, trial_division


def _sieve(limit):
    flags = [False, False] + [True] * (limit - 2)
    for i in range(2, int(limit ** 0.5) + 1):
        if flags[i]:
            flags[i * i::i] = [False] * len(flags[i * i::i])
    return flags


def test_small_values_match_sieve():
    flags = _sieve(20000)
    for n, expected in enumerate(flags):
        assert is_prime(n) == expected, n


@pytest.mark.parametrize("n, expected", [
    (0, False), (1, False), (2, True), (3, True), (4, False), (5, True),
    (13, True), (16, False), (17, True), (18, False), (19, True),
    (178417, True), (561, False), (1105, False), (3215031751, False),
    (4294967291, True),
])
def test_known_values(n, expected):
    assert is_prime(n) is expected


def test_square_of_prime_is_composite():
    assert not trial_division(65521 * 65521)
    assert not is_prime(65537 * 65537)


@pytest.mark.parametrize("n, expected", [
    (2 ** 61 - 1, True),
    (2 ** 67 - 1, False),
    (2 ** 89 - 1, True),
    (2 ** 127 - 1, True),
    ((2 ** 89 - 1) * (2 ** 107 - 1), False),
    (529830422160613455916930483453466154480529308265681626708, False),
])
def test_large_values(n, expected):
    assert n >= TRIAL_DIVISION_LIMIT
    assert is_prime(n) is expected


def test_probable_prime_agrees_with_trial_division_near_limit():
    for n in range(TRIAL_DIVISION_LIMIT - 201, TRIAL_DIVISION_LIMIT, 2):
        assert is_probable_prime(n) == trial_division(n), n


def test_huge_even_number_does_not_raise():
    assert is_prime(10 ** 5000) is False

"""Primality checks for non-negative integers of any size.

Below ``TRIAL_DIVISION_LIMIT`` the answer comes from trial division and is
exact. At or above it, trial division is too slow to run per request, so the
answer comes from ``sympy.isprime``: deterministic up to 2**64 and a strong
BPSW probable prime test beyond that, with no known false positives.
"""
import math

from sympy import isprime

TRIAL_DIVISION_LIMIT = 2 ** 32


def is_probable_prime(n: int) -> bool:
    return bool(isprime(n))


def trial_division(n: int) -> bool:
    return all(n % i for i in range(3, math.isqrt(n) + 1, 2))


def is_prime(n: int) -> bool:
    if n < 2:
        return False
    if n == 2:
        return True
    if n % 2 == 0:
        return False
    if n < TRIAL_DIVISION_LIMIT:
        return trial_division(n)
    return is_probable_prime(n)

"""
Secrets and computer guesses.

- generate_secret / pick_guess take an injectable random.Random so a game
  (and its tests) can be made deterministic with a seed.
- fetch_secret asks random.org for a shuffled 0..9 sequence and keeps the
  first four digits. If anything goes wrong (no internet, timeout, bad
  response), we fall back to the local generator so the game still works.
"""

import logging
import os
import random
from typing import Iterable, Optional

import requests

from .engine import DIGIT_COUNT, validate_number
from .types import Code

logger = logging.getLogger(__name__)

RANDOM_URL = "https://www.random.org/sequences/"

_default_rng = random.SystemRandom()


def generate_secret(rng: Optional[random.Random] = None) -> Code:
    """Draw digits uniformly until four different ones are collected."""
    rng = rng or _default_rng
    digits = []
    while len(digits) < DIGIT_COUNT:
        digit = str(rng.randrange(10))
        if digit not in digits:
            digits.append(digit)
    return "".join(digits)


def pick_guess(candidates: Iterable[Code], rng: Optional[random.Random] = None) -> Code:
    """
    Uniform pick from the remaining candidates.
    With nothing left we still return a legal code, but it is a blind
    guess, not a deduction.
    """
    rng = rng or _default_rng
    # sorted so a seeded rng gives the same pick regardless of set order
    pool = sorted(candidates)
    if not pool:
        return generate_secret(rng)
    return pool[rng.randrange(len(pool))]


def random_org_enabled() -> bool:
    return os.getenv("RANDOM_ORG_ENABLED", "true").strip().lower() in ("1", "true", "yes", "on")


def fetch_secret(rng: Optional[random.Random] = None) -> Code:
    if not random_org_enabled():
        return generate_secret(rng)

    # A full permutation of 0..9; its first four entries are a uniform
    # pick among the 5040 legal codes
    params = {
        "min": 0,
        "max": 9,
        "col": 1,
        "format": "plain",
        "rnd": "new",
    }

    # keep network quick; if it takes too long, we will just fallback
    timeout_seconds = 3.0

    try:
        response = requests.get(RANDOM_URL, params=params, timeout=timeout_seconds)
        response.raise_for_status()

        # The body looks like:
        #   7\n0\n3\n...
        values = [line.strip() for line in response.text.splitlines() if line.strip() != ""]
        if len(values) != 10:
            raise ValueError(f"random.org returned {len(values)} values, expected 10.")

        secret = "".join(values[:DIGIT_COUNT])
        valid, _ = validate_number(secret)
        if not valid:
            raise ValueError(f"random.org returned an unusable sequence: {values!r}")
        return secret

    except (requests.RequestException, ValueError) as exc:
        logger.warning("random.org unavailable, using local generator: %s", exc)
        return generate_secret(rng)

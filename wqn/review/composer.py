"""
Session Composer.

Turns an eligible problem list into the ordered id sequence of a session:
1. Shuffle (Fisher-Yates) when the set's session config asks for it
2. Truncate to session_size after shuffling, so a capped random session is a
   random subset rather than a prefix
"""
from __future__ import annotations

import random
from typing import Sequence, TypeVar

from loguru import logger

from wqn.review.errors import NoMatchingProblemsError
from wqn.review.models import ProblemRef, SessionConfig

T = TypeVar("T")


def fisher_yates_shuffle(items: Sequence[T], rng: random.Random) -> list[T]:
    """Return a uniformly shuffled copy of items."""
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = rng.randint(0, i)
        result[i], result[j] = result[j], result[i]
    return result


def compose(
    problems: Sequence[ProblemRef],
    config: SessionConfig,
    rng: random.Random | None = None,
    seed: int | None = None,
) -> list[str]:
    """
    Build the problem id sequence for a new session.

    Args:
        problems: Eligible problems in source order
        config: Session configuration
        rng: Random source (takes precedence over seed)
        seed: Seed for a fresh random source, for reproducible sessions

    Returns:
        Ordered problem ids

    Raises:
        NoMatchingProblemsError: The resulting sequence is empty
    """
    ordered = list(problems)

    if config.randomize:
        ordered = fisher_yates_shuffle(ordered, rng or random.Random(seed))

    if config.session_size is not None and len(ordered) > config.session_size:
        ordered = ordered[: config.session_size]

    if not ordered:
        raise NoMatchingProblemsError()

    logger.debug(
        f"Composed session of {len(ordered)}/{len(problems)} problems "
        f"(randomize={config.randomize}, size={config.session_size})"
    )
    return [p.id for p in ordered]

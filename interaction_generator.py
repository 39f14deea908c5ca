# ruff: noqa: E501
import logging
from collections.abc import Sequence

import numpy as np

from community_config import (
    DEFAULT_SEED,
    MAX_INTERACTION_WEIGHT,
    MIN_INTERACTION_WEIGHT,
    USERNAME_NUMBER_RANGE,
    USERNAME_PREFIXES,
    USERNAME_SUFFIXES,
)
from interaction_io import write_interaction_log

logger = logging.getLogger(__name__)

Interaction = tuple[str, str, int]


def make_rng(seed: int | None = DEFAULT_SEED) -> np.random.Generator:
    return np.random.default_rng(seed)


class UsernameGenerator:
    """Builds gamer-style usernames such as `shadowmage417`.

    Names are unique for the lifetime of the generator. A batch draws
    `count` candidates and drops any already used, so it can return fewer
    than `count` names.
    """

    def __init__(
        self,
        rng: np.random.Generator | None = None,
        prefixes: Sequence[str] = USERNAME_PREFIXES,
        suffixes: Sequence[str] = USERNAME_SUFFIXES,
    ) -> None:
        if not prefixes or not suffixes:
            raise ValueError("prefixes and suffixes must be non-empty")
        self.rng: np.random.Generator = rng if rng is not None else make_rng()
        self.prefixes: list[str] = list(prefixes)
        self.suffixes: list[str] = list(suffixes)
        self.used_names: set[str] = set()

    def generate_unique_batch(self, count: int) -> list[str]:
        if count < 0:
            raise ValueError(f"count must be non-negative, got {count}")
        prefix_idx = self.rng.integers(0, len(self.prefixes), size=count)
        suffix_idx = self.rng.integers(0, len(self.suffixes), size=count)
        numbers = self.rng.integers(*USERNAME_NUMBER_RANGE, size=count)

        names: list[str] = []
        for p, s, n in zip(prefix_idx, suffix_idx, numbers):
            name = f"{self.prefixes[p]}{self.suffixes[s]}{n}"
            if name in self.used_names:
                continue
            self.used_names.add(name)
            names.append(name)

        if len(names) < count:
            logger.warning(f"Dropped {count - len(names)} duplicate usernames out of {count} drawn.")
        return names


def generate_interactions(
    users: Sequence[str],
    num_interactions: int,
    rng: np.random.Generator | None = None,
) -> list[Interaction]:
    """Draws `num_interactions` random `(source, target, weight)` triples over `users`.

    Source and target are picked independently, so self-interactions occur.
    Weights are uniform in `[MIN_INTERACTION_WEIGHT, MAX_INTERACTION_WEIGHT]`.
    """
    if num_interactions < 0:
        raise ValueError(f"num_interactions must be non-negative, got {num_interactions}")
    if num_interactions and not users:
        raise ValueError("Cannot generate interactions without users")
    if num_interactions == 0:
        return []
    rng = rng if rng is not None else make_rng()

    sources = rng.integers(0, len(users), size=num_interactions)
    targets = rng.integers(0, len(users), size=num_interactions)
    weights = rng.integers(MIN_INTERACTION_WEIGHT, MAX_INTERACTION_WEIGHT + 1, size=num_interactions)
    return [
        (users[int(u)], users[int(v)], int(w)) for u, v, w in zip(sources, targets, weights)
    ]


def generate_interaction_log(
    num_users: int,
    num_interactions: int,
    file_path: str,
    rng: np.random.Generator | None = None,
) -> list[str]:
    """Generates users and interactions and writes them to `file_path`.

    Returns:
        The generated usernames.
    """
    rng = rng if rng is not None else make_rng()
    users = UsernameGenerator(rng).generate_unique_batch(num_users)
    interactions = generate_interactions(users, num_interactions, rng)
    write_interaction_log(interactions, file_path)
    logger.info(f"Generated {len(interactions)} interactions between {len(users)} users.")
    return users

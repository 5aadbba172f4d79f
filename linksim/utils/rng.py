from typing import List, Optional

import numpy as np


def spawn_generators(seed: Optional[int], count: int) -> List[np.random.Generator]:
    """
    Create independent random generators from one root seed.

    Each traffic source gets its own stream, so adding or removing a source
    does not shift the random numbers drawn by the others.

    Args:
        seed (int | None): Root seed. None draws fresh entropy from the OS.
        count (int): Number of generators to create.

    Returns:
        list[np.random.Generator]: One generator per child seed.
    """
    root = np.random.SeedSequence(seed)
    return [np.random.default_rng(child) for child in root.spawn(count)]


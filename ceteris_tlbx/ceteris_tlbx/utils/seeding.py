import random

import numpy as np


def set_global_rnd_seed(seed: int) -> None:
    """Seed Python's and NumPy's global generators (used when no ``random_state`` is given)."""
    random.seed(seed)
    np.random.seed(seed)

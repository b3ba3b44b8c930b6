from .logging_config import configure_logging
from .profile_config import DEFAULT_PROFILE_CFG, ProfileConfig
from .seeding import set_global_rnd_seed


__all__ = [
    "DEFAULT_PROFILE_CFG",
    "ProfileConfig",
    "configure_logging",
    "set_global_rnd_seed",
]

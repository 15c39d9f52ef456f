from .loader import load_config
from .models import HashfilesConfig, HashingConfig, VerifyConfig

__all__ = [
    "HashfilesConfig",
    "HashingConfig",
    "VerifyConfig",
    "load_config",
]

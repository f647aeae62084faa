"""Interactive keystone correction for projected output."""

from .config import KeystoneConfig, load_config  # noqa: F401
from .effect import HomographyEffect  # noqa: F401

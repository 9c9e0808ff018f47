"""Service blueprint and core utilities.

The bucket service implements the blueprint defined here. Import it to
type-hint your own code or to provide an alternative implementation.
"""

from .auth import Authorization, Capability
from .buckets import BucketBlueprint
from .config import B2Config, validate_config


__all__ = [
    "Authorization",
    "Capability",
    "BucketBlueprint",
    "B2Config",
    "validate_config",
]

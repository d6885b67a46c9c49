"""Error taxonomy for the random-feature prior basis.

All errors are raised synchronously at the offending call; nothing is coerced.
"""


class RandomFeaturesError(Exception):
    """Base class for every error raised by priorBasis."""


class InvalidArgument(RandomFeaturesError, ValueError):
    """Non-positive feature / sample / dimension counts or kernel parameters."""


class ShapeMismatch(RandomFeaturesError, ValueError):
    """Caller array does not match the declared input_dim / sample layout."""


class UnsupportedKernel(RandomFeaturesError, TypeError):
    """Kernel cannot be used for the requested evaluation mode."""


__all__ = ["RandomFeaturesError", "InvalidArgument", "ShapeMismatch", "UnsupportedKernel"]

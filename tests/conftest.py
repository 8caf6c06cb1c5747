"""setup the test-env"""

from . import fixtures

# noinspection PyUnresolvedReferences
from .fixtures import (
    client,
    registries,
    saved_variables,
    saved_variables_path,
)

__all__ = fixtures.__all__

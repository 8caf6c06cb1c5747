"""source pool for the tests"""

# NOTE: help pylint and import `__all__` explicit
# pylint: disable=wildcard-import
from .utils import *
from .utils import __all__ as all_utils
from .constants import *
from .constants import __all__ as all_constants


__all__ = (
    all_constants
    + all_utils
)

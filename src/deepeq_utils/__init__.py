"""Deep structural equality for assertions, with pluggable custom testers."""

from .pythonutils import *
from .pythonutils import __all__

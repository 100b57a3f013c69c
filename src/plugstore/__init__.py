"""plugstore package"""

from .base import ABSENT
from .store import SimpleStore

# Re-export the plugins subpackage so dotted paths like 'plugstore.plugins.*'
# work with tooling that traverses attributes instead of using importlib.
from . import plugins as plugins

__all__ = ["ABSENT", "SimpleStore", "plugins"]

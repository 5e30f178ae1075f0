"""Layered decision diagrams with linear equations as levels."""
try:
    from ._version import version as __version__
except ImportError:
    __version__ = None
from lindd import bdd as _bdd
from lindd import system as _system
BDD = _bdd.BDD
System = _system.System

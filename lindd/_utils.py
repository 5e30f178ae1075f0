"""Convenience functions."""
# Copyright 2017-2018 by California Institute of Technology
# All rights reserved. Licensed under 3-clause BSD.
#
import collections.abc as _abc
import types

try:
    import networkx as _nx
except ImportError as error:
    _nx = None
    _nx_error = error
try:
    import pydot as _pydot
except ImportError as error:
    _pydot = None
    _pydot_error = error


def import_module(
        module_name:
            str
        ) -> types.ModuleType:
    """Return module with `module_name`, if present.

    Raise `ImportError` otherwise.
    """
    modules = dict(
        networkx=_nx,
        pydot=_pydot)
    if modules[module_name] is not None:
        return modules[module_name]
    errors = dict(
        networkx=_nx_error,
        pydot=_pydot_error)
    raise errors[module_name]


def format_sum(
        lhs:
            _abc.Sequence[int]
        ) -> str:
    """Return the equation `lhs` as `x1 + x4`.

    An empty `lhs` is the constant `0`.
    """
    if not lhs:
        return '0'
    return ' + '.join(f'x{i}' for i in lhs)

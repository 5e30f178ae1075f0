"""Specifications of diagrams, as read from `.bdd` files.

The classes in this module are an intermediate form between the text
of a `.bdd` file and the diagrams of `lindd.bdd`.
They hold the integers that appear in the file, with no checks.
In particular, edges are plain integers, and the integer 0 means that
an edge is absent.
"""
# Copyright 2014 by California Institute of Technology
# All rights reserved. Licensed under BSD-3.
#
import copy
import logging
import typing as _ty


logger = logging.getLogger(__name__)


Id: _ty.TypeAlias = int
# edge value that means "no edge"
NO_EDGE: _ty.Final = 0
# entry of `LevelSpec.lhs` that marks a negated equation
SIGN: _ty.Final = -1


class NodeSpec:
    """Node of a level, with edges as integers."""

    def __init__(
            self,
            id:
                Id,
            e0:
                Id,
            e1:
                Id
            ) -> None:
        self.id = id
        self.e0 = e0
        self.e1 = e1

    def __repr__(
            self
            ) -> str:
        return f'NodeSpec({self.id}, {self.e0}, {self.e1})'

    def __eq__(
            self,
            other
            ) -> bool:
        if not isinstance(other, NodeSpec):
            return NotImplemented
        return (
            (self.id, self.e0, self.e1) ==
            (other.id, other.e0, other.e1))

    def flip_edge(
            self
            ) -> None:
        """Swap `e0` and `e1`."""
        self.e0, self.e1 = self.e1, self.e0


class LevelSpec:
    """Level of a diagram.

    Attributes:
      - `lhs`: `list` of `int`, the variable indices
        whose sum (XOR) labels the level.
        For example, `[1, 2, 4]` means `x1 + x2 + x4`.
        The value `-1` can appear, and marks
        a negation of the equation.
      - `rhs`: `list` of `NodeSpec`
    """

    def __init__(
            self,
            lhs:
                list[int],
            rhs:
                list[NodeSpec]
            ) -> None:
        self.lhs = lhs
        self.rhs = rhs

    def __repr__(
            self
            ) -> str:
        return f'LevelSpec({self.lhs}, {self.rhs})'

    def remove_minus_one(
            self
            ) -> int:
        """Remove each `-1` from `lhs`.

        If an odd number of `-1` was removed,
        then flip the edges of all nodes in `rhs`.

        @return:
            number of `-1` removed
        """
        n = self.lhs.count(SIGN)
        self.lhs = [i for i in self.lhs if i != SIGN]
        if n % 2 != 0:
            self.flip_nodes_edges()
        return n

    def flip_nodes_edges(
            self
            ) -> None:
        """Call `flip_edge()` on each node of `rhs`."""
        for node in self.rhs:
            node.flip_edge()


class DiagramSpec:
    """Diagram, as an identifier and a sequence of levels."""

    def __init__(
            self,
            id:
                Id,
            levels:
                list[LevelSpec]
            ) -> None:
        self.id = id
        self.levels = levels

    def __repr__(
            self
            ) -> str:
        return f'DiagramSpec({self.id}, {self.levels})'


class SystemSpec:
    """Diagrams over `nvar` variables."""

    def __init__(
            self,
            nvar:
                int,
            diagrams:
                list[DiagramSpec]
            ) -> None:
        self.nvar = nvar
        self.diagrams = diagrams

    def __repr__(
            self
            ) -> str:
        return f'SystemSpec({self.nvar}, {self.diagrams})'


def normalize(
        spec:
            SystemSpec
        ) -> SystemSpec:
    """Return copy of `spec` with no `-1` in any `lhs`.

    The edges of each level with an odd number
    of `-1` are flipped.
    The given `spec` is not modified.
    """
    spec = copy.deepcopy(spec)
    for diagram in spec.diagrams:
        for i, level in enumerate(diagram.levels):
            n = level.remove_minus_one()
            if n:
                logger.debug(
                    f'diagram {diagram.id}, level {i}: '
                    f'removed {n} sign entries')
    return spec

"""Layered decision diagrams with linear equations as levels.

Each level of a diagram is labeled with a linear Boolean equation,
the sum (XOR) of some of the variables `x1, ..., xn`.
Nodes are non-negative integers, unique within a diagram.
Each node has two optional edges, `e0` and `e1`,
to nodes at lower levels.
The last node of the last level is the terminal node.

These diagrams describe the differential behavior
of cipher components, and are consumed by
differential path search.
"""
# Copyright 2014 by California Institute of Technology
# All rights reserved. Licensed under BSD-3.
#
import collections.abc as _abc
import logging
import os
import shutil
import subprocess
import typing as _ty

import lindd._utils as _utils


if _ty.TYPE_CHECKING:
    import networkx
    import pydot


logger = logging.getLogger(__name__)
DOT_PROGRAM: _ty.Final = 'dot'
# name of the placeholder node for the terminal rank
CONST_NODES: _ty.Final = '"CONST NODES"'


_Node: _ty.TypeAlias = int
_Edge: _ty.TypeAlias = _Node | None


class Node:
    """Outgoing edges of a node."""

    def __init__(
            self,
            e0:
                _Edge=None,
            e1:
                _Edge=None
            ) -> None:
        self.e0 = e0
        self.e1 = e1

    def __repr__(
            self
            ) -> str:
        return f'Node({self.e0}, {self.e1})'

    def edge(
            self,
            slot:
                int
            ) -> _Edge:
        if slot == 0:
            return self.e0
        if slot == 1:
            return self.e1
        raise ValueError(slot)

    def set_edge(
            self,
            slot:
                int,
            target:
                _Edge
            ) -> None:
        if slot == 0:
            self.e0 = target
        elif slot == 1:
            self.e1 = target
        else:
            raise ValueError(slot)


class Level:
    """Equation and nodes of one level.

    Attributes:
      - `lhs`: `tuple` of variable indices, increasing
      - `nodes`: `dict` that maps each node to its `Node`,
        in the order the nodes were added
    """

    def __init__(
            self
            ) -> None:
        self.lhs: tuple[int, ...] = tuple()
        self.nodes: dict[_Node, Node] = dict()

    def __len__(
            self
            ) -> int:
        return len(self.nodes)

    def __iter__(
            self
            ) -> _abc.Iterator[_Node]:
        return iter(self.nodes)


class BDD:
    """Layered diagram with equations as levels.

    Attributes:
      - `id`: identifier of the diagram within a `System`
      - `nvar`: number of variables
      - `levels`: `list` of `Level`
      - `next_id`: node that `allocate()` returns next

    Levels are created empty with `add_level()`,
    then filled with `set_lhs_level()` and
    `add_nodes_to_level()`, and the nodes are
    connected with `connect()`.
    """

    def __init__(
            self,
            nvar:
                int=0,
            id:
                int=0
            ) -> None:
        self.id = id
        self.nvar = nvar
        self.levels: list[Level] = list()
        self.next_id: int = 1
        # node -> index of its level
        self._level_of: dict[_Node, int] = dict()

    def __len__(
            self
            ) -> int:
        """Return number of nodes."""
        return len(self._level_of)

    def __contains__(
            self,
            u:
                _Node
            ) -> bool:
        return u in self._level_of

    def __iter__(
            self
            ) -> _abc.Iterator[_Node]:
        return iter(self._level_of)

    def __str__(
            self
            ) -> str:
        return (
            'Layered decision diagram:\n'
            '-------------------------\n'
            f'id: {self.id}\n'
            f'variables: {self.nvar}\n'
            f'levels: {len(self.levels)}\n'
            f'nodes: {len(self)}\n')

    def add_level(
            self
            ) -> int:
        """Append an empty level, return its index."""
        self.levels.append(Level())
        return len(self.levels) - 1

    def set_lhs_level(
            self,
            i:
                int,
            lhs:
                _abc.Iterable[int]
            ) -> None:
        """Label level `i` with the sum of variables `lhs`.

        Repeated variables are kept once.
        """
        lhs = set(lhs)
        for var in lhs:
            if not (0 <= var <= self.nvar):
                raise ValueError(
                    f'variable index {var} at level {i} '
                    f'of diagram {self.id} is not in '
                    f'the range 0..{self.nvar}')
        self.levels[i].lhs = tuple(sorted(lhs))

    def add_nodes_to_level(
            self,
            i:
                int,
            nodes:
                _abc.Iterable[_Node]
            ) -> None:
        """Add `nodes` with no edges to level `i`."""
        level = self.levels[i]
        for u in nodes:
            if u in self._level_of:
                raise AssertionError(
                    f'node {u} at level {i} of diagram {self.id} '
                    'is already declared at level '
                    f'{self._level_of[u]}')
            level.nodes[u] = Node()
            self._level_of[u] = i

    def level_of(
            self,
            u:
                _Node
            ) -> int:
        """Return index of the level of node `u`."""
        return self._level_of[u]

    def succ(
            self,
            u:
                _Node
            ) -> tuple[int, _Edge, _Edge]:
        """Return level, `e0`, `e1` of node `u`."""
        i = self._level_of[u]
        node = self.levels[i].nodes[u]
        return i, node.e0, node.e1

    def connect(
            self,
            u:
                _Node,
            v:
                _Node,
            slot:
                int
            ) -> None:
        """Set edge `slot` of node `u` to node `v`."""
        if u not in self._level_of:
            raise AssertionError(
                f'node {u} is not declared '
                f'in diagram {self.id}')
        i = self._level_of[u]
        if v not in self._level_of:
            raise AssertionError(
                f'node {u} at level {i} of diagram {self.id} '
                f'has edge {slot} to node {v}, '
                'which is not declared')
        self.levels[i].nodes[u].set_edge(slot, v)

    def allocate(
            self
            ) -> _Node:
        """Return a fresh node, increment `next_id`."""
        u = self.next_id
        self.next_id += 1
        return u

    def add_same_edges_node_at_level(
            self,
            depth:
                int
            ) -> dict[_Node, _Node]:
        """Remove edges that jump over level `depth`.

        An edge from a level above `depth` to a level
        below `depth` is redirected to a new node at
        level `depth`, with both edges to the original
        target. Edges to the same target share the
        new node.

        @return:
            `dict` that maps each target to
            the node added at level `depth`
        """
        bridges = dict()
        level = self.levels[depth]
        for upper in self.levels[:depth]:
            for node in upper.nodes.values():
                for slot in (0, 1):
                    v = node.edge(slot)
                    if v is None:
                        continue
                    if self._level_of[v] <= depth:
                        continue
                    w = bridges.get(v)
                    if w is None:
                        w = self.allocate()
                        level.nodes[w] = Node(v, v)
                        self._level_of[w] = depth
                        bridges[v] = w
                    node.set_edge(slot, w)
        if bridges:
            logger.debug(
                f'diagram {self.id}: added {len(bridges)} '
                f'nodes at level {depth}')
        return bridges

    def terminal(
            self
            ) -> _Node:
        """Return the last node of the last level."""
        if not self.levels or not self.levels[-1].nodes:
            raise ValueError(
                f'diagram {self.id} has no terminal node')
        *_, u = self.levels[-1].nodes
        return u

    def assert_consistent(
            self
            ) -> bool:
        """Raise `AssertionError` if not a well-formed diagram."""
        seen = set()
        for i, level in enumerate(self.levels):
            for var in level.lhs:
                if not (0 <= var <= self.nvar):
                    raise AssertionError((i, var, self.nvar))
            for u, node in level.nodes.items():
                if u in seen:
                    raise AssertionError(u)
                seen.add(u)
                if self._level_of.get(u) != i:
                    raise AssertionError((u, i))
                if u >= self.next_id:
                    raise AssertionError((u, self.next_id))
                for v in (node.e0, node.e1):
                    if v is None:
                        continue
                    if v not in self._level_of:
                        raise AssertionError((u, v))
        if seen != set(self._level_of):
            raise AssertionError(
                set(self._level_of).symmetric_difference(seen))
        return True


def to_nx(
        bdd:
            BDD
        ) -> 'networkx.MultiDiGraph':
    """Convert `bdd` to `networkx.MultiDiGraph`.

    The resulting graph has:

      - nodes labeled with:
        - `level`: index of the level of the node
      - edges labeled with:
        - `value`: `False` for `e0`, `True` for `e1`
    """
    nx = _utils.import_module('networkx')
    g = nx.MultiDiGraph()
    for i, level in enumerate(bdd.levels):
        for u in level.nodes:
            g.add_node(u, level=i)
    for level in bdd.levels:
        for u, node in level.nodes.items():
            if node.e0 is not None:
                g.add_edge(u, node.e0, value=False)
            if node.e1 is not None:
                g.add_edge(u, node.e1, value=True)
    return g


def to_pydot(
        bdd:
            BDD
        ) -> 'pydot.Dot':
    """Convert `bdd` to pydot graph.

    Levels are ranks, labeled by their equations.
    The last level is drawn as a single rank
    that contains only the terminal node,
    which is drawn as a box labeled `T`.
    Edges `e0` are dashed, edges `e1` solid.
    """
    pydot = _utils.import_module('pydot')
    terminal = bdd.terminal()
    n = len(bdd.levels)
    # the last level is drawn as the terminal rank
    drawn = bdd.levels[:n - 1] if n > 1 else bdd.levels
    g = pydot.Dot('DD', graph_type='digraph', center='true')
    g.set_edge_defaults(dir='none')
    # column of equations
    skeleton = [
        f'"{i}. {_utils.format_sum(level.lhs)}"'
        for i, level in enumerate(drawn)]
    h = pydot.Subgraph('')
    h.set_node_defaults(shape='plaintext')
    h.set_edge_defaults(style='invis')
    g.add_subgraph(h)
    h.add_node(pydot.Node(CONST_NODES, style='invis'))
    for u in skeleton:
        h.add_node(pydot.Node(u))
    skeleton.append(CONST_NODES)
    for u, v in zip(skeleton, skeleton[1:]):
        h.add_edge(pydot.Edge(u, v, style='invis'))
    # ranks
    for name, level in zip(skeleton, drawn):
        h = pydot.Subgraph('', rank='same')
        g.add_subgraph(h)
        h.add_node(pydot.Node(name))
        for u in level.nodes:
            # the terminal node is drawn in the terminal rank
            if u == terminal and level is bdd.levels[-1]:
                continue
            nd = pydot.Node(
                str(u), label='""',
                shape='point', width='0.06')
            h.add_node(nd)
    h = pydot.Subgraph('', rank='same')
    g.add_subgraph(h)
    h.add_node(pydot.Node(CONST_NODES))
    h.add_node(pydot.Node(str(terminal), shape='box', label='T'))
    # edges
    for level in bdd.levels:
        for u, node in level.nodes.items():
            su = str(u)
            if node.e0 is not None:
                e = pydot.Edge(su, str(node.e0), style='dashed')
                g.add_edge(e)
            if node.e1 is not None:
                g.add_edge(pydot.Edge(su, str(node.e1)))
    return g


def to_dot(
        bdd:
            BDD
        ) -> str:
    """Return `dot` language representation of `bdd`."""
    return to_pydot(bdd).to_string()


def dump_dot(
        bdd:
            BDD,
        filename:
            str |
            os.PathLike
        ) -> None:
    """Write `dot` language representation of `bdd` to `filename`."""
    s = to_dot(bdd)
    with open(filename, 'w') as f:
        f.write(s)


def draw_pdf(
        bdd:
            BDD,
        filename:
            str |
            os.PathLike,
        program:
            str=DOT_PROGRAM
        ) -> subprocess.Popen:
    """Start drawing `bdd` as PDF with GraphViz.

    The extension of `filename` is replaced by `.pdf`.
    Requires that `program` be found in `PATH`.

    Returns the `dot` process, which may still be
    writing the file. Call `wait()` on it before
    reading the file.
    """
    path = shutil.which(program)
    if path is None:
        raise FileNotFoundError(
            f'cannot find `{program}` in `PATH`, '
            'is GraphViz installed?')
    s = to_dot(bdd)
    root, _ = os.path.splitext(os.fspath(filename))
    pdf = f'{root}.pdf'
    logger.info(f'drawing diagram {bdd.id} to "{pdf}"')
    proc = subprocess.Popen(
        [path, '-Tpdf', f'-o{pdf}'],
        stdin=subprocess.PIPE,
        text=True)
    with proc.stdin as f:
        f.write(s)
    return proc

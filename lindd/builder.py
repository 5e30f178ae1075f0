"""Build diagrams from specifications."""
# Copyright 2014 by California Institute of Technology
# All rights reserved. Licensed under BSD-3.
#
import logging

import lindd.bdd as _bdd
import lindd.spec as _spec
import lindd.system as _system


logger = logging.getLogger(__name__)


def build_system_from_spec(
        spec:
            _spec.SystemSpec
        ) -> _system.System:
    """Return `System` of the diagrams in `spec`.

    If the diagram identifiers in `spec` are not unique,
    then every diagram is identified by its position in `spec`.
    The given `spec` is not modified.
    """
    spec = _spec.normalize(spec)
    system = _system.System()
    system.set_nvar(spec.nvar)
    ids = {diagram.id for diagram in spec.diagrams}
    reindex = len(ids) != len(spec.diagrams)
    if reindex:
        logger.info(
            'diagram identifiers are not unique, '
            'so diagrams are identified by position')
    for i, diagram in enumerate(spec.diagrams):
        if reindex:
            diagram.id = i
        bdd = build_bdd_from_spec(diagram, spec.nvar)
        # same `nvar`, unique ids
        system.push(bdd)
    return system


def build_bdd_from_spec(
        spec:
            _spec.DiagramSpec,
        nvar:
            int
        ) -> _bdd.BDD:
    """Return `BDD` described by `spec`, over `nvar` variables.

    The levels of `spec` must contain no `-1`
    (see `lindd.spec.normalize`).

    Levels are created first, with unconnected nodes,
    then nodes are connected following `e0` and `e1`.
    The value 0 means no edge.
    Finally, edges that jump over levels are replaced
    by new nodes, for each level from the second
    to the third from last.
    """
    bdd = _bdd.BDD(nvar=nvar, id=spec.id)
    max_id = max(
        (node.id
            for level in spec.levels
            for node in level.rhs),
        default=0)
    for level in spec.levels:
        if _spec.SIGN in level.lhs:
            raise AssertionError(
                f'diagram {spec.id}: level with '
                f'sign entries: {level.lhs}')
        i = bdd.add_level()
        bdd.set_lhs_level(i, level.lhs)
        bdd.add_nodes_to_level(
            i, (node.id for node in level.rhs))
    bdd.next_id = max_id + 1
    for level in spec.levels:
        for node in level.rhs:
            if node.e0 != _spec.NO_EDGE:
                bdd.connect(node.id, node.e0, 0)
            if node.e1 != _spec.NO_EDGE:
                bdd.connect(node.id, node.e1, 1)
    n = len(spec.levels)
    if n > 2:
        for depth in range(1, n - 2):
            bdd.add_same_edges_node_at_level(depth)
    logger.debug(
        f'built diagram {bdd.id}: {n} levels, '
        f'{len(bdd)} nodes')
    return bdd

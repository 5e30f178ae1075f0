"""Tests of the module `lindd.bddfile`."""
import logging

import lindd.bdd
from lindd.bddfile import (
    PARSER_LOG, Lexer, Parser, dump, dumps, load, loads, parse,
    parse_file, _rewrite_tables)
from lindd.spec import NodeSpec
import pytest


logging.getLogger('lindd.bddfile.parser_logger').setLevel(logging.ERROR)


SAMPLE = (
    '2 1\n'
    '0 2\n'
    '1+2:(0;0,0)(1;0,0)|\n'
    '-1:(2;0,0)|\n'
    '---\n')
SYSTEM = (
    '3 2\n'
    '5 3\n'
    '1+3:(1;2,3)|\n'
    '2:(2;4,0)(3;0,4)|\n'
    ':(4;0,0)|\n'
    '---\n'
    '7 2\n'
    '-1+2:(1;2,0)|\n'
    '3:(2;0,0)|\n'
    '---\n')
JUMPING = (
    '1 1\n'
    '0 4\n'
    '1:(1;2,4)|\n'
    '1:(2;3,3)|\n'
    '1:(3;4,4)|\n'
    ':(4;0,0)|\n'
    '---\n')


def test_lexer():
    lexer = Lexer()
    lexer.lexer.input('1+-1:(2;3,4)|\n---')
    types = [tok.type for tok in lexer.lexer]
    types_ = [
        'NUMBER', 'PLUS', 'MINUS', 'NUMBER', 'COLON',
        'LPAREN', 'NUMBER', 'SEMICOLON', 'NUMBER',
        'COMMA', 'NUMBER', 'RPAREN', 'BAR', 'SEPARATOR']
    assert types == types_, types
    lexer.lexer.input('1 x')
    tok = lexer.lexer.token()
    assert tok.value == '1', tok
    with pytest.raises(ValueError):
        lexer.lexer.token()


def test_parser():
    parser = Parser()
    with pytest.raises(ValueError):
        parser.parse('2 1\n0 1\n1:(1;0,0)\n---\n')
    with pytest.raises(ValueError):
        parser.parse('')
    with pytest.raises(ValueError):
        parser.parse('2 1\n0 1\n1:(1;0)|\n---\n')
    with pytest.raises(ValueError):
        parser.parse('2 1\n0 1\n1:(1;0,0)|\n')
    with pytest.raises(ValueError):
        parser.parse('2 1\n0 1\na:(1;0,0)|\n---\n')
    # the parser is reusable after errors
    spec = parser.parse(SAMPLE)
    assert spec.nvar == 2, spec.nvar


def test_parser_logger(caplog):
    caplog.set_level(logging.DEBUG, logger=PARSER_LOG)
    spec = Parser().parse(SAMPLE)
    assert spec.nvar == 2, spec.nvar
    names = {r.name for r in caplog.records}
    assert PARSER_LOG in names, names


def test_parse_sample():
    spec = parse(SAMPLE)
    assert spec.nvar == 2, spec.nvar
    assert len(spec.diagrams) == 1, spec.diagrams
    diagram, = spec.diagrams
    assert diagram.id == 0, diagram.id
    assert len(diagram.levels) == 2, diagram.levels
    level, other = diagram.levels
    assert level.lhs == [1, 2], level.lhs
    rhs = [NodeSpec(0, 0, 0), NodeSpec(1, 0, 0)]
    assert level.rhs == rhs, level.rhs
    assert other.lhs == [-1], other.lhs
    assert other.rhs == [NodeSpec(2, 0, 0)], other.rhs
    other.remove_minus_one()
    assert other.lhs == [], other.lhs
    assert other.rhs == [NodeSpec(2, 0, 0)], other.rhs


def test_parse_blanks_and_line_breaks():
    s = (
        '2 1\r\n'
        '0 1\r\n'
        ' 1 + 2\t: (1 ; 0 , 0) |\r\n'
        '---\r\n')
    spec = parse(s)
    level, = spec.diagrams[0].levels
    assert level.lhs == [1, 2], level.lhs
    assert level.rhs == [NodeSpec(1, 0, 0)], level.rhs
    # line breaks are optional
    spec = parse('2 1 0 1 1+2:(1;0,0)|---')
    level, = spec.diagrams[0].levels
    assert level.lhs == [1, 2], level.lhs
    # leading plus, and plus before sign
    spec = parse('2 1\n3 1\n+1+-1 2:|\n---\n')
    diagram, = spec.diagrams
    assert diagram.id == 3, diagram.id
    level, = diagram.levels
    assert level.lhs == [1, -1, 2], level.lhs
    assert level.rhs == [], level.rhs


def test_parse_counts_not_checked():
    s = (
        '4 9\n'
        '1 5\n'
        ':(1;0,0)|\n'
        '---\n')
    spec = parse(s)
    assert spec.nvar == 4, spec.nvar
    assert len(spec.diagrams) == 1, spec.diagrams
    assert len(spec.diagrams[0].levels) == 1
    # no diagrams
    spec = parse('3 0\n')
    assert spec.nvar == 3, spec.nvar
    assert spec.diagrams == [], spec.diagrams
    # diagram with no levels
    spec = parse('3 1\n2 0\n---\n')
    diagram, = spec.diagrams
    assert diagram.levels == [], diagram.levels


def test_loads_sample():
    system = loads(SAMPLE)
    assert system.nvar == 2, system.nvar
    assert list(system) == [0], list(system)
    with system.get(0).read() as bdd:
        assert len(bdd.levels) == 2, bdd.levels
        level, other = bdd.levels
        assert level.lhs == (1, 2), level.lhs
        assert set(level.nodes) == {0, 1}, level.nodes
        assert other.lhs == tuple(), other.lhs
        assert set(other.nodes) == {2}, other.nodes
        for u in bdd:
            _, v, w = bdd.succ(u)
            assert v is None, v
            assert w is None, w
        assert bdd.next_id == 3, bdd.next_id


def test_dumps():
    system = loads(SYSTEM)
    s = dumps(system)
    s_ = (
        '3 2\n'
        '5 3\n'
        '1+3:(1;2,3)|\n'
        '2:(2;4,0)(3;0,4)|\n'
        ':(4;0,0)|\n'
        '---\n'
        '7 2\n'
        '2:(1;0,2)|\n'
        '3:(2;0,0)|\n'
        '---\n')
    assert s == s_, s
    # variables are written in increasing order, once
    system = loads('3 1\n0 1\n3+1+3:(1;0,0)|\n---\n')
    s = dumps(system)
    assert s == '3 1\n0 1\n1+3:(1;0,0)|\n---\n', s


def test_dumps_increasing_ids():
    s = (
        '1 2\n'
        '9 1\n'
        ':(1;0,0)|\n'
        '---\n'
        '2 1\n'
        '1:(1;0,0)|\n'
        '---\n')
    system = loads(s)
    r = dumps(system)
    r_ = (
        '1 2\n'
        '2 1\n'
        '1:(1;0,0)|\n'
        '---\n'
        '9 1\n'
        ':(1;0,0)|\n'
        '---\n')
    assert r == r_, r


@pytest.mark.parametrize('text', [SAMPLE, SYSTEM, JUMPING])
def test_dumps_then_loads(text):
    system = loads(text)
    other = loads(dumps(system))
    assert system.nvar == other.nvar
    assert list(system) == list(other)
    for id, shared in system.items():
        with shared.read() as bdd, other.get(id).read() as bdd_:
            assert len(bdd.levels) == len(bdd_.levels)
            for level, level_ in zip(bdd.levels, bdd_.levels):
                assert level.lhs == level_.lhs
                assert set(level.nodes) == set(level_.nodes)
            g = lindd.bdd.to_nx(bdd)
            h = lindd.bdd.to_nx(bdd_)
            nodes = sorted(g.nodes(data='level'))
            nodes_ = sorted(h.nodes(data='level'))
            assert nodes == nodes_, (nodes, nodes_)
            edges = sorted(g.edges(data='value'))
            edges_ = sorted(h.edges(data='value'))
            assert edges == edges_, (edges, edges_)


def test_dump_load(tmp_path):
    fname = tmp_path / 'system.bdd'
    system = loads(SYSTEM)
    dump(system, fname)
    spec = parse_file(fname)
    assert spec.nvar == 3, spec.nvar
    ids = [diagram.id for diagram in spec.diagrams]
    assert ids == [5, 7], ids
    other = load(fname)
    assert dumps(other) == dumps(system)
    with pytest.raises(OSError):
        load(tmp_path / 'missing.bdd')


def test_rewrite_tables(tmp_path):
    _rewrite_tables(outputdir=str(tmp_path))
    assert (tmp_path / 'bddfile_parsetab.py').is_file()


if __name__ == '__main__':
    test_parse_sample()

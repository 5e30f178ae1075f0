"""Parser and writer for the `.bdd` text format.

A `.bdd` file describes a system of diagrams.
The first line contains the number of variables and
the number of diagrams. Each diagram starts with a line
that contains its identifier and number of levels,
continues with one line per level, and ends with `---`.
For example:

```
2 1
0 2
1+2:(1;3,2)(2;0,3)|
-1:(3;0,0)|
---
```

Each level line contains the indices of the variables
whose sum (XOR) labels the level, separated by `+`,
then `:`, then the nodes of the level as
`(node;e0,e1)`, then `|`. An edge equal to 0 is absent.
The index `-1` negates the equation of the level,
which amounts to swapping the edges of its nodes.

The numbers of diagrams and levels given in the file
are informative, they are not checked.
"""
# Copyright 2014 by California Institute of Technology
# All rights reserved. Licensed under BSD-3.
#
import collections.abc as _abc
import logging
import os
import typing as _ty

import astutils
import ply.lex
import ply.yacc

import lindd.bdd as _bdd
import lindd.builder as _builder
import lindd.spec as _spec
import lindd.system as _system


logger = logging.getLogger(__name__)
TABMODULE: _ty.Final = 'lindd.bddfile_parsetab'
LEX_LOG: _ty.Final = 'lindd.bddfile.lex_logger'
YACC_LOG: _ty.Final = 'lindd.bddfile.yacc_logger'
PARSER_LOG: _ty.Final = 'lindd.bddfile.parser_logger'


class Lexer:
    """Token rules to build `.bdd` lexer."""

    tokens = [
        'NUMBER',
        'PLUS',
        'MINUS',
        'COLON',
        'BAR',
        'LPAREN',
        'RPAREN',
        'SEMICOLON',
        'COMMA',
        'SEPARATOR']
    # token rules
    t_NUMBER = r'\d+'
    t_PLUS = r'\+'
    t_MINUS = r'-'
    t_COLON = r':'
    t_BAR = r'\|'
    t_LPAREN = r'\('
    t_RPAREN = r'\)'
    t_SEMICOLON = r';'
    t_COMMA = r','
    t_ignore = ' \t\r'

    def __init__(self, debug=False):
        self.build(debug=debug)

    def t_SEPARATOR(self, t):
        r'---'
        return t

    def t_newline(self, t):
        r'\n+'
        t.lexer.lineno += t.value.count('\n')

    def t_error(self, t):
        raise ValueError(
            f'Illegal character "{t.value[0]}" '
            f'at line {t.lexer.lineno}')

    def build(self, debug=False, debuglog=None, **kwargs):
        """Create a lexer.

        @param kwargs: Same arguments as `ply.lex.lex`:

          - except for `module` (fixed to `self`)
          - `debuglog` defaults to the logger `LEX_LOG`.
        """
        if debug and debuglog is None:
            debuglog = logging.getLogger(LEX_LOG)
        self.lexer = ply.lex.lex(
            module=self,
            debug=debug,
            debuglog=debuglog,
            **kwargs)


class Parser:
    """Production rules to build `.bdd` parser."""

    tabmodule = TABMODULE

    def __init__(self):
        self.lexer = Lexer()
        self.tokens = self.lexer.tokens
        self.build()

    def build(self,
              tabmodule=None,
              outputdir=None,
              write_tables=False,
              debug=False,
              debuglog=None):
        if tabmodule is None:
            tabmodule = self.tabmodule
        if debug and debuglog is None:
            debuglog = logging.getLogger(YACC_LOG)
        self.lexer.build(debug=debug)
        self.parser = ply.yacc.yacc(
            module=self,
            start='file',
            tabmodule=tabmodule,
            outputdir=outputdir,
            write_tables=write_tables,
            debug=debug,
            debuglog=debuglog)

    def parse(
            self,
            text:
                str,
            debuglog=None
            ) -> _spec.SystemSpec:
        """Return `SystemSpec` described by `text`."""
        if debuglog is None:
            debuglog = logging.getLogger(PARSER_LOG)
        lexer = self.lexer.lexer
        lexer.lineno = 1
        return self.parser.parse(
            text, lexer=lexer, debug=debuglog)

    def p_file(self, p):
        """file : header diagrams"""
        nvar, n_diagrams = p[1]
        diagrams = p[2]
        if n_diagrams != len(diagrams):
            logger.debug(
                f'header declares {n_diagrams} diagrams, '
                f'found {len(diagrams)}')
        p[0] = _spec.SystemSpec(nvar, diagrams)

    def p_header(self, p):
        """header : NUMBER NUMBER"""
        p[0] = (int(p[1]), int(p[2]))

    def p_diagrams_iter(self, p):
        """diagrams : diagrams diagram"""
        p[1].append(p[2])
        p[0] = p[1]

    def p_diagrams_end(self, p):
        """diagrams : empty"""
        p[0] = list()

    def p_diagram(self, p):
        """diagram : NUMBER NUMBER levels SEPARATOR"""
        id = int(p[1])
        n_levels = int(p[2])
        levels = p[3]
        if n_levels != len(levels):
            logger.debug(
                f'diagram {id} (line {p.lineno(1)}) declares '
                f'{n_levels} levels, found {len(levels)}')
        p[0] = _spec.DiagramSpec(id, levels)

    def p_levels_iter(self, p):
        """levels : levels level"""
        p[1].append(p[2])
        p[0] = p[1]

    def p_levels_end(self, p):
        """levels : empty"""
        p[0] = list()

    def p_level(self, p):
        """level : terms COLON nodes BAR"""
        p[0] = _spec.LevelSpec(p[1], p[3])

    def p_terms_iter(self, p):
        """terms : terms term"""
        p[1].append(p[2])
        p[0] = p[1]

    def p_terms_end(self, p):
        """terms : empty"""
        p[0] = list()

    def p_term(self, p):
        """term : integer"""
        p[0] = p[1]

    def p_term_plus(self, p):
        """term : PLUS integer"""
        p[0] = p[2]

    def p_integer(self, p):
        """integer : NUMBER"""
        p[0] = int(p[1])

    def p_negative_integer(self, p):
        """integer : MINUS NUMBER"""
        p[0] = -int(p[2])

    def p_nodes_iter(self, p):
        """nodes : nodes node"""
        p[1].append(p[2])
        p[0] = p[1]

    def p_nodes_end(self, p):
        """nodes : empty"""
        p[0] = list()

    def p_node(self, p):
        """node : LPAREN NUMBER SEMICOLON NUMBER COMMA NUMBER RPAREN"""
        p[0] = _spec.NodeSpec(int(p[2]), int(p[4]), int(p[6]))

    def p_empty(self, p):
        """empty :"""

    def p_error(self, p):
        if p is None:
            raise ValueError('Unexpected end of input')
        raise ValueError(
            f'Syntax error at "{p.value}" (line {p.lineno})')


def parse(
        text:
            str
        ) -> _spec.SystemSpec:
    """Return `SystemSpec` described by `text`."""
    parser = Parser()
    return parser.parse(text)


def parse_file(
        filename:
            str |
            os.PathLike
        ) -> _spec.SystemSpec:
    """Return `SystemSpec` read from `.bdd` file `filename`."""
    with open(filename, 'r') as f:
        text = f.read()
    return parse(text)


def loads(
        text:
            str
        ) -> _system.System:
    """Return `System` described by `text`."""
    return _builder.build_system_from_spec(parse(text))


def load(
        filename:
            str |
            os.PathLike
        ) -> _system.System:
    """Return `System` loaded from `.bdd` file `filename`.

    If the diagram identifiers in the file are not unique,
    then diagrams are identified by their position in the file.
    """
    spec = parse_file(filename)
    logger.info(
        f'loaded {len(spec.diagrams)} diagrams '
        f'from "{os.fspath(filename)}"')
    return _builder.build_system_from_spec(spec)


def dumps(
        system:
            _system.System
        ) -> str:
    """Return `.bdd` text of `system`.

    Diagrams are written in increasing identifier.
    """
    lines = [f'{system.nvar} {len(system)}']
    for _, shared in system.items():
        with shared.read() as bdd:
            lines.extend(_bdd_lines(bdd))
    return '\n'.join(lines) + '\n'


def dump(
        system:
            _system.System,
        filename:
            str |
            os.PathLike
        ) -> None:
    """Write `system` to `.bdd` file `filename`."""
    s = dumps(system)
    with open(filename, 'w') as f:
        f.write(s)


def _bdd_lines(
        bdd:
            _bdd.BDD
        ) -> _abc.Iterator[str]:
    """Yield the lines of `bdd` in `.bdd` format."""
    yield f'{bdd.id} {len(bdd.levels)}'
    for level in bdd.levels:
        lhs = '+'.join(map(str, level.lhs))
        rhs = ''.join(
            _format_node(u, node)
            for u, node in level.nodes.items())
        yield f'{lhs}:{rhs}|'
    yield '---'


def _format_node(
        u:
            int,
        node:
            _bdd.Node
        ) -> str:
    e0 = _spec.NO_EDGE if node.e0 is None else node.e0
    e1 = _spec.NO_EDGE if node.e1 is None else node.e1
    return f'({u};{e0},{e1})'


def _rewrite_tables(outputdir='./'):
    """Write the parser table file, even if it exists."""
    astutils.rewrite_tables(Parser, TABMODULE, outputdir)


if __name__ == '__main__':
    _rewrite_tables()

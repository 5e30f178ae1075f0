"""Installation script."""
import logging

import setuptools


PACKAGE_NAME = 'lindd'
DESCRIPTION = (
    'Layered decision diagrams labeled by linear equations, '
    'with a parser and writer for the `.bdd` text format.')
LONG_DESCRIPTION = (
    'lindd is a package for reading, building, and writing '
    'layered decision diagrams whose levels are labeled by '
    'sums (XOR) of variables, as used in differential '
    'cryptanalysis. It includes a parser of the `.bdd` '
    'text format, normalization of negated levels, '
    'removal of edges that jump over levels, '
    'and plotting with GraphViz.')
VERSION_FILE = f'{PACKAGE_NAME}/_version.py'
VERSION = '0.1.0'
VERSION_FILE_TEXT = (
    '# This file was generated from setup.py\n'
    "version = '{version}'\n")
PYTHON_REQUIRES = '>=3.11'
INSTALL_REQUIRES = [
    'astutils >= 0.0.5',
    'networkx >= 2.4',
    'ply >= 3.4, <= 3.10',
    'pydot >= 1.4.2',
    'setuptools >= 65.6.0']
TESTS_REQUIRE = [
    'pytest >= 4.6.11']
CLASSIFIERS = [
    'Development Status :: 2 - Pre-Alpha',
    'Intended Audience :: Developers',
    'Intended Audience :: Science/Research',
    'License :: OSI Approved :: BSD License',
    'Operating System :: OS Independent',
    'Programming Language :: Python :: 3 :: Only',
    'Topic :: Scientific/Engineering',
    'Topic :: Security :: Cryptography']
KEYWORDS = [
    'bdd',
    'decision diagram',
    'differential cryptanalysis',
    'linear equations',
    'networkx',
    'dot',
    'graphviz']


def git_version(
        version:
            str
        ) -> str:
    """Return version with local version identifier."""
    import git as _git
    repo = _git.Repo('.git')
    repo.git.status()
    # assert versions are increasing
    latest_tag = repo.git.describe(
        match='v[0-9]*', tags=True, abbrev=0)
    latest_version = _parse_version(latest_tag[1:])
    given_version = _parse_version(version)
    if latest_version > given_version:
        raise AssertionError(
            (latest_tag, version))
    sha = repo.head.commit.hexsha
    if repo.is_dirty():
        return f'{version}.dev0+{sha}.dirty'
    # commit is clean
    # is it release of `version` ?
    try:
        tag = repo.git.describe(
            match='v[0-9]*', exact_match=True,
            tags=True, dirty=True)
    except _git.GitCommandError:
        return f'{version}.dev0+{sha}'
    if tag != f'v{version}':
        raise AssertionError((tag, version))
    return version


def _parse_version(
        version:
            str
        ) -> tuple[
            int, int, int]:
    """Return numeric version."""
    numerals = version.split('.')
    if len(numerals) != 3:
        raise ValueError(numerals)
    return tuple(map(int, numerals))


def run_setup(
        ) -> None:
    """Build parser, get version from `git`, install."""
    try:
        version = git_version(VERSION)
    except AssertionError:
        raise
    except Exception:
        print('No git info: Assume release.')
        version = VERSION
    s = VERSION_FILE_TEXT.format(version=version)
    with open(VERSION_FILE, 'w') as f:
        f.write(s)
    _build_parsers()
    setuptools.setup(
        name=PACKAGE_NAME,
        version=version,
        description=DESCRIPTION,
        long_description=LONG_DESCRIPTION,
        license='BSD',
        python_requires=PYTHON_REQUIRES,
        install_requires=INSTALL_REQUIRES,
        extras_require=dict(test=TESTS_REQUIRE),
        packages=[PACKAGE_NAME],
        package_dir={PACKAGE_NAME: PACKAGE_NAME},
        include_package_data=True,
        zip_safe=False,
        classifiers=CLASSIFIERS,
        keywords=KEYWORDS)


def _build_parsers(
        ) -> None:
    """Cache the parser's state machine."""
    if not _parser_requirements_installed():
        return
    import lindd.bddfile
    logging.getLogger('astutils').setLevel('ERROR')
    lindd.bddfile._rewrite_tables(outputdir=PACKAGE_NAME)


def _parser_requirements_installed(
        ) -> bool:
    """Return `True` if parser requirements found."""
    try:
        import astutils
        import networkx
        import ply
        import pydot
    except ImportError:
        print(
            'WARNING: `lindd` could not cache parser tables '
            '(ignore this if running only for metadata information).')
        return False
    return True


if __name__ == '__main__':
    run_setup()

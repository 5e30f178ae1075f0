"""Systems of diagrams over shared variables."""
# Copyright 2014 by California Institute of Technology
# All rights reserved. Licensed under BSD-3.
#
import collections.abc as _abc
import logging
import typing as _ty

import lindd.bdd as _bdd


logger = logging.getLogger(__name__)


_T = _ty.TypeVar('_T')


class BorrowError(RuntimeError):
    """Raise this when a `Shared` value is already borrowed."""


class _Borrow:
    """Context manager that tracks borrows of a `Shared` value."""

    def __init__(self, shared, mutable):
        self.shared = shared
        self.mutable = mutable

    def __enter__(self):
        shared = self.shared
        if shared._writer:
            raise BorrowError(
                'value is already borrowed for writing')
        if self.mutable:
            if shared._readers:
                raise BorrowError(
                    'value is already borrowed for reading '
                    f'({shared._readers} readers)')
            shared._writer = True
        else:
            shared._readers += 1
        return shared._value

    def __exit__(self, ex_type, ex_value, tb):
        if self.mutable:
            self.shared._writer = False
        else:
            self.shared._readers -= 1


class Shared(_ty.Generic[_T]):
    """Value that is either written by one, or read by many.

    ```python
    with shared.read() as bdd:
        ...
    with shared.write() as bdd:
        ...
    ```

    Borrows are checked when taken: a conflicting
    borrow raises `BorrowError`, it does not wait.
    Not thread-safe.
    """

    def __init__(
            self,
            value:
                _T
            ) -> None:
        self._value = value
        self._readers = 0
        self._writer = False

    def read(
            self
            ) -> _ty.ContextManager[_T]:
        return _Borrow(self, mutable=False)

    def write(
            self
            ) -> _ty.ContextManager[_T]:
        return _Borrow(self, mutable=True)

    @property
    def borrowed(
            self
            ) -> bool:
        return self._writer or self._readers > 0


class System:
    """Diagrams over the same `nvar` variables.

    Diagrams are keyed by their `id`.
    Iteration is in increasing `id`.
    """

    def __init__(
            self
            ) -> None:
        self.nvar: int = 0
        self._bdds: dict[int, Shared[_bdd.BDD]] = dict()

    def __len__(
            self
            ) -> int:
        return len(self._bdds)

    def __contains__(
            self,
            id:
                int
            ) -> bool:
        return id in self._bdds

    def __iter__(
            self
            ) -> _abc.Iterator[int]:
        return iter(sorted(self._bdds))

    def __str__(
            self
            ) -> str:
        return (
            'System of diagrams:\n'
            '-------------------\n'
            f'variables: {self.nvar}\n'
            f'diagrams: {sorted(self._bdds)}\n')

    def set_nvar(
            self,
            nvar:
                int
            ) -> None:
        if self._bdds:
            raise ValueError(
                'cannot change the number of variables '
                f'of a system with {len(self)} diagrams')
        self.nvar = nvar

    def push(
            self,
            bdd:
                _bdd.BDD
            ) -> None:
        """Add `bdd` to this system."""
        if bdd.nvar != self.nvar:
            raise ValueError(
                f'diagram {bdd.id} has {bdd.nvar} variables, '
                f'but the system has {self.nvar}')
        if bdd.id in self._bdds:
            raise ValueError(
                f'diagram {bdd.id} is already in the system')
        self._bdds[bdd.id] = Shared(bdd)

    def get(
            self,
            id:
                int
            ) -> Shared[_bdd.BDD]:
        """Return the diagram with `id`."""
        return self._bdds[id]

    def items(
            self
            ) -> _abc.Iterator[
                tuple[int, Shared[_bdd.BDD]]]:
        for id in self:
            yield id, self._bdds[id]

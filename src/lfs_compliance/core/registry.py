"""Ordered registry of compliance checks.

Checks are registered once, before the run starts, and kept in registration
order. A registry is append-only: entries are never replaced or removed, and
once the runner freezes it no more can be added.

Examples:
    Registering with the decorator::

        registry = TestRegistry()

        @registry.test("Test batch: download missing")
        def download_missing(existing, missing):
            ...

    Registering a closure::

        registry.register("Test batch: upload existing", lambda e, m: check(api, e))
"""

from collections.abc import Callable, Iterator

from lfs_compliance.exceptions import RegistryError
from lfs_compliance.models import ServerTest, TestFunc


class TestRegistry:
    """Append-only, ordered collection of ServerTest entries."""

    __test__ = False

    def __init__(self) -> None:
        self._tests: list[ServerTest] = []
        self._names: set[str] = set()
        self._frozen = False

    def register(self, name: str, func: TestFunc) -> ServerTest:
        """Append a check.

        Raises:
            RegistryError: If the name is taken or the registry is frozen.
        """
        if self._frozen:
            raise RegistryError(f"Cannot register {name!r}: tests are already running")
        if name in self._names:
            raise RegistryError(f"A test named {name!r} is already registered")

        test = ServerTest(name=name, func=func)
        self._tests.append(test)
        self._names.add(name)
        return test

    def test(self, name: str) -> Callable[[TestFunc], TestFunc]:
        """Decorator form of register(); returns the function unchanged."""

        def decorator(func: TestFunc) -> TestFunc:
            self.register(name, func)
            return func

        return decorator

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def names(self) -> list[str]:
        return [test.name for test in self._tests]

    def __iter__(self) -> Iterator[ServerTest]:
        return iter(tuple(self._tests))

    def __len__(self) -> int:
        return len(self._tests)

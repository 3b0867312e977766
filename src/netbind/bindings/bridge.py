"""Exception bridge between the database and scripts."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager

from netbind.exceptions import AssertionFailure, NativeInvariantFailure


def translate_assertfail(e: AssertionFailure) -> Exception:
    return NativeInvariantFailure(str(e))


class ExceptionBridge:
    """Maps database exception types to the exceptions scripts see.

    Only registered types are translated. Everything else passes through
    untouched and is treated as fatal by the host.
    """

    def __init__(self) -> None:
        self._translators: dict[type[BaseException], Callable[[BaseException], Exception]] = {}

    def register(self, exc_type: type[BaseException], translator: Callable[[BaseException], Exception]) -> None:
        self._translators[exc_type] = translator

    def translator_for(self, exc: BaseException) -> Callable[[BaseException], Exception] | None:
        for klass in type(exc).__mro__:
            translator = self._translators.get(klass)
            if translator is not None:
                return translator
        return None

    @contextmanager
    def translating(self) -> Iterator[None]:
        """Run the enclosed block, translating registered exceptions."""
        try:
            yield
        except Exception as e:
            translator = self.translator_for(e)
            if translator is None:
                raise
            raise translator(e) from e

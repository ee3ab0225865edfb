"""
Testing utilities for injectors.
"""

from typing import Any, Iterable, List, Optional, Sequence

from .binding import Binding
from .config import InjectorConfig
from .core import Injector
from .providers import ValueProvider


class MockProvider(ValueProvider):
    """
    Value provider that tracks how often it is asked for its value.

    Bind it with ``create_binding(token, MockProvider(fake))``.
    """

    __slots__ = ("access_count", "provide_calls")

    def __init__(self, value: Any, name: str = "mock"):
        super().__init__(value, name=name)
        self.access_count = 0
        self.provide_calls: List[tuple] = []

    async def provide(self, dependencies: Sequence[Any] = ()) -> Any:
        """Track provide calls."""
        self.access_count += 1
        self.provide_calls.append(tuple(dependencies))
        return await super().provide(dependencies)

    def reset(self) -> None:
        """Reset tracking."""
        self.access_count = 0
        self.provide_calls.clear()


def override_injector(
    injector: Injector,
    bindings: Iterable[Binding[Any]],
    *,
    name: Optional[str] = None,
) -> Injector:
    """
    Create a child injector whose bindings shadow ``injector``'s.

    The original injector is left untouched, so overrides never leak
    between tests. Tokens resolved through the child that are not
    overridden still come from (and are cached in) the parent.

    Example:
        test_injector = override_injector(app_injector, [
            bind(MailerToken).to_value(FakeMailer()),
        ])
    """
    config = InjectorConfig(name=name or f"{injector.name}:override")
    return Injector(bindings, injector, config=config)

"""
Bindings associate a token with a provider.

Two equivalent styles are offered: functional binders (``bind_value(token, 42)``)
and the fluent builder (``bind(token).to_value(42)``).
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, Sequence, Type, TypeVar

from .providers import (
    AsyncClassProvider,
    AsyncFactoryProvider,
    ClassLoader,
    ClassProvider,
    FactoryProvider,
    LazyClassProvider,
    Provider,
    ValueProvider,
)
from .tokens import Token


T = TypeVar("T")


def _identity(value: Any) -> Any:
    return value


@dataclass(frozen=True)
class Binding(Generic[T]):
    """Immutable (token, provider) pair registered into an injector."""

    token: Token[T]
    provider: Provider[T]


def create_binding(token: Token[T], provider: Provider[T]) -> Binding[T]:
    """Create a binding from a token and a provider."""
    return Binding(token, provider)


def bind_value(token: Token[T], value: T) -> Binding[T]:
    """Bind the token to a constant value."""
    return create_binding(token, ValueProvider(value))


def bind_to_token(token: Token[T], other: Token[Any]) -> Binding[T]:
    """Bind the token to whatever ``other`` resolves to."""
    return create_binding(token, FactoryProvider(_identity, [other]))


def bind_factory(
    token: Token[T],
    factory: Callable[..., T],
    dependency_tokens: Sequence[Token[Any]] = (),
) -> Binding[T]:
    """
    Bind the token to a factory function.

    Args:
        token: Token to bind
        factory: Called with the resolved dependencies, in order
        dependency_tokens: Tokens to inject into the factory

    Example:
        bind_factory(GreetingToken, lambda name: f"hi {name}", [NameToken])
    """
    return create_binding(token, FactoryProvider(factory, dependency_tokens))


def bind_async_factory(
    token: Token[T],
    factory: Callable[..., Awaitable[T]],
    dependency_tokens: Sequence[Token[Any]] = (),
) -> Binding[T]:
    """Bind the token to a coroutine function; its result is awaited."""
    return create_binding(token, AsyncFactoryProvider(factory, dependency_tokens))


def bind_class(
    token: Token[T],
    cls: Type[T],
    dependency_tokens: Optional[Sequence[Token[Any]]] = None,
) -> Binding[T]:
    """
    Bind the token to a class constructed on resolution.

    Without ``dependency_tokens`` the class must either take no constructor
    arguments or be decorated with ``@inject``.

    Raises:
        MalformedClassBindingError: If the class needs arguments nobody declared
    """
    return create_binding(token, ClassProvider(cls, dependency_tokens))


def bind_async_class(
    token: Token[T],
    loader: ClassLoader,
    dependency_tokens: Sequence[Token[Any]] = (),
) -> Binding[T]:
    """
    Bind the token to a class that is loaded asynchronously.

    Example:
        bind_async_class(ReportToken, "reports.pdf:PdfReport", [ConfigToken])
    """
    return create_binding(token, AsyncClassProvider(loader, dependency_tokens))


def bind_lazy_class(token: Token[T], loader: ClassLoader) -> Binding[T]:
    """
    Bind the token to a class whose reference and dependencies are both
    discovered on first use. The loaded class declares its tokens with ``@inject``.
    """
    return create_binding(token, LazyClassProvider(loader))


class UnprovidedBinding(Generic[T]):
    """A token waiting for a provider. Returned by :func:`bind`."""

    __slots__ = ("token",)

    def __init__(self, token: Token[T]):
        self.token = token

    def to_value(self, value: T) -> Binding[T]:
        return bind_value(self.token, value)

    def to_token(self, other: Token[Any]) -> Binding[T]:
        return bind_to_token(self.token, other)

    def to_factory(self, factory: Callable[..., T], dependency_tokens: Sequence[Token[Any]] = ()) -> Binding[T]:
        return bind_factory(self.token, factory, dependency_tokens)

    def to_async_factory(
        self,
        factory: Callable[..., Awaitable[T]],
        dependency_tokens: Sequence[Token[Any]] = (),
    ) -> Binding[T]:
        return bind_async_factory(self.token, factory, dependency_tokens)

    def to_class(self, cls: Type[T], dependency_tokens: Optional[Sequence[Token[Any]]] = None) -> Binding[T]:
        return bind_class(self.token, cls, dependency_tokens)

    def to_async_class(self, loader: ClassLoader, dependency_tokens: Sequence[Token[Any]] = ()) -> Binding[T]:
        return bind_async_class(self.token, loader, dependency_tokens)

    def to_lazy_class(self, loader: ClassLoader) -> Binding[T]:
        return bind_lazy_class(self.token, loader)


def bind(token: Token[T]) -> UnprovidedBinding[T]:
    """
    Start binding a token.

    Example:
        bindings = [
            bind(HelloToken).to_value("hello"),
            bind(ServiceToken).to_class(Service, [HelloToken]),
        ]
    """
    return UnprovidedBinding(token)

"""
Token identity model.

A token names a typed dependency slot. Tokens compare by identity only:
two tokens created with the same name are two distinct slots.
"""

import itertools
from typing import TYPE_CHECKING, Any, Awaitable, Generic, Optional, TypeVar

from .errors import LazyTokenError

if TYPE_CHECKING:
    from .core import Injector


T = TypeVar("T")


class Token(Generic[T]):
    """
    Identity-compared handle for a dependency of type ``T``.

    Tokens are created through a :class:`TokenFactory` (or :func:`create_token`)
    and are immutable once built. The companion lazy token is created on first
    access to :attr:`lazy` and reused afterwards.
    """

    __slots__ = ("_name", "_is_lazy", "_lazy")

    def __init__(self, name: str, *, is_lazy: bool = False):
        object.__setattr__(self, "_name", name)
        object.__setattr__(self, "_is_lazy", is_lazy)
        object.__setattr__(self, "_lazy", None)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"Token attributes are read-only ({name})")

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_lazy(self) -> bool:
        return self._is_lazy

    @property
    def lazy(self) -> "Token[Lazy[T]]":
        """Companion token resolving to a :class:`Lazy` handle for this token."""
        if self._is_lazy:
            raise LazyTokenError(self)
        if self._lazy is None:
            object.__setattr__(self, "_lazy", Token(f"Lazy({self._name})", is_lazy=True))
        return self._lazy

    def to_json(self) -> str:
        return f"[Token {self._name}]"

    def __str__(self) -> str:
        return self._name

    def __repr__(self) -> str:
        return f"<Token {self._name}>"


class Lazy(Generic[T]):
    """
    Deferred access to a token's value.

    Injected in place of the value itself when a component depends on
    ``token.lazy``. Calling :meth:`get` asks the owning injector for the token.
    """

    __slots__ = ("_injector", "_token")

    def __init__(self, injector: "Injector", token: Token[T]):
        self._injector = injector
        self._token = token

    @property
    def token(self) -> Token[T]:
        return self._token

    def get(self) -> Awaitable[T]:
        return self._injector.get(self._token)

    def __repr__(self) -> str:
        return f"<Lazy {self._token.name}>"


class TokenFactory:
    """
    Creates tokens, numbering the unnamed ones.

    The counter belongs to the factory, so independent factories may hand out
    the same synthetic names. That is harmless: identity never depends on the name.
    """

    __slots__ = ("_prefix", "_counter")

    def __init__(self, prefix: str = "Token"):
        self._prefix = prefix
        self._counter = itertools.count()

    def create(self, name: Optional[str] = None) -> Token[Any]:
        return Token(name or f"{self._prefix}-{next(self._counter)}")


_default_factory = TokenFactory()


def create_token(name: Optional[str] = None) -> Token[Any]:
    """
    Create a new token.

    Args:
        name: Diagnostic name. Defaults to ``Token-<n>``.

    Returns:
        A token distinct from every other token

    Example:
        >>> Config = create_token("Config")
        >>> Config is create_token("Config")
        False
    """
    return _default_factory.create(name)

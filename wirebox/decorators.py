"""
Decorators for declaring static dependency metadata on classes.
"""

from typing import Any, Callable, Optional, Tuple, Type, TypeVar


T = TypeVar("T")

# Class attribute holding the declared dependency tokens
DEPENDENCY_TOKENS_ATTR = "__di_tokens__"


def inject(*tokens: Any) -> Callable[[Type[T]], Type[T]]:
    """
    Declare the tokens injected into a class constructor, in parameter order.

    Classes decorated this way can be bound without repeating the tokens.

    Example:
        @inject(DatabaseToken, CacheToken)
        class UserRepo:
            def __init__(self, db, cache):
                ...

        bind(UserRepoToken).to_class(UserRepo)
    """
    def decorator(cls: Type[T]) -> Type[T]:
        setattr(cls, DEPENDENCY_TOKENS_ATTR, tuple(tokens))
        return cls

    return decorator


def declared_tokens(cls: Any) -> Optional[Tuple[Any, ...]]:
    """Return the tokens declared on ``cls`` by :func:`inject`, if any."""
    tokens = getattr(cls, DEPENDENCY_TOKENS_ATTR, None)
    if tokens is None:
        return None
    return tuple(tokens)

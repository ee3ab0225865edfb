"""
Injector error types with rich diagnostics.
"""

from typing import Any, Awaitable, Iterable, Optional


class WireboxError(Exception):
    """Base exception for injector errors."""
    pass


class UnboundTokenError(WireboxError):
    """No provider bound for the requested token on the injector or its parents."""

    def __init__(self, token: Any):
        self.token = token

        msg = f"Tried to get {token} from an injector, but it's not bound."
        msg += "\n\nSuggested fixes:"
        msg += f"\n  - Register a binding for {token}"
        msg += "\n  - Pass a parent injector that binds it"

        super().__init__(msg)


class CyclicDependencyError(WireboxError):
    """A token re-entered its own resolution chain."""

    def __init__(self, chain: Iterable[Any]):
        self.chain = tuple(chain)

        msg = "Detected dependency cycle: "
        msg += " -> ".join(str(token) for token in self.chain)
        msg += "\n\nSuggested fixes:"
        msg += "\n  - Depend on token.lazy for one edge of the cycle"
        msg += "\n  - Restructure dependencies to remove cycle"

        super().__init__(msg)


class RebindingResolvedTokenError(WireboxError):
    """A binding was registered for a token that has already been resolved."""

    def __init__(self, token: Any):
        self.token = token
        super().__init__(
            f"Token {token} has already been resolved once and cannot be rebound"
        )


class MalformedClassBindingError(WireboxError):
    """A class needing constructor arguments was bound without dependency tokens."""

    def __init__(self, cls: Any):
        self.cls = cls
        name = getattr(cls, "__qualname__", repr(cls))

        msg = (
            f"Class {name} takes constructor arguments but no dependency tokens "
            f"were given or declared"
        )
        msg += "\n\nSuggested fixes:"
        msg += "\n  - Pass dependency tokens explicitly when binding"
        msg += f"\n  - Decorate {name} with @inject(...)"

        super().__init__(msg)


class LazyTokenError(WireboxError):
    """`.lazy` was accessed on a token that is already lazy."""

    def __init__(self, token: Any):
        self.token = token
        super().__init__(
            f"Accessing lazy token on {token}, which is already a lazy token"
        )


class SuspendedResolution(Exception):
    """
    Raised by suspense-style accessors while a resolution is still pending.

    Not an error: callers that understand the protocol await the wrapped
    awaitable (or the exception itself) and retry the synchronous call.
    """

    def __init__(self, awaitable: Awaitable[Any], tokens: Optional[tuple] = None):
        self.awaitable = awaitable
        self.tokens = tokens or ()
        names = ", ".join(str(token) for token in self.tokens)
        super().__init__(f"Resolution pending for: {names}")

    def __await__(self):
        return self.awaitable.__await__()

"""
wirebox - asynchronous token-based dependency injection

Key Features:
- Identity-compared tokens with lazy companions for breaking cycles
- Value, factory, class, async-class and lazily-loaded class providers
- One memoized resolution per token per injector, failures replayed
- Runtime cycle detection
- Parent/child injectors
- Suspense-style synchronous access to resolved values
"""

__version__ = "1.0.0"

from .tokens import (
    Token,
    Lazy,
    TokenFactory,
    create_token,
)

from .providers import (
    Provider,
    ProviderKind,
    ProviderMeta,
    Discovery,
    AsyncInit,
    ValueProvider,
    FactoryProvider,
    AsyncFactoryProvider,
    ClassProvider,
    AsyncClassProvider,
    LazyClassProvider,
    import_class,
)

from .binding import (
    Binding,
    UnprovidedBinding,
    bind,
    create_binding,
    bind_value,
    bind_to_token,
    bind_factory,
    bind_async_factory,
    bind_class,
    bind_async_class,
    bind_lazy_class,
)

from .decorators import (
    inject,
    DEPENDENCY_TOKENS_ATTR,
)

from .core import Injector

from .config import (
    InjectorConfig,
    ConfigError,
)

from .diagnostics import (
    DIDiagnostics,
    DIEvent,
    DIEventType,
    ConsoleDiagnosticListener,
)

from .errors import (
    WireboxError,
    UnboundTokenError,
    CyclicDependencyError,
    RebindingResolvedTokenError,
    MalformedClassBindingError,
    LazyTokenError,
    SuspendedResolution,
)

__all__ = [
    # Tokens
    "Token",
    "Lazy",
    "TokenFactory",
    "create_token",

    # Providers
    "Provider",
    "ProviderKind",
    "ProviderMeta",
    "Discovery",
    "AsyncInit",
    "ValueProvider",
    "FactoryProvider",
    "AsyncFactoryProvider",
    "ClassProvider",
    "AsyncClassProvider",
    "LazyClassProvider",
    "import_class",

    # Bindings
    "Binding",
    "UnprovidedBinding",
    "bind",
    "create_binding",
    "bind_value",
    "bind_to_token",
    "bind_factory",
    "bind_async_factory",
    "bind_class",
    "bind_async_class",
    "bind_lazy_class",

    # Decorators
    "inject",
    "DEPENDENCY_TOKENS_ATTR",

    # Injector
    "Injector",

    # Config
    "InjectorConfig",
    "ConfigError",

    # Diagnostics
    "DIDiagnostics",
    "DIEvent",
    "DIEventType",
    "ConsoleDiagnosticListener",

    # Errors
    "WireboxError",
    "UnboundTokenError",
    "CyclicDependencyError",
    "RebindingResolvedTokenError",
    "MalformedClassBindingError",
    "LazyTokenError",
    "SuspendedResolution",
]

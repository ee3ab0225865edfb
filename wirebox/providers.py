"""
Provider implementations for different instantiation strategies.

Every provider is tagged with a :class:`ProviderKind` and a :class:`Discovery`
strategy. The injector dispatches on ``discovery``: eager providers expose
``dependency_tokens`` directly, deferred providers must first be awaited
through ``discover_dependency_tokens()``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import (
    Any,
    Awaitable,
    Callable,
    ClassVar,
    Dict,
    Generic,
    Optional,
    Sequence,
    Tuple,
    Type,
    TypeVar,
    Union,
)
import asyncio
import importlib
import inspect

from .decorators import declared_tokens
from .errors import MalformedClassBindingError


T = TypeVar("T")

ClassLoader = Union[Callable[[], Awaitable[Type[Any]]], str]


class ProviderKind(str, Enum):
    """Concrete provider kinds."""

    VALUE = "value"
    FACTORY = "factory"
    ASYNC_FACTORY = "async_factory"
    CLASS = "class"
    ASYNC_CLASS = "async_class"
    LAZY_CLASS = "lazy_class"


class Discovery(str, Enum):
    """How a provider makes its dependency tokens known."""

    EAGER = "eager"  # known at binding time
    DEFERRED = "deferred"  # needs an async step first (e.g. loading a class)


@dataclass(frozen=True, slots=True)
class ProviderMeta:
    """Compact provider metadata for diagnostics."""

    name: str
    kind: ProviderKind
    module: str = ""
    qualname: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind.value,
            "module": self.module,
            "qualname": self.qualname,
        }


class AsyncInit(ABC):
    """
    Opt-in post-construction hook.

    Classes inheriting from this are awaited through :meth:`async_init`
    by class providers before the instance counts as resolved.
    """

    @abstractmethod
    async def async_init(self) -> None:
        ...


class Provider(ABC, Generic[T]):
    """
    Recipe for a value that may have dependencies.

    Subclasses set ``kind`` and ``discovery`` and implement :meth:`provide`.
    """

    __slots__ = ("_meta",)

    kind: ClassVar[ProviderKind]
    discovery: ClassVar[Discovery] = Discovery.EAGER

    @property
    def meta(self) -> ProviderMeta:
        return self._meta

    @property
    def dependency_tokens(self) -> Tuple[Any, ...]:
        """Dependency tokens of an eager provider."""
        return ()

    async def discover_dependency_tokens(self) -> Tuple[Any, ...]:
        """Dependency tokens of a deferred provider."""
        return self.dependency_tokens

    @abstractmethod
    async def provide(self, dependencies: Sequence[Any]) -> T:
        """
        Produce the value.

        Args:
            dependencies: Resolved dependency values, in declared order

        Returns:
            The provided value
        """
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._meta.name}>"


def _meta_for(obj: Any, kind: ProviderKind, name: Optional[str] = None) -> ProviderMeta:
    return ProviderMeta(
        name=name or getattr(obj, "__name__", type(obj).__name__),
        kind=kind,
        module=getattr(obj, "__module__", "") or "",
        qualname=getattr(obj, "__qualname__", "") or "",
    )


def _requires_arguments(cls: Type[Any]) -> bool:
    """True if constructing ``cls`` needs at least one argument."""
    if cls.__init__ is object.__init__ and cls.__new__ is object.__new__:
        return False
    try:
        sig = inspect.signature(cls)
    except (TypeError, ValueError):
        # Builtins without signature support
        return False

    for param in sig.parameters.values():
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        if param.default is inspect.Parameter.empty:
            return True
    return False


def class_dependency_tokens(cls: Type[Any], dependency_tokens: Optional[Sequence[Any]] = None) -> Tuple[Any, ...]:
    """
    Work out which tokens to inject into ``cls``.

    Explicit tokens win, then tokens declared with ``@inject``. A class that
    needs constructor arguments but has neither is rejected.

    Raises:
        MalformedClassBindingError: If no tokens are known for a class that needs them
    """
    if dependency_tokens is not None:
        return tuple(dependency_tokens)
    declared = declared_tokens(cls)
    if declared is not None:
        return declared
    if _requires_arguments(cls):
        raise MalformedClassBindingError(cls)
    return ()


def import_class(path: str) -> Type[Any]:
    """
    Import a class from a ``"package.module:ClassName"`` path.

    Raises:
        ValueError: If the path has no ``:`` separator
    """
    if ":" not in path:
        raise ValueError(f"Expected 'module.path:ClassName', got {path!r}")
    module_path, class_name = path.rsplit(":", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)


def _as_loader(target: ClassLoader) -> Callable[[], Awaitable[Type[Any]]]:
    if isinstance(target, str):
        # Imports can block on disk; keep them off the event loop
        return lambda: asyncio.to_thread(import_class, target)
    return target


def _loader_name(target: ClassLoader) -> str:
    if isinstance(target, str):
        return target
    return getattr(target, "__name__", "loader")


async def _construct(cls: Type[T], dependencies: Sequence[Any]) -> T:
    instance = cls(*dependencies)
    if isinstance(instance, AsyncInit):
        await instance.async_init()
    return instance


class ValueProvider(Provider[T]):
    """Provider that returns a pre-bound constant value."""

    __slots__ = ("_value",)

    kind = ProviderKind.VALUE

    def __init__(self, value: T, name: Optional[str] = None):
        self._value = value
        self._meta = ProviderMeta(name=name or "value", kind=self.kind)

    async def provide(self, dependencies: Sequence[Any] = ()) -> T:
        return self._value


class FactoryProvider(Provider[T]):
    """Provider that calls a plain function with the resolved dependencies."""

    __slots__ = ("_factory", "_dependency_tokens")

    kind = ProviderKind.FACTORY

    def __init__(self, factory: Callable[..., T], dependency_tokens: Sequence[Any] = ()):
        self._factory = factory
        self._dependency_tokens = tuple(dependency_tokens)
        self._meta = _meta_for(factory, self.kind)

    @property
    def dependency_tokens(self) -> Tuple[Any, ...]:
        return self._dependency_tokens

    async def provide(self, dependencies: Sequence[Any]) -> T:
        return self._factory(*dependencies)


class AsyncFactoryProvider(Provider[T]):
    """Provider that awaits the result of a factory function."""

    __slots__ = ("_factory", "_dependency_tokens")

    kind = ProviderKind.ASYNC_FACTORY

    def __init__(self, factory: Callable[..., Awaitable[T]], dependency_tokens: Sequence[Any] = ()):
        self._factory = factory
        self._dependency_tokens = tuple(dependency_tokens)
        self._meta = _meta_for(factory, self.kind)

    @property
    def dependency_tokens(self) -> Tuple[Any, ...]:
        return self._dependency_tokens

    async def provide(self, dependencies: Sequence[Any]) -> T:
        return await self._factory(*dependencies)


class ClassProvider(Provider[T]):
    """
    Provider that constructs a class with the resolved dependencies.

    Dependencies are passed positionally. Instances that are :class:`AsyncInit`
    are awaited through ``async_init()`` before being handed out.
    """

    __slots__ = ("_cls", "_dependency_tokens")

    kind = ProviderKind.CLASS

    def __init__(self, cls: Type[T], dependency_tokens: Optional[Sequence[Any]] = None):
        if cls is None:
            raise TypeError("ClassProvider created with undefined class. Perhaps you have an import order issue")
        self._cls = cls
        self._dependency_tokens = class_dependency_tokens(cls, dependency_tokens)
        self._meta = _meta_for(cls, self.kind)

    @property
    def dependency_tokens(self) -> Tuple[Any, ...]:
        return self._dependency_tokens

    async def provide(self, dependencies: Sequence[Any]) -> T:
        return await _construct(self._cls, dependencies)


class AsyncClassProvider(Provider[T]):
    """
    Provider that first loads a class asynchronously, then constructs it.

    The loader is either an async callable returning the class or a
    ``"package.module:ClassName"`` import path. It runs on every ``provide``;
    the injector calls ``provide`` once per token.
    """

    __slots__ = ("_loader", "_dependency_tokens")

    kind = ProviderKind.ASYNC_CLASS

    def __init__(self, loader: ClassLoader, dependency_tokens: Sequence[Any] = ()):
        self._loader = _as_loader(loader)
        self._dependency_tokens = tuple(dependency_tokens)
        self._meta = ProviderMeta(name=_loader_name(loader), kind=self.kind)

    @property
    def dependency_tokens(self) -> Tuple[Any, ...]:
        return self._dependency_tokens

    async def provide(self, dependencies: Sequence[Any]) -> T:
        cls = await self._loader()
        return await _construct(cls, dependencies)


class LazyClassProvider(Provider[T]):
    """
    Provider that loads a class and discovers its dependencies on first use.

    The class must declare its tokens with ``@inject`` unless its constructor
    takes no arguments. Loading happens at most once per provider, and a
    failed load is replayed rather than retried.
    """

    __slots__ = ("_loader", "_pending", "_cls")

    kind = ProviderKind.LAZY_CLASS
    discovery = Discovery.DEFERRED

    def __init__(self, loader: ClassLoader):
        self._loader = _as_loader(loader)
        self._pending: Optional[asyncio.Future] = None
        self._cls: Optional[Type[T]] = None
        self._meta = ProviderMeta(name=_loader_name(loader), kind=self.kind)

    async def load(self) -> Type[T]:
        """Load the class, sharing one load between all callers."""
        if self._cls is not None:
            return self._cls
        if self._pending is None:
            self._pending = asyncio.ensure_future(self._loader())
        cls = await self._pending
        self._cls = cls
        return cls

    async def discover_dependency_tokens(self) -> Tuple[Any, ...]:
        cls = await self.load()
        return class_dependency_tokens(cls)

    async def provide(self, dependencies: Sequence[Any]) -> T:
        cls = await self.load()
        return await _construct(cls, dependencies)

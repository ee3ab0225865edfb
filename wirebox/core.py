"""
Injector - the resolution engine.

An injector resolves tokens to values through its bindings, memoizing one
value (or one failure) per token. Tokens it does not bind are delegated to
an optional parent injector.
"""

from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    List,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
)
import asyncio
import logging
import time

from .binding import Binding, bind_value
from .config import InjectorConfig
from .diagnostics import ConsoleDiagnosticListener, DIDiagnostics, DIEventType
from .errors import (
    CyclicDependencyError,
    RebindingResolvedTokenError,
    SuspendedResolution,
    UnboundTokenError,
    WireboxError,
)
from .providers import Discovery, Provider
from .tokens import Lazy, Token

logger = logging.getLogger("wirebox.core")


T = TypeVar("T")

InstantiationObserver = Callable[[Token[Any], Any, Tuple[Token[Any], ...], Tuple[Any, ...]], None]


def _consume_exception(task: "asyncio.Task[Any]") -> None:
    # Failures live on in the error table and are replayed from the task;
    # retrieving here keeps asyncio from reporting them as never retrieved.
    if not task.cancelled():
        task.exception()


class Injector:
    """
    Resolves tokens to values via bindings.

    Each token resolves at most once per injector: concurrent and repeated
    :meth:`get` calls share one task, and a failure is replayed forever.

    Example:
        injector = Injector([
            bind(HelloToken).to_value("hello"),
            bind(GreetingToken).to_factory(lambda h: h + "!", [HelloToken]),
        ])
        assert await injector.get(GreetingToken) == "hello!"
    """

    __slots__ = (
        "_providers",
        "_cache",
        "_instances",
        "_errors",
        "_instance_tokens",
        "_waiting_on",
        "_observers",
        "_parent",
        "_diagnostics",
        "_config",
    )

    def __init__(
        self,
        bindings: Optional[Iterable[Binding[Any]]] = None,
        parent: Optional["Injector"] = None,
        *,
        config: Optional[InjectorConfig] = None,
        diagnostics: Optional[DIDiagnostics] = None,
    ):
        """
        Args:
            bindings: Bindings to initialize this injector with
            parent: Injector used for every token not bound here
            config: Injector settings; defaults to ``InjectorConfig()``
            diagnostics: Diagnostics coordinator; shared with the parent by default
        """
        self._providers: Dict[Token[Any], Provider[Any]] = {}
        self._cache: Dict[Token[Any], "asyncio.Task[Any]"] = {}
        self._instances: Dict[Token[Any], Any] = {}
        self._errors: Dict[Token[Any], BaseException] = {}
        self._instance_tokens: Dict[int, Token[Any]] = {}  # {id(value): token}
        self._waiting_on: Dict[Token[Any], Tuple[Token[Any], ...]] = {}  # pending token -> its deps
        self._observers: List[InstantiationObserver] = []
        self._parent = parent
        self._config = config or InjectorConfig()

        if diagnostics is None:
            diagnostics = parent.diagnostics if parent is not None else DIDiagnostics()
        self._diagnostics = diagnostics
        if self._config.diagnostics and not any(
            isinstance(listener, ConsoleDiagnosticListener) for listener in diagnostics.listeners
        ):
            diagnostics.add_listener(ConsoleDiagnosticListener(self._config.level))

        if bindings:
            self.register_bindings(bindings)

    @property
    def parent(self) -> Optional["Injector"]:
        return self._parent

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def diagnostics(self) -> DIDiagnostics:
        return self._diagnostics

    @property
    def tokens(self) -> List[Token[Any]]:
        """All non-lazy tokens bound on this injector."""
        return [token for token in self._providers if not token.is_lazy]

    # ── Registration ─────────────────────────────────────────────────────

    def register_bindings(self, bindings: Iterable[Binding[Any]]) -> None:
        """Register several bindings. See :meth:`register_binding`."""
        for binding in bindings:
            self.register_binding(binding)

    def register_binding(self, binding: Binding[Any]) -> None:
        """
        Register a binding, together with a lazy binding for its token.

        Registering again before the token is first resolved replaces the
        earlier binding.

        Raises:
            RebindingResolvedTokenError: If the token (or its lazy companion)
                has already been resolved on this injector
        """
        token = binding.token
        bindings = [binding]
        if not token.is_lazy:
            bindings.append(bind_value(token.lazy, Lazy(self, token)))

        for item in bindings:
            if item.token in self._cache:
                raise RebindingResolvedTokenError(item.token)

        for item in bindings:
            self._providers[item.token] = item.provider

        self._diagnostics.emit(
            DIEventType.REGISTRATION,
            token=token,
            injector=self.name,
            provider_name=binding.provider.meta.name,
            metadata={"kind": binding.provider.kind.value},
        )

    def is_bound(self, token: Token[Any]) -> bool:
        """True if this injector (not its parents) binds the token."""
        return token in self._providers

    # ── Observers ────────────────────────────────────────────────────────

    def on_instantiate(self, observer: InstantiationObserver) -> Callable[[], None]:
        """
        Call ``observer(token, value, dependency_tokens, dependency_values)``
        after every successful resolution on this injector.

        Observers are diagnostic only: their exceptions are logged and ignored.

        Returns:
            A function that unsubscribes the observer
        """
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _notify(self, token: Token[Any], value: Any, dep_tokens: Tuple[Token[Any], ...], dep_values: Tuple[Any, ...]) -> None:
        for observer in list(self._observers):
            try:
                observer(token, value, dep_tokens, dep_values)
            except Exception:
                logger.exception("Instantiation observer failed for token=%s", token)

        self._diagnostics.emit(
            DIEventType.INSTANTIATION,
            token=token,
            injector=self.name,
            metadata={"dependency_tokens": dep_tokens},
        )

    # ── Resolution ───────────────────────────────────────────────────────

    def get(self, token: Token[T], chain: Sequence[Token[Any]] = ()) -> "asyncio.Task[T]":
        """
        Resolve the value for a token.

        Must be called while an event loop is running. The returned task is
        shared by every caller asking for the same token.

        Args:
            token: Token to resolve
            chain: Tokens currently being resolved on this call path

        Returns:
            Awaitable task settling with the value

        Raises:
            CyclicDependencyError: If ``token`` is already in ``chain``
            WireboxError: If the resolution has to start and no event loop is running
        """
        if token in chain:
            raise CyclicDependencyError((*chain, token))

        task = self._cache.get(token)
        if task is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                raise WireboxError(
                    f"Cannot start resolving {token} without a running event loop"
                ) from None
            task = loop.create_task(self._resolve(token, tuple(chain)))
            task.add_done_callback(_consume_exception)
            self._cache[token] = task
        elif chain and not task.done():
            # Joining a pending resolution that already waits on this call path
            path = self._wait_path(token, set(chain))
            if path is not None:
                raise CyclicDependencyError((*chain, *path))
        return task

    def _wait_path(self, start: Token[Any], targets: set) -> Optional[Tuple[Token[Any], ...]]:
        """Path of pending waits leading from ``start`` to any of ``targets``."""
        previous: Dict[Token[Any], Optional[Token[Any]]] = {start: None}
        stack = [start]
        while stack:
            current = stack.pop()
            for dep in self._waiting_on.get(current, ()):
                if dep in previous:
                    continue
                previous[dep] = current
                if dep in targets:
                    path = [dep]
                    while previous[path[-1]] is not None:
                        path.append(previous[path[-1]])
                    return tuple(reversed(path))
                stack.append(dep)
        return None

    def all(self, tokens: Sequence[Token[Any]]) -> "asyncio.Future[List[Any]]":
        """
        Resolve several tokens concurrently.

        Returns:
            Awaitable settling with the values in the order of ``tokens``,
            or failing with the first failure
        """
        return asyncio.gather(*[self.get(token) for token in tokens])

    async def _resolve(self, token: Token[T], chain: Tuple[Token[Any], ...]) -> T:
        self._diagnostics.emit(DIEventType.RESOLUTION_START, token=token, injector=self.name)
        started = time.perf_counter()
        dep_tokens: Tuple[Token[Any], ...] = ()
        dep_values: Tuple[Any, ...] = ()

        try:
            provider = self._providers.get(token)
            if provider is not None:
                dep_tokens, dep_values, value = await self._provide(token, provider, chain)
            elif self._parent is not None:
                value = await self._parent.get(token)
            else:
                raise UnboundTokenError(token)
        except Exception as exc:
            self._errors[token] = exc
            logger.debug("Resolution of token=%s failed: %r", token, exc)
            self._diagnostics.emit(
                DIEventType.RESOLUTION_FAILURE,
                token=token,
                injector=self.name,
                duration=time.perf_counter() - started,
                error=exc,
            )
            raise

        self._instances[token] = value
        self._instance_tokens[id(value)] = token
        self._notify(token, value, dep_tokens, dep_values)
        self._diagnostics.emit(
            DIEventType.RESOLUTION_SUCCESS,
            token=token,
            injector=self.name,
            duration=time.perf_counter() - started,
        )
        return value

    async def _provide(
        self,
        token: Token[T],
        provider: Provider[T],
        chain: Tuple[Token[Any], ...],
    ) -> Tuple[Tuple[Token[Any], ...], Tuple[Any, ...], T]:
        if provider.discovery is Discovery.DEFERRED:
            dep_tokens = tuple(await provider.discover_dependency_tokens())
        else:
            dep_tokens = tuple(provider.dependency_tokens)

        dep_chain = (*chain, token)
        dep_values: Tuple[Any, ...] = ()
        if dep_tokens:
            self._waiting_on[token] = dep_tokens
            try:
                dep_values = tuple(
                    await asyncio.gather(*[self.get(dep, dep_chain) for dep in dep_tokens])
                )
            finally:
                del self._waiting_on[token]

        value = await provider.provide(dep_values)
        return dep_tokens, dep_values, value

    # ── Synchronous queries ──────────────────────────────────────────────

    def get_suspense(self, token: Token[T]) -> T:
        """
        Suspense-style resolver.

        Returns the value if the token is resolved, raises its error if it
        failed, and otherwise starts (or joins) the resolution and raises
        :class:`SuspendedResolution` wrapping the pending task.

        Starting a resolution needs a running event loop; called from plain
        synchronous code on an unstarted token this raises :class:`WireboxError`.
        """
        if token in self._instances:
            return self._instances[token]
        if token in self._errors:
            raise self._errors[token]
        raise SuspendedResolution(self.get(token), (token,))

    def all_suspense(self, tokens: Sequence[Token[Any]]) -> List[Any]:
        """Same as :meth:`get_suspense`, for several tokens (see :meth:`all`)."""
        if all(token in self._instances for token in tokens):
            return [self._instances[token] for token in tokens]
        for token in tokens:
            if token in self._errors:
                raise self._errors[token]
        raise SuspendedResolution(self.all(tokens), tuple(tokens))

    def is_instantiated(self, token: Token[Any]) -> bool:
        """True once the token has been resolved successfully."""
        return token in self._instances

    def get_if_instantiated(self, token: Token[T], default: Optional[T] = None) -> Optional[T]:
        """The token's value if it is already resolved, otherwise ``default``."""
        return self._instances.get(token, default)

    def get_error(self, token: Token[Any]) -> Optional[BaseException]:
        """The error the token's resolution failed with, if it did."""
        return self._errors.get(token)

    def get_token_for_value(self, value: Any) -> Optional[Token[Any]]:
        """The token a resolved value was produced for (identity lookup)."""
        return self._instance_tokens.get(id(value))

    def __repr__(self) -> str:
        return f"<Injector {self.name} tokens={len(self.tokens)} resolved={len(self._instances)}>"

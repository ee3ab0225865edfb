"""
Suspense-style synchronous access.
"""

import pytest

from wirebox import Injector, SuspendedResolution, WireboxError, bind, create_token


@pytest.mark.asyncio
async def test_get_suspense_sync_value(injector, hello_tokens):
    with pytest.raises(SuspendedResolution):
        injector.get_suspense(hello_tokens.hello)
    await injector.get(hello_tokens.hello)
    assert injector.get_suspense(hello_tokens.hello) == "hello"


@pytest.mark.asyncio
async def test_get_suspense_async_factory(injector, hello_tokens):
    with pytest.raises(SuspendedResolution) as excinfo:
        injector.get_suspense(hello_tokens.hello_world)
    assert excinfo.value.tokens == (hello_tokens.hello_world,)
    await injector.get(hello_tokens.hello_world)
    assert injector.get_suspense(hello_tokens.hello_world) == "hello world!"


@pytest.mark.asyncio
async def test_suspension_is_awaitable(injector, hello_tokens, counter):
    with pytest.raises(SuspendedResolution) as excinfo:
        injector.get_suspense(hello_tokens.hello_world)
    assert await excinfo.value == "hello world!"
    assert injector.get_suspense(hello_tokens.hello_world) == "hello world!"
    assert counter.calls == 1


@pytest.mark.asyncio
async def test_suspension_reuses_pending_resolution(injector, hello_tokens):
    pending = injector.get(hello_tokens.hello_world)
    with pytest.raises(SuspendedResolution) as excinfo:
        injector.get_suspense(hello_tokens.hello_world)
    assert excinfo.value.awaitable is pending


@pytest.mark.asyncio
async def test_get_suspense_raises_stored_error():
    Broken = create_token("Broken")
    error = RuntimeError("broken")

    def fail():
        raise error

    injector = Injector([bind(Broken).to_factory(fail)])
    with pytest.raises(SuspendedResolution) as excinfo:
        injector.get_suspense(Broken)
    with pytest.raises(RuntimeError):
        await excinfo.value
    with pytest.raises(RuntimeError) as raised:
        injector.get_suspense(Broken)
    assert raised.value is error


@pytest.mark.asyncio
async def test_all_suspense(injector, hello_tokens):
    tokens = [
        hello_tokens.forty_two,
        hello_tokens.hello,
        hello_tokens.world,
        hello_tokens.hello_world,
    ]
    with pytest.raises(SuspendedResolution):
        injector.all_suspense(tokens)
    await injector.get(hello_tokens.hello_world)
    await injector.get(hello_tokens.forty_two)
    assert injector.all_suspense(tokens) == [42, "hello", "world", "hello world!"]


@pytest.mark.asyncio
async def test_all_suspense_raises_first_stored_error():
    Good = create_token("Good")
    Bad = create_token("Bad")

    def fail():
        raise LookupError("bad")

    injector = Injector([
        bind(Good).to_value(1),
        bind(Bad).to_factory(fail),
    ])
    with pytest.raises(LookupError):
        await injector.get(Bad)
    with pytest.raises(LookupError):
        injector.all_suspense([Good, Bad])


def test_get_suspense_without_event_loop():
    Token = create_token("NeedsLoop")
    injector = Injector([bind(Token).to_value(1)])

    with pytest.raises(WireboxError, match="NeedsLoop"):
        injector.get_suspense(Token)
    assert not injector.is_instantiated(Token)

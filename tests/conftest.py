"""
Shared fixtures for wirebox tests.
"""

from types import SimpleNamespace
import asyncio

import pytest

from wirebox import Injector, bind, create_token


class CallCounter:
    """Counts calls made through ``wrap``."""

    def __init__(self):
        self.calls = 0

    def wrap(self, func):
        def wrapper(*args):
            self.calls += 1
            return func(*args)
        return wrapper


@pytest.fixture
def counter():
    return CallCounter()


@pytest.fixture
def hello_tokens():
    """Tokens bound by ``hello_bindings``."""
    return SimpleNamespace(
        hello=create_token("Hello"),
        world=create_token("World"),
        hello_world=create_token("HelloWorld"),
        forty_two=create_token("FortyTwo"),
    )


@pytest.fixture
def hello_bindings(hello_tokens, counter):
    """Hello/World values and a delayed async factory combining them."""

    async def hello_world(hello, world):
        # Fake some slow I/O
        await asyncio.sleep(0.01)
        return f"{hello} {world}!"

    return [
        bind(hello_tokens.forty_two).to_value(42),
        bind(hello_tokens.hello).to_value("hello"),
        bind(hello_tokens.world).to_value("world"),
        bind(hello_tokens.hello_world).to_async_factory(
            counter.wrap(hello_world), [hello_tokens.hello, hello_tokens.world]
        ),
    ]


@pytest.fixture
def injector(hello_bindings):
    """Provide a fresh injector with the hello bindings."""
    return Injector(hello_bindings)

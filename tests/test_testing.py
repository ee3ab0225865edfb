"""
Testing helpers: MockProvider and override_injector.
"""

import pytest

from wirebox import Injector, bind, create_binding, create_token
from wirebox.testing import MockProvider, override_injector


Mailer = create_token("Mailer")
Signup = create_token("Signup")


class SmtpMailer:
    pass


class FakeMailer:
    pass


class SignupService:
    def __init__(self, mailer):
        self.mailer = mailer


@pytest.fixture
def app_injector():
    return Injector([
        bind(Mailer).to_class(SmtpMailer),
        bind(Signup).to_class(SignupService, [Mailer]),
    ])


@pytest.mark.asyncio
async def test_mock_provider_tracks_calls():
    fake = FakeMailer()
    mock = MockProvider(fake)
    injector = Injector([create_binding(Mailer, mock)])

    assert await injector.get(Mailer) is fake
    assert await injector.get(Mailer) is fake
    assert mock.access_count == 1
    assert mock.provide_calls == [()]

    mock.reset()
    assert mock.access_count == 0


@pytest.mark.asyncio
async def test_override_shadows_without_touching_original(app_injector):
    fake = FakeMailer()
    test_injector = override_injector(app_injector, [
        bind(Mailer).to_value(fake),
        bind(Signup).to_class(SignupService, [Mailer]),
    ])

    service = await test_injector.get(Signup)
    assert service.mailer is fake
    assert test_injector.name == "injector:override"

    original = await app_injector.get(Signup)
    assert isinstance(original.mailer, SmtpMailer)


@pytest.mark.asyncio
async def test_override_falls_back_to_parent(app_injector):
    test_injector = override_injector(app_injector, [], name="fallback")
    service = await test_injector.get(Signup)
    assert isinstance(service.mailer, SmtpMailer)
    assert app_injector.is_instantiated(Signup)

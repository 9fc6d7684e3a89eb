"""Shared fixtures for provider, config and simulator tests."""

import random

import pytest

from shared.models import CreditCard, TransactionRequest
from provider_sim.merchant_provider import TestMerchantServicesProvider


class ScriptedRandom:
    """Replays queued draws so each branch of the provider can be forced."""

    def __init__(self, randrange=(), choice=(), getrandbits=()):
        self._randrange = list(randrange)
        self._choice = list(choice)
        self._getrandbits = list(getrandbits)

    def randrange(self, stop):
        value = self._randrange.pop(0)
        assert 0 <= value < stop
        return value

    def choice(self, seq):
        return seq[self._choice.pop(0)]

    def getrandbits(self, k):
        assert k == 64
        return self._getrandbits.pop(0)

    def exhausted(self) -> bool:
        return not (self._randrange or self._choice or self._getrandbits)


@pytest.fixture
def credit_card():
    return CreditCard(
        card_number="4111111111111111",
        expiration_month=12,
        expiration_year=2030,
        card_code="123",
        first_name="Alice",
        last_name="Smith",
        postal_code="36695",
        country_code="US",
    )


@pytest.fixture
def transaction_request():
    return TransactionRequest(amount=2500, currency="USD", order_number="order_00001")


@pytest.fixture
def make_provider():
    def _make(error_chance=0, decline_chance=0, rng=None, provider_id="test"):
        if rng is None:
            rng = random.Random(1234)
        return TestMerchantServicesProvider(provider_id, error_chance, decline_chance, rng=rng)
    return _make

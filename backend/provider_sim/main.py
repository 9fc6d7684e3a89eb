"""Provider Simulator - HTTP front for test-mode merchant services providers."""

import os
import random
import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Response
from pydantic import BaseModel

from shared.correlation import configure_logging
from shared.middleware import CorrelationMiddleware
from shared.models import (
    AuthorizationResult, CaptureResult, CreditCard, SaleResult,
    Transaction, TransactionRequest, VoidResult,
)
from shared.provider import InvalidArgumentError, SimulatedIOError, UnsupportedOperationError
from provider_sim.failure_injection import FailureConfig, get_provider_config
from provider_sim.merchant_provider import TestMerchantServicesProvider

configure_logging(os.environ.get("LOG_LEVEL", "INFO"))
logger = logging.getLogger("testpay.provider_sim")

app = FastAPI(title="Test Provider Simulator", version="1.0.0")
app.add_middleware(CorrelationMiddleware)

SEED = os.environ.get("SEED")

# One generator shared by every simulated provider
rng = random.Random(int(SEED)) if SEED is not None else random.Random()

providers: dict[str, TestMerchantServicesProvider] = {}
stats: dict[str, dict] = {}


def get_provider(provider_id: str) -> TestMerchantServicesProvider:
    if provider_id not in providers:
        try:
            config = get_provider_config(provider_id)
        except InvalidArgumentError as e:
            raise HTTPException(status_code=500, detail=str(e))
        providers[provider_id] = TestMerchantServicesProvider.from_config(provider_id, config, rng=rng)
        logger.info(f"Created provider {provider_id} with {config.model_dump()}")
    return providers[provider_id]


def _record(provider_id: str, outcome: str) -> None:
    counters = stats.setdefault(provider_id, {
        "total_requests": 0,
        "errors": 0,
        "declines": 0,
        "approvals": 0,
        "completed": 0,
    })
    counters["total_requests"] += 1
    counters[outcome] += 1


def _record_authorization(provider_id: str, result: AuthorizationResult) -> None:
    if result.is_error:
        _record(provider_id, "errors")
    elif result.is_declined:
        _record(provider_id, "declines")
    else:
        _record(provider_id, "approvals")


# === Request/Response Models ===

class PaymentRequest(BaseModel):
    transaction_request: TransactionRequest
    credit_card: CreditCard


class StoreCardResponse(BaseModel):
    provider_unique_id: str


class UpdateCardNumberRequest(BaseModel):
    card_number: str
    expiration_month: int
    expiration_year: int
    card_code: Optional[str] = None


class UpdateExpirationRequest(BaseModel):
    expiration_month: int
    expiration_year: int


class CapabilitiesResponse(BaseModel):
    provider_id: str
    can_store_credit_cards: bool
    can_get_tokenized_credit_cards: bool


class InjectFailureRequest(BaseModel):
    error_chance: Optional[int] = None
    decline_chance: Optional[int] = None


# === Transactions ===

@app.post("/providers/{provider_id}/sale", response_model=SaleResult)
async def sale(provider_id: str, req: PaymentRequest):
    result = get_provider(provider_id).sale(req.transaction_request, req.credit_card)
    _record_authorization(provider_id, result.authorization_result)
    return result


@app.post("/providers/{provider_id}/authorize", response_model=AuthorizationResult)
async def authorize(provider_id: str, req: PaymentRequest):
    result = get_provider(provider_id).authorize(req.transaction_request, req.credit_card)
    _record_authorization(provider_id, result)
    return result


@app.post("/providers/{provider_id}/capture", response_model=CaptureResult)
async def capture(provider_id: str, authorization_result: AuthorizationResult):
    result = get_provider(provider_id).capture(authorization_result)
    _record(provider_id, "completed" if result.is_success else "errors")
    return result


@app.post("/providers/{provider_id}/void", response_model=VoidResult)
async def void(provider_id: str, transaction: Transaction):
    result = get_provider(provider_id).void_transaction(transaction)
    _record(provider_id, "completed" if result.is_success else "errors")
    return result


@app.post("/providers/{provider_id}/credit")
async def credit(provider_id: str, req: PaymentRequest):
    try:
        return get_provider(provider_id).credit(req.transaction_request, req.credit_card)
    except NotImplementedError as e:
        raise HTTPException(status_code=501, detail=str(e))


# === Stored cards ===

@app.get("/providers/{provider_id}/capabilities", response_model=CapabilitiesResponse)
async def capabilities(provider_id: str):
    provider = get_provider(provider_id)
    return CapabilitiesResponse(
        provider_id=provider_id,
        can_store_credit_cards=provider.can_store_credit_cards(),
        can_get_tokenized_credit_cards=provider.can_get_tokenized_credit_cards(),
    )


@app.post("/providers/{provider_id}/cards", response_model=StoreCardResponse)
async def store_card(provider_id: str, card: CreditCard):
    try:
        token = get_provider(provider_id).store_credit_card(card)
    except SimulatedIOError as e:
        raise HTTPException(status_code=500, detail=str(e))
    logger.info(f"Stored card ending {card.last_four} -> {token}")
    return StoreCardResponse(provider_unique_id=token)


@app.put("/providers/{provider_id}/cards/{token}", status_code=204)
async def update_card(provider_id: str, token: str, card: CreditCard):
    card = card.model_copy(update={"provider_unique_id": token})
    try:
        get_provider(provider_id).update_credit_card(card)
    except SimulatedIOError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return Response(status_code=204)


@app.put("/providers/{provider_id}/cards/{token}/number", status_code=204)
async def update_card_number(provider_id: str, token: str, req: UpdateCardNumberRequest):
    card = CreditCard(provider_id=provider_id, provider_unique_id=token)
    try:
        get_provider(provider_id).update_credit_card_number_and_expiration(
            card, req.card_number, req.expiration_month, req.expiration_year, req.card_code
        )
    except SimulatedIOError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return Response(status_code=204)


@app.put("/providers/{provider_id}/cards/{token}/expiration", status_code=204)
async def update_card_expiration(provider_id: str, token: str, req: UpdateExpirationRequest):
    card = CreditCard(provider_id=provider_id, provider_unique_id=token)
    try:
        get_provider(provider_id).update_credit_card_expiration(
            card, req.expiration_month, req.expiration_year
        )
    except SimulatedIOError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return Response(status_code=204)


@app.delete("/providers/{provider_id}/cards/{token}", status_code=204)
async def delete_card(provider_id: str, token: str):
    card = CreditCard(provider_id=provider_id, provider_unique_id=token)
    try:
        get_provider(provider_id).delete_credit_card(card)
    except SimulatedIOError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return Response(status_code=204)


@app.get("/providers/{provider_id}/cards")
async def tokenized_cards(provider_id: str):
    try:
        return get_provider(provider_id).get_tokenized_credit_cards({})
    except UnsupportedOperationError as e:
        raise HTTPException(status_code=400, detail=str(e))


# === Simulator control ===

@app.post("/providers/{provider_id}/inject-failure")
async def inject_failure(provider_id: str, req: InjectFailureRequest):
    current = get_provider(provider_id).config
    merged = {**current.model_dump(), **req.model_dump(exclude_none=True)}
    try:
        new_config = FailureConfig.build(merged["error_chance"], merged["decline_chance"])
    except InvalidArgumentError as e:
        raise HTTPException(status_code=422, detail=str(e))

    providers[provider_id] = TestMerchantServicesProvider.from_config(provider_id, new_config, rng=rng)
    logger.info(f"Updated failure config for {provider_id}: {req.model_dump(exclude_none=True)}")
    return {"message": f"Failure config updated for {provider_id}", "config": new_config.model_dump()}


@app.get("/providers/{provider_id}/state")
async def get_state(provider_id: str):
    provider = get_provider(provider_id)
    return {
        "provider_id": provider_id,
        "failure_config": provider.config.model_dump(),
        **stats.get(provider_id, {"total_requests": 0}),
    }


@app.get("/health")
async def health():
    return {"status": "healthy", "service": "provider-sim"}

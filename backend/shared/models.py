"""Payments API domain models: enums, requests, cards, and transaction results."""

from pydantic import BaseModel, Field, field_validator
from enum import Enum
from datetime import datetime
from typing import Optional


# === Enums ===

class CommunicationResult(str, Enum):
    SUCCESS = "success"
    LOCAL_ERROR = "local_error"
    IO_ERROR = "io_error"
    GATEWAY_ERROR = "gateway_error"


class ErrorCode(str, Enum):
    UNKNOWN = "unknown"
    HASH_CHECK_FAILED = "hash_check_failed"
    INVALID_TRANSACTION_TYPE = "invalid_transaction_type"
    INVALID_PARTNER = "invalid_partner"
    INVALID_MERCHANT_ID = "invalid_merchant_id"
    INVALID_AMOUNT = "invalid_amount"
    INVALID_CURRENCY_CODE = "invalid_currency_code"
    CURRENCY_NOT_SUPPORTED = "currency_not_supported"
    INVALID_CARD_NUMBER = "invalid_card_number"
    INVALID_EXPIRATION_DATE = "invalid_expiration_date"
    CARD_EXPIRED = "card_expired"
    INVALID_CARD_CODE = "invalid_card_code"
    INVALID_CARD_NAME = "invalid_card_name"
    INVALID_CARD_ADDRESS = "invalid_card_address"
    INVALID_CARD_POSTAL_CODE = "invalid_card_postal_code"
    INVALID_CARD_COUNTRY_CODE = "invalid_card_country_code"
    INVALID_CARD_EMAIL = "invalid_card_email"
    INVALID_ORDER_NUMBER = "invalid_order_number"
    INVALID_DESCRIPTION = "invalid_description"
    DUPLICATE = "duplicate"
    APPROVAL_CODE_REQUIRED = "approval_code_required"
    TRANSACTION_NOT_FOUND = "transaction_not_found"
    AUTHORIZATION_EXPIRED = "authorization_expired"
    ALREADY_CAPTURED = "already_captured"
    ALREADY_VOIDED = "already_voided"
    AMOUNT_TOO_HIGH = "amount_too_high"
    ACCOUNT_CLOSED = "account_closed"
    ACCOUNT_NOT_FOUND = "account_not_found"
    PROVIDER_CONFIGURATION_ERROR = "provider_configuration_error"
    RATE_LIMIT = "rate_limit"
    ERROR_TRY_AGAIN = "error_try_again"
    ERROR_TRY_AGAIN_5_MINUTES = "error_try_again_5_minutes"


class ApprovalResult(str, Enum):
    APPROVED = "approved"
    DECLINED = "declined"
    HOLD = "hold"


class DeclineReason(str, Enum):
    NO_SPECIFIC = "no_specific"
    EXPIRED_CARD = "expired_card"
    PICK_UP_CARD = "pick_up_card"
    AVS_MISMATCH = "avs_mismatch"
    CVV2_MISMATCH = "cvv2_mismatch"
    FRAUD_DETECTED = "fraud_detected"
    BLOCKED_CARD = "blocked_card"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    MAX_SALE_EXCEEDED = "max_sale_exceeded"
    MIN_SALE_NOT_MET = "min_sale_not_met"
    VOLUME_EXCEEDED_1_DAY = "volume_exceeded_1_day"
    USAGE_EXCEEDED_1_DAY = "usage_exceeded_1_day"
    VOLUME_EXCEEDED_3_DAYS = "volume_exceeded_3_days"
    USAGE_EXCEEDED_3_DAYS = "usage_exceeded_3_days"
    VOLUME_EXCEEDED_15_DAYS = "volume_exceeded_15_days"
    USAGE_EXCEEDED_15_DAYS = "usage_exceeded_15_days"
    DUPLICATE = "duplicate"
    CARD_NOT_ACTIVE = "card_not_active"
    STOLEN_CARD = "stolen_card"
    LOST_CARD = "lost_card"
    DO_NOT_HONOR = "do_not_honor"
    CALL_ISSUER = "call_issuer"


# === Inputs ===

class TransactionRequest(BaseModel):
    amount: int
    currency: str = "USD"
    order_number: Optional[str] = None
    description: Optional[str] = None
    customer_ip: Optional[str] = None
    test_mode: bool = True
    duplicate_window: int = 120
    metadata: dict = Field(default_factory=dict)


class CreditCard(BaseModel):
    persistence_unique_id: Optional[str] = None
    provider_id: Optional[str] = None
    provider_unique_id: Optional[str] = None
    card_number: Optional[str] = None
    expiration_month: Optional[int] = None
    expiration_year: Optional[int] = None
    card_code: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    street_address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country_code: Optional[str] = None

    @field_validator("expiration_month")
    @classmethod
    def _check_month(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and not 1 <= v <= 12:
            raise ValueError(f"expiration_month must be 1-12, got {v}")
        return v

    @property
    def last_four(self) -> Optional[str]:
        if not self.card_number:
            return None
        return self.card_number[-4:]

    @property
    def masked_card_number(self) -> Optional[str]:
        if not self.card_number:
            return None
        return "X" * (len(self.card_number) - 4) + self.card_number[-4:]


# === Results ===

class TransactionResult(BaseModel):
    provider_id: str
    communication_result: CommunicationResult
    provider_error_code: Optional[str] = None
    error_code: Optional[ErrorCode] = None
    provider_error_message: Optional[str] = None
    provider_unique_id: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.communication_result == CommunicationResult.SUCCESS

    @property
    def is_error(self) -> bool:
        return not self.is_success


class AuthorizationResult(TransactionResult):
    provider_approval_result: Optional[str] = None
    approval_result: Optional[ApprovalResult] = None
    provider_decline_reason: Optional[str] = None
    decline_reason: Optional[DeclineReason] = None
    approval_code: Optional[str] = None

    @property
    def is_approved(self) -> bool:
        return self.is_success and self.approval_result == ApprovalResult.APPROVED

    @property
    def is_declined(self) -> bool:
        return self.is_success and self.approval_result == ApprovalResult.DECLINED


class CaptureResult(TransactionResult):
    pass


class VoidResult(TransactionResult):
    pass


class CreditResult(TransactionResult):
    pass


class SaleResult(BaseModel):
    """Authorization and capture performed in one step."""

    authorization_result: AuthorizationResult
    capture_result: CaptureResult


class Transaction(BaseModel):
    provider_id: str
    authorization_result: AuthorizationResult
    persistence_unique_id: Optional[str] = None
    transaction_request: Optional[TransactionRequest] = None
    credit_card: Optional[CreditCard] = None
    capture_result: Optional[CaptureResult] = None
    void_result: Optional[VoidResult] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class TokenizedCreditCard(BaseModel):
    provider_unique_id: str
    masked_card_number: Optional[str] = None
    expiration_month: Optional[int] = None
    expiration_year: Optional[int] = None

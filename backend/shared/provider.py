"""MerchantServicesProvider interface and the errors providers raise."""

from abc import ABC, abstractmethod
from typing import Optional

from shared.models import (
    AuthorizationResult, CaptureResult, CreditCard, CreditResult,
    SaleResult, TokenizedCreditCard, Transaction, TransactionRequest, VoidResult,
)


class InvalidArgumentError(ValueError):
    pass


class SimulatedIOError(IOError):
    def __init__(self, provider_id: str, operation: str):
        self.provider_id = provider_id
        self.operation = operation
        super().__init__(f"Test-mode simulated {operation} error")


class UnsupportedOperationError(Exception):
    def __init__(self, provider_id: str, operation: str):
        self.provider_id = provider_id
        self.operation = operation
        super().__init__(f"Provider {provider_id} does not support {operation}")


class MerchantServicesProvider(ABC):
    """
    Capability set every payment provider adapter implements.

    Transaction outcomes, including gateway failures, come back as result
    values. Card-management mutators raise ``IOError`` subclasses on failure.
    """

    @abstractmethod
    def get_provider_id(self) -> str:
        pass

    @abstractmethod
    def sale(self, transaction_request: TransactionRequest, credit_card: CreditCard) -> SaleResult:
        pass

    @abstractmethod
    def authorize(self, transaction_request: TransactionRequest, credit_card: CreditCard) -> AuthorizationResult:
        pass

    @abstractmethod
    def capture(self, authorization_result: AuthorizationResult) -> CaptureResult:
        pass

    @abstractmethod
    def void_transaction(self, transaction: Transaction) -> VoidResult:
        pass

    @abstractmethod
    def credit(self, transaction_request: TransactionRequest, credit_card: CreditCard) -> CreditResult:
        pass

    @abstractmethod
    def can_store_credit_cards(self) -> bool:
        pass

    @abstractmethod
    def store_credit_card(self, credit_card: CreditCard) -> str:
        """Store the card and return its provider-unique token."""

    @abstractmethod
    def update_credit_card(self, credit_card: CreditCard) -> None:
        pass

    @abstractmethod
    def update_credit_card_number_and_expiration(
        self,
        credit_card: CreditCard,
        card_number: str,
        expiration_month: int,
        expiration_year: int,
        card_code: Optional[str] = None,
    ) -> None:
        pass

    @abstractmethod
    def update_credit_card_expiration(
        self,
        credit_card: CreditCard,
        expiration_month: int,
        expiration_year: int,
    ) -> None:
        pass

    @abstractmethod
    def delete_credit_card(self, credit_card: CreditCard) -> None:
        pass

    @abstractmethod
    def can_get_tokenized_credit_cards(self) -> bool:
        pass

    @abstractmethod
    def get_tokenized_credit_cards(
        self, persisted_cards: dict[str, CreditCard]
    ) -> dict[str, TokenizedCreditCard]:
        """Map persistence ids to the provider's view of each stored card."""

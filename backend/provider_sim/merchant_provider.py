"""
Test-mode merchant services provider.

Returns random error, decline, and success outcomes without contacting any
gateway. Configuration parameters:

- ``error_chance``: percentage chance of some sort of error during sale,
  authorize, capture, void, and the card-management calls.
- ``decline_chance``: percentage chance of a decline during sale and
  authorize, applied only when no error was drawn.

Known gaps: no AVS, CVV, or review-reason responses, and no hold results.

Provider-unique ids are random 64-bit numbers. Nothing is persisted, so
uniqueness is probabilistic only; fine for a test double, never for
production identifiers.
"""

import logging
import random
from typing import Mapping, Optional

from shared.models import (
    ApprovalResult, AuthorizationResult, CaptureResult, CommunicationResult,
    CreditCard, CreditResult, DeclineReason, ErrorCode, SaleResult,
    TokenizedCreditCard, Transaction, TransactionRequest, VoidResult,
)
from shared.provider import (
    MerchantServicesProvider, SimulatedIOError, UnsupportedOperationError,
)
from provider_sim.failure_injection import FailureConfig

logger = logging.getLogger("testpay.provider")

ERROR_COMMUNICATION_RESULTS = (
    CommunicationResult.LOCAL_ERROR,
    CommunicationResult.IO_ERROR,
    CommunicationResult.GATEWAY_ERROR,
)
APPROVAL_CODE_LENGTH = 6


class TestMerchantServicesProvider(MerchantServicesProvider):
    __test__ = False  # not a pytest test class

    def __init__(
        self,
        provider_id: str,
        error_chance: int,
        decline_chance: int,
        rng: Optional[random.Random] = None,
    ):
        config = FailureConfig.build(error_chance, decline_chance)
        self.provider_id = provider_id
        self._config = config
        self._rng = rng if rng is not None else random.Random()

    @classmethod
    def from_strings(
        cls,
        provider_id: str,
        error_chance: str,
        decline_chance: str,
        rng: Optional[random.Random] = None,
    ) -> "TestMerchantServicesProvider":
        """
        Build from unparsed chances.

        Raises InvalidArgumentError when either value is not an integer in
        the range 0-100.
        """
        config = FailureConfig.parse(error_chance, decline_chance)
        return cls.from_config(provider_id, config, rng=rng)

    @classmethod
    def from_config(
        cls,
        provider_id: str,
        config: FailureConfig,
        rng: Optional[random.Random] = None,
    ) -> "TestMerchantServicesProvider":
        return cls(provider_id, config.error_chance, config.decline_chance, rng=rng)

    @classmethod
    def from_parameters(
        cls,
        provider_id: str,
        parameters: Mapping[str, str],
        rng: Optional[random.Random] = None,
    ) -> "TestMerchantServicesProvider":
        """Build from a framework parameter map (``errorChance``, ``declineChance``)."""
        error_chance = parameters.get("errorChance", parameters.get("error_chance", "0"))
        decline_chance = parameters.get("declineChance", parameters.get("decline_chance", "0"))
        return cls.from_strings(provider_id, error_chance, decline_chance, rng=rng)

    @property
    def error_chance(self) -> int:
        return self._config.error_chance

    @property
    def decline_chance(self) -> int:
        return self._config.decline_chance

    @property
    def config(self) -> FailureConfig:
        return self._config

    def get_provider_id(self) -> str:
        return self.provider_id

    # === Random draws ===

    def _roll(self, chance: int) -> bool:
        return self._rng.randrange(100) < chance

    def _random_error(self) -> tuple[CommunicationResult, ErrorCode]:
        communication_result = self._rng.choice(ERROR_COMMUNICATION_RESULTS)
        error_code = self._rng.choice(list(ErrorCode))
        return communication_result, error_code

    def _new_provider_unique_id(self) -> str:
        value = self._rng.getrandbits(64)
        if value >= 1 << 63:
            value -= 1 << 64
        return format(abs(value), "X")

    def _new_approval_code(self) -> str:
        return "".join(str(self._rng.randrange(10)) for _ in range(APPROVAL_CODE_LENGTH))

    # === Transactions ===

    def _authorize(self, operation: str) -> AuthorizationResult:
        if self._roll(self.error_chance):
            communication_result, error_code = self._random_error()
            logger.warning(
                f"Injected {communication_result.value} ({error_code.value}) "
                f"for {operation} on {self.provider_id}"
            )
            return AuthorizationResult(
                provider_id=self.provider_id,
                communication_result=communication_result,
                error_code=error_code,
            )

        if self._roll(self.decline_chance):
            decline_reason = self._rng.choice(list(DeclineReason))
            provider_unique_id = self._new_provider_unique_id()
            logger.info(
                f"Declined {operation} {provider_unique_id} on {self.provider_id}: "
                f"{decline_reason.value}"
            )
            return AuthorizationResult(
                provider_id=self.provider_id,
                communication_result=CommunicationResult.SUCCESS,
                provider_unique_id=provider_unique_id,
                approval_result=ApprovalResult.DECLINED,
                decline_reason=decline_reason,
            )

        provider_unique_id = self._new_provider_unique_id()
        approval_code = self._new_approval_code()
        logger.info(f"Approved {operation} {provider_unique_id} on {self.provider_id}")
        return AuthorizationResult(
            provider_id=self.provider_id,
            communication_result=CommunicationResult.SUCCESS,
            provider_unique_id=provider_unique_id,
            approval_result=ApprovalResult.APPROVED,
            approval_code=approval_code,
        )

    def sale(self, transaction_request: TransactionRequest, credit_card: CreditCard) -> SaleResult:
        authorization_result = self._authorize("sale")
        return SaleResult(
            authorization_result=authorization_result,
            capture_result=CaptureResult(
                provider_id=self.provider_id,
                communication_result=authorization_result.communication_result,
                error_code=authorization_result.error_code,
                provider_unique_id=authorization_result.provider_unique_id,
            ),
        )

    def authorize(self, transaction_request: TransactionRequest, credit_card: CreditCard) -> AuthorizationResult:
        return self._authorize("authorize")

    def _settle(self, result_cls, operation: str, provider_unique_id: Optional[str]):
        # Capture and void cannot be declined; both echo the prior id
        if self._roll(self.error_chance):
            communication_result, error_code = self._random_error()
            logger.warning(
                f"Injected {communication_result.value} ({error_code.value}) "
                f"for {operation} {provider_unique_id} on {self.provider_id}"
            )
            return result_cls(
                provider_id=self.provider_id,
                communication_result=communication_result,
                error_code=error_code,
                provider_unique_id=provider_unique_id,
            )

        logger.info(f"Completed {operation} {provider_unique_id} on {self.provider_id}")
        return result_cls(
            provider_id=self.provider_id,
            communication_result=CommunicationResult.SUCCESS,
            provider_unique_id=provider_unique_id,
        )

    def capture(self, authorization_result: AuthorizationResult) -> CaptureResult:
        return self._settle(CaptureResult, "capture", authorization_result.provider_unique_id)

    def void_transaction(self, transaction: Transaction) -> VoidResult:
        provider_unique_id = transaction.authorization_result.provider_unique_id
        return self._settle(VoidResult, "void", provider_unique_id)

    def credit(self, transaction_request: TransactionRequest, credit_card: CreditCard) -> CreditResult:
        raise NotImplementedError("credit is not implemented by the test provider")

    # === Stored cards ===

    def _maybe_fail(self, operation: str) -> None:
        if self._roll(self.error_chance):
            logger.warning(f"Injected I/O error for {operation} on {self.provider_id}")
            raise SimulatedIOError(self.provider_id, operation)
        logger.debug(f"{operation} succeeded on {self.provider_id}")

    def can_store_credit_cards(self) -> bool:
        return True

    def store_credit_card(self, credit_card: CreditCard) -> str:
        self._maybe_fail("storeCreditCard")
        return self._new_provider_unique_id()

    def update_credit_card(self, credit_card: CreditCard) -> None:
        self._maybe_fail("updateCreditCard")

    def update_credit_card_number_and_expiration(
        self,
        credit_card: CreditCard,
        card_number: str,
        expiration_month: int,
        expiration_year: int,
        card_code: Optional[str] = None,
    ) -> None:
        self._maybe_fail("updateCreditCardNumberAndExpiration")

    def update_credit_card_expiration(
        self,
        credit_card: CreditCard,
        expiration_month: int,
        expiration_year: int,
    ) -> None:
        self._maybe_fail("updateCreditCardExpiration")

    def delete_credit_card(self, credit_card: CreditCard) -> None:
        self._maybe_fail("deleteCreditCard")

    def can_get_tokenized_credit_cards(self) -> bool:
        return False

    def get_tokenized_credit_cards(
        self, persisted_cards: dict[str, CreditCard]
    ) -> dict[str, TokenizedCreditCard]:
        raise UnsupportedOperationError(self.provider_id, "getTokenizedCreditCards")

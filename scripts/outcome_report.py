"""
Deterministic outcome report for the test provider.
Runs a batch of sales with Luhn-valid test PANs and prints the observed
error / decline / approval split with per-code histograms.
"""

import os
import random
from collections import Counter

from shared.models import CreditCard, TransactionRequest
from provider_sim.failure_injection import get_provider_config
from provider_sim.merchant_provider import TestMerchantServicesProvider

SEED = int(os.environ.get("SEED", 42))
SAMPLES = int(os.environ.get("SAMPLES", 1000))
PROVIDER_ID = os.environ.get("PROVIDER_ID", "flaky")

PAN_PREFIXES = ["4111", "4242", "5500", "5105", "3782"]
AMOUNTS = [499, 999, 1499, 2500, 5000, 10000, 25000]


def generate_pan(rng: random.Random, prefix: str = "4111", length: int = 16) -> str:
    """Generate a Luhn-valid PAN."""
    num = list(prefix)
    while len(num) < length - 1:
        num.append(str(rng.randint(0, 9)))
    digits = [int(d) for d in num]
    # Positions that get doubled once the check digit is appended
    doubled_sum = sum(sum(divmod(d * 2, 10)) for d in digits[-1::-2])
    plain_sum = sum(digits[-2::-2])
    check = (10 - ((doubled_sum + plain_sum) % 10)) % 10
    num.append(str(check))
    return "".join(num)


def run_report(provider: TestMerchantServicesProvider, samples: int, rng: random.Random) -> dict:
    outcomes = Counter()
    error_codes = Counter()
    decline_reasons = Counter()

    for i in range(samples):
        card = CreditCard(
            card_number=generate_pan(rng, rng.choice(PAN_PREFIXES)),
            expiration_month=rng.randint(1, 12),
            expiration_year=rng.randint(2027, 2032),
            card_code=f"{rng.randint(0, 999):03d}",
        )
        request = TransactionRequest(
            amount=rng.choice(AMOUNTS),
            order_number=f"order_{i:05d}",
        )
        auth = provider.sale(request, card).authorization_result
        if auth.is_error:
            outcomes["error"] += 1
            error_codes[auth.error_code.value] += 1
        elif auth.is_declined:
            outcomes["declined"] += 1
            decline_reasons[auth.decline_reason.value] += 1
        else:
            outcomes["approved"] += 1

    return {
        "outcomes": outcomes,
        "error_codes": error_codes,
        "decline_reasons": decline_reasons,
    }


def main():
    config = get_provider_config(PROVIDER_ID)
    rng = random.Random(SEED)
    provider = TestMerchantServicesProvider.from_config(PROVIDER_ID, config, rng=rng)

    print(f"Provider {PROVIDER_ID}: error_chance={config.error_chance}% "
          f"decline_chance={config.decline_chance}% samples={SAMPLES} seed={SEED}")
    report = run_report(provider, SAMPLES, rng)

    for outcome in ("approved", "declined", "error"):
        count = report["outcomes"][outcome]
        print(f"  {outcome:<9} {count:>6} ({count / SAMPLES:.1%})")

    if report["error_codes"]:
        print("\nError codes:")
        for code, count in report["error_codes"].most_common():
            print(f"  {code:<32} {count}")

    if report["decline_reasons"]:
        print("\nDecline reasons:")
        for reason, count in report["decline_reasons"].most_common():
            print(f"  {reason:<32} {count}")


if __name__ == "__main__":
    main()

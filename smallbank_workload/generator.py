"""
Workload generator for Smallbank playlists.

A generator emits `num_accounts` CREATE_ACCOUNT records (customer ids 0, 1, 2,
... in order) followed by `num_transactions` operations drawn uniformly from
the five remaining transaction types. Given a seed, the sequence is fully
reproducible.

Usage:
    from smallbank_workload.generator import generate

    for record in generate(num_accounts=10, num_transactions=100, seed=42):
        ...
"""

from __future__ import annotations

import random
from typing import Callable, Iterator, Optional, Tuple

from smallbank_workload.domain.models import (
    Amalgamate,
    CreateAccount,
    DepositChecking,
    SendPayment,
    TransactionRecord,
    TransactSavings,
    WorkloadPlan,
    WriteCheck,
)
from smallbank_workload.errors import InvalidConfiguration
from smallbank_workload.utils.logging import get_logger

log = get_logger(__name__)

INITIAL_BALANCE = 1_000_000
MIN_AMOUNT = 10
MAX_AMOUNT = 200  # exclusive

# Rejection sampling needs num_accounts / (num_accounts - 1) draws on average
# (at most 2); this cap is only reachable with a broken random source.
MAX_RESAMPLES = 1_000


class SmallbankGenerator(Iterator[TransactionRecord]):
    """
    Lazy, finite, non-restartable iterator over the records of a plan.

    The random source belongs to this instance and must not be shared between
    generation requests.
    """

    def __init__(self, plan: WorkloadPlan) -> None:
        plan.validate_references()
        self.plan = plan
        # random.Random seeds from abs(seed); map signed seeds onto distinct u32 values
        self._rng = (
            random.Random(plan.seed & 0xFFFFFFFF) if plan.seed is not None else random.Random()
        )
        self._current_account = 0
        self._current_transaction = 0
        self._operations: Tuple[Callable[[], TransactionRecord], ...] = (
            self._make_deposit_checking,
            self._make_write_check,
            self._make_transact_savings,
            self._make_send_payment,
            self._make_amalgamate,
        )

    @property
    def generated(self) -> int:
        return self._current_account + self._current_transaction

    @property
    def remaining(self) -> int:
        return self.plan.total - self.generated

    def __iter__(self) -> "SmallbankGenerator":
        return self

    def __next__(self) -> TransactionRecord:
        if self._current_account < self.plan.num_accounts:
            record = self._make_create_account(self._current_account)
            self._current_account += 1
            if self._current_account == self.plan.num_accounts and self.plan.num_transactions:
                log.debug(
                    "Accounts created; generating operations",
                    extra={"accounts": self.plan.num_accounts},
                )
            return record
        if self._current_transaction < self.plan.num_transactions:
            make = self._operations[self._rng.randrange(len(self._operations))]
            self._current_transaction += 1
            return make()
        raise StopIteration

    @staticmethod
    def _make_create_account(customer_id: int) -> CreateAccount:
        return CreateAccount(
            customer_id=customer_id,
            customer_name=f"customer_{customer_id:06d}",
            initial_savings_balance=INITIAL_BALANCE,
            initial_checking_balance=INITIAL_BALANCE,
        )

    def _customer(self) -> int:
        return self._rng.randrange(self.plan.num_accounts)

    def _amount(self) -> int:
        return self._rng.randrange(MIN_AMOUNT, MAX_AMOUNT)

    def _make_deposit_checking(self) -> DepositChecking:
        return DepositChecking(customer_id=self._customer(), amount=self._amount())

    def _make_write_check(self) -> WriteCheck:
        return WriteCheck(customer_id=self._customer(), amount=self._amount())

    def _make_transact_savings(self) -> TransactSavings:
        return TransactSavings(customer_id=self._customer(), amount=self._amount())

    def _make_send_payment(self) -> SendPayment:
        source = self._customer()
        dest = self._next_non_matching(source)
        return SendPayment(source_customer_id=source, dest_customer_id=dest, amount=self._amount())

    def _make_amalgamate(self) -> Amalgamate:
        source = self._customer()
        dest = self._next_non_matching(source)
        return Amalgamate(source_customer_id=source, dest_customer_id=dest)

    def _next_non_matching(self, exclude: int) -> int:
        """Draw a customer id different from `exclude` by rejection sampling."""
        if self.plan.num_accounts <= 1:
            raise InvalidConfiguration(
                "cannot pick a distinct destination with fewer than two accounts"
            )
        for _ in range(MAX_RESAMPLES):
            selected = self._customer()
            if selected != exclude:
                return selected
        raise InvalidConfiguration(
            f"no destination distinct from {exclude} after {MAX_RESAMPLES} draws"
        )


def generate(
    num_accounts: int, num_transactions: int, seed: Optional[int] = None
) -> SmallbankGenerator:
    """
    Create a generator for the given parameters.

    Invalid parameters raise `InvalidConfiguration` here, before any record is
    produced.
    """
    return SmallbankGenerator(WorkloadPlan.of(num_accounts, num_transactions, seed))


__all__ = [
    "INITIAL_BALANCE",
    "MAX_AMOUNT",
    "MIN_AMOUNT",
    "SmallbankGenerator",
    "generate",
]

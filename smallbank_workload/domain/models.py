"""
Domain models for the Smallbank workload generator.

Each Smallbank operation is a frozen pydantic model tagged with a literal
`transaction_type`. `TransactionRecord` is the tagged union over all six
variants; consumers dispatch on it with an exhaustive `match` so that adding a
variant fails loudly at every site that needs an update.
"""
from __future__ import annotations

from typing import Annotated, Any, Dict, Literal, Optional, Tuple, Type, Union, assert_never

from pydantic import BaseModel, Field, ValidationError, model_validator

from smallbank_workload.errors import InvalidConfiguration

U32_MAX = 2**32 - 1
I32_MIN = -(2**31)
I32_MAX = 2**31 - 1

Uint32 = Annotated[int, Field(ge=0, le=U32_MAX)]
Int32 = Annotated[int, Field(ge=I32_MIN, le=I32_MAX)]

# Strict so that YAML booleans and numeric strings are not coerced into ints.
_RECORD_CONFIG = {
    "frozen": True,
    "strict": True,
    "extra": "ignore",
}


class CreateAccount(BaseModel):
    """Open a customer account with initial savings and checking balances."""

    transaction_type: Literal["create_account"] = "create_account"
    customer_id: Uint32 = Field(..., description="Customer identifier.")
    customer_name: str = Field(..., description="Display name of the customer.")
    initial_savings_balance: Uint32 = Field(..., description="Opening savings balance.")
    initial_checking_balance: Uint32 = Field(..., description="Opening checking balance.")

    model_config = _RECORD_CONFIG


class DepositChecking(BaseModel):
    transaction_type: Literal["deposit_checking"] = "deposit_checking"
    customer_id: Uint32
    amount: Uint32

    model_config = _RECORD_CONFIG


class WriteCheck(BaseModel):
    transaction_type: Literal["write_check"] = "write_check"
    customer_id: Uint32
    amount: Uint32

    model_config = _RECORD_CONFIG


class TransactSavings(BaseModel):
    """
    Adjust the savings balance. The amount is signed: a negative value is a
    withdrawal, although the generator only ever produces deposits.
    """

    transaction_type: Literal["transact_savings"] = "transact_savings"
    customer_id: Uint32
    amount: Int32

    model_config = _RECORD_CONFIG


class _TwoPartyRecord(BaseModel):
    source_customer_id: Uint32
    dest_customer_id: Uint32

    model_config = _RECORD_CONFIG

    @model_validator(mode="after")
    def _check_distinct_parties(self) -> "_TwoPartyRecord":
        if self.source_customer_id == self.dest_customer_id:
            raise ValueError("source_customer_id and dest_customer_id must differ")
        return self


class SendPayment(_TwoPartyRecord):
    """Move `amount` from the source checking account to the destination."""

    transaction_type: Literal["send_payment"] = "send_payment"
    amount: Uint32


class Amalgamate(_TwoPartyRecord):
    """Merge all funds of the source customer into the destination."""

    transaction_type: Literal["amalgamate"] = "amalgamate"


TransactionRecord = Annotated[
    Union[CreateAccount, DepositChecking, WriteCheck, TransactSavings, SendPayment, Amalgamate],
    Field(discriminator="transaction_type"),
]

RECORD_TYPES: Dict[str, Type[BaseModel]] = {
    "create_account": CreateAccount,
    "deposit_checking": DepositChecking,
    "write_check": WriteCheck,
    "transact_savings": TransactSavings,
    "send_payment": SendPayment,
    "amalgamate": Amalgamate,
}


def customer_ids(record: TransactionRecord) -> Tuple[int, ...]:
    """
    Return the customer ids referenced by `record`.

    Single-party operations reference one id; payments and amalgamations
    reference the source first and the destination second.
    """
    match record:
        case CreateAccount() | DepositChecking() | WriteCheck() | TransactSavings():
            return (record.customer_id,)
        case SendPayment() | Amalgamate():
            return (record.source_customer_id, record.dest_customer_id)
        case _:
            assert_never(record)


class WorkloadPlan(BaseModel):
    """
    Parameters of one generation request.

    A plan is immutable; the generator consuming it owns all mutable state.
    """

    num_accounts: int = Field(..., ge=0, le=U32_MAX + 1, description="CREATE_ACCOUNT records.")
    num_transactions: int = Field(..., ge=0, description="Operation records after the accounts.")
    seed: Optional[Int32] = Field(None, description="RNG seed; None means non-reproducible.")

    model_config = {
        "frozen": True,
    }

    @classmethod
    def of(
        cls, num_accounts: int, num_transactions: int, seed: Optional[int] = None
    ) -> "WorkloadPlan":
        """Build a plan, reporting invalid parameters as `InvalidConfiguration`."""
        try:
            return cls(num_accounts=num_accounts, num_transactions=num_transactions, seed=seed)
        except ValidationError as exc:
            raise InvalidConfiguration(_first_error(exc)) from exc

    @property
    def total(self) -> int:
        return self.num_accounts + self.num_transactions

    def validate_references(self) -> None:
        """
        Reject plans whose operations could not reference valid accounts.

        With one account a payment or amalgamation can never find a distinct
        destination, so the plan is refused regardless of which operations the
        seed would actually draw.
        """
        if self.num_transactions == 0:
            return
        if self.num_accounts == 0:
            raise InvalidConfiguration(
                f"num_transactions={self.num_transactions} requires at least one account"
            )
        if self.num_accounts == 1:
            raise InvalidConfiguration(
                "num_accounts must be at least 2 when transactions are requested; "
                "send_payment and amalgamate need distinct source and destination"
            )


def _first_error(exc: ValidationError) -> str:
    error: Dict[str, Any] = exc.errors()[0]
    location = ".".join(str(part) for part in error.get("loc", ()))
    return f"{location}: {error.get('msg')}" if location else str(error.get("msg"))


__all__ = [
    "Amalgamate",
    "CreateAccount",
    "DepositChecking",
    "I32_MAX",
    "I32_MIN",
    "RECORD_TYPES",
    "SendPayment",
    "TransactSavings",
    "TransactionRecord",
    "U32_MAX",
    "WorkloadPlan",
    "WriteCheck",
    "customer_ids",
]

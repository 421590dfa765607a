"""
Domain package for the Smallbank workload generator.

Exports the transaction record variants and the workload plan. Keep this
package focused on data definitions and validation concerns.
"""

from smallbank_workload.domain.models import (
    RECORD_TYPES,
    Amalgamate,
    CreateAccount,
    DepositChecking,
    SendPayment,
    TransactionRecord,
    TransactSavings,
    WorkloadPlan,
    WriteCheck,
    customer_ids,
)

__all__ = [
    "RECORD_TYPES",
    "Amalgamate",
    "CreateAccount",
    "DepositChecking",
    "SendPayment",
    "TransactSavings",
    "TransactionRecord",
    "WorkloadPlan",
    "WriteCheck",
    "customer_ids",
]

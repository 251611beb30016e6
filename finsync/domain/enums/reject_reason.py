"""Reason codes for rejected remote records."""

from enum import Enum


class RejectReason(str, Enum):
    """Why a remote transaction snapshot could not be reconciled.

    Rejected records are reported on the sync run and skipped; they never
    abort the batch.
    """

    MISSING_EXTERNAL_ID = "missing_external_id"
    ACCOUNT_MISMATCH = "account_mismatch"
    MISSING_TRANSACTION_DATE = "missing_transaction_date"
    MALFORMED_AMOUNT = "malformed_amount"
    AMOUNT_OUT_OF_RANGE = "amount_out_of_range"

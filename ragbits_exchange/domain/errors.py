"""Domain errors (typed) for the paid-query pipeline.

Why: One error family for the application layer; adapters translate library
     exceptions into these, the HTTP layer maps them to status codes.
"""

from dataclasses import dataclass


class DomainError(Exception):
    """Base class for domain-specific errors."""


class ValidationError(DomainError):
    """Missing or malformed request fields."""


class NotFoundError(DomainError):
    """Requested record (dataset, proof) does not exist."""


class DatasetNotFoundError(NotFoundError):
    """No ledger record or stored object exists for a dataset root hash."""


class DatasetInactiveError(DomainError):
    """Dataset exists but was deactivated on the ledger."""


class NoRelevantDataError(DomainError):
    """No chunk of the dataset shares a token with the query."""


@dataclass(frozen=True)
class InsufficientBalanceError(DomainError):
    """Balance below the cost of the retrieved chunks (payment challenge).

    Amounts are in wei.
    """

    required: int
    balance: int
    chunks_count: int
    contract_address: str = ""

    def __str__(self) -> str:
        return f"insufficient balance: required {self.required}, available {self.balance}"


class StorageUnavailableError(DomainError):
    """Content-addressed storage failed or content could not be addressed."""


class InferenceUnavailableError(DomainError):
    """Remote inference failed. Absorbed by the synthesizer fallback."""


class LedgerError(DomainError):
    """Ledger read failed."""


class ProofRecordingFailedError(DomainError):
    """Proof transaction reverted or emitted no QueryProcessed event."""


@dataclass(frozen=True)
class GatewayTimeoutError(DomainError):
    """A remote call exceeded its timeout.

    For ledger writes ``tx_hash`` is set: the transaction may still finalize,
    so it must be looked up before anything is resubmitted.
    """

    gateway: str
    timeout_s: float
    tx_hash: str | None = None

    def __str__(self) -> str:
        msg = f"{self.gateway} timed out after {self.timeout_s:g}s"
        if self.tx_hash:
            msg += f" (pending tx {self.tx_hash})"
        return msg

"""Ledger port: balances, dataset descriptors and proof records on-chain."""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from ragbits_exchange.domain.models import DatasetInfo, Proof


@runtime_checkable
class LedgerPort(Protocol):
    """Narrow contract surface used by the query pipeline.

    Reads are side-effect free. ``record_proof`` is a state-changing
    transaction and is NOT idempotent: after a timeout the caller must look
    the transaction up instead of resubmitting.
    """

    contract_address: str
    service_address: str

    def get_balance(self, account: str) -> int:
        """Deposited balance of ``account`` in wei."""
        ...

    def get_dataset_info(self, dataset_hash: str) -> DatasetInfo:
        """Raises DatasetNotFoundError when the ledger has no record."""
        ...

    def record_proof(
        self,
        answer_hash: str,
        dataset_hash: str,
        chunk_ids: Sequence[int],
        user: str,
        model_used: str,
    ) -> int:
        """Submit a proof, wait for finality, return the ledger-assigned proof id.

        Raises:
            ProofRecordingFailedError: reverted, or no QueryProcessed event emitted
            GatewayTimeoutError: receipt not available within the timeout
        """
        ...

    def get_proof(self, proof_id: int) -> Proof:
        """Raises NotFoundError for unknown ids."""
        ...

    def is_authorized(self) -> bool:
        """Whether the service account may call ``record_proof``."""
        ...

    def get_service_balance(self) -> int:
        """Native balance of the service account (pays gas), in wei."""
        ...

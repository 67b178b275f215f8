"""web3.py adapter for the dataset exchange contract.

Why: Reads go through ``eth_call``; proof recording is a signed transaction
     sent from the service account, which pays gas while the contract debits
     the user's deposited balance.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from importlib import import_module
from typing import Any, TypeVar

from ragbits_exchange.application.ports.ledger_port import LedgerPort
from ragbits_exchange.domain.errors import (
    DatasetNotFoundError,
    DomainError,
    GatewayTimeoutError,
    LedgerError,
    NotFoundError,
    ProofRecordingFailedError,
    ValidationError,
)
from ragbits_exchange.domain.models import DatasetInfo, Proof
from ragbits_exchange.infrastructure.ledger.contract_abi import EXCHANGE_ABI
from ragbits_exchange.infrastructure.ledger.events import (
    QUERY_PROCESSED_SIGNATURE,
    event_topic,
    extract_proof_id,
    to_hex,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

ZERO_ADDRESS = "0x" + "0" * 40
ZERO_BYTES32 = b"\x00" * 32


@dataclass
class LedgerConfig:
    """Connection settings for the exchange contract."""

    rpc_url: str  # e.g. "https://evmrpc-testnet.0g.ai/"
    contract_address: str
    private_key: str = ""  # empty: read-only, proofs cannot be recorded
    rpc_timeout_s: float = 30.0
    receipt_timeout_s: float = 120.0


def _bytes32(value: str) -> bytes:
    try:
        raw = bytes.fromhex(value[2:] if value.startswith("0x") else value)
    except ValueError as ex:
        raise ValidationError(f"not a hex string: {value!r}") from ex
    if len(raw) != 32:
        raise ValidationError(f"expected 32 bytes, got {len(raw)}: {value!r}")
    return raw


class Web3LedgerAdapter(LedgerPort):
    """Ledger port implementation over an EVM JSON-RPC endpoint."""

    def __init__(self, cfg: LedgerConfig) -> None:
        self._cfg = cfg
        try:
            web3 = import_module("web3")
            self._exceptions: Any = import_module("web3.exceptions")
            self._requests: Any = import_module("requests")
        except Exception as ex:
            raise LedgerError(f"web3 init failed: {ex}") from ex

        self._Web3: Any = web3.Web3
        self._w3: Any = self._Web3(
            self._Web3.HTTPProvider(cfg.rpc_url, request_kwargs={"timeout": cfg.rpc_timeout_s})
        )
        self._account: Any | None = (
            self._w3.eth.account.from_key(cfg.private_key) if cfg.private_key else None
        )
        self.contract_address: str = self._Web3.to_checksum_address(cfg.contract_address)
        self.service_address: str = self._account.address if self._account else ""
        self._contract: Any = self._w3.eth.contract(address=self.contract_address, abi=EXCHANGE_ABI)
        self._query_processed_topic = event_topic(QUERY_PROCESSED_SIGNATURE)

    # ===== Reads =====

    def get_balance(self, account: str) -> int:
        address = self._checksum(account)
        return int(self._read("userBalances", lambda: self._fns.userBalances(address).call()))

    def get_dataset_info(self, dataset_hash: str) -> DatasetInfo:
        key = _bytes32(dataset_hash)
        publisher, metadata, price, root, total, active = self._read(
            "getDatasetInfo", lambda: self._fns.getDatasetInfo(key).call()
        )
        if publisher == ZERO_ADDRESS:
            raise DatasetNotFoundError(f"dataset {dataset_hash} is not registered")
        return DatasetInfo(
            root_hash=to_hex(root),
            publisher=publisher,
            metadata=metadata,
            price_per_chunk=int(price),
            total_chunks=int(total),
            active=bool(active),
        )

    def get_proof(self, proof_id: int) -> Proof:
        try:
            answer, dataset, chunk_ids, user, ts, paid, model = self._read(
                "proofs", lambda: self._fns.proofs(int(proof_id)).call()
            )
        except LedgerError as ex:
            if isinstance(ex.__cause__, self._exceptions.ContractLogicError):
                raise NotFoundError(f"proof {proof_id} does not exist") from ex
            raise
        if bytes(answer) == ZERO_BYTES32:
            raise NotFoundError(f"proof {proof_id} does not exist")
        return Proof(
            proof_id=int(proof_id),
            answer_hash=to_hex(answer),
            dataset_hash=to_hex(dataset),
            chunk_ids=tuple(int(c) for c in chunk_ids),
            user=user,
            amount_paid=int(paid),
            model_used=model,
            timestamp=int(ts),
        )

    def is_authorized(self) -> bool:
        if not self.service_address:
            return False
        address = self.service_address
        return bool(
            self._read("authorizedServices", lambda: self._fns.authorizedServices(address).call())
        )

    def get_service_balance(self) -> int:
        if not self.service_address:
            return 0
        return int(self._read("getBalance", lambda: self._w3.eth.get_balance(self.service_address)))

    # ===== Writes =====

    def record_proof(
        self,
        answer_hash: str,
        dataset_hash: str,
        chunk_ids: Sequence[int],
        user: str,
        model_used: str,
    ) -> int:
        if self._account is None:
            raise ProofRecordingFailedError("no service key configured, cannot sign proofs")

        fn = self._fns.recordProof(
            _bytes32(answer_hash),
            _bytes32(dataset_hash),
            [int(c) for c in chunk_ids],
            self._checksum(user),
            model_used,
        )
        tx_hash = self._send(fn)
        logger.info("Submitted recordProof tx %s", tx_hash)

        try:
            receipt = self._w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self._cfg.receipt_timeout_s
            )
        except (self._exceptions.TimeExhausted, self._requests.exceptions.Timeout) as ex:
            # The transaction may still finalize; never resubmit blindly.
            raise GatewayTimeoutError(
                gateway="ledger", timeout_s=self._cfg.receipt_timeout_s, tx_hash=tx_hash
            ) from ex
        except Exception as ex:
            raise ProofRecordingFailedError(f"waiting for {tx_hash} failed: {ex}") from ex

        if receipt.get("status") != 1:
            raise ProofRecordingFailedError(f"transaction {tx_hash} reverted")
        return extract_proof_id(receipt.get("logs") or [], self._query_processed_topic)

    def _send(self, fn: Any) -> str:
        assert self._account is not None
        sender = self._account.address
        try:
            tx = fn.build_transaction(
                {
                    "from": sender,
                    "nonce": self._w3.eth.get_transaction_count(sender, "pending"),
                    "chainId": self._w3.eth.chain_id,
                }
            )
            signed = self._account.sign_transaction(tx)
            return to_hex(self._w3.eth.send_raw_transaction(signed.raw_transaction))
        except self._requests.exceptions.Timeout as ex:
            raise GatewayTimeoutError(gateway="ledger", timeout_s=self._cfg.rpc_timeout_s) from ex
        except self._exceptions.ContractLogicError as ex:
            raise ProofRecordingFailedError(f"recordProof would revert: {ex}") from ex
        except Exception as ex:
            raise ProofRecordingFailedError(f"recordProof submission failed: {ex}") from ex

    # ===== Helpers =====

    @property
    def _fns(self) -> Any:
        return self._contract.functions

    def _checksum(self, address: str) -> str:
        try:
            return self._Web3.to_checksum_address(address)
        except Exception as ex:
            raise ValidationError(f"invalid account address: {address!r}") from ex

    def _read(self, what: str, call: Callable[[], T]) -> T:
        try:
            return call()
        except DomainError:
            raise
        except self._requests.exceptions.Timeout as ex:
            raise GatewayTimeoutError(gateway="ledger", timeout_s=self._cfg.rpc_timeout_s) from ex
        except Exception as ex:
            raise LedgerError(f"{what} failed: {ex}") from ex

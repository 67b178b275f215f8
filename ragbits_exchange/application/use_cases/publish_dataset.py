from __future__ import annotations

import logging

from ragbits_exchange.application.dto.publish_dto import PublishReceipt, PublishRequest
from ragbits_exchange.application.services.dataset_storage import DatasetStorage
from ragbits_exchange.domain.errors import DomainError, StorageUnavailableError, ValidationError
from ragbits_exchange.domain.services.amounts import parse_ether
from ragbits_exchange.domain.services.identifiers import is_account_address
from ragbits_exchange.domain.types import Result

logger = logging.getLogger(__name__)


class PublishDataset:
    """
    Uploads a dataset file and returns the parameters for ledger registration.

    Registration itself (``publishDataset``) is signed by the publisher's own
    wallet; this service never submits it.
    """

    def __init__(self, storage: DatasetStorage, contract_address: str) -> None:
        self.storage = storage
        self.contract_address = contract_address

    def execute(self, req: PublishRequest) -> Result[PublishReceipt, DomainError]:
        if not is_account_address(req.publisher_address):
            return Result.failure(
                ValidationError("publisherAddress must be a 0x-prefixed 20-byte hex address")
            )
        if not req.metadata or not req.metadata.strip():
            return Result.failure(ValidationError("metadata must not be empty"))
        try:
            price_wei = parse_ether(req.price_per_chunk)
        except ValidationError as ex:
            return Result.failure(ex)

        try:
            upload = self.storage.upload(req.file_path, req.metadata)
        except DomainError as ex:
            return Result.failure(ex)
        except Exception as ex:
            logger.error("Dataset upload failed: %s", ex, exc_info=ex)
            return Result.failure(StorageUnavailableError(f"upload failed: {ex}"))

        logger.info(
            "Publisher %s uploaded %s (%d chunks at %d wei)",
            req.publisher_address,
            upload.root_hash,
            upload.total_chunks,
            price_wei,
        )
        return Result.success(
            PublishReceipt(
                root_hash=upload.root_hash,
                total_chunks=upload.total_chunks,
                metadata=req.metadata,
                price_per_chunk_wei=price_wei,
                contract_address=self.contract_address,
            )
        )

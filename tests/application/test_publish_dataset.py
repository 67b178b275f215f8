"""Tests for the PublishDataset use case."""

from pathlib import Path

import pytest
from fakes import CONTRACT, DATASET_TEXT, PUBLISHER, ROOT, FakeContentStore

from ragbits_exchange.application.dto.publish_dto import PublishReceipt, PublishRequest
from ragbits_exchange.application.services.dataset_storage import DatasetStorage
from ragbits_exchange.application.use_cases.publish_dataset import PublishDataset
from ragbits_exchange.domain.errors import StorageUnavailableError, ValidationError


@pytest.fixture
def dataset_file(tmp_path: Path) -> Path:
    path = tmp_path / "energy.txt"
    path.write_text(DATASET_TEXT, encoding="utf-8")
    return path


def publish(path: Path, publisher=PUBLISHER, metadata="ipfs://energy", price="0.001"):
    uc = PublishDataset(storage=DatasetStorage(FakeContentStore()), contract_address=CONTRACT)
    return uc.execute(
        PublishRequest(
            file_path=path, publisher_address=publisher, metadata=metadata, price_per_chunk=price
        )
    )


def test_publish_returns_ledger_parameters(dataset_file):
    result = publish(dataset_file)

    assert result.ok and result.value is not None
    receipt = result.value
    assert receipt.contract_address == CONTRACT
    assert receipt.ledger_params() == {
        "rootHash": ROOT,
        "metadataURI": "ipfs://energy",
        "pricePerChunk": "1000000000000000",
        "totalChunks": 3,
    }


@pytest.mark.parametrize(
    "kwargs",
    [
        {"publisher": "0xnope"},
        {"metadata": "  "},
        {"price": "-0.1"},
        {"price": "cheap"},
    ],
)
def test_invalid_requests(dataset_file, kwargs):
    result = publish(dataset_file, **kwargs)
    assert isinstance(result.error, ValidationError)


def test_empty_dataset_is_rejected_before_upload(tmp_path):
    path = tmp_path / "blank.txt"
    path.write_text("   \n\n   \n", encoding="utf-8")
    store = FakeContentStore()
    storage = DatasetStorage(store)
    uc = PublishDataset(storage=storage, contract_address=CONTRACT)

    result = uc.execute(
        PublishRequest(
            file_path=path, publisher_address=PUBLISHER, metadata="m", price_per_chunk="0.001"
        )
    )

    assert isinstance(result.error, ValidationError)
    assert store.puts == 0
    assert storage.cached_datasets() == []


def test_unreadable_file_is_storage_error(tmp_path):
    result = publish(tmp_path / "missing.txt")
    assert isinstance(result.error, StorageUnavailableError)


def test_ledger_params_price_is_a_wei_string():
    receipt = PublishReceipt(
        root_hash=ROOT,
        total_chunks=1,
        metadata="m",
        price_per_chunk_wei=10**30,
        contract_address=CONTRACT,
    )
    assert receipt.ledger_params()["pricePerChunk"] == str(10**30)

"""ABI fragments of the dataset exchange contract used by this service."""

from typing import Any


def _fn(
    name: str,
    inputs: list[tuple[str, str]],
    outputs: list[tuple[str, str]],
    mutability: str = "view",
) -> dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "stateMutability": mutability,
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "outputs": [{"name": n, "type": t} for n, t in outputs],
    }


EXCHANGE_ABI: list[dict[str, Any]] = [
    _fn(
        "publishDataset",
        [
            ("_rootHash", "bytes32"),
            ("_metadataURI", "string"),
            ("_pricePerChunk", "uint256"),
            ("_totalChunks", "uint256"),
        ],
        [],
        "nonpayable",
    ),
    _fn("userBalances", [("", "address")], [("", "uint256")]),
    _fn(
        "getDatasetInfo",
        [("", "bytes32")],
        [
            ("publisher", "address"),
            ("metadataURI", "string"),
            ("pricePerChunk", "uint256"),
            ("rootHash", "bytes32"),
            ("totalChunks", "uint256"),
            ("active", "bool"),
        ],
    ),
    _fn(
        "recordProof",
        [
            ("_answerHash", "bytes32"),
            ("_datasetHash", "bytes32"),
            ("_chunkIds", "uint256[]"),
            ("_user", "address"),
            ("_modelUsed", "string"),
        ],
        [("", "uint256")],
        "nonpayable",
    ),
    _fn(
        "proofs",
        [("", "uint256")],
        [
            ("answerHash", "bytes32"),
            ("datasetHash", "bytes32"),
            ("chunkIds", "uint256[]"),
            ("user", "address"),
            ("timestamp", "uint256"),
            ("amountPaid", "uint256"),
            ("modelUsed", "string"),
        ],
    ),
    _fn("authorizedServices", [("", "address")], [("", "bool")]),
    {
        "type": "event",
        "name": "QueryProcessed",
        "anonymous": False,
        "inputs": [
            {"name": "proofId", "type": "uint256", "indexed": True},
            {"name": "user", "type": "address", "indexed": True},
            {"name": "answerHash", "type": "bytes32", "indexed": False},
        ],
    },
]

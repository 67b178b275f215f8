"""Command line client for the exchange.

Why: Same use cases as the HTTP API, for operators and scripted checks.
"""

import argparse
import sys
from importlib import import_module
from pathlib import Path

from ragbits_exchange.application.dto.publish_dto import PublishRequest
from ragbits_exchange.application.dto.query_dto import QueryRequest
from ragbits_exchange.config.compose import build_container
from ragbits_exchange.config.logging_setup import configure_logging
from ragbits_exchange.config.settings import AppSettings
from ragbits_exchange.domain.errors import InsufficientBalanceError
from ragbits_exchange.domain.services.amounts import format_ether


def _print_error(err: BaseException) -> None:
    print(f"✗ {type(err).__name__}: {err}")
    if isinstance(err, InsufficientBalanceError):
        print(
            f"  → Deposit at least {format_ether(err.required - err.balance)} "
            f"into {err.contract_address or 'the exchange contract'}"
        )


def cmd_ask(args) -> int:
    """Run one paid query and print answer, citations and proof."""
    uc = build_container().get_query_use_case()
    result = uc.execute(
        QueryRequest(query=args.query, dataset_hash=args.dataset, user_address=args.user)
    )
    if not result.ok or result.value is None:
        assert result.error is not None
        _print_error(result.error)
        return 1

    paid = result.value
    print("\n" + "=" * 80)
    print("ANSWER:")
    print("=" * 80)
    print(paid.answer)

    print("\n" + "=" * 80)
    print("CITATIONS:")
    print("=" * 80)
    for c in paid.citations:
        print(f"[chunk {c.chunk_id}] score={c.score} {c.excerpt}")

    p = paid.proof
    print("\n" + "=" * 80)
    print("PROOF:")
    print("=" * 80)
    print(f"id={p.proof_id} answerHash={p.answer_hash}")
    print(f"cost={format_ether(p.cost)} chunks={p.chunks_used} model={p.model}")
    return 0


def cmd_publish(args) -> int:
    """Upload a dataset and print the parameters for the on-chain registration."""
    uc = build_container().get_publish_use_case()
    result = uc.execute(
        PublishRequest(
            file_path=Path(args.file),
            publisher_address=args.publisher,
            metadata=args.metadata,
            price_per_chunk=args.price,
        )
    )
    if not result.ok or result.value is None:
        assert result.error is not None
        _print_error(result.error)
        return 1

    receipt = result.value
    print(f"✓ Uploaded {receipt.total_chunks} chunks, root {receipt.root_hash}")
    print(f"Call publishDataset() on {receipt.contract_address} with:")
    for key, value in receipt.ledger_params().items():
        print(f"  {key}: {value}")
    return 0


def cmd_balance(args) -> int:
    try:
        wei = build_container().get_ledger().get_balance(args.address)
    except Exception as ex:
        _print_error(ex)
        return 1
    print(f"{args.address}: {format_ether(wei)} ({wei} wei)")
    return 0


def cmd_dataset(args) -> int:
    try:
        info = build_container().get_ledger().get_dataset_info(args.root_hash)
    except Exception as ex:
        _print_error(ex)
        return 1
    print(f"Dataset {args.root_hash}")
    print(f"  publisher: {info.publisher}")
    print(f"  metadata: {info.metadata}")
    print(f"  price per chunk: {format_ether(info.price_per_chunk)}")
    print(f"  total chunks: {info.total_chunks}")
    print(f"  active: {info.active}")
    return 0


def cmd_proof(args) -> int:
    try:
        p = build_container().get_ledger().get_proof(args.proof_id)
    except Exception as ex:
        _print_error(ex)
        return 1
    print(f"Proof {p.proof_id}")
    print(f"  answer hash: {p.answer_hash}")
    print(f"  dataset: {p.dataset_hash}")
    print(f"  chunks: {', '.join(str(i) for i in p.chunk_ids)}")
    print(f"  user: {p.user}")
    print(f"  paid: {format_ether(p.amount_paid)}")
    print(f"  model: {p.model_used}")
    print(f"  timestamp: {p.timestamp}")
    return 0


def cmd_serve(args) -> int:
    """Run the HTTP API under uvicorn."""
    uvicorn = import_module("uvicorn")
    uvicorn.run(
        "ragbits_exchange.interface.http.api:app",
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
    )
    return 0


def build_parser(settings: AppSettings | None = None) -> argparse.ArgumentParser:
    settings = settings or AppSettings()
    parser = argparse.ArgumentParser(
        prog="ragbits-exchange",
        description="Paid queries over published datasets with on-chain proofs",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    p_ask = subparsers.add_parser("ask", help="Run a paid query")
    p_ask.add_argument("--dataset", required=True, help="Dataset root hash")
    p_ask.add_argument("--user", required=True, help="Paying account address")
    p_ask.add_argument("--query", required=True, help="Question text")

    p_pub = subparsers.add_parser("publish", help="Upload a dataset file")
    p_pub.add_argument("--file", required=True, help="UTF-8 text file")
    p_pub.add_argument("--publisher", required=True, help="Publisher account address")
    p_pub.add_argument("--metadata", required=True, help="Metadata URI or description")
    p_pub.add_argument("--price", required=True, help="Price per chunk in ether, e.g. 0.001")

    p_bal = subparsers.add_parser("balance", help="Show a user's deposited balance")
    p_bal.add_argument("address")

    p_ds = subparsers.add_parser("dataset", help="Show dataset registration")
    p_ds.add_argument("root_hash")

    p_proof = subparsers.add_parser("proof", help="Show a recorded proof")
    p_proof.add_argument("proof_id", type=int)

    p_serve = subparsers.add_parser("serve", help="Run the HTTP API")
    p_serve.add_argument("--host", default=settings.host)
    p_serve.add_argument("--port", type=int, default=settings.port)
    p_serve.add_argument("--log-level", default=settings.log_level)

    return parser


COMMANDS = {
    "ask": cmd_ask,
    "publish": cmd_publish,
    "balance": cmd_balance,
    "dataset": cmd_dataset,
    "proof": cmd_proof,
    "serve": cmd_serve,
}


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point with subcommands.

    Returns:
        Exit code (0=success, 1=failure)
    """
    settings = AppSettings()
    parser = build_parser(settings)
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    configure_logging(settings.log_level)
    return COMMANDS[args.command](args)


if __name__ == "__main__":
    sys.exit(main())

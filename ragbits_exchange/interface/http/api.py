"""HTTP API for paid queries and dataset publishing.

Why: Thin front door without business logic; pure delegation to use cases.
"""

import logging
import shutil
import tempfile
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

try:
    from fastapi import FastAPI, File, Form, Request, UploadFile
    from fastapi.exceptions import RequestValidationError
    from fastapi.responses import JSONResponse
    from pydantic import BaseModel
    from starlette.exceptions import HTTPException as StarletteHTTPException
except ImportError as err:
    raise ImportError(
        "FastAPI not installed. Install with: pip install 'ragbits-exchange[http]'"
    ) from err

from ragbits_exchange.application.dto.publish_dto import PublishRequest
from ragbits_exchange.application.dto.query_dto import QueryRequest
from ragbits_exchange.config.compose import Container, build_container
from ragbits_exchange.domain.errors import ValidationError
from ragbits_exchange.domain.services.amounts import format_ether
from ragbits_exchange.domain.services.identifiers import is_account_address, is_root_hash
from ragbits_exchange.interface.http.responses import HttpOutcome, error_outcome, query_outcome

logger = logging.getLogger(__name__)


class AskRequestModel(BaseModel):
    """Request model for /api/ask. Fields are checked by hand to answer 400, not 422."""

    query: str | None = None
    datasetHash: str | None = None
    userAddress: str | None = None


def _respond(outcome: HttpOutcome) -> JSONResponse:
    return JSONResponse(
        status_code=outcome.status_code, content=outcome.body, headers=outcome.headers
    )


def _guarded(call: Callable[[], Any]) -> JSONResponse:
    """Run a read endpoint body, mapping any error to its JSON response."""
    try:
        return JSONResponse(content=call())
    except Exception as ex:
        logger.error("Request failed: %s", ex)
        return _respond(error_outcome(ex))


def _container(request: Request) -> Container:
    if request.app.state.container is None:
        request.app.state.container = build_container()
    return request.app.state.container


def create_app(container: Container | None = None) -> FastAPI:
    """Build the FastAPI application; a prepared container is used as-is."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        c = app.state.container = app.state.container or build_container()
        try:
            ledger = c.get_ledger()
            if ledger.is_authorized():
                logger.info("Server wallet %s is authorized", ledger.service_address)
            else:
                logger.warning(
                    "Server wallet %s is NOT authorized to record proofs; "
                    "ask the contract owner to call authorizeService(%s)",
                    ledger.service_address,
                    ledger.service_address,
                )
        except Exception as ex:
            logger.error("Cannot connect to contract: %s", ex)
        logger.info("Contract %s on %s", c.settings.contract_address, c.settings.network_name)
        yield

    app = FastAPI(title="RAGbits Exchange API", version="1.0.0", lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(RequestValidationError)
    async def _invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": f"Invalid request: {exc.errors()}"})

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            return JSONResponse(status_code=404, content={"error": "Endpoint not found"})
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.get("/health")
    def health(request: Request) -> dict[str, Any]:
        c = _container(request)
        wallet, authorized = "", False
        try:
            ledger = c.get_ledger()
            wallet = ledger.service_address
            authorized = ledger.is_authorized()
        except Exception as ex:
            logger.warning("Health check could not reach the ledger: %s", ex)
        return {
            "status": "healthy",
            "network": c.settings.network_name,
            "contract": c.settings.contract_address,
            "serverWallet": wallet,
            "authorized": authorized,
        }

    @app.post("/api/ask")
    def ask(req: AskRequestModel, request: Request) -> JSONResponse:
        """Paid query: 200 answer+proof, 400, 402 payment challenge, 404 or 500."""
        if not req.query or not req.datasetHash or not req.userAddress:
            return JSONResponse(
                status_code=400,
                content={"error": "Missing required fields: query, datasetHash, userAddress"},
            )
        try:
            uc = _container(request).get_query_use_case()
        except Exception as ex:
            logger.error("Query pipeline unavailable: %s", ex)
            return _respond(error_outcome(ex))
        result = uc.execute(
            QueryRequest(
                query=req.query, dataset_hash=req.datasetHash, user_address=req.userAddress
            )
        )
        return _respond(query_outcome(result))

    @app.post("/api/publish")
    def publish(
        request: Request,
        dataset: UploadFile | None = File(None),
        publisherAddress: str | None = Form(None),
        metadata: str | None = Form(None),
        pricePerChunk: str | None = Form(None),
    ) -> JSONResponse:
        if dataset is None:
            return JSONResponse(status_code=400, content={"error": "No file uploaded"})
        if not publisherAddress or not metadata or not pricePerChunk:
            return JSONResponse(
                status_code=400,
                content={
                    "error": "Missing required fields: publisherAddress, metadata, pricePerChunk"
                },
            )

        c = _container(request)
        limit = c.settings.upload_max_bytes
        with tempfile.TemporaryDirectory(prefix="ragbits-upload-") as tmp:
            path = Path(tmp) / "dataset.txt"
            with path.open("wb") as out:
                shutil.copyfileobj(dataset.file, out)
            if path.stat().st_size > limit:
                return JSONResponse(
                    status_code=413, content={"error": f"File exceeds {limit} bytes"}
                )
            result = c.get_publish_use_case().execute(
                PublishRequest(
                    file_path=path,
                    publisher_address=publisherAddress,
                    metadata=metadata,
                    price_per_chunk=pricePerChunk,
                )
            )

        if not result.ok or result.value is None:
            assert result.error is not None
            return _respond(error_outcome(result.error))
        receipt = result.value
        return JSONResponse(
            content={
                "success": True,
                "rootHash": receipt.root_hash,
                "totalChunks": receipt.total_chunks,
                "instruction": "Call publishDataset() from your wallet with these parameters",
                "contractAddress": receipt.contract_address,
                "params": receipt.ledger_params(),
            }
        )

    @app.get("/api/balance/{address}")
    def balance(address: str, request: Request) -> JSONResponse:
        def body() -> dict[str, Any]:
            if not is_account_address(address):
                raise ValidationError(f"invalid account address: {address!r}")
            wei = _container(request).get_ledger().get_balance(address)
            return {"address": address, "balance": format_ether(wei), "balanceWei": str(wei)}

        return _guarded(body)

    @app.get("/api/dataset/{root_hash}")
    def dataset_info(root_hash: str, request: Request) -> JSONResponse:
        def body() -> dict[str, Any]:
            if not is_root_hash(root_hash):
                raise ValidationError(f"invalid dataset hash: {root_hash!r}")
            info = _container(request).get_ledger().get_dataset_info(root_hash)
            return {
                "publisher": info.publisher,
                "metadata": info.metadata,
                "pricePerChunk": format_ether(info.price_per_chunk),
                "totalChunks": str(info.total_chunks),
                "active": info.active,
                "rootHash": root_hash,
            }

        return _guarded(body)

    @app.get("/api/proof/{proof_id}")
    def proof(proof_id: int, request: Request) -> JSONResponse:
        def body() -> dict[str, Any]:
            p = _container(request).get_ledger().get_proof(proof_id)
            return {
                "proofId": str(p.proof_id),
                "answerHash": p.answer_hash,
                "datasetHash": p.dataset_hash,
                "chunkIds": [str(i) for i in p.chunk_ids],
                "user": p.user,
                "timestamp": str(p.timestamp),
                "amountPaid": format_ether(p.amount_paid),
                "modelUsed": p.model_used,
            }

        return _guarded(body)

    @app.get("/api/datasets")
    def datasets(request: Request) -> JSONResponse:
        def body() -> list[dict[str, Any]]:
            return [
                {
                    "rootHash": d.root_hash,
                    "metadata": d.metadata,
                    "totalChunks": len(d.chunks),
                    "cached": True,
                }
                for d in _container(request).get_dataset_storage().cached_datasets()
            ]

        return _guarded(body)

    @app.get("/api/info")
    def info(request: Request) -> JSONResponse:
        def body() -> dict[str, Any]:
            c = _container(request)
            ledger = c.get_ledger()
            return {
                "serverWallet": ledger.service_address,
                "authorized": ledger.is_authorized(),
                "serverBalance": format_ether(ledger.get_service_balance()),
                "contractAddress": ledger.contract_address,
                "network": c.settings.network_name,
                "services": {
                    "storage": c.settings.storage_backend,
                    "compute": c.settings.llm_model if c.settings.llm_enabled else "fallback",
                    "chain": c.settings.network_name,
                },
            }

        return _guarded(body)

    return app


app = create_app()

"""
FastAPI Router — REST API endpoints for the Customer Risk Analyzer.

Endpoints:
    POST /api/v1/analyze              : Upload a JSON file of customer records
    POST /api/v1/analyze/records      : Same analysis for a JSON array body
    GET  /api/v1/analysis/summary     : Counts and top countries of the latest analysis
    GET  /api/v1/analysis/customers   : One fixed-size page of valid customers
    POST /api/v1/compute/fibonacci    : CPU-bound demo computation in a child process
    GET  /api/v1/health               : Health check
"""

import logging
import math
import time
from typing import Any, Optional

from fastapi import APIRouter, Body, File, HTTPException, Query, Request, UploadFile
from fastapi.concurrency import run_in_threadpool

from risk_analyzer.config import SERVICE_NAME, SERVICE_VERSION, TABLE_PAGE_SIZE
from risk_analyzer.core.engine import analyze_customer_data
from risk_analyzer.core.loader import (
    RecordLoadError,
    UnsupportedFileTypeError,
    check_file_type,
    ensure_record_array,
    load_records,
)
from risk_analyzer.core.models import (
    AnalysisResult,
    AnalysisSummary,
    CustomerPage,
    FibonacciRequest,
    FibonacciResponse,
)
from risk_analyzer.core.worker import (
    BackgroundWorker,
    ComputationCancelled,
    ComputationFailed,
    ComputationTimeout,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Analysis"])

# ── Latest analysis, replaced on every upload ─────────────────
_latest_analysis: Optional[AnalysisResult] = None


def _store(result: AnalysisResult) -> AnalysisResult:
    global _latest_analysis
    _latest_analysis = result
    return result


def _require_analysis() -> AnalysisResult:
    if _latest_analysis is None:
        raise HTTPException(400, "Upload a file first (POST /api/v1/analyze)")
    return _latest_analysis


def reset_analysis() -> None:
    global _latest_analysis
    _latest_analysis = None


# ━━━━━━━━━━ 1. ANALYZE UPLOAD ━━━━━━━━━━
@router.post(
    "/analyze",
    response_model=AnalysisResult,
    summary="Analyze Customer File",
    description="Accepts a JSON file holding an array of customer records and returns validity counts, top countries and scored customers.",
)
async def analyze_upload(file: UploadFile = File(...)) -> AnalysisResult:
    try:
        check_file_type(file.filename, file.content_type)
    except UnsupportedFileTypeError as exc:
        raise HTTPException(415, str(exc))

    content = await file.read()
    try:
        records = load_records(content)
    except RecordLoadError as exc:
        logger.warning("Rejected upload %s: %s", file.filename, exc)
        raise HTTPException(400, str(exc))

    try:
        return _store(await run_in_threadpool(analyze_customer_data, records))
    except Exception as exc:
        logger.exception("Analysis failed for %s", file.filename)
        raise HTTPException(500, f"Analysis error: {exc}")


# ━━━━━━━━━━ 2. ANALYZE JSON BODY ━━━━━━━━━━
@router.post("/analyze/records", response_model=AnalysisResult, summary="Analyze Customer Records")
def analyze_records(payload: Any = Body(...)) -> AnalysisResult:
    try:
        records = ensure_record_array(payload)
    except RecordLoadError as exc:
        raise HTTPException(400, str(exc))

    try:
        return _store(analyze_customer_data(records))
    except Exception as exc:
        logger.exception("Analysis failed")
        raise HTTPException(500, f"Analysis error: {exc}")


# ━━━━━━━━━━ 3. SUMMARY ━━━━━━━━━━
@router.get("/analysis/summary", response_model=AnalysisSummary, summary="Latest Analysis Summary")
def get_summary() -> AnalysisSummary:
    return _require_analysis().summary()


# ━━━━━━━━━━ 4. CUSTOMER TABLE PAGE ━━━━━━━━━━
@router.get("/analysis/customers", response_model=CustomerPage, summary="Paged Valid Customers")
def get_customers(page: int = Query(1, ge=1)) -> CustomerPage:
    result = _require_analysis()
    customers = result.customers
    start = (page - 1) * TABLE_PAGE_SIZE

    return CustomerPage(
        page=page,
        page_size=TABLE_PAGE_SIZE,
        total_items=len(customers),
        total_pages=math.ceil(len(customers) / TABLE_PAGE_SIZE),
        customers=customers[start: start + TABLE_PAGE_SIZE],
    )


# ━━━━━━━━━━ 5. BACKGROUND COMPUTATION ━━━━━━━━━━
def _get_worker(request: Request) -> BackgroundWorker:
    worker = getattr(request.app.state, "worker", None)
    if worker is None:
        raise HTTPException(503, "Background worker is not running")
    return worker


@router.post(
    "/compute/fibonacci",
    response_model=FibonacciResponse,
    tags=["Compute"],
    summary="Run Fibonacci In Background Process",
)
async def compute_fibonacci(payload: FibonacciRequest, request: Request) -> FibonacciResponse:
    worker = _get_worker(request)
    t0 = time.time()
    try:
        result = await worker.run_async(payload.n, payload.timeout_seconds)
    except ComputationTimeout as exc:
        raise HTTPException(504, str(exc))
    except ComputationCancelled as exc:
        raise HTTPException(503, str(exc))
    except ComputationFailed as exc:
        logger.exception("Background computation failed")
        raise HTTPException(500, f"Computation error: {exc}")

    return FibonacciResponse(n=payload.n, result=result, elapsed_seconds=round(time.time() - t0, 3))


# ━━━━━━━━━━ 6. HEALTH ━━━━━━━━━━
@router.get("/health", tags=["Health"], summary="Health Check")
async def health_check() -> dict:
    return {"status": "healthy", "service": SERVICE_NAME, "version": SERVICE_VERSION}

import logging
import time
from typing import Any, Awaitable, Callable

from fastapi import APIRouter, Response
from fastapi.responses import JSONResponse

from app.dependencies import get_pricing_config

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.head("/healthz")
async def healthz_head() -> Response:
    return Response(status_code=200)


async def _pricing_check() -> tuple[bool, dict[str, Any]]:
    try:
        config = get_pricing_config()
    except Exception as exc:  # noqa: BLE001
        logger.warning("pricing_config_check_failed", extra={"extra": {"error_type": type(exc).__name__}})
        return False, {"message": "pricing config unavailable", "error": type(exc).__name__}
    return True, {
        "message": "pricing config loaded",
        "pricing_config_id": config.pricing_config_id,
        "pricing_config_version": config.pricing_config_version,
        "config_hash": config.config_hash,
    }


async def _run_check(name: str, fn: Callable[[], Awaitable[tuple[bool, dict[str, Any]]]]) -> dict[str, Any]:
    start = time.perf_counter()
    ok, detail = await fn()
    elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
    return {"name": name, "ok": ok, "ms": elapsed_ms, "detail": detail}


@router.get("/readyz")
async def readyz() -> JSONResponse:
    checks = [await _run_check("pricing_config", _pricing_check)]

    overall_ok = all(check["ok"] for check in checks)
    status_code = 200 if overall_ok else 503

    payload = {"ok": overall_ok, "checks": checks}
    return JSONResponse(status_code=status_code, content=payload)

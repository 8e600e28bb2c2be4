import time
from typing import Any, Dict, Optional, Type

import httpx

from regproc.core import status_util
from regproc.core.errors import ApisResourceAccessError, RegprocError
from regproc.observability.logging import log
from regproc.settings import settings


def _headers() -> dict:
    return {"Content-Type": "application/json"}


def request_json(
    method: str,
    url: str,
    *,
    json_body: Optional[Dict[str, Any]] = None,
    params: Optional[Dict[str, Any]] = None,
    api_name: str = "",
    error_cls: Type[RegprocError] = ApisResourceAccessError,
) -> Dict[str, Any]:
    """
    One blocking round trip to a collaborator API returning its JSON envelope.

    Transport failures and non-2xx responses become `error_cls` (a SYSTEM-kind error),
    so callers can retry rather than reject the packet.
    """
    if not url:
        raise error_cls(
            status_util.API_RESOURCE_ACCESS_FAILED.code,
            f"{status_util.API_RESOURCE_ACCESS_FAILED.message}: {api_name} url is not configured",
        )

    start = time.time()
    try:
        with httpx.Client(timeout=float(settings.HTTP_TIMEOUT_SEC)) as client:
            resp = client.request(method, url, json=json_body, params=params, headers=_headers())
    except httpx.HTTPError as e:
        log(
            event="api_call_exception",
            api=api_name,
            elapsedMs=int((time.time() - start) * 1000),
            errorType=type(e).__name__,
            error=str(e)[:300],
        )
        raise error_cls(
            status_util.API_RESOURCE_ACCESS_FAILED.code,
            f"{status_util.API_RESOURCE_ACCESS_FAILED.message}: {api_name}: {type(e).__name__}",
        ) from e

    elapsed_ms = int((time.time() - start) * 1000)
    if not (200 <= resp.status_code < 300):
        log(
            event="api_call_non2xx",
            api=api_name,
            statusCode=int(resp.status_code),
            elapsedMs=elapsed_ms,
            responseText=(resp.text or "")[:300],
        )
        raise error_cls(
            status_util.API_RESOURCE_ACCESS_FAILED.code,
            f"{status_util.API_RESOURCE_ACCESS_FAILED.message}: {api_name} returned {resp.status_code}",
        )

    log(event="api_call_ok", api=api_name, statusCode=int(resp.status_code), elapsedMs=elapsed_ms)
    try:
        body = resp.json()
    except ValueError:
        body = {}
    return body if isinstance(body, dict) else {"response": body}


def envelope_errors(body: Dict[str, Any]) -> list:
    errors = body.get("errors") or []
    return [e for e in errors if isinstance(e, dict)]

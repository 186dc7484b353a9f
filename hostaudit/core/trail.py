"""Request records for the per-call audit trail."""

from collections.abc import Iterable, Mapping, Sequence

import httpx

from hostaudit.schemas.audit import RequestInfo

MASK = "***"

QueryParams = Sequence[tuple[str, str]]


def mask_secrets(text: str, secrets: Iterable[str | None]) -> str:
    """Replace every non-empty secret in ``text`` with ``***``."""
    for secret in secrets:
        if secret:
            text = text.replace(secret, MASK)
    return text


def build_url(url: str, params: QueryParams | None = None) -> str:
    """Encode query parameters (repeated keys allowed) onto ``url``."""
    if not params:
        return url
    return str(httpx.URL(url, params=list(params)))


def build_request_info(
    method: str,
    url: str,
    params: QueryParams | None = None,
    headers: Mapping[str, str] | None = None,
    body: str | None = None,
    secrets: Iterable[str | None] = (),
) -> RequestInfo:
    """Describe an outgoing request with credentials masked."""
    secrets = list(secrets)
    return RequestInfo(
        method=method,
        url=mask_secrets(build_url(url, params), secrets),
        headers={k: mask_secrets(v, secrets) for k, v in (headers or {}).items()},
        body=mask_secrets(body, secrets) if body is not None else None,
    )


def error_payload(error: BaseException | str) -> dict[str, str]:
    """Response slot recorded when a call produced no usable body."""
    return {"error": str(error)}

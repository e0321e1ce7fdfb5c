"""Shared AWS helpers for service clients."""

from __future__ import annotations

from typing import Any

import boto3
from botocore.exceptions import ClientError

from eco_moderation.config.settings import settings

# Error codes/class names that mean "out of quota, try later" rather than a
# broken request. Covers botocore service codes, the Transcribe streaming SDK
# exception classes and OpenAI-style provider codes.
QUOTA_ERROR_CODES = frozenset(
    {
        "ThrottlingException",
        "Throttling",
        "TooManyRequestsException",
        "LimitExceededException",
        "ServiceQuotaExceededException",
        "ProvisionedThroughputExceededException",
        "RequestLimitExceeded",
        "insufficient_quota",
        "rate_limit_exceeded",
    }
)


def create_boto3_client(
    service_name: str,
    *,
    region_name: str | None = None,
    aws_access_key_id: str | None = None,
    aws_secret_access_key: str | None = None,
) -> boto3.client:
    """Instantiate a boto3 client using configured credentials if available."""

    region = region_name or settings.aws.region
    client_kwargs: dict[str, Any] = {"region_name": region}
    if aws_access_key_id and aws_secret_access_key:
        client_kwargs["aws_access_key_id"] = aws_access_key_id
        client_kwargs["aws_secret_access_key"] = aws_secret_access_key
    elif settings.aws.has_credentials():
        client_kwargs["aws_access_key_id"] = settings.aws.access_key
        client_kwargs["aws_secret_access_key"] = (
            settings.aws.secret_key.get_secret_value()
        )
    return boto3.client(service_name, **client_kwargs)


def is_quota_error(exc: BaseException) -> bool:
    """Return True when ``exc`` signals a rate limit or exhausted quota."""

    if isinstance(exc, ClientError):
        error = exc.response.get("Error", {})
        if error.get("Code") in QUOTA_ERROR_CODES:
            return True
        status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
        return status == 429

    if type(exc).__name__ in QUOTA_ERROR_CODES:
        return True

    for attr in ("status", "status_code", "http_status"):
        if getattr(exc, attr, None) == 429:
            return True

    code = getattr(exc, "code", None)
    return isinstance(code, str) and code in QUOTA_ERROR_CODES


__all__ = ["QUOTA_ERROR_CODES", "create_boto3_client", "is_quota_error"]

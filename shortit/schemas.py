"""
Pydantic request models for the Shortit HTTP API.

Validation happens here, before the allocator is invoked:
    - originalUrl: http/https with a host
    - customName: optional; once normalized, 5 to 64 characters of 0-9a-zA-Z and "-"
Field names keep the wire format of the original service (camelCase).
"""

import re
from typing import Optional
from urllib.parse import urlparse

from pydantic import BaseModel, field_validator

from .allocator.alias_allocator import normalize
from .errors import ValidationError

MIN_CUSTOM_ALIAS = 5
MAX_CUSTOM_ALIAS = 64
CUSTOM_ALIAS_PATTERN = re.compile(r"^[0-9A-Za-z-]+$")


def validate_url(url: str) -> str:
    """
    Validate that a URL has an http/https scheme and a netloc.

    Raises:
        ValidationError: If the URL is malformed.
    """
    parsed = urlparse(url.strip())
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValidationError("URL should be a valid URL")
    return url.strip()


def validate_custom_alias(alias: str) -> str:
    """
    Check the token the alias will become, not the raw input.

    Whitespace runs turn into hyphens first, so "my  alias" is checked as
    "my-alias". The token must be Base62 plus "-" so the short URL stays
    resolvable by GET /s/{token}.

    Raises:
        ValidationError: If the token is too short, too long or URL-unsafe.
    """
    token = normalize(alias) or ""
    if len(token) < MIN_CUSTOM_ALIAS:
        raise ValidationError(f"Custom name should be at least {MIN_CUSTOM_ALIAS} letters")
    if len(token) > MAX_CUSTOM_ALIAS:
        raise ValidationError(f"Custom name should be at most {MAX_CUSTOM_ALIAS} letters")
    if not CUSTOM_ALIAS_PATTERN.match(token):
        raise ValidationError("Custom name may contain only 0-9, a-z, A-Z and -")
    return alias


class CreateUrlRequest(BaseModel):
    """Request payload for creating a new short URL."""

    originalUrl: str
    customName: Optional[str] = None

    @field_validator("originalUrl")
    @classmethod
    def _check_url(cls, v: str) -> str:
        return validate_url(v)

    @field_validator("customName")
    @classmethod
    def _check_custom_name(cls, v: Optional[str]) -> Optional[str]:
        return validate_custom_alias(v) if v is not None else None


class UpdateUrlRequest(BaseModel):
    """Request payload for editing a short URL; both fields optional."""

    originalUrl: Optional[str] = None
    customName: Optional[str] = None

    @field_validator("originalUrl")
    @classmethod
    def _check_url(cls, v: Optional[str]) -> Optional[str]:
        return validate_url(v) if v else v

    @field_validator("customName")
    @classmethod
    def _check_custom_name(cls, v: Optional[str]) -> Optional[str]:
        return validate_custom_alias(v) if v else v

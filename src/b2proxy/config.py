"""Proxy configuration.

ProxyConfig is built once at process start by load_proxy_config() and passed
into create_app(); nothing downstream reads the environment.

Bucket selection supports two layouts:
- a single fixed bucket id (B2_BUCKET_ID): the whole request path is the key
- a prefix map (B2_BUCKET_MAP, JSON object): the first path segment selects
  the bucket and the remainder is the key within it
If both are set, the prefix map wins.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Final

from b2proxy.errors import ConfigError
from b2proxy.upstream.client import DEFAULT_AUTH_URL, DEFAULT_TIMEOUT_SECONDS

ENV_KEY_ID: Final[str] = "B2_APPLICATION_KEY_ID"
ENV_KEY: Final[str] = "B2_APPLICATION_KEY"
ENV_BUCKET_ID: Final[str] = "B2_BUCKET_ID"
ENV_BUCKET_MAP: Final[str] = "B2_BUCKET_MAP"
ENV_AUTH_URL: Final[str] = "B2_AUTH_URL"
ENV_MERGE_PDF_VERSIONS: Final[str] = "MERGE_PDF_VERSIONS"
ENV_BROWSER_CACHE_TTL: Final[str] = "BROWSER_CACHE_TTL"
ENV_CDN_CACHE_TTL: Final[str] = "CDN_CACHE_TTL"
ENV_HOST: Final[str] = "HOST"
ENV_PORT: Final[str] = "PORT"
ENV_HTTP_TIMEOUT: Final[str] = "B2PROXY_HTTP_TIMEOUT"
ENV_LOG_LEVEL: Final[str] = "B2PROXY_LOG_LEVEL"

DEFAULT_BROWSER_CACHE_TTL: Final[int] = 14400  # 4 hours
DEFAULT_CDN_CACHE_TTL: Final[int] = 31536000  # 1 year
DEFAULT_HOST: Final[str] = "0.0.0.0"
DEFAULT_PORT: Final[int] = 3000
DEFAULT_LOG_LEVEL: Final[str] = "INFO"


@dataclass(frozen=True)
class BucketTarget:
    """Where a request path points: a bucket id and the key inside it."""

    bucket_id: str
    path: str


class BucketPrefixNotFoundError(ConfigError):
    """Raised when a request's first path segment is not a mapped prefix."""

    def __init__(self, prefix: str, available: list[str]) -> None:
        super().__init__(
            f"Bucket prefix '{prefix}' not found. Available prefixes: {', '.join(available)}"
        )
        self.prefix = prefix
        self.available = available


class MissingObjectPathError(ConfigError):
    """Raised when a mapped prefix is requested without a key after it."""

    def __init__(self) -> None:
        super().__init__("File path required after bucket prefix")


@dataclass(frozen=True)
class ProxyConfig:
    """Proxy configuration (immutable).

    Attributes:
        key_id: B2 application key id (None if unset).
        key: B2 application key secret (None if unset).
        bucket_id: Single fixed bucket id, if configured.
        bucket_map: Prefix -> bucket id mapping, if configured.
        merge_pdf_versions: Compose distinct PDF versions into one document.
        browser_cache_ttl: max-age for Cache-Control, in seconds.
        cdn_cache_ttl: max-age for CDN-Cache-Control, in seconds.
        host: Listen address.
        port: Listen port.
        auth_url: b2_authorize_account endpoint.
        http_timeout_seconds: Timeout for upstream HTTP calls.
        log_level: Root log level used by the serve command.
    """

    key_id: str | None = None
    key: str | None = field(default=None, repr=False)
    bucket_id: str | None = None
    bucket_map: Mapping[str, str] | None = None
    merge_pdf_versions: bool = False
    browser_cache_ttl: int = DEFAULT_BROWSER_CACHE_TTL
    cdn_cache_ttl: int = DEFAULT_CDN_CACHE_TTL
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    auth_url: str = DEFAULT_AUTH_URL
    http_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    log_level: str = DEFAULT_LOG_LEVEL

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.browser_cache_ttl < 0:
            raise ConfigError(
                f"{ENV_BROWSER_CACHE_TTL} must be a non-negative integer, "
                f"got {self.browser_cache_ttl}"
            )
        if self.cdn_cache_ttl < 0:
            raise ConfigError(
                f"{ENV_CDN_CACHE_TTL} must be a non-negative integer, got {self.cdn_cache_ttl}"
            )
        if not self.host.strip():
            raise ConfigError(f"{ENV_HOST} must not be empty")
        if not 0 < self.port < 65536:
            raise ConfigError(f"{ENV_PORT} must be between 1 and 65535, got {self.port}")
        if self.http_timeout_seconds <= 0:
            raise ConfigError(
                f"{ENV_HTTP_TIMEOUT} must be positive, got {self.http_timeout_seconds}"
            )
        if self.bucket_map is not None:
            object.__setattr__(self, "bucket_map", MappingProxyType(dict(self.bucket_map)))

    def resolve_bucket(self, full_path: str) -> BucketTarget:
        """Map a request path to a bucket id and object key.

        Args:
            full_path: Request path without leading or trailing slashes.

        Raises:
            BucketPrefixNotFoundError: If the first segment is not a mapped prefix.
            MissingObjectPathError: If nothing follows the prefix.
            ConfigError: If no bucket is configured at all.
        """
        if self.bucket_map is not None:
            prefix, _, remainder = full_path.partition("/")
            bucket_id = self.bucket_map.get(prefix)
            if not bucket_id:
                raise BucketPrefixNotFoundError(prefix, list(self.bucket_map))
            if not remainder:
                raise MissingObjectPathError()
            return BucketTarget(bucket_id=bucket_id, path=remainder)

        if self.bucket_id:
            return BucketTarget(bucket_id=self.bucket_id, path=full_path)

        raise ConfigError(f"Either {ENV_BUCKET_MAP} or {ENV_BUCKET_ID} must be configured")


def _get_str(environ: Mapping[str, str], env_var: str) -> str | None:
    raw = environ.get(env_var)
    if raw is None:
        return None
    raw = raw.strip()
    return raw or None


def _parse_int(environ: Mapping[str, str], env_var: str, default: int) -> int:
    """Parse an integer from the environment.

    Raises:
        ConfigError: If the value is set but not an integer.
    """
    raw = _get_str(environ, env_var)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{env_var} must be an integer, got '{raw}'") from e


def _parse_float(environ: Mapping[str, str], env_var: str, default: float) -> float:
    raw = _get_str(environ, env_var)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"{env_var} must be a number, got '{raw}'") from e


def _parse_bucket_map(environ: Mapping[str, str]) -> dict[str, str] | None:
    """Parse the prefix -> bucket id JSON object.

    Raises:
        ConfigError: If the value is not a JSON object of strings.
    """
    raw = _get_str(environ, ENV_BUCKET_MAP)
    if raw is None:
        return None
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid {ENV_BUCKET_MAP} JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise ConfigError(f"{ENV_BUCKET_MAP} must be a JSON object of prefix -> bucket id")
    for prefix, bucket_id in parsed.items():
        if not isinstance(bucket_id, str) or not bucket_id:
            raise ConfigError(f"{ENV_BUCKET_MAP} entry '{prefix}' must map to a bucket id string")
    return parsed


def load_proxy_config(environ: Mapping[str, str] | None = None) -> ProxyConfig:
    """Load proxy configuration from environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ).

    Returns:
        ProxyConfig with validated values.

    Raises:
        ConfigError: If any value is malformed.
    """
    if environ is None:
        environ = os.environ

    merge_raw = (_get_str(environ, ENV_MERGE_PDF_VERSIONS) or "").lower()

    return ProxyConfig(
        key_id=_get_str(environ, ENV_KEY_ID),
        key=_get_str(environ, ENV_KEY),
        bucket_id=_get_str(environ, ENV_BUCKET_ID),
        bucket_map=_parse_bucket_map(environ),
        merge_pdf_versions=merge_raw == "true",
        browser_cache_ttl=_parse_int(environ, ENV_BROWSER_CACHE_TTL, DEFAULT_BROWSER_CACHE_TTL),
        cdn_cache_ttl=_parse_int(environ, ENV_CDN_CACHE_TTL, DEFAULT_CDN_CACHE_TTL),
        host=_get_str(environ, ENV_HOST) or DEFAULT_HOST,
        port=_parse_int(environ, ENV_PORT, DEFAULT_PORT),
        auth_url=_get_str(environ, ENV_AUTH_URL) or DEFAULT_AUTH_URL,
        http_timeout_seconds=_parse_float(environ, ENV_HTTP_TIMEOUT, DEFAULT_TIMEOUT_SECONDS),
        log_level=(_get_str(environ, ENV_LOG_LEVEL) or DEFAULT_LOG_LEVEL).upper(),
    )

from __future__ import annotations

from dataclasses import dataclass
import os
import sys
from typing import Mapping

from vtimes_errors import MissingCredentialError

DEFAULT_API_BASE = "https://ai-app.rinoiot.com/v1"

_TRUTHY = {"1", "true", "yes", "y", "on"}


def _env_truthy(environ: Mapping[str, str], name: str, default: bool = False) -> bool:
    v = environ.get(name)
    if v is None:
        return bool(default)
    return str(v).strip().lower() in _TRUTHY


def _env_float(environ: Mapping[str, str], name: str) -> float | None:
    raw = str(environ.get(name) or "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if value > 0 else None


@dataclass(frozen=True)
class Settings:
    api_key: str
    api_base: str = DEFAULT_API_BASE
    debug: bool = False
    log_level: str = "INFO"
    log_dir: str = "logs"
    http_timeout_s: float | None = None
    strict_delay: bool = False
    prefetch_session: bool = True
    bind_host: str = "127.0.0.1"
    port: int = 3333

    def __repr__(self) -> str:
        # Keep the bearer credential out of logs and tracebacks.
        return f"Settings(api_base={self.api_base!r}, debug={self.debug}, strict_delay={self.strict_delay})"


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Read process configuration once.

    Only ``VTIMES_API_KEY`` is mandatory; its absence raises
    :class:`MissingCredentialError`. The key is not validated here, a bad key
    shows up on the first authenticated call.
    """
    env = os.environ if environ is None else environ

    api_key = str(env.get("VTIMES_API_KEY") or "").strip()
    if not api_key:
        raise MissingCredentialError("Missing VTIMES_API_KEY environment variable.")

    api_base = str(env.get("VTIMES_API_BASE") or "").strip().rstrip("/") or DEFAULT_API_BASE

    port_raw = str(env.get("VTIMES_PORT") or "3333").strip() or "3333"
    try:
        port = int(port_raw)
    except ValueError:
        port = 3333

    return Settings(
        api_key=api_key,
        api_base=api_base,
        debug=_env_truthy(env, "DEBUG"),
        log_level=str(env.get("VTIMES_LOG_LEVEL") or "INFO").strip().upper() or "INFO",
        log_dir=str(env.get("VTIMES_LOG_DIR", "logs") or "").strip(),
        http_timeout_s=_env_float(env, "VTIMES_HTTP_TIMEOUT_S"),
        strict_delay=_env_truthy(env, "VTIMES_STRICT_DELAY"),
        prefetch_session=_env_truthy(env, "VTIMES_PREFETCH_SESSION", default=True),
        bind_host=str(env.get("VTIMES_BIND_HOST") or "127.0.0.1").strip() or "127.0.0.1",
        port=port,
    )


def require_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Startup guard: a missing credential terminates the process with status 1."""
    try:
        return load_settings(environ)
    except MissingCredentialError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1) from e

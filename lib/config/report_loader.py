import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import yaml

from lib.utils.validation import ensure, ensure_positive


DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.5-flash-preview-09-2025"
DEFAULT_API_KEY_ENV = "GOOGLE_AI_API_KEY"


@dataclass
class UpstreamConfig:
    """Connection settings for the ``generateContent`` endpoint."""

    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    api_key_env: str = DEFAULT_API_KEY_ENV
    timeout_seconds: Optional[float] = None
    max_attempts: int = 1

    @property
    def endpoint(self) -> str:
        return f"{self.base_url.rstrip('/')}/models/{self.model}:generateContent"


@dataclass
class ReportConfig:
    """Typed view over ``report.yaml``.

    ``formatter`` is kept as a plain mapping and read with defaults by
    :func:`apps.report.formatter.format_ai_text`, the same way the adapter
    preprocessing reads its sections.
    """

    raw: Dict[str, Any] = field(default_factory=dict)
    upstream: UpstreamConfig = field(default_factory=UpstreamConfig)
    formatter: Dict[str, Any] = field(default_factory=dict)


def _upstream_from_mapping(section: Dict[str, Any]) -> UpstreamConfig:
    timeout = section.get("timeout_seconds")
    if timeout is not None:
        timeout = float(timeout)
    ensure_positive(timeout, "upstream.timeout_seconds", allow_none=True)
    max_attempts = int(section.get("max_attempts", 1))
    ensure(max_attempts >= 1, "upstream.max_attempts must be at least 1")
    return UpstreamConfig(
        base_url=section.get("base_url") or DEFAULT_BASE_URL,
        model=os.environ.get("GEMINI_MODEL") or section.get("model") or DEFAULT_MODEL,
        api_key_env=section.get("api_key_env") or DEFAULT_API_KEY_ENV,
        timeout_seconds=timeout,
        max_attempts=max_attempts,
    )


def report_config_from_mapping(raw: Dict[str, Any]) -> ReportConfig:
    report = raw.get("report", {}) or {}
    return ReportConfig(
        raw=raw,
        upstream=_upstream_from_mapping(report.get("upstream", {}) or {}),
        formatter=report.get("formatter", {}) or {},
    )


def load_report_config(path: str) -> ReportConfig:
    """Load ``report.yaml`` and return a :class:`ReportConfig`.

    Parameters
    ----------
    path:
        File system path to the YAML configuration file.
    """

    with open(path, encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    return report_config_from_mapping(raw)


def resolve_api_key(cfg: ReportConfig) -> Optional[str]:
    """Read the API key named by ``upstream.api_key_env`` from the environment.

    Called once at process start by the entry points; the handler itself only
    ever receives the value.
    """

    value = os.environ.get(cfg.upstream.api_key_env, "").strip()
    return value or None

"""Telemetry configuration helpers."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict

from pydantic import BaseModel, Field

from .logger import init_logging
from .metrics import init_metrics
from .tracer import init_tracing

_TRUTHY = {"1", "true", "yes", "on"}

_FLAG_ENV_NAMES = {
    "enable_tracing": ("BATTLEGRID_ENABLE_TRACING", "OTEL_TRACES_ENABLED"),
    "enable_metrics": ("BATTLEGRID_ENABLE_METRICS", "OTEL_METRICS_ENABLED"),
    "enable_logging": ("BATTLEGRID_ENABLE_LOGGING", "OTEL_LOGS_ENABLED"),
}

_ENDPOINT_ENV_NAMES = {
    "otlp_traces_endpoint": ("OTEL_EXPORTER_OTLP_TRACES_ENDPOINT", "v1/traces"),
    "otlp_metrics_endpoint": ("OTEL_EXPORTER_OTLP_METRICS_ENDPOINT", "v1/metrics"),
    "otlp_logs_endpoint": ("OTEL_EXPORTER_OTLP_LOGS_ENDPOINT", "v1/logs"),
}


def _env_flag(*names: str) -> bool | None:
    for name in names:
        value = os.getenv(name)
        if value is not None:
            return value.strip().lower() in _TRUTHY
    return None


def _parse_resource_attributes(raw: str) -> dict[str, str]:
    """Parse the ``key=value,key2=value2`` format of OTEL_RESOURCE_ATTRIBUTES."""
    attrs: dict[str, str] = {}
    for part in raw.split(","):
        if "=" not in part:
            continue
        key, value = part.split("=", 1)
        attrs[key.strip()] = value.strip()
    return attrs


class TelemetryConfig(BaseModel):
    """Runtime configuration for telemetry exporters."""

    enable_tracing: bool = False
    enable_metrics: bool = False
    enable_logging: bool = False
    otlp_traces_endpoint: str | None = None
    otlp_metrics_endpoint: str | None = None
    otlp_logs_endpoint: str | None = None
    service_name: str = "battlegrid"
    service_namespace: str = "game"
    resource_attributes: dict[str, str] = Field(default_factory=dict)

    def resource_dict(self) -> dict[str, str]:
        """Return the OpenTelemetry resource attributes for this service."""
        attributes = {
            "service.name": self.service_name,
            "service.namespace": self.service_namespace,
        }
        attributes.update(self.resource_attributes)
        return attributes

    @classmethod
    def from_env(cls, **overrides: Any) -> "TelemetryConfig":
        """Construct config from env vars (`BATTLEGRID_*` + `OTEL_*`)."""

        data: Dict[str, Any] = cls().model_dump()

        for field, env_names in _FLAG_ENV_NAMES.items():
            env_value = _env_flag(*env_names)
            if env_value is not None:
                data[field] = env_value

        base_endpoint = (os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT") or "").rstrip("/")
        for field, (env_name, suffix) in _ENDPOINT_ENV_NAMES.items():
            endpoint = os.getenv(env_name)
            if not endpoint and base_endpoint:
                endpoint = f"{base_endpoint}/{suffix}"
            data[field] = endpoint or None

        service_name = os.getenv("OTEL_SERVICE_NAME")
        service_namespace = os.getenv("OTEL_SERVICE_NAMESPACE")
        if service_name:
            data["service_name"] = service_name
        if service_namespace:
            data["service_namespace"] = service_namespace

        resource_env = os.getenv("OTEL_RESOURCE_ATTRIBUTES")
        if resource_env:
            data["resource_attributes"] = {
                **data["resource_attributes"],
                **_parse_resource_attributes(resource_env),
            }

        # A configured endpoint switches its exporter on.
        if data["otlp_traces_endpoint"]:
            data["enable_tracing"] = True
        if data["otlp_metrics_endpoint"]:
            data["enable_metrics"] = True
        if data["otlp_logs_endpoint"]:
            data["enable_logging"] = True

        data.update(overrides)
        return cls(**data)


@lru_cache(maxsize=1)
def load_telemetry_config() -> TelemetryConfig:
    """Load and cache telemetry config from the environment."""

    return TelemetryConfig.from_env()


def init_telemetry(config: TelemetryConfig | None = None) -> TelemetryConfig:
    """Initialise telemetry subsystems lazily."""

    resolved = config or load_telemetry_config()

    if resolved.enable_tracing:
        init_tracing(resolved)
    if resolved.enable_metrics:
        init_metrics(resolved)
    if resolved.enable_logging:
        init_logging(resolved)
    return resolved

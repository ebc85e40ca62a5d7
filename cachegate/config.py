"""Configuration with JSON file, secrets.yml, and env variable support.

Environment variable names carry no prefix so the gateway can be dropped into
deployments that already export ``AWS_REGION``, ``S3_BUCKET_NAME``,
``TURBO_API_TOKEN`` and friends.
"""

import json
import os
from pathlib import Path

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _find_repo_root(*, start: Path) -> Path:
    """Best-effort repository root discovery.

    Relative paths (config files, error log) resolve against the first
    directory containing `pyproject.toml`, falling back to the working
    directory.
    """

    try:
        start = start.resolve()
        for p in [start, *start.parents]:
            if (p / "pyproject.toml").exists():
                return p
    except OSError:
        pass

    return Path.cwd()


def _resolve_config_file(path: str | Path) -> Path:
    """Use the path as given if it exists, else look for it under the repo root."""
    resolved = Path(path)
    if not resolved.is_absolute() and not resolved.exists():
        resolved = _find_repo_root(start=Path(__file__)) / resolved
    return resolved


def _flatten_secrets_mapping(secrets: dict) -> dict:
    """Flatten secrets mapping into GatewayConfig-compatible keys.

    Converts nested YAML structure to flat config keys:
        aws.access_key_id -> aws_access_key_id
        turbo.api_token -> turbo_api_token
    """
    flat = {}
    for section, values in secrets.items():
        if isinstance(values, dict):
            for key, value in values.items():
                flat[f"{section}_{key}"] = value
        else:
            flat[section] = values
    return flat


def _load_secrets(secrets_path: Path) -> dict:
    """Load and flatten secrets from YAML file."""
    if not secrets_path.exists():
        return {}

    with open(secrets_path, encoding="utf-8") as f:
        secrets = yaml.safe_load(f) or {}

    if not isinstance(secrets, dict):
        return {}

    return _flatten_secrets_mapping(secrets)


class GatewayConfig(BaseSettings):
    """Configuration with JSON file + secrets.yml + env var support.

    Load order (later overrides earlier):
    1. config.json - base configuration
    2. secrets.yml - credentials and the API token
    3. Environment variables - runtime overrides (no prefix, e.g. S3_BUCKET_NAME)

    Missing credentials, bucket or token fail construction, so a misconfigured
    gateway never starts serving requests.
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Object storage
    aws_region: str = Field(default="us-east-1")
    aws_access_key_id: str = Field(...)
    aws_secret_access_key: str = Field(...)
    s3_bucket_name: str = Field(...)
    s3_endpoint_url: str | None = Field(
        default=None,
        description="Custom S3 endpoint (MinIO, LocalStack). Enables path-style addressing.",
    )

    # Authentication
    turbo_api_token: str = Field(...)

    # HTTP listener
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=1235)
    public_url: str | None = Field(
        default=None,
        description="Base URL used to build self-referential download links.",
    )
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Logging
    log_level: str = Field(default="INFO")
    error_log_file_enabled: bool = Field(default=True)
    error_log_file_path: str = Field(default="./logs/errors.log")
    error_log_level: str = Field(default="WARNING")
    error_log_max_bytes: int = Field(default=10_485_760)
    error_log_backup_count: int = Field(default=5)

    @field_validator(
        "aws_access_key_id",
        "aws_secret_access_key",
        "s3_bucket_name",
        "turbo_api_token",
    )
    @classmethod
    def _require_non_blank(cls, value: str) -> str:
        value = (value or "").strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("s3_endpoint_url", "public_url")
    @classmethod
    def _normalize_url(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip().rstrip("/")
        return value or None

    def model_post_init(self, __context) -> None:  # type: ignore[override]
        """Derive the public URL from the listening port when unset."""
        if self.public_url is None:
            self.public_url = f"http://localhost:{self.port}"

    @classmethod
    def from_json_file(
        cls,
        config_path: str = "config.json",
        secrets_path: str = "secrets.yml",
    ) -> "GatewayConfig":
        """Load config from JSON + secrets.yml with env var overrides.

        Args:
            config_path: Path to JSON config file.
            secrets_path: Path to secrets YAML file.

        Returns:
            Configured GatewayConfig instance.
        """
        config_data = {}

        json_path = _resolve_config_file(config_path)
        if json_path.exists():
            with open(json_path, encoding="utf-8") as f:
                config_data = json.load(f)

        # Merge secrets (overrides JSON values)
        config_data.update(_load_secrets(_resolve_config_file(secrets_path)))

        # Init kwargs beat env vars in pydantic-settings, so drop any key that
        # the environment is about to provide.
        for key in [k for k in config_data if k.upper() in os.environ]:
            del config_data[key]

        return cls(**config_data)

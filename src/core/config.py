"""Runtime configuration model for singerframe.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Mapping

from core.constants import (
    DEFAULT_EXPORT_FORMAT,
    DEFAULT_ROOT_DIR,
    FALSE_ENV_VALUES,
    INPUT_DIR_NAME,
    OUTPUT_DIR_NAME,
    SNAPSHOTS_DIR_NAME,
    SUPPORTED_EXPORT_FORMATS,
    TRUE_ENV_VALUES,
    UNIFIED_OUTPUT_ENV_PREFIX,
)
from core.errors import EtlConfigError


@dataclass(frozen=True)
class EtlConfig:
    """Validated runtime configuration.

    Attributes:
        root_dir: Job root holding ``catalog.json`` and the default directories.
        input_dir: Directory scanned for stream input files.
        output_dir: Directory receiving exported files.
        snapshot_dir: Directory holding per-stream snapshot files.
        default_export_format: Export format used when callers pass none.
        output_file_prefix: Optional ``{var}`` template prepended to output names.
        use_catalog_schema: Whether singer output is driven by the catalog schema.
        tenant_id: Tenant identifier, ``root_sub`` for sub-tenants.
        env_id: Environment identifier.
        flow_id: Flow identifier.
        job_id: Job identifier.
        tap: Source connector name.
        connector_id: Connector identifier.
        output_name_overrides: Upper-cased stream name to output name.
    """

    root_dir: Path
    input_dir: Path
    output_dir: Path
    snapshot_dir: Path
    default_export_format: str = DEFAULT_EXPORT_FORMAT
    output_file_prefix: str | None = None
    use_catalog_schema: bool = False
    tenant_id: str = ""
    env_id: str = ""
    flow_id: str = ""
    job_id: str = ""
    tap: str = ""
    connector_id: str = ""
    output_name_overrides: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(cls) -> "EtlConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            EtlConfigError: If environment values are invalid.
        """
        root_dir = Path(os.getenv("ROOT_DIR", str(DEFAULT_ROOT_DIR))).expanduser().resolve()
        return cls(
            root_dir=root_dir,
            input_dir=_resolve_dir("INPUT_DIR", root_dir / INPUT_DIR_NAME),
            output_dir=_resolve_dir("OUTPUT_DIR", root_dir / OUTPUT_DIR_NAME),
            snapshot_dir=_resolve_dir("SNAPSHOT_DIR", root_dir / SNAPSHOTS_DIR_NAME),
            default_export_format=_parse_export_format(
                os.getenv("DEFAULT_EXPORT_FORMAT", DEFAULT_EXPORT_FORMAT)
            ),
            output_file_prefix=os.getenv("OUTPUT_FILE_PREFIX") or None,
            use_catalog_schema=_parse_bool("USE_CATALOG_SCHEMA", os.getenv("USE_CATALOG_SCHEMA", "")),
            tenant_id=os.getenv("TENANT", ""),
            env_id=os.getenv("ENV_ID", ""),
            flow_id=os.getenv("FLOW", ""),
            job_id=os.getenv("JOB_ID", ""),
            tap=os.getenv("TAP", ""),
            connector_id=os.getenv("CONNECTOR_ID", ""),
            output_name_overrides=_collect_output_overrides(os.environ),
        )

    @classmethod
    def for_root(cls, root_dir: str | Path) -> "EtlConfig":
        """Build a config with default directories under an explicit root.

        Args:
            root_dir: Job root directory.

        Returns:
            Config without any environment overrides.
        """
        resolved_root = Path(root_dir).expanduser().resolve()
        return cls(
            root_dir=resolved_root,
            input_dir=resolved_root / INPUT_DIR_NAME,
            output_dir=resolved_root / OUTPUT_DIR_NAME,
            snapshot_dir=resolved_root / SNAPSHOTS_DIR_NAME,
        )

    def output_name_for(self, stream: str) -> str:
        """Return the unified output name override for a stream, if any."""
        return self.output_name_overrides.get(stream.upper(), stream)


def _resolve_dir(env_name: str, default: Path) -> Path:
    raw_value = os.getenv(env_name)
    if not raw_value:
        return default
    return Path(raw_value).expanduser().resolve()


def _parse_export_format(raw_value: str) -> str:
    """Parse and validate the default export format.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Normalized export format.

    Raises:
        EtlConfigError: If the format is unsupported.
    """
    export_format = raw_value.strip().lower()
    if export_format not in SUPPORTED_EXPORT_FORMATS:
        raise EtlConfigError(
            "Invalid DEFAULT_EXPORT_FORMAT value: "
            f"expected one of {SUPPORTED_EXPORT_FORMATS}, got '{raw_value}'. "
            "Set DEFAULT_EXPORT_FORMAT to a supported format."
        )
    return export_format


def _parse_bool(env_name: str, raw_value: str) -> bool:
    """Parse a boolean environment flag.

    Args:
        env_name: Variable name for error context.
        raw_value: Raw string from environment.

    Returns:
        Parsed boolean.

    Raises:
        EtlConfigError: If value is not a recognized boolean.
    """
    normalized = raw_value.strip().lower()
    if normalized in TRUE_ENV_VALUES:
        return True
    if normalized in FALSE_ENV_VALUES:
        return False
    raise EtlConfigError(
        f"Invalid {env_name} value: expected true/false, got '{raw_value}'. "
        f"Set {env_name} to 'true' or 'false'."
    )


def _collect_output_overrides(environ: Mapping[str, str]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for key, value in environ.items():
        if key.startswith(UNIFIED_OUTPUT_ENV_PREFIX) and value:
            overrides[key[len(UNIFIED_OUTPUT_ENV_PREFIX) :]] = value
    return overrides

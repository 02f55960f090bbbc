"""Output file name templating.

This module builds the variable set used to expand ``{var}`` placeholders
in output file prefixes: caller-reserved values, tenant metadata, and
process identifiers from the runtime config.
"""

from __future__ import annotations

import json
from typing import Mapping

from core.config import EtlConfig
from core.constants import SUBTENANT_DELIMITER, TENANT_CONFIG_FILE_NAME
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


def build_format_variables(
    config: EtlConfig,
    reserved_variables: Mapping[str, str] | None = None,
    use_tenant_metadata: bool = True,
    subtenant_delimiter: str = SUBTENANT_DELIMITER,
) -> dict[str, str]:
    """Build prefix template variables.

    Tenant metadata never overrides reserved keys. Process identifiers are
    applied last.

    Args:
        config: Runtime configuration with tenant and job identifiers.
        reserved_variables: Caller-supplied variables.
        use_tenant_metadata: Merge ``hotglue_metadata.metadata`` from the
            tenant config file.
        subtenant_delimiter: Separator between root and sub tenant ids.

    Returns:
        Variable name to value mapping.
    """
    reserved = dict(reserved_variables or {})
    variables = dict(reserved)
    if use_tenant_metadata:
        for key, value in _read_tenant_metadata(config).items():
            if key not in reserved:
                variables[key] = str(value)

    tenant_parts = config.tenant_id.split(subtenant_delimiter)
    variables.update(
        {
            "tenant": config.tenant_id,
            "tenant_id": config.tenant_id,
            "root_tenant_id": tenant_parts[0],
            "sub_tenant_id": tenant_parts[1] if len(tenant_parts) > 1 else "",
            "env_id": config.env_id,
            "flow_id": config.flow_id,
            "job_id": config.job_id,
            "tap": config.tap,
            "connector": config.connector_id,
        }
    )
    return variables


def format_str_safely(template: str, variables: Mapping[str, str]) -> str:
    """Replace ``{key}`` placeholders that have a non-empty value.

    Unknown or empty placeholders are left intact.
    """
    output = template
    for key, value in variables.items():
        if value:
            output = output.replace("{" + key + "}", value)
    return output


def _read_tenant_metadata(config: EtlConfig) -> dict[str, object]:
    tenant_config_path = config.snapshot_dir / TENANT_CONFIG_FILE_NAME
    if not tenant_config_path.exists():
        return {}
    try:
        payload = json.loads(tenant_config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as error:
        _LOGGER.warning(
            "tenant_metadata_read_failed", path=str(tenant_config_path), error=str(error)
        )
        return {}
    if not isinstance(payload, dict):
        return {}
    metadata = (payload.get("hotglue_metadata") or {}).get("metadata") or {}
    return dict(metadata) if isinstance(metadata, dict) else {}

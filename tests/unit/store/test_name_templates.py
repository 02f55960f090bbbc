"""Unit tests for output name templating."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from store.name_templates import build_format_variables, format_str_safely
from tests.fixture_paths import copy_job_root


def test_build_format_variables_splits_sub_tenants(tmp_path: Path) -> None:
    """Sub-tenant ids should split into root and sub parts."""
    config = replace(copy_job_root(tmp_path), tenant_id="acme_eu", job_id="j-1")

    variables = build_format_variables(config)

    assert variables["root_tenant_id"] == "acme"
    assert variables["sub_tenant_id"] == "eu"
    assert variables["job_id"] == "j-1"


def test_build_format_variables_merges_tenant_metadata(tmp_path: Path) -> None:
    """Tenant metadata should fill variables without overriding reserved keys."""
    config = copy_job_root(tmp_path)

    variables = build_format_variables(config, {"region": "us"})

    assert variables["region"] == "us"
    assert variables["plan"] == "pro"


def test_build_format_variables_skips_tenant_metadata_when_disabled(tmp_path: Path) -> None:
    """Disabling tenant metadata should leave only reserved and process values."""
    config = copy_job_root(tmp_path)

    variables = build_format_variables(config, use_tenant_metadata=False)

    assert "plan" not in variables


def test_build_format_variables_tolerates_invalid_tenant_config(tmp_path: Path) -> None:
    """An unreadable tenant config should be ignored."""
    config = copy_job_root(tmp_path)
    (config.snapshot_dir / "tenant-config.json").write_text("[", encoding="utf-8")

    variables = build_format_variables(config)

    assert "plan" not in variables and variables["tenant"] == ""


def test_format_str_safely_keeps_unknown_and_empty_placeholders() -> None:
    """Only placeholders with non-empty values should be replaced."""
    output = format_str_safely("{tenant}-{flow_id}-{other}_", {"tenant": "acme", "flow_id": ""})

    assert output == "acme-{flow_id}-{other}_"

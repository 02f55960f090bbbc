"""Core constants used across singerframe modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_ROOT_DIR = Path(".")
INPUT_DIR_NAME = "sync-output"
OUTPUT_DIR_NAME = "etl-output"
SNAPSHOTS_DIR_NAME = "snapshots"
CATALOG_FILE_NAME = "catalog.json"
TENANT_CONFIG_FILE_NAME = "tenant-config.json"
SINGER_FILE_NAME = "data.singer"
SNAPSHOT_FILE_TEMPLATE = "{stream}.snapshot.{extension}"
PARQUET_EXTENSION = "parquet"
CSV_EXTENSION = "csv"
SUPPORTED_INPUT_EXTENSIONS = (".csv", ".parquet")
SUPPORTED_EXPORT_FORMATS = ("csv", "json", "jsonl", "parquet", "singer")
DEFAULT_EXPORT_FORMAT = "csv"
DEFAULT_PRIMARY_KEY = "id"
UNIFIED_OUTPUT_ENV_PREFIX = "HG_UNIFIED_OUTPUT_"
SUBTENANT_DELIMITER = "_"
SINGER_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"
TRUE_ENV_VALUES = ("1", "true", "yes", "on")
FALSE_ENV_VALUES = ("0", "false", "no", "off", "")

"""
ATIA Settings Store

Persists the dashboard settings record as one value under one key in a
local JSON key-value file. The record is always read and written whole.
"""

import json
from pathlib import Path

import structlog
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from atia.config import settings

logger = structlog.get_logger(__name__)


class DashboardSettings(BaseModel):
    """Connection and integration settings edited in the Settings view."""

    mongodb_uri: str = Field(
        default="mongodb://localhost:27017",
        description="Connection string of the aggregation database",
    )
    database_name: str = Field(default="atia", description="Database name")
    webhook_url: str = Field(default="", description="Automation webhook URL")
    virustotal_url: str = Field(
        default="https://www.virustotal.com/api/v3",
        description="VirusTotal service URL",
    )
    otx_url: str = Field(
        default="https://otx.alienvault.com/api/v1",
        description="AlienVault OTX service URL",
    )
    abuseipdb_url: str = Field(
        default="https://api.abuseipdb.com/api/v2",
        description="AbuseIPDB service URL",
    )


class SettingsStore:
    """
    Key-value file holding the settings record.

    Other keys in the file are preserved on save; the last save wins.
    """

    def __init__(self, path: Path | None = None, key: str | None = None):
        self.path = path or settings.settings_file
        self.key = key or settings.settings_key

    def _read_all(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("settings_file_unreadable", path=str(self.path), error=str(e))
            return {}
        if not isinstance(data, dict):
            logger.warning("settings_file_invalid", path=str(self.path))
            return {}
        return data

    def load(self) -> DashboardSettings:
        """Load the record, falling back to defaults if absent or invalid."""
        raw = self._read_all().get(self.key)
        if raw is None:
            return DashboardSettings()
        try:
            return DashboardSettings.model_validate(raw)
        except PydanticValidationError as e:
            logger.warning("settings_record_invalid", key=self.key, errors=e.error_count())
            return DashboardSettings()

    def save(self, record: DashboardSettings) -> None:
        """Replace the stored record."""
        data = self._read_all()
        data[self.key] = record.model_dump()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        logger.info("settings_saved", path=str(self.path), key=self.key)

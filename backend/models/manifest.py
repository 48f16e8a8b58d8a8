"""Baseline manifest model.

One manifest exists per linting tool. It records which directories were
baselined, how many violations were accepted, and a fingerprint of the
linter configuration at baseline time. Manifests are frozen: any update is a
replacement by a new manifest value.
"""

import re
from datetime import datetime, timedelta, timezone

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator, model_validator

from utils.fingerprint import UNKNOWN_FINGERPRINT

_HEX_DIGEST_RE = re.compile(r"^[0-9a-f]{32,}$")

# Tolerated clock difference between the writer of a manifest and its reader
CLOCK_SKEW_ALLOWANCE = timedelta(minutes=5)


def _sorted_unique(values: list[str]) -> list[str]:
    return sorted(set(values))


class BaselineManifest(BaseModel):
    """Persisted snapshot of accepted linting state for one tool."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    created_at: datetime
    tool: str = Field(min_length=1)
    version: str = ""  # informational only, never compared
    directories_baselined: list[str] = Field(default_factory=list)
    total_directories: StrictInt = Field(ge=0)
    total_violations: StrictInt = Field(default=0, ge=0)
    config_hash: str = UNKNOWN_FINGERPRINT
    test_excluded: list[str] = Field(default_factory=list)

    @field_validator("created_at")
    @classmethod
    def _ensure_aware(cls, value: datetime) -> datetime:
        # Timestamps written without an offset are read as UTC
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        if value > datetime.now(timezone.utc) + CLOCK_SKEW_ALLOWANCE:
            raise ValueError(f"created_at {value.isoformat()} is in the future")
        return value

    @field_validator("directories_baselined", "test_excluded")
    @classmethod
    def _normalize_names(cls, value: list[str]) -> list[str]:
        for name in value:
            if not name:
                raise ValueError("directory names must be non-empty")
        return _sorted_unique(value)

    @field_validator("config_hash")
    @classmethod
    def _check_config_hash(cls, value: str) -> str:
        if value == UNKNOWN_FINGERPRINT:
            return value
        value = value.lower()
        if not _HEX_DIGEST_RE.match(value):
            raise ValueError(
                f"config_hash must be a hex digest of at least 32 characters or '{UNKNOWN_FINGERPRINT}'"
            )
        return value

    @model_validator(mode="before")
    @classmethod
    def _derive_directory_count(cls, data):
        if isinstance(data, dict) and data.get("total_directories") is None:
            directories = data.get("directories_baselined") or []
            if isinstance(directories, list):
                names = {d for d in directories if isinstance(d, str)}
                data = {**data, "total_directories": len(names)}
        return data

    @model_validator(mode="after")
    def _check_directory_count(self) -> "BaselineManifest":
        actual = len(self.directories_baselined)
        if self.total_directories != actual:
            raise ValueError(
                f"total_directories ({self.total_directories}) does not match "
                f"directories_baselined ({actual})"
            )
        return self

    @classmethod
    def create(
        cls,
        *,
        tool: str,
        version: str,
        directories: list[str],
        violations: int,
        config_hash: str,
        test_excluded: list[str] | None = None,
        now: datetime | None = None,
    ) -> "BaselineManifest":
        """Build a new manifest stamped with the current UTC time."""
        directories = _sorted_unique(directories)
        return cls(
            created_at=now or datetime.now(timezone.utc),
            tool=tool,
            version=version,
            directories_baselined=directories,
            total_directories=len(directories),
            total_violations=violations,
            config_hash=config_hash,
            test_excluded=test_excluded or [],
        )

    def to_payload(self) -> dict:
        """Return the persisted JSON shape of this manifest."""
        return {
            "created_at": self.created_at.astimezone(timezone.utc).isoformat(),
            "tool": self.tool,
            "version": self.version,
            "directories_baselined": list(self.directories_baselined),
            "total_directories": self.total_directories,
            "total_violations": self.total_violations,
            "config_hash": self.config_hash,
            "test_excluded": list(self.test_excluded),
        }

    def drift_key(self) -> tuple:
        """Fields that decide drift; equal keys mean drift-equivalent manifests."""
        return (tuple(self.directories_baselined), self.total_violations, self.config_hash)

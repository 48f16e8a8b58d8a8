"""Data models for baseline drift detection.

DriftReport is recomputed on every status or check call and never persisted.
HealResult describes what an auto-heal changed.
"""

from pydantic import BaseModel, Field

from models.manifest import BaselineManifest

NO_MANIFEST_MESSAGE = "No manifest found - run baseline first"


class DriftReport(BaseModel):
    """Divergence between the live project and a baseline manifest."""

    no_manifest: bool = False
    message: str | None = None  # only set for the "no baseline" result

    has_directory_drift: bool = False
    has_config_drift: bool = False
    has_time_drift: bool = False
    has_violation_drift: bool = False

    added_directories: list[str] = Field(default_factory=list)
    removed_directories: list[str] = Field(default_factory=list)
    age_in_days: int = 0
    details: list[str] = Field(default_factory=list)  # fixed rule order

    @classmethod
    def missing(cls, message: str = NO_MANIFEST_MESSAGE) -> "DriftReport":
        return cls(no_manifest=True, message=message)

    @property
    def has_drift(self) -> bool:
        return (
            self.has_directory_drift
            or self.has_config_drift
            or self.has_time_drift
            or self.has_violation_drift
        )


class HealResult(BaseModel):
    """Before/after summary of an auto-heal."""

    old_directories: list[str] = Field(default_factory=list)
    new_directories: list[str] = Field(default_factory=list)
    old_violations: int = 0
    new_violations: int = 0
    manifest: BaselineManifest

    @property
    def violation_delta(self) -> int:
        return self.new_violations - self.old_violations

"""
experiment_sdk.tier1_runtime.schemas
──────────────────────────────────────
Wire shapes for experiment definitions, overrides and evaluation results.

Definitions arrive as JSON-like payloads produced by the management API, in
either camelCase (``hashAttribute``) or snake_case (``hash_attribute``).
Validation here is purely structural; semantic problems (too few variations,
weights that don't line up with variations) are left to the engine so it can
still return the control value.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

ExperimentStatus = Literal["running", "draft", "stopped"]


class Namespace(BaseModel):
    """A slice ``[start, end)`` of a shared bucketing range."""
    model_config = ConfigDict(frozen=True)

    id: str
    start: float
    end: float


def _coerce_namespace(v: Any) -> Any:
    if isinstance(v, (list, tuple)):
        if len(v) != 3:
            raise ValueError("namespace must be [id, start, end]")
        return {"id": v[0], "start": v[1], "end": v[2]}
    return v


def _coerce_url(v: Any) -> Any:
    if isinstance(v, re.Pattern):
        return v.pattern
    return v


def _clamp_coverage(v: float) -> float:
    return min(max(v, 0.0), 1.0)


class ExperimentOverride(BaseModel):
    """
    Partial experiment definition. Fields that are set replace the
    corresponding field on the live definition; ``variations`` is not
    overridable.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    weights: list[float] | None = None
    coverage: float | None = None
    status: ExperimentStatus | None = None
    active: bool | None = None
    force: int | None = None
    condition: dict[str, Any] | None = None
    url: str | None = None
    groups: list[str] | None = None
    namespace: Namespace | None = None
    hash_attribute: str | None = Field(default=None, alias="hashAttribute")

    @field_validator("namespace", mode="before")
    @classmethod
    def coerce_namespace(cls, v: Any) -> Any:
        return _coerce_namespace(v)

    @field_validator("url", mode="before")
    @classmethod
    def coerce_url(cls, v: Any) -> Any:
        return _coerce_url(v)

    @field_validator("coverage")
    @classmethod
    def clamp_coverage(cls, v: float | None) -> float | None:
        return None if v is None else _clamp_coverage(v)


class ExperimentDefinition(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    key: str = Field(min_length=1)
    variations: list[Any]
    weights: list[float] | None = None
    coverage: float = 1.0
    status: ExperimentStatus = "running"
    active: bool = True
    force: int | None = None
    condition: dict[str, Any] | None = None
    url: str | None = None
    groups: list[str] | None = None
    namespace: Namespace | None = None
    hash_attribute: str = Field(default="id", alias="hashAttribute")
    # Host-side predicate; never part of the wire format.
    include: Callable[[], bool] | None = Field(default=None, exclude=True)

    @field_validator("namespace", mode="before")
    @classmethod
    def coerce_namespace(cls, v: Any) -> Any:
        return _coerce_namespace(v)

    @field_validator("url", mode="before")
    @classmethod
    def coerce_url(cls, v: Any) -> Any:
        return _coerce_url(v)

    @field_validator("coverage")
    @classmethod
    def clamp_coverage(cls, v: float) -> float:
        return _clamp_coverage(v)

    def problems(self) -> list[str]:
        """Semantic defects that make this definition unrunnable."""
        found = []
        if len(self.variations) < 2:
            found.append("fewer than 2 variations")
        if self.weights is not None:
            if len(self.weights) != len(self.variations):
                found.append("weights do not match variations")
            elif any(w < 0 for w in self.weights):
                found.append("negative weight")
        return found


@dataclass(frozen=True)
class ExperimentResult:
    in_experiment: bool
    variation_id: int
    value: Any
    hash_attribute: str
    hash_value: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "inExperiment": self.in_experiment,
            "variationId": self.variation_id,
            "value": self.value,
            "hashAttribute": self.hash_attribute,
            "hashValue": self.hash_value,
        }


@dataclass(frozen=True)
class Assignment:
    """One row of the engine's assignment table."""
    experiment: ExperimentDefinition
    result: ExperimentResult


__all__ = [
    "ExperimentStatus", "Namespace", "ExperimentOverride",
    "ExperimentDefinition", "ExperimentResult", "Assignment",
]

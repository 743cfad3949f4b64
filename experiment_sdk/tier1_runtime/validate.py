"""
experiment_sdk.tier1_runtime.validate
──────────────────────────────────────
Payload validation via Pydantic v2. Raises the SDK's MalformedExperimentError
(not raw Pydantic errors) so the engine has a single exception type to
degrade on.
"""
from __future__ import annotations

from typing import Any, Mapping, Type, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from experiment_sdk.tier0_core.errors import MalformedExperimentError
from experiment_sdk.tier1_runtime.schemas import ExperimentDefinition, ExperimentOverride

T = TypeVar("T", bound=BaseModel)


def validate_input(model: Type[T], data: Any) -> T:
    """
    Validate raw data against a Pydantic model.
    Raises MalformedExperimentError (not Pydantic's) on failure.
    """
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        fields = {
            ".".join(str(loc) for loc in err["loc"]): err["msg"]
            for err in exc.errors()
        }
        raise MalformedExperimentError(
            user_message=f"{model.__name__} failed validation.",
            fields=fields,
        ) from exc


def parse_experiment(data: ExperimentDefinition | Mapping[str, Any]) -> ExperimentDefinition:
    """
    Accept an already-built definition or a JSON-like payload.

    Usage:
        exp = parse_experiment({"key": "checkout-cta", "variations": ["a", "b"]})
    """
    if isinstance(data, ExperimentDefinition):
        return data
    return validate_input(ExperimentDefinition, data)


def parse_override(data: ExperimentOverride | Mapping[str, Any]) -> ExperimentOverride:
    if isinstance(data, ExperimentOverride):
        return data
    return validate_input(ExperimentOverride, data)


__sdk_export__ = {
    "surface": "public",
    "exports": ["validate_input", "parse_experiment", "parse_override"],
    "description": "Pydantic v2 validation of experiment definitions and overrides",
    "tier": "tier1_runtime",
    "module": "validate",
}

"""Structural validation of outbound control instructions.

A batch is a list of instructions, each targeting exactly one device, group
or scene. Fixed fields are strictly typed; only ``value`` and the contents of
``ext_data`` stay dynamic. ``ext_data`` carries optional modifiers such as
delayed execution::

    {"delayEnabled": true, "delayUnit": "m", "delayDuration": 10}

The delay contract is advisory by default and only checked when
``strict_delay`` is requested.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from vtimes_errors import SchemaViolation

_STRICT = ConfigDict(extra="forbid", strict=True, frozen=True)

IDENTIFIER_FIELDS = ("device_id", "group_id", "scene_id")


class DeviceInstruction(BaseModel):
    model_config = _STRICT

    device_id: str
    property: str
    value: Any
    ext_data: dict[str, Any]


class GroupInstruction(BaseModel):
    model_config = _STRICT

    group_id: str
    property: str
    value: Any
    ext_data: dict[str, Any]


class SceneInstruction(BaseModel):
    model_config = _STRICT

    scene_id: str
    ext_data: dict[str, Any]


ControlInstruction = Union[DeviceInstruction, GroupInstruction, SceneInstruction]

_SHAPES: dict[str, type[BaseModel]] = {
    "device_id": DeviceInstruction,
    "group_id": GroupInstruction,
    "scene_id": SceneInstruction,
}


class DelayExtension(BaseModel):
    # Other ext_data keys pass through untouched.
    model_config = ConfigDict(extra="allow", strict=True)

    delayEnabled: bool
    delayUnit: Literal["h", "m", "s"] | None = None
    delayDuration: int | float | None = None

    @model_validator(mode="after")
    def _unit_and_duration_when_enabled(self) -> "DelayExtension":
        if self.delayEnabled and (self.delayUnit is None or self.delayDuration is None):
            raise ValueError("delayUnit and delayDuration are required when delayEnabled is true")
        if self.delayDuration is not None and self.delayDuration <= 0:
            raise ValueError("delayDuration must be positive")
        return self


@dataclass(frozen=True)
class ControlBatch:
    instructions: tuple[ControlInstruction, ...]

    def __len__(self) -> int:
        return len(self.instructions)

    def __iter__(self):
        return iter(self.instructions)

    def to_payload(self) -> list[dict[str, Any]]:
        return [i.model_dump() for i in self.instructions]


def _violation(index: int, field: str | None, message: str) -> dict[str, Any]:
    return {"index": index, "field": field, "message": message}


def _from_pydantic(index: int, err: ValidationError, prefix: str = "") -> list[dict[str, Any]]:
    out = []
    for e in err.errors():
        loc = ".".join(str(p) for p in e.get("loc", ()))
        field = f"{prefix}{loc}" if loc else (prefix.rstrip(".") or None)
        out.append(_violation(index, field, str(e.get("msg"))))
    return out


def _check_delay(index: int, ext_data: dict[str, Any]) -> list[dict[str, Any]]:
    if not any(str(k).startswith("delay") for k in ext_data):
        return []
    try:
        DelayExtension.model_validate(ext_data)
    except ValidationError as e:
        return _from_pydantic(index, e, prefix="ext_data.")
    return []


def validate(payload: Any, *, strict_delay: bool = False) -> ControlBatch:
    """Return the accepted batch or raise :class:`SchemaViolation` listing every problem.

    Pure: no I/O. An element must carry exactly one identifier field and then
    match that shape exactly, with no missing, mistyped or unknown fields.
    """
    if not isinstance(payload, (list, tuple)):
        raise SchemaViolation([_violation(-1, None, "control batch must be a list of instructions")])

    violations: list[dict[str, Any]] = []
    accepted: list[ControlInstruction] = []

    for index, item in enumerate(payload):
        if not isinstance(item, Mapping):
            violations.append(_violation(index, None, "instruction must be an object"))
            continue

        present = [f for f in IDENTIFIER_FIELDS if f in item]
        if not present:
            violations.append(_violation(index, None, "instruction needs one of device_id, group_id or scene_id"))
            continue
        if len(present) > 1:
            violations.append(_violation(index, ",".join(present), "ambiguous target: only one of device_id, group_id or scene_id is allowed"))
            continue

        try:
            instruction = _SHAPES[present[0]].model_validate(dict(item))
        except ValidationError as e:
            violations.extend(_from_pydantic(index, e))
            continue

        if strict_delay:
            delay_problems = _check_delay(index, instruction.ext_data)
            if delay_problems:
                violations.extend(delay_problems)
                continue

        accepted.append(instruction)

    if violations:
        raise SchemaViolation(violations)

    return ControlBatch(tuple(accepted))

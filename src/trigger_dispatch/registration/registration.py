"""Registration — one configured binding of a plugin to an entity kind.

:class:`Registration` is the immutable record the dispatch engine works
with. :class:`RegistrationRow` is the pydantic model used to validate the
raw mappings handed over by a configuration source before they become
registrations.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, ValidationError

from trigger_dispatch.errors import ConfigurationError

#: Extension-point tag used by every registration this framework dispatches.
EXTENSION_POINT = "trigger_action"


@dataclass(frozen=True)
class Registration:
    """A configured plugin binding.

    Parameters
    ----------
    target_kind:
        Entity kind the binding applies to (e.g. ``"invoice"``).
    order_key:
        Signed integer; registrations run in ascending order. Keys need not
        be unique or contiguous.
    constructor_ref:
        Name of a registered
        :class:`~trigger_dispatch.plugins.contracts.PluginConstructor`.
    extension_point:
        Tag naming the contract ``constructor_ref`` must satisfy.
    additional_data:
        Opaque string handed to the constructor unchanged.
    description:
        Free text for operators.
    bypass_execution:
        When ``True`` the registration is configured but switched off.
    """

    target_kind: str
    order_key: int
    constructor_ref: str
    extension_point: str = EXTENSION_POINT
    additional_data: str = ""
    description: str = ""
    bypass_execution: bool = False

    def __post_init__(self) -> None:
        if not self.target_kind:
            raise ValueError("Registration.target_kind must be a non-empty string.")
        if not self.constructor_ref:
            raise ValueError("Registration.constructor_ref must be a non-empty string.")

    def to_dict(self) -> dict[str, object]:
        """Serialize to a plain dictionary in configuration-row form."""
        return {
            "target_kind": self.target_kind,
            "order_key": self.order_key,
            "constructor_ref": self.constructor_ref,
            "extension_point": self.extension_point,
            "additional_data": self.additional_data,
            "description": self.description,
            "bypass_execution": self.bypass_execution,
        }


class RegistrationRow(BaseModel):
    """Schema of one raw configuration row."""

    model_config = ConfigDict(extra="forbid", frozen=True, str_strip_whitespace=True)

    target_kind: str = Field(min_length=1)
    order_key: StrictInt
    constructor_ref: str = Field(min_length=1)
    extension_point: str = Field(default=EXTENSION_POINT, min_length=1)
    additional_data: str = ""
    description: str = ""
    bypass_execution: StrictBool = False

    def to_registration(self) -> Registration:
        return Registration(**self.model_dump())


def parse_row(row: Mapping[str, object], target_kind: str = "") -> Registration:
    """Validate *row* and return the :class:`Registration` it describes.

    Raises
    ------
    ConfigurationError
        If the row does not match :class:`RegistrationRow`.
    """
    try:
        return RegistrationRow.model_validate(dict(row)).to_registration()
    except ValidationError as exc:
        ref = row.get("constructor_ref")
        raise ConfigurationError(
            f"Malformed registration row for kind {target_kind!r}: "
            f"{exc.error_count()} validation error(s)\n{exc}",
            target_kind=target_kind,
            constructor_ref=str(ref) if ref is not None else None,
        ) from exc

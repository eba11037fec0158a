"""Shared pydantic base for every caseglobe configuration layer."""

from pydantic import BaseModel, ConfigDict


class CaseGlobeBaseModel(BaseModel):
    """Strict base: unknown keys rejected, assignments re-validated,
    enums stored as values, string inputs stripped.

    Layers that must tolerate legacy keys (UserConfig) relax ``extra`` in
    their own ``model_config``.
    """

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
    )

    def explicit_values(self) -> dict:
        """Fields the caller actually set to a value, as a plain dict.

        Override sections use this so an unset field never masks a lower
        configuration layer.
        """
        return self.model_dump(exclude_none=True)

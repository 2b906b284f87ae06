"""Signal configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SignalConfig(BaseModel):
    """Per-signal options."""

    name: str | None = Field(
        default=None,
        title="Signal Name",
        examples=["value_changed", "user_created"],
    )
    """Label used in log records and in the signal's repr."""

    raise_exceptions: bool = Field(
        default=True,
        title="Raise Callback Exceptions",
    )
    """If True, an exception raised by a callback propagates out of emit.

    If False, it is logged and dispatch continues with the next slot.
    """

    model_config = ConfigDict(use_attribute_docstrings=True, extra="forbid", frozen=True)

    def merged(self, **overrides: object) -> SignalConfig:
        """Return a copy with every non-None override applied."""
        update = {k: v for k, v in overrides.items() if v is not None}
        if not update:
            return self
        return self.model_validate(self.model_dump() | update)

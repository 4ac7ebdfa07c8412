"""Registry configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RegistryConfig(BaseModel):
    """Signal registry configuration."""

    name: str = Field(
        default="default",
        min_length=1,
        title="Registry Name",
        examples=["default", "ui", "game"],
    )
    """Name used in log records and repr."""

    thread_safe: bool = Field(default=False, title="Thread Safe")
    """Guard both indexes with a single re-entrant lock."""

    raise_exceptions: bool = Field(default=True, title="Raise Callback Exceptions")
    """Propagate callback errors out of emit.

    If False, errors are logged and emission continues with the next connection.
    """

    model_config = ConfigDict(use_attribute_docstrings=True, extra="forbid", frozen=True)

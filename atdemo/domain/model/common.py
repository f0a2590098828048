"""Base model for domain records."""

from pydantic import BaseModel, ConfigDict


class DomainModel(BaseModel):
    """Frozen pydantic model.

    Flow state and credentials are rewritten as whole records, never
    mutated in place; ``model_copy(update=...)`` produces the next version.
    """

    model_config = ConfigDict(frozen=True)

"""Remote App Schema — shape of one item reported by the remote app lister.

Invariants:
    - id is required and kept verbatim (no trimming, no case folding)
    - updated_at is an opaque string; None means "unknown", never "changed"
    - Extra fields are kept on the model (model_extra)

Design Decisions:
    - Accepts both snake_case and the lister's camelCase names (resourceId,
      spaceId, updatedAt) so listings can be passed through untouched
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class RemoteAppItem(BaseModel):
    """Current ground truth for one app."""
    model_config = ConfigDict(extra="allow", frozen=True)

    id: str = Field(validation_alias=AliasChoices("id", "resourceId"))
    name: str = ""
    space_id: str | None = Field(
        None, validation_alias=AliasChoices("space_id", "spaceId"),
    )
    updated_at: str | None = Field(
        None, validation_alias=AliasChoices("updated_at", "updatedAt"),
    )

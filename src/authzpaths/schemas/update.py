from __future__ import annotations

from typing import Annotated, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from authzpaths.interning import intern_path

ALL_PATHS = "__ALL_PATHS__"
MAX_SEQUENCE_NUMBER = 2 ** 64 - 1

Component = Annotated[str, Field(min_length=1)]
PathComponents = Annotated[Tuple[Component, ...], Field(min_length=1)]


class PathChanges(BaseModel):
    """Paths added to and removed from one authorizable object."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    authorizable_object_id: str = Field(..., min_length=1, alias="authorizableObjectId")
    added_paths: Tuple[PathComponents, ...] = Field(..., alias="addedPaths")
    removed_paths: Tuple[PathComponents, ...] = Field(..., alias="removedPaths")

    @field_validator("added_paths", "removed_paths")
    def _intern_components(cls, v):
        # decoded snapshots repeat the same segment names many times over
        return tuple(intern_path(p) for p in v)

    @property
    def removes_object(self) -> bool:
        """True when the change drops every path of the object."""
        return self.removed_paths == ((ALL_PATHS,),)


class PathsUpdateV1(BaseModel):
    """Wire form of one update envelope.

    ``path_changes`` keeps insertion order; a later change for the same object
    may depend on an earlier one inside the same envelope. Every field is
    required and unknown keys are rejected, so a truncated or misspelled
    payload never decodes as an empty full image.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    has_full_image: bool = Field(..., alias="hasFullImage")
    sequence_number: int = Field(..., ge=0, le=MAX_SEQUENCE_NUMBER, alias="sequenceNumber")
    path_changes: Tuple[PathChanges, ...] = Field(..., alias="pathChanges")

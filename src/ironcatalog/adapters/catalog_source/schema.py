"""Lenient schema for upstream exercise documents (free-exercise-db layout)."""

from __future__ import annotations

import logging
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

log = logging.getLogger(__name__)


class CatalogBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.info(
            "Catalog %s: unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


class ExerciseDocument(CatalogBaseModel):
    """One upstream record. Every field is optional; the normalizer fills the gaps."""

    id: str | None = None
    name: str | None = None
    force: str | None = None
    level: str | None = None
    mechanic: str | None = None
    equipment: str | list[str] | None = None
    primary_muscles: list[str] | str | None = Field(default=None, alias="primaryMuscles")
    secondary_muscles: list[str] | str | None = Field(default=None, alias="secondaryMuscles")
    instructions: list[str] | str | None = None
    category: str | None = None
    images: list[str] | None = None

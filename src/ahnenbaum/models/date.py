"""Genealogy date model.

Genealogical dates are often imprecise ("about 1890", "before 1900",
"between 1850 and 1860"). Stored as JSON alongside relationship rows.
"""
from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class DateQualifier(str, Enum):
    """How precisely a date is known."""
    EXACT = "exact"
    APPROXIMATE = "approximate"
    RANGE = "range"
    BEFORE = "before"
    AFTER = "after"


class GenealogyDate(BaseModel):
    """A possibly imprecise date. ISO strings (YYYY, YYYY-MM or YYYY-MM-DD)."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    type: DateQualifier = DateQualifier.EXACT
    date: str | None = None
    from_: str | None = Field(default=None, alias="from")
    to: str | None = None

    @model_validator(mode="after")
    def _check_shape(self) -> GenealogyDate:
        if self.type == DateQualifier.RANGE:
            if not self.from_ or not self.to:
                raise ValueError("range dates require both 'from' and 'to'")
        elif not self.date:
            raise ValueError(f"{self.type.value} dates require 'date'")
        return self

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)

    def __str__(self) -> str:
        if self.type == DateQualifier.RANGE:
            return f"between {self.from_} and {self.to}"
        if self.type == DateQualifier.APPROXIMATE:
            return f"about {self.date}"
        if self.type in (DateQualifier.BEFORE, DateQualifier.AFTER):
            return f"{self.type.value} {self.date}"
        return self.date or ""

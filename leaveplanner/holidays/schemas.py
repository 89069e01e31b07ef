"""Bank holiday Pydantic v2 schemas."""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BankHoliday(BaseModel):
    """A public holiday as published by the bank-holiday feed."""

    model_config = ConfigDict(frozen=True)

    title: str
    date: date
    notes: Optional[str] = None

    @field_validator("notes")
    @classmethod
    def blank_notes_to_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class BankHolidayListOut(BaseModel):
    """Bank holidays in a date range."""

    division: str
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    holidays: list[BankHoliday] = Field(default_factory=list)
    total: int = 0

"""Budget ledger models."""

from datetime import date, datetime

from pydantic import BaseModel, Field

from vivot.app.models.common import new_id


class BudgetItem(BaseModel):
    """A committed expense for a trip.

    Items mirrored from an activity completion carry `source_activity_id`.
    """

    id: str = Field(default_factory=new_id)
    trip_id: str
    category: str = Field(..., min_length=1)
    amount: float
    description: str
    date: date
    source_activity_id: str | None = None
    created_at: datetime = Field(default_factory=datetime.now)


class BudgetItemCreate(BaseModel):
    """Request body for POST /budget."""

    trip_id: str
    category: str = Field(..., min_length=1)
    amount: float = Field(..., ge=0)
    description: str = Field(..., min_length=1)
    date: date

    def to_item(self) -> BudgetItem:
        return BudgetItem(**self.model_dump())

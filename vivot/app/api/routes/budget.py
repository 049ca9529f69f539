"""Budget item endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from vivot.app.api.deps import ContextDep, get_ledger
from vivot.app.ledger.budget import BudgetLedger
from vivot.app.models.budget import BudgetItem, BudgetItemCreate

router = APIRouter(prefix="/budget", tags=["budget"])

LedgerDep = Annotated[BudgetLedger, Depends(get_ledger)]


@router.post("", response_model=BudgetItem, status_code=status.HTTP_201_CREATED)
async def create_budget_item(
    request: BudgetItemCreate, ctx: ContextDep, ledger: LedgerDep
) -> BudgetItem:
    """Record an expense; the trip's spent amount is recomputed."""
    return ledger.create_budget_item(ctx, request)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_budget_item(item_id: str, ctx: ContextDep, ledger: LedgerDep) -> Response:
    """Remove an expense; the trip's spent amount is recomputed."""
    ledger.delete_budget_item(ctx, item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

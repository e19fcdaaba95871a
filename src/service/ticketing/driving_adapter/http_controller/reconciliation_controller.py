from typing import List

from fastapi import APIRouter, Depends, Query

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.query.list_reconciliation_entries_use_case import (
    ListReconciliationEntriesUseCase,
)
from src.service.ticketing.driving_adapter.http_controller.auth.current_user import (
    CurrentUser,
    get_current_user,
)
from src.service.ticketing.driving_adapter.http_controller.schema.ticket_schema import (
    ReconciliationEntryResponse,
)


router = APIRouter()


@router.get('')
@Logger.io
async def list_reconciliation_entries(
    limit: int = Query(default=100, ge=1, le=1000),
    current_user: CurrentUser = Depends(get_current_user),
    use_case: ListReconciliationEntriesUseCase = Depends(ListReconciliationEntriesUseCase.depends),
) -> List[ReconciliationEntryResponse]:
    entries = await use_case.execute(limit=limit)
    return [
        ReconciliationEntryResponse(
            id=entry.id,
            payment_id=entry.payment_id,
            payment_type=entry.payment_type.value,
            reason=entry.reason,
            created_at=entry.created_at,
        )
        for entry in entries
    ]

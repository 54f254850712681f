from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query

from ..config import settings
from ..core.celo import explorer_tx_url
from ..core.models import ParsedCommand
from ..core.scheduled import (
    ExecutionInProgressError,
    InvalidTransferStateError,
    ScheduledTransfer,
    ScheduledTransferError,
    TransferNotFoundError,
)
from ..services.engine import NLTEService, get_nlte_service
from ..types import ScheduledTransferRequest

router = APIRouter(prefix="/scheduled")

# Store calls block on file I/O; these routes stay sync and run in the threadpool.


def _serialize(transfer: ScheduledTransfer) -> Dict[str, Any]:
    data = transfer.to_dict()
    data["explorerUrl"] = explorer_tx_url(transfer.tx_hash, settings.network_slug) if transfer.tx_hash else None
    return data


@router.get("")
def list_scheduled(
    address: str = Query(..., description="Wallet address owning the transfers"),
    service: NLTEService = Depends(get_nlte_service),
) -> List[Dict[str, Any]]:
    return [_serialize(t) for t in service.scheduled.list(address)]


@router.post("", status_code=201)
def create_scheduled(
    req: ScheduledTransferRequest,
    service: NLTEService = Depends(get_nlte_service),
) -> Dict[str, Any]:
    try:
        if req.parsed_command is not None:
            transfer = service.scheduled.create_from_command(
                req.user_address,
                ParsedCommand.from_dict(req.parsed_command),
                auto_approved=req.auto_approved,
            )
        else:
            if req.scheduled_time is None:
                raise HTTPException(status_code=400, detail="scheduledTime is required")
            transfer = service.scheduled.create(
                req.user_address,
                recipient_address=req.recipient_address or "",
                amount=req.amount or "",
                scheduled_time=req.scheduled_time,
                token=req.token,
                auto_approved=req.auto_approved,
                recipient_name=req.recipient_name,
            )
    except ScheduledTransferError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return _serialize(transfer)


@router.post("/{transfer_id}/cancel")
def cancel_scheduled(
    transfer_id: str,
    address: str = Query(..., description="Wallet address owning the transfer"),
    service: NLTEService = Depends(get_nlte_service),
) -> Dict[str, Any]:
    try:
        transfer = service.scheduled.cancel(address, transfer_id)
    except TransferNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except (InvalidTransferStateError, ExecutionInProgressError) as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    return _serialize(transfer)

from .requests import ContactCreateRequest, DraftRequest, ParseRequest, ScheduledTransferRequest
from .responses import ApiResponse

__all__ = [
    "ApiResponse",
    "ContactCreateRequest",
    "DraftRequest",
    "ParseRequest",
    "ScheduledTransferRequest",
]

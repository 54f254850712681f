import logging
import time
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from ..core.drafter import format_transaction_for_display
from ..core.models import NaturalLanguageCommand, ParsedCommand
from ..core.parser import get_command_description, get_confidence_percentage
from ..core.tokens import is_valid_address
from ..services.engine import NLTEService, get_nlte_service
from ..types import ApiResponse, DraftRequest, ParseRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/nlte")

EXAMPLE_COMMANDS = [
    {
        "command": "Send 1 cUSD to Alice",
        "intent": "SEND",
        "description": "Transfer cUSD to another address",
        "tips": 'Replace "Alice" with recipient name or address',
    },
    {
        "command": "Swap 1 CELO for cUSD",
        "intent": "SWAP",
        "description": "Swap CELO tokens for stablecoins",
        "tips": "You can specify any supported token",
    },
    {
        "command": "Stake 1 CELO",
        "intent": "STAKE",
        "description": "Lock CELO for staking rewards",
        "tips": "Your CELO will be locked and earn rewards",
    },
    {
        "command": "Send 1 CELO to Alice tomorrow at 3pm",
        "intent": "SEND",
        "description": "Schedule a future transfer of CELO",
        "tips": "You can specify a future date and time for the transfer",
    },
    {
        "command": "Claim my rewards",
        "intent": "CLAIM_REWARDS",
        "description": "Collect pending rewards from staking",
        "tips": "Check your pending rewards before claiming",
    },
    {
        "command": "Send 25.5 cUSD to 0x1234567890123456789012345678901234567890",
        "intent": "SEND",
        "description": "Send with full wallet address",
        "tips": "You can use full addresses instead of names",
    },
]


@router.get("")
async def index() -> Dict[str, Any]:
    """API information endpoint"""
    return {
        "message": "NLTE API - Natural Language Transaction Engine",
        "version": "1.0.0",
        "endpoints": {
            "parse": {"method": "POST", "path": "/nlte/parse", "description": "Parse natural language command"},
            "draft": {"method": "POST", "path": "/nlte/draft", "description": "Draft transaction from parsed command"},
            "examples": {"method": "GET", "path": "/nlte/examples", "description": "Get example commands"},
        },
    }


@router.post("/parse", response_model=ApiResponse)
def parse_command(req: ParseRequest, service: NLTEService = Depends(get_nlte_service)):
    if not req.command or not req.command.strip():
        raise HTTPException(status_code=400, detail="Invalid command")

    command = NaturalLanguageCommand(
        text=req.command,
        timestamp=int(time.time() * 1000),
        user_id=req.user_id,
    )
    try:
        parsed = service.parse(command, user_key=req.user_address)
    except Exception:
        logger.exception("Parse failed for %r", req.command)
        return JSONResponse(status_code=500, content={"success": False, "error": "Failed to parse command"})

    data = parsed.to_dict()
    data["description"] = get_command_description(parsed)
    data["confidencePercentage"] = get_confidence_percentage(parsed)
    return ApiResponse(success=True, data=data)


@router.post("/draft", response_model=ApiResponse)
async def draft_transaction(req: DraftRequest, service: NLTEService = Depends(get_nlte_service)):
    if not req.parsed_command or not req.user_address:
        raise HTTPException(status_code=400, detail="Missing required fields: parsedCommand and userAddress")
    if not is_valid_address(req.user_address):
        raise HTTPException(status_code=400, detail="Invalid Ethereum address format")

    try:
        parsed = ParsedCommand.from_dict(req.parsed_command)
        draft = await service.draft_transaction(parsed, req.user_address)
    except Exception:
        logger.exception("Draft failed for %s", req.user_address)
        return JSONResponse(status_code=500, content={"success": False, "error": "Failed to draft transaction"})

    data = draft.to_dict()
    data["display"] = format_transaction_for_display(draft)
    return ApiResponse(success=True, data=data)


@router.get("/examples", response_model=ApiResponse)
async def examples() -> ApiResponse:
    return ApiResponse(
        success=True,
        data=EXAMPLE_COMMANDS,
        note="These are example natural language commands you can use with NLTE",
    )

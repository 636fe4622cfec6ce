"""POST /v1/messages - Inbound chat message endpoint"""

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from carteira_gateway.api.dependencies import get_dispatcher, get_request_id
from carteira_gateway.api.v1.schemas import DispatchResponse, MessageRequest
from carteira_gateway.infrastructure.database.session import get_db
from carteira_gateway.services.dispatcher import InboundMessage, MessageDispatcher

router = APIRouter()


@router.post("/messages", response_model=DispatchResponse)
def receive_message(
    request_body: MessageRequest,
    request: Request,
    db: Session = Depends(get_db),
    dispatcher: MessageDispatcher = Depends(get_dispatcher),
):
    """
    Classify a chat message and apply it to the sender's wallet.

    Flow:
    1. Drop empty and duplicate messages
    2. Register unknown senders (welcome)
    3. Classify and run the command / expense / installment
    4. Commit, or roll back and report a structured error

    Domain errors come back as status="error" with a stable `code`.
    """
    request_id = get_request_id(request)

    try:
        # One message at a time, committed before the next one is read
        with dispatcher.lock:
            result = dispatcher.handle(
                db,
                InboundMessage(
                    user_id=request_body.user_id,
                    message_id=request_body.message_id,
                    text=request_body.text,
                    display_name=request_body.display_name,
                    chat_id=request_body.chat_id,
                ),
            )
            if result.status == "error":
                db.rollback()
            else:
                db.commit()
        return DispatchResponse(**asdict(result))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

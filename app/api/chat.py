import logging
from typing import Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from app.core.exceptions import InvalidRequestError
from app.core.security import get_session_user_id
from app.repositories import Repository, get_repository
from app.schemas.chat import ChatReply, ChatRequest
from app.schemas.finance import UserContext
from app.services.chat_gateway import ChatGateway
from app.services.prompt_builder import build_prompt

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


def get_chat_gateway(request: Request) -> ChatGateway:
    return request.app.state.chat_gateway


@router.get("/chat")
def chat_status():
    return {"status": "online"}


@router.post("/chat", response_model=ChatReply)
async def chat(
    body: ChatRequest,
    request: Request,
    user_id: Optional[str] = Depends(get_session_user_id),
    repo: Repository = Depends(get_repository),
    gateway: ChatGateway = Depends(get_chat_gateway),
):
    """
    Accepts either the full conversation (``messages``) or a single
    ``message``. The system prompt is built from the caller's stored data
    when a session is present.
    """
    message = body.last_user_message()
    if not message:
        raise InvalidRequestError("Message is required")

    gateway.ensure_configured()

    context = await run_in_threadpool(repo.load_context, user_id) if user_id else UserContext()
    logger.info(
        "Chat request: user=%s history=%d credit_score=%s",
        user_id or "anonymous", len(body.messages), body.credit_score,
    )

    conversation = [
        {"role": "system", "content": build_prompt(body.credit_score, body.credit_analysis_date, context)}
    ]
    if body.messages:
        conversation.extend(m.model_dump() for m in body.messages)
    else:
        conversation.append({"role": "user", "content": message})

    content = await gateway.complete(conversation, referer=request.headers.get("origin"))
    return ChatReply(id=str(uuid4()), role="assistant", content=content, message=content)

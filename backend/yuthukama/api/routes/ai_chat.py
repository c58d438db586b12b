# backend/yuthukama/api/routes/ai_chat.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from yuthukama.api.deps import get_ai_client
from yuthukama.core.security import get_current_user
from yuthukama.models.user import User
from yuthukama.schemas.chat import AIMessageIn, AIMessageOut
from yuthukama.services.ai_client import AIConfigurationError, GeminiClient, UpstreamServiceError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chat", tags=["ai"])


@router.post("/ai-message", response_model=AIMessageOut)
def ai_message(
    payload: Optional[AIMessageIn] = None,
    current_user: User = Depends(get_current_user),
    client: GeminiClient = Depends(get_ai_client),
):
    """Forward the prompt to the generative AI service and relay its text."""
    if payload is None or not payload.message or not payload.message.strip():
        raise HTTPException(status_code=400, detail="Message is required")

    try:
        text = client.generate_reply(payload.message)
    except AIConfigurationError:
        logger.error("Gemini API key is missing in config")
        raise HTTPException(status_code=500, detail="AI service configuration error")
    except UpstreamServiceError:
        # provider diagnostics stay in the server log
        logger.exception("AI service call failed for user %s", current_user.id)
        raise HTTPException(status_code=500, detail="Error communicating with AI service")

    return AIMessageOut(response=text)

# backend/yuthukama/services/ai_client.py
"""
Client for the Gemini generateContent REST API.

Any failure surfaces as UpstreamServiceError; callers log the detail and
answer their own clients with a generic message.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

import requests

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are Yuthukama Assistant, a helpful and friendly AI assistant for the Yuthukama platform.
Your role is to:
1. Provide brief, direct responses (2-3 sentences maximum)
2. Be professional yet friendly
3. Focus on the most important information
4. Use simple, clear language

Guidelines:
- Keep responses extremely concise
- Use bullet points only when necessary
- Avoid unnecessary explanations
- Get straight to the point
- If more detail is needed, ask the user"""

GENERATION_CONFIG = {
    "temperature": 0.7,
    "topK": 40,
    "topP": 0.95,
    "maxOutputTokens": 256,
}

SAFETY_SETTINGS = [
    {"category": category, "threshold": "BLOCK_MEDIUM_AND_ABOVE"}
    for category in (
        "HARM_CATEGORY_HARASSMENT",
        "HARM_CATEGORY_HATE_SPEECH",
        "HARM_CATEGORY_SEXUALLY_EXPLICIT",
        "HARM_CATEGORY_DANGEROUS_CONTENT",
    )
]


class AIConfigurationError(RuntimeError):
    pass


class UpstreamServiceError(RuntimeError):
    pass


@dataclass(frozen=True)
class AIConfig:
    api_key: str | None
    model: str = "gemini-2.0-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout: float = 30.0


def build_payload(message: str) -> dict:
    return {
        "contents": [
            {"parts": [{"text": f"{SYSTEM_PROMPT}\n\nUser: {message}\n\nAssistant:"}]},
        ],
        "generationConfig": GENERATION_CONFIG,
        "safetySettings": SAFETY_SETTINGS,
    }


def extract_text(data: dict) -> str:
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        raise UpstreamServiceError("Invalid response format from Gemini API")
    if not isinstance(text, str) or not text:
        raise UpstreamServiceError("Invalid response format from Gemini API")
    return text


class GeminiClient:
    def __init__(self, config: AIConfig, session: requests.Session | None = None):
        self.config = config
        self.session = session or requests.Session()

    @property
    def endpoint(self) -> str:
        return f"{self.config.base_url.rstrip('/')}/models/{self.config.model}:generateContent"

    def generate_reply(self, message: str) -> str:
        if not self.config.api_key:
            raise AIConfigurationError("Gemini API key is not configured")

        try:
            response = self.session.post(
                self.endpoint,
                params={"key": self.config.api_key},
                json=build_payload(message),
                timeout=self.config.timeout,
            )
        except requests.RequestException as e:
            raise UpstreamServiceError(f"Gemini request failed: {e}") from e

        if not response.ok:
            detail = response.text[:500]
            raise UpstreamServiceError(f"Gemini API returned {response.status_code}: {detail}")

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamServiceError("Gemini API returned a non-JSON body") from e

        return extract_text(data)

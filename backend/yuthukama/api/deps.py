# backend/yuthukama/api/deps.py
"""Collaborators built from Settings; tests replace them via app.dependency_overrides."""
from __future__ import annotations

from fastapi import Depends

from yuthukama.core.config import Settings, get_settings
from yuthukama.services.ai_client import AIConfig, GeminiClient
from yuthukama.services.mailer import EmailDispatcher, SMTPConfig
from yuthukama.services.storage import LocalAttachmentStore, StorageConfig


def get_ai_client(settings: Settings = Depends(get_settings)) -> GeminiClient:
    return GeminiClient(AIConfig(
        api_key=settings.gemini_api_key,
        model=settings.gemini_model,
        base_url=settings.gemini_base_url,
        timeout=settings.ai_timeout_seconds,
    ))


def get_email_dispatcher(settings: Settings = Depends(get_settings)) -> EmailDispatcher:
    return EmailDispatcher(SMTPConfig(
        host=settings.smtp_host,
        port=settings.smtp_port,
        user=settings.smtp_user,
        password=settings.smtp_password,
        use_tls=settings.smtp_use_tls,
        sender=settings.email_from,
    ))


def get_attachment_store(settings: Settings = Depends(get_settings)) -> LocalAttachmentStore:
    return LocalAttachmentStore(StorageConfig(
        directory=settings.upload_dir,
        url_prefix=settings.upload_url_prefix,
        max_bytes=settings.max_upload_bytes,
    ))

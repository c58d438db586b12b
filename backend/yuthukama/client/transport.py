"""Shared request plumbing for the client SDK."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Type

import requests
from pydantic import BaseModel, TypeAdapter, ValidationError

TokenProvider = Callable[[], Optional[str]]


@dataclass(frozen=True)
class ClientConfig:
    base_url: str = "http://localhost:8000"
    timeout: float = 10.0


class ChatGatewayError(Exception):
    """Uniform client-side failure: a message and, if the server answered, its status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def to_dict(self) -> dict:
        return {"message": self.message}


def _server_message(response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"]
    return None


class ApiClient:
    def __init__(
        self,
        config: ClientConfig,
        token_provider: Optional[TokenProvider] = None,
        session: Optional[requests.Session] = None,
    ):
        self.config = config
        self.token_provider = token_provider
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.config.base_url.rstrip('/')}{path}"

    def _request(
        self,
        method: str,
        path: str,
        default_error: str,
        token: Optional[str] = None,
        model: Optional[Type[BaseModel]] = None,
        many: bool = False,
        **kwargs: Any,
    ) -> Any:
        """
        One HTTP round trip. Returns the decoded JSON body, parsed into
        `model` (or a list of it when `many`) if one is given.

        Raises:
            ChatGatewayError: on transport failure, non-2xx status, a
                non-JSON body or a body that does not fit `model`; carries
                the server's message when it sent one
        """
        headers = dict(kwargs.pop("headers", None) or {})
        if token is None and self.token_provider is not None:
            token = self.token_provider()
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = self.session.request(
                method,
                self._url(path),
                headers=headers,
                timeout=self.config.timeout,
                **kwargs,
            )
        except requests.RequestException:
            raise ChatGatewayError(default_error)

        if not response.ok:
            raise ChatGatewayError(_server_message(response) or default_error, response.status_code)

        try:
            data = response.json()
        except ValueError:
            raise ChatGatewayError(default_error, response.status_code)

        if model is None:
            return data
        try:
            if many:
                return TypeAdapter(List[model]).validate_python(data)
            return model.model_validate(data)
        except ValidationError:
            raise ChatGatewayError(default_error, response.status_code)

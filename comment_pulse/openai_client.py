"""Lightweight OpenAI client helper.

Centralises API-key and model handling so the rest of the codebase can simply do:

    from comment_pulse.openai_client import chat_completion

and know that the ``openai`` package is configured with credentials.
"""
from __future__ import annotations

import os
import types
from typing import Any, Dict, List, Optional


class OpenAIClientError(RuntimeError):
    """Raised when client configuration is invalid (e.g., missing API key)."""


_DEFAULT_MODEL = "gpt-4o-mini"


def default_model() -> str:
    """Return the model id from ``OPENAI_MODEL`` or the built-in default."""
    return os.getenv("OPENAI_MODEL") or _DEFAULT_MODEL


def is_configured() -> bool:
    """Return *True* when an API key is available for remote calls."""
    return bool(os.getenv("OPENAI_API_KEY"))


def _load_openai() -> types.ModuleType:
    """Import ``openai`` lazily.

    Loading is deferred so that unit tests can inject a stub into
    ``sys.modules`` before this function runs.
    """

    import importlib

    return importlib.import_module("openai")


def _ensure_api_key_present() -> str:
    """Return the ``OPENAI_API_KEY`` env var or raise.

    Raises
    ------
    OpenAIClientError
        If the env var is missing or empty.
    """

    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise OpenAIClientError("OPENAI_API_KEY environment variable is not set.")
    return api_key


def get_openai_client() -> types.ModuleType:
    """Configure and return the ``openai`` module.

    This sets ``openai.api_key`` and, if provided, ``openai.organization``.
    Subsequent calls reuse the configured module.
    """

    openai = _load_openai()

    if getattr(openai, "api_key", None):  # already configured
        return openai

    openai.api_key = _ensure_api_key_present()

    org = os.getenv("OPENAI_ORG")
    if org:
        openai.organization = org

    return openai


def chat_completion(
    messages: List[Dict[str, str]],
    *,
    model: Optional[str] = None,
    **kwargs: Any,
) -> Dict[str, Any]:
    """Send a chat request and return a plain ``dict``.

    Parameters
    ----------
    messages
        Chat messages in OpenAI format.
    model
        Model id to use (default: ``OPENAI_MODEL`` or ``gpt-4o-mini``).
    kwargs
        Additional parameters forwarded to the create call, e.g.
        ``temperature`` or ``timeout``.
    """

    openai = get_openai_client()
    model = model or default_model()

    # ``openai.chat.completions.create`` returns a Pydantic model; callers
    # receive ``{"choices": [{"message": {"content": ...}}], "model": ...}``.
    completion = openai.chat.completions.create(model=model, messages=messages, **kwargs)
    choices = [
        {"message": {"content": choice.message.content}}
        for choice in completion.choices
    ]
    return {"choices": choices, "model": completion.model}

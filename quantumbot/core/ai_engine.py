"""
Completion gateway on top of Google Gemini.

- Har call pe poori ordered history jati hai; Gemini per call stateless hai.
- assistant -> model role mapping, Gemini yehi samajhta hai.
- Upstream errors ek stable shape mein: UpstreamAuthError (hamari deployment ki
  key galat hai) ya UpstreamError (baqi sab, upstream message as-is).
"""
import logging
from typing import Dict, List, Optional

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from quantumbot.core.config import Settings
from quantumbot.core.errors import UpstreamAuthError, UpstreamError

logger = logging.getLogger(__name__)

GENERATION_CONFIG = {
    "temperature": 0.7,
    "top_p": 0.9,
    "top_k": 40,
    "max_output_tokens": 2048,
}


def format_history(messages: List[Dict]) -> List[Dict]:
    """
    Gemini expects:
    [
        {"role": "user", "parts": ["message"]},
        {"role": "model", "parts": ["response"]},
    ]
    """
    formatted = []
    for msg in messages:
        role = msg.get("role", "user")
        if role == "assistant":
            role = "model"
        formatted.append({"role": role, "parts": [msg.get("content", "")]})
    return formatted


def _is_auth_failure(exc: Exception) -> bool:
    if isinstance(exc, (google_exceptions.Unauthenticated, google_exceptions.PermissionDenied)):
        return True
    # Gemini answers a bad key with 400 INVALID_ARGUMENT "API key not valid"
    return isinstance(exc, google_exceptions.InvalidArgument) and "api key" in str(exc).lower()


def _upstream_cause(exc: Exception) -> str:
    if isinstance(exc, google_exceptions.GoogleAPICallError) and exc.message:
        return exc.message
    return str(exc) or exc.__class__.__name__


class CompletionGateway:
    """Forwards an ordered message history to Gemini and returns the reply text."""

    def __init__(self, settings: Settings):
        self.api_key = settings.GEMINI_API_KEY
        self.default_model = settings.gemini_model
        self.timeout = settings.COMPLETION_TIMEOUT_SECONDS

    def complete(self, messages: List[Dict], model: Optional[str] = None) -> str:
        if not messages:
            raise ValueError("complete() needs at least one message")
        if not self.api_key:
            logger.error("GEMINI_API_KEY is not set")
            raise UpstreamAuthError()

        model_name = model or self.default_model
        history = format_history(messages)
        try:
            genai.configure(api_key=self.api_key)
            llm = genai.GenerativeModel(model_name=model_name, generation_config=GENERATION_CONFIG)
            chat = llm.start_chat(history=history[:-1])
            response = chat.send_message(
                history[-1]["parts"][0],
                request_options={"timeout": self.timeout},
            )
        except Exception as e:
            logger.error("Gemini API call failed (model=%s): %s", model_name, e)
            if _is_auth_failure(e):
                raise UpstreamAuthError() from e
            raise UpstreamError(_upstream_cause(e)) from e

        try:
            text = response.text
        except ValueError as e:
            # no text parts, e.g. the candidate was blocked by safety filters
            logger.warning("Gemini returned no text: %s", e)
            return ""
        return (text or "").strip()

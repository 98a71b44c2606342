import logging
from typing import Any, Dict, List, Optional

import requests

from resume_matcher.core.config import settings

logger = logging.getLogger(__name__)

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"


def call_openrouter(
    messages: List[Dict[str, str]],
    temperature: float = 0.7,
    max_tokens: Optional[int] = None,
    timeout: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Call OpenRouter API with the specified messages.

    Args:
        messages: List of message dictionaries with 'role' and 'content'
        temperature: Temperature for the model (default 0.7)
        max_tokens: Optional completion token cap
        timeout: Request timeout in seconds (defaults to settings)

    Returns:
        dict: The full decoded response body, including 'choices' and 'usage'

    Raises:
        ValueError: If API key is not configured.
        requests.RequestException: If the API call fails.
    """
    api_key = settings.ai.openrouter_api_key
    if not api_key:
        raise ValueError("OPENROUTER_API_KEY is not configured. Set it in the environment.")

    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }

    payload = {
        "model": settings.ai.model_name,
        "messages": messages,
        "temperature": temperature,
    }
    if max_tokens:
        payload["max_tokens"] = max_tokens

    logger.info(f"Calling AI Model: {settings.ai.model_name}")
    response = requests.post(
        OPENROUTER_URL,
        json=payload,
        headers=headers,
        timeout=timeout or settings.ai.timeout_seconds,
    )
    response.raise_for_status()
    return response.json()

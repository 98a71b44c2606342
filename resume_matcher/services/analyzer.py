"""
Boundary adapter for the external resume/job analyzer.

The rest of the system sees one call, analyze(resume_text, job_description),
that returns a parsed JSON object plus usage, or raises AnalysisError.
Provider quirks (markdown fences, chatter around the JSON, HTTP failures)
are absorbed here.
"""
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests

from resume_matcher.core import prompts
from resume_matcher.core.config import settings
from resume_matcher.core.exceptions import AnalysisError
from resume_matcher.services.openrouter_client import call_openrouter

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)
_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


@dataclass
class AnalyzerUsage:
    input_tokens: int = 0
    output_tokens: int = 0
    estimated_cost: float = 0.0


@dataclass
class AnalyzerResponse:
    payload: Dict[str, Any]
    usage: AnalyzerUsage = field(default_factory=AnalyzerUsage)
    model: Optional[str] = None


def estimate_cost(input_tokens: int, output_tokens: int) -> float:
    return (
        input_tokens * settings.ai.input_cost_per_million
        + output_tokens * settings.ai.output_cost_per_million
    ) / 1_000_000


def parse_json_object(raw: str) -> Dict[str, Any]:
    """Strip markdown fences and surrounding text, then decode the JSON object."""
    text = _FENCE_RE.sub("", (raw or "").strip()).strip()
    match = _OBJECT_RE.search(text)
    if not match:
        raise AnalysisError("AI response did not contain a JSON object")
    try:
        data = json.loads(match.group())
    except json.JSONDecodeError as e:
        raise AnalysisError(f"AI returned invalid JSON: {e}")
    if not isinstance(data, dict):
        raise AnalysisError("AI response JSON is not an object")
    return data


class OpenRouterAnalyzer:
    def analyze(self, resume_text: str, job_description: str) -> AnalyzerResponse:
        if settings.ai.kill_switch:
            logger.warning("AI Kill-switch is active. Blocking request.")
            raise AnalysisError("AI kill switch active")

        messages = [
            {"role": "system", "content": prompts.RESUME_MATCH_SYSTEM},
            {
                "role": "user",
                "content": prompts.get_prompt(
                    prompts.RESUME_MATCH_USER_TEMPLATE,
                    resume_text=resume_text,
                    job_description=job_description,
                ),
            },
        ]

        logger.info(f"Analyzing resume ({len(resume_text)} chars) against job description ({len(job_description)} chars)")
        try:
            body = call_openrouter(
                messages,
                temperature=settings.ai.temperature,
                max_tokens=settings.ai.max_tokens,
            )
        except requests.exceptions.Timeout:
            logger.error("AI service timeout.")
            raise AnalysisError("AI service reached timeout limit")
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "unknown"
            logger.error(f"AI service HTTP error: {status}")
            raise AnalysisError(f"AI service returned error: {status}")
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error(f"AI service call failed: {e}")
            raise AnalysisError(f"AI service error: {e}")

        try:
            content = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            raise AnalysisError("AI response had no message content")

        usage = body.get("usage") or {}
        input_tokens = int(usage.get("prompt_tokens") or 0)
        output_tokens = int(usage.get("completion_tokens") or 0)

        payload = parse_json_object(content)
        logger.info(f"AI analysis parsed (tokens in={input_tokens}, out={output_tokens})")
        return AnalyzerResponse(
            payload=payload,
            usage=AnalyzerUsage(
                input_tokens=input_tokens,
                output_tokens=output_tokens,
                estimated_cost=estimate_cost(input_tokens, output_tokens),
            ),
            model=body.get("model") or settings.ai.model_name,
        )

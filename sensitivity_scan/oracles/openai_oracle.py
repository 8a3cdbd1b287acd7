"""
OpenAI Oracle
Classifies column descriptions with a chat model in JSON mode.
Supports Azure OpenAI and proxies via base_url.
"""

import json
import os
import logging
from typing import Any, Optional, Sequence

from .base import ClassificationOracle, OracleOptions, OracleResponse, parse_labels
from ..exceptions import ConfigurationError, OracleError, TransientOracleError
from ..framework import CategoryDef

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a data governance assistant that classifies database columns.
{task_description}

Allowed categories (use the label exactly as written):
{categories}

{mode_instruction}
Respond only with JSON of the form:
{{"labels": [{{"label": "<LABEL>", "score": <confidence between 0 and 1>}}]}}"""

SINGLE_MODE_INSTRUCTION = "Return exactly one label."
MULTI_MODE_INSTRUCTION = "Return every applicable label, most relevant first."


class OpenAIClassifyOracle(ClassificationOracle):
    """
    OpenAI API classification oracle

    Models available:
    - gpt-4o-mini (fast, cheap; default)
    - gpt-4o
    - gpt-4-turbo
    """

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        organization: Optional[str] = None,
        timeout: float = 60.0,
        client: Any = None
    ):
        """
        Initialize OpenAI oracle

        Args:
            model: OpenAI model name
            api_key: OpenAI API key (defaults to OPENAI_API_KEY env var)
            base_url: Custom API base URL (for Azure or proxies)
            organization: OpenAI organization ID
            timeout: Per-request timeout in seconds
            client: Pre-built OpenAI client (skips construction)
        """
        self._model_name = model

        if client is not None:
            self._client = client
            return

        try:
            from openai import OpenAI
        except ImportError:
            raise ImportError(
                "openai not installed. Install with: pip install openai"
            )

        api_key = api_key or os.getenv("OPENAI_API_KEY")
        base_url = base_url or os.getenv("OPENAI_API_URL")

        if not api_key:
            raise ConfigurationError(
                "OpenAI API key not provided. "
                "Set OPENAI_API_KEY environment variable or pass api_key parameter."
            )

        # Retries are owned by the orchestrator
        client_kwargs = {"api_key": api_key, "timeout": timeout, "max_retries": 0}
        if base_url:
            client_kwargs["base_url"] = base_url
        if organization:
            client_kwargs["organization"] = organization

        self._client = OpenAI(**client_kwargs)

    @property
    def name(self) -> str:
        return f"openai:{self._model_name}"

    def _system_prompt(self, categories: Sequence[CategoryDef], options: OracleOptions) -> str:
        category_lines = "\n".join(f"- {c.label}: {c.description}" for c in categories)
        return SYSTEM_PROMPT.format(
            task_description=options.task_description,
            categories=category_lines,
            mode_instruction=SINGLE_MODE_INSTRUCTION if options.output_mode == "single" else MULTI_MODE_INSTRUCTION
        )

    def classify(
        self,
        text: str,
        categories: Sequence[CategoryDef],
        options: OracleOptions
    ) -> OracleResponse:
        import openai

        messages = [
            {"role": "system", "content": self._system_prompt(categories, options)},
            {"role": "user", "content": text},
        ]

        try:
            response = self._client.chat.completions.create(
                model=self._model_name,
                messages=messages,
                temperature=0.0,
                response_format={"type": "json_object"}
            )
        except openai.RateLimitError as e:
            raise TransientOracleError(f"OpenAI rate limit: {e}", retry_after=_retry_after(e)) from e
        except (openai.APIConnectionError, openai.InternalServerError) as e:
            raise TransientOracleError(f"OpenAI unavailable: {e}") from e
        except openai.APIError as e:
            raise OracleError(f"OpenAI request failed: {e}") from e

        content = response.choices[0].message.content or ""
        try:
            payload = json.loads(content)
        except json.JSONDecodeError as e:
            raise OracleError(f"Model returned non-JSON content: {content[:200]}") from e

        labels = parse_labels(payload)
        if options.output_mode == "single":
            labels = labels[:1]

        usage = getattr(response, "usage", None)
        return OracleResponse(
            labels=labels,
            raw=payload,
            model=self._model_name,
            metadata={
                "input_tokens": usage.prompt_tokens if usage else 0,
                "output_tokens": usage.completion_tokens if usage else 0
            }
        )


def _retry_after(error: Any) -> Optional[float]:
    """Read a Retry-After header from an OpenAI error, if present."""
    response = getattr(error, "response", None)
    headers = getattr(response, "headers", None) or {}
    value = headers.get("retry-after")
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None

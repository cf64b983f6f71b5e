"""
Generative model client for all LLM requests made by Agri Assist.

This module wraps the OpenAI SDK behind a small capability: given an instruction,
an optional image, an optional output schema and an optional web search flag,
return text plus any grounding citations. Streaming chat returns text chunks in
arrival order. SDK failures are classified into the Agri Assist error taxonomy.
"""

import logging
import os
from typing import Any, Dict, Iterator, List, Optional

from openai import OpenAIError
from pydantic import BaseModel, Field

from .config import config, get_client
from .debug_log import get_debug_logger
from .errors import AgriAssistError, MalformedResponseError, TransportError, UnknownError
from .types import Citation, ImageInput

logger = logging.getLogger(__name__)


class ReasoningModelError(Exception):
    """Raised when reasoning model parameter adjustment fails."""

    pass


def get_env_model_temperature() -> float:
    """Get model temperature from environment variable with default fallback."""
    try:
        temp = float(os.getenv("MODEL_TEMPERATURE", "0.4"))
        if not (0.0 <= temp <= 2.0):
            logger.warning(f"Invalid MODEL_TEMPERATURE value: {temp}. Using 0.4 as default.")
            return 0.4
        return temp
    except (ValueError, TypeError):
        logger.warning("Invalid MODEL_TEMPERATURE format. Using 0.4 as default.")
        return 0.4


def is_reasoning_model_error(exception: Exception) -> bool:
    """
    Check if the exception indicates the configured model is a reasoning model.

    Detects status 400 invalid_request_error with code unsupported_value or
    unsupported_parameter on the temperature or max_tokens parameter.
    """
    if getattr(exception, "status_code", None) != 400:
        return False

    error_data = getattr(exception, "body", None)
    if not isinstance(error_data, dict):
        return False

    error_info = error_data.get("error", error_data)
    if not isinstance(error_info, dict):
        return False

    error_type = str(error_info.get("type") or "").lower()
    error_code = str(error_info.get("code") or "").lower()
    error_param = str(error_info.get("param") or "").lower()

    return (
        error_type == "invalid_request_error"
        and error_code in ("unsupported_value", "unsupported_parameter")
        and error_param in ("temperature", "max_tokens")
    )


def adjust_llm_params_for_reasoning_model(original_params: Dict[str, Any], request_kind: str) -> Dict[str, Any]:
    """
    Adjust request parameters for reasoning model compatibility.

    Drops temperature and renames max_tokens to max_completion_tokens.
    """
    adjusted_params = original_params.copy()
    adjusted_params.pop("temperature", None)
    if "max_tokens" in adjusted_params:
        adjusted_params["max_completion_tokens"] = adjusted_params.pop("max_tokens")

    logger.info(f"Adjusted parameters for reasoning model ({request_kind}): {sorted(adjusted_params)}")
    return adjusted_params


def make_llm_request_with_reasoning_fallback(client: Any, original_params: Dict[str, Any], request_kind: str) -> Any:
    """
    Call chat completions, retrying once with reasoning-model parameters if needed.

    Args:
        client: OpenAI client instance
        original_params: Original request parameters
        request_kind: Request kind used for logging

    Returns:
        Response from the successful call (a stream when stream=True)

    Raises:
        ReasoningModelError: If the retry with adjusted parameters also fails
    """
    try:
        return client.chat.completions.create(**original_params)
    except Exception as e:
        if not is_reasoning_model_error(e):
            raise

        logger.info(f"Detected reasoning model error, adjusting parameters for {request_kind}")
        adjusted_params = adjust_llm_params_for_reasoning_model(original_params, request_kind)
        try:
            return client.chat.completions.create(**adjusted_params)
        except Exception as retry_error:
            raise ReasoningModelError(f"Failed to make LLM request even after adjusting for reasoning model: {retry_error}") from e


def _classify(error: Exception) -> AgriAssistError:
    if isinstance(error, AgriAssistError):
        return error
    if isinstance(error, (OpenAIError, ReasoningModelError, ConnectionError, TimeoutError)):
        return TransportError(str(error))
    return UnknownError(str(error))


def extract_citations(message: Any) -> List[Citation]:
    """Collect url_citation annotations from a chat completion message, in order."""
    citations = []
    for annotation in getattr(message, "annotations", None) or []:
        if getattr(annotation, "type", None) != "url_citation":
            continue
        url_citation = getattr(annotation, "url_citation", None)
        uri = getattr(url_citation, "url", None)
        if uri:
            citations.append(Citation(uri=uri, title=getattr(url_citation, "title", None) or ""))
    return citations


class Generation(BaseModel):
    """Text returned by the model plus any grounding citations."""

    text: str
    citations: List[Citation] = Field(default_factory=list)


class GenerativeClient:
    """
    Thin adapter from Agri Assist requests to OpenAI chat completions.
    """

    def __init__(self, client: Any = None):
        self.client = client if client is not None else get_client()
        self.debug_logger = get_debug_logger()

    def _base_params(self, messages: List[Dict[str, Any]], web_search: bool = False) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "model": config.search_model if web_search else config.llm_model,
            "messages": messages,
        }
        if web_search:
            # search models reject sampling parameters
            params["web_search_options"] = {}
        elif not config.is_reasoning_model:
            params["temperature"] = get_env_model_temperature()
        return params

    def generate(
        self,
        instruction: str,
        image: Optional[ImageInput] = None,
        schema: Optional[Dict[str, Any]] = None,
        web_search: bool = False,
        request_kind: str = "generate",
    ) -> Generation:
        """
        Make a single (non-streaming) request.

        Args:
            instruction: Full instruction text
            image: Optional image sent inline as a data URL
            schema: Optional json_schema block ({"name", "schema", "strict"}) the output must match
            web_search: Use the web-search model and collect citations
            request_kind: Request kind used for logging

        Returns:
            Generation with the response text and citations

        Raises:
            TransportError: The capability failed
            MalformedResponseError: The capability returned no text
            UnknownError: Anything else
        """
        if image is None:
            content: Any = instruction
        else:
            content = [
                {"type": "text", "text": instruction},
                {"type": "image_url", "image_url": {"url": image.as_data_url()}},
            ]

        params = self._base_params([{"role": "user", "content": content}], web_search=web_search)
        if schema is not None:
            params["response_format"] = {"type": "json_schema", "json_schema": schema}

        self.debug_logger.log_llm_request(request_kind, instruction, has_image=image is not None)

        try:
            response = make_llm_request_with_reasoning_fallback(self.client, params, request_kind)
        except Exception as e:
            logger.error(f"{request_kind} request failed: {e}")
            raise _classify(e) from e

        message = response.choices[0].message
        text = message.content
        if not text:
            raise MalformedResponseError(f"Empty response from model for {request_kind} request")

        self.debug_logger.log_llm_response(request_kind, text)
        return Generation(text=text, citations=extract_citations(message) if web_search else [])

    def stream(self, messages: List[Dict[str, Any]], request_kind: str = "chat") -> Iterator[str]:
        """
        Make a streaming request and yield text chunks in arrival order.

        Args:
            messages: Full conversation in OpenAI message format

        Raises:
            TransportError: The capability failed, before or during the stream
        """
        params = self._base_params(messages)
        params["stream"] = True

        self.debug_logger.log_llm_request(request_kind, messages[-1]["content"] if messages else "")

        received = []
        try:
            stream = make_llm_request_with_reasoning_fallback(self.client, params, request_kind)
            for chunk in stream:
                if not chunk.choices:
                    continue
                piece = chunk.choices[0].delta.content
                if piece:
                    received.append(piece)
                    yield piece
        except Exception as e:
            logger.error(f"{request_kind} stream failed: {e}")
            raise _classify(e) from e

        self.debug_logger.log_llm_response(request_kind, "".join(received))


# Global client instance
_generative_client: Optional[GenerativeClient] = None


def get_generative_client() -> GenerativeClient:
    """Get or create the global generative client."""
    global _generative_client
    if _generative_client is None:
        _generative_client = GenerativeClient()
    return _generative_client

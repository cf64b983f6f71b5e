"""
Prompt orchestration for Agri Assist.

This module turns a request intent (diagnose, identify, crop info, market prices,
community question) into a model call and parses the answer into its typed
result. Schema-bound requests declare a strict JSON schema; free-text requests
pass the answer through untouched.
"""

import json
import logging
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as SchemaValidationError

from .debug_log import get_debug_logger
from .errors import MalformedResponseError, ValidationError
from .llm_handler import GenerativeClient, get_generative_client
from .market import parse_market_table, split_summary
from .strings import t
from .types import (
    CommunityAnswer,
    CropInfoResult,
    DiagnosisResult,
    ImageInput,
    Language,
    MarketPriceReport,
    PlantIdentificationResult,
)

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=BaseModel)

_STRING_LIST = {"type": "array", "items": {"type": "string"}}

DIAGNOSIS_SCHEMA: Dict[str, Any] = {
    "name": "plant_diagnosis",
    "strict": True,
    "schema": {
        "type": "object",
        "properties": {
            "diseaseName": {"type": "string", "description": "Name of the plant disease."},
            "confidence": {"type": "string", "description": "Confidence level of the diagnosis (e.g., High, Medium, Low)."},
            "description": {"type": "string", "description": "A brief description of the disease."},
            "organicTreatments": {**_STRING_LIST, "description": "List of organic treatment methods."},
            "chemicalTreatments": {**_STRING_LIST, "description": "List of chemical treatment methods."},
            "preventionTips": {**_STRING_LIST, "description": "List of tips to prevent the disease."},
        },
        "required": ["diseaseName", "confidence", "description", "organicTreatments", "chemicalTreatments", "preventionTips"],
        "additionalProperties": False,
    },
}

IDENTIFICATION_SCHEMA: Dict[str, Any] = {
    "name": "plant_identification",
    "strict": True,
    "schema": {
        "type": "object",
        "properties": {
            "commonName": {"type": "string", "description": "Common name of the plant."},
            "scientificName": {"type": "string", "description": "Scientific name of the plant."},
            "description": {"type": "string", "description": "A brief description of the plant."},
            "careTips": {**_STRING_LIST, "description": "List of care tips for the plant."},
        },
        "required": ["commonName", "scientificName", "description", "careTips"],
        "additionalProperties": False,
    },
}


def language_directive(language: Language) -> str:
    """Sentence appended to every instruction to pin the response language."""
    return f"Respond in the language with locale code: {Language(language).value}."


def _require_text(value: Optional[str], message: str) -> str:
    if not value or not value.strip():
        raise ValidationError(message)
    return value.strip()


class PromptOrchestrator:
    """
    Builds requests for each request kind and parses the answers.

    Input preconditions are checked before the generative client is touched, so a
    ValidationError never costs a network call.
    """

    def __init__(self, client: Optional[GenerativeClient] = None):
        self._client = client
        self.debug_logger = get_debug_logger()

    @property
    def client(self) -> GenerativeClient:
        if self._client is None:
            self._client = get_generative_client()
        return self._client

    def _parse_structured(self, text: str, result_type: Type[R], context: str, language: Language) -> R:
        """Parse schema-bound JSON into its result model or raise MalformedResponseError."""
        try:
            data = json.loads(text.strip())
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse {context} response: {text!r}")
            self.debug_logger.log_validation_error(e, text, context)
            raise MalformedResponseError(t(language, "error_invalid_response"), raw_text=text) from e

        try:
            return result_type.model_validate(data)
        except SchemaValidationError as e:
            logger.error(f"{context} response does not match schema: {e}")
            self.debug_logger.log_validation_error(e, data, context)
            raise MalformedResponseError(t(language, "error_invalid_response"), raw_text=text) from e

    def diagnose(self, text: Optional[str], language: Language, image: Optional[ImageInput] = None) -> DiagnosisResult:
        """
        Diagnose a plant disease from a symptom description and/or an image.

        Raises:
            ValidationError: Neither text nor image given
            MalformedResponseError: Answer is not valid schema JSON
            TransportError: The model call failed
        """
        description = (text or "").strip()
        if not description and image is None:
            raise ValidationError(t(language, "error_prompt_or_image"))

        instruction = " ".join(part for part in (t(language, "diagnoser_prompt"), description, language_directive(language)) if part)
        generation = self.client.generate(instruction, image=image, schema=DIAGNOSIS_SCHEMA, request_kind="diagnose")
        return self._parse_structured(generation.text, DiagnosisResult, "diagnosis", language)

    def identify(self, text: Optional[str], language: Language, image: Optional[ImageInput]) -> PlantIdentificationResult:
        """
        Identify a plant from an image, with optional extra context text.

        Raises:
            ValidationError: No image given
        """
        if image is None:
            raise ValidationError(t(language, "error_image_required"))

        context = (text or "").strip()
        instruction = " ".join(part for part in (t(language, "identifier_prompt"), context, language_directive(language)) if part)
        generation = self.client.generate(instruction, image=image, schema=IDENTIFICATION_SCHEMA, request_kind="identify")
        return self._parse_structured(generation.text, PlantIdentificationResult, "identification", language)

    def crop_info(self, crop_name: Optional[str], language: Language) -> CropInfoResult:
        """Get a markdown growing guide for a crop."""
        crop = _require_text(crop_name, t(language, "error_crop_name"))
        instruction = (
            f"Provide detailed information about growing {crop}, including soil preparation, planting, watering, "
            f"fertilizing, and harvesting. {language_directive(language)} Format the response in markdown."
        )
        generation = self.client.generate(instruction, request_kind="crop_info")
        return CropInfoResult(crop_name=crop, markdown=generation.text)

    def market_prices(self, crop_name: Optional[str], language: Language) -> MarketPriceReport:
        """
        Get current market prices for a crop using a web-search grounded model.

        Raises:
            ValidationError: Empty crop name
            MalformedResponseError: The answer holds no price table
        """
        crop = _require_text(crop_name, t(language, "error_crop_name"))
        instruction = (
            f'What are the latest market prices for "{crop}" in various markets, particularly in India? '
            f'Provide a summary and then a markdown table with columns for "Market Name", "Price", and "Date". '
            f"{language_directive(language)}"
        )
        generation = self.client.generate(instruction, web_search=True, request_kind="market_prices")

        summary = split_summary(generation.text)
        prices = parse_market_table(generation.text, crop, generation.citations)
        if not prices:
            logger.warning(f"No price table found in market answer for {crop!r}")
            raise MalformedResponseError(t(language, "market_price_error"), raw_text=generation.text)

        return MarketPriceReport(summary=summary, prices=prices)

    def community_answer(self, question: Optional[str], language: Language) -> CommunityAnswer:
        """Answer a farmer's community question in plain text."""
        asked = _require_text(question, t(language, "community_question_error"))
        instruction = (
            f'A farmer has a question: "{asked}". As an AI agricultural expert, provide a helpful and encouraging answer. '
            f"{language_directive(language)}"
        )
        generation = self.client.generate(instruction, request_kind="community")
        return CommunityAnswer(question=asked, answer=generation.text)

    def create_chat(self, language: Language):
        """Start a new expert chat conversation for a language."""
        from .chat import ChatConversation

        return ChatConversation(language, client_factory=lambda: self.client)

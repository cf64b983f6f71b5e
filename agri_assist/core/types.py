"""
Type definitions for Agri Assist.

This module defines the languages, inputs, typed results and persisted records
exchanged between the views, the orchestrator and the generative model. Each
result carries a literal ``kind`` so callers can branch on a closed set of shapes.
"""

from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Language(str, Enum):
    """Supported locale codes."""

    EN_US = "en-US"
    ES_ES = "es-ES"
    HI_IN = "hi-IN"
    KN_IN = "kn-IN"

    @classmethod
    def parse(cls, value: Optional[str], default: Optional["Language"] = None) -> "Language":
        """Return the language for a locale code, or ``default`` (en-US) when unknown."""
        fallback = default or cls.EN_US
        if not value:
            return fallback
        try:
            return cls(value)
        except ValueError:
            return fallback


DEFAULT_LANGUAGE = Language.EN_US


class ImageInput(BaseModel):
    """An encoded image ready for transport."""

    model_config = ConfigDict(frozen=True)

    mime_type: str = Field(..., description="MIME type of the image, e.g. image/jpeg")
    data: str = Field(..., description="Base64-encoded image bytes")

    def as_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


class _WireModel(BaseModel):
    """Results parsed from model JSON use camelCase field names on the wire."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class DiagnosisResult(_WireModel):
    """
    Plant disease diagnosis.

    Attributes:
        disease_name: Name of the plant disease
        confidence: Free-text confidence level (High, Medium, Low)
        description: Brief description of the disease
        organic_treatments: Organic treatment methods, in order
        chemical_treatments: Chemical treatment methods, in order
        prevention_tips: Prevention tips, in order
    """

    kind: Literal["diagnosis"] = "diagnosis"
    disease_name: str = Field(..., alias="diseaseName", description="Name of the plant disease.")
    confidence: str = Field(..., description="Confidence level of the diagnosis (e.g., High, Medium, Low).")
    description: str = Field(..., description="A brief description of the disease.")
    organic_treatments: List[str] = Field(..., alias="organicTreatments", description="List of organic treatment methods.")
    chemical_treatments: List[str] = Field(..., alias="chemicalTreatments", description="List of chemical treatment methods.")
    prevention_tips: List[str] = Field(..., alias="preventionTips", description="List of tips to prevent the disease.")


class PlantIdentificationResult(_WireModel):
    """Plant identification with care tips."""

    kind: Literal["identification"] = "identification"
    common_name: str = Field(..., alias="commonName", description="Common name of the plant.")
    scientific_name: str = Field(..., alias="scientificName", description="Scientific name of the plant.")
    description: str = Field(..., description="A brief description of the plant.")
    care_tips: List[str] = Field(..., alias="careTips", description="List of care tips for the plant.")


class CropInfoResult(BaseModel):
    """Markdown guide for growing a crop, passed through untouched."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["crop_info"] = "crop_info"
    crop_name: str
    markdown: str


class Citation(BaseModel):
    """A grounding source returned alongside a web-search response."""

    model_config = ConfigDict(frozen=True)

    uri: str
    title: str = ""


class MarketPriceResult(BaseModel):
    """One market row of a price table."""

    model_config = ConfigDict(frozen=True)

    crop_name: str
    market_name: str
    price: str
    date: str
    source: Optional[Citation] = None


class MarketPriceReport(BaseModel):
    """Summary prose plus the parsed price rows."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["market_prices"] = "market_prices"
    summary: str = ""
    prices: List[MarketPriceResult] = Field(default_factory=list)


class CommunityAnswer(BaseModel):
    """Plain-text answer to a community question."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["community_answer"] = "community_answer"
    question: str
    answer: str


OrchestratorResult = Union[DiagnosisResult, PlantIdentificationResult, CropInfoResult, MarketPriceReport, CommunityAnswer]


class ChatMessage(BaseModel):
    """A single turn of an expert chat conversation."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "model"]
    text: str


class CommunityPost(BaseModel):
    """A question and answer pair on the community board."""

    id: str = Field(..., description="Unique, time-derived identifier")
    question: str
    answer: str
    timestamp: str = Field(..., description="Display timestamp")

"""Survey, assessment, recommendation and OCR schemas shared by the API and the scoring code."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

RiskLevel = Literal["low", "moderate", "high"]
Severity = Literal["low", "moderate", "high"]
Priority = Literal["high", "medium", "low"]
FactorCategory = Literal["lifestyle", "medical", "demographic"]
RecommendationCategory = Literal["diet", "exercise", "lifestyle", "medical"]


class SurveyResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    age: int | None = Field(default=None, ge=1, le=120)
    smoker: bool | None = None
    exercise: Literal["never", "rarely", "sometimes", "regularly", "daily"] | None = None
    # One of poor/fair/good/excellent, or a free-form description.
    diet: str | None = Field(default=None, min_length=1)
    alcohol: Literal["never", "rarely", "socially", "regularly", "daily"] | None = None
    sleep: int | None = Field(default=None, ge=1, le=24)
    stress: Literal["low", "moderate", "high", "very_high"] | None = None
    medical_history: list[str] | None = Field(default=None, alias="medicalHistory")
    weight: float | None = Field(default=None, ge=20, le=500)
    height: float | None = Field(default=None, ge=50, le=300)
    blood_pressure: str | None = Field(default=None, alias="bloodPressure")
    cholesterol: Literal["low", "normal", "borderline", "high"] | None = None
    diabetes: bool | None = None
    family_history: list[str] | None = Field(default=None, alias="familyHistory")


class ParsedAnswers(BaseModel):
    answers: SurveyResponse = Field(default_factory=SurveyResponse)
    missing_fields: list[str] = []
    confidence: float = Field(ge=0, le=1)


class HealthFactor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    category: FactorCategory
    severity: Severity
    points: int = Field(ge=0)
    description: str = Field(min_length=1)


class RiskAssessment(BaseModel):
    model_config = ConfigDict(frozen=True)

    risk_level: RiskLevel
    score: int = Field(ge=0, le=100)
    rationale: list[str] = []
    confidence: float = Field(ge=0, le=1)
    contributing_factors: list[HealthFactor] = []


class RiskBreakdown(BaseModel):
    lifestyle_score: int = 0
    medical_score: int = 0
    demographic_score: int = 0


class FactorInteractions(BaseModel):
    interactions: list[str] = []
    compound_risk: int = 0
    recommendations: list[str] = []


class RiskLevelInfo(BaseModel):
    description: str
    urgency: str


class DetailedRiskAssessment(RiskAssessment):
    risk_breakdown: RiskBreakdown
    factor_interactions: FactorInteractions
    improvement_potential: int
    risk_level_info: RiskLevelInfo


class Recommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    category: RecommendationCategory
    priority: Priority
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    action_items: list[str]
    timeline: str = Field(min_length=1)
    evidence_level: str = Field(min_length=1)


class UserPreferences(BaseModel):
    focus_areas: list[str] | None = None
    difficulty_level: Literal["beginner", "intermediate", "advanced"] | None = None
    time_commitment: Literal["low", "medium", "high"] | None = None


class FinalRecommendations(BaseModel):
    risk_level: RiskLevel
    factors: list[str]
    recommendations: list[Recommendation]
    status: Literal["ok", "incomplete_profile", "error"] = "ok"
    disclaimer: str | None = None


class RecommendationSummary(BaseModel):
    high_priority_count: int
    primary_focus_areas: list[str]
    estimated_timeline: str
    key_actions: list[str]


class OCRResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    extracted_text: str = Field(alias="extractedText")
    confidence: float
    processing_time: int  # milliseconds
    success: bool
    error: str | None = None


class EnhancedOCRResult(OCRResult):
    attempts: int
    best_result: OCRResult | None = Field(default=None, alias="bestResult")


# -- API requests --


class AnalyzeTextRequest(BaseModel):
    text: str = Field(min_length=1)
    format: Literal["json", "text"] = "text"


class AnalyzeImageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_data: str = Field(alias="imageData", min_length=1)
    filename: str = Field(min_length=1)
    mime_type: str = Field(alias="mimeType", min_length=1)


class RiskAssessmentRequest(BaseModel):
    answers: SurveyResponse
    include_factors: bool = True


class RecommendationsRequest(BaseModel):
    risk_assessment: RiskAssessment
    user_preferences: UserPreferences | None = None


class MetricRequest(BaseModel):
    metric: str = Field(min_length=1)
    value: float
    tags: dict[str, str] | None = None

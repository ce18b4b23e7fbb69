"""Scoring tables, field lists and user-facing messages for the risk profiler."""

SMOKING_POINTS = 25
POOR_DIET_POINTS = 20
CUSTOM_HEALTHY_DIET_POINTS = 5
POOR_SLEEP_POINTS = 8
INSUFFICIENT_SLEEP_POINTS = 5
EXCESSIVE_SLEEP_POINTS = 3

AGE_FACTOR_THRESHOLD = 40
AGE_POINTS_PER_YEAR = 1

MEDICAL_HISTORY_POINTS = 5  # per condition
FAMILY_HISTORY_POINTS = 3  # per relative's condition

INTERACTION_MULTIPLIER = 0.1

LOW_RISK_MAX = 30
MODERATE_RISK_MAX = 60
MAX_SCORE = 100

EXERCISE_LEVELS = {
    "never": {"points": 15, "description": "No regular physical activity"},
    "rarely": {"points": 12, "description": "Light activity less than once per week"},
    "sometimes": {"points": 8, "description": "Moderate activity 1-2 times per week"},
    "regularly": {"points": 4, "description": "Regular activity 3-4 times per week"},
    "daily": {"points": 0, "description": "Daily physical activity"},
}

DIET_QUALITY = {
    "poor": {"points": 20, "description": "High processed foods, low fruits/vegetables"},
    "fair": {"points": 15, "description": "Some processed foods, moderate nutrition"},
    "good": {"points": 8, "description": "Balanced diet with regular fruits/vegetables"},
    "excellent": {"points": 0, "description": "Optimal nutrition with minimal processed foods"},
}

ALCOHOL_CONSUMPTION = {
    "never": {"points": 0, "description": "No alcohol consumption"},
    "rarely": {"points": 2, "description": "Occasional social drinking"},
    "socially": {"points": 5, "description": "Regular social drinking"},
    "regularly": {"points": 8, "description": "Regular weekly consumption"},
    "daily": {"points": 12, "description": "Daily alcohol consumption"},
}

STRESS_LEVELS = {
    "low": {"points": 0, "description": "Well-managed stress levels"},
    "moderate": {"points": 5, "description": "Manageable stress with occasional peaks"},
    "high": {"points": 10, "description": "Frequently high stress levels"},
    "very_high": {"points": 15, "description": "Chronic high stress affecting daily life"},
}

CORE_SURVEY_FIELDS = ("age", "smoker", "exercise", "diet")

MINIMUM_DATA_COMPLETENESS = 0.5
MINIMUM_PARSE_CONFIDENCE = 0.3
MAX_MISSING_CORE_FIELDS = 2
CORE_FIELDS_BONUS = 0.1

TEXT_EXTRACTION_QUALITY = 0.8
OCR_EXTRACTION_PENALTY = 0.8

MAX_RECOMMENDATIONS = 8

PRIORITY_ORDER = {"high": 3, "medium": 2, "low": 1}
CATEGORY_ORDER = {"medical": 4, "lifestyle": 3, "diet": 2, "exercise": 1}

HEALTH_KEYWORDS = [
    "age", "smoker", "smoking", "exercise", "diet", "weight", "height",
    "alcohol", "stress", "sleep", "medical", "health", "blood pressure",
    "cholesterol", "diabetes",
]

MEDICAL_DISCLAIMER = (
    "This health risk assessment is for informational and wellness purposes only. "
    "It is not intended to be a substitute for professional medical advice, diagnosis, or treatment. "
    "Always seek the advice of your physician or other qualified health provider with any questions "
    "you may have regarding a medical condition. Never disregard professional medical advice or "
    "delay in seeking it because of something you have read in this assessment."
)

INSUFFICIENT_DATA = "Insufficient data provided. Please ensure at least 50% of core fields are completed."
LOW_DATA_QUALITY = "Data quality is too low for reliable assessment"
INVALID_INPUT = "Invalid input format. Please check your data and try again."
INVALID_REQUEST = "Invalid request format"
OCR_FAILED = (
    "Unable to extract text from the uploaded image. "
    "Please try a clearer image or enter data manually."
)
PROCESSING_ERROR = "An error occurred during processing. Please try again."
FILE_TOO_LARGE = "File size too large. Please upload an image smaller than 5MB."
INVALID_FILE_TYPE = "Invalid file type. Please upload a PNG, JPG, or PDF file."
INVALID_IMAGE_DATA = "Image data could not be decoded. Please upload the file again."

ACCEPTED_UPLOAD_TYPES = (
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/gif",
    "image/webp",
    "application/pdf",
)

API_ENDPOINTS = {
    "POST /api/analyze-text": "Parse text or JSON survey responses",
    "POST /api/analyze-image": "Extract text from images using OCR",
    "POST /api/risk-assessment": "Calculate health risk scores",
    "POST /api/recommendations": "Generate personalized recommendations",
    "GET /api/health-check": "System health status",
    "GET /api/metrics": "In-memory service metrics",
}

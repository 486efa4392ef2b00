from app.classification.classifier import ResponseClassifier, is_refusal_text
from app.classification.models import Classification, FailureType, RefusalCategory, ResponseMetadata

__all__ = [
    "Classification",
    "FailureType",
    "RefusalCategory",
    "ResponseClassifier",
    "ResponseMetadata",
    "is_refusal_text",
]

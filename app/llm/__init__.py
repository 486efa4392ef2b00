from app.llm.client_base import BaseVisionClient
from app.llm.factory import VisionClientFactory
from app.llm.models import ModelResponse
from app.llm.retry import retry_call

__all__ = ["BaseVisionClient", "ModelResponse", "VisionClientFactory", "retry_call"]

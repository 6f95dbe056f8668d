"""
AI summary of extracted document text.
"""
import logging
from typing import Optional

from langchain_core.messages import HumanMessage, SystemMessage

from docportal.core.config import settings
from docportal.core.exceptions import ExternalServiceError
from docportal.core.llm_config import LLMFactory

logger = logging.getLogger(__name__)

SUMMARY_SYSTEM_PROMPT = "You summarize internal documents of a metro transit authority for its staff."

SUMMARY_USER_PROMPT = "Please provide a concise summary of the following document text:\n\n{text}"


class Summarizer:
    """Produces a short summary through an OpenAI chat model."""

    def __init__(self, api_key: Optional[str] = None, max_input_chars: Optional[int] = None):
        self.api_key = api_key or settings.OPENAI_API_KEY
        self.max_input_chars = max_input_chars or settings.SUMMARY_MAX_INPUT_CHARS

    def summarize(self, text: str) -> str:
        """
        Summarize ``text``.

        Raises:
            ExternalServiceError: Missing API key, provider error or empty answer
        """
        if not self.api_key:
            raise ExternalServiceError("Summarization API key not configured")

        llm = LLMFactory.create_llm(api_key=self.api_key, tracing_project="document-summaries")
        messages = [
            SystemMessage(content=SUMMARY_SYSTEM_PROMPT),
            HumanMessage(content=SUMMARY_USER_PROMPT.format(text=text[: self.max_input_chars])),
        ]
        try:
            response = llm.invoke(messages)
        except Exception as e:
            logger.error(f"Summary generation failed: {e}")
            raise ExternalServiceError(f"Summary generation failed: {e}")

        summary = str(response.content).strip()
        if not summary:
            raise ExternalServiceError("Summary generation returned no text")
        return summary

"""
Gemini AI service for study material generation
"""
import google.generativeai as genai
import json
import logging
from typing import Any, List

from edupal.exceptions import InvalidModelOutputError, UpstreamServiceError

logger = logging.getLogger(__name__)


class GeminiService:
    """Thin client around a Gemini generative model"""

    def __init__(self, api_key: str, model_name: str = "gemini-2.5-flash", temperature: float = 0.2):
        genai.configure(api_key=api_key)
        self.model_name = model_name
        self.temperature = temperature
        self.model = genai.GenerativeModel(model_name)

    def generate(self, prompt: str) -> str:
        """
        Run a single completion

        Args:
            prompt: Full prompt text

        Returns:
            Raw model text

        Raises:
            UpstreamServiceError: model call failed or produced no text
        """
        try:
            response = self.model.generate_content(
                prompt,
                generation_config={"temperature": self.temperature},
            )
        except Exception as e:
            logger.error(f"Gemini call failed: {str(e)}")
            raise UpstreamServiceError(f"AI generation failed: {str(e)}")

        try:
            text = response.text
        except ValueError:
            # Blocked or candidate-less responses raise on .text
            text = None

        if not text or not text.strip():
            raise UpstreamServiceError("Empty response from the AI model")

        logger.info(f"Gemini ({self.model_name}) returned {len(text)} characters")
        return text


def strip_code_fence(text: str) -> str:
    """Remove a surrounding ```json ... ``` block; unfenced text passes through"""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned[3:]
        if cleaned[:4].lower() == "json":
            cleaned = cleaned[4:]
        cleaned = cleaned.strip()
        if cleaned.endswith("```"):
            cleaned = cleaned[:-3].strip()
    return cleaned


def parse_model_output(raw_text: str) -> List[Any]:
    """Parse the model's JSON array, tolerating markdown fences"""
    cleaned = strip_code_fence(raw_text)

    try:
        content = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse AI JSON: {str(e)}")
        logger.error(f"Response text: {raw_text[:500]}")
        raise InvalidModelOutputError("The AI generated an invalid format. Please try again.")

    if not isinstance(content, list):
        logger.error(f"AI output is a {type(content).__name__}, expected a list")
        raise InvalidModelOutputError("The AI generated an invalid format. Please try again.")

    return content

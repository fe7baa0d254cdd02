"""
Assistant Service
Prompts and response handling for the language assistant features:
medicine parsing, health chat, adherence insights, translation
"""

import json
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

from config import settings
from services.exceptions import AssistantResponseError
from services.llm_service import LLMService


logger = logging.getLogger(__name__)


LANGUAGES: Dict[str, str] = {
    "en": "English",
    "ta": "Tamil",
}


def language_name(code_or_name: Optional[str]) -> str:
    """Display name for a language code; unknown values pass through"""
    if not code_or_name:
        return LANGUAGES[settings.DEFAULT_LANGUAGE]
    return LANGUAGES.get(code_or_name.lower(), code_or_name)


def is_default_language(code_or_name: Optional[str]) -> bool:
    if not code_or_name:
        return True
    default = settings.DEFAULT_LANGUAGE
    return code_or_name.lower() in (default.lower(), LANGUAGES[default].lower())


class ParsedMedicine(BaseModel):
    """Structured medicine extracted from free text"""
    name: str = Field(..., min_length=1, max_length=255, description="Name of the medicine")
    dosage: str = Field(..., min_length=1, max_length=100, description="Dosage amount (e.g., 500mg, 2 pills)")
    frequency: str = Field(..., min_length=1, max_length=100, description="How often to take it (e.g., daily, twice a day, every 6 hours)")
    time_of_day: str = Field("", max_length=100, description="Specific times (e.g., morning, 8 AM, before bed)")
    instructions: str = Field("", description="Any special instructions (e.g., with food, avoid alcohol)")
    duration_days: Optional[int] = Field(None, ge=0, description="Number of days to take it, if specified")


PARSED_MEDICINE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        name: {
            "type": "number" if name == "duration_days" else "string",
            "description": field.description,
        }
        for name, field in ParsedMedicine.model_fields.items()
    },
    "required": ["name", "dosage", "frequency"],
}

CHAT_PERSONA = (
    "You are a helpful medical assistant for the MedTrack app. You help users "
    "understand their medications, provide general health advice, and answer "
    "questions about medicine adherence. Always remind users to consult with a "
    "professional doctor for serious medical concerns. Please respond in {language} "
    "language. Use Markdown formatting (bolding, lists, etc.) to make your "
    "responses clear and easy to read."
)

INSIGHTS_PROMPT = """Analyze the following medicine intake behavior data and provide 3-4 actionable insights or observations.
Data: {data}

Focus on:
1. Consistency (Are they taking it on time?)
2. Patterns (Are certain days or medicines more problematic?)
3. Encouragement (Highlight what they are doing well)

Please respond in {language} language. Use Markdown for formatting. Keep it concise and supportive. Always include a disclaimer."""

MEDICINE_INSIGHT_PROMPT = """Provide a brief, helpful insight and usage guide for the following medication:
Name: {name}
Dosage: {dosage}
Frequency: {frequency}
Instructions: {instructions}

Please respond in {language} language. Use Markdown for formatting. Keep it concise (under 150 words). Always include a disclaimer that this is AI-generated and not professional medical advice."""


class AssistantService:
    """
    Thin request/response layer over the language model.
    Failures propagate to the caller; nothing is retried.
    """

    def __init__(self, llm: LLMService):
        self.llm = llm

    async def parse_medicine(self, text: str) -> ParsedMedicine:
        """
        Turn free text like "Amoxicillin 500mg three times a day for 7 days"
        into a structured medicine

        Raises:
            AssistantResponseError: the reply did not match the schema
        """
        data = await self.llm.generate_json(
            f'Parse the following natural language medicine instruction into a structured JSON object: "{text}"',
            schema=PARSED_MEDICINE_SCHEMA,
            schema_name="parsed_medicine",
            model=self.llm.parse_model_name,
            temperature=0,
        )
        if data.get("duration_days") is not None:
            try:
                data["duration_days"] = int(round(float(data["duration_days"])))
            except (TypeError, ValueError):
                data["duration_days"] = None
        for key in ("time_of_day", "instructions"):
            if data.get(key) is None:
                data.pop(key, None)

        try:
            return ParsedMedicine(**data)
        except ValidationError as e:
            logger.warning("Unusable medicine parse for %r: %s", text, e)
            raise AssistantResponseError(
                "Could not understand the medicine instructions. Please try again."
            ) from e

    async def chat(
        self,
        history: List[Dict[str, str]],
        message: str,
        language: Optional[str] = None
    ) -> str:
        """Answer a message in the context of earlier turns"""
        messages = list(history) + [{"role": "user", "content": message}]
        reply = await self.llm.chat(
            messages,
            system_prompt=CHAT_PERSONA.format(language=language_name(language)),
        )
        if not reply:
            raise AssistantResponseError("The assistant returned an empty reply")
        return reply

    async def behavior_insights(
        self,
        analysis: Dict[str, Any],
        language: Optional[str] = None
    ) -> str:
        """Prose insights for a behavior-analysis payload"""
        prompt = INSIGHTS_PROMPT.format(
            data=json.dumps(analysis, default=str),
            language=language_name(language),
        )
        reply = await self.llm.generate(prompt)
        if not reply:
            raise AssistantResponseError("The assistant returned no insights")
        return reply

    async def medicine_insight(
        self,
        name: str,
        dosage: str,
        frequency: str,
        instructions: Optional[str] = None,
        language: Optional[str] = None
    ) -> str:
        prompt = MEDICINE_INSIGHT_PROMPT.format(
            name=name,
            dosage=dosage,
            frequency=frequency,
            instructions=instructions or "None",
            language=language_name(language),
        )
        reply = await self.llm.generate(prompt)
        if not reply:
            raise AssistantResponseError("The assistant returned no insight")
        return reply

    async def translate(self, text: str, target_language: Optional[str]) -> str:
        """Translate text; returns it unchanged for the default language"""
        if not text or is_default_language(target_language):
            return text

        reply = await self.llm.generate(
            f"Translate the following text to {language_name(target_language)}. "
            f'Return ONLY the translated text without any explanations or extra characters: "{text}"',
            temperature=0,
        )
        return reply.strip() or text

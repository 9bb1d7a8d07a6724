"""AI proxy actions: render a prompt, call the text-generation API, store the pair."""

from __future__ import annotations

import json

from flask import current_app
from openai import OpenAI

from models import db
from models.prompt import Prompt
from models.user import User
from schemas import (
    CropAnalyzerSchema,
    FarmAnalyzerSchema,
    FarmersAssistantSchema,
    SavePromptSchema,
    SoilAnalyzerSchema,
)
from utils.request_validation import validate_payload

from .errors import FreeTierExhausted, UserNotFound, guarded
from .usage import can_use_ai_feature, is_allowed, lock_user, prompt_count

DEFAULT_MODEL = "gpt-4o"
DEFAULT_TIMEOUT = 60.0

ASSISTANT_SYSTEM_PROMPT = "You are a helpful farming assistant with expertise in Nigerian agriculture."

FARM_ANALYST_SYSTEM_PROMPT = (
    "You are an expert agricultural analyst specializing in Nigerian farming conditions. "
    "Provide detailed, structured, and practical advice based on the farm data provided."
)

SOIL_SCIENTIST_SYSTEM_PROMPT = (
    "You are an expert soil scientist specializing in Nigerian agricultural soils. "
    "Provide detailed, structured, and practical advice based on the soil data provided."
)

CROP_ANALYST_SYSTEM_PROMPT = (
    "You are an expert agricultural analyst specializing in Nigerian crops and plants. "
    "Provide detailed, structured, and practical information based on the crop image described."
)

FARM_ANALYSIS_TEMPLATE = """
Analyze the following farm data and provide detailed recommendations:

Farm Size: {farm_size} hectares
Soil Type: {soil_type}
Humidity: {humidity}%
Moisture: {moisture}%
Temperature: {temperature}°C
Location: {location}, Nigeria
Additional Information: {additional_info}

Please provide a comprehensive analysis including:
1. Suitable crops for this environment
2. Recommended farming techniques
3. Potential challenges and solutions
4. Irrigation recommendations
5. Fertilizer recommendations
6. Seasonal considerations
"""

SOIL_ANALYSIS_TEMPLATE = """
Analyze the following soil data and provide detailed recommendations:

Soil Type: {soil_type}
pH Level: {ph}
Organic Matter: {organic_matter}%
Nitrogen Content: {nitrogen} mg/kg
Phosphorus Content: {phosphorus} mg/kg
Potassium Content: {potassium} mg/kg
Location: {location}, Nigeria
Additional Information: {additional_info}

Please provide a comprehensive analysis including:
1. Soil quality assessment
2. Suitable crops for this soil type
3. Fertilizer recommendations
4. Soil improvement strategies
5. Potential issues and solutions
6. Long-term soil management advice
"""

CROP_ANALYSIS_TEMPLATE = """
Analyze the following crop/plant image and provide detailed information:

The image shows: {image_description}

Please provide a comprehensive analysis including:
1. Identification of the crop/plant
2. Nutritional value
3. Growing conditions and methods
4. Potential diseases and pest control
5. Harvesting and storage recommendations
6. Market value and economic importance in Nigeria
"""


class TextGenerationError(RuntimeError):
    """The text-generation API could not produce a reply."""


class TextGenerator:
    """Thin wrapper over the OpenAI chat-completions API."""

    def __init__(
        self,
        api_key: str | None,
        model: str = DEFAULT_MODEL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._api_key = (api_key or "").strip()
        self._model = model
        self._timeout = max(1.0, float(timeout))
        self._client: OpenAI | None = None

    @property
    def model(self) -> str:
        return self._model

    def _get_client(self) -> OpenAI:
        if not self._api_key:
            raise TextGenerationError("OPENAI_API_KEY is not configured.")
        if self._client is None:
            self._client = OpenAI(api_key=self._api_key, timeout=self._timeout)
        return self._client

    def generate(self, system_prompt: str, prompt: str) -> str:
        response = self._get_client().chat.completions.create(
            model=self._model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
        )
        choice = response.choices[0] if response.choices else None
        text = (choice.message.content or "").strip() if choice else ""
        if not text:
            raise TextGenerationError("Empty response from the text-generation API.")
        return text


def get_text_generator() -> TextGenerator:
    return current_app.extensions["text_generator"]


def record_prompt(user_id: str, prompt_type: str, prompt: str, response: str) -> Prompt:
    """Store a prompt/response pair, re-checking the usage gate under a row lock.

    The lock serializes concurrent requests for the same user so the free
    tier cannot be overrun between the gate check and the insert.
    """

    user = lock_user(user_id)
    if user is None:
        raise UserNotFound()
    if not is_allowed(user, prompt_count(user_id)):
        db.session.rollback()
        raise FreeTierExhausted()

    record = Prompt(user_id=user_id, type=prompt_type, prompt=prompt, response=response)
    db.session.add(record)
    db.session.commit()
    return record


def _run(user_id: str, prompt_type: str, system_prompt: str, prompt: str, stored_prompt: str) -> dict:
    if db.session.get(User, user_id) is None:
        raise UserNotFound()
    if not can_use_ai_feature(user_id):
        raise FreeTierExhausted()

    text = get_text_generator().generate(system_prompt, prompt)
    record_prompt(user_id, prompt_type, stored_prompt, text)
    current_app.logger.info("Stored %s prompt for user %s", prompt_type, user_id)
    return {"text": text}


@guarded("Failed to generate response.")
def generate_farmers_assistant_response(user_id: str, values: dict) -> dict:
    data = validate_payload(FarmersAssistantSchema, values)

    system_prompt = ASSISTANT_SYSTEM_PROMPT
    if data.language != "english":
        system_prompt += f" Please respond in {data.language}."

    return _run(user_id, "ASSISTANT", system_prompt, data.prompt, data.prompt)


@guarded("Failed to generate farm analysis.")
def generate_farm_analysis(user_id: str, values: dict) -> dict:
    data = validate_payload(FarmAnalyzerSchema, values)

    fields = data.model_dump()
    fields["additional_info"] = data.additional_info or "None provided"
    prompt = FARM_ANALYSIS_TEMPLATE.format(**fields)

    return _run(
        user_id,
        "FARM_ANALYZER",
        FARM_ANALYST_SYSTEM_PROMPT,
        prompt,
        json.dumps(data.model_dump(exclude_none=True)),
    )


@guarded("Failed to generate soil analysis.")
def generate_soil_analysis(user_id: str, values: dict) -> dict:
    data = validate_payload(SoilAnalyzerSchema, values)

    fields = data.model_dump()
    fields["additional_info"] = data.additional_info or "None provided"
    prompt = SOIL_ANALYSIS_TEMPLATE.format(**fields)

    return _run(
        user_id,
        "SOIL_ANALYZER",
        SOIL_SCIENTIST_SYSTEM_PROMPT,
        prompt,
        json.dumps(data.model_dump(exclude_none=True)),
    )


@guarded("Failed to generate crop analysis.")
def generate_crop_analysis(user_id: str, values: dict) -> dict:
    data = validate_payload(CropAnalyzerSchema, values)
    prompt = CROP_ANALYSIS_TEMPLATE.format(image_description=data.image_description)
    return _run(
        user_id,
        "CROP_ANALYZER",
        CROP_ANALYST_SYSTEM_PROMPT,
        prompt,
        data.image_description,
    )


@guarded("Failed to save prompt.")
def save_prompt(user_id: str, values: dict) -> dict:
    data = validate_payload(SavePromptSchema, values)
    record_prompt(user_id, data.type, data.prompt, data.response)
    return {"success": "Prompt saved successfully!"}


@guarded("Failed to get prompt count.")
def get_prompt_count(user_id: str) -> dict:
    return {"count": prompt_count(user_id)}

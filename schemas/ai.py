from typing import Literal, Optional

from pydantic import BaseModel, Field


SUPPORTED_LANGUAGES = ("english", "hausa", "yoruba", "igbo")


class FarmersAssistantSchema(BaseModel):
    prompt: str = Field(min_length=1)
    language: Literal["english", "hausa", "yoruba", "igbo"] = "english"


class FarmAnalyzerSchema(BaseModel):
    """Farm analyzer form. Values are free text as typed by the farmer."""

    farm_size: str = Field(min_length=1)
    soil_type: str = Field(min_length=1)
    humidity: str = Field(min_length=1)
    moisture: str = Field(min_length=1)
    temperature: str = Field(min_length=1)
    location: str = Field(min_length=1)
    additional_info: Optional[str] = None


class SoilAnalyzerSchema(BaseModel):
    """Soil analyzer form."""

    soil_type: str = Field(min_length=1)
    ph: str = Field(min_length=1)
    organic_matter: str = Field(min_length=1)
    nitrogen: str = Field(min_length=1)
    phosphorus: str = Field(min_length=1)
    potassium: str = Field(min_length=1)
    location: str = Field(min_length=1)
    additional_info: Optional[str] = None


class CropAnalyzerSchema(BaseModel):
    image_description: str = Field(min_length=1)


class SavePromptSchema(BaseModel):
    type: Literal["ASSISTANT", "FARM_ANALYZER", "CROP_ANALYZER", "SOIL_ANALYZER"]
    prompt: str = Field(min_length=1)
    response: str = Field(min_length=1)

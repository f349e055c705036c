from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from recommendations import HairProfile


class ConsultationForm(BaseModel):
    """
    Everything the wizard collects.
    Only the hair color / length / style trio drives the recommendation;
    the rest is carried through to the report as-is.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    selected_hair_color: str = ""
    hair_length: str = ""
    personal_style: str = ""
    natural_hair_color: str = ""
    skin_color: str = ""
    eye_color: str = ""
    hair_texture: str = ""
    hair_maintenance: str = ""
    # Multi-select answers
    special_occasions: List[str] = Field(default_factory=list)
    preferred_treatments: List[str] = Field(default_factory=list)
    work_type: str = ""
    work_industry: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def profile(self) -> HairProfile:
        return HairProfile(self.selected_hair_color, self.hair_length, self.personal_style)


class SubmissionRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    email: str = ""
    dates: Optional[List[date]] = None
    form_data: ConsultationForm = Field(default_factory=ConsultationForm)
    send_additional_email: bool = False


class SubmissionResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    message: str
    images_processed: Optional[int] = None


class ErrorResponse(BaseModel):
    error: str

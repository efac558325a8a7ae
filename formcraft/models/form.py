"""
Form model and schemas for the dynamic form builder
"""
from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Dict, Any, Union, Literal, Annotated
from datetime import datetime

FIELD_TYPES = ("text", "email", "number", "textarea", "select", "radio", "checkbox", "date", "file")
CHOICE_TYPES = ("select", "radio", "checkbox")

DEFAULT_PRIMARY_COLOR = "#6366f1"
DEFAULT_BACKGROUND_COLOR = "#ffffff"
DEFAULT_TEXT_COLOR = "#374151"


class FieldBase(BaseModel):
    id: str = Field(..., min_length=1)
    label: str = Field(..., min_length=1)
    placeholder: Optional[str] = None
    required: bool = False


class _OptionlessField(FieldBase):
    @model_validator(mode="before")
    @classmethod
    def reject_options(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("options"):
            raise ValueError(f"{data.get('type')} fields do not take options")
        return data


class InputField(_OptionlessField):
    """Single-line input: text, email, number and date"""
    type: Literal["text", "email", "number", "date"]


class TextareaField(_OptionlessField):
    type: Literal["textarea"]


class ChoiceField(FieldBase):
    """select/radio take one option, checkbox an ordered subset"""
    type: Literal["select", "radio", "checkbox"]
    options: List[str] = Field(..., min_length=1)


class FileField(_OptionlessField):
    type: Literal["file"]


FormField = Annotated[
    Union[InputField, TextareaField, ChoiceField, FileField],
    Field(discriminator="type"),
]


class Theme(BaseModel):
    primaryColor: str = DEFAULT_PRIMARY_COLOR
    backgroundColor: str = DEFAULT_BACKGROUND_COLOR
    textColor: str = DEFAULT_TEXT_COLOR
    logo: Optional[str] = None
    companyName: Optional[str] = None


class FormCreate(BaseModel):
    # Title and fields are checked by the schema validator so callers get field error codes
    title: str = ""
    description: str = ""
    fields: List[Dict[str, Any]] = Field(default_factory=list)
    isPublic: bool = False
    theme: Theme = Field(default_factory=Theme)


class FormUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    fields: Optional[List[Dict[str, Any]]] = None
    isPublic: Optional[bool] = None
    theme: Optional[Theme] = None


class FormResponse(BaseModel):
    id: str = Field(alias="_id")
    title: str
    description: str = ""
    fields: List[FormField] = Field(default_factory=list)
    userId: str
    isPublic: bool = False
    theme: Theme = Field(default_factory=Theme)
    createdAt: datetime
    updatedAt: datetime

    model_config = {
        "populate_by_name": True,
    }

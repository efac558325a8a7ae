"""
Form Rendering Engine

Turns a stored form schema into one control per field, keeps per-field error
state for a respondent, and drives a single submission attempt:

    editing -> validating -> submitting -> submitted
                   |              |
                   +-> editing <--+   (field errors / sink failure)

Values survive a failed attempt so the respondent can retry without
re-entering them. `submitted` is terminal: controls are gone and values can
no longer change.
"""
import copy
import logging
from dataclasses import dataclass, field as dataclass_field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from formcraft.models.form import (
    DEFAULT_BACKGROUND_COLOR,
    DEFAULT_PRIMARY_COLOR,
    DEFAULT_TEXT_COLOR,
)
from formcraft.services.schema_validation import validate_submission
from formcraft.utils.errors import FormCraftError
from formcraft.utils.helpers import utcnow

logger = logging.getLogger(__name__)

DEFAULT_BORDER_COLOR = "#e5e7eb"
DEMO_NOTICE = "This is a demo form. Please create an account and build your own form to use this feature!"
SUBMIT_FAILED_MESSAGE = "Your response could not be saved. Please try again."

INPUT_TYPES = ("text", "email", "number", "date")


class SessionState(str, Enum):
    EDITING = "editing"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"


class SessionClosedError(RuntimeError):
    pass


@dataclass
class ChoiceOption:
    value: str
    checked: bool = False


@dataclass
class Control:
    field_id: str
    kind: str
    label: str
    required: bool = False
    input_type: Optional[str] = None
    placeholder: Optional[str] = None
    value: Any = None
    options: List[ChoiceOption] = dataclass_field(default_factory=list)
    error: Optional[str] = None


def render_control(field: Dict[str, Any], value: Any = None, error: Optional[str] = None) -> Control:
    field_type = field["type"]
    control = Control(
        field_id=field["id"],
        kind=field_type,
        label=field["label"],
        required=bool(field.get("required")),
        placeholder=field.get("placeholder"),
        error=error,
    )

    if field_type in INPUT_TYPES:
        control.kind = "input"
        control.input_type = field_type
        control.value = value or ""
    elif field_type == "textarea":
        control.value = value or ""
    elif field_type in ("select", "radio"):
        control.value = value or ""
        control.options = [ChoiceOption(option, option == value) for option in field.get("options") or []]
    elif field_type == "checkbox":
        selected = list(value or [])
        control.value = selected
        control.options = [ChoiceOption(option, option in selected) for option in field.get("options") or []]
    elif field_type == "file":
        control.input_type = "file"
        control.value = value
    else:
        raise ValueError(f"Unknown field type: {field_type}")

    return control


def resolve_theme(theme: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Layer theme overrides onto the default palette"""
    theme = theme or {}
    primary = theme.get("primaryColor")
    return {
        "primaryColor": primary or DEFAULT_PRIMARY_COLOR,
        "backgroundColor": theme.get("backgroundColor") or DEFAULT_BACKGROUND_COLOR,
        "textColor": theme.get("textColor") or DEFAULT_TEXT_COLOR,
        "borderColor": f"{primary}20" if primary else DEFAULT_BORDER_COLOR,
        "logo": theme.get("logo"),
        "companyName": theme.get("companyName"),
    }


def demo_form(form_id: Optional[str] = None) -> Dict[str, Any]:
    """Sample contact form shown when a public link points at no form"""
    now = utcnow()
    return {
        "_id": form_id or "demo-form",
        "title": "Demo Contact Form",
        "description": (
            "This is a demo form to show white-label functionality. "
            "Please create a form through the form builder to use this feature."
        ),
        "fields": [
            {"id": "name", "type": "text", "label": "Full Name", "placeholder": "Enter your full name", "required": True},
            {"id": "email", "type": "email", "label": "Email Address", "placeholder": "Enter your email address", "required": True},
            {"id": "message", "type": "textarea", "label": "Message", "placeholder": "Enter your message here...", "required": True},
        ],
        "userId": "demo-user",
        "isPublic": True,
        "theme": {
            "primaryColor": DEFAULT_PRIMARY_COLOR,
            "backgroundColor": DEFAULT_BACKGROUND_COLOR,
            "textColor": DEFAULT_TEXT_COLOR,
            "companyName": "Demo Company",
        },
        "createdAt": now,
        "updatedAt": now,
    }


SubmissionSink = Callable[[Dict[str, Any]], Awaitable[Dict[str, Any]]]


class FormSession:
    """One respondent filling in one form"""

    def __init__(self, form: Dict[str, Any], demo: bool = False):
        self.form = copy.deepcopy(form)
        self.demo = demo
        self.state = SessionState.EDITING
        self.values: Dict[str, Any] = {}
        self.errors: Dict[str, str] = {}
        self.submit_error: Optional[str] = None
        self.submission_id: Optional[str] = None
        self._fields = {f["id"]: f for f in self.form.get("fields") or []}

    @property
    def theme(self) -> Dict[str, Any]:
        return resolve_theme(self.form.get("theme"))

    def _ensure_open(self) -> None:
        if self.state == SessionState.SUBMITTED:
            raise SessionClosedError("Form has already been submitted")

    def set_value(self, field_id: str, value: Any) -> None:
        self._ensure_open()
        if field_id not in self._fields:
            raise KeyError(field_id)
        self.values[field_id] = value
        self.errors.pop(field_id, None)

    def toggle_option(self, field_id: str, option: str) -> List[str]:
        """Add option to a checkbox selection, or remove it if already there"""
        field = self._fields.get(field_id)
        if field is None:
            raise KeyError(field_id)
        if field["type"] != "checkbox":
            raise ValueError(f"{field_id} is not a checkbox field")
        selected = list(self.values.get(field_id) or [])
        if option in selected:
            selected.remove(option)
        else:
            selected.append(option)
        self.set_value(field_id, selected)
        return selected

    def controls(self) -> List[Control]:
        if self.state == SessionState.SUBMITTED:
            return []
        return [
            render_control(f, self.values.get(f["id"]), self.errors.get(f["id"]))
            for f in self.form.get("fields") or []
        ]

    def validate(self) -> bool:
        self._ensure_open()
        self.state = SessionState.VALIDATING
        self.errors = {}
        for error in validate_submission(self.form, self.values, strict_choices=True):
            self.errors.setdefault(error.field_id, error.message)
        if self.errors:
            self.state = SessionState.EDITING
            return False
        return True

    def payload(self, metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        metadata = metadata or {}
        return {
            "formId": str(self.form.get("_id")),
            "responses": copy.deepcopy(self.values),
            "submittedAt": utcnow(),
            "ipAddress": metadata.get("ipAddress"),
            "userAgent": metadata.get("userAgent"),
        }

    async def submit(self, sink: SubmissionSink, metadata: Optional[Dict[str, Any]] = None) -> SessionState:
        """Validate, then hand the normalised submission to sink"""
        self.submit_error = None
        if not self.validate():
            return self.state
        if self.demo:
            self.submit_error = DEMO_NOTICE
            self.state = SessionState.EDITING
            return self.state

        self.state = SessionState.SUBMITTING
        try:
            stored = await sink(self.payload(metadata))
        except FormCraftError as e:
            logger.warning("⚠️ Submission for form %s failed: %s", self.form.get("_id"), e.message)
            self.submit_error = SUBMIT_FAILED_MESSAGE
            self.state = SessionState.EDITING
            return self.state

        self.submission_id = str(stored.get("_id"))
        self.state = SessionState.SUBMITTED
        return self.state

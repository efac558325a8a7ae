"""
Schema Model rules - pure validation of forms, fields and submissions.

Nothing here touches a store. Every check returns a list of FieldError so
callers can report all violations at once; `parse_form_fields` is the only
function that raises, and it is the single way raw field dicts become the
typed field variants stored on a form.
"""
import re
from typing import Any, Dict, Iterable, List, Mapping

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from formcraft.models.form import CHOICE_TYPES, FIELD_TYPES, FormField
from formcraft.utils.errors import FieldError, ValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_field_adapter = TypeAdapter(FormField)


def _as_dict(obj: Any) -> Dict[str, Any]:
    if hasattr(obj, "model_dump"):
        return obj.model_dump()
    return dict(obj or {})


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


def validate_field(field: Mapping[str, Any]) -> List[FieldError]:
    field = _as_dict(field)
    field_id = field.get("id") or None
    field_type = field.get("type")
    options = field.get("options")
    errors: List[FieldError] = []

    if not field_id or not str(field_id).strip():
        errors.append(FieldError("MissingFieldId", "Field id is required"))
    if field_type not in FIELD_TYPES:
        errors.append(FieldError("InvalidFieldType", f"Unknown field type: {field_type!r}", field_id))
    if _is_blank(field.get("label")):
        errors.append(FieldError("MissingLabel", "Field label is required", field_id))

    if field_type in CHOICE_TYPES:
        if not isinstance(options, list) or not options or any(not isinstance(o, str) or _is_blank(o) for o in options):
            errors.append(FieldError("InvalidOptions", f"{field_type} fields need at least one option", field_id))
    elif field_type in FIELD_TYPES and options:
        errors.append(FieldError("InvalidOptions", f"{field_type} fields do not take options", field_id))

    return errors


def validate_form(form: Mapping[str, Any]) -> List[FieldError]:
    form = _as_dict(form)
    errors: List[FieldError] = []

    if _is_blank(form.get("title")):
        errors.append(FieldError("MissingTitle", "Form title is required"))

    seen = set()
    for field in form.get("fields") or []:
        field = _as_dict(field)
        errors.extend(validate_field(field))
        field_id = field.get("id")
        if not field_id:
            continue
        if field_id in seen:
            errors.append(FieldError("DuplicateFieldId", f"Duplicate field id: {field_id}", field_id))
        seen.add(field_id)

    return errors


def validate_submission(form: Mapping[str, Any], responses: Mapping[str, Any], strict_choices: bool = False) -> List[FieldError]:
    """Check a response map against a form.

    Only required-ness and email format are enforced by default; number and
    date values are stored as sent. `strict_choices` adds the option
    membership rules the rendering engine applies to select, radio and
    checkbox controls.
    """
    form = _as_dict(form)
    responses = responses or {}
    errors: List[FieldError] = []

    for field in form.get("fields") or []:
        field = _as_dict(field)
        field_id = field.get("id")
        label = field.get("label") or field_id
        value = responses.get(field_id)

        if _is_blank(value):
            if field.get("required"):
                errors.append(FieldError("MissingRequiredField", f"{label} is required", field_id))
            continue

        field_type = field.get("type")
        if field_type == "email" and not (isinstance(value, str) and EMAIL_PATTERN.match(value)):
            errors.append(FieldError("InvalidEmailFormat", "Please enter a valid email address", field_id))
        elif strict_choices and field_type in CHOICE_TYPES:
            options = field.get("options") or []
            if not options:
                continue
            chosen = value if field_type == "checkbox" and isinstance(value, list) else [value]
            if any(choice not in options for choice in chosen):
                errors.append(FieldError("InvalidOption", f"{label} has an invalid choice", field_id))

    return errors


def parse_form_fields(raw_fields: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Validate raw field dicts and return them as normalised typed-variant dumps"""
    raw_fields = [_as_dict(f) for f in raw_fields or []]
    errors = validate_form({"title": "-", "fields": raw_fields})
    if errors:
        raise ValidationError(errors)
    parsed = []
    for raw in raw_fields:
        try:
            parsed.append(_field_adapter.validate_python(raw).model_dump(exclude_none=True))
        except PydanticValidationError as e:
            errors.append(FieldError("InvalidField", f"Invalid field definition: {e.errors()[0]['msg']}", raw.get("id")))
    if errors:
        raise ValidationError(errors)
    return parsed

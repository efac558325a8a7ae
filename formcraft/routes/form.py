"""
Form routes - CRUD operations and the public submission endpoint
"""
from fastapi import APIRouter, Depends, Request, status
from typing import List

from formcraft.config.database import Collections
from formcraft.database.db_operations import DBOperations, get_db
from formcraft.models.form import FormCreate, FormUpdate, FormResponse
from formcraft.models.submission import SubmissionCreate, SubmissionResponse, SubmitResult
from formcraft.services.schema_validation import validate_submission
from formcraft.utils.auth import get_current_user, require_owner
from formcraft.utils.errors import ValidationError

router = APIRouter(prefix="/forms", tags=["Forms"])


def request_metadata(request: Request) -> dict:
    """Best-effort origin address and client string"""
    forwarded = request.headers.get("x-forwarded-for")
    ip_address = forwarded.split(",")[0].strip() if forwarded else (request.client.host if request.client else None)
    return {
        "ipAddress": ip_address,
        "userAgent": request.headers.get("user-agent"),
    }


@router.get("", response_model=List[FormResponse])
async def get_forms(user_id: str = Depends(get_current_user), db: DBOperations = Depends(get_db)):
    """Get the caller's forms, most recently updated first"""
    return await db.find_by_owner(Collections.FORMS, user_id)


@router.post("", response_model=FormResponse, status_code=status.HTTP_201_CREATED)
async def create_form(
    form: FormCreate,
    user_id: str = Depends(get_current_user),
    db: DBOperations = Depends(get_db)
):
    """Create a new form"""
    form_dict = form.model_dump()
    form_dict["userId"] = user_id
    return await db.create(Collections.FORMS, form_dict)


@router.get("/{form_id}", response_model=FormResponse)
async def get_form(form_id: str, db: DBOperations = Depends(get_db)):
    """Get form by ID. Public so share links work without an account."""
    return await db.find_by_id(Collections.FORMS, form_id)


@router.put("/{form_id}", response_model=FormResponse)
async def update_form(
    form_id: str,
    form_update: FormUpdate,
    user_id: str = Depends(get_current_user),
    db: DBOperations = Depends(get_db)
):
    """Update form"""
    require_owner(await db.find_by_id(Collections.FORMS, form_id), user_id)
    return await db.update(Collections.FORMS, form_id, form_update.model_dump(exclude_unset=True))


@router.delete("/{form_id}")
async def delete_form(
    form_id: str,
    user_id: str = Depends(get_current_user),
    db: DBOperations = Depends(get_db)
):
    """Delete form. Its submissions are kept."""
    require_owner(await db.find_by_id(Collections.FORMS, form_id), user_id)
    await db.delete(Collections.FORMS, form_id)
    return {"message": "Form deleted successfully"}


@router.post("/{form_id}/submit", response_model=SubmitResult, status_code=status.HTTP_201_CREATED)
async def submit_form(
    form_id: str,
    submission: SubmissionCreate,
    request: Request,
    db: DBOperations = Depends(get_db)
):
    """Submit a form response"""
    form = await db.find_by_id(Collections.FORMS, form_id)

    errors = validate_submission(form, submission.responses)
    if errors:
        raise ValidationError(errors)

    created = await db.create(Collections.SUBMISSIONS, {
        "formId": str(form["_id"]),
        "responses": submission.responses,
        "submittedAt": submission.submittedAt,
        **request_metadata(request),
    })
    return SubmitResult(submissionId=str(created["_id"]))


@router.get("/{form_id}/submissions", response_model=List[SubmissionResponse])
async def get_form_submissions(
    form_id: str,
    user_id: str = Depends(get_current_user),
    db: DBOperations = Depends(get_db)
):
    """Get submissions for a form, newest first (owner only)"""
    form = require_owner(await db.find_by_id(Collections.FORMS, form_id), user_id)
    subs = await db.find_by_owner(Collections.SUBMISSIONS, str(form["_id"]))
    subs.sort(key=lambda x: x["submittedAt"], reverse=True)
    return subs

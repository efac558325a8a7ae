"""
Public white-label form pages.

An id that matches no form renders a demo form instead of a 404 so share
links never land on an error page; the JSON API still answers 404.
"""
import logging
from typing import Any, Dict, Tuple

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse
from starlette.datastructures import UploadFile

from formcraft.config.database import Collections
from formcraft.database.db_operations import DBOperations, get_db
from formcraft.routes.form import request_metadata
from formcraft.services.renderer import FormSession, SessionState, demo_form
from formcraft.services.uploads import discard_upload, save_upload
from formcraft.utils.errors import FormCraftError, NotFound

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Public"])


async def load_form(db: DBOperations, form_id: str) -> Tuple[Dict[str, Any], bool]:
    """Return (form, is_demo)"""
    try:
        return await db.find_by_id(Collections.FORMS, form_id), False
    except NotFound:
        logger.info("Form %s not found, rendering demo form", form_id)
        return demo_form(form_id), True


def render_page(request: Request, session: FormSession, status_code: int = status.HTTP_200_OK) -> HTMLResponse:
    templates = request.app.state.templates
    template = "form_submitted.html" if session.state == SessionState.SUBMITTED else "form_public.html"
    return templates.TemplateResponse(
        request,
        template,
        {
            "form": session.form,
            "session": session,
            "controls": session.controls(),
            "theme": session.theme,
        },
        status_code=status_code,
    )


@router.get("/f/{form_id}", response_class=HTMLResponse)
async def public_form(request: Request, form_id: str, db: DBOperations = Depends(get_db)):
    form, is_demo = await load_form(db, form_id)
    return render_page(request, FormSession(form, demo=is_demo))


@router.post("/f/{form_id}", response_class=HTMLResponse)
async def submit_public_form(request: Request, form_id: str, db: DBOperations = Depends(get_db)):
    form, is_demo = await load_form(db, form_id)
    session = FormSession(form, demo=is_demo)
    form_data = await request.form()
    uploads: Dict[str, UploadFile] = {}

    for field in form.get("fields") or []:
        field_id = field["id"]
        if field["type"] == "checkbox":
            value = [str(v) for v in form_data.getlist(field_id) if not isinstance(v, UploadFile)]
        elif field["type"] == "file":
            upload = form_data.get(field_id)
            value = None
            if isinstance(upload, UploadFile) and upload.filename:
                uploads[field_id] = upload
                # Placeholder until the file is stored after validation
                value = upload.filename
        else:
            raw = form_data.get(field_id)
            value = raw if isinstance(raw, str) else None
        session.set_value(field_id, value)

    async def store_submission(payload: Dict[str, Any]) -> Dict[str, Any]:
        saved = []
        try:
            for field_id, upload in uploads.items():
                payload["responses"][field_id] = save_upload(upload)
                saved.append(payload["responses"][field_id])
            return await db.create(Collections.SUBMISSIONS, payload)
        except FormCraftError:
            for handle in saved:
                discard_upload(handle)
            raise

    await session.submit(store_submission, request_metadata(request))

    if session.state == SessionState.SUBMITTED:
        logger.info("📨 Submission %s stored for form %s", session.submission_id, form_id)
        return render_page(request, session, status_code=status.HTTP_201_CREATED)
    code = status.HTTP_400_BAD_REQUEST if session.errors else status.HTTP_200_OK
    if session.submit_error and not is_demo:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return render_page(request, session, status_code=code)

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from chatpanel.core.schema import SurveySubmission
from chatpanel.routes.quiz import read_json_body

log = logging.getLogger(__name__)

router = APIRouter(prefix="/survey", tags=["survey"])


@router.post("/submit")
async def submit_survey(request: Request) -> JSONResponse:
    try:
        submission = SurveySubmission.model_validate(await read_json_body(request))
        if not submission.is_complete:
            return JSONResponse({"error": "Missing required fields"}, status_code=400)

        log.info("[api/survey/submit] %s", submission.model_dump())
        return JSONResponse({"ok": True})
    except Exception:
        log.exception("[api/survey/submit] error")
        return JSONResponse({"error": "Internal error"}, status_code=500)

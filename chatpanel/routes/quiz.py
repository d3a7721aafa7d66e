from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from chatpanel.core.schema import QuizSubmission

log = logging.getLogger(__name__)

router = APIRouter(prefix="/quiz", tags=["quiz"])


async def read_json_body(request: Request) -> dict[str, Any]:
    """Return the request body as a dict, or ``{}`` when it is not a JSON object."""

    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


@router.post("/submit")
async def submit_quiz(request: Request) -> JSONResponse:
    """Accept a single quiz answer. Nothing is stored yet; the answer is logged."""
    try:
        submission = QuizSubmission.model_validate(await read_json_body(request))
        if not submission.is_complete:
            return JSONResponse({"error": "Missing quizId or answer"}, status_code=400)

        # TODO: write answers to a quiz_answers table once the schema is agreed.
        log.info("[api/quiz/submit] saved | quizId=%s answer=%s", submission.quiz_id, submission.answer)
        return JSONResponse({"ok": True})
    except Exception:
        log.exception("[api/quiz/submit] error")
        return JSONResponse({"error": "Internal error"}, status_code=500)

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chatpanel.logging_setup import setup_logging
from chatpanel.routes import quiz, survey


def create_app() -> FastAPI:
    app = FastAPI(title="Chat Panel Submissions API", version="0.1.0")

    if os.getenv("PANEL_CONFIGURE_LOGGING", "true").lower() in {"1", "true", "yes", "on"}:
        setup_logging()

    origins_env = os.getenv("API_CORS_ORIGINS", "")
    origins = [origin.strip() for origin in origins_env.split(",") if origin.strip()]
    if not origins:
        origins = ["http://localhost:3000", "http://127.0.0.1:3000"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(quiz.router, prefix="/api")
    app.include_router(survey.router, prefix="/api")

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        """Provide a lightweight landing page for container checks."""
        return JSONResponse(
            {
                "message": "Chat Panel Submissions API",
                "docs": "/docs",
                "endpoints": ["/api/quiz/submit", "/api/survey/submit"],
            }
        )

    return app


app = create_app()

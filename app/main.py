from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import BackgroundTasks, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
from pydantic import BaseModel, Field

from agent.agent import WellnessAgent, build_agent, run_agent
from config.settings import Settings, get_settings


logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s - %(message)s")
logger = logging.getLogger("ayurvidhya")


class ChatRequest(BaseModel):
    message: Optional[str] = Field(default=None, description="User's wellness question")
    location: Optional[str] = Field(
        default=None, description="Free-text place or 'lat,lng' used for nearby searches"
    )


class ChatResponse(BaseModel):
    reply: str


def create_app(settings: Optional[Settings] = None, agent: Optional[WellnessAgent] = None) -> FastAPI:
    settings = settings or get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.agent = agent or build_agent(settings)
        logger.info(
            "Config: providers=%s places=%s chat_log=%s",
            [p.name for p in settings.providers],
            bool(settings.places_api_key),
            bool(settings.github_token),
        )
        yield
        app.state.agent.close()

    app = FastAPI(title="AYUR VIDHYA Wellness Assistant", version="1.0.0", lifespan=lifespan)

    # CORS: allow local frontend during development
    if settings.app_env.lower() in {"dev", "development", "local"}:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(RequestValidationError)
    async def invalid_body(_: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": "Request body must be a JSON object"})

    @app.post("/api/chat", response_model=ChatResponse)
    def chat(req: ChatRequest, request: Request, background_tasks: BackgroundTasks) -> Any:
        wellness_agent: WellnessAgent = request.app.state.agent
        logger.info(
            "Incoming chat: query_len=%s location_set=%s",
            len(req.message or ""),
            bool(req.location),
        )
        status_code, body = run_agent(wellness_agent, req.model_dump())
        if status_code != 200:
            return JSONResponse(status_code=status_code, content=body)
        background_tasks.add_task(wellness_agent.log_chat, req.message, body["reply"])
        return body

    @app.get("/health")
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)

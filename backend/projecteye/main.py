"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from projecteye.config import get_settings
from projecteye.database import init_db
from projecteye.exceptions import ProjectEyeError
from projecteye.logging_config import configure_logging
from projecteye.routers import analytics, milestones, progress, projects, transactions

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level, json_output=settings.log_json)
    await init_db()
    logger.info("ProjectEye API started (%s)", settings.app_env)
    yield


app = FastAPI(
    title="ProjectEye",
    description="Construction project tracking: milestones, daily progress and approved spend",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ProjectEyeError)
async def domain_error_handler(request: Request, exc: ProjectEyeError):
    logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "code": exc.code})


app.include_router(projects.router)
app.include_router(milestones.router)
app.include_router(progress.router)
app.include_router(transactions.router)
app.include_router(analytics.router)


@app.get("/health")
async def health():
    return {"status": "ok"}

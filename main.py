import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from mongoengine.errors import ValidationError

from core.config import get_settings
from core.database import close_db, init_db
from core.logger import init_logging
from core.uploads import UploadSizeLimitMiddleware
from routes.auth.auth import router as auth_router
from routes.complaint.admin_router import router as admin_complaint_router
from routes.complaint.router import router as complaint_router
from startup import create_default_admin


def register_error_handlers(app: FastAPI, logger) -> None:
    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(ValidationError)
    async def document_validation_error(request: Request, exc: ValidationError):
        logger.info("Rejected document on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})

    @app.exception_handler(Exception)
    async def internal_error(request: Request, exc: Exception):
        logger.exception("500 Internal Server Error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": "Server error"})


def create_app(settings=None, mongo_client_class=None) -> FastAPI:
    settings = settings or get_settings()
    logger = init_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.db = init_db(settings, mongo_client_class=mongo_client_class)
        create_default_admin(settings, app.state.db.alias)
        yield
        close_db(app.state.db)

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(UploadSizeLimitMiddleware, settings=settings)

    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

    app.include_router(auth_router, prefix=settings.API_PREFIX)
    app.include_router(complaint_router, prefix=settings.API_PREFIX)
    app.include_router(admin_complaint_router, prefix=settings.API_PREFIX)

    @app.get("/", response_class=PlainTextResponse, tags=["Health"])
    def root():
        return "Complaint Registration API Running"

    register_error_handlers(app, logger)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=get_settings().PORT)

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from quantumbot.api.chat import router as chat_router
from quantumbot.api.user import router as user_router
from quantumbot.core.config import Settings, get_settings
from quantumbot.core.errors import register_exception_handlers
from quantumbot.core.logging import configure_logging, install_access_log
from quantumbot.db.session import init_db


def install_cors(app: FastAPI, settings: Settings) -> None:
    # CORS: production sirf allow-list, dev mein har origin chalega
    if settings.is_production:
        origins = {"allow_origins": settings.allowed_origins}
    else:
        origins = {"allow_origin_regex": ".*"}
    app.add_middleware(
        CORSMiddleware,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        **origins,
    )


# Missing JWT_SECRET fails right here, before the server starts listening
settings = get_settings()
configure_logging(settings)
logger = logging.getLogger("quantumbot")

app = FastAPI(title="QuantumBot API")

install_access_log(app)
register_exception_handlers(app, expose_internals=not settings.is_production)
install_cors(app, settings)


@app.on_event("startup")
def startup_init_db():
    # Unreachable db at boot is fatal, the app must not come up half working
    init_db()
    logger.info("Database ready, environment=%s", settings.ENVIRONMENT)


@app.get("/", include_in_schema=False)
def root():
    return PlainTextResponse("Backend is running!")


@app.get("/api/debug/config")
def debug_config():
    """Non-secret config summary for checking a deployment. Never returns keys."""
    return {
        "geminiConfigured": bool(settings.GEMINI_API_KEY),
        "geminiModel": settings.gemini_model,
        "allowedOrigins": settings.allowed_origins,
        "port": settings.PORT,
        "environment": settings.ENVIRONMENT,
    }


app.include_router(user_router)
app.include_router(chat_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=settings.PORT, reload=not settings.is_production)

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from finance_tracker.ai.loader import AILoader
from finance_tracker.api.router import api_router, auth_router
from finance_tracker.config import settings
from finance_tracker.core.exceptions import ApiError
from finance_tracker.core.logging import setup_logging
from finance_tracker.storage.factory import build_store

setup_logging()
logger = logging.getLogger("finance_tracker")

tags_metadata = [
    {
        "name": "Auth",
        "description": "Registration, login, Google sign-in and profile.",
    },
    {
        "name": "Budget",
        "description": "Monthly budget, expenses and spending advice.",
    },
    {
        "name": "Transactions",
        "description": "Income/expense records and free-text quick add.",
    },
    {
        "name": "Analytics",
        "description": "Summaries, category breakdowns and trends.",
    },
    {
        "name": "System",
        "description": "Health checks.",
    },
]

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="""
### Personal finance tracker

Budgets, expenses, income/expense transactions, analytics and AI spending tips.

    """,
    version=settings.VERSION,
    openapi_tags=tags_metadata,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup():
    store = build_store(settings)
    await store.init()
    app.state.store = store
    AILoader.load(settings)
    logger.info("API ready (store=%s, advice=%s)", store.backend, AILoader.status())


@app.on_event("shutdown")
async def shutdown():
    store = getattr(app.state, "store", None)
    if store is not None:
        await store.close()


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"detail": "Invalid request payload"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.include_router(api_router, prefix=settings.API_PREFIX)
app.include_router(auth_router, prefix="/auth")


@app.get("/health", tags=["System"])
def health(request: Request):
    store = getattr(request.app.state, "store", None)
    return {
        "status": "operational",
        "storage": store.backend if store else "uninitialized",
        "advice": AILoader.status(),
    }

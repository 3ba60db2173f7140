from fastapi import FastAPI
from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from eduverify.api.routes import router
from eduverify.api.auth_routes import router as auth_router
from eduverify.services.errors import (
    AuthError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ServiceError,
    ValidationError,
)
from eduverify.settings import settings
from eduverify.observability.logging import log

app = FastAPI(title="EduVerify API")

origins = [x.strip() for x in settings.CORS_ORIGINS.split(",") if x.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(router)

STATUS_BY_ERROR = (
    (AuthError, 401),
    (NotFoundError, 404),
    (ConflictError, 409),
    (InvalidTransitionError, 409),
    (ValidationError, 422),
)


@app.get("/health")
def health():
    return {"status": "ok"}


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    status = next((code for cls, code in STATUS_BY_ERROR if isinstance(exc, cls)), 400)
    return JSONResponse(status_code=status, content={"status": "error", "message": exc.message})


# The UI stays usable after any failure: every unexpected error becomes a
# message the client can show in a notification.
@app.exception_handler(Exception)
async def universal_exception_handler(request: Request, exc: Exception):
    log(event="unhandled_exception", path=request.url.path, error=str(exc), kind=type(exc).__name__)
    return JSONResponse(
        status_code=500,
        content={"status": "error", "message": "Something went wrong. Please try again."},
    )


log(event="boot", storageBackend=settings.STORAGE_BACKEND, checkoutMode=settings.CHECKOUT_MODE,
    enforceTransitions=settings.ENFORCE_STATUS_TRANSITIONS)

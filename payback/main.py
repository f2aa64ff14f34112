from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import Response

from payback.core.config import settings
from payback.routers import (
    failed_transactions,
    processor_credential,
    recoveries,
    recovery,
)

OPENAPI_TAGS = [
    {"name": "Failed Transactions", "description": "Failed payments grouped by customer."},
    {"name": "Recovery", "description": "Retry failed charges against saved payment methods."},
    {"name": "Recoveries", "description": "Recovered payments and recovery statistics."},
    {"name": "Processor Credential", "description": "Manage the payment processor API key."},
]

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.version,
    description=(
        "Failed-payment recovery API. "
        "Find failed charges, retry them across saved payment methods, "
        "and track what was recovered."
    ),
    openapi_tags=OPENAPI_TAGS,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Idempotency-Replayed", "Retry-After"],
)


@app.middleware("http")
async def options_handler(request: Request, call_next):  # type: ignore[no-untyped-def]
    if request.method == "OPTIONS":
        origin = request.headers.get("origin", "*")
        return Response(
            status_code=200,
            headers={
                "Access-Control-Allow-Origin": origin,
                "Access-Control-Allow-Methods": "*",
                "Access-Control-Allow-Headers": "*",
                "Access-Control-Allow-Credentials": "true",
                "Access-Control-Max-Age": "86400",
            },
        )
    return await call_next(request)


app.include_router(
    failed_transactions.router,
    prefix="/v1/failed_transactions",
    tags=["Failed Transactions"],
)
app.include_router(recovery.router, prefix="/v1/recovery", tags=["Recovery"])
app.include_router(recoveries.router, prefix="/v1/recoveries", tags=["Recoveries"])
app.include_router(
    processor_credential.router,
    prefix="/v1/processor_credential",
    tags=["Processor Credential"],
)


@app.get("/")
async def root() -> dict[str, str]:
    return {
        "app": settings.APP_NAME,
        "version": settings.version,
        "status": "running",
    }


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}

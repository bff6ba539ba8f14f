import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from hospital_booking.config import settings
from hospital_booking.database import Base, engine
from hospital_booking.models import (  # noqa: F401
    appointment, catalog, coupon, medical_record, medication, notification, payment, review, user,
)
from hospital_booking.routers import (
    admin as admin_router,
    appointments as appointments_router,
    auth as auth_router,
    coupons as coupons_router,
    hospitals as hospitals_router,
    medical_records as medical_records_router,
    medications as medications_router,
    notifications as notifications_router,
    payments as payments_router,
)

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Create database tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Hospital Booking API",
    description="Appointment booking backend for hospitals: scheduling, coupons, payments and reviews",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router.router)
app.include_router(admin_router.router)
app.include_router(hospitals_router.router)
app.include_router(coupons_router.router)
app.include_router(appointments_router.router)
app.include_router(payments_router.router)
app.include_router(medical_records_router.router)
app.include_router(medications_router.router)
app.include_router(notifications_router.router)


@app.get("/health")
def health():
    return {"status": "healthy"}


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    content = {"success": False, "message": exc.detail}
    code = getattr(exc, "code", None)
    if code:
        content["code"] = code
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(part) for part in err["loc"] if part != "body"), "message": err["msg"]}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Validation failed", "errors": errors},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Internal server error"},
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("hospital_booking.main:app", host="0.0.0.0", port=8000, reload=True)

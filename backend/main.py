from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from database import Base, engine
from datetime import datetime
import config
import models  # noqa: F401  registers every table on Base.metadata
import routers.app_config as app_config
import routers.audit_logs as audit_logs
import routers.categories as categories
import routers.customers as customers
import routers.inventory_items as inventory_items
import routers.orders as orders
import routers.provider_orders as provider_orders
import routers.providers as providers
import routers.units as units
from exceptions import WholesaleError
import os
import logging
from fastapi.openapi.utils import get_openapi


LOG_DIR = config.LOG_DIR
os.makedirs(LOG_DIR, exist_ok=True) # Create 'logs' directory if it doesn't exist

# Create a unique log file name based on current date/time
current_time_str = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
LOG_FILE = os.path.join(LOG_DIR, f"app_{current_time_str}.log")

# Configure the root logger
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    filename=LOG_FILE, # Log to a file
    filemode='a' # Append to the file if it exists
)

# Also log to the console
console_handler = logging.StreamHandler()
console_handler.setLevel(logging.INFO)
console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
logging.getLogger().addHandler(console_handler) # Add to the root logger

logger = logging.getLogger(__name__)
logger.info("Application starting up...")
# --- End Logging Configuration ---


# Create database tables
Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    scheduler = None
    if config.RESTOCK_SCHEDULER_ENABLED:
        from scheduler import scheduler
        scheduler.start()
        logger.info(f"Restock scheduler started (daily at {config.RESTOCK_CRON_HOUR}:00 {config.APP_TIMEZONE})")
    yield
    if scheduler is not None:
        scheduler.shutdown(wait=False)
        logger.info("Restock scheduler stopped")


app = FastAPI(lifespan=lifespan)


# Split the string into a list, stripping any whitespace
allowed_origins = [origin.strip() for origin in config.CORS_ALLOWED_ORIGINS.split(',')]

# Enable CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(WholesaleError)
async def wholesale_error_handler(request: Request, exc: WholesaleError):
    if exc.http_status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = [str(part) for part in first.get("loc", ()) if part != "body"]
    field = ".".join(location) or None
    detail = f"{field}: {first.get('msg')}" if field else (first.get("msg") or "Invalid request.")
    code = "missing_fields" if first.get("type") == "missing" else "validation_error"
    return JSONResponse(status_code=400, content={"detail": detail, "code": code, "field": field})


def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title="Wholesale Hub API",
        version="1.0.0",
        description="Back office API for wholesale orders, inventory and provider restocking",
        routes=app.routes,
    )
    openapi_schema["components"]["securitySchemes"] = {
        "BearerAuth": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
        }
    }
    # Apply security globally to all endpoints
    openapi_schema["security"] = [{"BearerAuth": []}]
    app.openapi_schema = openapi_schema
    return app.openapi_schema

app.openapi = custom_openapi


app.include_router(categories.router)
app.include_router(units.router)
app.include_router(providers.router)
app.include_router(customers.router)
app.include_router(inventory_items.router)
app.include_router(orders.router)
app.include_router(provider_orders.router)
app.include_router(app_config.router)
app.include_router(audit_logs.router)

@app.get("/")
async def test_route():
    return {"message": "Welcome to the Wholesale Hub API!"}

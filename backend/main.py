import os # os needs to be imported before dotenv for getenv to work as expected in some cases
from dotenv import load_dotenv
load_dotenv() # Load .env file at the very beginning

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from timesheet.db import init_db
from timesheet.routes import schedules, shift_swaps, health
import logging
from timesheet.middleware.rate_limiter import RateLimiterMiddleware
from timesheet.middleware.error_handler import ErrorHandlerMiddleware

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Timesheet Scheduling API",
    description="Employee schedules with conflict detection, and shift swaps with two-stage approval",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Explicit origin list is mandatory when allow_credentials=True.
# Multiple origins can be provided via CORS_ORIGINS, comma-separated.
cors_origins_str = os.getenv("CORS_ORIGINS", "http://localhost:3000")
cors_origins = [origin.strip() for origin in cors_origins_str.split(",")]
logger.debug("Configuring CORS for origins: %s", cors_origins)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Basic IP rate limiting (configurable via RATE_LIMIT / RATE_LIMIT_WINDOW env vars)
app.add_middleware(RateLimiterMiddleware)

# Add error handler middleware (after CORS so errors get CORS headers)
app.add_middleware(ErrorHandlerMiddleware)

# Initialize Database
init_db(app)

app.include_router(health.router, tags=["Health"])

@app.get("/")
async def root():
    return {
        "message": "Welcome to the Timesheet Scheduling API",
        "docs": "/docs",
        "health": "/health"
    }

app.include_router(schedules.router, prefix="/api/schedules", tags=["Schedules"])
app.include_router(shift_swaps.router, prefix="/api/shift-swaps", tags=["Shift Swaps"])

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

"""
Training Program Console Core - FastAPI Application Entry Point.

This is the main application module that:
1. Initializes the FastAPI app with CORS middleware
2. Sets up structured JSON logging
3. Implements request ID middleware (X-Request-ID header)
4. Registers all API route handlers
5. Provides health check endpoint

The application follows a modular architecture:
- routes/: API endpoint handlers (fetch rows, call services, gate mutations)
- models/: SQLAlchemy ORM models (storage collaborator)
- services/: Pure aggregation, scoring and permission logic
- schemas.py: Typed records validated at the storage boundary
- logging_config.py: Structured logging configuration
- database.py: Database connection management
"""

import time
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from traincore import __version__
from traincore.config import DATABASE_URL, ROLE_HEADER
from traincore.logging_config import (
    setup_logging, get_logger, log_with_context,
    request_id_var, generate_request_id
)
from traincore.routes import admins, attendance, batches, rankings, tasks, teachers
from traincore.database import create_tables

# Import all models so they are registered with Base.metadata
from traincore import models  # noqa: F401

# ──────────────────────────────────────────────────────────────
# Initialize structured logging BEFORE anything else
# ──────────────────────────────────────────────────────────────
setup_logging()
logger = get_logger("http")

if DATABASE_URL.startswith("sqlite"):
    logger.info("Using SQLite, creating tables directly")
    create_tables()

app = FastAPI(
    title="Training Program Console Core",
    description=(
        "Attendance aggregation, performance scoring and ranking, trend and "
        "status statistics, and role-based authorization for the training "
        "program staff console."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

# ──────────────────────────────────────────────────────────────
# CORS Middleware
#
# The console frontend runs on its own origin. In production, restrict
# origins to the actual frontend domain.
# ──────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"]
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """
    Generate a unique request ID for every HTTP request.

    The ID is stored in a context variable (picked up by every log entry),
    returned in the X-Request-ID header, and logged with request latency.
    """
    req_id = generate_request_id()
    request_id_var.set(req_id)

    start_time = time.time()

    log_with_context(logger, "INFO",
        f"Request started: {request.method} {request.url.path}",
        context={"request_id": req_id},
        extra_data={
            "ip": request.client.host if request.client else "unknown",
            "role": request.headers.get(ROLE_HEADER),
            "query_params": dict(request.query_params)
        })

    response = await call_next(request)

    duration_ms = (time.time() - start_time) * 1000
    response.headers["X-Request-ID"] = req_id

    log_with_context(logger, "INFO",
        f"Request completed: {request.method} {request.url.path} → {response.status_code}",
        context={"request_id": req_id},
        extra_data={
            "duration_ms": round(duration_ms, 2),
            "status_code": response.status_code
        })

    return response


# ──────────────────────────────────────────────────────────────
# Register API routes
# ──────────────────────────────────────────────────────────────
app.include_router(attendance.router, tags=["Attendance"])
app.include_router(rankings.router, tags=["Rankings"])
app.include_router(batches.router, tags=["Batches"])
app.include_router(teachers.router, tags=["Teachers"])
app.include_router(tasks.router, tags=["Tasks"])
app.include_router(admins.router, tags=["Staff"])


@app.get("/health", tags=["Health"])
def health_check():
    """Health check endpoint for container health checks and monitoring."""
    return {"status": "healthy", "service": "traincore", "version": __version__}


@app.get("/", tags=["Root"])
def root():
    """Root endpoint with API information."""
    return {
        "service": "Training Program Console Core",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "attendance_stats": "GET /api/attendance/stats",
            "attendance_list": "GET /api/attendance",
            "mark_attendance": "POST /api/attendance",
            "rankings": "GET /api/rankings",
            "update_performance": "PUT /api/students/{id}/performance",
            "batch_overview": "GET /api/batches/overview",
            "batch_stats": "GET /api/batches/stats",
            "batch_module": "PUT /api/batches/{id}/module",
            "teachers": "GET|POST /api/teachers",
            "mark_teacher_attendance": "POST /api/teachers/attendance",
            "teacher_attendance_stats": "GET /api/teachers/attendance/stats",
            "teacher_attendance": "GET /api/teachers/{id}/attendance",
            "tasks": "GET|POST /api/tasks",
            "task": "PUT|DELETE /api/tasks/{id}",
            "task_stats": "GET /api/tasks/stats",
            "admin_stats": "GET /api/admins/stats",
            "update_role": "PUT /api/admins/{user_id}/role",
            "permissions": "GET /api/permissions"
        }
    }

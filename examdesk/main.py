#!/usr/bin/env python3
"""
Examdesk - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Initializes modules
3. Runs the API server

All business logic is in the modules, following black box principles.
"""

import logging
import logging.config as log_config
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import redis.asyncio as redis
import uvicorn
from fastapi import Body, Depends, FastAPI, Header, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from examdesk import __version__
from examdesk.factory import ServiceFactory, Services
from examdesk.logging_config import get_logging_config
from examdesk.modules.api import (
    CreateCustomerRequest,
    CreateExamRequest,
    CustomerLoginRequest,
    CustomerSummary,
    RecoverRequest,
    RecoveryResult,
    RecoveryStatus,
    validation_message,
)
from examdesk.modules.auth import AdminPrincipal
from examdesk.modules.config import get_config
from examdesk.modules.errors import DuplicateEmail, InvalidRecovery, NotFound, StorageError

# Get configuration
config = get_config()

# Configure logging with health check suppression
log_config.dictConfig(get_logging_config(config.get("log_level")))
logger = logging.getLogger(__name__)

# Module instances (initialized at startup)
services: Optional[Services] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle - initialize and cleanup resources.
    """
    global services

    logger.info("Starting Examdesk API...")
    services = await ServiceFactory.build(config)
    logger.info("Examdesk API started successfully")

    yield

    logger.info("Shutting down Examdesk API...")
    await services.storage.disconnect()
    services = None
    logger.info("Examdesk API shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="Examdesk API",
    description="Exam administration and customer access API",
    version=__version__,
    lifespan=lifespan,
)

# CORS for the dashboard frontend (tighten origins in production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


# Dependency injection helpers
def get_services() -> Services:
    if not services:
        raise HTTPException(503, "Service not initialized")
    return services


async def verify_admin(
    authorization: Optional[str] = Header(None, description="Bearer admin token"),
    svc: Services = Depends(get_services),
) -> AdminPrincipal:
    """Admit the request only with a valid admin bearer token."""
    return svc.gate.authenticate(authorization)


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


# Admin Endpoints


@app.get("/admin")
async def admin_dashboard(principal: AdminPrincipal = Depends(verify_admin)):
    """Admin dashboard landing endpoint."""
    return {
        "ok": True,
        "message": "Welcome to admin dashboard",
        "admin": principal.to_dict(),
        "timestamp": utc_timestamp(),
    }


@app.get("/admin/exams")
async def admin_list_exams(
    principal: AdminPrincipal = Depends(verify_admin),
    svc: Services = Depends(get_services),
):
    exams = await svc.exams.list_exams()
    return {"ok": True, "count": len(exams), "exams": exams}


@app.get("/admin/exams/{exam_id}")
async def admin_get_exam(
    exam_id: str,
    principal: AdminPrincipal = Depends(verify_admin),
    svc: Services = Depends(get_services),
):
    exam = await svc.exams.get_exam(exam_id)
    if not exam:
        raise HTTPException(404, "Exam not found")
    return {"ok": True, "exam": exam}


@app.post("/admin/exams", status_code=201)
async def admin_create_exam(
    request: CreateExamRequest,
    principal: AdminPrincipal = Depends(verify_admin),
    svc: Services = Depends(get_services),
):
    """
    Save an exam from the dashboard.

    Returns:
        201: Exam created
        400: title missing
        401: Unauthorized
    """
    logger.info(f"createExam request by {principal.client_id}: {request.title}")
    exam = await svc.exams.create_exam(
        request.model_dump(exclude_none=True), created_by=principal.client_id
    )
    return {"ok": True, "exam": exam}


@app.put("/admin/exams/{exam_id}")
async def admin_update_exam(
    exam_id: str,
    updates: Dict[str, Any] = Body(...),
    principal: AdminPrincipal = Depends(verify_admin),
    svc: Services = Depends(get_services),
):
    exam = await svc.exams.update_exam(exam_id, updates)
    if not exam:
        raise HTTPException(404, "Exam not found")
    return {"ok": True, "exam": exam}


@app.delete("/admin/exams/{exam_id}")
async def admin_delete_exam(
    exam_id: str,
    principal: AdminPrincipal = Depends(verify_admin),
    svc: Services = Depends(get_services),
):
    logger.info(f"deleteExam request by {principal.client_id}: {exam_id}")
    if not await svc.exams.delete_exam(exam_id):
        raise HTTPException(404, "Exam not found")
    return {"ok": True, "message": "Exam deleted"}


@app.get("/admin/stats")
async def admin_stats(
    principal: AdminPrincipal = Depends(verify_admin),
    svc: Services = Depends(get_services),
):
    customers = await svc.accounts.list_customers()
    stats = await svc.exams.stats(total_students=len(customers))
    return {"ok": True, "stats": stats, "timestamp": utc_timestamp()}


@app.get("/admin/customers")
async def admin_list_customers(
    principal: AdminPrincipal = Depends(verify_admin),
    svc: Services = Depends(get_services),
):
    customers = await svc.accounts.list_customers()
    return {
        "ok": True,
        "count": len(customers),
        "customers": [c.to_dict() for c in customers],
    }


@app.post("/admin/customers", status_code=201)
async def admin_create_customer(
    request: CreateCustomerRequest,
    principal: AdminPrincipal = Depends(verify_admin),
    svc: Services = Depends(get_services),
):
    """
    Create a customer and mail them their access token.

    Returns:
        201: Customer created (includes the token)
        400: email missing or already registered
        401: Unauthorized
    """
    customer = await svc.accounts.create_customer(request.email)
    return {"ok": True, "customer": customer.to_dict()}


@app.delete("/admin/customers/{customer_id}")
async def admin_delete_customer(
    customer_id: str,
    principal: AdminPrincipal = Depends(verify_admin),
    svc: Services = Depends(get_services),
):
    await svc.accounts.delete_customer(customer_id)
    return {"ok": True, "message": "Customer deleted"}


@app.post("/admin/customers/{customer_id}/regenerate-token")
async def admin_regenerate_token(
    customer_id: str,
    principal: AdminPrincipal = Depends(verify_admin),
    svc: Services = Depends(get_services),
):
    customer = await svc.accounts.regenerate_token(customer_id)
    return {"ok": True, "customer": customer.to_dict()}


# Customer Endpoints (public)


@app.post("/customer-login")
async def customer_login(request: CustomerLoginRequest, svc: Services = Depends(get_services)):
    customer = await svc.accounts.login(request.token)
    summary = CustomerSummary(id=customer.id, email=customer.email)
    return {"ok": True, "customer": summary.model_dump()}


@app.post("/customer-recover")
async def customer_recover(request: RecoverRequest, svc: Services = Depends(get_services)):
    await svc.accounts.request_recovery(request.email)
    return {"ok": True, "message": "Recovery email sent"}


@app.get("/customer-recover/{token}", response_model=RecoveryStatus)
async def customer_recover_status(token: str, svc: Services = Depends(get_services)):
    grant = await svc.accounts.confirm_recovery(token)
    return RecoveryStatus(email=grant.email)


@app.post("/customer-recover/{token}/reset", response_model=RecoveryResult)
async def customer_recover_reset(token: str, svc: Services = Depends(get_services)):
    customer = await svc.accounts.complete_recovery(token)
    return RecoveryResult(token=customer.token)


# Public exam listing


@app.get("/exams")
async def list_exams(svc: Services = Depends(get_services)):
    return {"ok": True, "exams": await svc.exams.list_exams()}


@app.get("/exams/{exam_id}")
async def get_exam(exam_id: str, svc: Services = Depends(get_services)):
    exam = await svc.exams.get_exam(exam_id)
    if not exam:
        raise HTTPException(404, "Exam not found")
    return {"ok": True, "exam": exam}


# Health Endpoints


@app.get("/healthz")
async def healthz():
    """
    Minimal health check endpoint for readiness/liveness probes.

    Returns:
        200: Service is running
    """
    return {"ok": True}


@app.get("/health")
async def health_check():
    """
    Health check including storage connectivity.

    Returns:
        200: Service healthy
        503: Service unhealthy
    """
    if not services:
        return JSONResponse(status_code=503, content={"ok": False, "status": "not initialized"})
    try:
        await services.storage.ping()
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={"ok": False, "status": "unhealthy", "storage": services.storage.backend},
        )
    return {"ok": True, "status": "healthy", "storage": services.storage.backend, "version": __version__}


# Error handlers


def error_response(status_code: int, message: str, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return error_response(400, validation_message(exc.errors()))


@app.exception_handler(DuplicateEmail)
async def duplicate_email_handler(request: Request, exc: DuplicateEmail):
    logger.info(f"Rejected duplicate customer email on {request.url.path}")
    return error_response(400, "Email already exists")


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return error_response(404, str(exc))


@app.exception_handler(InvalidRecovery)
async def invalid_recovery_handler(request: Request, exc: InvalidRecovery):
    # Unknown, used and expired tokens are indistinguishable to the caller
    return error_response(404, "Invalid or expired token")


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error(f"Storage error: {exc}")
    return error_response(503, "Database connection failed")


@app.exception_handler(redis.ConnectionError)
async def redis_error_handler(request: Request, exc: redis.ConnectionError):
    logger.error(f"Redis connection error: {exc}")
    return error_response(503, "Database connection failed")


@app.exception_handler(ValueError)
async def validation_error_handler(request: Request, exc: ValueError):
    logger.error(f"Validation error: {exc}")
    return error_response(400, str(exc))


if __name__ == "__main__":
    uvicorn.run(
        "examdesk.main:app",
        host=config.get("host"),
        port=config.get("port"),
        log_level=config.get("log_level").lower(),
        reload=config.get("debug"),
        log_config=get_logging_config(config.get("log_level")),
    )

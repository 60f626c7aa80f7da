from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import time
import logging
from app.api import documents, tables, comparisons, organizations
from app.api.error_handlers import register_exception_handlers
from app.security_config import get_security_headers, get_cors_config
from app.services.gemini import get_gemini_service

# Initialize logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Document Comparison Backend")

register_exception_handlers(app)

@app.get("/health")
async def health_check():
    """
    Health check endpoint for Docker and monitoring.
    """
    return {
        "status": "healthy",
        "message": "Document comparison backend is running",
        "gemini_configured": get_gemini_service().is_available(),
        "timestamp": time.time()
    }

# Security Configuration
cors_config = get_cors_config()
security_headers = get_security_headers()

# CORS must be added first
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_config["allow_origins"],
    allow_credentials=cors_config["allow_credentials"],
    allow_methods=cors_config["allow_methods"],
    allow_headers=cors_config["allow_headers"],
    expose_headers=["Content-Disposition", "X-Process-Time"],
)

# Security headers middleware
@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)

    # Don't override headers already set by the endpoint
    for header, value in security_headers.items():
        if header not in response.headers:
            response.headers[header] = value

    if request.url.scheme == "https":
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

    return response

# Request timing middleware for monitoring
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    return response


app.include_router(documents.router)
app.include_router(tables.router)
app.include_router(comparisons.router)
app.include_router(organizations.router)

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000, log_level="info")

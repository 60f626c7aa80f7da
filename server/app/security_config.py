"""
Security Configuration for the Document Comparison Backend

CORS origins and the response security headers added to every request.
"""

import os
from typing import List, Dict, Any

# Security Headers Configuration
SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()"
}

# CORS Configuration
# Default CORS origins - can be overridden by environment variable
DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]


def parse_cors_origins(value: str) -> List[str]:
    # Comma-separated origins, blanks ignored
    return [origin.strip() for origin in value.split(",") if origin.strip()]


CORS_ORIGINS_ENV = os.environ.get("CORS_ORIGINS")
if CORS_ORIGINS_ENV:
    CORS_ORIGINS = parse_cors_origins(CORS_ORIGINS_ENV)
else:
    CORS_ORIGINS = DEFAULT_CORS_ORIGINS

CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
CORS_HEADERS = ["*"]


def get_security_headers() -> Dict[str, str]:
    """Get security headers configuration"""
    return SECURITY_HEADERS.copy()


def get_cors_config() -> Dict[str, Any]:
    """Get CORS configuration"""
    return {
        "allow_origins": CORS_ORIGINS,
        "allow_methods": CORS_METHODS,
        "allow_headers": CORS_HEADERS,
        "allow_credentials": True
    }

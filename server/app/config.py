import os
from dotenv import load_dotenv

load_dotenv()

# Database session helpers live in app.db.database; routers import get_db from here
from app.db.database import engine, AsyncSessionLocal, get_db  # noqa: E402,F401

# Gemini Configuration
GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY") or os.environ.get("Gemini_key")
GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-1.5-flash")
GEMINI_API_BASE = os.environ.get("GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta")
GEMINI_TIMEOUT_SECONDS = float(os.environ.get("GEMINI_TIMEOUT_SECONDS", "120"))
GEMINI_CONNECT_TIMEOUT = float(os.environ.get("GEMINI_CONNECT_TIMEOUT", "10"))
GEMINI_HTTP_MAX_RETRIES = int(os.environ.get("GEMINI_HTTP_MAX_RETRIES", "2"))
GEMINI_TEMPERATURE = float(os.environ.get("GEMINI_TEMPERATURE", "0.1"))
GEMINI_MAX_OUTPUT_TOKENS = int(os.environ.get("GEMINI_MAX_OUTPUT_TOKENS", "4096"))
# Comparison replies are much longer than classification replies
GEMINI_COMPARISON_MAX_OUTPUT_TOKENS = int(os.environ.get("GEMINI_COMPARISON_MAX_OUTPUT_TOKENS", "8192"))

# Upload Configuration
MAX_UPLOAD_SIZE_MB = int(os.environ.get("MAX_UPLOAD_SIZE_MB", "20"))
MAX_TARGET_DOCUMENTS = int(os.environ.get("MAX_TARGET_DOCUMENTS", "5"))

# Organization context header sent by the front end
ORGANIZATION_HEADER = os.environ.get("ORGANIZATION_HEADER", "X-Organization-Id")

import os

# ✅ Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./resumeforge.db")

# ✅ Security
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")
ALGORITHM = os.getenv("ALGORITHM", "HS256")

# ✅ Frontend / CORS
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173").rstrip("/")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", f"{FRONTEND_URL},http://localhost:5173").split(",")
    if origin.strip()
]
MAX_BODY_BYTES = int(os.getenv("MAX_BODY_BYTES", str(5 * 1024 * 1024)))

# ✅ PDF rendering
PDF_RENDERER = os.getenv("PDF_RENDERER", "wkhtmltopdf")  # "wkhtmltopdf" or "browser"
PDF_RENDER_TIMEOUT_SECONDS = float(os.getenv("PDF_RENDER_TIMEOUT_SECONDS", "30"))
PDF_MAX_CONCURRENT_PAGES = int(os.getenv("PDF_MAX_CONCURRENT_PAGES", "4"))
WKHTMLTOPDF_PATH = os.getenv("WKHTMLTOPDF_PATH", "wkhtmltopdf")
PDF_STYLES_PATH = os.getenv(
    "PDF_STYLES_PATH",
    os.path.join(os.path.dirname(os.path.dirname(__file__)), "static", "pdf-styles.css"),
)

# ✅ Sharing
SHARE_TTL_DAYS = int(os.getenv("SHARE_TTL_DAYS", "30"))
SHARE_RATE_LIMIT = int(os.getenv("SHARE_RATE_LIMIT", "10"))
SHARE_RATE_WINDOW_MINUTES = int(os.getenv("SHARE_RATE_WINDOW_MINUTES", "60"))

# ✅ Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("LOG_DIR", "logs")

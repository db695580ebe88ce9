import os

EVENT_NAME = os.getenv("EVENT_NAME", "Wasilah Matrimonial Event")
ORGANIZER_SIGNATURE = os.getenv("ORGANIZER_SIGNATURE", "Wasilah Team")

ADMIN_TOKEN = os.getenv("ADMIN_TOKEN", "")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "")
ADMIN_PASSWORD_HASH = os.getenv("ADMIN_PASSWORD_HASH", "")
ADMIN_SESSION_TTL_MINUTES = int(os.getenv("ADMIN_SESSION_TTL_MINUTES", "480"))
JWT_SECRET = os.getenv("JWT_SECRET", "")
DEV_MODE = os.getenv("DEV_MODE", "false").lower() == "true"

PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:5173").rstrip("/")
PARTICIPANT_LINK_PATH = os.getenv("PARTICIPANT_LINK_PATH", "/select/")
TOKEN_BYTES = max(16, int(os.getenv("TOKEN_BYTES", "24")))
MAX_ROSTER_BYTES = int(os.getenv("MAX_ROSTER_BYTES", str(2 * 1024 * 1024)))

ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",")
    if origin.strip()
]

RL_PARTICIPANT_LIMIT = int(os.getenv("RL_PARTICIPANT_LIMIT", "60"))
RL_ADMIN_LOGIN_LIMIT = int(os.getenv("RL_ADMIN_LOGIN_LIMIT", "10"))
RL_WINDOW_SECONDS = int(os.getenv("RL_WINDOW_SECONDS", "60"))

"""Configuration and environment variables."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the repository root (one level up from parametric/)
_env_path = Path(__file__).parent.parent / ".env"
if not _env_path.exists():
    _env_path = Path(__file__).parent / ".env"
load_dotenv(_env_path)

# --- API Keys ---
OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY", "")
FAL_KEY = os.getenv("FAL_KEY", "")
HF_API_TOKEN = os.getenv("HF_API_TOKEN", "")
RESEND_API_KEY = os.getenv("RESEND_API_KEY", "")

# --- Models ---
SEGMENTATION_MODEL = os.getenv("SEGMENTATION_MODEL", "nvidia/segformer-b0-finetuned-ade-512-512")
SEGMENTATION_API_URL = os.getenv(
    "SEGMENTATION_API_URL", "https://router.huggingface.co/hf-inference/models"
)
PRICING_MODEL = "google/gemini-2.5-flash"
TRELLIS_MODEL = "fal-ai/trellis-2"

# --- Supabase ---
SUPABASE_URL = os.getenv("SUPABASE_URL", "http://127.0.0.1:54321")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")

# --- Email ---
EMAIL_FROM = os.getenv("EMAIL_FROM", "Parametric Furniture <orders@resend.dev>")
PUBLIC_SITE_URL = os.getenv("PUBLIC_SITE_URL", "http://localhost:5173")

# --- Currency ---
EXCHANGE_RATE_API_URL = os.getenv("EXCHANGE_RATE_API_URL", "https://api.exchangerate-api.com/v4/latest")
BASE_CURRENCY = "INR"
EXCHANGE_RATE_TTL_HOURS = 24

# --- Marketplace rules ---
COMMISSION_RATE = 0.07
DEFAULT_MARKUP = 0.5
MAX_BASE_PRICE = 1_000_000

# --- Imaging ---
MAX_IMAGE_DIMENSION = 1024
BACKGROUND_THRESHOLD = 240

# --- Feature Flags ---
ENABLE_DESIGNER_NOTIFICATIONS = os.getenv("ENABLE_DESIGNER_NOTIFICATIONS", "true").lower() == "true"

"""Configuration: env, Redis connection, key namespace, card list location."""
import os
from pathlib import Path

from dotenv import load_dotenv

# Base paths (project root = parent of mixaid package)
BASE_DIR = Path(__file__).resolve().parent.parent

# Load .env from project root so REDIS_URL etc. are set
load_dotenv(BASE_DIR / ".env")

# Redis
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
KEY_NAMESPACE = os.getenv("MIXAID_NAMESPACE", "gomez-mix-aid:store")
# Attempts for a save/delete that loses a WATCH race on the same card
SAVE_RETRIES = int(os.getenv("MIXAID_SAVE_RETRIES", "5"))

# API
API_HOST = os.getenv("MIXAID_API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("MIXAID_API_PORT", os.getenv("PORT", "8000")))
# Front-end origin allowed by CORS; empty allows any origin
FRONT_END_SERVER_URL = os.getenv("FRONT_END_SERVER_URL", "")

# Source CSV for /load-data
CARDLIST_PATH = Path(os.getenv("MIXAID_CARDLIST_PATH", str(BASE_DIR / "cardlist.csv")))

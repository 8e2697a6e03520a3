"""
Configuration and shared helpers
"""

import hashlib
import os
import re
from datetime import datetime, timezone
from motor.motor_asyncio import AsyncIOMotorClient
from dotenv import load_dotenv
from pathlib import Path

# Load .env
ROOT_DIR = Path(__file__).parent
load_dotenv(ROOT_DIR / '.env')

# MongoDB
MONGO_URL = os.environ.get('MONGO_URL', 'mongodb://localhost:27017')
DB_NAME = os.environ.get('DB_NAME', 'partner_management')

client = AsyncIOMotorClient(MONGO_URL)
db = client[DB_NAME]

# Uploaded lead documents and remark attachments
UPLOAD_DIR = Path(os.environ.get('UPLOAD_DIR', ROOT_DIR / 'uploads'))

CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*').split(',')

SESSION_TTL_DAYS = int(os.environ.get('SESSION_TTL_DAYS', '7'))


# ==================== HELPERS ====================

def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode()).hexdigest()


PHONE_PATTERN = re.compile(r"[0-9]{10}")


def now_iso() -> str:
    """Current UTC time as ISO string"""
    return datetime.now(timezone.utc).isoformat()


def validate_phone(phone) -> bool:
    """
    Lead and partner phones are exactly 10 ASCII digits.
    No normalisation: "+91..." or spaced numbers are rejected.
    """
    if phone is None:
        return False
    return PHONE_PATTERN.fullmatch(str(phone)) is not None

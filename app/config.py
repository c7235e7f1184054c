from functools import lru_cache
from pydantic import BaseModel
import os
from dotenv import load_dotenv
load_dotenv()  # carga el archivo .env de la raíz

def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")

class Settings(BaseModel):
    app_name: str = os.getenv("APP_NAME", "PetConnect Scheduling")
    env: str = os.getenv("APP_ENV", "dev")
    mongodb_uri: str = os.getenv("MONGODB_URI", "mongodb://localhost:27017/?replicaSet=rs0")
    db_name: str = os.getenv("DB_NAME", "petconnect")
    frontend_base_url: str = os.getenv("FRONTEND_BASE_URL", "http://localhost:5173")

    # Motor de disponibilidad
    strict_category_lookup: bool = _flag("STRICT_CATEGORY_LOOKUP")
    calendar_max_days: int = int(os.getenv("CALENDAR_MAX_DAYS", "366"))
    next_available_lookahead_days: int = int(os.getenv("NEXT_AVAILABLE_LOOKAHEAD_DAYS", "30"))
    booking_rate_limit: str = os.getenv("BOOKING_RATE_LIMIT", "15/minute")

@lru_cache
def get_settings() -> Settings:
    return Settings()

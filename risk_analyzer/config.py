import os
from dotenv import load_dotenv
load_dotenv()


SERVICE_NAME = "Customer Risk Analyzer"
SERVICE_VERSION = "1.0.0"

API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", 8000))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]


# Table view page size and summary ranking length
TABLE_PAGE_SIZE = int(os.getenv("TABLE_PAGE_SIZE", 100))
TOP_COUNTRIES_LIMIT = int(os.getenv("TOP_COUNTRIES_LIMIT", 5))


WORKER_TIMEOUT_SECONDS = float(os.getenv("WORKER_TIMEOUT_SECONDS", 60))
# Naive recursion: n=35 runs a few seconds in CPython, n=45 several minutes
FIBONACCI_INPUT = int(os.getenv("FIBONACCI_INPUT", 30))
FIBONACCI_MAX_INPUT = int(os.getenv("FIBONACCI_MAX_INPUT", 35))

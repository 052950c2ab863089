"""
Runtime settings, read once from the environment (and an optional .env file).
"""
import os
from dotenv import load_dotenv

load_dotenv()

USER_AGENT = os.getenv(
    "PAHE_USER_AGENT",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/138.0.0.0 Safari/537.36 Edg/138.0.0.0",
)
HTTP_TIMEOUT = int(os.getenv("PAHE_HTTP_TIMEOUT", "15"))

# Kwik pages occasionally ship without the packed form; each attempt re-fetches.
KWIK_MAX_ATTEMPTS = int(os.getenv("KWIK_MAX_ATTEMPTS", "5"))

# DDoS-Guard cookie sent to animepahe; an empty value is accepted by the site.
DDG_COOKIE = os.getenv("PAHE_DDG_COOKIE", "")

LOG_LEVEL = os.getenv("PAHE_LOG_LEVEL", "WARNING")
EXPORT_FILENAME = os.getenv("PAHE_EXPORT_FILENAME", "links.txt")

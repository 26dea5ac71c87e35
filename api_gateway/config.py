# api_gateway/config.py

import os

PORT = int(os.getenv("PORT", "8080"))

USER_SERVICE_URL = os.getenv("USER_SERVICE_URL", "http://localhost:3001")
ORDER_SERVICE_URL = os.getenv("ORDER_SERVICE_URL", "http://localhost:3002")
UPSTREAM_TIMEOUT_SECONDS = float(os.getenv("UPSTREAM_TIMEOUT_SECONDS", "10"))

JWT_SECRET = os.getenv("JWT_SECRET", "your-secret-key")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

# Admission filter: requests per client address per window
RATE_LIMIT_MAX = int(os.getenv("RATE_LIMIT_MAX", "100"))
RATE_LIMIT_WINDOW_SECONDS = float(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))

CORS_ALLOW_ORIGINS = [o.strip() for o in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",") if o.strip()]

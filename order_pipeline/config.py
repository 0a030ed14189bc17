"""
Configuration for the Orders pipeline service.

All settings are read from environment variables at import time.
"""
import os

# Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./orders.db")

# JWT settings (must match the token issuer)
SECRET_KEY = os.getenv("SECRET_KEY", "09d25e094faa6ca2556c818166b7a9563b93f7099f6f0f4caa6cf63b88e8d3e7")
ALGORITHM = os.getenv("ALGORITHM", "HS256")

# Payment gateway; an empty URL selects the simulated gateway
PAYMENT_GATEWAY_URL = os.getenv("PAYMENT_GATEWAY_URL", "")
PAYMENT_GATEWAY_TIMEOUT = float(os.getenv("PAYMENT_GATEWAY_TIMEOUT", "5.0"))  # seconds
GATEWAY_SUCCESS_RATE = float(os.getenv("GATEWAY_SUCCESS_RATE", "0.8"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

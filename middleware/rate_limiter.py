"""
Rate limiting middleware for FastAPI using slowapi.
Protects the credential endpoints against brute force attempts.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

# Initialize the shared limiter (will be attached to app.state in main.py)
limiter = Limiter(key_func=get_remote_address)

# Rate limit configurations for different endpoints
RATE_LIMIT_LOGIN = "5/minute"  # 5 login attempts per minute per IP
RATE_LIMIT_SIGNUP = "3/hour"  # 3 signups per hour per IP

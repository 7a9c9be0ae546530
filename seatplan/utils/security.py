"""
Security utilities and authentication
"""

import secrets
import time
from collections import defaultdict
from typing import Optional

from fastapi import HTTPException, Depends, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

# Simple in-memory rate limiter
rate_limiter = defaultdict(list)

security = HTTPBearer()

def verify_admin_token(request: Request, credentials: HTTPAuthorizationCredentials = Depends(security)) -> str:
    """Verify the admin Bearer token; returns the admin label for audit fields"""
    settings = request.app.state.context.settings
    if not secrets.compare_digest(credentials.credentials, settings.ADMIN_TOKEN):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin token"
        )
    return settings.ADMIN_NAME

def rate_limit_check(client_ip: str, limit: int, window_seconds: Optional[float] = 60) -> bool:
    """Simple rate limiting by IP address"""
    current_time = time.time()
    window_start = current_time - window_seconds

    # Clean old requests and forget clients with nothing left in the window
    for ip in list(rate_limiter):
        recent = [req_time for req_time in rate_limiter[ip] if req_time > window_start]
        if recent:
            rate_limiter[ip] = recent
        else:
            del rate_limiter[ip]

    if len(rate_limiter[client_ip]) >= limit:
        return False

    rate_limiter[client_ip].append(current_time)
    return True

def get_client_ip(request: Request) -> str:
    """Extract client IP from request"""
    # Check for forwarded IP first (for reverse proxy setups)
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    return request.client.host if request.client else "unknown"

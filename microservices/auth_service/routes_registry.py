"""
Auth Service Routes Registry
Defines all API routes exposed by the identity provider
"""

SERVICE_ROUTES = [
    {
        "path": "/health",
        "methods": ["GET"],
        "auth_required": False,
        "description": "Service health check"
    },
    {
        "path": "/api/login",
        "methods": ["POST"],
        "auth_required": False,
        "description": "Username/password login"
    },
    {
        "path": "/api/v1/auth/me",
        "methods": ["GET"],
        "auth_required": True,
        "description": "Identity of the token owner"
    },
    {
        "path": "/api/v1/auth/verify",
        "methods": ["POST"],
        "auth_required": False,
        "description": "Verify JWT token"
    },
    {
        "path": "/api/v1/auth/users/{user_id}",
        "methods": ["GET"],
        "auth_required": True,
        "description": "Internal identity lookup"
    },
]

SERVICE_METADATA = {
    "service_name": "auth_service",
    "version": "1.0.0",
    "tags": ["v1", "auth", "identity"],
    "capabilities": [
        "password_login",
        "jwt_issuing",
        "token_verification",
        "identity_lookup",
    ]
}

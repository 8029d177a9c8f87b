"""
Auth Service

Identity provider for shiptrack.
Handles username/password login, JWT session tokens and identity
resolution for other services.

Port: 8201
"""

__version__ = "1.0.0"
__service_name__ = "auth_service"
__service_port__ = 8201

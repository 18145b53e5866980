from notehub.domains.identity.entities import ANONYMOUS, Anonymous, Authenticated, Claims, Identity, User
from notehub.domains.identity.schemas import AuthResponse, UserCreate, UserLogin, UserResponse

__all__ = [
    "ANONYMOUS", "Anonymous", "Authenticated", "Claims", "Identity", "User",
    "AuthResponse", "UserCreate", "UserLogin", "UserResponse"
]

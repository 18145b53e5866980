from notehub.api.http.auth import router as auth_router
from notehub.api.http.messages import router as messages_router
from notehub.api.http.notebooks import router as notebooks_router
from notehub.api.http.pages import router as pages_router
from notehub.api.http.qna import router as qna_router

__all__ = [
    "auth_router",
    "pages_router",
    "messages_router",
    "notebooks_router",
    "qna_router"
]

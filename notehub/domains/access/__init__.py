from notehub.domains.access.context import RequestAuthorizer, RequestContext
from notehub.domains.access.entities import (
    AccessDecision, AccessStore, Lookup, LookupStatus, NotebookAccessFacts,
    Permission, ResourceKind, ResourceRef, Role, Visibility
)
from notehub.domains.access.resolver import ResourcePathResolver, Route, ROUTES
from notehub.domains.access.services import AuthorizationEngine, decide

__all__ = [
    "RequestAuthorizer", "RequestContext",
    "AccessDecision", "AccessStore", "Lookup", "LookupStatus", "NotebookAccessFacts",
    "Permission", "ResourceKind", "ResourceRef", "Role", "Visibility",
    "ResourcePathResolver", "Route", "ROUTES",
    "AuthorizationEngine", "decide"
]

"""
Core dependencies for route protection
"""

from typing import Optional

from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from supabase import Client

from gatherly.database.supabase_client import get_supabase
from gatherly.modules.auth.service import IdentityResolver

# auto_error=False: a missing header must reach the resolver and become
# Unauthenticated (401) rather than FastAPI's 403.
security = HTTPBearer(auto_error=False)


def get_identity_resolver(supabase: Client = Depends(get_supabase)) -> IdentityResolver:
    return IdentityResolver(supabase)


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    resolver: IdentityResolver = Depends(get_identity_resolver)
) -> str:
    """Resolve the acting principal from the bearer token"""
    token = credentials.credentials if credentials else None
    return resolver.resolve(token)


def get_optional_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    resolver: IdentityResolver = Depends(get_identity_resolver)
) -> Optional[str]:
    """Principal for public endpoints that show more to signed-in members.

    No header means an anonymous viewer; a header that fails to resolve is
    still rejected.
    """
    if credentials is None:
        return None
    return resolver.resolve(credentials.credentials)

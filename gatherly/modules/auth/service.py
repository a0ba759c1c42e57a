import hashlib
import logging
import time
from typing import Dict, Optional, Tuple

import httpx
from supabase import Client

from gatherly.config import settings
from gatherly.core.errors import Conflict, CredentialExpired, Unauthenticated, Unavailable
from gatherly.database.store_errors import store_call
from gatherly.modules.auth.schemas import LoginRequest, RegisterRequest, RegisterResponse, TokenResponse

logger = logging.getLogger(__name__)

# token hash -> (principal id, expiry). Only the verifier result is cached; the
# principal's existence is re-checked on every resolve.
_PRINCIPAL_CACHE: Dict[str, Tuple[str, float]] = {}


def clear_principal_cache() -> None:
    _PRINCIPAL_CACHE.clear()


def _evict_expired(now: float) -> None:
    for key, (_, expiry) in list(_PRINCIPAL_CACHE.items()):
        if expiry <= now:
            _PRINCIPAL_CACHE.pop(key, None)


class IdentityResolver:
    """Turns an opaque bearer credential into the acting principal's user id."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def resolve(self, credential: Optional[str]) -> str:
        if credential is None or not credential.strip():
            raise Unauthenticated("No token passed", "resolve")
        token = credential.strip()
        if token.count(".") != 2:
            raise Unauthenticated("Malformed token", "resolve")

        principal_id = self._verify(token)

        with store_call("resolve"):
            result = self.supabase.table("user_profiles")\
                .select("id")\
                .eq("id", principal_id)\
                .limit(1)\
                .execute()
        if not result.data:
            logger.info("Rejected credential for missing principal %s", principal_id)
            raise Unauthenticated("User not authenticated", "resolve")
        return principal_id

    def _verify(self, token: str) -> str:
        cache_key = hashlib.sha256(token.encode()).hexdigest()
        now = time.monotonic()
        cached = _PRINCIPAL_CACHE.get(cache_key)
        if cached is not None:
            principal_id, expiry = cached
            if now < expiry:
                return principal_id
            _PRINCIPAL_CACHE.pop(cache_key, None)

        try:
            user_response = self.supabase.auth.get_user(jwt=token)
        except (httpx.HTTPError, ConnectionError) as e:
            logger.error("Credential verifier unreachable: %s", e)
            raise Unavailable("Credential verifier unreachable", "resolve") from e
        except Exception as e:
            error_msg = str(e).lower()
            if "expired" in error_msg:
                raise CredentialExpired("Token has expired", "resolve") from e
            raise Unauthenticated("Invalid token", "resolve") from e

        if not user_response or not user_response.user:
            raise Unauthenticated("Invalid token", "resolve")

        principal_id = str(user_response.user.id)
        if len(_PRINCIPAL_CACHE) >= settings.auth_cache_max_size:
            _evict_expired(now)
        if len(_PRINCIPAL_CACHE) < settings.auth_cache_max_size:
            _PRINCIPAL_CACHE[cache_key] = (principal_id, now + settings.auth_cache_ttl_sec)
        return principal_id


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Register with Supabase Auth and create the public profile"""
        with store_call("register"):
            existing = self.supabase.table("user_profiles")\
                .select("id")\
                .eq("username", register_data.username)\
                .limit(1)\
                .execute()
        if existing.data:
            raise Conflict("Username or Email already registered", "register")

        try:
            auth_response = self.supabase.auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {"data": {"username": register_data.username}}
            })
        except (httpx.HTTPError, ConnectionError) as e:
            raise Unavailable("Credential verifier unreachable", "register") from e
        except Exception as e:
            error_message = str(e).lower()
            if "already registered" in error_message or "already exists" in error_message:
                raise Conflict("Username or Email already registered", "register") from e
            raise

        if not auth_response.user:
            raise Conflict("Username or Email already registered", "register")

        user_id = str(auth_response.user.id)
        with store_call("register"):
            self.supabase.table("user_profiles").insert({
                "id": user_id,
                "username": register_data.username,
                "email": register_data.email,
                "online": False
            }).execute()

        logger.info("Registered user %s (%s)", user_id, register_data.username)
        return RegisterResponse(
            user_id=user_id,
            username=register_data.username,
            message="User created successfully"
        )

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate and mark the user online.

        Every credential failure is reported identically so the response never
        tells whether the email is registered.
        """
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })
        except (httpx.HTTPError, ConnectionError) as e:
            raise Unavailable("Credential verifier unreachable", "login") from e
        except Exception as e:
            raise Unauthenticated("Invalid email or password", "login") from e

        if not auth_response.user or not auth_response.session:
            raise Unauthenticated("Invalid email or password", "login")

        user_id = str(auth_response.user.id)
        self._set_online(user_id, True, "login")
        return TokenResponse(
            access_token=auth_response.session.access_token,
            token_type="bearer",
            user_id=user_id
        )

    def logout(self, user_id: str) -> None:
        self._set_online(user_id, False, "logout")
        try:
            self.supabase.auth.sign_out()
        except Exception as e:
            # Tokens are stateless JWTs; they lapse on their own expiry.
            logger.warning("Sign out failed for %s: %s", user_id, e)

    def _set_online(self, user_id: str, online: bool, source: str) -> None:
        with store_call(source):
            result = self.supabase.table("user_profiles")\
                .update({"online": online})\
                .eq("id", user_id)\
                .execute()
        if not result.data:
            raise Unauthenticated("User not authenticated", source)

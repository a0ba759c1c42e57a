from fastapi import APIRouter, Depends
from gatherly.database.supabase_client import get_supabase
from gatherly.modules.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, RegisterResponse
from gatherly.modules.auth.service import AuthService
from gatherly.modules.users.schemas import UserResponse
from gatherly.modules.users.service import UserService
from gatherly.core.dependencies import get_current_user_id
from supabase import Client

router = APIRouter(prefix="/auth", tags=["auth"])


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    current_user_id: str = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and mark the user offline"""
    service.logout(current_user_id)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user_id: str = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase)
):
    """Get the authenticated user's own profile"""
    return UserService(supabase).get_own_profile(current_user_id)

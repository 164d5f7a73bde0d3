"""
Authentication API Routes
"""
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session

from accounts_api.core.database import get_db, transaction
from accounts_api.core.exceptions import ConflictError
from accounts_api.core.rate_limit import client_address
from accounts_api.core.security import create_user_token, get_current_user
from accounts_api.schemas import AuthResponse, LoginRequest, MessageResponse, SignupRequest, UserResponse
from accounts_api.services.audit_service import AuditService, AuditAction
from accounts_api.services.user_service import UserService

router = APIRouter(prefix="/auth", tags=["Authentication"])


def get_client_info(request: Request) -> tuple:
    """Client address and a truncated user agent for audit entries"""
    return client_address(request), request.headers.get("User-Agent", "")[:500]


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    signup_data: SignupRequest,
    request: Request,
    db: Session = Depends(get_db)
):
    """Register a new user"""
    user_service = UserService(db)
    audit_service = AuditService(db)
    ip_address, user_agent = get_client_info(request)

    try:
        with transaction(db):
            user = user_service.create(signup_data)
            audit_service.log(
                action=AuditAction.USER_CREATED,
                resource_type="User",
                resource_id=user.id,
                description=f"New user '{user.email}' signed up",
                user_id=user.id,
                email=user.email,
                ip_address=ip_address,
                user_agent=user_agent
            )
    except ConflictError:
        with transaction(db):
            audit_service.log(
                action=AuditAction.USER_CREATED,
                resource_type="User",
                description=f"Signup failed: email '{signup_data.email}' already exists",
                email=signup_data.email,
                ip_address=ip_address,
                user_agent=user_agent,
                status="failure",
                error_message="Email already registered"
            )
        raise

    return {
        "success": True,
        "message": "User registered successfully",
        "token": create_user_token(user),
        "user": user
    }


router.add_api_route(
    "/register",
    signup,
    methods=["POST"],
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED
)


@router.post("/login", response_model=AuthResponse)
async def login(
    login_data: LoginRequest,
    request: Request,
    db: Session = Depends(get_db)
):
    """Login and get access token"""
    user_service = UserService(db)
    audit_service = AuditService(db)
    ip_address, user_agent = get_client_info(request)

    user = user_service.authenticate(login_data.email, login_data.password)

    if not user:
        with transaction(db):
            audit_service.log(
                action=AuditAction.LOGIN_FAILED,
                resource_type="User",
                description=f"Failed login attempt for '{login_data.email}'",
                email=login_data.email,
                ip_address=ip_address,
                user_agent=user_agent,
                status="failure",
                error_message="Invalid credentials"
            )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials"
        )

    if not user.is_active:
        with transaction(db):
            audit_service.log(
                action=AuditAction.LOGIN_FAILED,
                resource_type="User",
                resource_id=user.id,
                description=f"Login attempt for disabled account '{user.email}'",
                user_id=user.id,
                email=user.email,
                ip_address=ip_address,
                user_agent=user_agent,
                status="failure",
                error_message="Account is disabled"
            )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is disabled"
        )

    with transaction(db):
        user_service.record_login(user)
        audit_service.log(
            action=AuditAction.LOGIN_SUCCESS,
            resource_type="User",
            resource_id=user.id,
            description=f"User '{user.email}' logged in successfully",
            user_id=user.id,
            email=user.email,
            ip_address=ip_address,
            user_agent=user_agent
        )

    return {
        "success": True,
        "message": "Login successful",
        "token": create_user_token(user),
        "user": user
    }


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Logout; tokens are stateless so this only records the event"""
    ip_address, user_agent = get_client_info(request)
    with transaction(db):
        AuditService(db).log(
            action=AuditAction.LOGOUT,
            resource_type="User",
            resource_id=current_user.id,
            description=f"User '{current_user.email}' logged out",
            user_id=current_user.id,
            email=current_user.email,
            ip_address=ip_address,
            user_agent=user_agent
        )
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user = Depends(get_current_user)
):
    """Get current user info"""
    return current_user

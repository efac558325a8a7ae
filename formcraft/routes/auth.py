from fastapi import APIRouter, Depends, status

from formcraft.config.database import Collections
from formcraft.database.db_operations import DBOperations, get_db
from formcraft.models.user import UserCreate, UserLogin, UserResponse, AuthResponse
from formcraft.utils.auth import hash_password, verify_password, create_access_token, get_current_user
from formcraft.utils.errors import ConflictError, InvalidCredentials

router = APIRouter(prefix="/auth", tags=["Auth"])


def _auth_response(user: dict) -> AuthResponse:
    return AuthResponse(
        user=UserResponse(**user),
        token=create_access_token(user["_id"]),
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, db: DBOperations = Depends(get_db)):
    """Create an account and return a token for it"""
    if await db.find_one(Collections.USERS, {"email": user_data.email}):
        raise ConflictError("User already exists")

    user_doc = {
        "name": user_data.name,
        "email": user_data.email,
        "password": hash_password(user_data.password),
        "role": "user",
    }
    if user_data.company:
        user_doc["company"] = user_data.company.model_dump()

    user = await db.create(Collections.USERS, user_doc)
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
async def login(credentials: UserLogin, db: DBOperations = Depends(get_db)):
    """
    Authenticate a user by email and password and return a token
    """
    user = await db.find_one(Collections.USERS, {"email": credentials.email})
    if not user or not verify_password(credentials.password, user.get("password", "")):
        raise InvalidCredentials()
    return _auth_response(user)


@router.get("/me", response_model=UserResponse)
async def me(user_id: str = Depends(get_current_user), db: DBOperations = Depends(get_db)):
    """Get the authenticated user"""
    return await db.find_by_id(Collections.USERS, user_id)

from fastapi import APIRouter, Depends

from auth import get_current_user, hash_password, issue_token, verify_password
from database import Document, DocumentStore, validate
from dependencies import get_settings, get_store
from errors import ApiError, AuthenticationError
from responses import success
from schemas import LoginRequest, RegisterRequest
from settings import Settings

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", status_code=201)
def register(
    payload: RegisterRequest,
    store: DocumentStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    try:
        fields = payload.model_dump()
        # password rules apply to the plain text, before hashing
        validate("user", fields)
        fields["password"] = hash_password(fields["password"], settings.BCRYPT_ROUNDS)
        user = store.create("user", fields)
        return {"status": "success", "token": issue_token(user["id"], settings), "data": {"user": user}}
    except Exception as e:
        raise ApiError("Failed to register user", e, keep_status=True)


@router.post("/login")
def login(
    payload: LoginRequest,
    store: DocumentStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    try:
        user = store.find_one("user", include_hidden=True, email=payload.email.strip().lower())
        if user is None or not verify_password(payload.password, user.get("password", "")):
            raise AuthenticationError("Incorrect email or password")
        user.pop("password", None)
        return {"status": "success", "token": issue_token(user["id"], settings), "data": {"user": user}}
    except Exception as e:
        raise ApiError("Failed to log in", e, keep_status=True)


@router.get("/me")
def me(user: Document = Depends(get_current_user)):
    return success(user=user)

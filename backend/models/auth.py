"""Pydantic schemas for login, logout and API-key initialisation."""
from typing import Optional
from pydantic import BaseModel


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class UserProfile(BaseModel):
    id: Optional[int] = None
    email: Optional[str] = None
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[str] = None


class LoginResponse(BaseModel):
    success: bool = True
    user: UserProfile


class InitRequest(BaseModel):
    api_key: str = ""


class SuccessResponse(BaseModel):
    success: bool = True

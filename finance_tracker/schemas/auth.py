from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class RegisterRequest(CamelModel):
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class GoogleLoginRequest(BaseModel):
    token: Optional[str] = None


class UserRecord(BaseModel):
    """Stored user row, password hash included. Never returned to clients."""
    id: int
    first_name: str
    last_name: str
    email: str
    password: str

    model_config = ConfigDict(from_attributes=True)


class ProfileRecord(BaseModel):
    phone: Optional[str] = None
    company: Optional[str] = None
    bio: Optional[str] = None
    profile_photo: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class UserOut(CamelModel):
    id: int
    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    email: str


class ProfileOut(UserOut):
    phone: Optional[str] = None
    company: Optional[str] = None
    bio: Optional[str] = None
    profile_photo: Optional[str] = Field(None, alias="profilePhoto")


class ProfileUpdate(CamelModel):
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    phone: Optional[str] = None
    company: Optional[str] = None
    bio: Optional[str] = None
    profile_photo: Optional[str] = Field(None, alias="profilePhoto")


class ProfileEnvelope(BaseModel):
    user: ProfileOut


class TokenResponse(BaseModel):
    token: str
    user: UserOut


class RefreshResponse(BaseModel):
    token: str


class MessageResponse(BaseModel):
    message: str

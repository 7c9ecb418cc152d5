from pydantic import BaseModel, EmailStr, Field


class RegisterSchema(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6)


class LoginSchema(BaseModel):
    email: EmailStr
    password: str


class UserOut(BaseModel):
    id: int
    name: str
    email: EmailStr
    isAdmin: bool = False


class TokenOut(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_in_minutes: int
    user: UserOut

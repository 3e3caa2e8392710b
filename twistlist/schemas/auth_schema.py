from pydantic import BaseModel, Field

from twistlist.constants import MIN_PASSWORD_LENGTH

# Plain str instead of EmailStr to support .local domains in development
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+$"

class SignUpRequest(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)

class SignInRequest(BaseModel):
    email_or_username: str = Field(min_length=1)
    password: str = Field(min_length=1)

class TokenResponse(BaseModel):
    access_token: str

class MessageResponse(BaseModel):
    message: str

from pydantic import BaseModel, EmailStr, Field, model_validator

from app.models.user import Role


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    college_id: str = Field(min_length=1, max_length=30)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    role: Role = Role.STUDENT
    room_number: str | None = None
    hostel_block: str | None = None
    department: str | None = None
    year: int | None = Field(default=None, ge=1, le=10)
    phone_number: str | None = None


class EmailRequest(BaseModel):
    email: EmailStr


class VerifyEmailRequest(BaseModel):
    email: EmailStr
    otp: str = Field(min_length=1, max_length=6)


# login with either email or college id
class LoginRequest(BaseModel):
    email: EmailStr | None = None
    college_id: str | None = None
    password: str = Field(min_length=1)

    @model_validator(mode="after")
    def _one_identifier(self):
        if not self.email and not self.college_id:
            raise ValueError("Please provide email or college ID")
        return self


class UpdateProfileRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    phone_number: str | None = None
    room_number: str | None = None


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=128)

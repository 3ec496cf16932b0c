"""Authentication use cases."""

from .complete_sign_in import (
    CompleteSignInRequest,
    CompleteSignInResponse,
    CompleteSignInUseCase,
)
from .get_current_user import (
    GetCurrentUserRequest,
    GetCurrentUserResponse,
    GetCurrentUserUseCase,
)
from .initiate_sign_in import (
    InitiateSignInRequest,
    InitiateSignInResponse,
    InitiateSignInUseCase,
)
from .sign_out import SignOutRequest, SignOutUseCase

__all__ = [
    "CompleteSignInRequest",
    "CompleteSignInResponse",
    "CompleteSignInUseCase",
    "GetCurrentUserRequest",
    "GetCurrentUserResponse",
    "GetCurrentUserUseCase",
    "InitiateSignInRequest",
    "InitiateSignInResponse",
    "InitiateSignInUseCase",
    "SignOutRequest",
    "SignOutUseCase",
]

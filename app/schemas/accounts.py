"""Request/response schemas for account and session endpoints."""

from pydantic import BaseModel, Field


class Permissions(BaseModel):
    """Write/read permission flags carried in requests, tokens and profiles."""

    escritura: bool = Field(default=False, description="Write permission")
    lectura: bool = Field(default=False, description="Read permission")


class AccountRequest(BaseModel):
    """Body for registration and full account update."""

    nombre: str = Field(..., min_length=1, max_length=255, description="Unique account name")
    email: str = Field(..., min_length=3, max_length=255, description="Unique email address")
    password: str = Field(..., description="Plain-text password (hashed before storage)")
    roles: list[str] = Field(default_factory=list, description="Role names, e.g. Admin, Usuario")
    permisos: Permissions = Field(default_factory=Permissions)


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: str = Field(..., min_length=1, max_length=255, description="Email address")
    password: str = Field(..., description="Password")


class TokenResponse(BaseModel):
    """Session token returned by register and login."""

    token: str = Field(..., description="Signed session token")
    message: str


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    message: str
    error: str | None = Field(default=None, description="Underlying error detail, when exposed")


class RoleClaim(BaseModel):
    nombre: str


class TokenClaims(BaseModel):
    """Claims embedded in a session token (identity, roles, permissions, validity window)."""

    sub: str
    userId: int
    roles: list[RoleClaim] = Field(default_factory=list)
    permisos: Permissions = Field(default_factory=Permissions)
    iat: int
    exp: int

    @property
    def role_names(self) -> list[str]:
        return [role.nombre for role in self.roles]


class AccountListItem(BaseModel):
    """One (account, role) row of the admin listing."""

    id: int
    nombre: str
    email: str
    rol: str
    escritura: bool
    lectura: bool


class AccountProfile(BaseModel):
    """The caller's own account as seen by a plain user."""

    id: int
    nombre: str
    email: str
    roles: list[str]
    permisos: Permissions

# utils/tokenJWT.py
from jose import jwt, JWTError
from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel

from config import settings

ROLES = ("superadmin", "admin", "manager", "staff")
BACK_OFFICE_ROLES = ("superadmin", "admin", "manager")

# Users sign in with an external identity provider; we only verify its tokens
bearer_scheme = HTTPBearer()


class TokenUser(BaseModel):
    id: str
    role: str
    tenant_id: Optional[int] = None

    @property
    def is_superadmin(self) -> bool:
        return self.role == "superadmin"


# Generate a new JWT access token (development and tests)
def create_access_token(data: dict, expires_delta: timedelta = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


# Read the caller's identity from the bearer token claims
def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme)) -> TokenUser:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(credentials.credentials, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise credentials_exception

    user_id = payload.get("sub")
    role = payload.get("role")
    if user_id is None or role not in ROLES:
        raise credentials_exception
    tenant_id = payload.get("tenant_id")
    return TokenUser(id=str(user_id), role=role, tenant_id=int(tenant_id) if tenant_id is not None else None)


# Dependency factory for role and tenant based access control.
# A tenant_id in the path must match the token's tenant unless superadmin.
def role_required(*allowed_roles):
    def _checker(request: Request, current_user: TokenUser = Depends(get_current_user)) -> TokenUser:
        if allowed_roles and current_user.role not in allowed_roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
        path_tenant = request.path_params.get("tenant_id")
        if path_tenant is not None and not current_user.is_superadmin:
            if current_user.tenant_id is None or str(current_user.tenant_id) != str(path_tenant):
                raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
        return current_user
    return _checker


staff_required = role_required(*ROLES)
back_office_required = role_required(*BACK_OFFICE_ROLES)
superadmin_required = role_required("superadmin")

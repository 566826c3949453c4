# auth.py
"""Bearer-token authentication shared by the routers."""
from fastapi import Depends, HTTPException, Request
from jose import JWTError, jwt

from config import JWT_ALGORITHM, JWT_SECRET
from services.lease_service import Principal


# Token Auth Dependency
def verify_token(request: Request) -> dict:
    auth = request.headers.get("Authorization")
    if not auth or not auth.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing token")
    token = auth.split(" ")[1]
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
        return payload
    except JWTError:
        raise HTTPException(status_code=403, detail="Invalid token")


def get_current_principal(token: dict = Depends(verify_token)) -> Principal:
    """Resolve the caller from the token payload (id, role, email, name)."""
    user_id = token.get("id")
    email = token.get("email")
    if user_id is None or not email:
        raise HTTPException(status_code=403, detail="Invalid token")
    try:
        user_id = int(user_id)
    except (TypeError, ValueError):
        raise HTTPException(status_code=403, detail="Invalid token")
    return Principal(id=user_id, role=token.get("role", ""), email=email, name=token.get("name"))

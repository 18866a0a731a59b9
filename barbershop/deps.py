# barbershop/deps.py

from fastapi import HTTPException


def require_role(user: dict, *roles: str):
    if user["role"] not in roles:
        raise HTTPException(status_code=403, detail="Forbidden")

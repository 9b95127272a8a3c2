from fastapi import HTTPException, Request
from groupledger.core.security import decode_token, get_bearer_token
from groupledger.db.session import get_db  # noqa: F401


async def get_current_user(request: Request) -> int:
    """
    Identity of the caller as an integer user id.

    Users live in the identity provider; the ledger only needs the id
    carried in the token's ``sub`` claim.
    """
    token = get_bearer_token(request)
    payload = decode_token(token)

    user_id = payload.get("sub")
    if user_id is None:
        raise HTTPException(status_code=401, detail="Invalid authentication credentials")

    try:
        return int(user_id)
    except (TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Could not validate credentials")

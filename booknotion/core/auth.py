from typing import Optional

from fastapi import Depends, Header, Request

from booknotion.core.security import CredentialStore, Identity, extract_token_from_header


def get_credential_store(request: Request) -> CredentialStore:
    return request.app.state.credentials


async def get_current_identity(
    authorization: Optional[str] = Header(None),
    credentials: CredentialStore = Depends(get_credential_store),
) -> Identity:
    """Зависимость для получения текущего пользователя из Bearer токена"""
    token = extract_token_from_header(authorization)
    return credentials.verify_token(token)

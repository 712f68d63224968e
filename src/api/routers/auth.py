import asyncio
import os
import logging
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Response
from google_auth_oauthlib.flow import Flow

from api.dependencies import get_google_auth_store, get_user_id
from storage.google_auth import GOOGLE_TASKS_SCOPES, GOOGLE_TOKEN_URI, GoogleAuthStore

router = APIRouter()
logger = logging.getLogger(__name__)

# Google Auth Configuration
GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")
GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET")
GOOGLE_REDIRECT_URI = os.getenv(
    "GOOGLE_REDIRECT_URI", "http://localhost:8000/auth/google/callback"
)
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000").rstrip("/")


def _redirect(location: str) -> Response:
    return Response(status_code=307, headers={"Location": location})


def _build_flow() -> Flow:
    return Flow.from_client_config(
        {
            "web": {
                "client_id": GOOGLE_CLIENT_ID,
                "client_secret": GOOGLE_CLIENT_SECRET,
                "auth_uri": "https://accounts.google.com/o/oauth2/auth",
                "token_uri": GOOGLE_TOKEN_URI,
            }
        },
        scopes=GOOGLE_TASKS_SCOPES,
        redirect_uri=GOOGLE_REDIRECT_URI,
        # login and callback build separate flows, so no PKCE verifier can be shared
        autogenerate_code_verifier=False,
    )


def _exchange_code(flow: Flow, code: str) -> Optional[str]:
    """Fetch tokens for `code` and return the account email if Google shares it."""
    flow.fetch_token(code=code)
    try:
        session = flow.authorized_session()
        return session.get("https://www.googleapis.com/userinfo/v2/me").json().get("email")
    except Exception as e:
        logger.error(f"Failed to fetch user email: {e}")
        return None


@router.get("/auth/google/login")
async def google_login():
    """Initiates the OAuth2 flow - redirects to Google."""
    if not GOOGLE_CLIENT_ID or not GOOGLE_CLIENT_SECRET:
        raise HTTPException(status_code=500, detail="Google credentials not configured")

    authorization_url, _ = _build_flow().authorization_url(
        access_type="offline", include_granted_scopes="true", prompt="consent"
    )
    return _redirect(authorization_url)


@router.get("/auth/google/callback")
async def google_callback(
    code: Optional[str] = None,
    error: Optional[str] = None,
    user_id: str = Depends(get_user_id),
    google_auth_store: Optional[GoogleAuthStore] = Depends(get_google_auth_store),
):
    """Handles the OAuth2 callback and stores the delegated credential."""
    if error or not code:
        logger.error(f"OAuth error: {error or 'missing code'}")
        return _redirect(f"{FRONTEND_URL}/?error={quote(error or 'missing_code')}")

    if google_auth_store is None:
        return _redirect(f"{FRONTEND_URL}/?error=auth_store_unavailable")

    try:
        flow = _build_flow()
        email = await asyncio.to_thread(_exchange_code, flow, code)
        await google_auth_store.save_credentials(user_id, flow.credentials, email)
    except Exception as e:
        logger.error(f"OAuth callback failed: {e}")
        return _redirect(f"{FRONTEND_URL}/?error={quote(str(e))}")

    return _redirect(f"{FRONTEND_URL}/?success=true")


@router.get("/auth/google/status")
async def google_status(
    user_id: str = Depends(get_user_id),
    google_auth_store: Optional[GoogleAuthStore] = Depends(get_google_auth_store),
) -> dict:
    """Check if user is connected."""
    if not google_auth_store:
        return {"connected": False, "error": "Auth store not initialized"}

    try:
        email = await google_auth_store.get_email(user_id)
        creds = await google_auth_store.get_credentials(user_id)
        return {"connected": creds is not None, "email": email}
    except Exception as e:
        logger.error(f"Error checking status: {e}")
        return {"connected": False, "error": str(e)}


@router.post("/auth/google/disconnect")
async def google_disconnect(
    user_id: str = Depends(get_user_id),
    google_auth_store: Optional[GoogleAuthStore] = Depends(get_google_auth_store),
) -> dict:
    """Delete stored credentials; later task creation fails as not authenticated."""
    if not google_auth_store:
        raise HTTPException(status_code=500, detail="Auth store not initialized")

    await google_auth_store.delete_credentials(user_id)
    return {"status": "disconnected"}

"""
Scribd user accounts and sessions.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .exceptions import ProtocolError
from .request import SessionContext
from .response import Response

logger = logging.getLogger(__name__)


@dataclass
class User:
    """A Scribd user, logged in or acting as a phantom."""

    name: str = ""
    user_name: str = ""
    user_id: int = 0
    session_key: Optional[str] = None
    phantom_id: Optional[str] = None
    is_logged_in: bool = False

    @classmethod
    def phantom(cls, phantom_id: str) -> "User":
        """A user identified by your own id instead of a Scribd session."""
        return cls(phantom_id=phantom_id)

    @classmethod
    def from_response(cls, response: Response) -> "User":
        """
        Build a logged-in user from a user.login / user.signup answer.

        Raises:
            ProtocolError: If a required node is missing
        """
        try:
            user_id = int(response.require_text("user_id").strip())
        except ValueError as e:
            raise ProtocolError(f"invalid user_id: {e}", cause=e)

        return cls(
            name=response.require_text("name").strip(),
            user_name=response.require_text("username").strip(),
            user_id=user_id,
            session_key=response.require_text("session_key").strip(),
            is_logged_in=True,
        )

    def session_context(self) -> Optional[SessionContext]:
        if not (self.session_key or self.phantom_id):
            return None
        return SessionContext(session_key=self.session_key, phantom_id=self.phantom_id)


def _login(client, username: str, password: str) -> Optional[User]:
    result = client.execute(
        "user.login",
        {"username": username, "password": password},
        session=SessionContext(),
    )
    if result.response is None or not result.response.is_usable:
        return None

    try:
        return User.from_response(result.response)
    except ProtocolError as e:
        client.errors.report(e)
        return None


def validate_credentials(client, username: str, password: str) -> Optional[User]:
    """Check credentials without changing the client's current user."""
    return _login(client, username, password)


def login(client, username: str, password: str) -> bool:
    """
    Log in and make the user the client's current user.

    Returns:
        True on success; on failure the current user is marked logged out
    """
    user = _login(client, username, password)
    if user is None:
        client.user.is_logged_in = False
        logger.info("Login failed for %s", username)
        return False

    client.user = user
    logger.info("Logged in as %s", user.user_name)
    return True


def logout(client):
    """Forget the current user."""
    client.user = User()


def signup(client, username: str, password: str, email: str, name: str) -> Optional[User]:
    """
    Create a Scribd account.

    The call is made without the current user's session, and the current
    user is left unchanged.

    Returns:
        The new, logged-in user, or None on failure
    """
    result = client.execute(
        "user.signup",
        {"username": username, "password": password, "email": email, "name": name},
        session=SessionContext(),
    )
    if result.response is None or not result.response.is_usable:
        return None

    try:
        return User.from_response(result.response)
    except ProtocolError as e:
        client.errors.report(e)
        return None


def get_auto_signin_url(client, next_url: str) -> str:
    """URL that signs the current user in and redirects to ``next_url``."""
    response = client.call("user.getAutoSigninUrl", {"next_url": next_url})
    if response is None or not response.is_usable:
        return next_url
    return response.findtext("url", next_url)

"""Live bid store config. Credentials from settings (FIREBASE_DATABASE_URL, FIREBASE_AUTH_TOKEN) or LiveStoreConfig args."""
from app.config import settings


class LiveStoreConfig:
    """Realtime database base URL, auth token and the key path holding auction rooms."""

    __slots__ = ("database_url", "auth_token", "auctions_path", "timeout")

    def __init__(
        self,
        *,
        database_url: str | None = None,
        auth_token: str | None = None,
        auctions_path: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.database_url = (database_url or settings.firebase_database_url).strip().rstrip("/")
        self.auth_token = (auth_token or settings.firebase_auth_token).strip()
        self.auctions_path = (auctions_path or settings.live_auctions_path).strip("/")
        self.timeout = timeout if timeout is not None else settings.external_call_timeout_seconds

    def is_configured(self) -> bool:
        return bool(self.database_url)

    def room_url(self, room_id: str) -> str:
        """REST url for auctions/{room_id} (Firebase appends .json to any key path)."""
        return f"{self.database_url}/{self.auctions_path}/{room_id}.json"

    def params(self) -> dict[str, str]:
        return {"auth": self.auth_token} if self.auth_token else {}

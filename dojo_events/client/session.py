from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class UserSession:
    """The acting user, handed to the backend client and every controller."""

    user_id: str
    token: Optional[str] = None

    def auth_headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

"""The signed-in identity the page was rendered for."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Identity:
    username: Optional[str] = None
    require_mfa: bool = False
    has_security_keys: bool = False

    @property
    def is_logged_in(self) -> bool:
        return bool(self.username)

"""In-memory user records shared by the demo API handlers."""

import threading
from dataclasses import asdict, dataclass
from typing import Iterable, Optional

SEED_USERS = (
    ("Alice", "alice@example.com"),
    ("Bob", "bob@example.com"),
)


@dataclass(frozen=True)
class User:
    """A single stored user."""

    id: int
    name: str
    email: str

    def to_dict(self) -> dict:
        return asdict(self)


class UserStore:
    """Lock-guarded user list; every worker thread goes through the lock."""

    def __init__(self, seed: Optional[Iterable[tuple[str, str]]] = SEED_USERS) -> None:
        self._lock = threading.Lock()
        self._users: list[User] = []
        self._next_id = 1
        for name, email in seed or ():
            self.create(name, email)

    def create(self, name: str, email: str) -> User:
        """Store a new user and return it with its assigned id."""
        with self._lock:
            user = User(self._next_id, name, email)
            self._next_id += 1
            self._users.append(user)
            return user

    def list_users(self) -> list[User]:
        """Return a snapshot of the stored users."""
        with self._lock:
            return list(self._users)

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)

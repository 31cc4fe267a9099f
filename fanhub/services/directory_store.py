from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from fanhub.core.security import hash_password, verify_password


class DirectoryStore:
    """In-memory state behind the reference backend."""

    def __init__(self):
        self.users: Dict[str, Dict[str, Any]] = {}
        self.celebrities: Dict[str, Dict[str, Any]] = {}
        self.follows: Dict[str, Dict[str, Any]] = {}

    def reset(self) -> None:
        self.users.clear()
        self.celebrities.clear()
        self.follows.clear()

    # User operations
    def create_user(self, username: str, password: str) -> Dict[str, Any]:
        """Register a user; usernames are unique case-insensitively."""
        if self.get_user_by_username(username) is not None:
            raise ValueError(f"Username {username} is already taken")
        user = {
            "id": str(uuid4()),
            "username": username,
            "password_hash": hash_password(password),
        }
        self.users[user["id"]] = user
        return user

    def get_user_by_username(self, username: str) -> Optional[Dict[str, Any]]:
        wanted = username.casefold()
        for user in self.users.values():
            if user["username"].casefold() == wanted:
                return user
        return None

    def authenticate(self, username: str, password: str) -> Optional[Dict[str, Any]]:
        user = self.get_user_by_username(username)
        if user is None or not verify_password(password, user["password_hash"]):
            return None
        return user

    # Celebrity operations
    def create_celebrity(self, data: Dict[str, Any], created_by: Optional[str] = None) -> Dict[str, Any]:
        """Create a celebrity record from camelCase request data."""
        now = datetime.now(timezone.utc).isoformat()
        category = data.get("category") or []
        if isinstance(category, str):
            category = [c.strip() for c in category.split(",") if c.strip()]
        topics = data.get("sampleSetlistOrKeynoteTopics")
        if isinstance(topics, str):
            topics = [t.strip() for t in topics.split(",") if t.strip()]

        celebrity = {
            **{k: v for k, v in data.items() if v is not None},
            "id": str(uuid4()),
            "category": category,
            "sampleSetlistOrKeynoteTopics": topics,
            "userId": created_by,
            "createdAt": now,
            "updatedAt": now,
        }
        self.celebrities[celebrity["id"]] = celebrity
        return celebrity

    def list_celebrities(self) -> List[Dict[str, Any]]:
        return sorted(self.celebrities.values(), key=lambda c: c["createdAt"])

    def get_celebrity(self, celebrity_id: str) -> Optional[Dict[str, Any]]:
        return self.celebrities.get(celebrity_id)

    def find_celebrity_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        wanted = name.strip().casefold()
        for celebrity in self.celebrities.values():
            if celebrity["name"].casefold() == wanted:
                return celebrity
        return None

    def suggest_names(self, query: str, limit: int = 5) -> List[str]:
        """Names containing the query, prefix matches first."""
        wanted = query.strip().casefold()
        if not wanted:
            return []
        names = [c["name"] for c in self.list_celebrities() if wanted in c["name"].casefold()]
        names.sort(key=lambda n: not n.casefold().startswith(wanted))
        return names[:limit]

    # Follow operations
    def follow(self, user_id: str, celebrity_id: str) -> Dict[str, Any]:
        """Create a follow relationship; following twice returns the existing one."""
        if celebrity_id not in self.celebrities:
            raise KeyError(celebrity_id)
        key = f"{user_id}:{celebrity_id}"
        if key not in self.follows:
            self.follows[key] = {
                "userId": user_id,
                "celebrityId": celebrity_id,
                "createdAt": datetime.now(timezone.utc).isoformat(),
            }
        return self.follows[key]

    def unfollow(self, user_id: str, celebrity_id: str) -> None:
        self.follows.pop(f"{user_id}:{celebrity_id}", None)

    def is_following(self, user_id: str, celebrity_id: str) -> bool:
        return f"{user_id}:{celebrity_id}" in self.follows

    def get_followed(self, user_id: str) -> List[Dict[str, Any]]:
        """Get the celebrity records a user follows, oldest follow first."""
        relations = sorted(
            (f for f in self.follows.values() if f["userId"] == user_id),
            key=lambda f: f["createdAt"],
        )
        return [
            self.celebrities[f["celebrityId"]]
            for f in relations
            if f["celebrityId"] in self.celebrities
        ]

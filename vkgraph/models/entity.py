"""
Entity domain models - persons and groups as fetched from VK
"""
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Optional


class Sex(IntEnum):
    """VK sex code as returned by users.get"""
    UNKNOWN = 0
    FEMALE = 1
    MALE = 2

    @classmethod
    def parse(cls, value: Any) -> 'Sex':
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            return cls.UNKNOWN


@dataclass(frozen=True)
class PersonEntity:
    """
    Person (VK user) snapshot - storage-agnostic representation

    Storage: Neo4j (User node, unique on id)

    Snapshots are immutable; a later fetch of the same identity replaces
    the stored one only when the person is the root of a persist call.
    """
    id: int
    first_name: str = ""
    last_name: str = ""
    screen_name: str = ""
    sex: Sex = Sex.UNKNOWN
    city: str = ""  # Home city title, empty when hidden or unset

    # 'deleted' / 'banned' for deactivated accounts
    deactivated: Optional[str] = None

    @property
    def name(self) -> str:
        """Display name: first and last name combined"""
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_deactivated(self) -> bool:
        return self.deactivated is not None

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> 'PersonEntity':
        """
        Build from one users.get item.

        Example payload:
            {"id": 1, "first_name": "Pavel", "last_name": "Durov",
             "screen_name": "durov", "sex": 2, "city": {"id": 2, "title": "..."}}
        """
        city = payload.get('city')
        if not isinstance(city, dict):
            city = {}
        return cls(
            id=int(payload['id']),
            first_name=payload.get('first_name') or "",
            last_name=payload.get('last_name') or "",
            screen_name=payload.get('screen_name') or "",
            sex=Sex.parse(payload.get('sex')),
            city=city.get('title') or "",
            deactivated=payload.get('deactivated'),
        )

    def to_properties(self) -> Dict[str, Any]:
        """Node properties for the User label (id excluded, it is the merge key)"""
        return {
            'name': self.name,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'screen_name': self.screen_name,
            'sex': int(self.sex),
            'city': self.city,
        }


@dataclass(frozen=True)
class GroupEntity:
    """
    Group (VK community) snapshot

    Storage: Neo4j (Group node, unique on id)

    Groups are leaves: the API exposes who a user subscribes to, not
    a group's own members, so groups are never expanded.
    """
    id: int
    name: str = ""
    screen_name: str = ""

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> 'GroupEntity':
        """Build from one groups.getById item"""
        return cls(
            id=int(payload['id']),
            name=payload.get('name') or "",
            screen_name=payload.get('screen_name') or "",
        )

    def to_properties(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'screen_name': self.screen_name,
        }

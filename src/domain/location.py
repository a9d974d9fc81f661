"""
Location-based user counting.

Counts users by state and/or zip code from raw query parameters, e.g.
?state=TX,ca or ?zip=78701,78702. Users matching either list are counted
once.
"""

from collections.abc import Mapping

from .exceptions import LocationQueryError
from .ports import UserRepository


def _split(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


class UsersByLocation:
    """Counts users located in the requested states or zip codes."""

    def __init__(self, params: Mapping[str, str], repository: UserRepository) -> None:
        self.states = [state.upper() for state in _split(params.get("state"))]
        self.zips = _split(params.get("zip"))
        self._repository = repository

    def count(self) -> int:
        """
        Count matching users.

        Raises:
            LocationQueryError: If neither state nor zip was supplied
        """
        if not self.states and not self.zips:
            raise LocationQueryError("Must provide a state or zip parameter")
        return self._repository.count_by_location(self.states, self.zips)

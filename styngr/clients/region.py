from typing import Protocol


class RegionResolver(Protocol):
    async def country_for(self, user_id: int) -> str:
        """Return the ISO 3166 country code used to bill this user."""
        ...


class StaticRegionResolver:
    """Bills every user in one country, with optional per-user overrides."""

    def __init__(self, default_country: str, overrides: dict[int, str] | None = None):
        self.default_country = default_country
        self._overrides = dict(overrides or {})

    async def country_for(self, user_id: int) -> str:
        return self._overrides.get(user_id, self.default_country)

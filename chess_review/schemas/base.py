"""Base Pydantic schemas with CamelCase conversion."""

from pydantic import BaseModel, ConfigDict
from humps import camelize


def to_camel(string: str) -> str:
    """Convert snake_case to camelCase."""
    return camelize(string)


class CamelModel(BaseModel):
    """
    Base model that converts snake_case fields to camelCase in JSON output.

    Usage:
        class MyView(CamelModel):
            player_name: str   # JSON: playerName
            win_rate: int      # JSON: winRate
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

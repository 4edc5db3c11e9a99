from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # App settings
    app_name: str = "Fantasy Football Draft Assistant"
    debug: bool = True

    # Reasoning service (OpenAI-compatible chat completions)
    openai_api_key: Optional[str] = None
    reasoning_model: str = "gpt-4-turbo-preview"
    reasoning_temperature: float = 0.3
    reasoning_base_url: Optional[str] = None
    reasoning_timeout_seconds: float = 45.0

    # Player snapshot produced by the data-fetch subsystem
    player_data_path: str = "./data-sources/processed/combined/unified-player-data.json"

    # Default league settings
    default_team_count: int = 12
    default_scoring_format: str = "ppr"

    # Roster settings
    default_roster_spots: dict = {
        "QB": 1, "RB": 2, "WR": 3, "TE": 1, "FLEX": 1, "K": 1, "DEF": 1, "BENCH": 6
    }

    # Tiering
    tier_gap_threshold: float = 15.0   # ADP gap that opens a new tier
    tier_max_players: int = 50         # Top N players per position considered

    # Tool defaults
    available_players_limit: int = 50
    sleeper_limit: int = 10
    upcoming_picks_lookahead: int = 3

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()

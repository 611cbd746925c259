"""Runtime configuration for the crypt planner."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from crypt_planner.catalog import ITEM_TABLE


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(env_prefix="CRYPT_PLANNER_", env_file=".env", extra="ignore")

    app_name: str = "crypt-planner"
    log_level: str = "INFO"
    reward_target: str = Field(default="blood_rune", description="Reward target name, e.g. blood_rune.")
    reward_plan: list[str] = Field(
        default_factory=lambda: [item.id for item in ITEM_TABLE],
        description="Monsters the player plans on defeating.",
    )
    smaller_plan_tolerance: int = Field(
        default=0,
        ge=0,
        description="Score window within which a plan with fewer kills is preferred. 0 disables it.",
    )
    planner_iterations_max: int = Field(default=20, gt=0)
    highlight_npcs: bool = True
    highlight_optimal: bool = True
    snapshot_path: str | None = Field(default=None, description="JSON file with the exported crypt state.")


settings = Settings()

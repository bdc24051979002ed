from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Parser behaviour (defaults for ParseConfig.from_settings)
    parser_try_unknown_dex: bool = True  # Infer swaps for unregistered programs from transfers
    parser_aggregate_trades: bool = False  # Collapse route legs into ParseResult.aggregate_trade
    parser_throw_error: bool = False  # Re-raise instead of returning state=False
    parser_program_ids: str = ""  # Comma-separated allow-list of program ids
    parser_ignore_program_ids: str = ""  # Comma-separated deny-list of program ids

    # Routers whose token accounts sign on behalf of the user in swap orientation
    parser_router_ids: str = "6m2CDdhRgxpH4WjvdzxAYbGxwdGUz5MziiL5jek2kBma"  # OKX DEX router

    # Logging
    log_level: str = "INFO"
    log_json: bool = False
    log_dir: str = "logs"


def split_ids(value: str) -> list[str]:
    """Split a comma-separated id list, dropping blanks."""
    return [item.strip() for item in value.split(",") if item.strip()]


settings = Settings()

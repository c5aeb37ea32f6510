from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from mneme.application.deck_iterator import CardOrder, DeckOrder
from mneme.application.parser import ParserOptions
from mneme.domain import constants as c


def config_files() -> list[Path]:
    return [
        Path.home() / ".config/mneme/config.toml",
        Path.home() / ".mneme.toml",
    ]


class AppConfig(BaseSettings):
    """
    Configuration model for mneme.
    Supports loading from:
    1. Environment variables (MNEME_*)
    2. Config file (~/.config/mneme/config.toml or ~/.mneme.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="MNEME_",
        extra="ignore",
    )

    # Paths
    vault_root: Path | None = None
    postponement_file: Path | None = None
    verbose: int = 1

    # Parser
    single_line_card_separator: str = c.DEFAULT_SINGLE_LINE_SEPARATOR
    single_line_reversed_card_separator: str = c.DEFAULT_SINGLE_LINE_REVERSED_SEPARATOR
    multiline_card_separator: str = c.DEFAULT_MULTILINE_SEPARATOR
    multiline_reversed_card_separator: str = c.DEFAULT_MULTILINE_REVERSED_SEPARATOR
    multiline_card_end_marker: str = ""
    cloze_patterns: list[str] = Field(default_factory=lambda: list(c.DEFAULT_CLOZE_PATTERNS))
    heading_as_basic: bool = False
    debug_parser: bool = False

    # Decks
    flashcard_tags: list[str] = Field(default_factory=lambda: list(c.DEFAULT_FLASHCARD_TAGS))

    # Scheduling
    base_ease: int = c.DEFAULT_BASE_EASE
    minimum_ease: int = c.DEFAULT_MINIMUM_EASE
    lapses_interval_change: float = c.DEFAULT_LAPSES_INTERVAL_CHANGE
    easy_bonus: float = c.DEFAULT_EASY_BONUS
    maximum_interval: int = c.DEFAULT_MAXIMUM_INTERVAL
    initial_interval: int = c.DEFAULT_INITIAL_INTERVAL
    new_card_interval_hard: int = c.DEFAULT_NEW_CARD_INTERVAL_HARD
    new_card_interval_good: int = c.DEFAULT_NEW_CARD_INTERVAL_GOOD
    new_card_interval_easy: int = c.DEFAULT_NEW_CARD_INTERVAL_EASY
    max_overdue_credit_factor: float = c.DEFAULT_MAX_OVERDUE_CREDIT_FACTOR
    load_balance_window: int = c.DEFAULT_LOAD_BALANCE_WINDOW

    # Review
    bury_sibling_cards: bool = False
    card_order: CardOrder = CardOrder.DUE_FIRST_SEQUENTIAL
    deck_order: DeckOrder = DeckOrder.PREV_DECK_COMPLETE_SEQUENTIAL
    card_comment_on_same_line: bool = False
    random_seed: int | None = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # Find the first existing file
        toml_file = None
        for f in config_files():
            if f.exists():
                toml_file = f
                break

        # Earlier sources win: CLI overrides, then env, then the config file.
        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @field_validator("vault_root", "postponement_file", mode="before")
    @classmethod
    def resolve_path(cls, v: Any) -> Path | None:
        if v is None:
            return None
        return Path(v).expanduser().resolve()

    def parser_options(self) -> ParserOptions:
        return ParserOptions(
            single_line_card_separator=self.single_line_card_separator,
            single_line_reversed_card_separator=self.single_line_reversed_card_separator,
            multiline_card_separator=self.multiline_card_separator,
            multiline_reversed_card_separator=self.multiline_reversed_card_separator,
            multiline_card_end_marker=self.multiline_card_end_marker,
            cloze_patterns=tuple(self.cloze_patterns),
            heading_as_basic=self.heading_as_basic,
            debug=self.debug_parser,
        )


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/mneme/config.toml (if exists)
    3. Environment variables (MNEME_*)
    4. cli_overrides (passed from Typer)
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    config = AppConfig(**overrides)

    if config.vault_root is None:
        config.vault_root = Path.cwd()

    if config.postponement_file is None:
        base = config.vault_root if not config.vault_root.is_file() else config.vault_root.parent
        config.postponement_file = base / ".mneme" / "postponed.json"

    return config

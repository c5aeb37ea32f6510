"""
Review Session Factory
Centralizes the wiring of stores, scheduler and sequencer from configuration.
"""

import random

from mneme.application.card_builder import CardBuilder
from mneme.application.config import AppConfig
from mneme.application.deck_iterator import DeckTreeIterator
from mneme.application.postponement import QuestionPostponementList
from mneme.application.scheduler import OsrScheduler, SchedulingParameters
from mneme.application.sequencer import FlashcardReviewSequencer
from mneme.application.vault_service import VaultLoadResult, VaultService
from mneme.domain.interfaces import Clock, NoteStore, PostponementStore
from mneme.domain.models import ReviewMode
from mneme.infrastructure.adapters.note_store import FileNoteStore
from mneme.infrastructure.adapters.postponement_store import JsonPostponementStore


def get_note_store(config: AppConfig) -> NoteStore:
    """Returns the note store for the configured vault."""
    return FileNoteStore(
        root=config.vault_root,
        initial_interval=config.initial_interval,
        base_ease=config.base_ease,
    )


def get_postponement_store(config: AppConfig) -> PostponementStore:
    return JsonPostponementStore(config.postponement_file)


def get_card_builder(config: AppConfig) -> CardBuilder:
    return CardBuilder(
        options=config.parser_options(),
        flashcard_tags=config.flashcard_tags,
        comment_on_same_line=config.card_comment_on_same_line,
    )


async def load_vault(config: AppConfig, store: NoteStore, clock: Clock) -> VaultLoadResult:
    service = VaultService(store, get_card_builder(config))
    return await service.load(clock.today())


async def create_review_sequencer(
    config: AppConfig,
    store: NoteStore,
    postponement_store: PostponementStore,
    clock: Clock,
    review_mode: ReviewMode = ReviewMode.REVIEW,
) -> FlashcardReviewSequencer:
    """
    Load the vault and return a sequencer positioned on the first card.

    Raises:
        ScheduleComputationError: If the scheduling settings are invalid.
    """
    # Fail on bad settings before touching the vault
    scheduler = OsrScheduler(SchedulingParameters.from_config(config))

    today = clock.today()
    loaded = await load_vault(config, store, clock)
    postponement_list = await QuestionPostponementList.load(postponement_store, today)

    iterator = DeckTreeIterator(
        card_order=config.card_order,
        deck_order=config.deck_order,
        rng=random.Random(config.random_seed),
    )
    sequencer = FlashcardReviewSequencer(
        review_mode=review_mode,
        iterator=iterator,
        scheduler=scheduler,
        postponement_list=postponement_list,
        histogram=loaded.histogram,
        store=store,
        today=today,
        bury_sibling_cards=config.bury_sibling_cards,
    )
    sequencer.set_deck_tree(loaded.deck_tree, sequencer.build_remaining_deck_tree(loaded.deck_tree))
    return sequencer

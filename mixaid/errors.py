"""Errors raised by the card store, index maintainer and ingestion."""


class MixAidError(Exception):
    """Base class for card store errors."""


class ValidationError(MixAidError):
    """A write was rejected: missing id, or a value failed its field type."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class NotFoundError(MixAidError):
    """No card exists under the requested id."""

    def __init__(self, card_id: str) -> None:
        super().__init__(f'Card ID "{card_id}" does not exist')
        self.card_id = card_id


class StorageError(MixAidError):
    """The Redis transaction failed; treat the whole batch as not applied."""

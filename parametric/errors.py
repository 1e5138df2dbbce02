"""Error taxonomy shared by the imaging and order workflows."""


class MarketplaceError(Exception):
    """Base class for all domain errors raised by this service."""


class DecodeError(MarketplaceError):
    """The source image could not be read."""


class ClassifierError(MarketplaceError):
    """The segmentation classifier failed or returned an unusable shape."""


class EmptyCartError(MarketplaceError):
    """Order creation was attempted with no cart lines."""

    def __init__(self, message: str = "Cart is empty"):
        super().__init__(message)


class PersistenceStepError(MarketplaceError):
    """A single write in the order sequence failed."""

    def __init__(self, step: str, message: str = ""):
        self.step = step
        super().__init__(message or f"Failed to write {step}")


class NotificationError(MarketplaceError):
    """Downstream designer notification failed."""


class NotFoundError(MarketplaceError):
    """A referenced row does not exist."""


class UpstreamError(MarketplaceError):
    """A third-party HTTP API failed or returned something unusable."""

"""Contains exceptions raised when managing GitHub installations."""


class SubscriptionAccessError(Exception):
    """Raised when a GitHub user may not manage the subscription of an installation."""

    def __init__(self, installation_id: int, message: str) -> None:
        """Initializes the exception with the installation the user tried to manage."""
        super().__init__(message)
        self.installation_id = installation_id

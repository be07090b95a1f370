class IamError(Exception):
    """Base exception for inter-agent messaging errors."""

    pass


class MissingRequiredField(IamError):
    """Raised when a tool call omits a required argument."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"'{field}' parameter is required")


class UnknownRecipient(IamError):
    """Raised when an address token resolves to no known agent.

    Carries the aliases currently known to the caller, in registration order,
    so the caller can retry with a valid target.
    """

    def __init__(self, recipient: str, known: list[str]):
        self.recipient = recipient
        self.known = list(known)
        super().__init__(f"Unknown recipient '{recipient}'")

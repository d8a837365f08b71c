"""Error taxonomy raised by the core to its immediate caller."""


class BloodBankError(Exception):
    """Base class for every error the core raises."""


class NotFoundError(BloodBankError):
    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} {key} not found")


class DuplicateIdError(BloodBankError):
    def __init__(self, collection: str, record_id: str):
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"Record {record_id} already exists in {collection}")


class DuplicateEmailError(BloodBankError):
    def __init__(self, email: str):
        self.email = email
        super().__init__("Email already registered")


class InsufficientStockError(BloodBankError):
    def __init__(self, blood_group: str, requested: int, available: int):
        self.blood_group = blood_group
        self.requested = requested
        self.available = available
        super().__init__(
            f"Not enough {blood_group} blood in stock. Available: {available} units"
        )


class InvalidTransitionError(BloodBankError):
    def __init__(self, current: str, attempted: str):
        self.current = current
        self.attempted = attempted
        super().__init__(f"Cannot {attempted} a request that is {current}")


class ValidationError(BloodBankError):
    """A required field is missing or malformed."""

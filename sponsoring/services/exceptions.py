# sponsoring/services/exceptions.py


class InvalidTransitionError(ValueError):
    """A status write was refused by its transition gate."""

    def __init__(self, entity: str, from_status: str, to_status: str, message: str = None):
        self.entity = entity
        self.from_status = from_status
        self.to_status = to_status
        self.message = message or f"Cannot move {entity} from '{from_status}' to '{to_status}'"
        super().__init__(self.message)

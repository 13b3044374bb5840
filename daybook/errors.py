class DaybookError(Exception):
    pass


class RecordValidationError(DaybookError):
    """Raised by the store when a record or category fails validation.

    `details` is the dict produced by the validators in daybook.functional.
    """

    def __init__(self, details: dict):
        super().__init__(details.get("message", "invalid record"))
        self.details = details

    @property
    def code(self) -> str:
        return self.details.get("error", "invalid")


class CategoryInUseError(DaybookError):
    def __init__(self, cat_id: str, count: int):
        super().__init__(f"Category {cat_id} is still used by {count} record(s)")
        self.cat_id = cat_id
        self.count = count


class UnsupportedSchemaError(DaybookError):
    def __init__(self, found: int, supported: int):
        super().__init__(
            f"Stored data has schema version {found}, this build reads up to {supported}"
        )
        self.found = found
        self.supported = supported

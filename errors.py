from typing import NamedTuple, Optional


class BackupError(Exception):
    """Base class for failures reported by export and import."""


class StoreAccessError(BackupError):
    """A fetch, create, update, delete or commit against the store failed."""

    def __init__(self, operation: str, kind: Optional[str], detail: str) -> None:
        self.operation = operation
        self.kind = kind
        self.detail = detail
        target = f" {kind}" if kind else ""
        super().__init__(f"{operation}{target} failed: {detail}")


class DecodingError(BackupError):
    """The backup document is not valid JSON or does not match the schema."""

    def __init__(self, detail: str, location: Optional[str] = None) -> None:
        self.detail = detail
        self.location = location
        if location:
            super().__init__(f"{location}: {detail}")
        else:
            super().__init__(detail)


class ResourceAccessError(BackupError):
    """The backup file could not be opened, created or moved into place."""

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"{path}: {detail}")


class UnresolvedReference(NamedTuple):
    """A relation in the document that names an id missing from the mapping."""

    kind: str
    record_id: str
    field: str
    target_id: str

    def __str__(self) -> str:
        return (
            f"{self.kind} {self.record_id}: {self.field} references unknown id "
            f"{self.target_id}"
        )

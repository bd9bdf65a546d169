from .document_store import DocumentStore, LoadedDocument  # noqa: F401
from .validator import SchemaValidator, ValidationResult  # noqa: F401

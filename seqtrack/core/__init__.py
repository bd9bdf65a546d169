from .exceptions import (  # noqa: F401
    InvalidArgumentError,
    IOFailure,
    NotFoundError,
    ParseError,
    SeqTrackError,
)
from .view_adapter import denormalize, is_patient_centric, normalize  # noqa: F401

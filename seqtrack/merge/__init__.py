from .merge_engine import MergeEngine  # noqa: F401
from .processed_data_mixin import ADDED, DUPLICATE, SAMPLE_MISSING  # noqa: F401

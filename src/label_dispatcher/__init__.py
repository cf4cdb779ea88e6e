"""Label Dispatcher - print SVG or PNG files on a Brother QL label printer."""

__version__ = "1.0.0"

from .config import DispatchConfig, load_config
from .dispatcher import dispatch, is_vector_image

__all__ = [
    "DispatchConfig",
    "dispatch",
    "is_vector_image",
    "load_config",
]

from .config import get_config, config_manager, ConfigurationManager, ConfigError, ConfigFileNotFoundError, InvalidYamlError
from .exceptions import (
    PdfRenderServiceError,
    ConfigurationError,
    InvalidRequestError,
    AuthenticationError,
    ComponentError,
    RendererError,
    DecorationError,
    InvalidSelectorError,
)
from .logger import setup_logging, get_logger
from .models import (
    Position,
    ImageSource,
    TextWatermark,
    ImageWatermark,
    ImageStamp,
    UrlSource,
    MarkupSource,
    RenderRequest,
    RenderResult,
)

# RenderingManager lives in core.manager and is imported from there directly,
# since it depends on the components package, which itself imports from core.

__all__ = [
    # Config
    "get_config",
    "config_manager",
    "ConfigurationManager",
    "ConfigError",
    "ConfigFileNotFoundError",
    "InvalidYamlError",
    # Logger
    "setup_logging",
    "get_logger",
    # Exceptions
    "PdfRenderServiceError",
    "ConfigurationError",
    "InvalidRequestError",
    "AuthenticationError",
    "ComponentError",
    "RendererError",
    "DecorationError",
    "InvalidSelectorError",
    # Models
    "Position",
    "ImageSource",
    "TextWatermark",
    "ImageWatermark",
    "ImageStamp",
    "UrlSource",
    "MarkupSource",
    "RenderRequest",
    "RenderResult",
]

"""
Custom exception classes for the PDF Render Service.
"""


class PdfRenderServiceError(Exception):
    """
    Base class for all custom exceptions in the PDF Render Service.

    Attributes:
        message (str): A human-readable description of the error.
    """
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.__class__.__name__}: {self.message}"


# --- Configuration Related Exceptions ---
class ConfigurationError(PdfRenderServiceError):
    """
    Raised for errors related to application configuration, such as a setting
    holding a value the service cannot work with.
    """
    def __init__(self, message: str):
        super().__init__(message)


# --- Request Related Exceptions ---
class InvalidRequestError(PdfRenderServiceError):
    """
    Raised when a render request cannot be processed as submitted
    (e.g., neither a URL nor HTML content was provided).

    This is the only client error the rendering pipeline recognizes itself;
    the API layer maps it to HTTP 400 with `message` as a plain-text body.
    """
    def __init__(self, message: str):
        super().__init__(message)


class AuthenticationError(PdfRenderServiceError):
    """Raised when the API key header is missing or does not match the configured key."""
    def __init__(self, message: str):
        super().__init__(message)


# --- Component Related Exceptions ---
class ComponentError(PdfRenderServiceError):
    """
    A general base class for errors originating from within a specific component
    (e.g., Renderer, Decorator).

    Attributes:
        component_name (str): Name of the component where the error originated.
    """
    def __init__(self, component_name: str, message: str):
        full_message = f"Error in component '{component_name}': {message}"
        super().__init__(full_message)
        self.component_name = component_name


class RendererError(ComponentError):
    """
    Raised for failures of the rendering engine: browser launch, navigation,
    script evaluation, style injection, network-idle timeout or PDF export.
    """
    def __init__(self, message: str):
        super().__init__(component_name="Renderer", message=message)


class DecorationError(ComponentError):
    """Raised when overlay instructions cannot be turned into styles (e.g., an unknown watermark type)."""
    def __init__(self, message: str):
        super().__init__(component_name="Decorator", message=message)


class InvalidSelectorError(RendererError):
    """Raised when the engine rejects a hide selector as syntactically invalid."""
    def __init__(self, selector: str):
        self.selector = selector
        super().__init__(f"'{selector}' is not a valid CSS selector.")

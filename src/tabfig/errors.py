"""Exception hierarchy shared by every stage of the table pipeline."""

from __future__ import annotations

from typing import Any, Optional


class TabfigError(Exception):
    """Base class for all tabfig errors."""


class InputValidationError(TabfigError, ValueError):
    """The input is not tabular, is empty, or an option has an invalid value."""


class ConfigurationError(TabfigError):
    """Styling, column or header configuration is inconsistent."""


class FilesystemError(TabfigError, OSError):
    """The output directory cannot be created or written to."""


class ExternalToolError(TabfigError):
    """The compiler or cropper is missing, timed out or exited nonzero."""

    def __init__(self, message: str, *, tool: Optional[str] = None, returncode: Optional[int] = None,
                 log_detail: str = "") -> None:
        super().__init__(message)
        self.tool = tool
        self.returncode = returncode
        self.log_detail = log_detail


class CropError(ExternalToolError):
    """Cropping failed after a successful compile; ``result`` keeps the full artifact."""

    def __init__(self, message: str, *, result: Any = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.result = result

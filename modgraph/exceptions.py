"""
Custom exception hierarchy for modgraph.

This module defines structured exception types used across modgraph.
All exceptions inherit from :class:`ModGraphError` and support optional
structured metadata via the ``details`` attribute to improve diagnostics
and logging.
"""

from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Optional


class ModGraphError(Exception):
    """Base exception for all modgraph errors.

    All modgraph-specific exceptions should inherit from this class.
    It supports structured metadata via ``details`` for richer error
    reporting and debugging.

    Args:
        message: Human-readable error message.
        details: Optional structured metadata describing the error.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.message: str = message
        # Internally normalize to a mutable dict
        self.details: MutableMapping[str, Any] = dict(details) if details else {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        formatted = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({formatted})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, details={dict(self.details)!r})"
        )


def _add_if(details: MutableMapping[str, Any], key: str, value: Any) -> None:
    """Add a key to ``details`` only if ``value`` is not ``None``."""
    if value is not None:
        details[key] = value


def _truncate(text: str, max_length: int = 200) -> str:
    """Truncate long text for safe logging or error reporting."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


class ParseError(ModGraphError):
    """Raised when a module reference typed by the user cannot be parsed.

    Args:
        message: Error description.
        raw_input: The text that failed to parse.
    """

    __slots__ = ("raw_input",)

    def __init__(
        self,
        message: str,
        *,
        raw_input: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "input", raw_input)

        super().__init__(message, details)

        self.raw_input = raw_input


class ConfigError(ModGraphError):
    """Raised when a configuration file is missing, malformed or invalid.

    Args:
        message: Error description.
        config_path: Path of the configuration file involved.
        option: Name of the offending option, if any.
    """

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", config_path)
        _add_if(details, "option", option)

        super().__init__(message, details)

        self.config_path = config_path
        self.option = option


class NetworkError(ModGraphError):
    """Raised when HTTP or network operations fail.

    This is the transient failure kind: timeouts, connection errors and
    unexpected status codes all end up here.

    Args:
        message: Error description.
        url: URL being accessed.
        status_code: HTTP status code, if available.
        response_body: Raw response body, truncated for safety.
    """

    __slots__ = ("url", "status_code", "response_body")

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "url", url)
        _add_if(details, "status_code", status_code)

        if response_body is not None:
            details["response"] = _truncate(response_body)

        super().__init__(message, details)

        self.url = url
        self.status_code = status_code
        self.response_body = response_body


class ProxyError(NetworkError):
    """Raised for failures reported by the module proxy itself.

    Args:
        message: Error description.
        module_path: Module path involved.
        **kwargs: Additional arguments forwarded to ``NetworkError``.
    """

    __slots__ = ("module_path",)

    def __init__(
        self,
        message: str,
        *,
        module_path: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)

        self.module_path = module_path
        if module_path is not None:
            self.details["module"] = module_path


class ModuleNotFound(ModGraphError):
    """Raised when the registry has no record of a module at any version.

    Args:
        module_path: The module path that could not be found.
    """

    __slots__ = ("module_path",)

    code = "MODULE_NOT_FOUND"

    def __init__(self, module_path: str) -> None:
        super().__init__(
            f'Module "{module_path}" not found. Please check the module path.',
            {"module": module_path},
        )
        self.module_path = module_path


class ReleaseNotFound(ModGraphError):
    """Raised when a module exists but the requested version does not.

    Args:
        module_path: The module path.
        release: The version that could not be found.
    """

    __slots__ = ("module_path", "release")

    code = "RELEASE_NOT_FOUND"

    def __init__(self, module_path: str, release: str) -> None:
        super().__init__(
            f'Release "{release}" not found for module "{module_path}".',
            {"module": module_path, "release": release},
        )
        self.module_path = module_path
        self.release = release


class ResolutionError(ModGraphError):
    """Raised when the root module cannot be resolved for a transient reason.

    Not-found conditions on the root surface as :class:`ModuleNotFound` or
    :class:`ReleaseNotFound` instead; this type wraps everything else.

    Args:
        message: Error description.
        module_path: Root module path.
        release: Root version being resolved.
        original_error: Underlying exception.
    """

    __slots__ = ("module_path", "release", "original_error")

    def __init__(
        self,
        message: str,
        *,
        module_path: Optional[str] = None,
        release: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "module", module_path)
        _add_if(details, "release", release)
        _add_if(
            details,
            "original_error",
            str(original_error) if original_error else None,
        )

        super().__init__(message, details)

        self.module_path = module_path
        self.release = release
        self.original_error = original_error

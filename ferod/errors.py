from __future__ import annotations

from typing import Any


class FerodError(Exception):
    """Base error for framework failures."""


class DescriptorError(FerodError):
    """A command or event listener descriptor is malformed."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class MissingFieldError(DescriptorError):
    def __init__(self, field: str, owner: str = "command") -> None:
        super().__init__(field, f"Missing required {owner} field: {field}")


class UnexpectedFieldError(DescriptorError):
    def __init__(self, field: str, kind: str) -> None:
        super().__init__(field, f"Field '{field}' is not allowed on {kind} commands")


class InvalidModuleError(FerodError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class FetchError(FerodError):
    def __init__(self, scope: Any, cause: BaseException | None = None) -> None:
        detail = f": {describe_error(cause)}" if cause is not None else ""
        super().__init__(f"Could not fetch application commands for {scope}{detail}")
        self.scope = scope


class RegistrationError(FerodError):
    def __init__(self, action: str, name: str, cause: BaseException | None = None) -> None:
        detail = f": {describe_error(cause)}" if cause is not None else ""
        super().__init__(f"Could not {action} application command '{name}'{detail}")
        self.action = action
        self.name = name


class HandlerError(FerodError):
    def __init__(self, name: str, cause: BaseException) -> None:
        super().__init__(f"Handler for '{name}' raised {type(cause).__name__}: {cause}")
        self.name = name


def describe_error(error: BaseException) -> str:
    """
    Map raw exceptions into short, human-readable messages.
    Used for log lines about failed API calls.
    """
    s, t = str(error), type(error).__name__
    status = getattr(error, "status", None)
    if status == 429 or "429" in s or t == "RateLimited":
        return "Rate Limited: Discord is rate-limiting this application."
    if status == 401 or "Unauthorized" in s or t == "LoginFailure":
        return "Authentication Error: invalid bot token."
    if status == 404 or t == "NotFound":
        return "Not Found: the application command no longer exists."
    if status == 403 or t == "Forbidden":
        return "Forbidden: missing access (is the bot in the guild with applications.commands scope?)."
    if status == 400:
        return f"Bad Request: {s.split(chr(10))[0][:200]}"
    if isinstance(status, int):
        return f"HTTP {status}: {s.split(chr(10))[0][:100]}"
    if "Connection" in t or "ECONNREFUSED" in s or "ETIMEDOUT" in s or t == "TimeoutError":
        return "Connection Error: unable to reach the Discord API."
    return f"{t}: {s.split(chr(10))[0][:100]}"

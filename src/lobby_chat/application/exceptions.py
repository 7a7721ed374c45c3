from __future__ import annotations


class AppError(Exception):
    """Base application error.

    ``code`` is the stable, machine-readable reason sent back in acks;
    ``detail`` is the human-readable explanation.
    """

    code = "AppError"
    default_detail = ""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidFormatError(AppError):
    code = "InvalidFormat"
    default_detail = "Nicknames must be 3-20 characters of letters, digits, '.', '_' or '-'."


class NameTakenError(AppError):
    code = "NameTaken"
    default_detail = "That nickname is already taken."


class AlreadyNamedError(AppError):
    code = "AlreadyNamed"
    default_detail = "This connection has already claimed a nickname."


class NotAuthenticatedError(AppError):
    code = "NotAuthenticated"
    default_detail = "Claim a nickname before sending messages."


class RateLimitedError(AppError):
    code = "RateLimited"
    default_detail = "You are sending messages too quickly."


class EmptyMessageError(AppError):
    code = "EmptyMessage"
    default_detail = "Message is empty."


class MalformedWhisperError(AppError):
    code = "MalformedWhisper"
    default_detail = "Whisper format is: /w <nickname> <message>"


class TargetOfflineError(AppError):
    code = "TargetOffline"
    default_detail = "That user is not connected."


class SelfWhisperError(AppError):
    code = "SelfWhisper"
    default_detail = "You cannot whisper to yourself."


class PersistenceFailedError(AppError):
    code = "PersistenceFailed"
    default_detail = "Message could not be saved; it was not delivered."


class HistoryUnavailableError(AppError):
    code = "HistoryUnavailable"
    default_detail = "Message history is unavailable."


class ConnectionClosedError(AppError):
    code = "ConnectionClosed"
    default_detail = "Connection is closed."

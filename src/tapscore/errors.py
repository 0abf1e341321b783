class TapScoreError(Exception):
    """Base error for tapscore domain exceptions."""


class BackupImportError(TapScoreError):
    """Raised when a backup file cannot be imported. The message is shown to the user."""


class ConfigError(TapScoreError):
    """Raised when the configuration file is malformed."""


class UnknownContestError(TapScoreError):
    """Raised when a contest id or name does not match any contest."""


class UnknownEntrantError(TapScoreError):
    """Raised when an entrant id or name does not match any entrant in the contest."""

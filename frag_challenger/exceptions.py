"""
Exceptions raised by the fragmentation challenger.

Everything fatal to a challenge (or to the whole run) derives from
ChallengerError so the command-line interface can report it and exit
with a non-zero status. Per-candidate problems (invalid SMILES, a
fragmentation failure) are plain ValueError/RuntimeError instances that
the challenge runner catches and records; they never reach this module.
"""


class ChallengerError(Exception):
    """Base class for fatal challenger errors."""

    error_code = "CHALLENGER_ERROR"

    def __str__(self):
        return f"{self.error_code}: {super().__str__()}"


class DataNotFoundError(ChallengerError, FileNotFoundError):
    """The corpus directory is missing and there is no archive to restore it from."""

    error_code = "DATA_NOT_FOUND"


class PeaklistNotFoundError(ChallengerError, FileNotFoundError):
    """No peaklist exists for a challenge in either ionization directory."""

    error_code = "PEAKLIST_NOT_FOUND"


class SolutionNotFoundError(ChallengerError, LookupError):
    """The solutions file has no record for a challenge."""

    error_code = "SOLUTION_NOT_FOUND"


class MalformedDatabaseError(ChallengerError, ValueError):
    """The reaction database lacks its expected section markers."""

    error_code = "MALFORMED_DATABASE"


class ChallengeFailedError(ChallengerError, RuntimeError):
    """A challenge failed inside a worker; the group it belongs to is aborted."""

    error_code = "CHALLENGE_FAILED"

    def __init__(self, challenge_name: str, message: str, remote_traceback: str = ""):
        super().__init__(f"{challenge_name}: {message}")
        self.challenge_name = challenge_name
        self.remote_traceback = remote_traceback

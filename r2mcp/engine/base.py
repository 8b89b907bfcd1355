from abc import ABC, abstractmethod


class EngineError(Exception):
    """Raised when the analysis engine cannot be started or stops responding."""


class AnalysisEngine(ABC):
    """
    Executes textual commands against the artifact currently loaded in it.

    Implementations own their own mutable state; callers treat every
    operation as one atomic, possibly slow, blocking call.
    """

    @abstractmethod
    def open(self, path: str) -> bool:
        """Load `path`, replacing whatever was loaded. False if it could not be opened."""

    @abstractmethod
    def close(self) -> None:
        """Unload every open artifact. Safe to call when nothing is loaded."""

    @abstractmethod
    def run_command(self, command: str) -> str:
        """Run one command verbatim and return its textual output."""

    @abstractmethod
    def run_level(self, level: str) -> None:
        """Run a leveled analysis pass such as `aaa`."""

    @abstractmethod
    def shutdown(self) -> None:
        """Release the engine. The instance is unusable afterwards."""

import logging
from typing import Callable, Optional

from .base import AnalysisEngine

logger = logging.getLogger("R2MCP.engine.binding")


class EngineBinding:
    """
    The session's single analysis engine plus its open-artifact bookkeeping.

    The engine is built by `factory` on first use and released by `teardown()`.
    `current_path` is non-empty exactly when `artifact_open` is true; opening a
    new artifact always closes the previous one first.
    """

    def __init__(self, factory: Callable[[], AnalysisEngine]):
        self._factory = factory
        self._engine: Optional[AnalysisEngine] = None
        self.artifact_open = False
        self.current_path = ""

    @property
    def started(self) -> bool:
        return self._engine is not None

    def engine(self) -> AnalysisEngine:
        if self._engine is None:
            self._engine = self._factory()
        return self._engine

    def open_artifact(self, path: str) -> bool:
        engine = self.engine()
        if self.artifact_open:
            logger.info("Closing previously opened file: %s", self.current_path)
            self._close_engine_artifact(engine)
        if not engine.open(path):
            return False
        self.artifact_open = True
        self.current_path = path
        return True

    def close_artifact(self) -> bool:
        """Close the open artifact. False when nothing was open."""
        if not self.artifact_open:
            return False
        closed = self.current_path
        if self._engine is not None:
            self._close_engine_artifact(self._engine)
        else:
            self._clear()
        logger.info("Closed file: %s", closed)
        return True

    def _close_engine_artifact(self, engine: AnalysisEngine) -> None:
        # Clear first so a failing close never leaves a stale path behind.
        self._clear()
        engine.close()

    def _clear(self) -> None:
        self.artifact_open = False
        self.current_path = ""

    def run_command(self, command: str) -> str:
        return self.engine().run_command(command)

    def run_level(self, level: str) -> None:
        self.engine().run_level(level)

    def teardown(self) -> None:
        engine, self._engine = self._engine, None
        self._clear()
        if engine is not None:
            engine.shutdown()

"""
radare2 analysis engine driven through r2pipe.
"""

import logging
from typing import Any, Optional

import r2pipe

from .base import AnalysisEngine, EngineError

logger = logging.getLogger("R2MCP.engine")

# radare2 treats "-" as an empty malloc:// buffer, so the core starts without an artifact
_EMPTY_TARGET = "-"


class R2Engine(AnalysisEngine):
    """One radare2 process, spawned on construction and kept for the session."""

    def __init__(self, radare2home: Optional[str] = None):
        kwargs: dict = {}
        if radare2home:
            kwargs["radare2home"] = radare2home
        try:
            self._r2 = r2pipe.open(_EMPTY_TARGET, **kwargs)
        except Exception as exc:
            raise EngineError(f"Failed to initialize radare2 core: {exc}") from exc
        self._closed = False
        self._cmd("e scr.color=0")
        logger.info("Radare2 core initialized")

    def _cmd(self, command: str) -> str:
        if self._closed:
            raise EngineError("radare2 core has been shut down")
        logger.debug("Running r2 command: %s", command)
        try:
            output = self._r2.cmd(command)
        except Exception as exc:
            raise EngineError(f"radare2 command failed ({command}): {exc}") from exc
        return output or ""

    def _cmdj(self, command: str) -> Any:
        if self._closed:
            raise EngineError("radare2 core has been shut down")
        try:
            return self._r2.cmdj(command)
        except Exception as exc:
            raise EngineError(f"radare2 command failed ({command}): {exc}") from exc

    def open(self, path: str) -> bool:
        logger.info("Attempting to open file: %s", path)
        self._cmd("o-*")
        self._cmd("e bin.relocs.apply=true")
        self._cmd("e bin.cache=true")

        if not self._cmd(f"o {path}").strip():
            # Newer radare2 builds print nothing on success; confirm via the descriptor list.
            descriptors = self._cmdj("oj") or []
            if not any(isinstance(d, dict) and d.get("uri") == path for d in descriptors):
                logger.warning("Failed to open file: %s", path)
                return False

        logger.debug("Loading binary information")
        self._cmd("ob")
        logger.info("File opened successfully: %s", path)
        return True

    def close(self) -> None:
        self._cmd("o-*")

    def run_command(self, command: str) -> str:
        return self._cmd(command)

    def run_level(self, level: str) -> None:
        self._cmd(level)

    def shutdown(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._r2.quit()
        except Exception as exc:
            logger.debug("radare2 did not exit cleanly: %s", exc)

from r2mcp.engine.base import AnalysisEngine, EngineError
from r2mcp.engine.binding import EngineBinding

__all__ = ["AnalysisEngine", "EngineError", "EngineBinding", "R2Engine"]


def __getattr__(name):
    # r2pipe is only needed once a real radare2 process is spawned
    if name == "R2Engine":
        from r2mcp.engine.r2 import R2Engine
        return R2Engine
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

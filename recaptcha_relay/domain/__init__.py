"""Pure domain pieces: upstream result shapes, the decision rule, errors.

Nothing here touches FastAPI or httpx, so the server, the upstream clients
and the smoke runner can all share it.
"""
__all__ = ["decision", "errors", "result", "upstream"]

"""Services layer - the return editor and its SQLAlchemy-backed collaborators."""

from returns_kernel.services.return_editor import ReturnEditor
from returns_kernel.services.transaction import SessionTransaction
from returns_kernel.services.wiring import build_return_editor

__all__ = [
    "ReturnEditor",
    "SessionTransaction",
    "build_return_editor",
]

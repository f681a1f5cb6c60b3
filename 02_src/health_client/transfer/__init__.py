"""Transfer pipeline module."""

from .pipeline import Transfer, TransferKind, TransferOutcome, TransferPipeline
from .transfers import image_transfer, text_transfer, voice_transfer

__all__ = [
    "Transfer",
    "TransferKind",
    "TransferOutcome",
    "TransferPipeline",
    "image_transfer",
    "text_transfer",
    "voice_transfer",
]

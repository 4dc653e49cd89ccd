from .storage import DataSlot

__all__ = ['DataSlot']

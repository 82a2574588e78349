from orcbridge.engine.readers.base import BaseColumnarReader
from orcbridge.engine.readers.registry import pick_reader, register_reader, registered_readers

__all__ = ["BaseColumnarReader", "pick_reader", "register_reader", "registered_readers"]

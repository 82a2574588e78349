from orcbridge.connectors.filesystem import open_input
from orcbridge.connectors.handle import DatasetHandle

__all__ = ["DatasetHandle", "open_input"]

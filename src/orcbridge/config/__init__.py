from orcbridge.config.models import PartitionDefinition, ReaderOptions

__all__ = ["PartitionDefinition", "ReaderOptions"]

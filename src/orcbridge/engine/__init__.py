from orcbridge.engine.materializer import FileSession, OrcMaterializer, RowStream

__all__ = ["FileSession", "OrcMaterializer", "RowStream"]

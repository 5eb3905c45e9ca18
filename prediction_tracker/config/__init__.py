from .catalog import CATALOG, InstrumentCatalog, default_catalog
from .runtime import RuntimeSettings

__all__ = ["CATALOG", "InstrumentCatalog", "RuntimeSettings", "default_catalog"]

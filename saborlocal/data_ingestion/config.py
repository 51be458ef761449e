from dataclasses import dataclass


@dataclass(frozen=True)
class ImportConfig:
    """
    Configuration for the content import.
    """

    batch_size: int = 100
    list_separator: str = "|"
    hours_separator: str = ";"
    purge_order: tuple = ("review", "venue", "city", "category")


DEFAULT_IMPORT_CONFIG = ImportConfig()

from .adapter_registry_repository_interface import AdapterRegistryRepository

__all__ = [
    "AdapterRegistryRepository",
]

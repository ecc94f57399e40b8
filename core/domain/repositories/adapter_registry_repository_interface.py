from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from core.domain.entities.adapter_registry_entity import AdapterRegistryEntity


class AdapterRegistryRepository(ABC):
    @abstractmethod
    def ensure_indexes(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def get_by_name(self, *, chain: str, name: str) -> Optional[AdapterRegistryEntity]:
        raise NotImplementedError

    @abstractmethod
    def get_by_kind_pool(self, *, chain: str, kind: str, pool: str) -> Optional[AdapterRegistryEntity]:
        raise NotImplementedError

    @abstractmethod
    def insert(self, entity: AdapterRegistryEntity) -> None:
        raise NotImplementedError

    @abstractmethod
    def set_status(self, *, chain: str, name: str, status: str) -> int:
        raise NotImplementedError

    @abstractmethod
    def list_all(self, *, chain: str, limit: int = 100) -> Sequence[AdapterRegistryEntity]:
        raise NotImplementedError

    @abstractmethod
    def list_active(self, *, chain: str, limit: int = 200) -> Sequence[AdapterRegistryEntity]:
        raise NotImplementedError

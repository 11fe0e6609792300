"""
Species registry with stable dense indices.

Every per-species vector in PyHarvest (site biomass removed, stand damage
tables, log columns) is indexed by the position a species holds in the
registry. The registry is built once per run and never reordered.

Usage:
    from pyharvest.species import SpeciesRegistry

    species = SpeciesRegistry(['abiebals', 'acerrubr', 'pinubank'])
    species.index_of('acerrubr')  # 1
"""
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterator, List, Mapping, Sequence, Union

import numpy as np

from .exceptions import ConfigurationError, IndexSpaceError, SpeciesNotFoundError

__all__ = [
    'Species',
    'SpeciesRegistry',
]


@dataclass(frozen=True)
class Species:
    """A species entry.

    Attributes:
        name: Species name as it appears in log column headers
        index: Dense index in ``0..S-1``
    """
    name: str
    index: int


class SpeciesRegistry:
    """Ordered collection of species with stable dense indices."""

    def __init__(self, names: Sequence[str]):
        """Build the registry.

        Args:
            names: Species names in index order

        Raises:
            ConfigurationError: If the list is empty or holds duplicates
        """
        names = [str(name) for name in names]
        if not names:
            raise ConfigurationError("Species registry must contain at least one species")

        duplicates = sorted(name for name, count in Counter(names).items() if count > 1)
        if duplicates:
            raise ConfigurationError(f"Duplicate species names in registry: {duplicates}")

        self._species: List[Species] = [Species(name, i) for i, name in enumerate(names)]
        self._by_name: Dict[str, Species] = {s.name: s for s in self._species}

    def __len__(self) -> int:
        return len(self._species)

    def __iter__(self) -> Iterator[Species]:
        return iter(self._species)

    def __getitem__(self, index: int) -> Species:
        return self._species[index]

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    @property
    def names(self) -> List[str]:
        """Species names in index order."""
        return [s.name for s in self._species]

    def index_of(self, name: str) -> int:
        """Get the dense index for a species name.

        Raises:
            SpeciesNotFoundError: If the name is not registered
        """
        try:
            return self._by_name[name].index
        except KeyError:
            raise SpeciesNotFoundError(name) from None

    def zeros(self, dtype=float) -> np.ndarray:
        """Create a zeroed per-species vector."""
        return np.zeros(len(self._species), dtype=dtype)

    def to_vector(self, values: Union[Mapping[str, float], Sequence[float], np.ndarray],
                  description: str = "species vector", dtype=float) -> np.ndarray:
        """Convert per-species values into a dense vector.

        Args:
            values: Mapping of species name to value (missing species are
                zero) or a sequence already in index order
            description: Name used in error messages
            dtype: Resulting numpy dtype

        Returns:
            Vector of length ``len(self)``

        Raises:
            SpeciesNotFoundError: If a mapping names an unknown species
            IndexSpaceError: If a sequence has the wrong length
        """
        if isinstance(values, Mapping):
            vector = self.zeros(dtype)
            for name, value in values.items():
                vector[self.index_of(name)] = value
            return vector

        vector = np.asarray(values, dtype=dtype)
        if vector.ndim != 1 or vector.shape[0] != len(self._species):
            raise IndexSpaceError(f"{description} length", len(self._species), vector.shape)
        return vector.copy()

    def __repr__(self) -> str:
        return f"SpeciesRegistry({self.names!r})"

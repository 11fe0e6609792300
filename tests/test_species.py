"""
Tests for the species registry.
"""
import numpy as np
import pytest

from pyharvest.exceptions import ConfigurationError, IndexSpaceError, SpeciesNotFoundError
from pyharvest.species import SpeciesRegistry


class TestSpeciesRegistry:
    """Tests for index assignment and lookup."""

    def test_indices_follow_input_order(self, species):
        assert species.names == ['abiebals', 'acerrubr', 'pinubank']
        assert [s.index for s in species] == [0, 1, 2]
        assert species.index_of('pinubank') == 2
        assert species[1].name == 'acerrubr'
        assert len(species) == 3

    def test_contains(self, species):
        assert 'abiebals' in species
        assert 'tsugcana' not in species

    def test_unknown_species(self, species):
        with pytest.raises(SpeciesNotFoundError) as exc_info:
            species.index_of('tsugcana')
        assert exc_info.value.species_name == 'tsugcana'

    def test_empty_registry_rejected(self):
        with pytest.raises(ConfigurationError):
            SpeciesRegistry([])

    def test_duplicate_names_rejected(self):
        with pytest.raises(ConfigurationError, match="acerrubr"):
            SpeciesRegistry(['acerrubr', 'abiebals', 'acerrubr'])


class TestToVector:
    """Tests for converting per-species values into dense vectors."""

    def test_mapping_fills_missing_with_zero(self, species):
        vector = species.to_vector({'pinubank': 50.0, 'abiebals': 100.0})
        np.testing.assert_array_equal(vector, [100.0, 0.0, 50.0])

    def test_sequence_in_index_order(self, species):
        vector = species.to_vector([1, 2, 3], dtype=np.int64)
        assert vector.dtype == np.int64
        np.testing.assert_array_equal(vector, [1, 2, 3])

    def test_sequence_is_copied(self, species):
        source = np.array([1.0, 2.0, 3.0])
        vector = species.to_vector(source)
        vector[0] = 99.0
        assert source[0] == 1.0

    @pytest.mark.parametrize("values", [
        pytest.param([1.0, 2.0], id="too_short"),
        pytest.param([1.0, 2.0, 3.0, 4.0], id="too_long"),
        pytest.param([[1.0, 2.0, 3.0]], id="two_dimensional"),
    ])
    def test_wrong_shape_rejected(self, species, values):
        with pytest.raises(IndexSpaceError):
            species.to_vector(values)

    def test_mapping_with_unknown_species(self, species):
        with pytest.raises(SpeciesNotFoundError):
            species.to_vector({'tsugcana': 1.0})

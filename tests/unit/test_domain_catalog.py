"""Tests for the static tile catalog and rotation helpers."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from carcassonne.domain.catalog import (
    BASE_TILES,
    EXPANSIONS,
    TILE_TYPES,
    check_rotation,
    deck_composition,
    effective_edges,
    get_tile_type,
    rotate_direction,
    rotate_edges,
    validate_expansions,
)
from carcassonne.domain.enums import DIRECTIONS, ROTATIONS, Direction, EdgeType, FeatureType
from carcassonne.domain.errors import ConfigurationError, PlacementError


class TestTileTypes:
    """Every catalog row is internally consistent."""

    @pytest.mark.parametrize("tag", sorted(TILE_TYPES))
    def test_each_edge_belongs_to_exactly_one_feature(self, tag):
        tile_type = TILE_TYPES[tag]
        covered = [side for spec in tile_type.features for side in spec.edges]
        assert sorted(covered) == sorted(DIRECTIONS)

    @pytest.mark.parametrize("tag", sorted(TILE_TYPES))
    def test_feature_types_match_printed_edges(self, tag):
        tile_type = TILE_TYPES[tag]
        for spec in tile_type.features:
            for side in spec.edges:
                assert str(tile_type.edge(side)) == str(spec.feature_type)

    @pytest.mark.parametrize("tag", sorted(TILE_TYPES))
    def test_field_adjacency_points_at_cities_on_the_same_tile(self, tag):
        tile_type = TILE_TYPES[tag]
        city_spots = {
            spec.spot for spec in tile_type.features if spec.feature_type == FeatureType.CITY
        }
        for spec in tile_type.features:
            assert set(spec.adjacent_spots) <= city_spots

    def test_monastery_covers_no_edge(self):
        spec = next(
            spec
            for spec in TILE_TYPES["monastery"].features
            if spec.feature_type == FeatureType.MONASTERY
        )
        assert spec.edges == ()
        assert spec.spot == "monastery"

    def test_unknown_tile_type(self):
        with pytest.raises(ConfigurationError):
            get_tile_type("dragon")


class TestDeckComposition:
    def test_base_game_has_72_tiles(self):
        assert sum(BASE_TILES.values()) == 72
        assert sum(deck_composition([]).values()) == 72
        assert sum(deck_composition(["base"]).values()) == 72

    def test_expansion_only_adds_tiles(self):
        composition = deck_composition(["inns_and_cathedrals"])
        extra = sum(EXPANSIONS["inns_and_cathedrals"].values())
        assert sum(composition.values()) == 72 + extra
        for tag, count in BASE_TILES.items():
            assert composition[tag] >= count

    def test_every_listed_tile_type_exists(self):
        for table in (BASE_TILES, *EXPANSIONS.values()):
            for tag in table:
                assert tag in TILE_TYPES

    def test_unknown_expansion_rejected(self):
        with pytest.raises(ConfigurationError):
            deck_composition(["river"])

    def test_validate_expansions_deduplicates(self):
        assert validate_expansions(["inns_and_cathedrals", "inns_and_cathedrals"]) == [
            "inns_and_cathedrals"
        ]


class TestRotation:
    def test_single_step_shifts_edges_clockwise(self):
        edges = (EdgeType.CITY, EdgeType.ROAD, EdgeType.FIELD, EdgeType.ROAD)
        # (N, E, S, W) <- (W, N, E, S)
        assert rotate_edges(edges, 90) == [
            EdgeType.ROAD,
            EdgeType.CITY,
            EdgeType.ROAD,
            EdgeType.FIELD,
        ]

    def test_rotate_direction_matches_rotate_edges(self):
        tile_type = get_tile_type("city_two_sides_road")
        for rotation in ROTATIONS:
            rotated = effective_edges(tile_type.edges, rotation)
            for side in DIRECTIONS:
                assert rotated[rotate_direction(side, rotation)] == tile_type.edge(side)

    def test_half_turn_moves_north_to_south(self):
        assert rotate_direction(Direction.NORTH, 180) == Direction.SOUTH
        assert rotate_direction(Direction.WEST, 90) == Direction.NORTH

    @pytest.mark.parametrize("rotation", [-90, 45, 360, 1])
    def test_invalid_rotation(self, rotation):
        with pytest.raises(PlacementError) as excinfo:
            check_rotation(rotation)
        assert excinfo.value.reason == PlacementError.INVALID_ROTATION

    @given(
        st.lists(st.sampled_from(list(EdgeType)), min_size=4, max_size=4),
        st.sampled_from(ROTATIONS),
    )
    def test_four_quarter_turns_round_trip(self, edges, start):
        rotated = list(edges)
        for _ in range(4):
            rotated = rotate_edges(rotated, 90)
        assert rotated == edges
        assert rotate_edges(rotate_edges(edges, start), (360 - start) % 360) == edges

"""
Tests for clustering configuration, presets and the config file layer.
"""

import pytest

from pydantic import ValidationError

from apnea_cluster.analysis.config import (
    AVAILABLE_PRESETS,
    BALANCED_CONFIG,
    DEFAULT_PRESET,
    ClusteringConfig,
    get_preset,
)
from apnea_cluster.config import (
    get_clustering_settings,
    load_config,
    resolve_clustering_config,
    save_config,
    set_clustering_setting,
    unset_clustering_setting,
)


@pytest.mark.unit
class TestClusteringConfig:
    """Test ClusteringConfig defaults and validation."""

    def test_defaults(self):
        config = ClusteringConfig()

        assert config.gap_sec == 120
        assert config.bridge_threshold == 0.1
        assert config.bridge_gap_sec == 60
        assert config.edge_threshold == 0.5
        assert config.edge_min_duration_sec == 10
        assert config.min_cluster_events == 3
        assert config.min_cluster_total_duration_sec == 60
        assert config.max_cluster_span_sec == 230
        assert config.false_neg_duration_min_sec == 60
        assert config.false_neg_duration_max_sec == 600
        assert config.false_neg_confidence_min == 0.95
        assert config.overlap_window_sec == 5

    @pytest.mark.parametrize(
        "field", ["gap_sec", "bridge_gap_sec", "overlap_window_sec", "bridge_threshold"]
    )
    def test_negative_values_rejected(self, field):
        with pytest.raises(ValidationError):
            ClusteringConfig(**{field: -1})

    def test_min_events_must_be_positive(self):
        with pytest.raises(ValidationError):
            ClusteringConfig(min_cluster_events=0)

    def test_edge_threshold_below_bridge_threshold_rejected(self):
        with pytest.raises(ValidationError, match="edge_threshold"):
            ClusteringConfig(bridge_threshold=0.6, edge_threshold=0.5)

    def test_equal_thresholds_accepted(self):
        config = ClusteringConfig(bridge_threshold=0.5, edge_threshold=0.5)

        assert config.edge_threshold == config.bridge_threshold

    def test_inverted_duration_window_rejected(self):
        with pytest.raises(ValidationError, match="false_neg_duration_min_sec"):
            ClusteringConfig(false_neg_duration_min_sec=700)

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            ClusteringConfig(gap_seconds=90)

    def test_frozen(self):
        config = ClusteringConfig()

        with pytest.raises(ValidationError):
            config.gap_sec = 10

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            ClusteringConfig(gap_sec=-5)

    @pytest.mark.parametrize("field", ["gap_sec", "overlap_window_sec"])
    def test_infinity_accepted(self, field):
        config = ClusteringConfig(**{field: float("inf")})

        assert getattr(config, field) == float("inf")

    @pytest.mark.parametrize(
        "field", ["gap_sec", "overlap_window_sec", "false_neg_confidence_min"]
    )
    def test_nan_rejected(self, field):
        with pytest.raises(ValidationError, match="NaN"):
            ClusteringConfig(**{field: float("nan")})


@pytest.mark.unit
class TestPresets:
    """Test predefined presets."""

    def test_available_presets(self):
        assert set(AVAILABLE_PRESETS) == {"strict", "balanced", "lenient"}
        assert DEFAULT_PRESET == "balanced"

    def test_balanced_is_default(self):
        assert get_preset("balanced") == ClusteringConfig()

    def test_strict_values(self):
        strict = get_preset("strict")

        assert strict.false_neg_confidence_min == 0.98
        assert strict.false_neg_duration_min_sec == 120

    def test_lenient_values(self):
        lenient = get_preset("lenient")

        assert lenient.false_neg_confidence_min == 0.85
        assert lenient.false_neg_duration_min_sec == 45

    @pytest.mark.parametrize("name", ["strict", "lenient"])
    def test_presets_share_clustering_thresholds(self, name):
        preset = get_preset(name)
        shared = [
            "gap_sec",
            "bridge_threshold",
            "bridge_gap_sec",
            "edge_threshold",
            "min_cluster_events",
            "max_cluster_span_sec",
        ]

        for field in shared:
            assert getattr(preset, field) == getattr(BALANCED_CONFIG, field)

    def test_unknown_preset(self):
        with pytest.raises(ValueError, match="Unknown preset"):
            get_preset("paranoid")


@pytest.mark.unit
class TestConfigFile:
    """Test loading, saving and resolving the config file."""

    def test_missing_file_is_empty(self, isolated_config):
        assert not isolated_config.exists()
        assert load_config() == {}
        assert get_clustering_settings() == {}

    def test_save_and_load(self, isolated_config):
        save_config({"clustering": {"gap_sec": 90.0}})

        assert isolated_config.exists()
        assert load_config() == {"clustering": {"gap_sec": 90.0}}
        assert not isolated_config.with_suffix(".toml.tmp").exists()

    def test_corrupt_file_is_empty(self, isolated_config):
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text("clustering = [not toml")

        assert load_config() == {}

    def test_non_table_section_ignored(self, isolated_config):
        save_config({"clustering": 5})

        assert get_clustering_settings() == {}


@pytest.mark.unit
class TestResolveClusteringConfig:
    """Test precedence of presets, file values and overrides."""

    def test_defaults_without_file(self):
        assert resolve_clustering_config() == BALANCED_CONFIG

    def test_preset_argument(self):
        assert resolve_clustering_config(preset="strict") == get_preset("strict")

    def test_file_preset_used_when_no_argument(self, isolated_config):
        save_config({"clustering": {"preset": "lenient"}})

        assert resolve_clustering_config() == get_preset("lenient")

    def test_argument_preset_beats_file_preset(self, isolated_config):
        save_config({"clustering": {"preset": "lenient"}})

        assert resolve_clustering_config(preset="strict") == get_preset("strict")

    def test_file_values_override_preset(self, isolated_config):
        save_config({"clustering": {"preset": "strict", "gap_sec": 90.0}})

        config = resolve_clustering_config()

        assert config.gap_sec == 90
        assert config.false_neg_confidence_min == 0.98

    def test_overrides_beat_file_values(self, isolated_config):
        save_config({"clustering": {"gap_sec": 90.0}})

        config = resolve_clustering_config(
            overrides={"gap_sec": 45, "bridge_gap_sec": None}
        )

        assert config.gap_sec == 45
        assert config.bridge_gap_sec == 60

    def test_explicit_settings_skip_file(self, isolated_config):
        save_config({"clustering": {"preset": "strict", "gap_sec": 5.0}})

        config = resolve_clustering_config(settings={"gap_sec": 30})

        assert config.gap_sec == 30
        assert config.false_neg_confidence_min == 0.95

    def test_invalid_override(self):
        with pytest.raises(ValidationError):
            resolve_clustering_config(overrides={"gap_sec": -1})

    def test_unknown_file_preset(self, isolated_config):
        save_config({"clustering": {"preset": "paranoid"}})

        with pytest.raises(ValueError, match="Unknown preset"):
            resolve_clustering_config()


@pytest.mark.unit
class TestSetUnsetSetting:
    """Test persisting [clustering] values."""

    def test_set_coerces_and_persists(self, isolated_config):
        stored = set_clustering_setting("gap_sec", "90")

        assert stored == 90.0
        assert load_config() == {"clustering": {"gap_sec": 90.0}}
        assert resolve_clustering_config().gap_sec == 90

    def test_set_preset(self, isolated_config):
        assert set_clustering_setting("preset", "strict") == "strict"
        assert resolve_clustering_config() == get_preset("strict")

    def test_set_unknown_key(self, isolated_config):
        with pytest.raises(ValueError, match="Unknown setting"):
            set_clustering_setting("speed", "1")

        assert not isolated_config.exists()

    def test_set_invalid_value_not_written(self, isolated_config):
        with pytest.raises(ValidationError):
            set_clustering_setting("gap_sec", "-3")

        assert not isolated_config.exists()

    def test_set_rejects_inconsistent_config(self, isolated_config):
        with pytest.raises(ValidationError):
            set_clustering_setting("bridge_threshold", "0.9")

    def test_set_unknown_preset(self, isolated_config):
        with pytest.raises(ValueError, match="Unknown preset"):
            set_clustering_setting("preset", "paranoid")

    def test_set_keeps_other_sections(self, isolated_config):
        save_config({"logging": {"level": "DEBUG"}})

        set_clustering_setting("min_cluster_events", "4")

        assert load_config() == {
            "logging": {"level": "DEBUG"},
            "clustering": {"min_cluster_events": 4},
        }

    def test_unset_removes_key(self, isolated_config):
        set_clustering_setting("gap_sec", "90")
        set_clustering_setting("preset", "lenient")

        assert unset_clustering_setting("gap_sec") is True
        assert load_config() == {"clustering": {"preset": "lenient"}}

    def test_unset_last_key_deletes_file(self, isolated_config):
        set_clustering_setting("gap_sec", "90")

        assert unset_clustering_setting("gap_sec") is True
        assert not isolated_config.exists()

    def test_unset_missing_key(self, isolated_config):
        assert unset_clustering_setting("gap_sec") is False

import logging

import pytest

from volcano_engine.conditions import map_samples, missing_samples, parse_sample_name
from volcano_engine.merge import merge_settings
from volcano_engine.models import RawForm, SampleInfo, Settings
from volcano_engine.tabular import load_tabular_text


@pytest.mark.parametrize(
    "name, expected",
    [
        ("A.1", ("A", "1")),
        ("Treated.Rep.2", ("Treated.Rep", "2")),
        ("nodot", ("", "nodot")),
        ("A.", ("A", "")),
    ],
)
def test_parse_sample_name(name, expected):
    assert parse_sample_name(name) == expected


class TestMapSamples:
    def test_fresh_settings(self, pastel):
        mapping = map_samples(["A.1", "A.2", "B.1"], Settings())
        assert mapping.conditions == ("A", "B")
        assert mapping.condition_order == ("A", "B")
        assert mapping.new_colors == {"A": pastel[0], "B": pastel[1]}
        assert mapping.color_map == {"A": pastel[0], "B": pastel[1]}
        assert mapping.sample_order == {"A": ("A.1", "A.2"), "B": ("B.1",)}
        assert mapping.sample_visible == {"A.1": True, "A.2": True, "B.1": True}
        assert mapping.sample_map["A.2"] == SampleInfo(condition="A", replicate="2", name="A.2")

    def test_existing_condition_colour_is_kept(self, pastel):
        settings = Settings(color_map={"A": "#000000"}, condition_order=("A",))
        mapping = map_samples(["A.1", "B.1"], settings)
        assert mapping.color_map["A"] == "#000000"
        assert mapping.new_colors == {"B": pastel[0]}

    def test_selection_colours_count_as_used(self, pastel):
        settings = Settings(color_map={"My selection": pastel[0]})
        mapping = map_samples(["A.1", "B.1"], settings)
        assert mapping.new_colors == {"A": pastel[1], "B": pastel[2]}
        assert mapping.color_map["My selection"] == pastel[0]

    def test_stored_condition_overrides_name(self):
        settings = Settings(
            sample_map={"A.1": SampleInfo(condition="Ctrl", replicate="1", name="A.1")},
        )
        mapping = map_samples(["A.1", "A.2"], settings)
        assert mapping.conditions == ("Ctrl", "A")
        assert mapping.sample_map["A.1"].condition == "Ctrl"
        assert mapping.sample_order["Ctrl"] == ("A.1",)

    def test_removed_samples_and_conditions_are_pruned(self):
        settings = Settings(
            color_map={"C": "#111111"},
            sample_map={
                "C.1": SampleInfo("C", "1", "C.1"),
                "A.1": SampleInfo("A", "1", "A.1"),
            },
            sample_order={"C": ("C.1",), "A": ("A.1",)},
            sample_visible={"C.1": False, "A.1": False},
            condition_order=("C", "A"),
        )
        mapping = map_samples(["A.1", "B.1"], settings)
        assert set(mapping.sample_map) == {"A.1", "B.1"}
        assert mapping.condition_order == ("A", "B")
        assert "C" not in mapping.sample_order
        assert mapping.sample_visible == {"A.1": False, "B.1": True}
        # colours are never removed
        assert mapping.color_map["C"] == "#111111"

    def test_existing_condition_order_is_preserved(self):
        settings = Settings(condition_order=("B", "A"))
        mapping = map_samples(["A.1", "B.1", "C.1"], settings)
        assert mapping.condition_order == ("B", "A", "C")

    def test_sample_without_separator_is_not_coloured(self, caplog):
        with caplog.at_level(logging.WARNING, logger="volcano_engine.conditions"):
            mapping = map_samples(["Intensity", "A.1"], Settings())
        assert mapping.conditions == ("A",)
        assert "" not in mapping.color_map
        assert mapping.sample_map["Intensity"].condition == ""
        assert mapping.sample_map["Intensity"].replicate == "Intensity"
        assert "" not in mapping.condition_order
        assert "Intensity" in caplog.text

    def test_colours_stable_across_repeated_passes(self):
        first = map_samples(["A.1", "B.1"], Settings())
        settings = merge_settings(Settings(), first)
        second = map_samples(["A.1", "B.1", "C.1"], settings)
        assert second.color_map["A"] == first.color_map["A"]
        assert second.color_map["B"] == first.color_map["B"]
        assert second.new_colors.keys() == {"C"}

    def test_input_settings_untouched(self):
        settings = Settings(color_map={"X": "#000000"})
        map_samples(["A.1"], settings)
        assert settings.color_map == {"X": "#000000"}
        assert settings.sample_map == {}


def test_missing_samples():
    dataset = load_tabular_text("id\tA.1\nP1\t1\n")
    form = RawForm(primary_id_column="id", sample_columns=("A.1", "A.2"))
    assert missing_samples(dataset, form) == ["A.2"]

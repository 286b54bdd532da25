import pytest

from volcano_engine.config import VOLCANO_CONFIG
from volcano_engine.differential import process_differential
from volcano_engine.models import DifferentialForm, Settings, VolcanoAxis
from volcano_engine.tabular import load_tabular_text
from volcano_engine.volcano import build_volcano_points, significance_bucket


def _processed(text, **form_kwargs):
    form = dict(
        primary_id_column="id",
        gene_name_column="gene",
        fold_change_column="fc",
        significance_column="p",
    )
    form.update(form_kwargs)
    return process_differential(load_tabular_text(text), DifferentialForm(**form))


TWO_COMPARISONS = (
    "id\tgene\tfc\tp\tcmp\n"
    "P1\tG1\t2\t3\tX\n"
    "P2\tG2\t2.5\t4\tY\n"
    "P3\tG3\t0.1\t0.1\tX\n"
)


class TestSignificanceBucket:
    def test_significant_and_large_change(self):
        assert significance_bucket(2.0, 3.0, 0.05, 0.6, "A") == (
            "P-value <= 0.05;FC > 0.6 (A)",
            "P-value <= FC > ",
        )

    def test_not_significant_small_change(self):
        assert significance_bucket(-0.1, 0.5, 0.05, 0.6, "A") == (
            "P-value > 0.05;FC <= 0.6 (A)",
            "P-value > FC <= ",
        )

    def test_negative_fold_change_uses_absolute_value(self):
        group, position = significance_bucket(-2.0, 3.0, 0.05, 0.6, "")
        assert position == "P-value <= FC > "
        assert group.endswith("()")

    def test_boundary_is_significant(self):
        _, position = significance_bucket(0.6, 2.0, 0.01, 0.6, "A")
        assert position == "P-value <= FC <= "

    @pytest.mark.parametrize("p_cutoff", [0.0, -1.0])
    def test_non_positive_cutoff(self, p_cutoff):
        _, position = significance_bucket(5.0, 100.0, p_cutoff, 0.6, "A")
        assert position.startswith("P-value > ")


class TestBuildVolcanoPoints:
    def test_one_point_per_row(self):
        processed = _processed(TWO_COMPARISONS)
        result = build_volcano_points(processed, {}, Settings())
        assert [p.protein_id for p in result.points] == ["P1", "P2", "P3"]
        assert result.points[0].x == 2.0
        assert result.points[0].y == 3.0

    def test_filtered_rows_do_not_appear(self):
        processed = _processed(TWO_COMPARISONS, comparison_column="cmp", comparison_select=("X",))
        result = build_volcano_points(processed, {}, Settings())
        assert [p.protein_id for p in result.points] == ["P1", "P3"]
        assert all(p.comparison == "X" for p in result.points)

    def test_bucket_colour_shared_across_comparisons(self):
        processed = _processed(
            TWO_COMPARISONS, comparison_column="cmp", comparison_select=("X", "Y"),
        )
        result = build_volcano_points(processed, {}, Settings())
        p1, p2, _ = result.points
        assert p1.selections != p2.selections
        assert p1.colors == p2.colors
        assert result.color_map[p1.selections[0]] == result.color_map[p2.selections[0]]

    def test_bucket_colours_allocated_per_position(self, pastel):
        processed = _processed(TWO_COMPARISONS)
        result = build_volcano_points(processed, {}, Settings())
        p1, _, p3 = result.points
        assert p1.colors == (pastel[0],)
        assert p3.colors == (pastel[1],)

    def test_existing_bucket_colour_wins(self):
        processed = _processed(TWO_COMPARISONS, comparison_column="cmp", comparison_select=("X", "Y"))
        group, _ = significance_bucket(2.0, 3.0, 0.05, 0.6, "X")
        result = build_volcano_points(processed, {}, Settings(color_map={group: "#abcdef"}))
        assert result.points[0].colors == ("#abcdef",)
        # P2 shares the quadrant and picks up the cached colour
        assert result.points[1].colors == ("#abcdef",)

    def test_selection_colour_and_membership(self, pastel):
        processed = _processed(TWO_COMPARISONS)
        membership = {"P1": {"Kinases": True, "Unused": False}}
        result = build_volcano_points(processed, membership, Settings())
        p1 = result.points[0]
        assert p1.selections == ("Kinases",)
        assert p1.colors == (pastel[0],)
        assert p1.color == pastel[0]
        assert result.color_map["Kinases"] == pastel[0]
        assert "Unused" not in result.color_map

    def test_existing_selection_colour_kept(self):
        processed = _processed(TWO_COMPARISONS)
        membership = {"P1": {"Kinases": True}}
        result = build_volcano_points(
            processed, membership, Settings(color_map={"Kinases": "#000000"}),
        )
        assert result.points[0].colors == ("#000000",)

    def test_background_grey(self):
        processed = _processed(TWO_COMPARISONS)
        membership = {"P1": {"Kinases": True}}
        result = build_volcano_points(processed, membership, Settings(background_grey=True))
        assert result.points[0].selections == ("Kinases",)
        for point in result.points[1:]:
            assert point.selections == (VOLCANO_CONFIG["background_label"],)
            assert point.colors == (VOLCANO_CONFIG["background_color"],)

    def test_comparison_suffix_matching(self):
        processed = _processed(
            TWO_COMPARISONS, comparison_column="cmp", comparison_select=("X", "Y"),
        )
        membership = {"P1": {"Hits (Y)": True}, "P2": {"Hits (Y)": True}}
        plain = build_volcano_points(processed, membership, Settings())
        assert plain.points[0].selections == ("Hits (Y)",)

        matched = build_volcano_points(
            processed, membership, Settings(), match_comparison_suffix=True,
        )
        assert matched.points[0].selections != ("Hits (Y)",)
        assert matched.points[1].selections == ("Hits (Y)",)

    def test_gene_name_fallbacks(self):
        processed = _processed("id\tgene\tfc\tp\nP1\tG1\t1\t1\nP2\t\t1\t1\n")
        result = build_volcano_points(processed, {}, Settings())
        assert [p.gene_name for p in result.points] == ["G1", "P2"]

        lookup = {"P2": "FROM_LOOKUP"}.get
        result = build_volcano_points(processed, {}, Settings(), gene_lookup=lookup)
        assert [p.gene_name for p in result.points] == ["G1", "FROM_LOOKUP"]

    def test_missing_comparison_column_gives_empty_comparison(self):
        processed = _processed(TWO_COMPARISONS)
        result = build_volcano_points(processed, {}, Settings())
        assert all(p.comparison == "" for p in result.points)

    def test_custom_text(self):
        text = "id\tgene\tfc\tp\tnote\nP1\tG1\t1\t1\thello\n"
        settings = Settings(custom_text_column="note")
        processed = process_differential(
            load_tabular_text(text),
            DifferentialForm(primary_id_column="id", fold_change_column="fc", significance_column="p"),
            custom_text_column="note",
        )
        result = build_volcano_points(processed, {}, settings)
        assert result.points[0].custom_text == "hello"
        assert result.points[0].to_dict()["customText"] == "hello"

    def test_ranges_and_axis(self):
        processed = _processed(TWO_COMPARISONS)
        result = build_volcano_points(processed, {}, Settings())
        assert result.min_fc == 0.1
        assert result.max_fc == 2.5
        assert result.max_neg_log10_p == 4.0
        assert result.axis.min_x == pytest.approx(-0.9)
        assert result.axis.max_x == pytest.approx(3.5)
        assert result.axis.min_y == 0.0
        assert result.axis.max_y == pytest.approx(5.0)

    def test_configured_axis_bounds_kept(self):
        processed = _processed(TWO_COMPARISONS)
        settings = Settings(volcano_axis=VolcanoAxis(min_x=-10.0, max_y=20.0))
        result = build_volcano_points(processed, {}, settings)
        assert result.axis.min_x == -10.0
        assert result.axis.max_y == 20.0
        assert result.axis.max_x == pytest.approx(3.5)

    def test_no_rows(self):
        processed = _processed("id\tgene\tfc\tp\n")
        result = build_volcano_points(processed, {}, Settings())
        assert result.points == []
        assert (result.min_fc, result.max_fc, result.max_neg_log10_p) == (0.0, 0.0, 0.0)
        assert result.axis.min_x == -1.0
        assert result.axis.max_y == 1.0

    def test_settings_not_modified(self):
        settings = Settings(color_map={"A": "#000000"})
        build_volcano_points(_processed(TWO_COMPARISONS), {"P1": {"S": True}}, settings)
        assert settings.color_map == {"A": "#000000"}


class TestBucketColoursAcrossPasses:
    TEXT = (
        "id\tgene\tfc\tp\tcmp\n"
        "P2\tG2\t2.5\t4\tY\n"
        "P1\tG1\t2\t3\tX\n"
    )

    def test_added_comparison_reuses_stored_quadrant_colour(self):
        first = build_volcano_points(
            _processed(self.TEXT, comparison_column="cmp", comparison_select=("X",)),
            {}, Settings(),
        )
        (x_point,) = first.points

        second = build_volcano_points(
            _processed(self.TEXT, comparison_column="cmp", comparison_select=("X", "Y")),
            {}, Settings(color_map=first.color_map),
        )
        y_point, x_again = second.points
        assert y_point.comparison == "Y"
        assert x_again.colors == x_point.colors
        assert y_point.colors == x_point.colors
        assert second.color_map[y_point.selections[0]] == x_point.colors[0]

    def test_rows_without_resolved_columns_still_plotted(self):
        processed = process_differential(
            load_tabular_text("a\tb\nx\ty\nz\tw\n"),
            DifferentialForm(primary_id_column="id", fold_change_column="fc", significance_column="p"),
        )
        result = build_volcano_points(processed, {}, Settings())
        assert [p.protein_id for p in result.points] == ["", ""]
        assert all((p.x, p.y) == (0.0, 0.0) for p in result.points)

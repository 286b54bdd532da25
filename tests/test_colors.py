from volcano_engine.colors import AllocatorState, ColorCycleAllocator, colors_in_use
from volcano_engine.config import VOLCANO_CONFIG


class TestColorCycleAllocator:
    def test_empty_in_use_cycles_palette(self, pastel):
        allocator = ColorCycleAllocator(pastel)
        names = [f"n{i}" for i in range(len(pastel) + 3)]
        assigned = allocator.assign(names, {})
        assert list(assigned.values()) == [pastel[i % len(pastel)] for i in range(len(names))]

    def test_deterministic_across_instances(self, pastel):
        names = ["x", "y", "z"]
        first = ColorCycleAllocator(pastel, in_use={pastel[1]}).assign(names, {})
        second = ColorCycleAllocator(pastel, in_use={pastel[1]}).assign(names, {})
        assert first == second

    def test_skips_colours_in_use(self):
        allocator = ColorCycleAllocator(["a", "b", "c", "d"], in_use={"a"})
        assert [allocator.next_color() for _ in range(4)] == ["b", "c", "d", "b"]

    def test_default_cursor_counts_palette_colours_in_use(self):
        allocator = ColorCycleAllocator(["a", "b", "c"], in_use={"a", "#123456"})
        assert allocator.cursor == 1

    def test_default_cursor_zero_when_palette_exhausted(self):
        allocator = ColorCycleAllocator(["a", "b"], in_use={"a", "b"})
        assert allocator.cursor == 0

    def test_all_colours_in_use_terminates_and_reuses(self):
        allocator = ColorCycleAllocator(["a", "b", "c"], in_use={"a", "b", "c"})
        colors = [allocator.next_color() for _ in range(4)]
        assert colors == ["a", "c", "b", "c"]
        assert allocator.state is AllocatorState.FORCING

    def test_first_wrap_enters_wrapped_once(self):
        allocator = ColorCycleAllocator(["a", "b"], in_use={"a", "b"})
        assert allocator.next_color() == "a"
        assert allocator.state is AllocatorState.WRAPPED_ONCE

    def test_empty_palette_returns_fallback(self):
        allocator = ColorCycleAllocator([])
        assert allocator.next_color() == VOLCANO_CONFIG["fallback_color"]
        assert allocator.assign(["a", "b"], {}) == {
            "a": VOLCANO_CONFIG["fallback_color"],
            "b": VOLCANO_CONFIG["fallback_color"],
        }

    def test_assign_skips_bound_names_and_keeps_order(self, pastel):
        allocator = ColorCycleAllocator(pastel)
        color_map = {"b": "#000000"}
        assigned = allocator.assign(["c", "b", "a", "c"], color_map)
        assert list(assigned) == ["c", "a"]
        assert assigned == {"c": pastel[0], "a": pastel[1]}
        assert color_map == {"b": "#000000"}


def test_colors_in_use_excludes_names():
    color_map = {"A": "#1", "B": "#2", "Sel": "#3"}
    assert colors_in_use(color_map, {"A", "B"}) == {"#3"}
    assert colors_in_use(color_map) == {"#1", "#2", "#3"}


class TestSingleColourPalette:
    def test_unused_colour_repeats(self):
        allocator = ColorCycleAllocator(["a"])
        assert [allocator.next_color() for _ in range(3)] == ["a", "a", "a"]
        assert allocator.state is AllocatorState.SCANNING

    def test_used_colour_is_forced(self):
        allocator = ColorCycleAllocator(["a"], in_use={"a"})
        assert allocator.cursor == 0
        assert [allocator.next_color() for _ in range(3)] == ["a", "a", "a"]
        assert allocator.state is AllocatorState.FORCING

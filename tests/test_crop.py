"""
Tests for the crop transform model in image_merge.crop.

Covers:
- Preset parsing and validation
- Composition of pending crops into persistent crops
- Sanitizing floating point drift
- Percent to pixel mapping
- The CropEditor state machine (select, move, resize, commit, reset)
"""

from dataclasses import dataclass, field

import pytest

from image_merge.crop import (
    FULL_CROP,
    INITIAL_PENDING_CROP,
    CropEditor,
    CropRect,
    Direction,
    compose,
    overlay_rect,
    parse_crop_preset,
    reset_all,
    sanitize,
    to_pixel_box,
)


@dataclass
class _Slot:
    crop: CropRect = field(default=FULL_CROP)


def _approx(crop: CropRect) -> tuple:
    return pytest.approx(crop.as_tuple())


class TestParseCropPreset:
    """The -k n,x,y,w,h option."""

    def test_valid(self) -> None:
        """Index and percent values are parsed."""
        index, crop = parse_crop_preset("2,10,20,50,60.5")
        assert index == 2
        assert crop == CropRect(10, 20, 50, 60.5)

    def test_whitespace_tolerated(self) -> None:
        """Spaces around the numbers are ignored."""
        assert parse_crop_preset("0, 0, 0, 5, 5")[1] == CropRect(0, 0, 5, 5)

    @pytest.mark.parametrize(
        ("text", "match"),
        [
            ("1,2,3", "N,x,y,w,h"),
            ("a,1,1,10,10", "integer"),
            ("0,1,1,ten,10", "integer"),
            ("1000,0,0,10,10", "range 0 - 999"),
            ("-1,0,0,10,10", "range 0 - 999"),
            ("0,-1,0,10,10", "not be negative"),
            ("0,0,0,4.9,10", "at least 5"),
            ("0,0,0,10,4", "at least 5"),
            ("0,60,0,50,10", "within the image"),
            ("0,0,60,10,50", "within the image"),
            ("0,nan,0,50,50", "finite"),
            ("0,0,0,inf,50", "finite"),
        ],
    )
    def test_invalid(self, text: str, match: str) -> None:
        """Malformed or out of range presets raise ValueError."""
        with pytest.raises(ValueError, match=match):
            parse_crop_preset(text)

    def test_full_crop_allowed(self) -> None:
        """A crop covering the whole image is valid."""
        assert parse_crop_preset("0,0,0,100,100")[1].is_full()


class TestCompose:
    """Folding a pending crop into the persistent crop."""

    def test_first_crop_on_full_image(self) -> None:
        """On an uncropped image the pending crop becomes the crop."""
        result = compose(FULL_CROP, CropRect(25, 25, 50, 50))
        assert result.as_tuple() == _approx(CropRect(25, 25, 50, 50))

    def test_repeated_crop_zooms_in(self) -> None:
        """A second centred half crop keeps a quarter of the original."""
        first = compose(FULL_CROP, INITIAL_PENDING_CROP)
        second = compose(first, INITIAL_PENDING_CROP)
        assert second.as_tuple() == _approx(CropRect(37.5, 37.5, 25, 25))

    def test_full_pending_is_identity(self) -> None:
        """Committing a full pending crop leaves the crop unchanged."""
        old = CropRect(10, 20, 30, 40)
        assert compose(old, FULL_CROP).as_tuple() == _approx(old)

    def test_composition_is_associative(self) -> None:
        """Three successive crops equal composing the last two first."""
        a = CropRect(10, 5, 80, 60)
        b = CropRect(12.5, 30, 50, 40)
        c = CropRect(0, 25.5, 75, 50)
        left = compose(compose(a, b), c)
        right = compose(a, compose(b, c))
        assert left.as_tuple() == _approx(right)

    def test_matches_absolute_pixels(self) -> None:
        """A pending crop selects the same pixels as cropping the crop."""
        width = 1000
        old = CropRect(20, 0, 50, 100)
        pending = CropRect(10, 0, 40, 100)
        old_left = width * old.x / 100
        old_w = width * old.w / 100
        expected_left = old_left + old_w * pending.x / 100
        expected_w = old_w * pending.w / 100
        result = compose(old, pending)
        assert width * result.x / 100 == pytest.approx(expected_left)
        assert width * result.w / 100 == pytest.approx(expected_w)


class TestSanitize:
    """Drift correction applied every frame."""

    def test_clamps_origin(self) -> None:
        """Origins are clamped to the [0, 98] range."""
        result = sanitize(CropRect(-1, 99, 50, 1))
        assert (result.x, result.y) == (0, 98)

    def test_pulls_far_edge_inside(self) -> None:
        """Edges reaching 99.9999 are pulled back."""
        result = sanitize(CropRect(0, 10, 100, 95))
        assert result.w == pytest.approx(99.9999)
        assert result.h == pytest.approx(89.9999)

    def test_leaves_interior_crop_alone(self) -> None:
        """Well inside the image nothing changes."""
        crop = CropRect(25, 25, 50, 50)
        assert sanitize(crop) == crop

    @pytest.mark.parametrize(
        "crop",
        [
            CropRect(),
            CropRect(-3, -0.5, 120, 100),
            CropRect(98.7, 0, 1.5, 99.99995),
            CropRect(33.25, 66.75, 66.75, 33.25),
        ],
    )
    def test_idempotent(self, crop: CropRect) -> None:
        """Sanitizing twice is the same as once."""
        once = sanitize(crop)
        assert sanitize(once) == once


class TestToPixelBox:
    """Percent crops mapped onto pixel boxes."""

    def test_centre_half(self) -> None:
        """The initial pending crop picks the central half."""
        assert to_pixel_box(INITIAL_PENDING_CROP, 200, 100) == (50, 25, 100, 50)

    def test_full(self) -> None:
        """The full crop covers the image."""
        assert to_pixel_box(FULL_CROP, 64, 48) == (0, 0, 64, 48)

    def test_round_half_even(self) -> None:
        """Halfway values round to the even neighbour."""
        assert to_pixel_box(CropRect(2.5, 3.5, 50, 50), 100, 100)[:2] == (2, 4)

    def test_minimum_one_pixel(self) -> None:
        """Tiny crops still cover one pixel."""
        _, _, w, h = to_pixel_box(CropRect(50, 50, 0.1, 0.1), 100, 100)
        assert (w, h) == (1, 1)

    def test_clipped_to_image(self) -> None:
        """The box never extends past the image."""
        left, top, w, h = to_pixel_box(CropRect(0, 0, 99.9999, 99.9999), 7, 3)
        assert left + w <= 7
        assert top + h <= 3


def test_overlay_rect() -> None:
    """The pending crop is scaled to pane pixels with truncation."""
    assert overlay_rect(200, 100, INITIAL_PENDING_CROP) == (50, 25, 100, 50)
    assert overlay_rect(99, 99, CropRect(10, 10, 10, 10)) == (9, 9, 9, 9)


class TestCropEditorSelection:
    """Entering, cycling and leaving crop mode."""

    def test_starts_idle(self) -> None:
        """A new editor is idle with the centred pending crop."""
        editor = CropEditor(3)
        assert not editor.editing
        assert editor.pending == INITIAL_PENDING_CROP

    def test_requires_images(self) -> None:
        """An editor over no images is rejected."""
        with pytest.raises(ValueError, match="image_count"):
            CropEditor(0)

    def test_select_next_cycles(self) -> None:
        """First Tab starts editing image 0; further Tabs advance."""
        editor = CropEditor(3)
        editor.select_next()
        assert (editor.editing, editor.index) == (True, 0)
        editor.select_next()
        editor.select_next()
        assert editor.index == 2
        editor.select_next()
        assert editor.index == 0

    def test_select_previous_wraps(self) -> None:
        """Shift-Tab while editing image 0 selects the last image."""
        editor = CropEditor(3)
        editor.select_previous()
        assert editor.index == 0
        editor.select_previous()
        assert editor.index == 2

    def test_idle_select_keeps_previous_index(self) -> None:
        """After cancel, Tab resumes at the previously selected image."""
        editor = CropEditor(4)
        editor.select_next()
        editor.select_next()
        assert editor.cancel() is True
        editor.select_next()
        assert (editor.editing, editor.index) == (True, 1)

    def test_select_resets_pending(self) -> None:
        """Switching images starts over with the centred pending crop."""
        editor = CropEditor(2)
        editor.select_next()
        editor.shrink()
        editor.select_next()
        assert editor.pending == INITIAL_PENDING_CROP

    def test_cancel_when_idle(self) -> None:
        """Cancel while idle reports no change."""
        assert CropEditor(1).cancel() is False


class TestCropEditorEdits:
    """Move and resize rules for the pending crop."""

    @pytest.fixture
    def editor(self) -> CropEditor:
        """Editor already editing image 0."""
        editor = CropEditor(2)
        editor.select_next()
        return editor

    def test_edits_ignored_when_idle(self) -> None:
        """No edit changes the pending crop while idle."""
        editor = CropEditor(2)
        assert editor.move(Direction.UP) is False
        assert editor.resize(Direction.UP) is False
        assert editor.shrink() is False
        assert editor.grow() is False
        assert editor.pending == INITIAL_PENDING_CROP

    @pytest.mark.parametrize(
        ("direction", "expected"),
        [
            (Direction.UP, CropRect(25, 24.5, 50, 50)),
            (Direction.DOWN, CropRect(25, 25.5, 50, 50)),
            (Direction.LEFT, CropRect(24.5, 25, 50, 50)),
            (Direction.RIGHT, CropRect(25.5, 25, 50, 50)),
        ],
    )
    def test_move(
        self, editor: CropEditor, direction: Direction, expected: CropRect,
    ) -> None:
        """Arrow keys translate by half a percent."""
        assert editor.move(direction) is True
        assert editor.pending == expected

    def test_move_stops_at_edges(self, editor: CropEditor) -> None:
        """Moving never pushes the crop outside the image."""
        editor.pending = CropRect(0.25, 0, 50, 50)
        assert editor.move(Direction.LEFT) is True
        assert editor.pending.x == 0
        assert editor.move(Direction.LEFT) is False
        assert editor.move(Direction.UP) is False
        editor.pending = CropRect(49.75, 50, 50, 50)
        assert editor.move(Direction.RIGHT) is True
        assert editor.pending.x + editor.pending.w == 100
        assert editor.move(Direction.DOWN) is False

    @pytest.mark.parametrize(
        ("direction", "expected"),
        [
            (Direction.UP, CropRect(25, 24.75, 50, 50.5)),
            (Direction.DOWN, CropRect(25, 25.25, 50, 49.5)),
            (Direction.LEFT, CropRect(25.25, 25, 49.5, 50)),
            (Direction.RIGHT, CropRect(24.75, 25, 50.5, 50)),
        ],
    )
    def test_resize_axis(
        self, editor: CropEditor, direction: Direction, expected: CropRect,
    ) -> None:
        """Shift arrows change one side about the centre."""
        assert editor.resize(direction) is True
        assert editor.pending == expected

    def test_shrink_keeps_centre(self, editor: CropEditor) -> None:
        """Minus shrinks both sides by one step around the centre."""
        editor.shrink()
        assert editor.pending == CropRect(25.25, 25.25, 49.5, 49.5)

    def test_shrink_stops_at_minimum(self, editor: CropEditor) -> None:
        """Shrinking halts once a side reaches 6 percent."""
        while editor.shrink():
            pass
        assert editor.pending.w == pytest.approx(6.0)
        assert editor.pending.h == pytest.approx(6.0)
        assert editor.resize(Direction.DOWN) is False
        assert editor.resize(Direction.LEFT) is False

    def test_grow_stops_at_image(self, editor: CropEditor) -> None:
        """Growing halts once the crop touches the image edge."""
        while editor.grow():
            pass
        assert editor.pending == CropRect(0, 0, 100, 100)
        assert editor.resize(Direction.UP) is False
        assert editor.resize(Direction.RIGHT) is False

    def test_sanitize_pending(self, editor: CropEditor) -> None:
        """Drift in the pending crop is corrected on request."""
        editor.pending = CropRect(-0.25, 0, 100.25, 100)
        editor.sanitize_pending()
        assert editor.pending.x == 0
        assert editor.pending.w == pytest.approx(99.9999)


class TestCropEditorCommitAndReset:
    """Persistent crop changes."""

    def test_commit_composes_and_exits(self) -> None:
        """Enter folds the pending crop into the selected image."""
        slots = [_Slot(), _Slot()]
        editor = CropEditor(2)
        editor.select_next()
        editor.select_next()
        assert editor.commit(slots) == 1
        assert not editor.editing
        assert slots[0].crop.is_full()
        assert slots[1].crop.as_tuple() == _approx(INITIAL_PENDING_CROP)

    def test_commit_when_idle(self) -> None:
        """Enter while idle does nothing."""
        slots = [_Slot()]
        assert CropEditor(1).commit(slots) is None
        assert slots[0].crop.is_full()

    def test_reset_selected(self) -> None:
        """r restores the selected image only while editing."""
        slots = [_Slot(CropRect(10, 10, 50, 50)), _Slot(CropRect(1, 1, 9, 9))]
        editor = CropEditor(2)
        assert editor.reset_selected(slots) is None
        editor.select_next()
        assert editor.reset_selected(slots) == 0
        assert slots[0].crop.is_full()
        assert not slots[1].crop.is_full()
        assert editor.editing
        assert editor.reset_selected(slots) is None

    def test_reset_all(self) -> None:
        """R restores every cropped image and reports which changed."""
        slots = [_Slot(CropRect(5, 5, 50, 50)), _Slot(), _Slot(
            CropRect(0, 0, 10, 10))]
        assert reset_all(slots) == [0, 2]
        assert all(s.crop.is_full() for s in slots)
        assert reset_all(slots) == []

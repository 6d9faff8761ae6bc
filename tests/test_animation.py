from __future__ import annotations

import pytest

from kscml.core.animation import AnimationContainer
from kscml.core.data_structures import Affine, Facing, animation_name
from kscml.core.errors import BoundsError, FormatError
from tests._utils.builders import anim, anim_frame, clip, element


def _container() -> AnimationContainer:
    frames = [
        anim_frame([element(0x1, 2, 0x100, (1.0, 0.0, 0.0, 1.0, 5.0, -6.0), z=3.0)], events=[5, 5, 7]),
        anim_frame([]),
    ]
    return AnimationContainer.from_bytes(anim(
        [clip("walk", frames, facing=int(Facing.RIGHT)), clip("idle", [anim_frame([])], frame_rate=40.0)],
        names=[(0x1, "body"), (0xBA4C, "hero")],
    ))


def test_clips_frames_and_elements() -> None:
    container = _container()
    assert container.version == 4
    walk = container.clips[0]
    assert walk.name == "walk"
    assert walk.facing == 1
    assert walk.bank_hash == 0xBA4C
    assert walk.frame_rate == 30.0
    assert len(walk.frames) == 2

    item = walk.frames[0].elements[0]
    assert item.symbol_hash == 0x1
    assert item.build_frame == 2
    assert item.layer_hash == 0x100
    assert item.matrix == Affine(1.0, 0.0, 0.0, 1.0, 5.0, -6.0)
    assert item.z == 3.0
    assert container.hash_table.get(0xBA4C) == "hero"
    assert container.bank_hash == 0xBA4C


def test_duplicate_events_are_dropped() -> None:
    assert _container().clips[0].frames[0].event_hashes == (5, 7)


def test_timing() -> None:
    walk, idle = _container().clips
    assert walk.frame_duration == pytest.approx(1000 / 30)
    assert walk.length_ms == pytest.approx(2000 / 30)
    assert idle.length_ms == 25.0


def test_extended_frames_repeat_last() -> None:
    walk = _container().clips[0]
    extended = walk.extended_frames()
    assert len(extended) == 3
    assert extended[-1] is walk.frames[-1]


def test_sorted_by_name() -> None:
    assert [c.name for c in _container().sorted_clips()] == ["idle", "walk"]


@pytest.mark.parametrize(
    "facing, expected",
    [
        (0, "walk"),
        (Facing.RIGHT, "walk_right"),
        (Facing.DOWNLEFT, "walk_downleft"),
        (Facing.SIDE, "walk_side"),
        (Facing.DIAGONALS, "walk_45s"),
        (Facing.CARDINALS, "walk_90s"),
        (Facing.ANY, "walk"),
        (Facing.UP | Facing.LEFT, "walk"),
    ],
)
def test_facing_suffix(facing, expected) -> None:
    assert animation_name("walk", int(facing)) == expected


def test_zero_frame_rate() -> None:
    container = AnimationContainer.from_bytes(anim([clip("still", [anim_frame([])], frame_rate=0.0)]))
    assert container.clips[0].frame_duration == 0.0
    assert container.clips[0].length_ms == 0.0


def test_wrong_magic() -> None:
    with pytest.raises(FormatError):
        AnimationContainer.from_bytes(b"BILD" + anim([])[4:])


def test_truncated_clip() -> None:
    data = anim([clip("walk", [anim_frame([element(0x1)])])])
    with pytest.raises(BoundsError):
        AnimationContainer.from_bytes(data[:30])


def test_snapshot() -> None:
    snapshot = _container().to_dict()
    assert snapshot["clips"][0]["frames"][0]["events"] == [5, 7]
    assert snapshot["clips"][0]["frames"][0]["elements"][0]["layer_name_hash"] == 0x100

"""
Tests for andromeda.storage.weighting.

This test suite covers:
- Weights summing to one and staying in (0, 1]
- Strict monotonicity above the 1 MiB floor
- Lifting of segments that score zero
- Clamping of sub-MiB segments
- Running start offsets and render payloads
"""

import math
import random

import pytest

from andromeda.domain import Free, Occupied, PartitionRecord
from andromeda.storage.layout import reconstruct
from andromeda.storage.weighting import (
    MIB,
    SCORE_FLOOR,
    ring_sections,
    size_score,
    weight,
)

GIB = 2**30
TIB = 2**40


class TestSizeScore:
    """Tests for the compressive size transform."""

    def test_score_is_zero_at_one_mib(self):
        assert size_score(MIB) == 0.0

    def test_sub_mib_sizes_clamp_to_floor(self):
        """Test that anything below 1 MiB scores like 1 MiB."""
        assert size_score(1) == size_score(MIB)
        assert size_score(512) == size_score(MIB)
        assert size_score(MIB - 1) == size_score(MIB)

    def test_score_follows_log_base_128(self):
        """Test the transform at 128 MiB where log_128 is exactly 1."""
        assert size_score(128 * MIB) == pytest.approx(1.0)
        assert size_score(2 * MIB) == pytest.approx(SCORE_FLOOR)

    @pytest.mark.parametrize(
        "smaller,larger",
        [
            (MIB, MIB + MIB // 8),
            (MIB, 2 * MIB),
            (100 * MIB, 512 * MIB),
            (GIB, 2 * GIB),
            (TIB, 4 * TIB),
        ],
    )
    def test_score_strictly_monotonic_above_floor(self, smaller, larger):
        assert size_score(larger) > size_score(smaller)


class TestWeight:
    """Tests for weight()."""

    def test_empty_layout(self):
        assert weight(()) == []

    def test_single_segment_gets_everything(self):
        weighted = weight((Free(0, 10 * GIB),))

        assert len(weighted) == 1
        assert weighted[0].weight == pytest.approx(1.0)
        assert weighted[0].start == 0.0

    def test_weights_sum_to_one(self, sample_drive):
        weighted = weight(sample_drive.layout)

        assert abs(math.fsum(item.weight for item in weighted) - 1.0) < 1e-9

    def test_weights_sum_to_one_for_generated_layouts(self):
        rng = random.Random(7)
        for _ in range(100):
            drive_size = rng.randint(MIB, 8 * TIB)
            cursor = 0
            records = []
            for _ in range(rng.randint(0, 12)):
                offset = cursor + rng.choice([0, 400, 4096, rng.randint(0, 50 * GIB)])
                if offset >= drive_size:
                    break
                size = rng.randint(1, min(drive_size - offset, TIB))
                records.append(PartitionRecord(offset=offset, size=size))
                cursor = offset + size

            weighted = weight(reconstruct(drive_size, records))

            assert abs(math.fsum(item.weight for item in weighted) - 1.0) < 1e-9
            assert all(0.0 < item.weight <= 1.0 for item in weighted)

    def test_order_and_index_follow_layout(self, sample_drive):
        weighted = weight(sample_drive.layout)

        assert [item.index for item in weighted] == list(range(len(sample_drive.layout)))
        assert [item.segment for item in weighted] == list(sample_drive.layout)

    def test_start_is_running_sum(self, sample_drive):
        """Test that arcs can be laid out by accumulation without overlap."""
        weighted = weight(sample_drive.layout)

        running = 0.0
        for item in weighted:
            assert item.start == pytest.approx(running)
            running += item.weight
        assert weighted[-1].end == pytest.approx(1.0)

    def test_larger_segment_gets_larger_weight(self):
        small = PartitionRecord(offset=0, size=100 * MIB)
        large = PartitionRecord(offset=100 * MIB, size=4 * TIB)
        layout = reconstruct(100 * MIB + 4 * TIB, [small, large])

        weighted = weight(layout)

        assert weighted[1].weight > weighted[0].weight

    def test_small_partition_stays_visible(self):
        """Test that a 100 MiB partition next to 4 TiB is not a sliver."""
        small = PartitionRecord(offset=0, size=100 * MIB)
        large = PartitionRecord(offset=100 * MIB, size=4 * TIB)
        layout = reconstruct(100 * MIB + 4 * TIB, [small, large])

        weighted = weight(layout)

        linear_share = (100 * MIB) / (100 * MIB + 4 * TIB)
        assert weighted[0].weight > 100 * linear_share

    def test_weights_are_plain_shares_above_one_mib(self):
        """Test that no lift is applied when every segment exceeds 1 MiB."""
        parts = [
            PartitionRecord(offset=2 * MIB, size=512 * MIB),
            PartitionRecord(offset=514 * MIB, size=16 * GIB),
        ]
        layout = reconstruct(32 * GIB, parts)
        scores = [size_score(segment.size) for segment in layout]
        total = math.fsum(scores)

        weighted = weight(layout)

        assert [item.weight for item in weighted] == pytest.approx(
            [score / total for score in scores]
        )

    def test_one_mib_segment_lifted_below_smallest_score(self):
        parts = [
            PartitionRecord(offset=0, size=MIB),
            PartitionRecord(offset=MIB, size=2 * MIB),
            PartitionRecord(offset=3 * MIB, size=GIB),
        ]
        weighted = weight(reconstruct(3 * MIB + GIB, parts))

        assert 0 < weighted[0].weight < weighted[1].weight < weighted[2].weight
        assert weighted[0].weight == pytest.approx(weighted[1].weight / 2)

    def test_all_small_segments_share_equally(self):
        parts = [PartitionRecord(offset=index * MIB, size=MIB) for index in range(4)]

        weighted = weight(reconstruct(4 * MIB, parts))

        assert [item.weight for item in weighted] == pytest.approx([0.25] * 4)

    def test_tiny_segments_have_positive_weight(self):
        """Test that sub-MiB segments neither vanish nor flip sign."""
        parts = [
            PartitionRecord(offset=0, size=1024),
            PartitionRecord(offset=1024, size=10 * GIB),
        ]
        weighted = weight(reconstruct(1024 + 10 * GIB, parts))

        assert weighted[0].weight > 0
        assert weighted[0].weight < weighted[1].weight

    def test_selection_does_not_change_weights(self, sample_drive):
        weighted = weight(sample_drive.layout)

        unselected = ring_sections(weighted)
        selected = ring_sections(weighted, selected_index=1)

        assert unselected["sections"] == selected["sections"]


class TestRingSections:
    """Tests for the render consumer payload."""

    def test_payload_shape(self, sample_drive):
        weighted = weight(sample_drive.layout)

        payload = ring_sections(weighted, selected_index=2)

        assert payload["selected_index"] == 2
        assert [section["index"] for section in payload["sections"]] == [0, 1, 2, 3]
        assert [section["is_occupied"] for section in payload["sections"]] == [
            False,
            True,
            True,
            False,
        ]
        assert set(payload["sections"][0]) == {"index", "weight", "is_occupied"}

    def test_no_selection(self):
        payload = ring_sections(weight((Occupied(PartitionRecord(0, GIB)),)))

        assert payload["selected_index"] is None
        assert payload["sections"][0]["weight"] == pytest.approx(1.0)

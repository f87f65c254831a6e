"""Tests for the growable, self-compacting frame buffer."""

import random

import numpy as np
import pytest

from tests.base.base_test import BaseTest
from wavscan.utils.frame_buffer import ElasticFrameBuffer


class TestElasticFrameBuffer(BaseTest):
    """FIFO behaviour, growth and compaction."""

    def test_empty_buffer(self):
        buffer = ElasticFrameBuffer()
        dest = np.zeros(4, dtype=np.int64)

        assert buffer.available() == 0
        assert buffer.read() is None
        assert buffer.read_into(dest) == 0

    def test_push_and_read_single_values(self):
        buffer = ElasticFrameBuffer()
        for value in (5, -7, 9):
            buffer.push(value)

        assert buffer.available() == 3
        assert [buffer.read(), buffer.read(), buffer.read()] == [5, -7, 9]
        assert buffer.available() == 0

    def test_read_into_bounded_by_destination(self):
        buffer = ElasticFrameBuffer()
        buffer.push_all(np.arange(10))
        dest = np.zeros(4, dtype=np.int64)

        assert buffer.read_into(dest) == 4
        assert dest.tolist() == [0, 1, 2, 3]
        assert buffer.available() == 6

    def test_read_into_bounded_by_available(self):
        buffer = ElasticFrameBuffer()
        buffer.push_all(np.array([1, 2]))
        dest = np.full(5, -1, dtype=np.int64)

        assert buffer.read_into(dest) == 2
        assert dest.tolist() == [1, 2, -1, -1, -1]

    def test_push_all_with_count_takes_prefix(self):
        buffer = ElasticFrameBuffer()
        buffer.push_all(np.array([1, 2, 3, 4]), count=2)

        assert buffer.available() == 2
        assert buffer.read() == 1
        assert buffer.read() == 2

    def test_read_into_after_single_reads_compacts(self):
        buffer = ElasticFrameBuffer(capacity=4)
        buffer.push_all(np.array([1, 2, 3, 4]))
        buffer.read()
        buffer.read()
        dest = np.zeros(4, dtype=np.int64)

        assert buffer.read_into(dest) == 2
        assert dest[:2].tolist() == [3, 4]

    def test_growth_doubles_and_preserves_data(self):
        buffer = ElasticFrameBuffer(capacity=4)
        buffer.push_all(np.array([1, 2, 3]))
        buffer.push_all(np.arange(100, 110))

        assert buffer.capacity == 16
        dest = np.zeros(13, dtype=np.int64)
        assert buffer.read_into(dest) == 13
        assert dest.tolist() == [1, 2, 3] + list(range(100, 110))

    def test_push_reuses_space_freed_by_reads(self):
        buffer = ElasticFrameBuffer(capacity=4)
        buffer.push_all(np.array([1, 2, 3, 4]))
        buffer.read()
        buffer.push(5)

        assert buffer.capacity == 4
        assert [buffer.read() for _ in range(4)] == [2, 3, 4, 5]

    def test_large_values_survive(self):
        buffer = ElasticFrameBuffer()
        buffer.push(-(2 ** 31))
        buffer.push(2 ** 31 - 1)

        assert buffer.read() == -(2 ** 31)
        assert buffer.read() == 2 ** 31 - 1

    def test_invalid_capacity(self):
        with pytest.raises(ValueError, match="capacity must be positive"):
            ElasticFrameBuffer(capacity=0)

    def test_interleaved_operations_preserve_fifo_order(self):
        """Random push/read sequences return values in push order."""
        rng = random.Random(1234)
        buffer = ElasticFrameBuffer(capacity=2)
        expected = []
        received = []
        next_value = 0

        for _ in range(500):
            action = rng.choice(("push", "push_all", "read", "read_into"))
            if action == "push":
                buffer.push(next_value)
                expected.append(next_value)
                next_value += 1
            elif action == "push_all":
                size = rng.randint(0, 20)
                values = np.arange(next_value, next_value + size)
                buffer.push_all(values)
                expected.extend(values.tolist())
                next_value += size
            elif action == "read":
                value = buffer.read()
                if value is not None:
                    received.append(value)
            else:
                dest = np.zeros(rng.randint(1, 15), dtype=np.int64)
                count = buffer.read_into(dest)
                received.extend(dest[:count].tolist())

            assert buffer.available() == len(expected) - len(received)

        assert received == expected[:len(received)]

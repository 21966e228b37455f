import pytest

from gaitimu.core.ringbuffer import RingBuffer


def test_append_returns_evicted_item_when_full() -> None:
    buf: RingBuffer[int] = RingBuffer(3)
    assert [buf.append(i) for i in range(3)] == [None, None, None]
    assert len(buf) == buf.capacity
    assert buf.append(3) == 0
    assert buf.append(4) == 1
    assert len(buf) == 3


def test_clear_resets_contents() -> None:
    buf: RingBuffer[int] = RingBuffer(2)
    buf.append(7)
    buf.append(8)
    buf.clear()
    assert len(buf) == 0
    assert buf.append(9) is None
    assert buf.append(10) is None
    assert buf.append(11) == 9


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError):
        RingBuffer(0)

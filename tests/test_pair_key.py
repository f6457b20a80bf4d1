import pytest

from logic_grid_mystery.puzzle import pair_key


def test_encode_is_order_independent():
    assert pair_key.encode(0, 2, 1, 3) == pair_key.encode(1, 3, 0, 2)


def test_encode_format():
    assert pair_key.encode(1, 3, 0, 2) == "c0i2|c1i3"
    assert pair_key.encode(2, 0, 1, 1) == "c1i1|c2i0"


def test_decode_returns_canonical_order():
    assert pair_key.decode(pair_key.encode(2, 1, 0, 3)) == (0, 3, 2, 1)


def test_decode_survives_every_grid_cell():
    seen = set()
    for c1, c2 in ((0, 1), (0, 2), (1, 2)):
        for i1 in range(4):
            for i2 in range(4):
                key = pair_key.encode(c2, i2, c1, i1)
                assert pair_key.decode(key) == (c1, i1, c2, i2)
                seen.add(key)
    assert len(seen) == 48


def test_decode_rejects_garbage():
    with pytest.raises(ValueError):
        pair_key.decode("not-a-key")

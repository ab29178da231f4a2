import pytest

from r1cs_core.bigarray import MemorySequence, PagedSequence, new_sequence


def test_policy_switches_on_threshold():
    assert isinstance(new_sequence(100, threshold=100), MemorySequence)
    seq = new_sequence(101, threshold=100, page_size=8)
    assert isinstance(seq, PagedSequence)
    assert seq.page_size == 8
    seq.close()


def test_paged_sequence_spills_and_reloads():
    seq = PagedSequence(page_size=4, max_resident_pages=1)
    for i in range(10):
        seq.append({i: i * i})
    seq.extend([{10: 100}])

    assert len(seq) == 11
    assert seq[0] == {0: 0}
    assert seq[5] == {5: 25}
    assert seq[1] == {1: 1}  # page 0 evicted by page 1 and reloaded
    assert seq[-1] == {10: 100}
    assert list(seq) == [{i: i * i} for i in range(11)]
    with pytest.raises(IndexError):
        seq[11]
    assert "pages=2" in repr(seq)
    seq.close()


def test_paged_sequence_compares_like_a_list():
    seq = PagedSequence(page_size=3)
    seq.extend(range(7))
    assert seq == list(range(7))
    assert list(range(7)) == seq
    assert seq != list(range(6))
    other = PagedSequence(page_size=2)
    other.extend(range(7))
    assert seq == other
    seq.close()
    other.close()


def test_paged_sequence_without_cache():
    seq = PagedSequence(page_size=2, max_resident_pages=0)
    seq.extend("abcde")
    assert "".join(seq) == "abcde"
    assert seq[2] == "c"
    seq.close()


def test_rejects_empty_pages():
    with pytest.raises(ValueError):
        PagedSequence(page_size=0)

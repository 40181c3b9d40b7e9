import random

import pytest

from readsplit.pipeline.errors import ConfigError
from readsplit.pipeline.matching import bounded_distance, compile_pattern, match, match_all
from readsplit.pipeline.types import Occurrence

MARKER = "ACGTACGTAC"


def test_match_exact_occurrence():
    pattern = compile_pattern("m", MARKER)
    read = "TTTTT" + MARKER + "TTTTT"
    assert match(pattern, read, 0) == [Occurrence(5, 14, 0)]


def test_match_reports_every_exact_occurrence_in_order():
    pattern = compile_pattern("m", MARKER)
    read = MARKER + "TTTTT" + MARKER
    assert match(pattern, read, 0) == [Occurrence(0, 9, 0), Occurrence(15, 24, 0)]


def test_match_with_substitution():
    pattern = compile_pattern("m", MARKER)
    # position 4 of the marker is A -> T
    read = "TTTTT" + "ACGTTCGTAC" + "TTTTT"

    assert match(pattern, read, 0) == []

    occurrences = match(pattern, read, 1)
    assert Occurrence(5, 14, 1) in occurrences
    assert all(o.distance <= 1 for o in occurrences)


def test_match_is_case_insensitive():
    pattern = compile_pattern("m", MARKER.lower())
    assert pattern.sequence == MARKER
    assert match(pattern, "ttttt" + MARKER.lower(), 0) == [Occurrence(5, 14, 0)]


def test_match_no_occurrence():
    pattern = compile_pattern("m", MARKER)
    assert match(pattern, "T" * 40, 1) == []


def test_match_read_shorter_than_marker():
    pattern = compile_pattern("m", MARKER)
    assert match(pattern, "ACG", 0) == []


def test_distance_is_bounded_by_marker_length():
    pattern = compile_pattern("m", "ACG")
    assert bounded_distance(pattern, 10) == 2
    assert bounded_distance(pattern, 1) == 1
    for occurrence in match(pattern, "TTTTTTTT", 10):
        assert occurrence.end >= occurrence.start


def test_negative_distance_is_rejected():
    with pytest.raises(ConfigError):
        match(compile_pattern("m", MARKER), MARKER, -1)


@pytest.mark.parametrize("sequence", ["", "   ", "ACGT-ACGT", "ACGZ"])
def test_compile_pattern_rejects_bad_markers(sequence):
    with pytest.raises(ConfigError):
        compile_pattern("bad", sequence)


def test_match_all_keeps_pattern_order():
    patterns = [compile_pattern("a", "AAAAAAAA"), compile_pattern("c", "CCCCCCCC")]
    read = "CCCCCCCC" + "GTGT" + "AAAAAAAA"
    assert match_all(patterns, read, 0) == [[Occurrence(12, 19, 0)], [Occurrence(0, 7, 0)]]


def _semiglobal_distance(pattern, read):
    # lowest edit distance of pattern against any substring of read
    previous = list(range(len(pattern) + 1))
    best = previous[-1]
    for base in read:
        current = [0]
        for i, symbol in enumerate(pattern, start=1):
            current.append(min(
                previous[i] + 1,
                current[i - 1] + 1,
                previous[i - 1] + (symbol != base),
            ))
        best = min(best, current[-1])
        previous = current
    return best


def _edit_distance(a, b):
    previous = list(range(len(b) + 1))
    for i, x in enumerate(a, start=1):
        current = [i]
        for j, y in enumerate(b, start=1):
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + (x != y)))
        previous = current
    return previous[-1]


def test_match_reports_lowest_distance():
    pattern = compile_pattern("m", "GTTATGCG")
    occurrences = match(pattern, "ATAAGCCCGGTTCACTACG", 4)
    assert min(o.distance for o in occurrences) == 3


def test_match_agrees_with_edit_distance_on_random_reads():
    rng = random.Random(11)
    for _ in range(400):
        marker = "".join(rng.choice("ACGT") for _ in range(rng.randint(4, 10)))
        read = "".join(rng.choice("ACGT") for _ in range(rng.randint(0, 25)))
        pattern = compile_pattern("m", marker)
        budget = rng.randint(0, 4)
        k = bounded_distance(pattern, budget)

        occurrences = match(pattern, read, budget)
        expected = _semiglobal_distance(marker, read)
        if expected > k:
            assert occurrences == []
            continue
        assert min(o.distance for o in occurrences) == expected
        for o in occurrences:
            assert o.distance <= k
            assert o.distance >= _edit_distance(marker, read[o.start:o.end + 1])

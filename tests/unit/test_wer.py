"""tests/unit/test_wer.py — WER engine: normalization, alignment, counts, edge cases."""
import math

import pytest

from werbench.wer import EditOp, align, compute_wer, normalize_text, tokenize

PAIRS = [
    ("the quick brown fox", "the quick brown fox"),
    ("the quick brown fox", "the quick brown"),
    ("the quick brown fox", "the quick brown fox jumps"),
    ("the cat sat", "the bat sat"),
    ("a b", "c"),
    ("a b", "b a"),
    ("one two three four five", "one too three for five six"),
    ("she sells sea shells", "he sells shells by the sea"),
    ("", "hello world"),
    ("hello world", ""),
    ("", ""),
    ("x y z", "a b c d e f"),
]


# ─── Normalization ───────────────────────────────────────────────────────────

class TestNormalization:

    def test_lowercase_and_punctuation(self):
        assert normalize_text("Hello, World!") == "hello world"

    def test_whitespace_collapsed_and_trimmed(self):
        assert normalize_text("  the \t quick\n\nbrown   fox  ") == "the quick brown fox"

    def test_underscore_is_stripped(self):
        assert normalize_text("snake_case") == "snakecase"

    def test_unicode_letters_kept(self):
        assert tokenize("Café NAÏVE") == ("café", "naïve")

    def test_digits_kept(self):
        assert tokenize("Room 101.") == ("room", "101")

    def test_empty_gives_empty_sequence(self):
        assert tokenize("") == ()

    def test_punctuation_only_gives_empty_sequence(self):
        """Never a one-element sequence holding an empty token."""
        assert tokenize("  ...!?  ") == ()

    def test_idempotent(self):
        text = "  Well -- THAT's   odd, isn't it?! "
        assert normalize_text(normalize_text(text)) == normalize_text(text)


# ─── Concrete scenarios ──────────────────────────────────────────────────────

class TestScenarios:

    def test_identical(self):
        r = compute_wer("the quick brown fox", "the quick brown fox")
        assert r.wer == 0
        assert r.distance == 0
        assert (r.substitutions, r.deletions, r.insertions) == (0, 0, 0)

    def test_one_deletion(self):
        r = compute_wer("the quick brown fox", "the quick brown")
        assert r.distance == 1
        assert r.deletions == 1
        assert r.substitutions == 0
        assert r.insertions == 0
        assert r.wer == 0.25

    def test_one_insertion(self):
        r = compute_wer("the quick brown fox", "the quick brown fox jumps")
        assert r.distance == 1
        assert r.insertions == 1
        assert r.substitutions == 0
        assert r.deletions == 0
        assert r.wer == 0.25

    def test_one_substitution(self):
        r = compute_wer("the cat sat", "the bat sat")
        assert r.distance == 1
        assert r.substitutions == 1
        assert r.wer == pytest.approx(1 / 3)

    def test_empty_vs_empty(self):
        r = compute_wer("", "")
        assert r.wer == 0
        assert (r.distance, r.substitutions, r.deletions, r.insertions) == (0, 0, 0, 0)
        assert r.is_defined

    def test_empty_reference_is_undefined(self):
        r = compute_wer("", "hello world")
        assert r.insertions == 2
        assert r.distance == 2
        assert math.isinf(r.wer)
        assert not r.is_defined
        assert r.wer != 0

    def test_empty_hypothesis_is_all_deletions(self):
        r = compute_wer("hello big world", "")
        assert r.deletions == 3
        assert r.distance == 3
        assert r.wer == 1.0

    def test_insertions_can_push_wer_above_one(self):
        r = compute_wer("hi", "oh hi there you")
        assert r.insertions == 3
        assert r.wer == 3.0

    def test_case_punctuation_whitespace_ignored(self):
        r = compute_wer("The quick, brown fox!", "the   QUICK brown fox")
        assert r.distance == 0
        assert r.wer == 0

    def test_word_counts_and_hits(self):
        r = compute_wer("the cat sat down", "the bat sat")
        assert r.reference_words == 4
        assert r.hypothesis_words == 3
        assert r.hits == 2


# ─── Alignment / tie-break ───────────────────────────────────────────────────

class TestAlignment:

    def test_reading_order(self):
        ops = align(("the", "cat", "sat"), ("the", "bat", "sat"))
        assert [s.op for s in ops] == [EditOp.MATCH, EditOp.SUBSTITUTION, EditOp.MATCH]
        assert (ops[1].ref_word, ops[1].hyp_word) == ("cat", "bat")
        assert (ops[1].ref_index, ops[1].hyp_index) == (1, 1)

    def test_substitution_preferred_over_insertion_and_deletion(self):
        """'a b' vs 'b a' aligns as two substitutions, not delete + insert."""
        ops = align(("a", "b"), ("b", "a"))
        assert [s.op for s in ops] == [EditOp.SUBSTITUTION, EditOp.SUBSTITUTION]

    def test_diagonal_taken_at_end_of_texts(self):
        ops = align(("a", "b"), ("c",))
        assert [s.op for s in ops] == [EditOp.DELETION, EditOp.SUBSTITUTION]
        assert ops[0].hyp_index is None
        assert ops[1].ref_word == "b" and ops[1].hyp_word == "c"

    def test_deletion_preferred_over_insertion(self):
        """
        'a c a' vs 'c a c': at the last cell the diagonal costs 3 while
        deletion and insertion both cost 2; deletion wins the tie.
        """
        ops = align(("a", "c", "a"), ("c", "a", "c"))
        assert [s.op for s in ops] == [
            EditOp.INSERTION, EditOp.MATCH, EditOp.MATCH, EditOp.DELETION,
        ]
        assert (ops[-1].ref_index, ops[-1].ref_word) == (2, "a")
        assert (ops[0].hyp_index, ops[0].hyp_word) == (0, "c")
        r = compute_wer("a c a", "c a c")
        assert (r.substitutions, r.deletions, r.insertions) == (0, 1, 1)

    def test_insertion_has_no_reference_side(self):
        ops = align((), ("x",))
        assert len(ops) == 1
        step = ops[0]
        assert step.op is EditOp.INSERTION
        assert step.ref_index is None and step.ref_word is None
        assert step.hyp_word == "x"

    def test_empty_both(self):
        assert align((), ()) == []

    def test_deterministic(self):
        ref, hyp = PAIRS[7]
        assert compute_wer(ref, hyp) == compute_wer(ref, hyp)


# ─── Properties ──────────────────────────────────────────────────────────────

class TestProperties:

    @pytest.mark.parametrize("ref,hyp", PAIRS)
    def test_counts_sum_to_distance(self, ref, hyp):
        r = compute_wer(ref, hyp)
        assert r.substitutions + r.deletions + r.insertions == r.distance

    @pytest.mark.parametrize("ref,hyp", PAIRS)
    def test_error_steps_equal_distance(self, ref, hyp):
        steps = align(tokenize(ref), tokenize(hyp))
        assert sum(1 for s in steps if s.is_error) == compute_wer(ref, hyp).distance

    @pytest.mark.parametrize("ref,hyp", PAIRS)
    def test_alignment_covers_both_sequences(self, ref, hyp):
        steps = align(tokenize(ref), tokenize(hyp))
        assert [s.ref_word for s in steps if s.ref_index is not None] == list(tokenize(ref))
        assert [s.hyp_word for s in steps if s.hyp_index is not None] == list(tokenize(hyp))

    @pytest.mark.parametrize("text", [p[0] for p in PAIRS] + ["Hello, hello... HELLO"])
    def test_self_comparison_is_zero(self, text):
        r = compute_wer(text, text.upper() + "  ")
        assert r.distance == 0
        assert r.wer == 0

    @pytest.mark.parametrize("ref,hyp", PAIRS)
    def test_distance_symmetric(self, ref, hyp):
        assert compute_wer(ref, hyp).distance == compute_wer(hyp, ref).distance

    @pytest.mark.parametrize("ref,hyp", PAIRS)
    def test_deletion_insertion_balance_flips(self, ref, hyp):
        fwd, rev = compute_wer(ref, hyp), compute_wer(hyp, ref)
        assert fwd.deletions - fwd.insertions == len(tokenize(ref)) - len(tokenize(hyp))
        assert rev.deletions - rev.insertions == -(fwd.deletions - fwd.insertions)

    def test_deletions_become_insertions_when_reversed(self):
        fwd = compute_wer("the quick brown fox", "the quick brown")
        rev = compute_wer("the quick brown", "the quick brown fox")
        assert fwd.deletions == rev.insertions == 1
        assert fwd.insertions == rev.deletions == 0

    @pytest.mark.parametrize("ref,hyp", PAIRS)
    def test_appending_word_adds_at_most_one(self, ref, hyp):
        before = compute_wer(ref, hyp).distance
        after = compute_wer(ref, hyp + " zzzunmatched").distance
        assert before <= after <= before + 1

    @pytest.mark.parametrize("ref,hyp", [
        ("The Cat, sat!", "the bat   SAT"),
        ("  Hello -- world ", "hello, World."),
        ("it's a_test", "its a test"),
    ])
    def test_prenormalized_inputs_give_same_result(self, ref, hyp):
        assert compute_wer(normalize_text(ref), normalize_text(hyp)) == compute_wer(ref, hyp)


# ─── Serialization ───────────────────────────────────────────────────────────

class TestWerResultDict:

    def test_defined(self):
        d = compute_wer("the cat sat", "the bat sat").to_dict()
        assert d["wer"] == pytest.approx(1 / 3)
        assert d["substitutions"] == 1
        assert d["hits"] == 2

    def test_undefined_wer_is_none(self):
        d = compute_wer("", "hello").to_dict()
        assert d["wer"] is None
        assert d["insertions"] == 1


# ─── Cross-check ─────────────────────────────────────────────────────────────

class TestAgainstJiwer:
    """Edit distance and WER agree with jiwer on normalized, non-empty text."""

    @pytest.mark.parametrize("ref,hyp", [p for p in PAIRS if p[0] and p[1]])
    def test_matches_jiwer(self, ref, hyp):
        jiwer = pytest.importorskip("jiwer")
        ref_n, hyp_n = normalize_text(ref), normalize_text(hyp)
        ours = compute_wer(ref, hyp)
        out = jiwer.process_words(ref_n, hyp_n)
        assert ours.distance == out.substitutions + out.deletions + out.insertions
        assert ours.wer == pytest.approx(jiwer.wer(ref_n, hyp_n))

import unittest

from hypothesis import given, settings
from hypothesis import strategies as st
from hypothesis.stateful import rule, invariant, RuleBasedStateMachine, Bundle

import rdn

from rdn.types import BigInt, Date, TimeOnly, Duration, RegExp, Object, Map, Set, \
    values_equal, MIN_MILLIS, MAX_MILLIS

texts = st.text(st.characters(exclude_categories=('Cs',)))

scalars = st.one_of(
    st.none(),
    st.booleans(),
    st.floats(),
    texts,
    st.integers().map(BigInt),
    st.integers(MIN_MILLIS, MAX_MILLIS).map(Date),
    st.floats(MIN_MILLIS, MAX_MILLIS).map(Date),
    st.builds(TimeOnly, st.integers(0, 23), st.integers(0, 59), st.integers(0, 59), st.integers(0, 999)),
    st.sampled_from(["P1D", "PT1H30M", "P1Y2M3DT4H5M6.5S", "P0D"]).map(Duration),
    st.builds(RegExp, st.text(alphabet="ab/.*+?[]()\n"), st.sampled_from(["", "g", "gi", "dgimsuvy"])),
    st.binary(),
)


def containers(children):
    return st.one_of(
        st.lists(children, max_size=4),
        st.lists(st.tuples(texts, children), max_size=4).map(Object),
        st.lists(st.tuples(children, children), max_size=4).map(Map),
        st.lists(children, max_size=4).map(Set),
    )


values = st.recursive(scalars, containers, max_leaves=20)


class RoundTripTest(unittest.TestCase):
    @settings(deadline=None)
    @given(values)
    def test_round_trip(self, value):
        self.assertTrue(values_equal(rdn.parse(rdn.dump(value)), value))

    @settings(deadline=None)
    @given(values)
    def test_idempotent(self, value):
        text = rdn.dump(value)
        self.assertEqual(rdn.dump(rdn.parse(text)), text)

    @given(st.floats())
    def test_numbers(self, x):
        self.assertTrue(values_equal(rdn.parse(rdn.dump(x)), x))

    @given(texts)
    def test_strings(self, s):
        self.assertEqual(rdn.parse(rdn.dump(s)), s)

    @given(st.binary())
    def test_utf8(self, data):
        text = rdn.dump([data, "é"])
        self.assertTrue(values_equal(rdn.parse(text.encode('utf-8')), [data, "é"]))


class DocumentMachine(RuleBasedStateMachine):
    """Grows a document out of earlier pieces, checking each one reads back"""
    pieces = Bundle('pieces')

    def __init__(self):
        RuleBasedStateMachine.__init__(self)
        self.made = []

    @rule(target=pieces, value=scalars)
    def scalar(self, value):
        self.made.append(value)
        return value

    @rule(target=pieces, items=st.lists(pieces, max_size=3))
    def array_of(self, items):
        self.made.append(items)
        return items

    @rule(target=pieces, key=texts, value=pieces)
    def object_of(self, key, value):
        out = Object([(key, value)])
        self.made.append(out)
        return out

    @rule(target=pieces, key=pieces, value=pieces)
    def map_of(self, key, value):
        out = Map([(key, value)])
        self.made.append(out)
        return out

    @rule(target=pieces, a=pieces, b=pieces)
    def set_of(self, a, b):
        out = Set([a, b])
        self.made.append(out)
        return out

    @invariant()
    def reads_back(self):
        if self.made:
            value = self.made[-1]
            text = rdn.dump(value)
            assert values_equal(rdn.parse(text), value)
            assert rdn.dump(rdn.parse(text)) == text


DocumentMachine.TestCase.settings = settings(max_examples=50, stateful_step_count=10, deadline=None)
DocumentTest = DocumentMachine.TestCase

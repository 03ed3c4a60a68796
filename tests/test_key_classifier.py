"""
Tests for the key classifier
"""

from relgraph.discover.key_classifier import KeyClassifier
from relgraph.discover.pass_statistics import PassStatistics
from relgraph.model.emitter import FactEmitter
from relgraph.model.facts import CompoundKeyFact, FactKind, KeyStrengthFact, SingleKeyFact

FLIGHT = {"flight": [("airline_code", "text"), ("flight_number", "integer"), ("origin", "text")]}


def classifier_for(gateway, settings):
    emitter = FactEmitter()
    return KeyClassifier(PassStatistics(gateway), emitter, settings), emitter


class TestKeyRanking:
    """Test strong/weak ranking of compound key pairs"""

    def setup_method(self):
        self.classifier = KeyClassifier(None, FactEmitter())

    def test_lower_maximum_is_strong(self):
        assert self.classifier.rank("a", "b", 12, 40) == ("a", "b")
        assert self.classifier.rank("a", "b", 40, 12) == ("b", "a")

    def test_below_threshold(self):
        """Both sides must reach the threshold"""
        assert self.classifier.rank("a", "b", 9, 40) is None
        assert self.classifier.rank("a", "b", 40, 9) is None
        assert self.classifier.rank("a", "b", 10, 11) == ("a", "b")

    def test_tie_is_unranked(self):
        assert self.classifier.rank("a", "b", 20, 20) is None


class TestKeyClassifier:
    """Test key facts for declared primary keys"""

    def test_no_key(self, scripted_gateway, settings):
        classifier, emitter = classifier_for(scripted_gateway(FLIGHT), settings)
        assert classifier.classify("flight", []) == []
        assert len(emitter) == 0

    def test_single_key(self, scripted_gateway, settings):
        classifier, emitter = classifier_for(scripted_gateway(FLIGHT), settings)

        facts = classifier.classify("flight", ["flight_number"])

        assert facts == [SingleKeyFact(entity="flight", column="flight_number")]
        assert emitter.facts == facts

    def test_compound_key_with_strength(self, scripted_gateway, settings):
        """airline_code -> 12 flight numbers, flight_number -> 40 airlines"""
        gateway = scripted_gateway(FLIGHT, grouped={
            ("flight", "airline_code", "flight_number"): 12,
            ("flight", "flight_number", "airline_code"): 40,
        })
        classifier, emitter = classifier_for(gateway, settings)

        facts = classifier.classify("flight", ["airline_code", "flight_number"])

        assert facts == [
            CompoundKeyFact(entity="flight", first="airline_code", second="flight_number"),
            KeyStrengthFact(
                entity="flight", first="airline_code", second="flight_number",
                strong="airline_code", weak="flight_number",
            ),
        ]
        assert emitter.facts == facts

    def test_compound_key_below_threshold(self, scripted_gateway, settings):
        gateway = scripted_gateway(FLIGHT, grouped={
            ("flight", "airline_code", "flight_number"): 9,
            ("flight", "flight_number", "airline_code"): 40,
        })
        classifier, _ = classifier_for(gateway, settings)

        facts = classifier.classify("flight", ["airline_code", "flight_number"])

        assert [fact.kind for fact in facts] == [FactKind.COMPOUND_KEY]

    def test_three_column_key_is_analysed_pairwise(self, scripted_gateway, settings):
        classifier, _ = classifier_for(scripted_gateway(FLIGHT), settings)

        facts = classifier.classify("flight", ["airline_code", "flight_number", "origin"])

        assert [(fact.first, fact.second) for fact in facts] == [
            ("airline_code", "flight_number"),
            ("airline_code", "origin"),
            ("flight_number", "origin"),
        ]
        assert all(isinstance(fact, CompoundKeyFact) for fact in facts)

    def test_strong_and_weak_differ(self, scripted_gateway, settings):
        gateway = scripted_gateway(FLIGHT, grouped={
            ("flight", "airline_code", "flight_number"): 400,
            ("flight", "flight_number", "airline_code"): 11,
        })
        classifier, _ = classifier_for(gateway, settings)

        strength = classifier.classify("flight", ["airline_code", "flight_number"])[-1]

        assert strength.strong == "flight_number"
        assert strength.weak == "airline_code"

"""
Tests for text, structural and combined pattern similarity.
"""

import pytest
from strategy_engine.vector.similarity import (
    combine_similarities,
    compute_combined_similarity,
    compute_pattern_similarity,
    compute_structural_similarity,
    cosine_similarity,
    extract_scenario_features,
    rank_patterns,
    round_half_up,
)
from strategy_engine.vector.text import vectorize_text
from strategy_engine.vector.types import FeatureRecord, StrategicPattern


class TestCosineSimilarity:
    """Cosine similarity over term vectors."""

    def test_self_similarity_is_one(self):
        """A non-empty vector is fully similar to itself."""
        vec = vectorize_text("strategic alliance between rival companies")
        assert cosine_similarity(vec, vec) == pytest.approx(1.0)

    def test_symmetric(self):
        """Argument order does not matter."""
        a = vectorize_text("trade negotiation between two countries")
        b = vectorize_text("countries negotiation over fishing rights")
        assert cosine_similarity(a, b) == cosine_similarity(b, a)

    def test_empty_vector_scores_zero(self):
        """An empty vector on either side gives zero."""
        vec = vectorize_text("market entry deterrence")
        assert cosine_similarity({}, vec) == 0.0
        assert cosine_similarity(vec, {}) == 0.0
        assert cosine_similarity({}, {}) == 0.0

    def test_zero_magnitude_scores_zero(self):
        """Vectors whose weights are all zero give zero."""
        assert cosine_similarity({"alpha": 0.0}, {"alpha": 0.0}) == 0.0

    def test_disjoint_vectors_score_zero(self):
        """No shared terms means no similarity."""
        assert cosine_similarity({"alpha": 1.0}, {"beta": 1.0}) == 0.0

    def test_result_within_unit_interval(self):
        """Scores stay inside [0, 1]."""
        a = vectorize_text("price war between airlines on transatlantic routes")
        b = vectorize_text("airlines price coordination")
        assert 0.0 <= cosine_similarity(a, b) <= 1.0


class TestPatternSimilarity:
    """Text similarity between a scenario and a pattern description."""

    def test_identical_text_is_full_match(self):
        """The same text scores 100 percent."""
        text = "Two firms decide whether to cooperate or defect on pricing"
        assert compute_pattern_similarity(text, text) == 100.0

    def test_unrelated_text_is_zero(self):
        """Texts sharing no long tokens score 0 percent."""
        assert compute_pattern_similarity("naval blockade strategy", "pricing cartel agreement") == 0.0

    def test_signature_terms_are_merged_with_extra_weight(self):
        """Signature terms add 1.5x their weight onto the pattern vector."""
        without = compute_pattern_similarity("alliance", "rivalry conflict")
        with_signature = compute_pattern_similarity("alliance", "rivalry conflict", "alliance")

        assert without == 0.0
        # dot 1.5 / sqrt(0.5 + 0.5 + 2.25)
        assert with_signature == 83.2

    def test_percentage_within_bounds(self):
        """Percentages stay inside [0, 100]."""
        score = compute_pattern_similarity(
            "A repeated prisoner's dilemma between two trading partners",
            "Prisoner's dilemma with repeated interaction",
            "dilemma defection cooperation"
        )
        assert 0.0 <= score <= 100.0


class TestStructuralSimilarity:
    """Feature agreement between scenario and pattern."""

    def test_player_count_off_by_one(self):
        """A player count difference of one earns 0.7 credit."""
        assert compute_structural_similarity({"playerCount": 2}, {"playerCount": 3}) == 70.0

    def test_player_count_partial_credit_scale(self):
        """Credit falls from 1.0 to 0.4 and then to zero."""
        assert compute_structural_similarity(FeatureRecord(player_count=4), FeatureRecord(player_count=4)) == 100.0
        assert compute_structural_similarity(FeatureRecord(player_count=2), FeatureRecord(player_count=4)) == 40.0
        assert compute_structural_similarity(FeatureRecord(player_count=2), FeatureRecord(player_count=5)) == 0.0

    def test_only_shared_attributes_are_compared(self):
        """Attributes missing on either side are ignored."""
        scenario = {"playerCount": 2, "hasCooperation": True, "hasConflict": True}
        pattern = {"playerCount": 2, "hasCooperation": False}

        # player count 1.0 + cooperation 0 over 2 compared attributes
        assert compute_structural_similarity(scenario, pattern) == 50.0

    def test_zero_player_count_is_not_compared(self):
        """A zero player count counts as absent."""
        scenario = {"playerCount": 0, "hasConflict": True}
        pattern = {"playerCount": 3, "hasConflict": True}
        assert compute_structural_similarity(scenario, pattern) == 100.0

    def test_nothing_comparable_scores_zero(self):
        """No shared attributes gives zero rather than an error."""
        assert compute_structural_similarity({"playerCount": 2}, {"hasConflict": True}) == 0.0
        assert compute_structural_similarity(None, None) == 0.0

    def test_extracted_cooperation_gets_full_credit(self):
        """Cooperation keywords match a cooperative pattern fully."""
        features = extract_scenario_features("cooperation alliance")
        assert features.has_cooperation is True
        assert compute_structural_similarity(features, {"hasCooperation": True}) == 100.0


class TestCombinedSimilarity:
    """Weighted blend of text and structural similarity."""

    def test_sixty_forty_weighting(self):
        """80 percent text and 50 percent structure blend to 68."""
        assert combine_similarities(80.0, 50.0) == 68.0

    def test_combined_within_bounds(self):
        """Combined scores stay inside [0, 100]."""
        text = "Rival companies compete in a repeated pricing game"
        score = compute_combined_similarity(
            text,
            "Repeated price competition between rivals",
            extract_scenario_features(text),
            {"playerCount": 2, "hasConflict": True, "hasRepeatedInteraction": True}
        )
        assert 0.0 <= score <= 100.0

    def test_half_up_rounding(self):
        """Halves round up rather than to even."""
        assert round_half_up(0.25, 1) == 0.3
        assert round_half_up(68.04, 1) == 68.0


class TestFeatureExtraction:
    """Keyword heuristics over scenario text."""

    def test_explicit_players_win(self):
        """A non-empty player list sets the player count."""
        features = extract_scenario_features("A negotiation", players=["a", "b", "c"])
        assert features.player_count == 3

    def test_role_nouns_are_counted(self):
        """Role nouns are counted when no players are given."""
        features = extract_scenario_features("The company and the country negotiate with another actor")
        assert features.player_count == 3

    def test_default_player_count(self):
        """Without players or role nouns the count defaults to two."""
        assert extract_scenario_features("A quiet market").player_count == 2
        assert extract_scenario_features("A quiet market", players=[]).player_count == 2

    def test_keyword_classes(self):
        """Each boolean feature responds to its own keyword class."""
        features = extract_scenario_features(
            "Two rival firms cooperate in a long-term venture, but one holds secret costs and moves first"
        )
        assert features.has_cooperation is True
        assert features.has_conflict is True
        assert features.has_information_asymmetry is True
        assert features.has_sequential_moves is True
        assert features.has_repeated_interaction is True

    def test_no_keywords(self):
        """Neutral text sets every boolean feature to False."""
        features = extract_scenario_features("A quiet market")
        assert features.has_cooperation is False
        assert features.has_conflict is False
        assert features.has_information_asymmetry is False
        assert features.has_sequential_moves is False
        assert features.has_repeated_interaction is False


def test_rank_patterns_orders_by_combined_score():
    """Patterns come back best combined match first."""
    patterns = [
        StrategicPattern(name="arms_race", description="naval arms race between rival powers",
                         features=FeatureRecord(player_count=2, has_conflict=True, has_cooperation=False)),
        StrategicPattern(name="joint_venture", description="joint venture alliance partnership",
                         signature="alliance partnership",
                         features=FeatureRecord(player_count=2, has_cooperation=True, has_conflict=False)),
    ]

    matches = rank_patterns("Two companies form a joint alliance partnership", patterns)

    assert [m.pattern.name for m in matches] == ["joint_venture", "arms_race"]
    assert matches[0].text_similarity > matches[1].text_similarity
    assert matches[0].combined_similarity >= matches[1].combined_similarity

    assert len(rank_patterns("Two companies form a joint alliance partnership", patterns, limit=1)) == 1

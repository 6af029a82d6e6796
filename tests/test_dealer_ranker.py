"""Tests for dealer availability filtering and ranking."""

from distribution.dealer_ranker import filter_available, pick_best, plan_weight, rank_dealers

from conftest import make_dealer


class TestAvailabilityFilter:
    def test_pending_and_suspended_dealers_filtered(self):
        dealers = [
            make_dealer("a", status="Pending"),
            make_dealer("b", status="Suspended"),
            make_dealer("c"),
        ]
        assert [d.id for d in filter_available(dealers)] == ["c"]

    def test_dealer_at_capacity_filtered(self):
        dealers = [
            make_dealer("full", leads_assigned=5, max_leads_capacity=5),
            make_dealer("room", leads_assigned=4, max_leads_capacity=5),
        ]
        assert [d.id for d in filter_available(dealers)] == ["room"]

    def test_zero_or_missing_capacity_is_unlimited(self):
        dealers = [
            make_dealer("unset", leads_assigned=500),
            make_dealer("zero", leads_assigned=500, max_leads_capacity=0),
        ]
        assert len(filter_available(dealers)) == 2

    def test_empty_input(self):
        assert filter_available([]) == []


class TestRanking:
    def test_plan_weights(self):
        assert plan_weight(make_dealer("e", plan="Enterprise")) == 3
        assert plan_weight(make_dealer("p", plan="Pro")) == 2
        assert plan_weight(make_dealer("s", plan="Standard")) == 1
        assert plan_weight(make_dealer("x", plan="Platinum")) == 0

    def test_plan_beats_load(self):
        dealers = [
            make_dealer("std", plan="Standard", leads_assigned=0),
            make_dealer("ent", plan="Enterprise", leads_assigned=50),
        ]
        assert pick_best(dealers).id == "ent"

    def test_lower_load_wins_within_plan(self):
        dealers = [
            make_dealer("seven", plan="Enterprise", leads_assigned=7),
            make_dealer("three", plan="Enterprise", leads_assigned=3),
        ]
        assert pick_best(dealers).id == "three"

    def test_ties_keep_input_order(self):
        dealers = [
            make_dealer("first", plan="Pro", leads_assigned=2),
            make_dealer("second", plan="Pro", leads_assigned=2),
        ]
        assert [d.id for d in rank_dealers(dealers)] == ["first", "second"]

    def test_pick_best_maximises_weight_then_minimises_load(self, dealer_network):
        best = pick_best(dealer_network)
        available = filter_available(dealer_network)
        for other in available:
            assert plan_weight(best) >= plan_weight(other)
            if plan_weight(other) == plan_weight(best):
                assert best.leads_assigned <= other.leads_assigned

    def test_pick_best_none_when_unavailable(self):
        assert pick_best([make_dealer("p", status="Pending")]) is None
        assert pick_best([]) is None

"""Tests for sponsor and campaign promotion passes."""

from quizrank.engine.models import (
    Broker,
    CampaignWinner,
    PromotionKind,
    ScoredResult,
)
from quizrank.engine.promotion import (
    PromotionEngine,
    get_sponsor_sort_priority,
    is_sponsored,
    sort_with_sponsorship,
)
from quizrank.engine.ranker import RankingConfig


def _results(*specs):
    """Build a ranked list from (slug, tier) pairs; tier "missing" means no broker."""
    results = []
    total = 100.0
    for slug, tier in specs:
        broker = None
        if tier != "missing":
            broker = Broker(slug=slug, name=slug.title(), rating=4.0, sponsorship_tier=tier)
        results.append(ScoredResult(slug=slug, broker=broker, total=total))
        total -= 10
    return results


def _slugs(results):
    return [r.slug for r in results]


class TestSponsorBoost:
    """Tests for the featured partner boost."""

    def test_featured_partner_in_second_place_moves_up(self):
        results = _results(("top", None), ("sponsored", "featured_partner"), ("third", None))

        event = PromotionEngine().apply_sponsor_boost(results)

        assert _slugs(results) == ["sponsored", "top", "third"]
        assert event.kind == PromotionKind.SPONSOR
        assert (event.from_index, event.to_index) == (1, 0)

    def test_totals_are_not_recomputed(self):
        results = _results(("top", None), ("sponsored", "featured_partner"))

        PromotionEngine().apply_sponsor_boost(results)

        assert results[0].total == 90.0
        assert results[1].total == 100.0

    def test_featured_partner_in_first_place_untouched(self):
        results = _results(("sponsored", "featured_partner"), ("b", None), ("c", None))

        assert PromotionEngine().apply_sponsor_boost(results) is None
        assert _slugs(results) == ["sponsored", "b", "c"]

    def test_featured_partner_in_third_place_untouched(self):
        results = _results(("a", None), ("b", None), ("sponsored", "featured_partner"))

        assert PromotionEngine().apply_sponsor_boost(results) is None
        assert _slugs(results) == ["a", "b", "sponsored"]

    def test_other_tiers_do_not_boost(self):
        results = _results(("a", None), ("pick", "editors_pick"), ("deal", "deal_of_month"))

        assert PromotionEngine().apply_sponsor_boost(results) is None
        assert _slugs(results) == ["a", "pick", "deal"]

    def test_missing_broker_in_second_place(self):
        results = _results(("a", None), ("ghost", "missing"))

        assert PromotionEngine().apply_sponsor_boost(results) is None

    def test_short_lists(self):
        engine = PromotionEngine()
        assert engine.apply_sponsor_boost([]) is None
        assert engine.apply_sponsor_boost(_results(("solo", "featured_partner"))) is None


class TestCampaignBoost:
    """Tests for the campaign winner boost."""

    def test_winner_in_second_place_moves_to_first(self):
        results = _results(("top", None), ("campaign", None), ("third", None))

        event = PromotionEngine().apply_campaign_boost(
            results, [CampaignWinner(broker_slug="campaign")]
        )

        assert _slugs(results) == ["campaign", "top", "third"]
        assert event.kind == PromotionKind.CAMPAIGN

    def test_no_winners_disables_pass(self):
        results = _results(("a", None), ("b", None))

        assert PromotionEngine().apply_campaign_boost(results, None) is None
        assert PromotionEngine().apply_campaign_boost(results, []) is None
        assert _slugs(results) == ["a", "b"]

    def test_winner_in_first_place_untouched(self):
        results = _results(("winner", None), ("b", None))

        assert PromotionEngine().apply_campaign_boost(
            results, [CampaignWinner(broker_slug="winner")]
        ) is None
        assert _slugs(results) == ["winner", "b"]

    def test_winner_deeper_in_window_moves_up_one(self):
        results = _results(*[(s, None) for s in ["a", "b", "c", "d", "e", "f"]])

        event = PromotionEngine().apply_campaign_boost(
            results, [CampaignWinner(broker_slug="e")]
        )

        assert _slugs(results) == ["a", "b", "c", "e", "d", "f"]
        assert (event.from_index, event.to_index) == (4, 3)

    def test_winner_outside_window_untouched(self):
        results = _results(*[(s, None) for s in ["a", "b", "c", "d", "e", "f"]])

        assert PromotionEngine().apply_campaign_boost(
            results, [CampaignWinner(broker_slug="f")]
        ) is None

    def test_first_winner_in_window_wins(self):
        results = _results(*[(s, None) for s in ["a", "b", "c", "d"]])

        PromotionEngine().apply_campaign_boost(
            results,
            [CampaignWinner(broker_slug="d"), CampaignWinner(broker_slug="c")],
        )

        assert _slugs(results) == ["a", "c", "b", "d"]

    def test_winner_without_broker_record_untouched(self):
        results = _results(("a", None), ("ghost", "missing"))

        assert PromotionEngine().apply_campaign_boost(
            results, [CampaignWinner(broker_slug="ghost")]
        ) is None

    def test_custom_window(self):
        config = RankingConfig(campaign_window=(1, 1))
        results = _results(("a", None), ("b", None), ("c", None))

        assert PromotionEngine(config).apply_campaign_boost(
            results, [CampaignWinner(broker_slug="c")]
        ) is None


class TestApply:
    """Tests for running both passes together."""

    def test_input_list_is_not_modified(self):
        results = _results(("a", None), ("s", "featured_partner"))

        boosted, events = PromotionEngine().apply(results)

        assert _slugs(results) == ["a", "s"]
        assert _slugs(boosted) == ["s", "a"]
        assert len(events) == 1

    def test_sponsor_runs_before_campaign(self):
        results = _results(
            ("a", None), ("s", "featured_partner"), ("c", None), ("w", None)
        )

        boosted, events = PromotionEngine().apply(
            results, [CampaignWinner(broker_slug="w")]
        )

        assert _slugs(boosted) == ["s", "a", "w", "c"]
        assert [e.kind for e in events] == [PromotionKind.SPONSOR, PromotionKind.CAMPAIGN]

    def test_campaign_can_undo_sponsor_swap(self):
        """A winner displaced by the sponsor swap moves straight back up."""
        results = _results(("w", None), ("s", "featured_partner"), ("c", None))

        boosted, events = PromotionEngine().apply(
            results, [CampaignWinner(broker_slug="w")]
        )

        assert _slugs(boosted) == ["w", "s", "c"]
        assert len(events) == 2

    def test_no_preconditions_met(self):
        results = _results(("a", None), ("b", None), ("c", None))

        boosted, events = PromotionEngine().apply(results, [])

        assert _slugs(boosted) == ["a", "b", "c"]
        assert events == []


class TestSponsorshipHelpers:

    def test_sort_priority(self):
        assert get_sponsor_sort_priority("featured_partner") == 1
        assert get_sponsor_sort_priority("editors_pick") == 2
        assert get_sponsor_sort_priority("deal_of_month") == 3
        assert get_sponsor_sort_priority("something_else") == 99
        assert get_sponsor_sort_priority(None) == 99
        assert get_sponsor_sort_priority("") == 99

    def test_is_sponsored(self):
        assert is_sponsored(Broker(slug="a", name="A", sponsorship_tier="deal_of_month"))
        assert not is_sponsored(Broker(slug="b", name="B"))

    def test_sort_with_sponsorship(self):
        brokers = [
            Broker(slug="plain-high", name="P", rating=5.0),
            Broker(slug="deal", name="D", rating=4.9, sponsorship_tier="deal_of_month"),
            Broker(slug="featured-low", name="F", rating=3.0, sponsorship_tier="featured_partner"),
            Broker(slug="featured-high", name="G", rating=4.8, sponsorship_tier="featured_partner"),
            Broker(slug="unrated", name="U"),
        ]

        ordered = [b.slug for b in sort_with_sponsorship(brokers)]

        assert ordered == ["featured-high", "featured-low", "deal", "plain-high", "unrated"]

"""Unit tests for optimization-goal and objective resolution."""
from src.adlens_core.metrics.goals import (
    ActionStat,
    get_goal_action_candidates,
    get_objective_result_rule,
    normalize_optimization_goal,
    pick_official_result_for_adset,
)


def test_normalize_optimization_goal_aliases():
    """Test upstream spellings collapse into canonical buckets."""
    assert normalize_optimization_goal(" offsite_conversions ") == "PURCHASE"
    assert normalize_optimization_goal("LEADS") == "LEAD_GENERATION"
    assert normalize_optimization_goal("REACH") == "OUTCOME_REACH"


def test_normalize_optimization_goal_unknown_and_empty():
    """Test unknown goals pass through upper-cased; empty goals are None."""
    assert normalize_optimization_goal("thruplay") == "THRUPLAY"
    assert normalize_optimization_goal("  ") is None
    assert normalize_optimization_goal(None) is None


def test_goal_candidates_end_with_fallback_list():
    """Test goal-specific candidates come before the generic fallback."""
    candidates = get_goal_action_candidates("LEAD_GENERATION")

    assert candidates[0] == "lead"
    assert candidates[-1] == "offsite_content_view_add_meta_leads"
    assert candidates.index("onsite_conversion.lead") < candidates.index("purchase")


def test_goal_candidates_unknown_goal_is_fallback_only():
    """Test unknown goals get just the fallback list."""
    assert get_goal_action_candidates("THRUPLAY")[0] == "purchase"


def test_objective_result_rule_lookup():
    """Test objective aliases resolve to rules."""
    leads = get_objective_result_rule("outcome_leads")
    assert leads is not None
    assert leads.label == "Leads"
    assert leads.mode == "first"

    assert get_objective_result_rule("OUTCOME_LEAD_GENERATION") == leads
    assert get_objective_result_rule("OUTCOME_MESSAGES").label == "Conversas iniciadas"
    assert get_objective_result_rule("SALES").label == "Vendas"


def test_objective_result_rule_unmapped():
    """Test objectives without a rule resolve to None."""
    assert get_objective_result_rule("OUTCOME_AWARENESS") is None
    assert get_objective_result_rule("OUTCOME_TRAFFIC") is None
    assert get_objective_result_rule(None) is None
    assert get_objective_result_rule(42) is None


def test_pick_official_result_first_candidate_with_volume():
    """Test declared candidate order beats raw volume."""
    actions = {
        "link_click": ActionStat(quantity=40),
        "onsite_conversion.lead": ActionStat(quantity=3, cost=2.0),
    }

    result = pick_official_result_for_adset("LEAD_GENERATION", actions)

    assert result.type == "onsite_conversion.lead"
    assert result.label == "Leads"
    assert result.quantity == 3
    assert result.cost == 2.0


def test_pick_official_result_highest_volume_fallback():
    """Test highest observed volume wins when no candidate has volume."""
    actions = {
        "video_view": ActionStat(quantity=50),
        "photo_view": ActionStat(quantity=20),
    }

    result = pick_official_result_for_adset("THRUPLAY", actions)

    assert result.type == "video_view"
    assert result.quantity == 50


def test_pick_official_result_without_volume():
    """Test zero-volume ad-sets still get a labeled result with no cost."""
    result = pick_official_result_for_adset(
        "LEAD_GENERATION", {"lead": ActionStat(quantity=0, cost=4.0)}
    )

    assert result.type == "lead"
    assert result.label == "Leads"
    assert result.quantity == 0.0
    assert result.cost is None


def test_pick_official_result_without_goal_or_actions():
    """Test missing goal falls back to the first generic candidate."""
    result = pick_official_result_for_adset(None, {})

    assert result.type == "purchase"
    assert result.quantity == 0.0

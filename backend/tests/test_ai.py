"""
Opponent Tests

Tests for the computer opponent:
- Network / hand analysis and the opponent model
- Candidate generation under the move budget
- Utility scoring
- The turn loop and its safety nets
- Battle decisions and simulated games
"""

import math
from dataclasses import replace

import numpy as np

from bitnet.ai import (
    ActionCategory, AIActionType, AIConfig, Aggression, Behavior, CandidateGenerator,
    OpponentAgent, OpponentModel, UtilityEvaluator, analyze_hand,
    analyze_network, derive_weights, estimate_turns_to_win, play_simulated_game
)
from bitnet.core import (
    ActionResult, AuditCandidate, AuditStage, CardFactory, CardSubtype, Difficulty,
    GameEngine, GameEventType, GamePhase, deck_size
)


def _setup_ai_turn(table):
    """Hand the turn to seat 1, the computer opponent"""
    table.state.current_player_index = 1
    table.stock_draw_pile()


# =============================================================================
# Analysis
# =============================================================================

def test_network_analysis_counts(table):
    switch, cable, _ = table.scoring_line(0, computers=2)
    second_cable = table.cable(0, switch)
    table.computer(0, second_cable)
    table.cable(0)
    table.computer(0)
    table.attack(0, second_cable)

    analysis = analyze_network(table.network(0))

    assert analysis.connected_computers == 2
    assert analysis.total_computers == 4
    assert analysis.enabled_switches == 1
    assert analysis.enabled_cables == 1
    assert analysis.disabled_cables == 1
    assert analysis.floating_cables == 1
    assert analysis.floating_computers == 1
    assert analysis.available_cable_slots == 1
    assert analysis.issue_counts == {CardSubtype.HACKED: 1}
    assert 0.0 < analysis.vulnerability_score < 1.0


def test_single_point_of_failure_lowers_redundancy(table):
    switch = table.switch(0)
    for _ in range(2):
        table.computer(0, table.cable(0, switch))
    fragile = analyze_network(table.network(0))

    assert fragile.single_points_of_failure == 1
    assert fragile.redundancy_score == 0.1

    table.scoring_line(0)
    table.scoring_line(0)
    spread = analyze_network(table.network(0))
    assert spread.redundancy_score > fragile.redundancy_score


def test_dead_resolutions(table):
    table.give(0, CardSubtype.SECURED, CardSubtype.POWERED, CardSubtype.HELPDESK)
    switch = table.switch(0)
    table.attack(0, switch, CardSubtype.HACKED)
    player = table.state.players[0]

    hand = analyze_hand(player, analyze_network(player.network))

    assert [c.subtype for c in hand.dead_cards] == [CardSubtype.POWERED]
    assert len(hand.resolutions) == 3


def test_helpdesk_dead_without_issues(table):
    table.give(0, CardSubtype.HELPDESK, CardSubtype.HEAD_HUNTER, CardSubtype.AUDIT)
    player = table.state.players[0]

    hand = analyze_hand(player, analyze_network(player.network))

    assert [c.subtype for c in hand.dead_cards] == [CardSubtype.HELPDESK]
    assert len(hand.steal_cards) == 1
    assert len(hand.audits) == 1


def test_opponent_model_likelihood(table):
    table.give(0, CardSubtype.HACKED, CardSubtype.HACKED)
    table.give(1, *([CardSubtype.COMPUTER] * 6))
    table.stock_draw_pile(count=18)
    model = OpponentModel(accuracy=1.0)

    # 9 hacked in the deck, 2 visible in the observer's hand
    likely = model.likely_count(table.state, 0, CardSubtype.HACKED)
    assert math.isclose(likely, 7 * 6 / 24)

    # Lower tiers lean on the plain deck ratio: 9 of 144 cards, 6 in hand
    prior = 9 * 6 / deck_size()
    weaker = OpponentModel(accuracy=0.5).likely_count(table.state, 0, CardSubtype.HACKED)
    assert math.isclose(weaker, 0.5 * likely + 0.5 * prior)
    blind = OpponentModel(accuracy=0.0).likely_count(table.state, 0, CardSubtype.HACKED)
    assert math.isclose(blind, prior)


def test_accurate_model_tracks_exhausted_counters(table):
    """With every copy in view only the accurate tier drops to zero"""
    table.give(0, *([CardSubtype.HEAD_HUNTER] * 6))
    table.give(1, *([CardSubtype.COMPUTER] * 6))
    table.stock_draw_pile(count=18)
    state = table.state

    estimates = [OpponentModel(accuracy).likely_count(state, 0, CardSubtype.HEAD_HUNTER)
                 for accuracy in (1.0, 0.8, 0.3)]

    assert estimates[0] == 0.0
    assert 0.0 < estimates[1] < estimates[2]


def test_opponent_behavior(table):
    model = OpponentModel(accuracy=0.6)
    other = table.state.players[1]
    network = analyze_network(other.network)
    assert model.behavior(other, network) == Behavior.UNKNOWN

    for _ in range(3):
        model.observe(CardSubtype.HELPDESK)
    assert model.behavior(other, network) == Behavior.DEFENSIVE

    for _ in range(4):
        model.observe(CardSubtype.HACKED)
    assert model.behavior(other, network) == Behavior.AGGRESSIVE


def test_turns_to_win():
    assert estimate_turns_to_win(20, 2, 25) == 3
    assert estimate_turns_to_win(25, 0, 25) == 0
    assert math.isinf(estimate_turns_to_win(3, 0, 25))


def test_weights_follow_situation():
    config = AIConfig.for_difficulty(Difficulty.NORMAL)
    even = derive_weights(config, 0, 10)
    behind = derive_weights(config, -8, 10)
    ahead = derive_weights(config, 8, 10)
    closing = derive_weights(config, 0, 2)

    assert behind.bitcoin_denial > even.bitcoin_denial
    assert behind.risk_penalty < even.risk_penalty
    assert ahead.board_stability > even.board_stability
    assert closing.bitcoin_gain == 2 * even.bitcoin_gain


def test_tiers_differ_only_in_parameters():
    easy = AIConfig.for_difficulty(Difficulty.EASY)
    hard = AIConfig.for_difficulty(Difficulty.HARD)
    assert easy.randomness > hard.randomness
    assert easy.lookahead_depth < hard.lookahead_depth
    assert easy.counter_estimation_accuracy < hard.counter_estimation_accuracy
    assert easy.max_turn_iterations == hard.max_turn_iterations


# =============================================================================
# Candidates
# =============================================================================

def _generate(table, index=0):
    config = AIConfig.for_difficulty(Difficulty.NORMAL)
    player = table.state.players[index]
    hand = analyze_hand(player, analyze_network(player.network))
    return CandidateGenerator(config).generate(table.state, index, hand)


def test_no_candidates_off_turn_or_in_battle(table):
    table.give(1, CardSubtype.SWITCH)
    assert _generate(table, index=1) == []

    table.give(0, CardSubtype.SWITCH)
    table.state.phase = GamePhase.DISCARD
    assert _generate(table) == []


def test_only_free_connects_without_moves(table):
    table.give(0, CardSubtype.SWITCH, CardSubtype.HACKED)
    table.switch(0)
    table.cable(0)
    table.state.moves_remaining = 0

    candidates = _generate(table)

    assert candidates
    assert all(c.action_type == AIActionType.CONNECT for c in candidates)


def test_only_equipment_with_bonus_move(table):
    table.give(0, CardSubtype.SWITCH, CardSubtype.HACKED, CardSubtype.SUPERVISOR)
    table.scoring_line(1)
    table.state.moves_remaining = 0
    table.state.equipment_moves_remaining = 1

    types = {c.action_type for c in _generate(table)}

    assert AIActionType.PLAY_SWITCH in types
    assert AIActionType.PLAY_ATTACK not in types
    assert AIActionType.PLAY_CLASSIFICATION not in types


def test_identical_cards_produce_one_candidate(table):
    table.give(0, CardSubtype.SWITCH, CardSubtype.SWITCH, CardSubtype.SWITCH)
    switches = [c for c in _generate(table) if c.action_type == AIActionType.PLAY_SWITCH]
    assert len(switches) == 1


def test_floating_cable_cap(table):
    table.give(0, CardSubtype.CABLE_2)
    for _ in range(5):
        table.cable(0)

    cables = [c for c in _generate(table) if c.action_type == AIActionType.PLAY_CABLE]

    assert cables == []


def test_blocked_attacks_are_not_offered(table):
    table.give(0, CardSubtype.HACKED, CardSubtype.NEW_HIRE)
    table.scoring_line(1)
    table.classification(1, CardSubtype.SECURITY_SPECIALIST)

    attacks = [c for c in _generate(table) if c.action_type == AIActionType.PLAY_ATTACK]

    assert attacks
    assert all(c.card.subtype == CardSubtype.NEW_HIRE for c in attacks)


def test_no_steals_against_protected_pair(table):
    table.give(0, CardSubtype.HEAD_HUNTER)
    table.classification(1, CardSubtype.FIELD_TECH)
    table.classification(1, CardSubtype.FIELD_TECH)

    steals = [c for c in _generate(table)
              if c.action_type == AIActionType.STEAL_CLASSIFICATION]
    assert steals == []


def test_steal_swaps_out_weakest_at_cap(table):
    table.give(0, CardSubtype.HEAD_HUNTER)
    weak = table.classification(0, CardSubtype.SUPERVISOR)
    table.classification(0, CardSubtype.FACILITIES)
    target = table.classification(1, CardSubtype.FIELD_TECH)

    steals = [c for c in _generate(table)
              if c.action_type == AIActionType.STEAL_CLASSIFICATION]

    assert len(steals) == 1
    assert steals[0].target_id == target.id
    assert steals[0].discard_id == weak.id


def test_equipment_not_discarded_while_buildable(table):
    table.give(0, CardSubtype.COMPUTER, CardSubtype.CABLE_2)
    discards = [c for c in _generate(table) if c.action_type == AIActionType.DISCARD]
    assert discards == []


# =============================================================================
# Scoring
# =============================================================================

def test_connected_computer_beats_floating(table):
    table.state.current_player_index = 1
    table.give(1, CardSubtype.COMPUTER)
    switch = table.switch(1)
    table.cable(1, switch)
    table.stock_draw_pile()
    agent = OpponentAgent(player_index=1, difficulty=Difficulty.NIGHTMARE, seed=1)

    ctx = agent.build_context(table.state)
    candidates = agent.generator.generate(table.state, 1, ctx.hand)
    ranked = agent.evaluator.evaluate_all(candidates, ctx)

    best = ranked[0]
    assert best.action_type == AIActionType.PLAY_COMPUTER
    assert best.target_id is not None
    assert best.breakdown["gain"] == 1


def test_attack_denial_counts_lost_income(table):
    table.give(0, CardSubtype.POWER_OUTAGE)
    switch, _, _ = table.scoring_line(1, computers=3)
    agent = OpponentAgent(player_index=0, difficulty=Difficulty.HARD, seed=2)

    ctx = agent.build_context(table.state)
    candidates = [c for c in agent.generator.generate(table.state, 0, ctx.hand)
                  if c.action_type == AIActionType.PLAY_ATTACK]
    ranked = agent.evaluator.evaluate_all(candidates, ctx)

    assert ranked[0].target_id in (switch.id, switch.cables[0].id)
    assert ranked[0].breakdown["denial"] == 3


def test_aggression_biases_disruption():
    config = AIConfig.for_difficulty(Difficulty.NORMAL)
    passive = UtilityEvaluator(config, Aggression.PASSIVE)
    aggressive = UtilityEvaluator(config, Aggression.AGGRESSIVE)
    assert (aggressive.aggression.category_bias(ActionCategory.DISRUPT)
            > passive.aggression.category_bias(ActionCategory.DISRUPT))


# =============================================================================
# Turn Loop
# =============================================================================

def test_dead_hand_discards_once_per_move(table):
    """Only dead cards: one discard per move slot, then the turn ends"""
    _setup_ai_turn(table)
    table.give(1, CardSubtype.SECURED, CardSubtype.SECURED, CardSubtype.POWERED,
               CardSubtype.POWERED, CardSubtype.TRAINED, CardSubtype.TRAINED)
    engine = table.engine()

    result = engine.execute_ai_turn()

    assert result.success
    actions = result.data["actions"]
    discards = [a for a in actions if a["type"] == "discard"]
    assert len(discards) == 3
    assert all(a["success"] for a in discards)
    assert actions[-1]["type"] == "end_phase"
    assert engine.state.current_player_index == 0
    assert len(engine.state.discard_pile) == 3


def test_unplayable_hand_forces_discards(table):
    """No legal plays and no dead cards: fallback discards keep the turn moving"""
    _setup_ai_turn(table)
    table.give(1, CardSubtype.HACKED, CardSubtype.NEW_HIRE, CardSubtype.AUDIT,
               CardSubtype.POWER_OUTAGE, CardSubtype.HACKED, CardSubtype.AUDIT)
    engine = table.engine()

    result = engine.execute_ai_turn()

    actions = result.data["actions"]
    forced = [a for a in actions if a.get("forced")]
    assert len(forced) == 3
    assert actions[-1]["type"] == "end_phase"
    assert engine.state.current_player_index == 0


def _rejected_build_turn(table, monkeypatch, **limits):
    """Seat 1 holds a full line of equipment but every equipment play fails"""
    _setup_ai_turn(table)
    table.give(1, CardSubtype.SWITCH, CardSubtype.CABLE_3, CardSubtype.COMPUTER)
    engine = table.engine()
    agent = engine.get_opponent_agent()
    agent.config = replace(agent.config, worthless_utility=float("-inf"), **limits)

    def rejected(*args):
        return ActionResult(action="build", success=False, message="Rejected")

    for name in ("play_switch", "play_cable", "play_computer"):
        monkeypatch.setattr(engine, name, rejected)
    return engine, engine.execute_ai_turn()


def _assert_fallback_discards(engine, actions):
    failed = [a for a in actions if not a["success"]]
    assert sorted(a["type"] for a in failed) == ["play_cable", "play_computer", "play_switch"]
    forced = [a for a in actions if a.get("forced")]
    assert len(forced) == 3
    assert all(a["success"] for a in forced)
    assert actions[-1]["type"] == "end_phase"
    assert engine.state.current_player_index == 0
    assert len(engine.state.discard_pile) == 3


def test_consecutive_failures_force_discards(table, monkeypatch):
    engine, result = _rejected_build_turn(table, monkeypatch, max_failed_action_types=99)
    _assert_fallback_discards(engine, result.data["actions"])


def test_distinct_failed_types_force_discards(table, monkeypatch):
    engine, result = _rejected_build_turn(table, monkeypatch, max_consecutive_failures=99)
    _assert_fallback_discards(engine, result.data["actions"])


def test_iteration_cap_ends_the_turn(table, monkeypatch):
    engine, result = _rejected_build_turn(table, monkeypatch, max_turn_iterations=2)

    actions = result.data["actions"]
    assert [a["success"] for a in actions[:-1]] == [False, False]
    assert not any(a.get("forced") for a in actions)
    assert actions[-1]["type"] == "end_phase"
    assert engine.state.current_player_index == 0


def test_opponent_watches_from_the_first_action():
    """The opponent is listening before any human play, not from its first turn"""
    for seed in range(20):
        engine = GameEngine()
        engine.initialize_game(seed=seed)
        hand = engine.state.players[0].hand
        switch = next((c for c in hand if c.subtype == CardSubtype.SWITCH), None)
        if switch is None:
            continue
        other = next(c for c in hand if c is not switch)

        assert engine.play_switch(switch.id).success
        assert engine.discard_card(other.id).success

        agent = engine.get_opponent_agent()
        # Discards are not plays
        assert dict(agent.model.played) == {CardSubtype.SWITCH: 1}

        engine.initialize_game(seed=seed)
        assert engine.opponent is not agent
        assert len(engine.event_listeners[GameEventType.ACTION_PERFORMED]) == 1
        return
    raise AssertionError("No seeded deal contained a switch")


def test_opponent_builds_a_scoring_line(table):
    _setup_ai_turn(table)
    table.give(1, CardSubtype.SWITCH, CardSubtype.CABLE_3,
               CardSubtype.COMPUTER, CardSubtype.COMPUTER)
    engine = table.engine(difficulty=Difficulty.NIGHTMARE)

    result = engine.execute_ai_turn()

    assert result.success
    assert engine.state.players[1].score == 1
    assert engine.state.current_player_index == 0


def test_opponent_idle_off_turn(table):
    engine = table.engine()
    result = engine.execute_ai_turn()
    assert result.success
    assert result.data["actions"] == []
    assert engine.state.current_player_index == 0


def test_opponent_observes_human_cards(table):
    card = table.give(0, CardSubtype.SWITCH)[0]
    engine = table.engine()
    agent = engine.get_opponent_agent()

    engine.play_switch(card.id)

    assert agent.model.played[CardSubtype.SWITCH] == 1


# =============================================================================
# Battles
# =============================================================================

def test_opponent_blocks_a_costly_audit(table):
    audit = table.give(0, CardSubtype.AUDIT)[0]
    table.give(1, CardSubtype.HACKED)
    switch = table.switch(1)
    cable = table.cable(1, switch, CardSubtype.CABLE_3)
    for _ in range(3):
        table.computer(1, cable)
    table.stock_draw_pile()
    engine = table.engine(difficulty=Difficulty.NORMAL)
    engine.start_audit(audit.id, 1)

    result = engine.execute_ai_turn()

    assert result.data["waiting_for_response"] is True
    battle = engine.state.audit_battle
    assert len(battle.chain) == 1
    assert battle.responder_index == 0


def test_easy_opponent_keeps_a_single_counter(table):
    audit = table.give(0, CardSubtype.AUDIT)[0]
    table.give(1, CardSubtype.HACKED)
    table.scoring_line(1, computers=3)
    table.stock_draw_pile()
    engine = table.engine(difficulty=Difficulty.EASY)
    engine.start_audit(audit.id, 1)

    result = engine.execute_ai_turn()

    assert result.data["waiting_for_response"] is True
    assert engine.state.audit_battle.stage == AuditStage.SELECTION


def test_audit_selection_prefers_connected():
    agent = OpponentAgent(player_index=0, difficulty=Difficulty.NIGHTMARE, seed=4)
    factory = CardFactory()
    available = [
        AuditCandidate("placement-1", factory.create(CardSubtype.COMPUTER), "floating"),
        AuditCandidate("placement-2", factory.create(CardSubtype.COMPUTER), "switch 1 / cable 1"),
        AuditCandidate("placement-3", factory.create(CardSubtype.COMPUTER), "floating cable 1"),
        AuditCandidate("placement-4", factory.create(CardSubtype.COMPUTER), "switch 1 / cable 2"),
    ]

    chosen = agent.select_audit_targets(available, 2)

    assert sorted(chosen) == ["placement-2", "placement-4"]


def test_easy_audit_selection_is_random_but_sized():
    agent = OpponentAgent(player_index=0, difficulty=Difficulty.EASY, seed=4)
    factory = CardFactory()
    available = [AuditCandidate(f"placement-{i}", factory.create(CardSubtype.COMPUTER), "floating")
                 for i in range(5)]

    chosen = agent.select_audit_targets(available, 3)

    assert len(chosen) == 3
    assert len(set(chosen)) == 3


def test_opponent_completes_own_audit(table):
    """As auditor the opponent selects and confirms without help"""
    _setup_ai_turn(table)
    table.give(1, CardSubtype.AUDIT)
    table.scoring_line(0, computers=2)
    engine = table.engine(difficulty=Difficulty.HARD)

    result = engine.execute_ai_turn()
    assert result.data["waiting_for_response"] is True
    assert engine.state.audit_battle.responder_index == 0

    engine.pass_audit(0)
    engine.execute_ai_turn()

    assert engine.state.battle is None
    assert len(engine.state.players[0].audited_computers) == 1
    assert engine.state.income(0) == 1
    assert engine.state.current_player_index == 0


# =============================================================================
# Simulation & Debug
# =============================================================================

def test_simulated_game_terminates():
    summary = play_simulated_game(difficulties=(Difficulty.HARD, Difficulty.EASY),
                                  seed=7, max_turns=40)

    assert summary["turns"] <= 41
    assert set(summary["scores"]) == {"Agent A", "Agent B"}
    assert all(score >= 0 for score in summary["scores"].values())
    assert summary["stats"]["turns_completed"] >= 1
    assert len(summary["aggression"]) == 2


def test_explain_reports_candidates(table):
    _setup_ai_turn(table)
    table.give(1, CardSubtype.SWITCH, CardSubtype.COMPUTER)
    engine = table.engine()
    agent = engine.get_opponent_agent()

    report = agent.explain(engine.state, top=3)

    assert report["player_index"] == 1
    assert report["candidate_count"] >= 2
    assert len(report["top_candidates"]) <= 3
    assert "own_network" in report["analysis"]


def test_agent_rng_is_seeded():
    first = OpponentAgent(seed=5)
    second = OpponentAgent(seed=5)
    assert first.aggression == second.aggression
    assert np.isclose(first.rng.random(), second.rng.random())

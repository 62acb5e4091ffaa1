"""
Battle Tests

Tests for the two interrupt protocols:
- Audit: counter chain, selection, audited pool
- Head-hunter: steals, contested steals, seal-the-deal
- Rejection of everything else while a battle runs
"""

from bitnet.core import AuditStage, CardSubtype, GamePhase
from bitnet.core.battles import audit_size


def _audit_table(table, computers=5):
    """Player 0 holds an audit, player 1 has ``computers`` connected computers"""
    audit = table.give(0, CardSubtype.AUDIT)[0]
    switch = table.switch(1)
    placed = []
    while len(placed) < computers:
        cable = table.cable(1, switch, CardSubtype.CABLE_3)
        for _ in range(min(3, computers - len(placed))):
            placed.append(table.computer(1, cable))
    table.stock_draw_pile()
    return audit, placed


# =============================================================================
# Audit
# =============================================================================

def test_audit_size_rounds_up():
    assert audit_size(5) == 3
    assert audit_size(4) == 2
    assert audit_size(1) == 1


def test_audit_five_computers_returns_three(table):
    """Audit against 5 computers moves exactly 3 into the audited pool"""
    audit, placed = _audit_table(table, computers=5)
    engine = table.engine()

    result = engine.start_audit(audit.id, 1)
    assert result.success
    battle = engine.state.audit_battle
    assert battle.computers_to_return == 3
    assert engine.state.phase == GamePhase.AUDIT
    assert engine.state.moves_remaining == 2

    assert engine.pass_audit(1).success
    assert engine.state.audit_battle.stage == AuditStage.SELECTION
    assert len(engine.state.audit_battle.available_computers) == 5

    for node in placed[:3]:
        assert engine.toggle_audit_computer_selection(node.id, 0).success
    result = engine.confirm_audit_selection(0)
    assert result.success

    state = engine.state
    target = state.players[1]
    assert state.battle is None
    assert state.phase == GamePhase.MOVES
    assert sorted(c.id for c in target.audited_computers) == sorted(n.card.id for n in placed[:3])
    assert not any(c.subtype == CardSubtype.COMPUTER for c in state.discard_pile)
    assert audit in state.discard_pile
    assert state.income(1) == 2
    assert len(target.hand) == 6


def test_audit_with_no_computers_short_circuits(table):
    audit = table.give(0, CardSubtype.AUDIT)[0]
    engine = table.engine()

    result = engine.start_audit(audit.id, 1)

    assert not result.success
    assert engine.state.battle is None
    assert engine.state.moves_remaining == 3
    assert audit in engine.state.players[0].hand


def test_floating_computers_count_toward_audit(table):
    audit = table.give(0, CardSubtype.AUDIT)[0]
    table.computer(1)
    table.computer(1)
    table.computer(1)
    engine = table.engine()

    assert engine.start_audit(audit.id, 1).success
    assert engine.state.audit_battle.computers_to_return == 2


def test_audit_blocked_when_auditor_passes(table):
    audit, placed = _audit_table(table, computers=2)
    hacked = table.give(1, CardSubtype.HACKED)[0]
    engine = table.engine()
    engine.start_audit(audit.id, 1)

    assert engine.respond_to_audit(hacked.id, 1).success
    assert engine.state.audit_battle.responder_index == 0
    result = engine.pass_audit(0)

    assert result.success
    state = engine.state
    assert state.battle is None
    assert state.players[1].audited_computers == []
    assert state.income(1) == 2
    assert hacked in state.discard_pile and audit in state.discard_pile
    # No second move is taken
    assert state.moves_remaining == 2
    assert len(state.players[1].hand) == 6


def test_audit_counter_chain_alternates(table):
    audit, _ = _audit_table(table, computers=4)
    hacked = table.give(1, CardSubtype.HACKED)[0]
    secured = table.give(0, CardSubtype.SECURED)[0]
    engine = table.engine()
    engine.start_audit(audit.id, 1)

    # Auditor cannot answer before the target
    assert not engine.respond_to_audit(secured.id, 0).success
    assert engine.respond_to_audit(hacked.id, 1).success
    # Auditor counter-blocks
    assert engine.respond_to_audit(secured.id, 0).success
    assert engine.state.audit_battle.responder_index == 1
    assert len(engine.state.audit_battle.chain) == 2

    assert engine.pass_audit(1).success
    assert engine.state.audit_battle.stage == AuditStage.SELECTION


def test_wrong_counter_card_rejected(table):
    audit, _ = _audit_table(table, computers=2)
    secured = table.give(1, CardSubtype.SECURED)[0]
    engine = table.engine()
    engine.start_audit(audit.id, 1)

    result = engine.respond_to_audit(secured.id, 1)

    assert not result.success
    assert engine.state.audit_battle.chain == []


def test_selection_evicts_oldest(table):
    audit, placed = _audit_table(table, computers=4)
    engine = table.engine()
    engine.start_audit(audit.id, 1)
    engine.pass_audit(1)

    for node in placed[:3]:
        engine.toggle_audit_computer_selection(node.id)

    selected = engine.state.audit_battle.selected_computer_ids
    assert selected == [placed[1].id, placed[2].id]

    engine.toggle_audit_computer_selection(placed[2].id)
    assert engine.state.audit_battle.selected_computer_ids == [placed[1].id]


def test_confirm_requires_exact_count(table):
    audit, placed = _audit_table(table, computers=4)
    engine = table.engine()
    engine.start_audit(audit.id, 1)
    engine.pass_audit(1)
    engine.toggle_audit_computer_selection(placed[0].id)

    result = engine.confirm_audit_selection()

    assert not result.success
    assert engine.state.audit_battle is not None


def test_only_the_auditor_selects(table):
    audit, placed = _audit_table(table, computers=2)
    engine = table.engine()
    engine.start_audit(audit.id, 1)
    engine.pass_audit(1)

    assert not engine.toggle_audit_computer_selection(placed[0].id, 1).success


def test_acting_seat_follows_the_battle(table):
    """The responder acts during the chain, the auditor during selection"""
    audit, _ = _audit_table(table, computers=2)
    engine = table.engine()
    validator = engine.validator
    assert engine.state.acting_player_index == 0

    engine.start_audit(audit.id, 1)
    assert engine.state.acting_player_index == 1
    assert validator.validate(validator.require_turn, engine.state, 0) == (False, "It is not your turn")
    assert validator.validate(validator.require_turn, engine.state, 1) == (True, "")

    result = engine.pass_audit(1)
    assert result.message == "Audit succeeds: 1 of Opponent's computers will return to the audited pool"
    assert engine.state.acting_player_index == 0


def test_other_actions_rejected_during_battle(table):
    audit, _ = _audit_table(table, computers=2)
    switch = table.give(0, CardSubtype.SWITCH)[0]
    helpdesk = table.give(0, CardSubtype.HELPDESK)[0]
    engine = table.engine()
    engine.start_audit(audit.id, 1)

    assert not engine.play_switch(switch.id).success
    assert not engine.discard_card(helpdesk.id).success
    assert not engine.end_phase().success
    assert not engine.enter_discard_phase().success
    assert not engine.pass_headhunter_battle().success
    assert engine.state.phase == GamePhase.AUDIT


def test_audited_pool_cards_are_conserved(table):
    audit, placed = _audit_table(table, computers=3)
    engine = table.engine()
    total = len(engine.state.all_cards())
    engine.start_audit(audit.id, 1)
    engine.pass_audit(1)
    for node in placed[:2]:
        engine.toggle_audit_computer_selection(node.id)
    engine.confirm_audit_selection()

    assert len(engine.state.all_cards()) == total


# =============================================================================
# Head-Hunter
# =============================================================================

def test_uncontested_steal_resolves_immediately(table):
    hunter = table.give(0, CardSubtype.HEAD_HUNTER)[0]
    target = table.classification(1, CardSubtype.SUPERVISOR)
    engine = table.engine()

    result = engine.play_classification(hunter.id, target.id)

    assert result.success
    state = engine.state
    assert state.battle is None
    assert state.players[1].classification_cards == []
    assert state.players[0].has_classification(CardSubtype.SUPERVISOR)
    assert hunter in state.discard_pile
    assert state.moves_remaining == 2


def test_contested_steal_blocked(table):
    hunter = table.give(0, CardSubtype.HEAD_HUNTER)[0]
    defense = table.give(1, CardSubtype.HEAD_HUNTER)[0]
    target = table.classification(1, CardSubtype.FIELD_TECH)
    engine = table.engine()

    result = engine.play_classification(hunter.id, target.id)
    assert result.success
    assert engine.state.phase == GamePhase.HEADHUNTER_BATTLE
    assert engine.state.headhunter_battle.responder_index == 1

    assert engine.respond_to_headhunter_battle(defense.id, 1).success
    assert engine.state.headhunter_battle.responder_index == 0
    assert engine.pass_headhunter_battle(0).success

    state = engine.state
    assert state.battle is None
    assert state.phase == GamePhase.MOVES
    assert state.moves_remaining == 2
    assert state.players[1].has_classification(CardSubtype.FIELD_TECH)
    assert hunter in state.discard_pile and defense in state.discard_pile


def test_contested_steal_succeeds_when_defender_passes(table):
    hunter = table.give(0, CardSubtype.HEAD_HUNTER)[0]
    table.give(1, CardSubtype.HEAD_HUNTER)
    target = table.classification(1, CardSubtype.FACILITIES)
    engine = table.engine()
    engine.play_classification(hunter.id, target.id)

    assert engine.pass_headhunter_battle(1).success

    assert engine.state.players[0].has_classification(CardSubtype.FACILITIES)
    assert engine.state.moves_remaining == 2


def test_seal_the_deal_cannot_be_contested(table):
    seal = table.give(0, CardSubtype.SEAL_THE_DEAL)[0]
    table.give(1, CardSubtype.HEAD_HUNTER)
    target = table.classification(1, CardSubtype.FIELD_TECH)
    engine = table.engine()

    result = engine.play_classification(seal.id, target.id)

    assert result.success
    assert engine.state.battle is None
    assert engine.state.players[0].has_classification(CardSubtype.FIELD_TECH)


def test_two_of_a_kind_cannot_be_stolen(table):
    hunter, seal = table.give(0, CardSubtype.HEAD_HUNTER, CardSubtype.SEAL_THE_DEAL)
    first = table.classification(1, CardSubtype.SUPERVISOR)
    table.classification(1, CardSubtype.SUPERVISOR)
    engine = table.engine()

    assert not engine.play_classification(hunter.id, first.id).success
    assert not engine.play_classification(seal.id, first.id).success
    assert len(engine.state.players[1].classification_cards) == 2
    assert engine.state.moves_remaining == 3


def test_steal_of_held_subtype_is_discarded(table):
    hunter = table.give(0, CardSubtype.HEAD_HUNTER)[0]
    table.classification(0, CardSubtype.SUPERVISOR)
    target = table.classification(1, CardSubtype.SUPERVISOR)
    engine = table.engine()

    result = engine.play_classification(hunter.id, target.id)

    assert result.success
    assert len(engine.state.players[0].classification_cards) == 1
    assert engine.state.players[1].classification_cards == []
    assert target.card in engine.state.discard_pile


def test_steal_at_cap_without_swap_discards(table):
    hunter = table.give(0, CardSubtype.HEAD_HUNTER)[0]
    table.classification(0, CardSubtype.SUPERVISOR)
    table.classification(0, CardSubtype.FACILITIES)
    target = table.classification(1, CardSubtype.FIELD_TECH)
    engine = table.engine()

    engine.play_classification(hunter.id, target.id)

    attacker = engine.state.players[0]
    assert len(attacker.classification_cards) == 2
    assert not attacker.has_classification(CardSubtype.FIELD_TECH)
    assert target.card in engine.state.discard_pile


def test_steal_at_cap_with_swap(table):
    hunter = table.give(0, CardSubtype.HEAD_HUNTER)[0]
    weak = table.classification(0, CardSubtype.SUPERVISOR)
    table.classification(0, CardSubtype.FACILITIES)
    target = table.classification(1, CardSubtype.FIELD_TECH)
    engine = table.engine()

    result = engine.play_classification(hunter.id, target.id, weak.id)

    assert result.success
    attacker = engine.state.players[0]
    assert len(attacker.classification_cards) == 2
    assert attacker.has_classification(CardSubtype.FIELD_TECH)
    assert not attacker.has_classification(CardSubtype.SUPERVISOR)
    assert weak.card in engine.state.discard_pile


def test_stolen_classification_clears_issues(table):
    """Abilities trigger when a classification enters play by steal"""
    hunter = table.give(0, CardSubtype.HEAD_HUNTER)[0]
    switch, _, _ = table.scoring_line(0, computers=2)
    table.attack(0, switch, CardSubtype.HACKED)
    target = table.classification(1, CardSubtype.SECURITY_SPECIALIST)
    engine = table.engine()
    assert engine.state.income(0) == 0

    engine.play_classification(hunter.id, target.id)

    assert engine.state.income(0) == 2


def test_steal_needs_a_target(table):
    hunter = table.give(0, CardSubtype.HEAD_HUNTER)[0]
    engine = table.engine()
    result = engine.play_classification(hunter.id)
    assert not result.success
    assert engine.state.moves_remaining == 3

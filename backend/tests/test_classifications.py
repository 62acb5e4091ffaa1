"""
Classification Tests

Tests for persistent abilities:
- Clearing matching issues on entry
- Blocking matching attacks
- The two-card cap and swaps
- Duplicates and steal protection
"""

from bitnet.core import CardSubtype
from bitnet.core.classifications import blocking_classification, equipment_moves_for


def test_entry_clears_matching_issues_everywhere(table):
    specialist = table.give(0, CardSubtype.SECURITY_SPECIALIST)[0]
    first, _, _ = table.scoring_line(0, computers=1)
    second, cable, _ = table.scoring_line(0, computers=2)
    table.attack(0, first, CardSubtype.HACKED)
    table.attack(0, cable, CardSubtype.HACKED)
    table.attack(0, second, CardSubtype.POWER_OUTAGE)
    engine = table.engine()

    result = engine.play_classification(specialist.id)

    assert result.success
    assert result.effects
    network = engine.state.players[0].network
    assert not network.switches[0].is_disabled
    assert network.switches[1].is_disabled
    assert engine.state.income(0) == 1
    hacked_in_discard = [c for c in engine.state.discard_pile if c.subtype == CardSubtype.HACKED]
    assert len(hacked_in_discard) == 2


def test_classification_blocks_matching_attack(table):
    outage = table.give(0, CardSubtype.POWER_OUTAGE)[0]
    switch, _, _ = table.scoring_line(1)
    table.classification(1, CardSubtype.FACILITIES)
    engine = table.engine()

    result = engine.play_attack(outage.id, switch.id, 1)

    assert result.success
    assert result.data["blocked"] is True
    assert engine.state.income(1) == 1
    assert outage in engine.state.discard_pile
    assert engine.state.moves_remaining == 2
    assert engine.get_stats()["attacks_blocked"] == 1


def test_classification_does_not_block_other_attacks(table):
    hacked = table.give(0, CardSubtype.HACKED)[0]
    switch, _, _ = table.scoring_line(1)
    table.classification(1, CardSubtype.FACILITIES)
    engine = table.engine()

    result = engine.play_attack(hacked.id, switch.id, 1)

    assert result.data["blocked"] is False
    assert engine.state.income(1) == 0


def test_blocking_lookup(table):
    table.classification(0, CardSubtype.SUPERVISOR)
    player = table.state.players[0]

    assert blocking_classification(player, CardSubtype.NEW_HIRE) is not None
    assert blocking_classification(player, CardSubtype.HACKED) is None


def test_cap_requires_a_discard_choice(table):
    tech = table.give(0, CardSubtype.FIELD_TECH)[0]
    table.classification(0, CardSubtype.SUPERVISOR)
    table.classification(0, CardSubtype.FACILITIES)
    engine = table.engine()

    result = engine.play_classification(tech.id)

    assert not result.success
    assert len(engine.state.players[0].classification_cards) == 2
    assert engine.state.moves_remaining == 3


def test_swap_at_cap(table):
    tech = table.give(0, CardSubtype.FIELD_TECH)[0]
    weak = table.classification(0, CardSubtype.SUPERVISOR)
    table.classification(0, CardSubtype.FACILITIES)
    engine = table.engine()

    result = engine.play_classification(tech.id, discard_class_id=weak.id)

    assert result.success
    player = engine.state.players[0]
    assert len(player.classification_cards) == 2
    assert player.has_classification(CardSubtype.FIELD_TECH)
    assert weak.card in engine.state.discard_pile


def test_duplicates_are_legal_and_protected(table):
    second = table.give(0, CardSubtype.SUPERVISOR)[0]
    table.classification(0, CardSubtype.SUPERVISOR)
    engine = table.engine()

    assert engine.play_classification(second.id).success

    player = engine.state.players[0]
    assert len(player.classification_cards) == 2
    assert player.is_steal_protected


def test_cap_never_exceeded_in_play(table):
    cards = table.give(0, CardSubtype.SUPERVISOR, CardSubtype.FACILITIES,
                       CardSubtype.FIELD_TECH)
    engine = table.engine()

    for card in cards:
        engine.play_classification(card.id)
        assert len(engine.state.players[0].classification_cards) <= 2


def test_field_tech_bonus_never_stacks(table):
    table.classification(0, CardSubtype.FIELD_TECH)
    table.classification(0, CardSubtype.FIELD_TECH)
    assert equipment_moves_for(table.state.players[0], table.config) == 1
    assert equipment_moves_for(table.state.players[1], table.config) == 0

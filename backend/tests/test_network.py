"""
Equipment Graph Tests

Tests for bitnet.core.network:
- Placement and floating equipment
- Cascade of disabled state
- Resolutions and helpdesk
- Moves and capacity
"""

import pytest

from bitnet.core import ActionRejected, CardSubtype, EquipmentKind
from bitnet.core.network import (
    apply_attack, apply_resolution, clear_issues, count_connected_computers,
    count_total_computers, find_node, is_consistent, iter_nodes, move_equipment,
    place_computer, recompute_disabled
)


# =============================================================================
# Placement
# =============================================================================

def test_floating_placement_is_legal(table):
    """Cables and computers may be placed without a parent"""
    cable = table.cable(0)
    computer = table.computer(0)
    network = table.network(0)

    assert network.floating_cables == [cable]
    assert network.floating_computers == [computer]
    assert count_connected_computers(network) == 0
    assert count_total_computers(network) == 1


def test_placement_ids_are_arena_style(table):
    switch = table.switch(0)
    cable = table.cable(0, switch)
    assert switch.id == "placement-1"
    assert cable.id == "placement-2"


def test_cable_capacity_is_enforced(table):
    """A cable never holds more computers than its capacity"""
    switch = table.switch(0)
    cable = table.cable(0, switch, CardSubtype.CABLE_2)
    table.computer(0, cable)
    table.computer(0, cable)

    with pytest.raises(ActionRejected):
        place_computer(table.network(0), "placement-99",
                       table.card(CardSubtype.COMPUTER), cable.id)
    assert len(cable.computers) == 2


def test_connected_computers_need_a_switch(table):
    """Computers on a floating cable do not score"""
    _, _, nodes = table.scoring_line(0, computers=2)
    floating_cable = table.cable(0)
    table.computer(0, floating_cable)

    assert count_connected_computers(table.network(0)) == len(nodes)


# =============================================================================
# Cascade
# =============================================================================

def test_switch_attack_disables_subtree(table):
    """Attack on a switch with one cable of two computers disables all 4 nodes"""
    switch = table.switch(0)
    cable = table.cable(0, switch, CardSubtype.CABLE_2)
    table.computer(0, cable)
    table.computer(0, cable)
    network = table.network(0)

    attack = table.attack(0, switch, CardSubtype.POWER_OUTAGE)

    assert all(ref.node.is_disabled for ref in iter_nodes(network))
    assert sum(1 for _ in iter_nodes(network)) == 4
    assert count_connected_computers(network) == 0
    assert is_consistent(network)

    removed = apply_resolution(network, switch.id, table.card(CardSubtype.POWERED))
    assert removed == [attack]
    assert not any(ref.node.is_disabled for ref in iter_nodes(network))
    assert count_connected_computers(network) == 2
    assert is_consistent(network)


def test_resolution_keeps_independent_issues(table):
    """A child with its own issue stays disabled after its parent is repaired"""
    switch, cable, nodes = table.scoring_line(0, computers=2)
    table.attack(0, switch, CardSubtype.HACKED)
    table.attack(0, nodes[0], CardSubtype.NEW_HIRE)
    network = table.network(0)

    apply_resolution(network, switch.id, table.card(CardSubtype.SECURED))

    assert not switch.is_disabled
    assert not cable.is_disabled
    assert nodes[0].is_disabled
    assert not nodes[1].is_disabled
    assert count_connected_computers(network) == 1
    assert is_consistent(network)


def test_resolution_must_match(table):
    switch = table.switch(0)
    table.attack(0, switch, CardSubtype.HACKED)

    with pytest.raises(ActionRejected):
        apply_resolution(table.network(0), switch.id, table.card(CardSubtype.TRAINED))
    assert switch.is_disabled


def test_helpdesk_clears_every_issue_on_one_node(table):
    switch, cable, _ = table.scoring_line(0)
    table.attack(0, cable, CardSubtype.HACKED)
    table.attack(0, cable, CardSubtype.POWER_OUTAGE)
    table.attack(0, switch, CardSubtype.NEW_HIRE)
    network = table.network(0)

    removed = apply_resolution(network, cable.id, table.card(CardSubtype.HELPDESK))

    assert len(removed) == 2
    assert cable.attached_issues == []
    # The switch issue was not on the targeted node
    assert cable.is_disabled
    assert is_consistent(network)


def test_helpdesk_needs_an_issue(table):
    switch = table.switch(0)
    with pytest.raises(ActionRejected):
        apply_resolution(table.network(0), switch.id, table.card(CardSubtype.HELPDESK))


def test_clear_issues_across_network(table):
    first, _, _ = table.scoring_line(0)
    second, _, _ = table.scoring_line(0)
    table.attack(0, first, CardSubtype.HACKED)
    table.attack(0, second, CardSubtype.HACKED)
    table.attack(0, second, CardSubtype.POWER_OUTAGE)
    network = table.network(0)

    removed = clear_issues(network, CardSubtype.HACKED)

    assert len(removed) == 2
    assert not first.is_disabled
    assert second.is_disabled
    assert is_consistent(network)


def test_is_consistent_detects_stale_flags(table):
    switch, cable, _ = table.scoring_line(0)
    table.attack(0, switch)
    cable.is_disabled = False
    assert not is_consistent(table.network(0))

    recompute_disabled(table.network(0))
    assert is_consistent(table.network(0))


# =============================================================================
# Moves
# =============================================================================

def test_reroute_cable_restores_scoring(table):
    """Moving a cable off a disabled switch re-enables it under the new parent"""
    broken, cable, nodes = table.scoring_line(0, computers=2)
    healthy = table.switch(0)
    table.attack(0, broken)
    network = table.network(0)
    assert count_connected_computers(network) == 0

    origin, free = move_equipment(network, cable.id, EquipmentKind.SWITCH, healthy.id)

    assert not free
    assert origin.parent is broken
    assert cable in healthy.cables
    assert count_connected_computers(network) == len(nodes)
    assert is_consistent(network)


def test_connecting_floating_equipment_is_free(table):
    switch = table.switch(0)
    cable = table.cable(0)
    network = table.network(0)

    _, free = move_equipment(network, cable.id, EquipmentKind.SWITCH, switch.id)

    assert free
    assert network.floating_cables == []


def test_move_to_floating_disconnects(table):
    _, cable, _ = table.scoring_line(0, computers=1)
    network = table.network(0)

    move_equipment(network, cable.id, EquipmentKind.FLOATING)

    assert network.floating_cables == [cable]
    assert count_connected_computers(network) == 0
    assert count_total_computers(network) == 1


def test_move_into_full_cable_rejected(table):
    _, full, _ = table.scoring_line(0, computers=2, subtype=CardSubtype.CABLE_2)
    computer = table.computer(0)

    with pytest.raises(ActionRejected):
        move_equipment(table.network(0), computer.id, EquipmentKind.CABLE, full.id)
    assert computer in table.network(0).floating_computers


def test_switches_cannot_move(table):
    switch = table.switch(0)
    with pytest.raises(ActionRejected):
        move_equipment(table.network(0), switch.id, EquipmentKind.FLOATING)


def test_move_keeps_subtree_and_ids(table):
    _, cable, nodes = table.scoring_line(0, computers=2)
    other = table.switch(0)
    network = table.network(0)

    move_equipment(network, cable.id, EquipmentKind.SWITCH, other.id)

    ref = find_node(network, nodes[0].id)
    assert ref is not None
    assert ref.parent is cable
    assert "switch 2" in ref.location


def test_attack_on_missing_node_rejected(table):
    with pytest.raises(ActionRejected):
        apply_attack(table.network(0), "placement-404", table.card(CardSubtype.HACKED))

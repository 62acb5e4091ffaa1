# =============================================================================
# BitNet Card Game - Equipment Graph & Cascade Resolver
# =============================================================================
"""
Mutation and query functions for a player's equipment forest.

The disabled flag of every node is derived state. After any change to the
tree or to attached issues, ``recompute_disabled`` walks the forest
top-down and rewrites every flag from the issues alone:

    switch   disabled = has issues
    cable    disabled = has issues or parent switch disabled
    computer disabled = has issues or parent cable disabled

Floating cables and computers have no parent, so only their own issues
count. All functions here operate on a network that the caller owns (the
engine always hands in a working clone) and raise ``ActionRejected`` when a
rule is broken.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from .cards import Card
from .data_structures import (
    ActionRejected, CableNode, PlacedCard, PlayerNetwork, SwitchNode
)
from .enums import CardSubtype, EquipmentKind


# =============================================================================
# Node Lookup
# =============================================================================

@dataclass
class NodeRef:
    """
    Where a placement lives in the forest.

    Attributes:
        kind: SWITCH, CABLE or COMPUTER
        node: The placement itself
        parent: Owning switch or cable, None at the root or when floating
        container: The list holding the node (for removal)
        floating: True for floating cables and floating computers
        location: Human-readable position ("switch 1 / cable 2")
    """
    kind: EquipmentKind
    node: PlacedCard
    parent: Optional[PlacedCard]
    container: list
    floating: bool
    location: str


def iter_nodes(network: PlayerNetwork) -> Iterator[NodeRef]:
    """Yield every placement in the network, parents before children"""
    for si, switch in enumerate(network.switches, start=1):
        yield NodeRef(EquipmentKind.SWITCH, switch, None, network.switches,
                      False, f"switch {si}")
        for ci, cable in enumerate(switch.cables, start=1):
            yield NodeRef(EquipmentKind.CABLE, cable, switch, switch.cables,
                          False, f"switch {si} / cable {ci}")
            for computer in cable.computers:
                yield NodeRef(EquipmentKind.COMPUTER, computer, cable,
                              cable.computers, False,
                              f"switch {si} / cable {ci}")
    for fi, cable in enumerate(network.floating_cables, start=1):
        yield NodeRef(EquipmentKind.CABLE, cable, None, network.floating_cables,
                      True, f"floating cable {fi}")
        for computer in cable.computers:
            yield NodeRef(EquipmentKind.COMPUTER, computer, cable,
                          cable.computers, False, f"floating cable {fi}")
    for computer in network.floating_computers:
        yield NodeRef(EquipmentKind.COMPUTER, computer, None,
                      network.floating_computers, True, "floating")


def find_node(network: PlayerNetwork, placement_id: str) -> Optional[NodeRef]:
    """Locate a placement by id"""
    for ref in iter_nodes(network):
        if ref.node.id == placement_id:
            return ref
    return None


def require_node(network: PlayerNetwork, placement_id: str) -> NodeRef:
    ref = find_node(network, placement_id)
    if ref is None:
        raise ActionRejected(f"Equipment {placement_id} not found")
    return ref


def find_switch(network: PlayerNetwork, switch_id: str) -> Optional[SwitchNode]:
    for switch in network.switches:
        if switch.id == switch_id:
            return switch
    return None


def find_cable(network: PlayerNetwork, cable_id: str) -> Optional[CableNode]:
    """Find a cable, attached or floating"""
    ref = find_node(network, cable_id)
    if ref is None or ref.kind != EquipmentKind.CABLE:
        return None
    return ref.node


# =============================================================================
# Cascade
# =============================================================================

def recompute_disabled(network: PlayerNetwork):
    """Rewrite every disabled flag top-down from attached issues"""
    for switch in network.switches:
        switch.is_disabled = switch.has_issues
        for cable in switch.cables:
            _recompute_cable(cable, parent_disabled=switch.is_disabled)
    for cable in network.floating_cables:
        _recompute_cable(cable, parent_disabled=False)
    for computer in network.floating_computers:
        computer.is_disabled = computer.has_issues


def _recompute_cable(cable: CableNode, parent_disabled: bool):
    cable.is_disabled = cable.has_issues or parent_disabled
    for computer in cable.computers:
        computer.is_disabled = computer.has_issues or cable.is_disabled


def is_consistent(network: PlayerNetwork) -> bool:
    """
    Check the cascade and capacity invariants without mutating anything.
    """
    for ref in iter_nodes(network):
        parent_disabled = ref.parent.is_disabled if ref.parent is not None else False
        if ref.node.is_disabled != (ref.node.has_issues or parent_disabled):
            return False
        if isinstance(ref.node, CableNode) and len(ref.node.computers) > ref.node.max_computers:
            return False
    return True


# =============================================================================
# Queries
# =============================================================================

def all_computers(network: PlayerNetwork) -> List[NodeRef]:
    """Every computer in the network, connected or floating"""
    return [ref for ref in iter_nodes(network) if ref.kind == EquipmentKind.COMPUTER]


def count_total_computers(network: PlayerNetwork) -> int:
    return len(all_computers(network))


def connected_computers(network: PlayerNetwork) -> List[PlacedCard]:
    """Enabled computers on enabled cables under enabled switches"""
    result = []
    for switch in network.switches:
        if switch.is_disabled:
            continue
        for cable in switch.cables:
            if cable.is_disabled:
                continue
            result.extend(c for c in cable.computers if not c.is_disabled)
    return result


def count_connected_computers(network: PlayerNetwork) -> int:
    """Bitcoin this network mines per turn"""
    return len(connected_computers(network))


def attached_cables(network: PlayerNetwork) -> List[Tuple[SwitchNode, CableNode]]:
    return [(s, c) for s in network.switches for c in s.cables]


def collect_cards(network: PlayerNetwork) -> List[Card]:
    """All equipment and issue cards on the table for this network"""
    cards = []
    for ref in iter_nodes(network):
        cards.append(ref.node.card)
        cards.extend(ref.node.attached_issues)
    return cards


# =============================================================================
# Placement
# =============================================================================

def place_switch(network: PlayerNetwork, placement_id: str, card: Card) -> SwitchNode:
    if card.subtype != CardSubtype.SWITCH:
        raise ActionRejected(f"{card.name} is not a switch")
    switch = SwitchNode(id=placement_id, card=card)
    network.switches.append(switch)
    recompute_disabled(network)
    return switch


def place_cable(network: PlayerNetwork, placement_id: str, card: Card,
                switch_id: Optional[str] = None) -> CableNode:
    """
    Place a cable under a switch, or floating when no switch is given.
    """
    if not card.subtype.is_cable:
        raise ActionRejected(f"{card.name} is not a cable")
    cable = CableNode(id=placement_id, card=card)
    if switch_id is None:
        network.floating_cables.append(cable)
    else:
        switch = find_switch(network, switch_id)
        if switch is None:
            raise ActionRejected(f"Switch {switch_id} not found")
        switch.cables.append(cable)
    recompute_disabled(network)
    return cable


def place_computer(network: PlayerNetwork, placement_id: str, card: Card,
                   cable_id: Optional[str] = None) -> PlacedCard:
    """
    Place a computer on a cable (attached or floating), or floating when no
    cable is given.
    """
    if card.subtype != CardSubtype.COMPUTER:
        raise ActionRejected(f"{card.name} is not a computer")
    computer = PlacedCard(id=placement_id, card=card)
    if cable_id is None:
        network.floating_computers.append(computer)
    else:
        cable = find_cable(network, cable_id)
        if cable is None:
            raise ActionRejected(f"Cable {cable_id} not found")
        if cable.is_full:
            raise ActionRejected(f"Cable is full ({cable.max_computers} computers)")
        cable.computers.append(computer)
    recompute_disabled(network)
    return computer


def move_equipment(network: PlayerNetwork, source_id: str,
                   target_kind: EquipmentKind,
                   target_id: Optional[str] = None) -> Tuple[NodeRef, bool]:
    """
    Detach a cable or computer (with its subtree) and reattach it.

    Args:
        network: Network to mutate
        source_id: Placement id of the cable or computer to move
        target_kind: SWITCH (cables), CABLE (computers) or FLOATING
        target_id: Placement id of the new parent, unless floating

    Returns:
        Tuple of (original location, is_free_connect). A connect is free when
        a floating cable or floating computer joins a parent.
    """
    source = require_node(network, source_id)
    if source.kind == EquipmentKind.SWITCH:
        raise ActionRejected("Switches cannot be moved")

    if target_kind == EquipmentKind.FLOATING:
        if source.floating:
            raise ActionRejected("Equipment is already floating")
        source.container.remove(source.node)
        if source.kind == EquipmentKind.CABLE:
            network.floating_cables.append(source.node)
        else:
            network.floating_computers.append(source.node)
        recompute_disabled(network)
        return source, False

    if target_id is None:
        raise ActionRejected("A target is required")

    if source.kind == EquipmentKind.CABLE:
        if target_kind != EquipmentKind.SWITCH:
            raise ActionRejected("Cables can only be connected to switches")
        switch = find_switch(network, target_id)
        if switch is None:
            raise ActionRejected(f"Switch {target_id} not found")
        if source.parent is switch:
            raise ActionRejected("Cable is already on that switch")
        source.container.remove(source.node)
        switch.cables.append(source.node)
    else:
        if target_kind != EquipmentKind.CABLE:
            raise ActionRejected("Computers can only be connected to cables")
        cable = find_cable(network, target_id)
        if cable is None:
            raise ActionRejected(f"Cable {target_id} not found")
        if source.parent is cable:
            raise ActionRejected("Computer is already on that cable")
        if cable.is_full:
            raise ActionRejected(f"Cable is full ({cable.max_computers} computers)")
        source.container.remove(source.node)
        cable.computers.append(source.node)

    recompute_disabled(network)
    return source, source.floating


def remove_computer(network: PlayerNetwork, placement_id: str) -> PlacedCard:
    """Take a computer off the table (audits)"""
    ref = require_node(network, placement_id)
    if ref.kind != EquipmentKind.COMPUTER:
        raise ActionRejected(f"{placement_id} is not a computer")
    ref.container.remove(ref.node)
    recompute_disabled(network)
    return ref.node


# =============================================================================
# Attacks & Resolutions
# =============================================================================

def apply_attack(network: PlayerNetwork, node_id: str, card: Card) -> NodeRef:
    """
    Attach an attack card to a node and disable its whole subtree.
    """
    if not card.subtype.is_disabling_attack:
        raise ActionRejected(f"{card.name} cannot be attached to equipment")
    ref = require_node(network, node_id)
    ref.node.attached_issues.append(card)
    recompute_disabled(network)
    return ref


def apply_resolution(network: PlayerNetwork, node_id: str, card: Card) -> List[Card]:
    """
    Remove issues from a node with a resolution card.

    ``secured``/``powered``/``trained`` remove one matching issue;
    ``helpdesk`` removes every issue on the node.

    Returns:
        The removed issue cards (destined for the discard pile)
    """
    ref = require_node(network, node_id)
    node = ref.node
    if card.subtype == CardSubtype.HELPDESK:
        if not node.attached_issues:
            raise ActionRejected("Nothing to resolve on that equipment")
        removed = list(node.attached_issues)
        node.attached_issues.clear()
    else:
        target = card.subtype.resolves
        if target is None:
            raise ActionRejected(f"{card.name} is not a resolution")
        match = next((i for i in node.attached_issues if i.subtype == target), None)
        if match is None:
            raise ActionRejected(f"{card.name} does not match any issue on that equipment")
        node.attached_issues.remove(match)
        removed = [match]
    recompute_disabled(network)
    return removed


def clear_issues(network: PlayerNetwork, subtype: CardSubtype) -> List[Card]:
    """Remove every issue of one subtype across the whole network"""
    removed: List[Card] = []
    for ref in iter_nodes(network):
        keep = []
        for issue in ref.node.attached_issues:
            (removed if issue.subtype == subtype else keep).append(issue)
        ref.node.attached_issues[:] = keep
    recompute_disabled(network)
    return removed

# =============================================================================
# BitNet Card Game - Battle Protocols
# =============================================================================
"""
The two interrupt sub-games.

Audit: the auditor plays an audit card against an opponent. The target may
block with ``hacked``, the auditor may counter-block with ``secured``, and
so on indefinitely. A pass by the target lets the audit succeed; a pass by
the auditor after a block makes it fail. On success the auditor selects
half of the target's computers (rounded up), which return to the target's
audited pool.

Head-hunter: a steal of an opponent classification. A defender holding a
head-hunter may contest it; the chain alternates the same way and a pass
decides the outcome. Seal-the-deal cannot be contested.

Every function mutates the working state it is given and returns the log
line; rule violations raise ActionRejected.
"""

import logging
import math
import random
from typing import List, Optional

from .cards import Card
from .classifications import make_room, on_enter_play
from .data_structures import (
    ActionRejected, AuditBattle, AuditCandidate, ChainLink, HeadHunterBattle
)
from .actions import ActionValidator
from .enums import AuditStage, CardSubtype, GamePhase
from .game_state import GameState
from .network import all_computers, count_total_computers, remove_computer

logger = logging.getLogger(__name__)


def _check_responder(expected: int, player_index: Optional[int]):
    if player_index is not None and player_index != expected:
        raise ActionRejected("It is not your turn to respond")


# =============================================================================
# Audit Battle
# =============================================================================

def audit_size(total_computers: int) -> int:
    """Computers an audit seizes: half, rounded up"""
    return math.ceil(total_computers / 2)


def start_audit(state: GameState, validator: ActionValidator,
                card_id: str, target_index: int) -> str:
    """
    Play an audit card against an opponent and open the counter chain.
    """
    validator.require_play(state)
    auditor_index = state.current_player_index
    auditor = state.current_player
    card = validator.require_card(auditor, card_id, subtypes=[CardSubtype.AUDIT])
    validator.require_target_player(state, target_index, auditor_index)

    target = state.players[target_index]
    total = count_total_computers(target.network)
    if total == 0:
        raise ActionRejected(f"{target.name} has no computers to audit")

    auditor.remove_from_hand(card.id)
    validator.spend_move(state)
    state.battle = AuditBattle(
        auditor_index=auditor_index,
        target_index=target_index,
        audit_card=card,
        computers_to_return=audit_size(total),
    )
    state.phase = GamePhase.AUDIT
    return (f"{auditor.name} audits {target.name}: "
            f"{audit_size(total)} of {total} computers at stake")


def _require_audit(state: GameState, stage: AuditStage) -> AuditBattle:
    battle = state.audit_battle
    if battle is None or state.phase != GamePhase.AUDIT:
        raise ActionRejected("No audit in progress")
    if battle.stage != stage:
        raise ActionRejected(f"The audit is in the {battle.stage} stage")
    return battle


def respond_to_audit(state: GameState, validator: ActionValidator,
                     card_id: str, player_index: Optional[int] = None) -> str:
    """Spend a block (target) or counter-block (auditor) card"""
    battle = _require_audit(state, AuditStage.COUNTER)
    responder_index = battle.responder_index
    _check_responder(responder_index, player_index)

    needed = CardSubtype.HACKED if responder_index == battle.target_index else CardSubtype.SECURED
    responder = state.players[responder_index]
    card = validator.require_card(responder, card_id, subtypes=[needed])
    responder.remove_from_hand(card.id)
    battle.chain.append(ChainLink(player_index=responder_index, card=card))

    verb = "blocks" if needed == CardSubtype.HACKED else "counters"
    return f"{responder.name} {verb} the audit with {card.name}"


def pass_audit(state: GameState, validator: ActionValidator, rng: random.Random,
               player_index: Optional[int] = None) -> str:
    """
    Decline to respond. The target passing lets the audit succeed; the
    auditor passing makes it fail.
    """
    battle = _require_audit(state, AuditStage.COUNTER)
    responder_index = battle.responder_index
    _check_responder(responder_index, player_index)

    target = state.players[battle.target_index]
    if responder_index == battle.target_index:
        battle.stage = AuditStage.SELECTION
        battle.available_computers = [
            AuditCandidate(placement_id=ref.node.id, card=ref.node.card, location=ref.location)
            for ref in all_computers(target.network)
        ]
        return (f"Audit succeeds: {battle.computers_to_return} of "
                f"{target.name}'s computers will return to the audited pool")

    _finish_audit(state, battle, rng)
    return f"Audit blocked: {target.name} keeps every computer"


def toggle_audit_selection(state: GameState, placement_id: str,
                           player_index: Optional[int] = None) -> str:
    """
    Add or remove a computer from the auditor's selection. Selecting past
    the limit drops the oldest selection.
    """
    battle = _require_audit(state, AuditStage.SELECTION)
    _check_responder(battle.auditor_index, player_index)
    if placement_id not in {c.placement_id for c in battle.available_computers}:
        raise ActionRejected(f"Computer {placement_id} cannot be selected")

    selected = battle.selected_computer_ids
    if placement_id in selected:
        selected.remove(placement_id)
        return f"Deselected {placement_id}"
    selected.append(placement_id)
    if len(selected) > battle.computers_to_return:
        dropped = selected.pop(0)
        return f"Selected {placement_id} (replaced {dropped})"
    return f"Selected {placement_id} ({len(selected)}/{battle.computers_to_return})"


def confirm_audit_selection(state: GameState, rng: random.Random,
                            player_index: Optional[int] = None) -> str:
    """Return the selected computers to the target's audited pool"""
    battle = _require_audit(state, AuditStage.SELECTION)
    _check_responder(battle.auditor_index, player_index)
    if len(battle.selected_computer_ids) != battle.computers_to_return:
        raise ActionRejected(
            f"Select exactly {battle.computers_to_return} computers "
            f"({len(battle.selected_computer_ids)} selected)"
        )

    target = state.players[battle.target_index]
    for placement_id in battle.selected_computer_ids:
        computer = remove_computer(target.network, placement_id)
        target.audited_computers.append(computer.card)
        state.discard_pile.extend(computer.attached_issues)

    count = len(battle.selected_computer_ids)
    _finish_audit(state, battle, rng)
    return f"{target.name} returns {count} computer(s) to the audited pool"


def _finish_audit(state: GameState, battle: AuditBattle, rng: random.Random):
    state.discard_pile.append(battle.audit_card)
    state.discard_pile.extend(link.card for link in battle.chain)
    state.refill_hand(battle.target_index, rng)
    state.battle = None
    state.phase = GamePhase.MOVES
    logger.info("Audit resolved after a chain of %d", len(battle.chain))


# =============================================================================
# Head-Hunter Battle
# =============================================================================

def start_steal(state: GameState, validator: ActionValidator, card_id: str,
                target_classification_id: Optional[str],
                discard_classification_id: Optional[str] = None) -> str:
    """
    Play head-hunter or seal-the-deal against an opponent classification.
    """
    validator.require_play(state)
    attacker_index = state.current_player_index
    defender_index = state.opponent_index
    attacker = state.players[attacker_index]
    defender = state.players[defender_index]
    card = validator.require_card(
        attacker, card_id, subtypes=[CardSubtype.HEAD_HUNTER, CardSubtype.SEAL_THE_DEAL]
    )

    if target_classification_id is None:
        raise ActionRejected("Choose an opponent classification to steal")
    target = defender.find_classification(target_classification_id)
    if target is None:
        raise ActionRejected(f"{defender.name} has no classification {target_classification_id}")
    if defender.is_steal_protected:
        raise ActionRejected(
            f"{defender.name}'s matching pair of {target.card.name} cannot be stolen"
        )
    if (discard_classification_id is not None
            and attacker.find_classification(discard_classification_id) is None):
        raise ActionRejected(f"Classification {discard_classification_id} not found")

    attacker.remove_from_hand(card.id)
    validator.spend_move(state)

    contested = (card.subtype == CardSubtype.HEAD_HUNTER
                 and defender.cards_of(CardSubtype.HEAD_HUNTER))
    if not contested:
        return _resolve_steal(state, attacker_index, defender_index,
                              target_classification_id, discard_classification_id,
                              [card], succeeded=True)

    state.battle = HeadHunterBattle(
        attacker_index=attacker_index,
        defender_index=defender_index,
        initial_card=card,
        target_classification_id=target_classification_id,
        discard_classification_id=discard_classification_id,
        previous_phase=state.phase,
        previous_moves_remaining=state.moves_remaining,
    )
    state.phase = GamePhase.HEADHUNTER_BATTLE
    return f"{attacker.name} tries to steal {target.card.name}; {defender.name} may respond"


def _require_headhunter(state: GameState) -> HeadHunterBattle:
    battle = state.headhunter_battle
    if battle is None or state.phase != GamePhase.HEADHUNTER_BATTLE:
        raise ActionRejected("No head-hunter battle in progress")
    return battle


def respond_to_headhunter(state: GameState, validator: ActionValidator,
                          card_id: str, player_index: Optional[int] = None) -> str:
    """Spend a head-hunter to block (defender) or re-block (attacker)"""
    battle = _require_headhunter(state)
    responder_index = battle.responder_index
    _check_responder(responder_index, player_index)
    responder = state.players[responder_index]
    card = validator.require_card(responder, card_id, subtypes=[CardSubtype.HEAD_HUNTER])
    responder.remove_from_hand(card.id)
    battle.chain.append(ChainLink(player_index=responder_index, card=card))
    return f"{responder.name} answers with {card.name}"


def pass_headhunter(state: GameState, player_index: Optional[int] = None) -> str:
    """
    Decline to respond. The defender passing lets the steal succeed; the
    attacker passing means it is blocked.
    """
    battle = _require_headhunter(state)
    responder_index = battle.responder_index
    _check_responder(responder_index, player_index)
    cards = [battle.initial_card] + [link.card for link in battle.chain]
    return _resolve_steal(state, battle.attacker_index, battle.defender_index,
                          battle.target_classification_id,
                          battle.discard_classification_id, cards,
                          succeeded=responder_index == battle.defender_index,
                          battle=battle)


def _resolve_steal(state: GameState, attacker_index: int, defender_index: int,
                   target_id: str, discard_id: Optional[str], spent: List[Card],
                   succeeded: bool, battle: Optional[HeadHunterBattle] = None) -> str:
    state.discard_pile.extend(spent)
    if battle is not None:
        state.battle = None
        state.phase = battle.previous_phase
        state.moves_remaining = battle.previous_moves_remaining

    attacker = state.players[attacker_index]
    defender = state.players[defender_index]
    if not succeeded:
        logger.info("Steal by %s blocked", attacker.name)
        return f"{defender.name} blocks the steal"

    stolen = defender.find_classification(target_id)
    if stolen is None:
        raise ActionRejected(f"{defender.name} no longer holds {target_id}")
    defender.classification_cards.remove(stolen)

    if attacker.has_classification(stolen.subtype):
        state.discard_pile.append(stolen.card)
        return f"{attacker.name} steals {stolen.card.name} but already holds one; it is discarded"

    if len(attacker.classification_cards) >= state.config.max_classifications and discard_id is None:
        state.discard_pile.append(stolen.card)
        return f"{attacker.name} steals {stolen.card.name} but has no room; it is discarded"

    swapped = make_room(state, attacker_index, discard_id)
    attacker.classification_cards.append(stolen)
    effects = on_enter_play(state, attacker_index, stolen)
    message = f"{attacker.name} steals {stolen.card.name} from {defender.name}"
    if swapped is not None:
        message += f" (discarding {swapped.name})"
    if effects:
        message += "; " + "; ".join(effects)
    logger.info(message)
    return message

# =============================================================================
# BitNet Card Game - Utility Evaluator
# =============================================================================
"""
Scores candidate actions for the computer opponent.

Every candidate gets seven components, each measured by applying the
action to a throwaway copy of the affected network:

    bitcoin_gain          own income change
    bitcoin_denial        opponent income lost
    board_stability       own equipment brought back online
    future_advantage      capacity and combos set up for later turns
    risk_penalty          chance the card is wasted (subtracted)
    redundancy_bonus      change of the redundancy score
    classification_value  worth of the ability gained or taken

The weighted sum is then scaled by the category order, the match
aggression profile and the endgame multipliers.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..core.data_structures import ActionRejected, Player, PlayerNetwork
from ..core.enums import CardSubtype
from ..core.game_state import GameState
from ..core.network import (
    apply_attack, apply_resolution, clear_issues, count_connected_computers,
    count_total_computers, move_equipment, place_cable, place_computer,
    place_switch
)
from .analysis import (
    HandAnalysis, NetworkAnalysis, OpponentProfile, analyze_network,
    estimate_turns_to_win
)
from .candidates import AIActionType, CandidateAction
from .config import Aggression, AIConfig, UtilityWeights


# Base worth of holding each classification
CLASSIFICATION_VALUE: Dict[CardSubtype, float] = {
    CardSubtype.FIELD_TECH: 1.5,
    CardSubtype.SECURITY_SPECIALIST: 1.2,
    CardSubtype.FACILITIES: 1.0,
    CardSubtype.SUPERVISOR: 1.0,
}

SIM_ID = "sim-placement"


@dataclass
class DecisionContext:
    """Everything one decision is scored against"""
    state: GameState
    player_index: int
    own: NetworkAnalysis
    opponent: NetworkAnalysis
    hand: HandAnalysis
    profile: OpponentProfile
    weights: UtilityWeights
    turns_to_win: float
    can_win_now: bool
    opponent_threatens_win: bool

    @property
    def player(self) -> Player:
        return self.state.players[self.player_index]

    @property
    def opponent_player(self) -> Player:
        return self.state.players[self.state.other_index(self.player_index)]

    def to_dict(self) -> Dict:
        return {
            "own_network": self.own.to_dict(),
            "opponent_network": self.opponent.to_dict(),
            "hand": self.hand.to_dict(),
            "opponent": self.profile.to_dict(),
            "weights": self.weights.to_dict(),
            "turns_to_win": None if math.isinf(self.turns_to_win) else self.turns_to_win,
            "can_win_now": self.can_win_now,
            "opponent_threatens_win": self.opponent_threatens_win,
        }


class UtilityEvaluator:
    """
    Weighted utility of candidate actions.
    """

    def __init__(self, config: AIConfig, aggression: Aggression = Aggression.BALANCED):
        self.config = config
        self.aggression = aggression

    # =========================================================================
    # Public API
    # =========================================================================

    def evaluate(self, candidate: CandidateAction, ctx: DecisionContext) -> float:
        """Score one candidate and store the breakdown on it"""
        components = self._components(candidate, ctx)
        w = ctx.weights

        gain_weight = w.bitcoin_gain
        denial_weight = w.bitcoin_denial
        if ctx.can_win_now:
            gain_weight *= self.config.endgame_scoring_multiplier
        if ctx.opponent_threatens_win:
            denial_weight *= self.config.endgame_denial_multiplier

        risk = components["risk"] * (2.0 - self.config.risk_tolerance)
        utility = (
            gain_weight * components["gain"]
            + denial_weight * components["denial"]
            + w.board_stability * components["stability"]
            + w.future_advantage * components["future"]
            - w.risk_penalty * risk
            + w.redundancy_bonus * components["redundancy"]
            + w.classification_value * components["classification"]
        )
        category = candidate.category
        if utility > 0:
            utility *= category.order_weight * self.aggression.category_bias(category)

        candidate.breakdown = components
        candidate.utility = utility
        return utility

    def evaluate_all(self, candidates: List[CandidateAction],
                     ctx: DecisionContext) -> List[CandidateAction]:
        """Score every candidate, best first"""
        for candidate in candidates:
            self.evaluate(candidate, ctx)
        return sorted(candidates, key=lambda c: c.utility, reverse=True)

    # =========================================================================
    # Components
    # =========================================================================

    def _components(self, c: CandidateAction, ctx: DecisionContext) -> Dict[str, float]:
        comp = {
            "gain": 0.0, "denial": 0.0, "stability": 0.0, "future": 0.0,
            "risk": 0.0, "redundancy": 0.0, "classification": 0.0,
        }
        kind = c.action_type

        if kind in (AIActionType.PLAY_SWITCH, AIActionType.PLAY_CABLE,
                    AIActionType.PLAY_COMPUTER, AIActionType.CONNECT,
                    AIActionType.REROUTE, AIActionType.PLAY_RESOLUTION):
            after = self._simulate_own(c, ctx.player.network)
            if after is None:
                comp["risk"] = 10.0
                return comp
            analysis = analyze_network(after)
            comp["gain"] = analysis.connected_computers - ctx.own.connected_computers
            comp["stability"] = ((ctx.own.disabled_equipment - analysis.disabled_equipment)
                                 / max(1, analysis.total_equipment))
            comp["redundancy"] = analysis.redundancy_score - ctx.own.redundancy_score
            comp["future"] = self._future(c, ctx, analysis)
            if c.from_audit:
                comp["future"] += 0.3
            if kind == AIActionType.PLAY_RESOLUTION:
                comp["stability"] += 0.2

        elif kind == AIActionType.PLAY_ATTACK:
            after = ctx.opponent_player.network.clone()
            try:
                apply_attack(after, c.target_id, c.card)
            except ActionRejected:
                comp["risk"] = 10.0
                return comp
            comp["denial"] = ctx.opponent.connected_computers - count_connected_computers(after)
            # Secured in hand undoes a hack next turn
            if c.card.subtype == CardSubtype.HACKED:
                comp["risk"] = min(1.0, ctx.profile.likely_secured) * 0.5
            comp["future"] = 0.1 if comp["denial"] == 0 and ctx.opponent.connected_computers else 0.0

        elif kind == AIActionType.START_AUDIT:
            total = count_total_computers(ctx.opponent_player.network)
            seized = math.ceil(total / 2)
            block = min(1.0, ctx.profile.likely_hacked)
            comp["denial"] = min(seized, ctx.opponent.connected_computers) * (1.0 - block)
            comp["risk"] = block
            comp["future"] = 0.1 * seized

        elif kind == AIActionType.STEAL_CLASSIFICATION:
            target = ctx.opponent_player.find_classification(c.target_id)
            value = CLASSIFICATION_VALUE.get(target.subtype, 1.0) if target else 0.0
            if target is not None and target.subtype == CardSubtype.FIELD_TECH:
                value *= 1.5
            elif target is not None and target.subtype == CardSubtype.SECURITY_SPECIALIST:
                value *= 1.2
            if c.card.subtype == CardSubtype.SEAL_THE_DEAL:
                value *= 1.3
            else:
                comp["risk"] = min(1.0, ctx.profile.likely_head_hunters)
            comp["classification"] = value
            if target is not None and target.subtype.clears is not None:
                comp["gain"] = self._cleared_gain(ctx, target.subtype)

        elif kind == AIActionType.PLAY_CLASSIFICATION:
            comp["classification"] = self._classification_value(c, ctx)
            if c.card.subtype.clears is not None:
                comp["gain"] = self._cleared_gain(ctx, c.card.subtype)
            if c.discard_id is not None:
                held = ctx.player.find_classification(c.discard_id)
                if held is not None:
                    comp["classification"] -= CLASSIFICATION_VALUE.get(held.subtype, 1.0) * 0.8

        elif kind == AIActionType.DISCARD:
            is_dead = c.card in ctx.hand.dead_cards
            comp["future"] = 0.4 if is_dead else 0.1
            if c.forced:
                comp["future"] = 0.05

        return comp

    def _simulate_own(self, c: CandidateAction,
                      network: PlayerNetwork) -> Optional[PlayerNetwork]:
        """Apply an own-network action to a copy, None if it is illegal"""
        after = network.clone()
        try:
            if c.action_type == AIActionType.PLAY_SWITCH:
                place_switch(after, SIM_ID, c.card)
            elif c.action_type == AIActionType.PLAY_CABLE:
                place_cable(after, SIM_ID, c.card, c.target_id)
            elif c.action_type == AIActionType.PLAY_COMPUTER:
                place_computer(after, SIM_ID, c.card, c.target_id)
            elif c.action_type in (AIActionType.CONNECT, AIActionType.REROUTE):
                move_equipment(after, c.source_id, c.target_kind, c.target_id)
            elif c.action_type == AIActionType.PLAY_RESOLUTION:
                apply_resolution(after, c.target_id, c.card)
        except ActionRejected:
            return None
        return after

    def _future(self, c: CandidateAction, ctx: DecisionContext,
                after: NetworkAnalysis) -> float:
        """Capacity and combos opened up by an equipment action"""
        hand = ctx.hand
        depth = min(self.config.lookahead_depth, 3) / 2.0
        computers_ready = len(hand.computers) + len(ctx.player.audited_computers) + after.floating_computers
        future = 0.0

        if c.action_type == AIActionType.PLAY_SWITCH:
            future += 0.5
            # A cable in hand and a computer to follow
            if hand.cables or ctx.player.network.floating_cables:
                future += 0.5 * depth
            if ctx.own.enabled_switches == 0:
                future += 1.0
        elif c.action_type == AIActionType.PLAY_CABLE:
            slots = c.card.subtype.cable_capacity
            if c.target_id is not None:
                future += 0.3 * min(slots, computers_ready) * depth + 0.2 * slots
            else:
                future += 0.1 * slots
        elif c.action_type == AIActionType.PLAY_COMPUTER:
            future += 0.2 if c.target_id is None else 0.3
        elif c.action_type == AIActionType.CONNECT:
            future += 0.2

        # Capacity waiting to be filled
        future += 0.1 * min(after.available_cable_slots, computers_ready)
        return future

    def _cleared_gain(self, ctx: DecisionContext, subtype: CardSubtype) -> float:
        """Income regained when a classification clears its issue type"""
        after = ctx.player.network.clone()
        clear_issues(after, subtype.clears)
        return count_connected_computers(after) - ctx.own.connected_computers

    def _classification_value(self, c: CandidateAction, ctx: DecisionContext) -> float:
        subtype = c.card.subtype
        value = CLASSIFICATION_VALUE.get(subtype, 1.0)
        if subtype == CardSubtype.FIELD_TECH:
            value += 0.2 * len(ctx.hand.equipment)
        elif subtype.clears == CardSubtype.HACKED:
            value += 0.3 * min(1.0, ctx.profile.likely_hacked)
        if ctx.player.has_classification(subtype):
            # Duplicate only buys steal protection
            value = 0.4 if ctx.profile.likely_head_hunters > 0.5 else 0.2
        if ctx.profile.likely_head_hunters > 0.5 and not ctx.player.is_steal_protected:
            value *= 0.8
        return value


def build_context(state: GameState, player_index: int, hand: HandAnalysis,
                  own: NetworkAnalysis, opponent: NetworkAnalysis,
                  profile: OpponentProfile, weights: UtilityWeights) -> DecisionContext:
    """Assemble the decision context with the endgame flags"""
    player = state.players[player_index]
    other = state.players[state.other_index(player_index)]
    winning = state.config.winning_score
    return DecisionContext(
        state=state,
        player_index=player_index,
        own=own,
        opponent=opponent,
        hand=hand,
        profile=profile,
        weights=weights,
        turns_to_win=estimate_turns_to_win(player.score, own.connected_computers, winning),
        can_win_now=player.score + own.connected_computers + len(hand.computers) >= winning,
        opponent_threatens_win=other.score + opponent.connected_computers >= winning,
    )

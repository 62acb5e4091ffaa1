# =============================================================================
# BitNet Card Game - Opponent Agent
# =============================================================================
"""
The computer opponent.

For every single action it re-runs the whole pipeline against the live
state: network and hand analysis, opponent modelling, candidate generation,
utility scoring and selection. The chosen candidate is executed through the
engine's public action methods, so the opponent is bound by exactly the
same rules as a human.

Safety nets keep every turn finite:
1. A failed action type is excluded for the rest of the turn
2. Too many consecutive failures force a fallback discard
3. Too many distinct failed types force a fallback discard
4. An iteration cap ends the loop regardless
"""

import logging
from typing import Dict, List, Optional, Set

import numpy as np

from ..core.data_structures import ActionResult, AuditBattle, AuditCandidate, GameConfig
from ..core.enums import (
    AuditStage, CardSubtype, Difficulty, EquipmentKind, GamePhase, counter_subtype_for
)
from ..core.game_engine import GameEngine, GameEvent, GameEventType
from ..core.game_state import GameState
from .analysis import OpponentModel, analyze_hand, analyze_network, estimate_turns_to_win
from .candidates import AIActionType, CandidateAction, CandidateGenerator
from .config import ActionCategory, Aggression, AIConfig, derive_weights
from .evaluator import CLASSIFICATION_VALUE, DecisionContext, UtilityEvaluator, build_context

logger = logging.getLogger(__name__)


class OpponentAgent:
    """
    Priority-weighted decision engine for one seat.

    Example usage:
        agent = OpponentAgent(player_index=1, difficulty=Difficulty.HARD, seed=3)
        agent.attach(engine)
        result = agent.play_turn(engine)
    """

    def __init__(self, player_index: int = 1,
                 difficulty: Difficulty = Difficulty.NORMAL,
                 seed: Optional[int] = None,
                 config: Optional[AIConfig] = None):
        self.player_index = player_index
        self.difficulty = difficulty
        self.config = config or AIConfig.for_difficulty(difficulty)
        self.rng = np.random.default_rng(seed)

        # Match state
        self.aggression = Aggression.select(self.rng)
        self.model = OpponentModel(self.config.counter_estimation_accuracy)
        self.generator = CandidateGenerator(self.config)
        self.evaluator = UtilityEvaluator(self.config, self.aggression)
        self.turns_played = 0
        self.actions_taken = 0
        self.last_candidates: List[CandidateAction] = []

        logger.info("Opponent seat %d: %s, %s", player_index, difficulty.name, self.aggression)

    # =========================================================================
    # Engine Hooks
    # =========================================================================

    def attach(self, engine: GameEngine):
        """Start observing the other player's cards"""
        engine.add_event_listener(GameEventType.ACTION_PERFORMED, self._on_action)

    def detach(self, engine: GameEngine):
        engine.remove_event_listener(GameEventType.ACTION_PERFORMED, self._on_action)

    def _on_action(self, event: GameEvent):
        if event.player_index is None or event.player_index == self.player_index:
            return
        if event.action == "discard":
            return
        subtype = event.data.get("card_subtype")
        if subtype is not None:
            self.model.observe(CardSubtype(subtype))

    # =========================================================================
    # Decision Pipeline
    # =========================================================================

    def build_context(self, state: GameState) -> DecisionContext:
        """Fresh analysis of the current state"""
        me = state.players[self.player_index]
        other_index = state.other_index(self.player_index)
        other = state.players[other_index]

        own = analyze_network(me.network)
        opponent = analyze_network(other.network)
        hand = analyze_hand(me, own)
        profile = self.model.profile(state, self.player_index, opponent)

        turns = estimate_turns_to_win(me.score, own.connected_computers,
                                      state.config.winning_score)
        weights = derive_weights(self.config, me.score - other.score, turns)
        return build_context(state, self.player_index, hand, own, opponent, profile, weights)

    def rank_candidates(self, state: GameState,
                        exclude: Optional[Set[AIActionType]] = None) -> List[CandidateAction]:
        """
        Generate, score and perturb every candidate, best first.

        Noise scales with the tier's randomness. Holding back marks down
        optional disruption and setup plays.
        """
        ctx = self.build_context(state)
        candidates = self.generator.generate(state, self.player_index, ctx.hand)
        if exclude:
            candidates = [c for c in candidates if c.action_type not in exclude]
        ranked = self.evaluator.evaluate_all(candidates, ctx)

        for candidate in ranked:
            if self.config.randomness > 0:
                candidate.utility += self.rng.normal(0.0, self.config.randomness) * max(1.0, abs(candidate.utility))
            if (candidate.category in (ActionCategory.DISRUPT, ActionCategory.SETUP)
                    and candidate.breakdown.get("denial", 0.0) < 2
                    and self.rng.random() < self.config.hold_probability):
                candidate.utility *= 0.5
                candidate.reasoning += " (held back)"

        ranked.sort(key=lambda c: c.utility, reverse=True)
        self.last_candidates = ranked
        return ranked

    def choose_action(self, ranked: List[CandidateAction]) -> Optional[CandidateAction]:
        """
        Take the best candidate, or with the bluff probability a
        softmax-weighted pick among the near-optimal ones.
        """
        if not ranked:
            return None
        best = ranked[0]
        if len(ranked) == 1 or self.rng.random() >= self.config.bluff_probability:
            return best

        margin = abs(best.utility) * self.config.near_optimal_margin
        near = [c for c in ranked if c.utility >= best.utility - margin and c.utility > 0]
        if len(near) < 2:
            return best
        utilities = np.array([c.utility for c in near])
        weights = np.exp(utilities - utilities.max())
        weights /= weights.sum()
        return near[int(self.rng.choice(len(near), p=weights))]

    # =========================================================================
    # Execution
    # =========================================================================

    def execute(self, engine: GameEngine, action: CandidateAction) -> ActionResult:
        """Dispatch a candidate to the engine's action API"""
        dispatch = {
            AIActionType.PLAY_SWITCH: lambda a: engine.play_switch(a.card.id),
            AIActionType.PLAY_CABLE: lambda a: engine.play_cable(a.card.id, a.target_id),
            AIActionType.PLAY_COMPUTER: lambda a: engine.play_computer(a.card.id, a.target_id),
            AIActionType.CONNECT: lambda a: engine.move_equipment(
                self._source_kind(a), a.source_id, a.target_kind, a.target_id),
            AIActionType.REROUTE: lambda a: engine.move_equipment(
                self._source_kind(a), a.source_id, a.target_kind, a.target_id),
            AIActionType.PLAY_RESOLUTION: lambda a: engine.play_resolution(a.card.id, a.target_id),
            AIActionType.PLAY_ATTACK: lambda a: engine.play_attack(a.card.id, a.target_id, a.target_player),
            AIActionType.START_AUDIT: lambda a: engine.start_audit(a.card.id, a.target_player),
            AIActionType.STEAL_CLASSIFICATION: lambda a: engine.play_classification(
                a.card.id, a.target_id, a.discard_id),
            AIActionType.PLAY_CLASSIFICATION: lambda a: engine.play_classification(
                a.card.id, None, a.discard_id),
            AIActionType.DISCARD: lambda a: engine.discard_card(a.card.id),
        }
        return dispatch[action.action_type](action)

    def _source_kind(self, action: CandidateAction) -> str:
        """Cables hang from switches, computers from cables"""
        return "cable" if action.target_kind == EquipmentKind.SWITCH else "computer"

    def play_turn(self, engine: GameEngine) -> ActionResult:
        """
        Act until the turn ends, or until a battle waits on the other player.

        Returns:
            ActionResult whose data holds the executed actions and whether
            the opponent is waiting for a response
        """
        actions: List[Dict] = []
        state = engine.state
        if state is None or state.is_game_over:
            return ActionResult(action="ai_turn", success=False, message="The game is over")

        if state.battle is not None:
            if self.handle_battle(engine, actions):
                return self._turn_result(actions, waiting=True)
        if engine.state.current_player_index != self.player_index or engine.is_game_over():
            return self._turn_result(actions, waiting=False)

        failed_types: Set[AIActionType] = set()
        consecutive_failures = 0

        for _ in range(self.config.max_turn_iterations):
            state = engine.state
            if state.is_game_over or state.current_player_index != self.player_index:
                break
            if state.battle is not None:
                if self.handle_battle(engine, actions):
                    return self._turn_result(actions, waiting=True)
                continue
            if state.phase != GamePhase.MOVES:
                break

            choice: Optional[CandidateAction] = None
            tripped = (consecutive_failures >= self.config.max_consecutive_failures
                       or len(failed_types) >= self.config.max_failed_action_types)
            if not tripped:
                choice = self.choose_action(self.rank_candidates(state, exclude=failed_types))
                if choice is None and state.moves_remaining <= 0:
                    break
                if (choice is not None and choice.utility <= self.config.worthless_utility
                        and choice.action_type != AIActionType.DISCARD):
                    logger.debug("Best action %s is worthless, ending turn", choice.describe())
                    break
            if choice is None:
                choice = self.generator.forced_discard(state, self.player_index)
                if choice is None:
                    break

            result = self.execute(engine, choice)
            actions.append(self._record(choice, result))
            if result.success:
                consecutive_failures = 0
                self.actions_taken += 1
            else:
                consecutive_failures += 1
                failed_types.add(choice.action_type)
                logger.debug("Opponent action %s failed: %s", choice.describe(), result.message)
                if choice.forced:
                    break

        state = engine.state
        if (not state.is_game_over and state.battle is None
                and state.current_player_index == self.player_index
                and state.phase in (GamePhase.MOVES, GamePhase.DISCARD)):
            result = engine.end_phase()
            actions.append({"type": "end_phase", "success": result.success,
                            "message": result.message})
            self.turns_played += 1
        return self._turn_result(actions, waiting=False)

    def _record(self, choice: CandidateAction, result: ActionResult) -> Dict:
        return {
            "type": str(choice.action_type),
            "card_id": choice.card.id if choice.card else None,
            "target_id": choice.target_id,
            "utility": round(choice.utility, 3),
            "reasoning": choice.reasoning,
            "forced": choice.forced,
            "success": result.success,
            "message": result.message,
        }

    def _turn_result(self, actions: List[Dict], waiting: bool) -> ActionResult:
        performed = sum(1 for a in actions if a["success"])
        message = f"Opponent performed {performed} action(s)"
        if waiting:
            message += " and is waiting for a response"
        return ActionResult(action="ai_turn", success=True, message=message,
                            data={"actions": actions, "waiting_for_response": waiting,
                                  "player_index": self.player_index})

    # =========================================================================
    # Battles
    # =========================================================================

    def handle_battle(self, engine: GameEngine, actions: List[Dict]) -> bool:
        """
        Answer every battle step that belongs to this seat.

        Returns:
            True when the battle now waits on the other player
        """
        for _ in range(self.config.max_turn_iterations):
            state = engine.state
            battle = state.battle
            if battle is None or state.is_game_over:
                return False
            if battle.responder_index != self.player_index:
                return True

            if isinstance(battle, AuditBattle) and battle.stage == AuditStage.SELECTION:
                chosen = self.select_audit_targets(battle.available_computers,
                                                   battle.computers_to_return)
                for placement_id in chosen:
                    engine.toggle_audit_computer_selection(placement_id, self.player_index)
                result = engine.confirm_audit_selection(self.player_index)
                actions.append({"type": "audit_selection", "card_id": None,
                                "target_id": ",".join(chosen), "success": result.success,
                                "message": result.message})
            elif isinstance(battle, AuditBattle):
                card_id = self.decide_audit_response(state)
                if card_id is not None:
                    result = engine.respond_to_audit(card_id, self.player_index)
                else:
                    result = engine.pass_audit(self.player_index)
                actions.append({"type": "audit_response", "card_id": card_id,
                                "success": result.success, "message": result.message})
            else:
                card_id = self.decide_headhunter_response(state)
                if card_id is not None:
                    result = engine.respond_to_headhunter_battle(card_id, self.player_index)
                else:
                    result = engine.pass_headhunter_battle(self.player_index)
                actions.append({"type": "headhunter_response", "card_id": card_id,
                                "success": result.success, "message": result.message})

            if not result.success:
                logger.warning("Battle step failed for seat %d: %s", self.player_index, result.message)
                return engine.state.battle is not None
        return engine.state.battle is not None

    def decide_audit_response(self, state: GameState) -> Optional[str]:
        """
        Spend hacked (as target) or secured (as auditor) in the audit chain?

        Returns:
            Card id to play, or None to pass
        """
        battle = state.audit_battle
        if battle is None:
            return None
        is_target = battle.responder_index == battle.target_index
        needed = counter_subtype_for(GamePhase.AUDIT, defending=is_target)
        counters = state.players[self.player_index].cards_of(needed)
        if not counters:
            return None

        at_stake = battle.computers_to_return
        chain = len(battle.chain)
        if self.config.is_easy:
            return counters[0].id if len(counters) >= 2 else None

        if is_target:
            counter = at_stake >= 2 or (len(counters) >= 2 and at_stake >= 1)
        else:
            counter = at_stake >= 3 or (chain >= 2 and self.config.is_hard)

        if chain >= 2 and self.rng.random() > self.config.risk_tolerance:
            counter = False
        return counters[0].id if counter else None

    def decide_headhunter_response(self, state: GameState) -> Optional[str]:
        """Spend a head-hunter in a steal chain?"""
        battle = state.headhunter_battle
        if battle is None:
            return None
        is_defender = battle.responder_index == battle.defender_index
        needed = counter_subtype_for(GamePhase.HEADHUNTER_BATTLE, defending=is_defender)
        counters = state.players[self.player_index].cards_of(needed)
        if not counters:
            return None
        if self.config.is_easy:
            return counters[0].id if len(counters) >= 2 else None

        defender = state.players[battle.defender_index]
        target = defender.find_classification(battle.target_classification_id)
        value = CLASSIFICATION_VALUE.get(target.subtype, 1.0) if target else 0.0
        chain = len(battle.chain)

        if is_defender:
            counter = value >= 1.0 or len(counters) >= 2
        else:
            counter = value >= 1.2 or (chain >= 2 and self.config.is_hard)

        if chain >= 2 and self.rng.random() > self.config.risk_tolerance:
            counter = False
        return counters[0].id if counter else None

    def select_audit_targets(self, available: List[AuditCandidate], count: int) -> List[str]:
        """
        Pick the computers the audited player must give up. Connected
        computers come first; easy picks at random.
        """
        if self.config.is_easy:
            order = self.rng.permutation(len(available))
            return [available[int(i)].placement_id for i in order[:count]]

        scored = []
        for candidate in available:
            score = 50.0
            if not candidate.location.startswith("floating"):
                score += 30
            if "cable" in candidate.location:
                score += 10
            score += (self.rng.random() - 0.5) * self.config.randomness * 100
            scored.append((score, candidate.placement_id))
        scored.sort(key=lambda s: s[0], reverse=True)
        return [placement_id for _, placement_id in scored[:count]]

    # =========================================================================
    # Debug
    # =========================================================================

    def explain(self, state: GameState, top: int = 5) -> Dict:
        """Analysis and the best candidates for the current state"""
        ctx = self.build_context(state)
        ranked = self.evaluator.evaluate_all(
            self.generator.generate(state, self.player_index, ctx.hand), ctx)
        return {
            "player_index": self.player_index,
            "difficulty": self.difficulty.name,
            "aggression": str(self.aggression),
            "aggression_description": self.aggression.description,
            "config": self.config.to_dict(),
            "analysis": ctx.to_dict(),
            "candidate_count": len(ranked),
            "top_candidates": [c.to_dict() for c in ranked[:top]],
            "turns_played": self.turns_played,
            "actions_taken": self.actions_taken,
        }


# =============================================================================
# Headless Simulation
# =============================================================================

def play_simulated_game(difficulties=(Difficulty.NORMAL, Difficulty.NORMAL),
                        seed: Optional[int] = None,
                        max_turns: int = 200) -> Dict:
    """
    Play a full game with the opponent engine in both seats.

    Args:
        difficulties: Tier of seat 0 and seat 1
        seed: Seed for the deck and both agents
        max_turns: Stop after this many turns without a winner

    Returns:
        Summary with winner, scores, turns and engine statistics
    """
    config = GameConfig(player_names=["Agent A", "Agent B"], opponent_index=None, seed=seed)
    engine = GameEngine(config=config)
    engine.initialize_game()
    agents = [
        OpponentAgent(player_index=i, difficulty=d,
                      seed=None if seed is None else seed + i + 1)
        for i, d in enumerate(difficulties)
    ]
    for agent in agents:
        agent.attach(engine)

    steps = 0
    max_steps = max_turns * 4
    while not engine.is_game_over() and engine.state.turn_number <= max_turns and steps < max_steps:
        state = engine.state
        actor = state.acting_player_index
        turn_before = state.turn_number
        result = agents[actor].play_turn(engine)
        steps += 1
        stuck = (engine.state.turn_number == turn_before and engine.state.battle is None
                 and engine.state.current_player_index == actor and not engine.is_game_over())
        if stuck:
            # The agent could neither act nor end its turn
            logger.warning("Simulation stalled: %s", result.message)
            break

    for agent in agents:
        agent.detach(engine)

    state = engine.state
    return {
        "winner": state.winner.name if state.winner is not None else None,
        "winner_index": state.winner_index,
        "scores": engine.get_scores(),
        "turns": state.turn_number,
        "stats": engine.get_stats(),
        "aggression": [str(a.aggression) for a in agents],
    }

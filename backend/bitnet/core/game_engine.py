# =============================================================================
# BitNet Card Game - Game Engine
# =============================================================================
"""
Main game engine that orchestrates gameplay.
Owns the committed game state, exposes one method per player action, runs
the turn/phase state machine and emits events for the UI and the opponent.

Every action follows the same protocol: clone the committed state, apply the
action to the clone, and commit the clone only if no rule was broken. A
rejected action leaves the committed state untouched apart from a log line
and returns ``ActionResult(success=False)``; nothing is raised to callers.
"""

import logging
import random
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Dict, List, Optional, Union

from .actions import ActionValidator
from .battles import (
    confirm_audit_selection, pass_audit, pass_headhunter, respond_to_audit,
    respond_to_headhunter, start_audit, start_steal, toggle_audit_selection
)
from .cards import Card, build_deck, deal_hands, shuffle_deck
from .classifications import (
    add_classification, blocking_classification, equipment_moves_for, make_room
)
from .data_structures import ActionRejected, ActionResult, GameConfig, Player
from .enums import CardSubtype, CardType, Difficulty, EquipmentKind, GamePhase
from .game_state import GameState
from .network import (
    apply_attack, apply_resolution, count_connected_computers, move_equipment,
    place_cable, place_computer, place_switch, require_node
)

logger = logging.getLogger(__name__)


class GameEventType(Enum):
    """Types of events that can be emitted by the game engine"""
    GAME_STARTED = auto()
    TURN_STARTED = auto()
    ACTION_PERFORMED = auto()
    ACTION_REJECTED = auto()
    TURN_ENDED = auto()
    PHASE_CHANGED = auto()
    BATTLE_STARTED = auto()
    BATTLE_RESOLVED = auto()
    VICTORY = auto()


@dataclass
class GameEvent:
    """Represents a game event for logging and UI updates"""
    event_type: GameEventType
    turn: int
    player_index: Optional[int] = None
    action: str = ""
    result: Optional[ActionResult] = None
    message: str = ""
    data: dict = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)


def _parse_kind(value: Union[str, EquipmentKind]) -> EquipmentKind:
    if isinstance(value, EquipmentKind):
        return value
    try:
        return EquipmentKind[str(value).upper()]
    except KeyError:
        raise ActionRejected(f"Unknown equipment type: {value}") from None


class GameEngine:
    """
    Main game engine class.

    Responsibilities:
    - Initialize and own the game state
    - Validate and execute player actions atomically
    - Manage turn flow (draw, score, win check, hand-off)
    - Run the audit and head-hunter interrupts
    - Emit events for UI/logging and the computer opponent
    - Drive the computer opponent's turn

    Example usage:
        engine = GameEngine()
        engine.initialize_game(seed=7)

        result = engine.play_switch("switch-3")
        if not result.success:
            print(result.message)
        engine.end_phase()
        engine.execute_ai_turn()
    """

    def __init__(self, config: Optional[GameConfig] = None,
                 difficulty: Difficulty = Difficulty.NORMAL):
        """Initialize the game engine with optional custom configuration"""
        self.config = config or GameConfig()
        self.difficulty = difficulty
        self.state: Optional[GameState] = None
        self.validator = ActionValidator(self.config)
        self.seed = self.config.seed
        self.rng = random.Random(self.seed)
        self.opponent = None

        # Event system
        self.event_listeners: Dict[GameEventType, List[Callable]] = {}
        self.event_history: List[GameEvent] = []

        # Game statistics
        self.stats: Dict[str, int] = {}
        self._reset_stats()

    # =========================================================================
    # Game Initialization
    # =========================================================================

    def initialize_game(self, seed: Optional[int] = None,
                        starting_player: int = 0) -> GameState:
        """
        Initialize a new game: build and shuffle the deck, deal opening hands.

        Args:
            seed: Random seed for reproducibility (defaults to config.seed;
                the shared config itself is left untouched)
            starting_player: Index of the player who moves first

        Returns:
            The initialized game state
        """
        self.seed = seed if seed is not None else self.config.seed
        self.rng = random.Random(self.seed)

        deck = shuffle_deck(build_deck(), self.rng)
        hands, draw_pile = deal_hands(deck, 2, self.config.starting_hand_size)

        players = [
            Player(
                id=f"player-{i + 1}",
                name=self.config.player_names[i],
                hand=hands[i],
                is_human=i != self.config.opponent_index,
            )
            for i in range(2)
        ]
        self.state = GameState(
            players=players,
            current_player_index=starting_player,
            moves_remaining=self.config.moves_per_turn,
            draw_pile=draw_pile,
            config=self.config,
        )
        self.state.add_log(f"Game started. {players[starting_player].name} goes first.")

        self._reset_stats()
        self.event_history = []
        self._reset_opponent()

        self._emit_event(GameEvent(
            event_type=GameEventType.GAME_STARTED,
            turn=0,
            message=f"Game started! Difficulty: {self.difficulty.name}",
            data={"difficulty": self.difficulty.name, "seed": self.seed},
        ))
        self._emit_event(GameEvent(
            event_type=GameEventType.TURN_STARTED,
            turn=self.state.turn_number,
            player_index=starting_player,
            message=f"Turn {self.state.turn_number}: {players[starting_player].name}'s turn",
        ))
        logger.info("Game %s started (seed=%s)", self.state.game_id, self.seed)
        return self.state

    def load_state(self, state: GameState):
        """Load an existing game state"""
        self.state = state
        self.config = state.config
        self.validator = ActionValidator(self.config)
        self.seed = self.config.seed
        self._reset_opponent()

    # =========================================================================
    # Equipment Actions
    # =========================================================================

    def play_switch(self, card_id: str) -> ActionResult:
        """Play a switch from hand. Switches are always internet-connected."""
        def mutate(state: GameState) -> ActionResult:
            self.validator.require_play(state, equipment=True)
            player = state.current_player
            card = self.validator.require_card(player, card_id, subtypes=[CardSubtype.SWITCH])
            player.remove_from_hand(card.id)
            placed = place_switch(player.network, state.next_placement_id(), card)
            self.validator.spend_move(state, equipment=True)
            return self._ok("play_switch", f"{player.name} plays {card.name}",
                            state.current_player_index, card, placement_id=placed.id)
        return self._run("play_switch", mutate)

    def play_cable(self, card_id: str, switch_id: Optional[str] = None) -> ActionResult:
        """Play a cable onto a switch, or floating when no switch is given"""
        def mutate(state: GameState) -> ActionResult:
            self.validator.require_play(state, equipment=True)
            player = state.current_player
            card = self.validator.require_card(
                player, card_id, subtypes=[CardSubtype.CABLE_2, CardSubtype.CABLE_3]
            )
            player.remove_from_hand(card.id)
            placed = place_cable(player.network, state.next_placement_id(), card, switch_id)
            self.validator.spend_move(state, equipment=True)
            where = "floating" if switch_id is None else "on a switch"
            return self._ok("play_cable", f"{player.name} plays {card.name} {where}",
                            state.current_player_index, card, placement_id=placed.id)
        return self._run("play_cable", mutate)

    def play_computer(self, card_id: str, cable_id: Optional[str] = None) -> ActionResult:
        """
        Play a computer onto a cable, or floating when no cable is given.
        The card may come from the hand or from the audited pool.
        """
        def mutate(state: GameState) -> ActionResult:
            self.validator.require_play(state, equipment=True)
            player = state.current_player
            card = player.find_in_hand(card_id)
            from_audit = False
            if card is None:
                card = next((c for c in player.audited_computers if c.id == card_id), None)
                from_audit = card is not None
            if card is None:
                raise ActionRejected(f"Card {card_id} is not in {player.name}'s hand")
            if card.subtype != CardSubtype.COMPUTER:
                raise ActionRejected(f"{card.name} is not a computer")

            if from_audit:
                player.audited_computers.remove(card)
            else:
                player.hand.remove(card)
            placed = place_computer(player.network, state.next_placement_id(), card, cable_id)
            self.validator.spend_move(state, equipment=True)
            source = " from the audited pool" if from_audit else ""
            where = "floating" if cable_id is None else "on a cable"
            return self._ok("play_computer", f"{player.name} plays {card.name}{source} {where}",
                            state.current_player_index, card,
                            placement_id=placed.id, from_audit=from_audit)
        return self._run("play_computer", mutate)

    def move_equipment(self, source_type: Union[str, EquipmentKind], source_id: str,
                       target_type: Union[str, EquipmentKind],
                       target_id: Optional[str] = None) -> ActionResult:
        """
        Move a cable or computer, with everything attached to it.

        Connecting a floating cable to a switch or a floating computer to a
        cable is free. Any other move costs one move (equipment move first).

        Args:
            source_type: "cable" or "computer"
            source_id: Placement id of the equipment to move
            target_type: "switch", "cable" or "floating"
            target_id: Placement id of the new parent (not for floating)
        """
        def mutate(state: GameState) -> ActionResult:
            self.validator.require_phase(state, GamePhase.MOVES)
            player = state.current_player
            source_kind = _parse_kind(source_type)
            target_kind = _parse_kind(target_type)
            ref = require_node(player.network, source_id)
            if ref.kind != source_kind:
                raise ActionRejected(f"{source_id} is not a {source_kind}")

            free = ref.floating and target_kind != EquipmentKind.FLOATING
            if not free:
                self.validator.require_moves(state, equipment=True)
            move_equipment(player.network, source_id, target_kind, target_id)
            if not free:
                self.validator.spend_move(state, equipment=True)

            verb = "connects" if free else "moves"
            where = "to the floating area" if target_kind == EquipmentKind.FLOATING else f"to {target_id}"
            return self._ok("move_equipment",
                            f"{player.name} {verb} {ref.node.card.name} {where}",
                            state.current_player_index, ref.node.card, free=free)
        return self._run("move_equipment", mutate)

    # =========================================================================
    # Attack / Resolution / Classification Actions
    # =========================================================================

    def play_attack(self, card_id: str, target_node_id: str,
                    target_player_index: int) -> ActionResult:
        """
        Attach hacked / power-outage / new-hire to opponent equipment.
        A matching classification held by the target blocks the attack.
        """
        def mutate(state: GameState) -> ActionResult:
            self.validator.require_play(state)
            player = state.current_player
            self.validator.require_target_player(state, target_player_index,
                                                 state.current_player_index)
            card = self.validator.require_card(player, card_id, card_type=CardType.ATTACK)
            if card.subtype == CardSubtype.AUDIT:
                raise ActionRejected("Audits are started with start_audit")
            target = state.players[target_player_index]
            ref = require_node(target.network, target_node_id)

            player.remove_from_hand(card.id)
            self.validator.spend_move(state)

            blocker = blocking_classification(target, card.subtype)
            if blocker is not None:
                state.discard_pile.append(card)
                return self._ok("play_attack",
                                f"{target.name}'s {blocker.card.name} blocks {card.name}",
                                state.current_player_index, card, blocked=True)

            apply_attack(target.network, target_node_id, card)
            return self._ok("play_attack",
                            f"{player.name} plays {card.name} on {target.name}'s "
                            f"{ref.node.card.name} ({ref.location})",
                            state.current_player_index, card, blocked=False)
        return self._run("play_attack", mutate)

    def play_resolution(self, card_id: str, target_node_id: str) -> ActionResult:
        """Remove issues from own equipment"""
        def mutate(state: GameState) -> ActionResult:
            self.validator.require_play(state)
            player = state.current_player
            card = self.validator.require_card(player, card_id, card_type=CardType.RESOLUTION)
            removed = apply_resolution(player.network, target_node_id, card)
            player.remove_from_hand(card.id)
            state.discard_pile.extend(removed)
            state.discard_pile.append(card)
            self.validator.spend_move(state)
            names = ", ".join(c.name for c in removed)
            return self._ok("play_resolution", f"{player.name} plays {card.name}, removing {names}",
                            state.current_player_index, card, resolved=len(removed))
        return self._run("play_resolution", mutate)

    def play_classification(self, card_id: str, target_class_id: Optional[str] = None,
                            discard_class_id: Optional[str] = None) -> ActionResult:
        """
        Put a classification into play, or steal one with head-hunter /
        seal-the-deal.

        Args:
            card_id: Classification card in hand
            target_class_id: Opponent classification to steal (steal cards)
            discard_class_id: Own classification to discard when at the cap
        """
        def mutate(state: GameState) -> ActionResult:
            player = state.current_player
            card = player.find_in_hand(card_id)
            if card is not None and card.subtype.is_steal:
                message = start_steal(state, self.validator, card_id,
                                      target_class_id, discard_class_id)
                return self._ok("steal_classification", message,
                                state.current_player_index, card)

            self.validator.require_play(state)
            card = self.validator.require_card(player, card_id, card_type=CardType.CLASSIFICATION)
            swapped = make_room(state, state.current_player_index, discard_class_id)
            player.remove_from_hand(card.id)
            effects = add_classification(state, state.current_player_index, card)
            self.validator.spend_move(state)
            message = f"{player.name} plays {card.name}"
            if swapped is not None:
                message += f" (discarding {swapped.name})"
            return self._ok("play_classification", message,
                            state.current_player_index, card, effects=effects)
        return self._run("play_classification", mutate)

    def discard_card(self, card_id: str) -> ActionResult:
        """Discard a card. Costs a move in the moves phase, free in discard."""
        def mutate(state: GameState) -> ActionResult:
            self.validator.require_phase(state, GamePhase.MOVES, GamePhase.DISCARD)
            player = state.current_player
            card = self.validator.require_card(player, card_id)
            if state.phase == GamePhase.MOVES:
                self.validator.spend_move(state)
            player.remove_from_hand(card.id)
            state.discard_pile.append(card)
            return self._ok("discard", f"{player.name} discards {card.name}",
                            state.current_player_index, card)
        return self._run("discard", mutate)

    # =========================================================================
    # Audit Battle
    # =========================================================================

    def start_audit(self, card_id: str, target_player_index: int) -> ActionResult:
        def mutate(state: GameState) -> ActionResult:
            message = start_audit(state, self.validator, card_id, target_player_index)
            return self._ok("start_audit", message, state.current_player_index,
                            state.audit_battle.audit_card)
        return self._run("start_audit", mutate)

    def respond_to_audit(self, card_id: str,
                         player_index: Optional[int] = None) -> ActionResult:
        """Block (target, hacked) or counter-block (auditor, secured)"""
        def mutate(state: GameState) -> ActionResult:
            responder = state.audit_battle.responder_index if state.audit_battle else None
            message = respond_to_audit(state, self.validator, card_id, player_index)
            return self._ok("respond_to_audit", message, responder,
                            state.audit_battle.chain[-1].card)
        return self._run("respond_to_audit", mutate)

    def pass_audit(self, player_index: Optional[int] = None) -> ActionResult:
        def mutate(state: GameState) -> ActionResult:
            responder = state.audit_battle.responder_index if state.audit_battle else None
            message = pass_audit(state, self.validator, self.rng, player_index)
            return self._ok("pass_audit", message, responder)
        return self._run("pass_audit", mutate)

    def toggle_audit_computer_selection(self, placement_id: str,
                                        player_index: Optional[int] = None) -> ActionResult:
        def mutate(state: GameState) -> ActionResult:
            message = toggle_audit_selection(state, placement_id, player_index)
            return self._ok("toggle_audit_selection", message,
                            state.audit_battle.auditor_index)
        return self._run("toggle_audit_selection", mutate)

    def confirm_audit_selection(self, player_index: Optional[int] = None) -> ActionResult:
        def mutate(state: GameState) -> ActionResult:
            auditor = state.audit_battle.auditor_index if state.audit_battle else None
            message = confirm_audit_selection(state, self.rng, player_index)
            return self._ok("confirm_audit_selection", message, auditor)
        return self._run("confirm_audit_selection", mutate)

    # =========================================================================
    # Head-Hunter Battle
    # =========================================================================

    def respond_to_headhunter_battle(self, card_id: str,
                                     player_index: Optional[int] = None) -> ActionResult:
        def mutate(state: GameState) -> ActionResult:
            battle = state.headhunter_battle
            responder = battle.responder_index if battle else None
            message = respond_to_headhunter(state, self.validator, card_id, player_index)
            return self._ok("respond_to_headhunter", message, responder,
                            state.headhunter_battle.chain[-1].card)
        return self._run("respond_to_headhunter", mutate)

    def pass_headhunter_battle(self, player_index: Optional[int] = None) -> ActionResult:
        def mutate(state: GameState) -> ActionResult:
            battle = state.headhunter_battle
            responder = battle.responder_index if battle else None
            message = pass_headhunter(state, player_index)
            return self._ok("pass_headhunter", message, responder)
        return self._run("pass_headhunter", mutate)

    # =========================================================================
    # Turn Management
    # =========================================================================

    def enter_discard_phase(self) -> ActionResult:
        """Switch the current turn into the free-discard variant"""
        def mutate(state: GameState) -> ActionResult:
            self.validator.require_phase(state, GamePhase.MOVES)
            state.phase = GamePhase.DISCARD
            return self._ok("enter_discard_phase",
                            f"{state.current_player.name} is discarding",
                            state.current_player_index)
        return self._run("enter_discard_phase", mutate)

    def end_phase(self) -> ActionResult:
        """
        End the current turn: draw up to the hand size, score enabled
        connected computers, check the win, and hand over to the next player.
        """
        def mutate(state: GameState) -> ActionResult:
            self.validator.require_phase(state, GamePhase.MOVES, GamePhase.DISCARD)
            return self._end_turn(state)
        return self._run("end_phase", mutate)

    def _end_turn(self, state: GameState) -> ActionResult:
        index = state.current_player_index
        player = state.current_player
        drawn = state.refill_hand(index, self.rng)
        income = count_connected_computers(player.network)
        player.score += income
        message = f"{player.name} mines {income} BTC ({player.score} total)"

        winner = state.check_victory_conditions()
        if winner is not None:
            state.end_game(winner)
            message += f". {state.players[winner].name} wins!"
        else:
            self._start_turn(state, state.other_index(index))
            message += f". Turn {state.turn_number}: {state.current_player.name}"

        return ActionResult(action="end_phase", success=True, message=message,
                            points_gained=income, ends_turn=True,
                            data={"player_index": index, "drawn": drawn})

    def _start_turn(self, state: GameState, index: int):
        state.current_player_index = index
        state.turn_number += 1
        state.phase = GamePhase.MOVES
        state.moves_remaining = self.config.moves_per_turn
        state.equipment_moves_remaining = equipment_moves_for(state.players[index], self.config)

    # =========================================================================
    # Computer Opponent
    # =========================================================================

    def _reset_opponent(self):
        """
        Replace the computer opponent for a fresh or loaded game. It listens
        from the first action on, so every human play reaches its model.
        """
        if self.opponent is not None:
            self.opponent.detach(self)
            self.opponent = None
        if self.config.opponent_index is not None:
            self.get_opponent_agent()

    def get_opponent_agent(self):
        """The attached computer opponent, created on demand for seatless configs"""
        if self.opponent is None:
            from ..ai.opponent_agent import OpponentAgent
            self.opponent = OpponentAgent(
                player_index=self.config.opponent_index if self.config.opponent_index is not None else 1,
                difficulty=self.difficulty,
                seed=self.seed,
            )
            self.opponent.attach(self)
        return self.opponent

    def execute_ai_turn(self) -> ActionResult:
        """
        Let the computer opponent act until its turn ends, or until it has to
        wait for a human battle response.
        """
        if self.state is None:
            return ActionResult(action="ai_turn", success=False, message="Game not initialized")
        return self.get_opponent_agent().play_turn(self)

    # =========================================================================
    # Action Protocol
    # =========================================================================

    def _ok(self, action: str, message: str, player_index: Optional[int],
            card: Optional[Card] = None, effects: Optional[List[str]] = None,
            **data) -> ActionResult:
        data["player_index"] = player_index
        if card is not None:
            data["card_id"] = card.id
            data["card_subtype"] = card.subtype.value
        if effects:
            message = message + "; " + "; ".join(effects)
        return ActionResult(action=action, success=True, message=message,
                            effects=list(effects or []), data=data)

    def _run(self, action: str, mutate: Callable[[GameState], ActionResult]) -> ActionResult:
        """Apply an action to a working clone and commit it on success"""
        if self.state is None:
            return ActionResult(action=action, success=False, message="Game not initialized")

        working = self.state.clone()
        try:
            result = mutate(working)
        except ActionRejected as exc:
            self.state.add_log(exc.message)
            self.stats["rejected_actions"] += 1
            logger.info("Rejected %s: %s", action, exc.message)
            result = ActionResult(action=action, success=False, message=exc.message)
            self._emit_event(GameEvent(
                event_type=GameEventType.ACTION_REJECTED,
                turn=self.state.turn_number,
                player_index=self.state.current_player_index,
                action=action,
                result=result,
                message=exc.message,
            ))
            return result

        previous = self.state
        working.add_log(result.message)
        self.state = working
        self._update_stats(result)
        logger.debug("%s: %s", action, result.message)

        self._emit_event(GameEvent(
            event_type=GameEventType.ACTION_PERFORMED,
            turn=previous.turn_number,
            player_index=result.data.get("player_index"),
            action=action,
            result=result,
            message=result.message,
            data=dict(result.data),
        ))
        self._emit_transitions(previous, result)
        return result

    def _emit_transitions(self, previous: GameState, result: ActionResult):
        state = self.state
        if previous.battle is None and state.battle is not None:
            self._emit_event(GameEvent(
                event_type=GameEventType.BATTLE_STARTED,
                turn=state.turn_number,
                player_index=state.current_player_index,
                message=result.message,
                data=state.battle.to_dict(),
            ))
            logger.info("Battle started: %s", result.message)
        elif previous.battle is not None and state.battle is None:
            self._emit_event(GameEvent(
                event_type=GameEventType.BATTLE_RESOLVED,
                turn=state.turn_number,
                message=result.message,
            ))
        if previous.phase != state.phase:
            self._emit_event(GameEvent(
                event_type=GameEventType.PHASE_CHANGED,
                turn=state.turn_number,
                message=f"{previous.phase} -> {state.phase}",
                data={"from": previous.phase.name, "to": state.phase.name},
            ))
        if result.ends_turn:
            self._emit_event(GameEvent(
                event_type=GameEventType.TURN_ENDED,
                turn=previous.turn_number,
                player_index=previous.current_player_index,
                message=result.message,
                data={"points_gained": result.points_gained},
            ))
            if state.is_game_over:
                self._emit_event(GameEvent(
                    event_type=GameEventType.VICTORY,
                    turn=state.turn_number,
                    player_index=state.winner_index,
                    message=f"Game Over! {state.winner.name} wins!",
                    data={"winner_index": state.winner_index, "scores": self.get_scores()},
                ))
                logger.info("Game %s won by %s", state.game_id, state.winner.name)
            else:
                self._emit_event(GameEvent(
                    event_type=GameEventType.TURN_STARTED,
                    turn=state.turn_number,
                    player_index=state.current_player_index,
                    message=f"Turn {state.turn_number}: {state.current_player.name}'s turn",
                ))

    # =========================================================================
    # State Queries
    # =========================================================================

    def get_current_player(self) -> Player:
        """Get the current player's state"""
        if self.state is None:
            raise RuntimeError("Game not initialized")
        return self.state.current_player

    def is_game_over(self) -> bool:
        """Check if the game is over"""
        return self.state is not None and self.state.phase == GamePhase.GAME_OVER

    def get_winner(self) -> Optional[Player]:
        """Get the winner if game is over"""
        if self.state is None or self.state.phase != GamePhase.GAME_OVER:
            return None
        return self.state.winner

    def get_scores(self) -> Dict[str, int]:
        """Get current scores for both players"""
        if self.state is None:
            return {}
        return {p.name: p.score for p in self.state.players}

    def get_state_copy(self) -> GameState:
        """Get a copy of the current game state (for AI analysis)"""
        if self.state is None:
            raise RuntimeError("Game not initialized")
        return self.state.clone()

    # =========================================================================
    # Event System
    # =========================================================================

    def add_event_listener(self, event_type: GameEventType, callback: Callable[[GameEvent], None]):
        """Register a callback for a specific event type"""
        if event_type not in self.event_listeners:
            self.event_listeners[event_type] = []
        self.event_listeners[event_type].append(callback)

    def remove_event_listener(self, event_type: GameEventType, callback: Callable):
        """Remove a registered callback"""
        if event_type in self.event_listeners:
            self.event_listeners[event_type] = [
                cb for cb in self.event_listeners[event_type] if cb != callback
            ]

    def _emit_event(self, event: GameEvent):
        """Emit an event to all registered listeners"""
        self.event_history.append(event)

        listeners = self.event_listeners.get(event.event_type, [])
        for callback in listeners:
            try:
                callback(event)
            except Exception:
                logger.exception("Event listener error for %s", event.event_type.name)

    def get_event_history(self,
                          event_type: Optional[GameEventType] = None,
                          limit: Optional[int] = None) -> List[GameEvent]:
        """Get event history, optionally filtered by type"""
        events = self.event_history

        if event_type is not None:
            events = [e for e in events if e.event_type == event_type]

        if limit is not None:
            events = events[-limit:]

        return events

    # =========================================================================
    # Statistics
    # =========================================================================

    def _reset_stats(self):
        """Reset game statistics"""
        self.stats = {
            "total_actions": 0,
            "rejected_actions": 0,
            "equipment_played": 0,
            "attacks_played": 0,
            "attacks_blocked": 0,
            "resolutions_played": 0,
            "audits_started": 0,
            "steals_attempted": 0,
            "turns_completed": 0,
        }

    def _update_stats(self, result: ActionResult):
        """Update statistics after an action"""
        self.stats["total_actions"] += 1
        counters = {
            "play_switch": "equipment_played",
            "play_cable": "equipment_played",
            "play_computer": "equipment_played",
            "play_attack": "attacks_played",
            "play_resolution": "resolutions_played",
            "start_audit": "audits_started",
            "steal_classification": "steals_attempted",
            "end_phase": "turns_completed",
        }
        key = counters.get(result.action)
        if key is not None:
            self.stats[key] += 1
        if result.data.get("blocked"):
            self.stats["attacks_blocked"] += 1

    def get_stats(self) -> dict:
        """Get current game statistics"""
        return dict(self.stats)

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict:
        """Serialize game engine state to dictionary"""
        return {
            "config": self.config.to_dict(),
            "difficulty": self.difficulty.name,
            "state": self.state.to_dict() if self.state else None,
            "stats": self.stats,
            "event_count": len(self.event_history),
        }


# =============================================================================
# Convenience Functions
# =============================================================================

def create_game(difficulty: Difficulty = Difficulty.NORMAL,
                seed: Optional[int] = None,
                config: Optional[GameConfig] = None) -> GameEngine:
    """
    Create and initialize a new game.

    Args:
        difficulty: Computer opponent difficulty
        seed: Random seed
        config: Optional custom configuration

    Returns:
        Initialized GameEngine
    """
    engine = GameEngine(config=config, difficulty=difficulty)
    engine.initialize_game(seed=seed)
    return engine

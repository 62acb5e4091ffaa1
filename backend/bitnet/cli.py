# =============================================================================
# BitNet Card Game - Command Line Interface
# =============================================================================
"""
Simple CLI for playing against the computer opponent and watching
opponent-vs-opponent games.

Run with ``python -m bitnet.cli``.
"""

import logging
from typing import Callable, Dict, List

from .ai import Aggression, play_simulated_game
from .core import ActionResult, Difficulty, GameEngine, Player, create_game
from .core.network import iter_nodes


HUMAN = 0

COMMANDS = """
Commands (ids are the short ids shown in brackets):
  switch <card>                       computer <card> [cable]
  cable <card> [switch]               move <cable|computer> <id> <switch|cable|floating> [target]
  attack <card> <node>                resolve <card> <node>
  class <card> [target] [discard]     discard <card>
  audit <card>                        respond <card>
  pass                                select <placement> / confirm
  dp   (enter discard phase)          end  (end phase)
  help                                q    (quit)
"""


def print_header():
    """Print game header"""
    print("\n" + "=" * 60)
    print("   BITNET")
    print("   Build your network, mine bitcoin, sabotage the other side")
    print("=" * 60 + "\n")


def print_network(player: Player):
    print(f"  {player.name}'s network:")
    nodes = list(iter_nodes(player.network))
    if not nodes:
        print("    (empty)")
    for ref in nodes:
        flags = "DISABLED " if ref.node.is_disabled else ""
        issues = ", ".join(str(s) for s in ref.node.issue_subtypes())
        issues = f" issues: {issues}" if issues else ""
        print(f"    [{ref.node.id}] {ref.node.card.name:<10} {flags}@ {ref.location}{issues}")
    if player.classification_cards:
        held = ", ".join(f"[{c.id}] {c.card.name}" for c in player.classification_cards)
        print(f"    classifications: {held}")
    if player.audited_computers:
        print(f"    audited computers: {len(player.audited_computers)}")


def print_state(engine: GameEngine):
    """Print current game state"""
    state = engine.state
    if state is None:
        print("No game in progress")
        return

    print(f"\n{'=' * 50}")
    print(state)
    print(f"{'=' * 50}")
    for player in state.players:
        print_network(player)

    if state.battle is not None:
        print(f"\nBattle in progress, waiting on {state.get_player(state.battle.responder_index).name}")
        audit = state.audit_battle
        if audit is not None and audit.available_computers:
            print(f"  Pick {audit.computers_to_return} computer(s):")
            for candidate in audit.available_computers:
                mark = "*" if candidate.placement_id in audit.selected_computer_ids else " "
                print(f"   {mark}[{candidate.placement_id}] {candidate.location}")

    human = state.get_player(HUMAN)
    print("\nYour hand:")
    for card in human.hand:
        print(f"  [{card.id}] {card.name}")


def print_result(result: ActionResult):
    mark = "ok" if result.success else "rejected"
    print(f"\n-> ({mark}) {result.message}")
    for effect in result.effects:
        print(f"   {effect}")


def _optional(args: List[str], index: int):
    return args[index] if len(args) > index else None


def build_dispatch(engine: GameEngine) -> Dict[str, Callable[[List[str]], ActionResult]]:
    """Map command words to engine calls"""
    return {
        "switch": lambda a: engine.play_switch(a[0]),
        "cable": lambda a: engine.play_cable(a[0], _optional(a, 1)),
        "computer": lambda a: engine.play_computer(a[0], _optional(a, 1)),
        "move": lambda a: engine.move_equipment(a[0], a[1], a[2], _optional(a, 3)),
        "attack": lambda a: engine.play_attack(a[0], a[1], 1 - HUMAN),
        "resolve": lambda a: engine.play_resolution(a[0], a[1]),
        "class": lambda a: engine.play_classification(a[0], _optional(a, 1), _optional(a, 2)),
        "discard": lambda a: engine.discard_card(a[0]),
        "audit": lambda a: engine.start_audit(a[0], 1 - HUMAN),
        "respond": lambda a: (engine.respond_to_audit(a[0], HUMAN)
                              if engine.state.audit_battle is not None
                              else engine.respond_to_headhunter_battle(a[0], HUMAN)),
        "pass": lambda a: (engine.pass_audit(HUMAN)
                           if engine.state.audit_battle is not None
                           else engine.pass_headhunter_battle(HUMAN)),
        "select": lambda a: engine.toggle_audit_computer_selection(a[0], HUMAN),
        "confirm": lambda a: engine.confirm_audit_selection(HUMAN),
        "dp": lambda a: engine.enter_discard_phase(),
        "end": lambda a: engine.end_phase(),
    }


def opponent_should_act(engine: GameEngine) -> bool:
    state = engine.state
    return not state.is_game_over and state.acting_player_index != HUMAN


def interactive_game():
    """Run an interactive game session"""
    print_header()

    # Select difficulty
    print("Select Difficulty:")
    print("  1. Easy")
    print("  2. Normal")
    print("  3. Hard")
    print("  4. Nightmare")

    choice = input("\nChoice [1-4]: ").strip()
    difficulty_map = {"1": Difficulty.EASY, "2": Difficulty.NORMAL,
                      "3": Difficulty.HARD, "4": Difficulty.NIGHTMARE}
    difficulty = difficulty_map.get(choice, Difficulty.NORMAL)

    engine = create_game(difficulty=difficulty)
    dispatch = build_dispatch(engine)
    print(f"\nGame created against a {difficulty} opponent")
    print(COMMANDS)

    # Game loop
    while not engine.is_game_over():
        if opponent_should_act(engine):
            result = engine.execute_ai_turn()
            for step in result.data.get("actions", []):
                print(f"   opponent: {step['message']}")
            progressed = any(step["success"] for step in result.data.get("actions", []))
            if opponent_should_act(engine) and not progressed:
                print(f"\nOpponent could not continue: {result.message}")
                break
            continue

        print_state(engine)
        raw = input("\n> ").strip()
        if not raw:
            continue
        word, *args = raw.split()
        word = word.lower()

        if word == "q":
            print("Game ended by player.")
            break
        if word == "help":
            print(COMMANDS)
            continue

        handler = dispatch.get(word)
        if handler is None:
            print("Unknown command, type 'help'")
            continue
        try:
            print_result(handler(args))
        except IndexError:
            print("Missing argument, type 'help'")

    # Game over
    if engine.is_game_over():
        print(f"\n{'=' * 60}")
        print("GAME OVER!")
        print(f"{'=' * 60}")
        winner = engine.get_winner()
        print(f"Winner: {winner.name if winner else 'none'}")
        print(f"Final Scores: {engine.get_scores()}")


def demo_game():
    """Watch two computer opponents play each other"""
    print_header()
    print("Running opponent-vs-opponent demo...")

    result = play_simulated_game(difficulties=(Difficulty.HARD, Difficulty.EASY))

    print(f"\n{'=' * 50}")
    print("Demo Game Results:")
    print(f"{'=' * 50}")
    print(f"Winner: {result['winner']}")
    print(f"Turns: {result['turns']}")
    print(f"Scores: {result['scores']}")
    print(f"Play styles: {', '.join(result['aggression'])}")
    print("\nStatistics:")
    for key, value in result['stats'].items():
        print(f"  {key}: {value}")


def describe_opponents():
    """Print the tiers and play styles of the computer opponent"""
    print_header()
    for difficulty in Difficulty:
        print(f"{str(difficulty):<10} lookahead {difficulty.lookahead_depth}, "
              f"noise {difficulty.randomness:.2f}, hold {difficulty.hold_probability:.2f}, "
              f"bluff {difficulty.bluff_probability:.2f}")
    print()
    for aggression in Aggression:
        print(f"{str(aggression):<10} {aggression.description}")


def main():
    """Main entry point"""
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    print_header()

    print("Options:")
    print("  1. Play Against the Computer")
    print("  2. Run Demo (Computer vs Computer)")
    print("  3. Describe Opponent Tiers")
    print("  4. Exit")

    choice = input("\nChoice [1-4]: ").strip()

    if choice == "1":
        interactive_game()
    elif choice == "2":
        demo_game()
    elif choice == "3":
        describe_opponents()
    elif choice == "4":
        print("Goodbye!")
    else:
        print("Invalid choice")


if __name__ == "__main__":
    main()

"""
Market Game CLI - Command-line interface for the engine.

Usage:
    marketgame validate <catalog_file>    Validate a catalog JSON file
    marketgame simulate [--seed N]        Play a game with scripted players
    marketgame serve [--port 8000]        Run the API server
"""

import argparse
import logging
import sys


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Market Game - Turn-based stock market engine",
        prog="marketgame",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log every game event")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a catalog file")
    validate_parser.add_argument("catalog_file", help="Path to catalog JSON file")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Play a game with scripted players")
    simulate_parser.add_argument("--players", type=int, default=3, help="Number of players")
    simulate_parser.add_argument("--rounds", type=int, default=None, help="Rounds to play")
    simulate_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    simulate_parser.add_argument("--catalog", help="Catalog JSON file (classic if omitted)")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "validate":
        cmd_validate(args)
    elif args.command == "simulate":
        cmd_simulate(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_validate(args):
    """Validate a catalog file."""
    from .catalog import CatalogValidationError, load_catalog_file

    print(f"Validating: {args.catalog_file}")
    try:
        catalog = load_catalog_file(args.catalog_file)
    except FileNotFoundError:
        print(f"Error: File not found: {args.catalog_file}")
        sys.exit(1)
    except ValueError as e:
        # json.JSONDecodeError is a ValueError
        print(f"Error: Invalid JSON: {e}")
        sys.exit(1)
    except CatalogValidationError as e:
        print(f"Catalog is invalid ({len(e.errors)} error(s)):")
        for error in e.errors:
            print(f"  - {error}")
        sys.exit(1)

    print(f"Catalog '{catalog.catalog_id}' is valid")
    print(f"Indexes: {', '.join(i.name for i in catalog.indexes)}")
    print(f"Stocks: {len(catalog.stocks)}")
    print(f"Events: {len(catalog.events)} ({sum(1 for e in catalog.events if e.is_bubble)} bubbles)")
    print(f"Action cards: {len(catalog.action_cards)}")


def cmd_simulate(args):
    """Play a full game with simple scripted players and print the standings."""
    from .catalog import CatalogValidationError, load_catalog_file
    from .config import GameSettings
    from .session import GameLoop, SessionManager, SessionState

    if args.players < 2:
        print("Error: Need at least 2 players")
        sys.exit(1)

    catalog = None
    if args.catalog:
        try:
            catalog = load_catalog_file(args.catalog)
        except (OSError, ValueError, CatalogValidationError) as e:
            print(f"Error: Cannot load catalog: {e}")
            sys.exit(1)

    settings = GameSettings.from_env(seed=args.seed, max_rounds=args.rounds)
    manager = SessionManager(settings)
    session = manager.create_session(catalog=catalog)
    loop = GameLoop(session)

    for i in range(args.players):
        loop.join(f"player{i + 1}")
    result = loop.start_game()
    print(f"Session {session.session_id}: turn order {', '.join(result.data['turn_order'])}")

    # Each turn takes at most a handful of requests; bound the loop anyway
    max_steps = settings.max_rounds * args.players * (settings.actions_per_turn + 2) * 2
    for _ in range(max_steps):
        if session.state != SessionState.PLAYING:
            break
        play_scripted_turn(loop)

    game_over = session.orchestrator.game_over
    if game_over is None:
        print("Game did not finish")
        sys.exit(1)
    print()
    print(game_over.message)


def play_scripted_turn(loop):
    """
    One turn of a simple scripted player.

    Sells the first unit worth more than it cost, then buys the cheapest
    affordable board stock, then ends the turn.
    """
    from .engine_core.action import Action

    session = loop.session
    player_name = session.round_state.current_player
    ledger = session.players.get(player_name)
    trading = session.trading

    for owned in list(ledger.portfolio):
        if trading.calculate_sell_price(owned, session.indexes) - owned.growth > owned.purchase_price:
            loop.apply(Action.sell(player_name, owned.name, owned.purchase_price, owned.purchase_round))
            break

    if session.round_state.current_player != player_name:
        return

    priced = sorted(
        trading.board_stocks,
        key=lambda s: trading.calculate_price(s, session.indexes),
    )
    for stock in priced:
        if session.round_state.current_player != player_name or not ledger.has_actions:
            return
        if loop.apply(Action.purchase(player_name, stock.name)).success:
            break

    if session.round_state.current_player == player_name:
        loop.turn_over(player_name)


def cmd_serve(args):
    """Run the API server with uvicorn."""
    try:
        import uvicorn
    except ImportError:
        print("Error: uvicorn not installed. Install with: pip install uvicorn")
        sys.exit(1)

    from .api.app import get_app

    uvicorn.run(get_app(), host=args.host, port=args.port)


if __name__ == "__main__":
    main()

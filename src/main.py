# Entry point of the application for building an elimination bracket

import argparse
import logging
import sys
import yaml
from bracket_engine.models import Team, Game, SEEDING_MODES, SEEDING_TYPES, BYE, OPEN
from bracket_engine.config import load_settings, configure_logging
from bracket_engine.elimination import build_bracket, get_bracket_round_names
from bracket_engine.resolution import resolve_byes

logger = logging.getLogger(__name__)


def load_teams(file_path):
    """
    Load teams from YAML.

    Accepts a list of names, a list of {name, seed} mappings, or a mapping of
    pool name to a list of team names.
    """
    with open(file_path, mode='r', encoding='utf-8') as file:
        data = yaml.safe_load(file) or []

    if isinstance(data, dict):
        entries = [name for team_names in data.values() for name in (team_names or [])]
    else:
        entries = data

    teams = []
    for i, entry in enumerate(entries):
        if isinstance(entry, dict):
            teams.append(Team(f"team-{i + 1}", entry['name'], entry.get('seed')))
        else:
            teams.append(Team(f"team-{i + 1}", str(entry)))
    return teams


def format_game(game: Game, team_names) -> str:
    def label(slot):
        if slot.is_team:
            return team_names.get(slot.team_id, slot.team_id)
        return slot.type

    line = f"  [{game.id}] {label(game.team_a)} vs {label(game.team_b)}"
    if game.is_finished and game.result:
        winner = team_names.get(game.result.winner_id, game.result.winner_id)
        line += f"  -> {winner} ({game.result.score_a}-{game.result.score_b})"
    return line


def print_bracket(bracket, team_names):
    names = get_bracket_round_names(bracket)
    for round_name, games in zip(names['winners'], bracket.winners):
        print(f"\n{round_name}")
        for game in games:
            print(format_game(game, team_names))

    for round_name, games in zip(names.get('losers', []), bracket.losers):
        print(f"\n{round_name}")
        for game in games:
            print(format_game(game, team_names))

    if bracket.grand_final is not None:
        print(f"\n{names['grand_final']}")
        print(format_game(bracket.grand_final, team_names))
        print(f"\n{names['grand_final_reset']}")
        print(format_game(bracket.grand_final_reset, team_names))


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Build a single or double elimination bracket from a teams YAML file'
    )
    parser.add_argument('teams', help='YAML file with the team list')
    parser.add_argument(
        '--double',
        action='store_true',
        help='Include a losers bracket, grand final and reset'
    )
    parser.add_argument('--seeding-mode', choices=SEEDING_MODES, default='off')
    parser.add_argument('--seeding-type', choices=SEEDING_TYPES, default='standard')
    parser.add_argument('--open-slot-policy', choices=(BYE, OPEN))
    parser.add_argument('--settings', help='Settings YAML file (overlaid on defaults)')
    parser.add_argument('--log-level', help='Logging level (default: BRACKET_LOG_LEVEL or INFO)')

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        teams = load_teams(args.teams)
    except (OSError, yaml.YAMLError, KeyError) as e:
        print(f"Error: Failed to load teams from {args.teams}: {e}", file=sys.stderr)
        return 1

    if not teams:
        print(f"No teams loaded. Check {args.teams}")
        return 1

    settings = load_settings(args.settings)
    if args.double:
        settings.include_losers_bracket = True
    if args.open_slot_policy:
        settings.open_slot_policy = args.open_slot_policy

    bracket = build_bracket(teams, settings, args.seeding_mode, args.seeding_type)
    team_names = {team.id: team.name for team in teams}
    events = resolve_byes(bracket, team_names)
    logger.debug("Resolved byes: %d events", len(events))

    kind = "Double elimination" if bracket.is_double_elimination else "Single elimination"
    print(f"--- {kind} bracket: {len(teams)} teams ---")
    print_bracket(bracket, team_names)
    return 0


if __name__ == '__main__':
    sys.exit(main())

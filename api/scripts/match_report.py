import argparse
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from wasilah import repo
from wasilah.errors import DataIntegrityError
from wasilah.services.resolver import present_matches, run_matching
from wasilah.services.selector import select_conflict_free


def _print_matches(title: str, rows: list[dict]) -> None:
    print(title)
    for m in rows:
        print(
            f"  {m['score']:>4}  {m['name1']} (#{m['participant1_id']}, ranked #{m['rank1'] + 1})"
            f"  <->  {m['name2']} (#{m['participant2_id']}, ranked #{m['rank2'] + 1})"
        )


def main() -> None:
    parser = argparse.ArgumentParser(description="Compute mutual matches and a conflict-free pairing")
    parser.add_argument("--no-run", action="store_true", help="report the last materialized run instead of recomputing")
    args = parser.parse_args()

    if args.no_run:
        matches = repo.list_mutual_matches()
    else:
        try:
            matches = run_matching()
        except DataIntegrityError as exc:
            print(f"error: {exc.message}", file=sys.stderr)
            for row in exc.rows:
                print(f"  ! {row}", file=sys.stderr)
            sys.exit(1)

    names = repo.participant_names()
    _print_matches(f"Mutual matches ({len(matches)}):", present_matches(matches, names)["matches"])
    chosen = select_conflict_free(matches)
    _print_matches(f"Smart select ({len(chosen)}):", present_matches(chosen, names)["matches"])


if __name__ == "__main__":
    main()

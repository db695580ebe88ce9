import argparse
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from wasilah import repo
from wasilah.errors import RosterError
from wasilah.main import run_migrations
from wasilah.services.invitations import participant_link
from wasilah.services.roster import import_csv


def main() -> None:
    parser = argparse.ArgumentParser(description="Import a participant roster CSV and print selection links")
    parser.add_argument("csv_path", type=Path)
    parser.add_argument("--skip-migrations", action="store_true")
    args = parser.parse_args()

    if not args.skip_migrations:
        run_migrations()

    try:
        summary = import_csv(args.csv_path.read_bytes())
    except RosterError as exc:
        print(f"error: {exc.message}", file=sys.stderr)
        sys.exit(1)

    print(f"added={summary.participants_added} unchanged={summary.participants_unchanged} errors={len(summary.errors)}")
    for err in summary.errors:
        print(f"  ! {err}")
    for row in repo.list_participants():
        print(f"{row['id']}\t{row['first_name']}\t{participant_link(row['token'])}")


if __name__ == "__main__":
    main()

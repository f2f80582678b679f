"""
Print a bcrypt hash for manual insertion into users.password:
  python -m app.scripts.hash_password PASSWORD
"""
import argparse
import sys

from app.core.security import BCRYPT_ROUNDS, hash_password


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Print the bcrypt hash of a password.")
    parser.add_argument("password")
    parser.add_argument("--rounds", type=int, default=BCRYPT_ROUNDS, help="bcrypt cost (4-31)")
    args = parser.parse_args(argv)
    if not 4 <= args.rounds <= 31:
        print("Rounds must be between 4 and 31.", file=sys.stderr)
        return 1
    try:
        hashed = hash_password(args.password, rounds=args.rounds)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 1
    print(hashed)
    return 0


if __name__ == "__main__":
    sys.exit(main())

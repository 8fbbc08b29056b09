"""Print a random 64-byte hex value suitable for JWT_SECRET."""
import secrets
import sys


def main() -> int:
    print(f"JWT_SECRET={secrets.token_hex(64)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

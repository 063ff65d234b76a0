"""Auth commands for the promptlib CLI: login, logout, status."""

import getpass
import json
import sys
import time
from typing import TYPE_CHECKING

from supabase import create_client

from promptlib.cli.commands.credentials import (
    clear_credentials,
    get_credentials_path,
    load_credentials,
    require_https_url,
    resolve_backend,
    save_credentials,
    session_to_credentials,
)

if TYPE_CHECKING:
    import argparse


def _mask_secret(secret: str, prefix: int = 4, suffix: int = 4) -> str:
    if not secret:
        return ""
    if len(secret) <= prefix + suffix:
        return "*" * len(secret)
    return f"{secret[:prefix]}...{secret[-suffix:]}"


def _format_expiry(expires_at: float) -> str:
    remaining = int(expires_at - time.time())
    if remaining <= 0:
        return "expired"
    hours, rest = divmod(remaining, 3600)
    minutes = rest // 60
    return f"{hours}h {minutes}m" if hours else f"{minutes}m"


def cmd_auth(args: "argparse.Namespace"):
    """Handle auth subcommands."""
    if args.auth_action == "login":
        backend = resolve_backend(load_credentials())
        url = args.url or backend["url"]
        key = args.key or backend["key"]
        if not url or not key:
            print("✗ Supabase URL and key are required (--url/--key or PROMPTLIB_SUPABASE_URL/KEY)")
            sys.exit(1)
        require_https_url(url, "args" if args.url else backend["source"])

        email = args.email
        if not email:
            print("Email: ", end="", flush=True)
            try:
                email = input().strip()
            except (EOFError, KeyboardInterrupt):
                print("\nAborted.")
                sys.exit(1)
        if not email:
            print("✗ Email is required")
            sys.exit(1)
        try:
            password = getpass.getpass("Password: ")
        except (EOFError, KeyboardInterrupt):
            print("\nAborted.")
            sys.exit(1)

        print(f"Logging in to {url}...")
        try:
            client = create_client(url, key)
            response = client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as e:
            print(f"✗ Login failed: {e}")
            sys.exit(1)
        if not response or not response.session:
            print("✗ Login failed: no session returned")
            sys.exit(1)

        creds = session_to_credentials(response.session, url, key)
        save_credentials(creds)
        print("✓ Login successful!")
        print()
        print(f"  User ID:       {creds['user_id']}")
        print(f"  Email:         {creds['email']}")
        print(f"  Backend:       {url}")
        print()
        print(f"Credentials saved to {get_credentials_path()}")

    elif args.auth_action == "status":
        creds = load_credentials()
        if not creds or not creds.get("access_token"):
            if args.json:
                print(json.dumps({"authenticated": False}, indent=2))
            else:
                print("Not authenticated")
                print()
                print("Run `promptlib auth login` to sign in")
            return

        expires_at = creds.get("expires_at")
        if args.json:
            print(
                json.dumps(
                    {
                        "authenticated": True,
                        "user_id": creds.get("user_id"),
                        "email": creds.get("email"),
                        "backend_url": creds.get("supabase_url"),
                        "expires_at": expires_at,
                        "expired": bool(expires_at) and expires_at <= time.time(),
                    },
                    indent=2,
                )
            )
            return

        print("Auth Status")
        print("=" * 40)
        print()
        print(f"  User ID:     {creds.get('user_id')}")
        print(f"  Email:       {creds.get('email')}")
        print(f"  Backend:     {creds.get('supabase_url')}")
        print(f"  Token:       {_mask_secret(creds.get('access_token', ''))}")
        if expires_at:
            expiry = _format_expiry(expires_at)
            if expiry == "expired":
                print("  Session:     ✗ Expired (refreshed on next command)")
            else:
                print(f"  Session:     ✓ Valid (expires in {expiry})")
        print()
        print(f"Credentials: {get_credentials_path()}")

    elif args.auth_action == "logout":
        creds_path = get_credentials_path()
        if clear_credentials():
            print("✓ Logged out")
            print(f"  Removed {creds_path}")
        else:
            print("Already logged out (no credentials found)")
